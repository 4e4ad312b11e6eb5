from datetime import datetime
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator

from mediatrack.models.media_model import MediaType
from mediatrack.schemas.common import CamelModel
from mediatrack.validation import RATING_MAX, RATING_MIN, check_not_blank, check_url, check_year


def _check_tags(value):
    if value is None:
        return value
    tags = [tag.strip() for tag in value]
    if any(not tag for tag in tags):
        raise ValueError("Category tags must not be empty")
    # keep first occurrence order
    return list(dict.fromkeys(tags))


class MediaCreate(CamelModel):
    title: str
    type: MediaType
    category: List[str] = Field(min_length=1)
    release_year: int
    end_year: Optional[int] = None
    rating: Optional[float] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_not_blank(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_tags(v)

    @field_validator("release_year", "end_year")
    @classmethod
    def validate_years(cls, v):
        return check_year(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        return check_url(v)

    @field_validator("end_year")
    @classmethod
    def end_after_release(cls, v, info: ValidationInfo):
        release = info.data.get("release_year")
        if v is not None and release is not None and v < release:
            raise ValueError("End year cannot be before release year")
        return v


class MediaUpdate(CamelModel):
    """Patch payload; the merged result is re-checked against MediaCreate."""

    title: Optional[str] = None
    type: Optional[MediaType] = None
    category: Optional[List[str]] = Field(default=None, min_length=1)
    release_year: Optional[int] = None
    end_year: Optional[int] = None
    rating: Optional[float] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_not_blank(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_tags(v)

    @field_validator("release_year", "end_year")
    @classmethod
    def validate_years(cls, v):
        return check_year(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        return check_url(v)


class CreatorOut(CamelModel):
    id: int
    nick_name: str


class MediaSummaryOut(CamelModel):
    id: int
    title: str
    type: MediaType
    category: List[str] = []
    release_year: int
    end_year: Optional[int] = None
    rating: Optional[float] = None
    description: Optional[str] = None
    image: Optional[str] = None
    created_by: int
    created_at: datetime


class MediaOut(MediaSummaryOut):
    creator: Optional[CreatorOut] = None


class RankedMediaOut(MediaOut):
    average_rating: float
    rating_count: int


class TopMediaOut(CamelModel):
    category: str
    count: int
    top10: List[MediaOut] = []


class RankingOut(CamelModel):
    total: int
    data: List[RankedMediaOut] = []


class DeletedMediaRef(CamelModel):
    id: int
    title: str
    type: MediaType


class MediaDeletedOut(CamelModel):
    message: str
    deleted_media: DeletedMediaRef
    deleted_by: Optional[str] = None
    deleted_library_entries: int = 0
    deleted_comments: int = 0
