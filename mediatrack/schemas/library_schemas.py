from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from mediatrack.schemas.common import CamelModel
from mediatrack.schemas.media_schemas import MediaSummaryOut
from mediatrack.validation import RATING_MAX, RATING_MIN


class LibraryEntryPatch(CamelModel):
    favorite: Optional[bool] = None
    watched: Optional[bool] = None
    rating: Optional[float] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    notes: Optional[str] = None
    calendar_at: Optional[datetime] = None

    @field_validator("favorite", "watched")
    @classmethod
    def flags_not_null(cls, v):
        if v is None:
            raise ValueError("Must be true or false")
        return v


class PublicLibraryEntryOut(CamelModel):
    media_id: int
    favorite: bool
    watched: bool
    rating: Optional[float] = None
    media: Optional[MediaSummaryOut] = None


class LibraryEntryOut(PublicLibraryEntryOut):
    user_id: int
    notes: Optional[str] = None
    calendar_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class LibraryStatsOut(CamelModel):
    total: int
    favorites: int
    watched: int
    with_notes: int
    scheduled: int
    average_rating: Optional[float] = None
