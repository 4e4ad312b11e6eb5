from datetime import datetime
from typing import Optional

from pydantic import field_validator

from mediatrack.schemas.common import CamelModel
from mediatrack.schemas.media_schemas import CreatorOut
from mediatrack.validation import check_not_blank


class CommentCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        return check_not_blank(v)


class CommentUpdate(CommentCreate):
    pass


class CommentOut(CamelModel):
    id: int
    content: str
    media_id: int
    user_id: int
    created_at: datetime
    updated_at: datetime
    author: Optional[CreatorOut] = None
