from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    page: int
    page_size: int
    total: int
    total_pages: int
    count: int
    has_prev: bool
    has_next: bool
    data: List[T] = []


class MessageOut(CamelModel):
    message: str
