import math
from dataclasses import dataclass
from typing import Any, Sequence

from fastapi import Query

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


def page_params(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)


def build_page(items: Sequence[Any], total: int, params: PageParams) -> dict:
    total_pages = math.ceil(total / params.page_size)
    return {
        "page": params.page,
        "page_size": params.page_size,
        "total": total,
        "total_pages": total_pages,
        "count": len(items),
        "has_prev": params.page > 1,
        "has_next": params.page < total_pages,
        "data": list(items),
    }


def slice_page(items: Sequence[Any], params: PageParams) -> dict:
    """Paginate a list that was already filtered in memory."""
    window = items[params.skip:params.skip + params.page_size]
    return build_page(window, len(items), params)
