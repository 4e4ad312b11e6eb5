from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.database import get_async_session
from mediatrack.deps.auth import get_current_identity
from mediatrack.models.media_model import MediaType
from mediatrack.schemas.comment_schemas import CommentCreate, CommentOut
from mediatrack.schemas.common import Page
from mediatrack.schemas.media_schemas import (
    MediaCreate,
    MediaDeletedOut,
    MediaOut,
    MediaUpdate,
    RankingOut,
    TopMediaOut,
)
from mediatrack.services import comment_service, media_service, rankings
from mediatrack.utils.pagination import PageParams, page_params
from mediatrack.utils.token_utils import Identity

router = APIRouter(prefix="/media", tags=["media"])

SortField = Literal["title", "releaseYear", "rating", "createdAt"]


@router.get("/bycategory", response_model=Page[MediaOut])
async def media_by_category(
    category: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.media_by_category(db, category, params)


@router.get("/search", response_model=Page[MediaOut])
async def search_media(
    title: Optional[str] = Query(None),
    params: PageParams = Depends(page_params),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.search_media(db, title, params)


@router.get("/top/movies", response_model=TopMediaOut)
async def top_movies(
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await rankings.top_media(db, MediaType.MOVIE)


@router.get("/top/series", response_model=TopMediaOut)
async def top_series(
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await rankings.top_media(db, MediaType.SERIES)


@router.get("/ranking", response_model=RankingOut)
async def global_ranking(
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await rankings.global_ranking(db)


@router.post("/{media_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    media_id: int,
    payload: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await comment_service.create_comment(db, identity, media_id, payload)


# Comments are readable without an account
@router.get("/{media_id}/comments", response_model=Page[CommentOut])
async def list_comments(
    media_id: int,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_async_session),
):
    return await comment_service.list_media_comments(db, media_id, params)


@router.post("", response_model=MediaOut, status_code=status.HTTP_201_CREATED)
async def create_media(
    payload: MediaCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.create_media(db, identity, payload)


@router.get("", response_model=Page[MediaOut])
async def list_media(
    params: PageParams = Depends(page_params),
    sort: SortField = Query("createdAt"),
    order: Literal["asc", "desc"] = Query("desc"),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.list_media(db, params, sort, order)


@router.get("/{media_id}", response_model=MediaOut)
async def get_media(
    media_id: int,
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.get_media(db, media_id)


@router.put("/{media_id}", response_model=MediaOut)
async def update_media(
    media_id: int,
    payload: MediaUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.update_media(db, identity, media_id, payload)


@router.delete("/{media_id}", response_model=MediaDeletedOut)
async def delete_media(
    media_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await media_service.delete_media(db, identity, media_id)
