from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.database import get_async_session
from mediatrack.deps.auth import get_current_identity
from mediatrack.schemas.common import MessageOut, Page
from mediatrack.schemas.library_schemas import (
    LibraryEntryOut,
    LibraryEntryPatch,
    LibraryStatsOut,
    PublicLibraryEntryOut,
)
from mediatrack.services import library_service
from mediatrack.utils.pagination import PageParams, page_params
from mediatrack.utils.token_utils import Identity

router = APIRouter(prefix="/library", tags=["library"])


@router.get("", response_model=Page[LibraryEntryOut])
async def my_library(
    params: PageParams = Depends(page_params),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.list_entries(db, identity.id, params)


@router.get("/stats", response_model=LibraryStatsOut)
async def my_stats(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.library_stats(db, identity.id)


@router.get("/favorites", response_model=Page[LibraryEntryOut])
async def my_favorites(
    params: PageParams = Depends(page_params),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.list_entries(db, identity.id, params, favorite=True)


@router.get("/watched", response_model=Page[LibraryEntryOut])
async def my_watched(
    params: PageParams = Depends(page_params),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.list_entries(db, identity.id, params, watched=True)


# Reduced field set: notes and calendarAt stay private
@router.get("/user/{nick_name}", response_model=Page[PublicLibraryEntryOut])
async def user_library(
    nick_name: str,
    params: PageParams = Depends(page_params),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.list_public_library(db, identity, nick_name, params)


@router.get("/{media_id}", response_model=LibraryEntryOut)
async def get_entry(
    media_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.get_entry(db, identity, media_id)


@router.post("/{media_id}", response_model=LibraryEntryOut, status_code=status.HTTP_201_CREATED)
async def add_entry(
    media_id: int,
    payload: Optional[LibraryEntryPatch] = Body(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.add_to_library(db, identity, media_id, payload)


@router.put("/{media_id}", response_model=LibraryEntryOut)
async def update_entry(
    media_id: int,
    payload: LibraryEntryPatch,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await library_service.update_entry(db, identity, media_id, payload)


@router.delete("/{media_id}", response_model=MessageOut)
async def remove_entry(
    media_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    await library_service.remove_entry(db, identity, media_id)
    return {"message": "Media removed from library"}
