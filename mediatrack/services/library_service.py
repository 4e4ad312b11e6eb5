from typing import Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediatrack.errors import ConflictError, NotFoundError
from mediatrack.models.library_model import UserMedia
from mediatrack.policies import ensure_can_view_library
from mediatrack.schemas.library_schemas import LibraryEntryPatch
from mediatrack.services.media_service import ensure_media_exists
from mediatrack.services.user_service import get_user_by_nick_name
from mediatrack.utils.pagination import PageParams, build_page
from mediatrack.utils.patching import apply_patch
from mediatrack.utils.token_utils import Identity


def _entry_query(user_id: int):
    return (
        select(UserMedia)
        .where(UserMedia.user_id == user_id)
        .options(selectinload(UserMedia.media))
    )


async def get_entry(session: AsyncSession, identity: Identity, media_id: int) -> UserMedia:
    entry = (
        await session.execute(_entry_query(identity.id).where(UserMedia.media_id == media_id))
    ).scalars().first()
    if not entry:
        raise NotFoundError("Media not in library")
    return entry


async def add_to_library(
    session: AsyncSession,
    identity: Identity,
    media_id: int,
    payload: Optional[LibraryEntryPatch] = None,
) -> UserMedia:
    await ensure_media_exists(session, media_id)

    existing = await session.get(UserMedia, (identity.id, media_id))
    if existing:
        raise ConflictError("Media already in library")

    entry = UserMedia(user_id=identity.id, media_id=media_id)
    if payload is not None:
        apply_patch(entry, payload)

    try:
        session.add(entry)
        await session.commit()
    except IntegrityError:
        # Primary key (user_id, media_id) caught a concurrent insert
        await session.rollback()
        raise ConflictError("Media already in library")

    logger.info("User {} added media {} to library", identity.id, media_id)
    return await get_entry(session, identity, media_id)


async def update_entry(
    session: AsyncSession, identity: Identity, media_id: int, payload: LibraryEntryPatch
) -> UserMedia:
    # Keyed by the caller's id only; another user's row is simply not found
    entry = await get_entry(session, identity, media_id)
    apply_patch(entry, payload)
    await session.commit()
    return entry


async def remove_entry(session: AsyncSession, identity: Identity, media_id: int) -> None:
    result = await session.execute(
        delete(UserMedia)
        .where(UserMedia.user_id == identity.id, UserMedia.media_id == media_id)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        raise NotFoundError("Media not in library")
    await session.commit()
    logger.info("User {} removed media {} from library", identity.id, media_id)


async def list_entries(
    session: AsyncSession,
    user_id: int,
    params: PageParams,
    favorite: Optional[bool] = None,
    watched: Optional[bool] = None,
) -> dict:
    filters = [UserMedia.user_id == user_id]
    if favorite is not None:
        filters.append(UserMedia.favorite == favorite)
    if watched is not None:
        filters.append(UserMedia.watched == watched)

    total = (
        await session.execute(select(func.count(UserMedia.media_id)).where(*filters))
    ).scalar_one()
    rows = (
        await session.execute(
            select(UserMedia)
            .where(*filters)
            .options(selectinload(UserMedia.media))
            .order_by(UserMedia.created_at.desc(), UserMedia.media_id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def list_public_library(
    session: AsyncSession, identity: Identity, nick_name: str, params: PageParams
) -> dict:
    owner = await get_user_by_nick_name(session, nick_name)
    ensure_can_view_library(identity, owner)
    return await list_entries(session, owner.id, params)


async def library_stats(session: AsyncSession, user_id: int) -> dict:
    rows = (
        await session.execute(select(UserMedia).where(UserMedia.user_id == user_id))
    ).scalars().all()

    ratings = [row.rating for row in rows if row.rating is not None]
    average = round(sum(ratings) / len(ratings), 1) if ratings else None

    return {
        "total": len(rows),
        "favorites": sum(1 for row in rows if row.favorite),
        "watched": sum(1 for row in rows if row.watched),
        "with_notes": sum(1 for row in rows if row.notes and row.notes.strip()),
        "scheduled": sum(1 for row in rows if row.calendar_at is not None),
        "average_rating": average,
    }
