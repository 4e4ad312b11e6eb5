from typing import Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediatrack.errors import BadRequestError, ConflictError, NotFoundError
from mediatrack.models.comment_model import Comment
from mediatrack.models.library_model import UserMedia
from mediatrack.models.media_model import Media
from mediatrack.models.user_model import User
from mediatrack.policies import ensure_can_delete_media, ensure_can_update_media
from mediatrack.schemas.media_schemas import MediaCreate, MediaUpdate
from mediatrack.utils.pagination import PageParams, build_page, slice_page
from mediatrack.utils.patching import apply_patch, patch_fields
from mediatrack.utils.token_utils import Identity
from mediatrack.validation import validate_payload

SORTABLE_FIELDS = {
    "title": Media.title,
    "releaseYear": Media.release_year,
    "rating": Media.rating,
    "createdAt": Media.created_at,
}

# Query strings some clients send when the field is left empty
_EMPTY_QUERY_VALUES = {"", "undefined", "null"}


def media_query():
    return select(Media).options(selectinload(Media.creator))


async def get_media(session: AsyncSession, media_id: int) -> Media:
    media = (await session.execute(media_query().where(Media.id == media_id))).scalars().first()
    if not media:
        raise NotFoundError("Media not found")
    return media


async def ensure_media_exists(session: AsyncSession, media_id: int) -> None:
    found = await session.scalar(select(Media.id).where(Media.id == media_id))
    if found is None:
        raise NotFoundError("Media not found")


async def _title_taken(session: AsyncSession, title: str) -> bool:
    # exact, case-sensitive match
    return await session.scalar(select(Media.id).where(Media.title == title)) is not None


async def create_media(session: AsyncSession, identity: Identity, payload: MediaCreate) -> Media:
    if await _title_taken(session, payload.title):
        raise ConflictError("Media already exists")

    data = payload.model_dump()
    data["type"] = payload.type.value
    media = Media(**data, created_by=identity.id)

    try:
        session.add(media)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Media already exists")

    logger.info("User {} created media {} ({})", identity.id, media.id, media.title)
    # re-select with the creator eagerly loaded to avoid async lazy-load during serialization
    return await get_media(session, media.id)


async def list_media(
    session: AsyncSession, params: PageParams, sort: str = "createdAt", order: str = "desc"
) -> dict:
    column = SORTABLE_FIELDS.get(sort)
    if column is None:
        raise BadRequestError("Invalid sort field")
    ordering = column.asc() if order == "asc" else column.desc()

    total = (await session.execute(select(func.count(Media.id)))).scalar_one()
    rows = (
        await session.execute(
            media_query()
            .order_by(ordering, Media.id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def search_media(session: AsyncSession, title: Optional[str], params: PageParams) -> dict:
    if title is None or title.strip() in _EMPTY_QUERY_VALUES:
        raise BadRequestError("Title query parameter is required")

    condition = Media.title.icontains(title.strip(), autoescape=True)
    total = (await session.execute(select(func.count(Media.id)).where(condition))).scalar_one()
    if total == 0:
        raise NotFoundError(f"Media not found {title}")

    rows = (
        await session.execute(
            media_query()
            .where(condition)
            .order_by(Media.created_at.desc(), Media.id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def media_by_category(session: AsyncSession, category: Optional[str], params: PageParams) -> dict:
    if category is None or category.strip() in _EMPTY_QUERY_VALUES:
        raise BadRequestError("category query parameter is required")
    wanted = category.strip()

    # JSON containment is not portable across stores, so filter in Python
    rows = (
        await session.execute(media_query().order_by(Media.created_at.desc(), Media.id.desc()))
    ).scalars().all()
    matching = [m for m in rows if isinstance(m.category, list) and wanted in m.category]
    return slice_page(matching, params)


async def update_media(
    session: AsyncSession, identity: Identity, media_id: int, payload: MediaUpdate
) -> Media:
    media = await get_media(session, media_id)
    ensure_can_update_media(identity, media)

    changes = patch_fields(payload)
    # Re-check the merged record so cross-field rules (endYear >= releaseYear) hold.
    # Keyed by alias so errors name the wire fields.
    aliases = {name: info.alias or name for name, info in MediaCreate.model_fields.items()}
    merged = {aliases[name]: getattr(media, name) for name in aliases}
    merged.update({aliases[name]: value for name, value in changes.items()})
    validate_payload(MediaCreate, merged)

    if "title" in changes and changes["title"] != media.title:
        if await _title_taken(session, changes["title"]):
            raise ConflictError("Media already exists")

    apply_patch(media, payload)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Media already exists")

    logger.info("User {} updated media {} fields {}", identity.id, media.id, sorted(changes))
    return media


async def delete_media(session: AsyncSession, identity: Identity, media_id: int) -> dict:
    media = await get_media(session, media_id)
    ensure_can_delete_media(identity, media)

    deleted = {"id": media.id, "title": media.title, "type": media.type}
    deleted_by = await session.scalar(select(User.nick_name).where(User.id == identity.id))

    # One transaction: library rows, comments, then the media itself
    try:
        library_result = await session.execute(
            delete(UserMedia)
            .where(UserMedia.media_id == media_id)
            .execution_options(synchronize_session=False)
        )
        comment_result = await session.execute(
            delete(Comment)
            .where(Comment.media_id == media_id)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            delete(Media)
            .where(Media.id == media_id)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
    except Exception:
        await session.rollback()
        logger.error("Cascade delete of media {} rolled back", media_id)
        raise

    logger.info(
        "User {} deleted media {} with {} library entries and {} comments",
        identity.id,
        media_id,
        library_result.rowcount,
        comment_result.rowcount,
    )
    return {
        "message": "Media deleted successfully",
        "deleted_media": deleted,
        "deleted_by": deleted_by,
        "deleted_library_entries": library_result.rowcount,
        "deleted_comments": comment_result.rowcount,
    }
