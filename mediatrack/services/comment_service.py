from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediatrack.errors import NotFoundError
from mediatrack.models.comment_model import Comment
from mediatrack.policies import ensure_can_delete_comment, ensure_can_update_comment
from mediatrack.schemas.comment_schemas import CommentCreate, CommentUpdate
from mediatrack.services.media_service import ensure_media_exists
from mediatrack.services.user_service import get_user_by_nick_name
from mediatrack.utils.pagination import PageParams, build_page
from mediatrack.utils.token_utils import Identity


def comment_query():
    return select(Comment).options(selectinload(Comment.author))


async def get_comment(session: AsyncSession, comment_id: int) -> Comment:
    comment = (
        await session.execute(comment_query().where(Comment.id == comment_id))
    ).scalars().first()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


async def create_comment(
    session: AsyncSession, identity: Identity, media_id: int, payload: CommentCreate
) -> Comment:
    await ensure_media_exists(session, media_id)

    comment = Comment(content=payload.content, media_id=media_id, user_id=identity.id)
    session.add(comment)
    await session.commit()

    logger.info("User {} commented on media {}", identity.id, media_id)
    return await get_comment(session, comment.id)


async def _page_comments(session: AsyncSession, condition, params: PageParams) -> dict:
    total = (await session.execute(select(func.count(Comment.id)).where(condition))).scalar_one()
    rows = (
        await session.execute(
            comment_query()
            .where(condition)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def list_media_comments(session: AsyncSession, media_id: int, params: PageParams) -> dict:
    await ensure_media_exists(session, media_id)
    return await _page_comments(session, Comment.media_id == media_id, params)


async def list_user_comments(session: AsyncSession, nick_name: str, params: PageParams) -> dict:
    user = await get_user_by_nick_name(session, nick_name)
    return await _page_comments(session, Comment.user_id == user.id, params)


async def update_comment(
    session: AsyncSession, identity: Identity, comment_id: int, payload: CommentUpdate
) -> Comment:
    comment = await get_comment(session, comment_id)
    ensure_can_update_comment(identity, comment)

    comment.content = payload.content
    await session.commit()
    return comment


async def delete_comment(session: AsyncSession, identity: Identity, comment_id: int) -> None:
    comment = await get_comment(session, comment_id)
    ensure_can_delete_comment(identity, comment)

    await session.execute(
        delete(Comment)
        .where(Comment.id == comment_id)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    logger.info("User {} deleted comment {}", identity.id, comment_id)
