from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.database import get_async_session
from mediatrack.deps.auth import get_current_identity
from mediatrack.schemas.comment_schemas import CommentOut, CommentUpdate
from mediatrack.schemas.common import MessageOut, Page
from mediatrack.services import comment_service
from mediatrack.utils.pagination import PageParams, page_params
from mediatrack.utils.token_utils import Identity

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/user/{nick_name}", response_model=Page[CommentOut])
async def comments_by_user(
    nick_name: str,
    params: PageParams = Depends(page_params),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await comment_service.list_user_comments(db, nick_name, params)


@router.get("/{comment_id}", response_model=CommentOut)
async def get_comment(
    comment_id: int,
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await comment_service.get_comment(db, comment_id)


@router.put("/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await comment_service.update_comment(db, identity, comment_id, payload)


@router.delete("/{comment_id}", response_model=MessageOut)
async def delete_comment(
    comment_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    await comment_service.delete_comment(db, identity, comment_id)
    return {"message": "Comment deleted successfully"}
