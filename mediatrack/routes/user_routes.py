from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.database import get_async_session
from mediatrack.deps.auth import get_current_identity, require_admin
from mediatrack.schemas.common import Page
from mediatrack.schemas.media_schemas import MediaOut
from mediatrack.schemas.user_schemas import (
    AvatarUpdate,
    PrivacyUpdate,
    ProfileUpdate,
    UserCard,
    UserOut,
    UserProfileOut,
)
from mediatrack.services import user_service
from mediatrack.utils.pagination import PageParams, page_params
from mediatrack.utils.token_utils import Identity

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Page[UserOut])
async def list_users(
    params: PageParams = Depends(page_params),
    _admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.list_users(db, params)


@router.get("/me", response_model=UserOut)
async def get_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.get_user(db, identity.id)


@router.put("/me/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.update_profile(db, identity, payload)


@router.put("/me/privacy", response_model=UserOut)
async def update_privacy(
    payload: PrivacyUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.update_privacy(db, identity, payload)


@router.put("/me/avatar", response_model=UserOut)
async def update_avatar(
    payload: AvatarUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.update_avatar(db, identity, payload)


@router.get("/{nick_name}/media", response_model=Page[MediaOut])
async def list_user_media(
    nick_name: str,
    params: PageParams = Depends(page_params),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.list_media_created_by(db, nick_name, params)


@router.get("/{nick_name}", response_model=Union[UserProfileOut, UserCard])
async def get_profile(
    nick_name: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
):
    return await user_service.get_profile(db, identity, nick_name)
