from typing import Union

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediatrack.errors import ConflictError, NotFoundError, UnauthorizedError
from mediatrack.models.comment_model import Comment
from mediatrack.models.library_model import UserMedia
from mediatrack.models.media_model import Media
from mediatrack.models.user_model import AdminBootstrap, Role, User
from mediatrack.policies import can_see_full_profile
from mediatrack.schemas.user_schemas import (
    AvatarUpdate,
    PrivacyUpdate,
    ProfileUpdate,
    UserCard,
    UserLogin,
    UserProfileOut,
    UserRegister,
)
from mediatrack.utils.pagination import PageParams, build_page
from mediatrack.utils.patching import apply_patch
from mediatrack.utils.token_utils import Identity, hash_password, verify_password


def normalize_email(email) -> str:
    return str(email).strip().lower()


async def _claim_admin_bootstrap(session: AsyncSession, user_id: int) -> bool:
    # Conditional UPDATE: only one transaction can flip the sentinel from NULL
    result = await session.execute(
        update(AdminBootstrap)
        .where(
            AdminBootstrap.id == AdminBootstrap.SENTINEL_ID,
            AdminBootstrap.admin_user_id.is_(None),
        )
        .values(admin_user_id=user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def register_user(session: AsyncSession, payload: UserRegister) -> User:
    email_norm = normalize_email(payload.email)
    nick = payload.nick_name

    # Check email OR nickname conflict in a single round-trip
    result = await session.execute(
        select(User).where((User.email == email_norm) | (User.nick_name == nick))
    )
    existing = result.scalars().all()

    if any(u.email == email_norm for u in existing):
        raise ConflictError("Email already in use")
    if any(u.nick_name == nick for u in existing):
        raise ConflictError("Nickname already in use")

    new_user = User(
        email=email_norm,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        nick_name=nick,
        password=hash_password(payload.password),
        role=Role.MEMBER.value,
    )

    try:
        session.add(new_user)
        await session.flush()  # need the id before claiming the sentinel
        if await _claim_admin_bootstrap(session, new_user.id):
            new_user.role = Role.ADMIN.value
        await session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration with the same keys
        await session.rollback()
        raise ConflictError("Email or nickname already in use")

    logger.info("Registered user {} ({}) as {}", new_user.id, new_user.nick_name, new_user.role)
    return new_user


async def authenticate(session: AsyncSession, payload: UserLogin) -> User:
    email_norm = normalize_email(payload.email)
    user = await session.scalar(select(User).where(User.email == email_norm))
    if not user:
        raise NotFoundError("User not found")

    if not verify_password(payload.password, user.password):
        logger.warning("Failed login for user {}", user.id)
        raise UnauthorizedError("Incorrect password")

    return user


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def get_user_by_nick_name(session: AsyncSession, nick_name: str) -> User:
    user = await session.scalar(select(User).where(User.nick_name == nick_name))
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users(session: AsyncSession, params: PageParams) -> dict:
    total = (await session.execute(select(func.count(User.id)))).scalar_one()
    rows = (
        await session.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def _count(session: AsyncSession, column, owner_column, owner_id: int) -> int:
    stmt = select(func.count(column)).where(owner_column == owner_id)
    return int((await session.execute(stmt)).scalar_one() or 0)


async def get_profile(
    session: AsyncSession, identity: Identity, nick_name: str
) -> Union[UserProfileOut, UserCard]:
    user = await get_user_by_nick_name(session, nick_name)

    if not can_see_full_profile(identity, user):
        return UserCard.model_validate(user)

    profile = UserProfileOut.model_validate(user)
    profile.media_count = await _count(session, Media.id, Media.created_by, user.id)
    profile.library_count = await _count(session, UserMedia.media_id, UserMedia.user_id, user.id)
    profile.comment_count = await _count(session, Comment.id, Comment.user_id, user.id)
    return profile


async def list_media_created_by(session: AsyncSession, nick_name: str, params: PageParams) -> dict:
    user = await get_user_by_nick_name(session, nick_name)

    total = await _count(session, Media.id, Media.created_by, user.id)
    rows = (
        await session.execute(
            select(Media)
            .where(Media.created_by == user.id)
            .options(selectinload(Media.creator))
            .order_by(Media.created_at.desc(), Media.id.desc())
            .offset(params.skip)
            .limit(params.page_size)
        )
    ).scalars().all()
    return build_page(rows, total, params)


async def _commit_user(session: AsyncSession, user: User) -> User:
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Nickname already in use")
    return user


async def update_profile(session: AsyncSession, identity: Identity, payload: ProfileUpdate) -> User:
    user = await get_user(session, identity.id)

    new_nick = payload.nick_name
    if new_nick is not None and new_nick != user.nick_name:
        taken = await session.scalar(select(User.id).where(User.nick_name == new_nick))
        if taken is not None:
            raise ConflictError("Nickname already in use")

    apply_patch(user, payload)
    return await _commit_user(session, user)


async def update_privacy(session: AsyncSession, identity: Identity, payload: PrivacyUpdate) -> User:
    user = await get_user(session, identity.id)
    apply_patch(user, payload)
    return await _commit_user(session, user)


async def update_avatar(session: AsyncSession, identity: Identity, payload: AvatarUpdate) -> User:
    user = await get_user(session, identity.id)
    apply_patch(user, payload)
    return await _commit_user(session, user)
