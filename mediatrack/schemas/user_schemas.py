from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from mediatrack.models.user_model import Privacy, Role
from mediatrack.schemas.common import CamelModel
from mediatrack.validation import check_url


RESERVED_NICK_NAMES = {"me"}


def _check_name(value):
    if value is None:
        return value
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Must be at least 2 characters")
    return value


def _check_nick_name(value):
    if value is None:
        return value
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Short nickname")
    if value.lower() in RESERVED_NICK_NAMES:
        # /users/me always resolves to the caller
        raise ValueError("Nickname is reserved")
    if any(ch.isspace() for ch in value):
        raise ValueError("Nickname cannot contain spaces")
    return value


class UserRegister(CamelModel):
    email: EmailStr
    first_name: str
    last_name: str
    nick_name: str
    password: str = Field(min_length=6, max_length=72)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v):
        return _check_name(v)

    @field_validator("nick_name")
    @classmethod
    def validate_nick(cls, v):
        return _check_nick_name(v)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    nick_name: str
    role: Role
    avatar: Optional[str] = None
    privacy: Privacy
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class UserCard(CamelModel):
    """What anyone may see of a private profile."""

    id: int
    nick_name: str
    avatar: Optional[str] = None
    privacy: Privacy


class UserProfileOut(UserCard):
    first_name: str
    last_name: str
    role: Role
    created_at: datetime
    media_count: int = 0
    library_count: int = 0
    comment_count: int = 0


class ProfileUpdate(CamelModel):
    # All optional so the client can send only what changed
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nick_name: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v):
        return _check_name(v)

    @field_validator("nick_name")
    @classmethod
    def validate_nick(cls, v):
        return _check_nick_name(v)

    @field_validator("first_name", "last_name", "nick_name")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PrivacyUpdate(CamelModel):
    privacy: Privacy


class AvatarUpdate(CamelModel):
    avatar: str

    @field_validator("avatar")
    @classmethod
    def validate_avatar(cls, v):
        return check_url(v)
