import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.hash import bcrypt

from mediatrack.config import ALGORITHM, API_PREFIX, BCRYPT_ROUNDS, TOKEN_EXPIRE_DAYS
from mediatrack.models.user_model import Role

# auto_error off: a missing token is reported as 401 by get_current_identity
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/login", auto_error=False)


class InvalidTokenError(Exception):
    """Signature, expiry or claims check failed."""


@dataclass(frozen=True)
class Identity:
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def hash_password(password: str) -> str:
    # bcrypt salts every call, so equal passwords give different hashes
    return bcrypt.using(rounds=BCRYPT_ROUNDS).hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.verify(password, hashed)
    except ValueError:
        # malformed stored hash
        return False


def _signing_key() -> str:
    # read at call time, not at import
    key = os.getenv("SECRET_KEY", "")
    if not key:
        raise RuntimeError("SECRET_KEY is not configured; tokens cannot be signed")
    if len(key) < 32:
        raise RuntimeError(f"SECRET_KEY is too short ({len(key)} chars, need 32)")
    return key


def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=TOKEN_EXPIRE_DAYS))
    to_encode = {
        "id": identity.id,
        "email": identity.email,
        "role": identity.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, _signing_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    user_id = payload.get("id")
    email = payload.get("email")
    role = payload.get("role")
    if user_id is None or email is None or role not in (Role.MEMBER.value, Role.ADMIN.value):
        raise InvalidTokenError("Token is missing identity claims")
    return Identity(id=int(user_id), email=email, role=role)


def identity_of(user) -> Identity:
    return Identity(id=user.id, email=user.email, role=user.role)
