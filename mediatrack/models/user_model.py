import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from mediatrack.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class Privacy(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    nick_name = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.MEMBER.value)  # MEMBER or ADMIN
    avatar = Column(String, nullable=True)
    privacy = Column(String, nullable=False, default=Privacy.PUBLIC.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    media = relationship("Media", back_populates="creator")
    library = relationship("UserMedia", back_populates="user")
    comments = relationship("Comment", back_populates="author")


class AdminBootstrap(Base):
    """Single-row table claimed by the first registered user.

    Registration runs a conditional UPDATE on this row; only the transaction
    that flips admin_user_id from NULL gets the ADMIN role.
    """

    __tablename__ = "admin_bootstrap"

    SENTINEL_ID = 1

    id = Column(Integer, primary_key=True)
    admin_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
