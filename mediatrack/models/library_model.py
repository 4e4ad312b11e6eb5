from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, Text, false
from sqlalchemy.orm import relationship

from mediatrack.database import Base
from mediatrack.models.user_model import utcnow


class UserMedia(Base):
    """One user's library entry for one media item."""

    __tablename__ = "user_media"

    # Composite primary key doubles as the one-entry-per-pair constraint
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    media_id = Column(Integer, ForeignKey("media.id"), primary_key=True, index=True)

    favorite = Column(Boolean, nullable=False, default=False, server_default=false())
    watched = Column(Boolean, nullable=False, default=False, server_default=false())
    rating = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    calendar_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="library")
    media = relationship("Media", back_populates="library_entries")
