import enum

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from mediatrack.database import Base
from mediatrack.models.user_model import utcnow


class MediaType(str, enum.Enum):
    MOVIE = "MOVIE"
    SERIES = "SERIES"


class Media(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, unique=True, index=True, nullable=False)
    type = Column(String, nullable=False)  # MOVIE or SERIES
    # list of tags; filtered in Python because containment is not portable
    category = Column(JSON, nullable=False, default=list)
    release_year = Column(Integer, nullable=False)
    end_year = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    creator = relationship("User", back_populates="media")
    library_entries = relationship("UserMedia", back_populates="media")
    comments = relationship("Comment", back_populates="media")
