"""ORM model for a user's ordered watch history."""

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from vidtube.models.base import Base


class WatchHistoryEntry(Base):
    """One slot in a user's watch history; position orders the sequence."""

    __tablename__ = "watch_history"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, primary_key=True)
    video_id = Column(
        Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user = relationship("User", back_populates="history_entries")
