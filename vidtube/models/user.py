"""ORM model for application users (accounts, credentials and session state)."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from vidtube.models.base import Base


class User(Base):
    """
    Account record for registration, login and the channel / history queries.

    username and email are stored lowercase and are globally unique.
    refresh_token holds the single active refresh token; NULL after logout.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    fullname = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(2048), nullable=False)
    cover_image = Column(String(2048), nullable=False, default="")
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    history_entries = relationship(
        "WatchHistoryEntry",
        order_by="WatchHistoryEntry.position",
        cascade="all, delete-orphan",
        back_populates="user",
    )
    videos = relationship("Video", back_populates="owner")

    @property
    def watch_history(self) -> list[int]:
        """Watched video ids in stored order."""
        return [entry.video_id for entry in self.history_entries]

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username}>"
