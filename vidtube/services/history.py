"""Watch history query: the user's watched videos, each with a condensed owner."""

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from vidtube.core.errors import NotFoundError
from vidtube.models import User, Video, WatchHistoryEntry
from vidtube.schemas.videos import VideoOwner, WatchedVideo


def build_watch_history_query(user_id: int):
    """Videos joined through watch_history in stored order; owner loaded in the same query."""
    return (
        select(Video)
        .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
        .where(WatchHistoryEntry.user_id == user_id)
        .order_by(WatchHistoryEntry.position)
        .options(joinedload(Video.owner))
    )


def get_watch_history(db: Session, user_id: int) -> list[WatchedVideo]:
    if db.get(User, user_id) is None:
        raise NotFoundError("User does not exist")
    videos = db.execute(build_watch_history_query(user_id)).scalars().all()
    return [
        WatchedVideo(
            id=video.id,
            video_file=video.video_file,
            thumbnail=video.thumbnail,
            title=video.title,
            description=video.description or "",
            duration=video.duration or 0.0,
            views=video.views or 0,
            is_published=bool(video.is_published),
            owner=VideoOwner.model_validate(video.owner),
            created_at=video.created_at,
        )
        for video in videos
    ]
