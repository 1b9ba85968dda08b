"""Response schemas for watch history."""

from datetime import datetime

from vidtube.schemas.common import CamelModel


class VideoOwner(CamelModel):
    """Condensed owner profile nested into each watched video."""

    id: int
    username: str
    fullname: str
    avatar: str


class WatchedVideo(CamelModel):
    id: int
    video_file: str
    thumbnail: str
    title: str
    description: str = ""
    duration: float = 0.0
    views: int = 0
    is_published: bool = True
    owner: VideoOwner
    created_at: datetime | None = None
