"""Response schema for the channel profile query."""

from pydantic import Field

from vidtube.schemas.common import CamelModel


class ChannelProfile(CamelModel):
    """Public channel fields plus subscription counts for the requested channel."""

    id: int
    username: str
    fullname: str
    email: str
    avatar: str
    cover_image: str = ""
    subscriber_count: int = Field(..., ge=0, description="Users subscribed to this channel.")
    subscribed_count: int = Field(..., ge=0, description="Channels this user subscribes to.")
    is_subscribed: bool = Field(
        default=False,
        description="True when the requesting viewer subscribes to this channel.",
    )
