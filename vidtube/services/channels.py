"""Channel profile query: public user fields plus subscription counts."""

from sqlalchemy import exists, false, func, select
from sqlalchemy.orm import Session

from vidtube.core.errors import BadRequestError, NotFoundError
from vidtube.models import Subscription, User
from vidtube.schemas.channels import ChannelProfile


def build_channel_profile_query(username: str, viewer_id: int | None):
    """
    One row for the channel named username.

    Two correlated counts over subscription edges (as channel, as subscriber)
    and an EXISTS for the viewer's edge; an anonymous viewer is never subscribed.
    """
    subscriber_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    if viewer_id is None:
        is_subscribed = false()
    else:
        is_subscribed = (
            exists()
            .where(Subscription.channel_id == User.id)
            .where(Subscription.subscriber_id == viewer_id)
            .correlate(User)
        )
    return select(
        User.id,
        User.username,
        User.fullname,
        User.email,
        User.avatar,
        User.cover_image,
        subscriber_count.label("subscriber_count"),
        subscribed_count.label("subscribed_count"),
        is_subscribed.label("is_subscribed"),
    ).where(User.username == username.strip().lower())


def get_channel_profile(db: Session, username: str, viewer_id: int | None) -> ChannelProfile:
    if not username or not username.strip():
        raise BadRequestError("Username is missing")
    row = db.execute(build_channel_profile_query(username, viewer_id)).mappings().first()
    if row is None:
        raise NotFoundError("Channel does not exist")
    return ChannelProfile(
        id=row["id"],
        username=row["username"],
        fullname=row["fullname"],
        email=row["email"],
        avatar=row["avatar"],
        cover_image=row["cover_image"] or "",
        subscriber_count=row["subscriber_count"] or 0,
        subscribed_count=row["subscribed_count"] or 0,
        is_subscribed=bool(row["is_subscribed"]),
    )
