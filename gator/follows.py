from collections.abc import Iterator
from uuid import UUID

from loguru import logger
from sqlmodel import Session

from . import store
from .errors import ConflictError
from .models import FeedFollow


def follow(session: Session, user_id: UUID, feed_url: str) -> FeedFollow:
    """Make the user follow the feed at `feed_url`.

    Raises:
        NotFoundError: no feed has that URL.
        ConflictError: the user already follows it.
    """
    feed = store.get_feed(session, feed_url)
    try:
        feed_follow = store.create_feed_follow(session, user_id, feed.id)
    except ConflictError as e:
        raise ConflictError(f"user {user_id} already follows {feed_url}") from e
    logger.info(f"User {user_id} followed {feed_url}")
    return feed_follow


def unfollow(session: Session, user_name: str, feed_url: str) -> None:
    store.delete_feed_follow(session, user_name, feed_url)
    logger.info(f"User {user_name} unfollowed {feed_url}")


def list_followed(session: Session, user_id: UUID) -> Iterator[str]:
    """Names of the feeds the user follows, in the order they were followed.

    The query runs immediately; the returned iterator can be consumed once.
    """
    return iter([name for _, name in store.get_feed_follows_for_user(session, user_id)])
