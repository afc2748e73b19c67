"""Queries against the gator database.

Every function takes an open `Session`. Functions that mutate state commit
before returning, so each one is a single round-trip as seen by callers.
"""
from datetime import datetime, timezone
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlmodel import Session, delete, select, update

from .errors import ConflictError, NotFoundError
from .models import Feed, FeedFollow, User


def create_user(session: Session, name: str) -> User:
    user = User(name=name)
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError(f"user {name!r} already exists") from e
    session.refresh(user)
    logger.info(f"Created user {name} ({user.id})")
    return user


def get_user(session: Session, name: str) -> User:
    try:
        return session.exec(select(User).where(User.name == name)).one()
    except NoResultFound as e:
        raise NotFoundError(f"user {name!r} not found") from e


def get_users(session: Session) -> list[User]:
    return list(session.exec(select(User).order_by(User.name)).all())


def reset_users(session: Session) -> int:
    """Delete every user, their follows, and the creator reference of their feeds."""
    session.exec(delete(FeedFollow))  # type: ignore[call-overload]
    session.exec(update(Feed).values(user_id=None))  # type: ignore[call-overload]
    result = session.exec(delete(User))  # type: ignore[call-overload]
    deleted_count = result.rowcount
    session.commit()
    logger.info(f"Deleted {deleted_count} users")
    return deleted_count


def create_feed(session: Session, name: str, url: str, user_id: UUID | None) -> Feed:
    feed = Feed(name=name, url=url, user_id=user_id)
    session.add(feed)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError(f"feed {url} already exists") from e
    session.refresh(feed)
    logger.info(f"Created feed {name} ({url})")
    return feed


def get_feed(session: Session, url: str) -> Feed:
    try:
        return session.exec(select(Feed).where(Feed.url == url)).one()
    except NoResultFound as e:
        raise NotFoundError(f"feed {url} not found") from e


def get_feeds(session: Session) -> list[tuple[Feed, str | None]]:
    """Return every feed along with the name of the user who added it, if any."""
    statement = (
        select(Feed, User.name)
        .join(User, Feed.user_id == User.id, isouter=True)  # type: ignore[arg-type]
        .order_by(Feed.created_at, Feed.id)  # type: ignore[arg-type]
    )
    return list(session.exec(statement).all())  # type: ignore[arg-type]


def get_next_feed_to_fetch(session: Session) -> Feed | None:
    """Return the feed fetched longest ago, never-fetched feeds first.

    Ties are broken by creation time, then id.
    """
    statement = (
        select(Feed)
        .order_by(
            Feed.last_fetched_at.asc().nulls_first(),  # type: ignore[union-attr]
            Feed.created_at,  # type: ignore[arg-type]
            Feed.id,  # type: ignore[arg-type]
        )
        .limit(1)
    )
    return session.exec(statement).first()


def mark_feed_fetched(
    session: Session, feed_id: UUID, fetched_at: datetime | None = None
) -> None:
    fetched_at = fetched_at or datetime.now(timezone.utc)
    session.exec(  # type: ignore[call-overload]
        update(Feed)
        .where(Feed.id == feed_id)  # type: ignore[arg-type]
        .values(last_fetched_at=fetched_at, updated_at=fetched_at)
    )
    session.commit()


def create_feed_follow(session: Session, user_id: UUID, feed_id: UUID) -> FeedFollow:
    feed_follow = FeedFollow(user_id=user_id, feed_id=feed_id)
    session.add(feed_follow)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError(f"user {user_id} already follows feed {feed_id}") from e
    session.refresh(feed_follow)
    return feed_follow


def delete_feed_follow(session: Session, user_name: str, url: str) -> None:
    statement = (
        delete(FeedFollow)
        .where(
            FeedFollow.user_id.in_(select(User.id).where(User.name == user_name))  # type: ignore[attr-defined]
        )
        .where(
            FeedFollow.feed_id.in_(select(Feed.id).where(Feed.url == url))  # type: ignore[attr-defined]
        )
    )
    result = session.exec(statement)  # type: ignore[call-overload]
    if result.rowcount == 0:
        session.rollback()
        raise NotFoundError(f"user {user_name!r} does not follow {url}")
    session.commit()


def get_feed_follows_for_user(
    session: Session, user_id: UUID
) -> list[tuple[FeedFollow, str]]:
    """Return the user's follows, oldest first, with the name of each followed feed."""
    statement = (
        select(FeedFollow, Feed.name)
        .join(Feed, FeedFollow.feed_id == Feed.id)  # type: ignore[arg-type]
        .where(FeedFollow.user_id == user_id)
        .order_by(FeedFollow.created_at, FeedFollow.id)  # type: ignore[arg-type]
    )
    return list(session.exec(statement).all())  # type: ignore[arg-type]
