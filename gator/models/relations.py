from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


class FeedFollow(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("user_id", "feed_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    feed_id: UUID = Field(foreign_key="feed.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    user: "User" = Relationship(back_populates="feed_follows")  # type: ignore  # noqa: F821
    feed: "Feed" = Relationship(back_populates="feed_follows")  # type: ignore  # noqa: F821
