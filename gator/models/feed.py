from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

from .relations import FeedFollow


class Feed(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    url: str = Field(unique=True)
    user_id: UUID | None = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    # None until the scheduler first claims the feed
    last_fetched_at: datetime | None = Field(default=None, index=True)

    feed_follows: list[FeedFollow] = Relationship(back_populates="feed")
