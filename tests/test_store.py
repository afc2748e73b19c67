import pytest
from sqlmodel import select

from gator import store
from gator.errors import ConflictError, NotFoundError
from gator.models import Feed, FeedFollow, User


class TestUsers:
    def test_create_and_get_user(self, session):
        created = store.create_user(session, "lane")

        assert store.get_user(session, "lane").id == created.id

    def test_duplicate_name(self, session, user):
        with pytest.raises(ConflictError, match="kahya"):
            store.create_user(session, "kahya")

    def test_unknown_user(self, session):
        with pytest.raises(NotFoundError, match="ghost"):
            store.get_user(session, "ghost")

    def test_users_sorted_by_name(self, session):
        for name in ("zed", "allan", "kahya"):
            store.create_user(session, name)

        assert [user.name for user in store.get_users(session)] == ["allan", "kahya", "zed"]

    def test_reset_users(self, session, user, feed):
        store.create_feed_follow(session, user.id, feed.id)

        assert store.reset_users(session) == 1

        assert session.exec(select(User)).all() == []
        assert session.exec(select(FeedFollow)).all() == []
        remaining = session.exec(select(Feed)).one()
        assert remaining.url == feed.url
        assert remaining.user_id is None


class TestFeeds:
    def test_get_feed(self, session, feed):
        assert store.get_feed(session, feed.url).name == "Hacker News"

    def test_get_unknown_feed(self, session):
        with pytest.raises(NotFoundError):
            store.get_feed(session, "https://example.com/missing.xml")

    def test_duplicate_url(self, session, user, feed):
        with pytest.raises(ConflictError):
            store.create_feed(session, "HN again", feed.url, user.id)

    def test_get_feeds_with_creator(self, session, user, feed):
        store.create_feed(session, "Orphan", "https://example.com/orphan.xml", None)

        assert [(f.name, creator) for f, creator in store.get_feeds(session)] == [
            ("Hacker News", "kahya"),
            ("Orphan", None),
        ]

    def test_next_feed_on_empty_store(self, session):
        assert store.get_next_feed_to_fetch(session) is None

    def test_mark_feed_fetched(self, session, feed):
        store.mark_feed_fetched(session, feed.id)
        session.refresh(feed)

        assert feed.last_fetched_at is not None
        assert feed.updated_at == feed.last_fetched_at


class TestFeedFollows:
    def test_duplicate_follow(self, session, user, feed):
        store.create_feed_follow(session, user.id, feed.id)

        with pytest.raises(ConflictError):
            store.create_feed_follow(session, user.id, feed.id)

    def test_follows_for_user(self, session, user, feed):
        feed_follow = store.create_feed_follow(session, user.id, feed.id)

        assert [
            (ff.id, name) for ff, name in store.get_feed_follows_for_user(session, user.id)
        ] == [(feed_follow.id, "Hacker News")]

    def test_delete_missing_follow(self, session, user, feed):
        with pytest.raises(NotFoundError, match="kahya"):
            store.delete_feed_follow(session, user.name, feed.url)
