import pytest
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from gator import models  # noqa: F401
from gator.commands import State
from gator.config import Config
from gator.db import set_sqlite_pragma
from gator.models import Feed, User


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", set_sqlite_pragma)
    SQLModel.metadata.create_all(engine)
    yield engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session):
    user = User(name="kahya")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def feed(session, user):
    feed = Feed(
        name="Hacker News",
        url="https://news.ycombinator.com/rss",
        user_id=user.id,
    )
    session.add(feed)
    session.commit()
    session.refresh(feed)
    return feed


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "gatorconfig.json"


@pytest.fixture
def state(engine, config_path):
    return State(config=Config(), engine=engine, config_path=config_path)
