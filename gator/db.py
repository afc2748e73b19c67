from sqlalchemy import Engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine

from . import models  # noqa: F401
from .config import Config
from .constants import DATABASE_URL, DEBUG
from .errors import ConfigError


def get_engine(config: Config) -> Engine:
    """Create the engine for the configured database and make sure the schema exists.

    `DATABASE_URL` takes precedence over the `db_url` of the config file.

    Raises:
        ConfigError: no database is configured, or it cannot be opened.
    """
    url = DATABASE_URL or config.db_url
    if not url:
        raise ConfigError("no database configured, set DATABASE_URL or db_url in the config file")

    try:
        if url.startswith("sqlite"):
            engine = create_engine(url, echo=DEBUG, connect_args={"check_same_thread": False})
            event.listen(engine, "connect", set_sqlite_pragma)
        else:
            engine = create_engine(url, echo=DEBUG)
        SQLModel.metadata.create_all(engine)
    except (SQLAlchemyError, ImportError) as e:
        raise ConfigError(f"error opening database {url!r}: {e}") from e
    return engine


def set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
    """Enforce foreign keys on SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
