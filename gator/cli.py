import sys

import typer
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from .commands import State, run
from .config import read_config
from .constants import LOG_LEVEL
from .db import get_engine
from .errors import GatorError

cli = typer.Typer(no_args_is_help=True, add_completion=False)


def dispatch(name: str, *args: str) -> None:
    """Run a registered command, turning any gator error into exit status 1."""
    try:
        config = read_config()
        state = State(config=config, engine=get_engine(config))
        run(state, name, *args)
    except GatorError as e:
        logger.debug(f"{name} failed: {e!r}")
        typer.echo(str(e))
        raise typer.Exit(code=1)
    except SQLAlchemyError as e:
        logger.debug(f"{name} failed: {e!r}")
        typer.echo(f"database error: {e}")
        raise typer.Exit(code=1)


@cli.callback()
def main() -> None:
    """Aggregate RSS feeds from the command line."""
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)


@cli.command()
def register(name: str) -> None:
    """Create a user and log in as them."""
    dispatch("register", name)


@cli.command()
def login(name: str) -> None:
    """Switch the current user."""
    dispatch("login", name)


@cli.command()
def reset() -> None:
    """Delete all users and their follows."""
    dispatch("reset")


@cli.command()
def users() -> None:
    """List registered users."""
    dispatch("users")


@cli.command()
def agg(interval: str = typer.Argument(..., help="Time between polls, e.g. 30s, 1m, 1h")) -> None:
    """Poll feeds forever, oldest first, printing the titles of their items."""
    dispatch("agg", interval)


@cli.command()
def addfeed(name: str, url: str) -> None:
    """Add a feed and follow it."""
    dispatch("addfeed", name, url)


@cli.command()
def feeds() -> None:
    """List every feed and who added it."""
    dispatch("feeds")


@cli.command()
def follow(url: str) -> None:
    """Follow an existing feed by URL."""
    dispatch("follow", url)


@cli.command()
def following() -> None:
    """List the feeds the current user follows."""
    dispatch("following")


@cli.command()
def unfollow(url: str) -> None:
    """Stop following a feed."""
    dispatch("unfollow", url)


if __name__ == "__main__":
    cli()
