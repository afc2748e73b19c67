"""Command handlers and the registry that maps verbs to them.

Handlers come in two shapes: ``handler(state, *args)`` for commands anyone can
run, and ``handler(state, user, *args)`` for commands acting on behalf of the
current user. The latter are wrapped with `logged_in` when registered, so the
registry only ever holds the first shape.
"""
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from pathlib import Path

import typer
from loguru import logger
from sqlalchemy import Engine
from sqlmodel import Session

from . import follows, store
from .config import Config
from .errors import AuthError, InvalidArgumentError, NotFoundError
from .models import User
from .scheduler import Scheduler, parse_interval


@dataclass
class State:
    config: Config
    engine: Engine
    config_path: Path | None = None


Handler = Callable[..., None]

COMMANDS: dict[str, Handler] = {}


def logged_in(handler: Callable[..., None]) -> Handler:
    """Resolve the current user before calling `handler` with it."""

    @wraps(handler)
    def wrapper(state: State, *args: str) -> None:
        name = state.config.current_user_name
        if not name:
            raise AuthError("no user is logged in, run `gator login <name>` first")
        with Session(state.engine) as session:
            try:
                user = store.get_user(session, name)
            except NotFoundError as e:
                raise AuthError(f"current user {name!r} does not exist, log in again") from e
        return handler(state, user, *args)

    return wrapper


def command(name: str, *, authenticated: bool = False) -> Callable[[Handler], Handler]:
    def register(handler: Handler) -> Handler:
        COMMANDS[name] = logged_in(handler) if authenticated else handler
        return handler

    return register


def run(state: State, name: str, *args: str) -> None:
    try:
        handler = COMMANDS[name]
    except KeyError:
        raise InvalidArgumentError(f"unknown command {name!r}") from None
    logger.debug(f"Running {name} {' '.join(args)}")
    handler(state, *args)


@command("register")
def register_user(state: State, name: str) -> None:
    with Session(state.engine) as session:
        user = store.create_user(session, name)
    state.config.set_user(user.name, state.config_path)
    typer.echo(f"User {user.name} created, current user is now {user.name}.")


@command("login")
def login(state: State, name: str) -> None:
    with Session(state.engine) as session:
        user = store.get_user(session, name)
    state.config.set_user(user.name, state.config_path)
    typer.echo(f"User has been set to {user.name}")


@command("reset")
def reset(state: State) -> None:
    with Session(state.engine) as session:
        store.reset_users(session)
    typer.echo("User data has been reset.")


@command("users")
def list_users(state: State) -> None:
    with Session(state.engine) as session:
        users = store.get_users(session)
    for user in users:
        current = " (current)" if user.name == state.config.current_user_name else ""
        typer.echo(f"* {user.name}{current}")


@command("agg")
def aggregate(state: State, interval: str) -> None:
    every = parse_interval(interval)
    typer.echo(f"Collecting feeds every {every}")

    def report(titles: list[str]) -> None:
        for title in titles:
            typer.echo(f"* {title}")

    Scheduler(state.engine).run_forever(every, report=report)


@command("addfeed", authenticated=True)
def add_feed(state: State, user: User, name: str, url: str) -> None:
    with Session(state.engine) as session:
        feed = store.create_feed(session, name, url, user.id)
        follows.follow(session, user.id, feed.url)
        typer.echo(f"Feed {feed.name} ({feed.url}) added, {user.name} now follows it.")


@command("feeds")
def list_feeds(state: State) -> None:
    with Session(state.engine) as session:
        feeds = store.get_feeds(session)
    for feed, creator in feeds:
        typer.echo(f"* {feed.name}")
        typer.echo(f"  URL: {feed.url}")
        typer.echo(f"  Creator: {creator or '(deleted)'}")


@command("follow", authenticated=True)
def follow_feed(state: State, user: User, url: str) -> None:
    with Session(state.engine) as session:
        feed_follow = follows.follow(session, user.id, url)
        typer.echo(f"{user.name} now follows {feed_follow.feed.name}")


@command("following", authenticated=True)
def list_following(state: State, user: User) -> None:
    with Session(state.engine) as session:
        names = list(follows.list_followed(session, user.id))
    if not names:
        typer.echo(f"{user.name} does not follow any feeds.")
    for name in names:
        typer.echo(f"* {name}")


@command("unfollow", authenticated=True)
def unfollow_feed(state: State, user: User, url: str) -> None:
    with Session(state.engine) as session:
        follows.unfollow(session, user.name, url)
    typer.echo(f"{user.name} unfollowed {url}")
