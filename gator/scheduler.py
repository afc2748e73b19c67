"""Feed polling loop.

One feed is polled per tick: the one fetched longest ago, never-fetched feeds
first. The feed is claimed by stamping its `last_fetched_at` before the
download starts, which moves it to the back of the queue. Selection and claim
are separate commits, so two schedulers sharing a database may pick the same
feed; only a single scheduler process is supported.
"""
import asyncio
import re
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import NoReturn

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import Session

from . import store
from .constants import FETCH_TIMEOUT
from .errors import InvalidArgumentError, NoFeedsError
from .rss import FeedDocument, fetch_feed

FetchFunc = Callable[..., Awaitable[FeedDocument]]

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_interval(text: str) -> timedelta:
    """Parse a duration such as ``1m``, ``1h30m``, ``2.5s`` or ``500ms``."""
    text = text.strip()
    if text == "0":
        return timedelta(0)
    pos = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise InvalidArgumentError(f"invalid interval {text!r}, expected e.g. 30s, 1m or 1h30m")
    interval = timedelta(seconds=seconds)
    if seconds > 0 and not interval:
        raise InvalidArgumentError(f"interval {text!r} is shorter than a microsecond")
    return interval


class Scheduler:
    def __init__(
        self,
        engine: Engine,
        *,
        fetch: FetchFunc = fetch_feed,
        timeout: float | None = FETCH_TIMEOUT,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.engine = engine
        self.fetch = fetch
        self.timeout = timeout
        self.now = now
        self.clock = clock
        self.sleep = sleep

    def poll_once(self) -> list[str]:
        """Claim the next feed, fetch it and return its item titles in order.

        Raises:
            NoFeedsError: there are no feeds at all.
            NetworkError, DecodeError: from the fetch; the claim is kept.
        """
        with Session(self.engine) as session:
            feed = store.get_next_feed_to_fetch(session)
            if feed is None:
                raise NoFeedsError()
            name, url = feed.name, feed.url
            store.mark_feed_fetched(session, feed.id, self.now())

        logger.info(f"Fetching {name} ({url})")
        document = asyncio.run(self.fetch(url, timeout=self.timeout))
        titles = [item.title for item in document.items]
        logger.info(f"Found {len(titles)} items in {name}")
        return titles

    def run_forever(
        self,
        interval: timedelta,
        report: Callable[[list[str]], None] | None = None,
    ) -> NoReturn:
        """Poll now and then once per `interval` until an error is raised.

        Ticks never overlap: when a poll outlasts the interval the next one
        starts right away and the ticks missed meanwhile are dropped.
        """
        if not isinstance(interval, timedelta) or interval <= timedelta(0):
            raise InvalidArgumentError(f"interval must be a positive duration, got {interval}")
        seconds = interval.total_seconds()
        logger.info(f"Collecting feeds every {interval}")

        next_tick = self.clock()
        while True:
            titles = self.poll_once()
            if report is not None:
                report(titles)
            now = self.clock()
            next_tick = max(next_tick + seconds, now)
            if next_tick > now:
                self.sleep(next_tick - now)
