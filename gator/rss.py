import asyncio
import html

import lxml.etree
from aiohttp import ClientSession, ClientTimeout
from aiohttp.client_exceptions import ClientError
from loguru import logger
from pydantic import BaseModel

from .constants import USER_AGENT
from .errors import DecodeError, NetworkError


class FeedItem(BaseModel):
    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""


class FeedDocument(BaseModel):
    """An RSS channel as downloaded, with its items in document order."""

    title: str = ""
    link: str = ""
    description: str = ""
    items: list[FeedItem] = []


def _text(element, tag: str) -> str:
    found = element.find(tag)
    if found is None:
        return ""
    # string value of the whole element, inline markup included
    return str(found.xpath("string()"))


def parse_feed_document(body: bytes, url: str = "") -> FeedDocument:
    """Decode an RSS 2.0 document and HTML-unescape its text fields.

    Raises:
        DecodeError: the body is not well-formed XML or has no channel.
    """
    # no recovery: a broken document is an error, not a partial feed
    parser = lxml.etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = lxml.etree.fromstring(body, parser=parser)
    except lxml.etree.XMLSyntaxError as e:
        raise DecodeError(url, str(e)) from e

    channel = root if root.tag == "channel" else root.find("channel")
    if channel is None:
        raise DecodeError(url, f"no channel element in <{root.tag}>")

    return FeedDocument(
        title=html.unescape(_text(channel, "title")),
        link=_text(channel, "link"),
        description=html.unescape(_text(channel, "description")),
        items=[
            FeedItem(
                title=html.unescape(_text(item, "title")),
                link=_text(item, "link"),
                description=html.unescape(_text(item, "description")),
                pub_date=_text(item, "pubDate"),
            )
            for item in channel.findall("item")
        ],
    )


async def fetch_feed(
    url: str,
    *,
    timeout: float | None = None,
    session: ClientSession | None = None,
) -> FeedDocument:
    """Download and decode the feed at `url` in a single attempt.

    The request lives as long as the awaiting task: cancelling it aborts the
    fetch. `timeout` bounds the whole request in seconds; `None` means no limit.

    Raises:
        NetworkError: bad URL, transport failure, timeout or non-2xx status.
        DecodeError: the body is not an RSS document.
    """
    if session is None:
        async with ClientSession(timeout=ClientTimeout(total=timeout)) as session:
            return await fetch_feed(url, timeout=timeout, session=session)

    logger.debug(f"GET {url}")
    try:
        async with session.get(
            url, headers={"User-Agent": USER_AGENT}, timeout=ClientTimeout(total=timeout)
        ) as response:
            response.raise_for_status()
            body = await response.read()
    except asyncio.TimeoutError as e:
        raise NetworkError(url, f"timed out after {timeout}s") from e
    except (ClientError, ValueError) as e:
        raise NetworkError(url, str(e) or type(e).__name__) from e

    logger.debug(f"Read {len(body)} bytes from {url}")
    return parse_feed_document(body, url)
