"""
Feed retrieval and parsing.

A single httpx GET retrieves the feed document, which feedparser turns
into RawEntry objects. There is no retry: a failed request surfaces as
NetworkError and the caller decides whether to run again.
"""

from __future__ import annotations

import io
import logging
from typing import Any

import feedparser
import httpx

from .config import FetchConfig
from .errors import FeedParseError, InvalidInput, NetworkError
from .types import RawEntry


logger = logging.getLogger(__name__)


def fetch_feed(feed_url: str, cfg: FetchConfig | None = None) -> list[RawEntry]:
    """Fetch a feed URL and return its entries in document order.

    Args:
        feed_url: Fully resolved feed URL
        cfg: Fetch settings (timeout, user agent, proxy handling)

    Returns:
        Every entry in the feed as served; the list may be empty

    Raises:
        InvalidInput: If the URL cannot be requested at all
        NetworkError: On transport failure or a non-success HTTP status
        FeedParseError: If the body is not a feed document
    """
    cfg = cfg or FetchConfig()
    content = fetch_bytes(feed_url, cfg)
    return parse_feed_document(content, source=feed_url)


def fetch_bytes(url: str, cfg: FetchConfig) -> bytes:
    headers = {"User-Agent": cfg.user_agent}
    logger.debug("GET %s (timeout=%ss)", url, cfg.timeout_seconds)
    try:
        with httpx.Client(
            timeout=cfg.timeout_seconds,
            headers=headers,
            follow_redirects=True,
            trust_env=cfg.trust_env,
        ) as client:
            resp = client.get(url)
    except httpx.InvalidURL as exc:
        raise InvalidInput(f"invalid feed URL {url}: {exc}") from exc
    except httpx.TimeoutException as exc:
        raise NetworkError(f"timed out fetching {url}: {exc}") from exc
    except httpx.HTTPError as exc:
        raise NetworkError(f"could not fetch {url}: {type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise NetworkError(f"{url} returned HTTP {resp.status_code}")
    return resp.content


def parse_feed_document(content: bytes, source: str = "<feed>") -> list[RawEntry]:
    """Parse an RSS/Atom document into RawEntry objects.

    A document with a recognised feed version but no items is valid and
    yields an empty list. Anything feedparser cannot identify as a feed,
    or a broken document with no recoverable entries, is rejected.
    """
    parsed = feedparser.parse(io.BytesIO(content))

    if parsed.bozo and not parsed.entries:
        reason = parsed.get("bozo_exception") or "unreadable document"
        raise FeedParseError(f"{source} is not a valid feed: {reason}")
    if not parsed.get("version"):
        raise FeedParseError(f"{source} is not a recognised feed document")
    if parsed.bozo:
        logger.warning("Feed %s parsed with errors: %s", source, parsed.get("bozo_exception"))

    return [_to_raw_entry(entry) for entry in parsed.entries]


def _to_raw_entry(entry: Any) -> RawEntry:
    return RawEntry(
        title=entry.get("title"),
        link=entry.get("link"),
        published=entry.get("published"),
        content=_entry_content(entry),
    )


def _entry_content(entry: Any) -> str | None:
    """Prefer full content (content:encoded / atom content) over the summary."""
    for block in entry.get("content") or []:
        value = block.get("value")
        if value:
            return value
    return entry.get("summary") or entry.get("description")
