"""Turn a publication domain or URL into its feed URL."""

from __future__ import annotations

import httpx

from .errors import InvalidInput


SCHEME_SEPARATOR = "://"


def resolve_feed_url(source: str, feed_path: str = "/feed") -> str:
    """Return the https feed URL for a bare domain or a full URL.

    Anything up to and including the scheme separator is dropped, so
    ``http://example.substack.com/`` and ``example.substack.com`` both
    resolve to ``https://example.substack.com/feed``.

    Raises:
        InvalidInput: If nothing is left once the scheme is removed, or the
            remainder is not a valid host and path
    """
    cleaned = (source or "").strip()
    if SCHEME_SEPARATOR in cleaned:
        cleaned = cleaned.split(SCHEME_SEPARATOR, 1)[1]
    cleaned = cleaned.strip().rstrip("/")
    if not cleaned or SCHEME_SEPARATOR in cleaned:
        raise InvalidInput(f"not a publication domain or URL: {source!r}")

    if not feed_path.startswith("/"):
        feed_path = "/" + feed_path
    feed_url = f"https://{cleaned}{feed_path}"
    try:
        parsed = httpx.URL(feed_url)
    except httpx.InvalidURL as exc:
        raise InvalidInput(f"not a publication domain or URL: {source!r} ({exc})") from exc
    if not parsed.host:
        raise InvalidInput(f"no host in {source!r}")
    return feed_url
