"""
Turn raw feed entries into posts.

Building is pure: no network, no filesystem. Each entry yields its
slug (from the link), its publication timestamp (RFC 2822), and its
body converted from HTML to Markdown.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import logging
from typing import Callable, Iterable

from .converter import html_to_markdown
from .errors import InvalidDate, MalformedLink, SubstackDLError
from .logging_utils import log_event
from .types import BuildFailure, BuildReport, Post, RawEntry


Converter = Callable[[str | None], str]

logger = logging.getLogger(__name__)


def slug_from_link(link: str | None) -> str:
    """Return the last non-empty path segment of a post link.

    Query strings and fragments are ignored, so
    ``https://example.substack.com/p/my-post?utm_source=feed`` gives
    ``my-post``.

    Raises:
        MalformedLink: If the link is empty or has no usable segment
    """
    if not link or not link.strip():
        raise MalformedLink("entry has no link")
    path = link.strip().split("#", 1)[0].split("?", 1)[0]
    if "://" in path:
        path = path.split("://", 1)[1]
    segments = [part for part in path.split("/") if part]
    if not segments:
        raise MalformedLink(f"no path segment in link {link!r}")
    slug = segments[-1]
    if slug in (".", "..") or "\\" in slug:
        raise MalformedLink(f"link {link!r} has no usable slug")
    return slug


def parse_published(value: str | None) -> datetime:
    """Parse an RFC 2822 date into an aware datetime.

    Dates without a usable zone (``-0000``) are taken as UTC.

    Raises:
        InvalidDate: If the value is missing or not RFC 2822
    """
    if not value or not value.strip():
        raise InvalidDate("entry has no publication date")
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError) as exc:
        raise InvalidDate(f"unparsable publication date {value!r}") from exc
    if parsed is None:
        raise InvalidDate(f"unparsable publication date {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_post(entry: RawEntry, convert: Converter | None = None) -> Post:
    """Build a Post from a single feed entry.

    Raises:
        MalformedLink: If no slug can be taken from the link
        InvalidDate: If the publication date does not parse
    """
    convert = convert or html_to_markdown
    slug = slug_from_link(entry.link)
    published_at = parse_published(entry.published)
    return Post(
        slug=slug,
        title=entry.title or "",
        body=convert(entry.content),
        published_at=published_at,
    )


def build_posts(
    entries: Iterable[RawEntry],
    strict: bool = False,
    convert: Converter | None = None,
) -> BuildReport:
    """Build posts for every entry, in feed order.

    With strict=False an entry that fails to build is recorded in the
    report and skipped. With strict=True the first failure is raised.
    """
    report = BuildReport()
    for index, entry in enumerate(entries):
        try:
            post = build_post(entry, convert)
        except SubstackDLError as exc:
            if strict:
                raise
            report.failures.append(
                BuildFailure(
                    index=index,
                    title=entry.title,
                    link=entry.link,
                    kind=exc.kind,
                    message=str(exc),
                )
            )
            log_event(
                logger,
                f"Skipping entry {index} ({entry.title or entry.link or 'untitled'}): {exc}",
                level=logging.WARNING,
                event="entry_skipped",
                index=index,
                kind=exc.kind,
                link=entry.link,
            )
            continue
        report.posts.append(post)
    return report
