from __future__ import annotations

import re
from typing import Iterable

from bs4 import BeautifulSoup
from markdownify import markdownify


DEFAULT_STRIP_TAGS = ("script", "style", "noscript")

_BLANK_RUN_RE = re.compile(r"\n{3,}")


def html_to_markdown(
    html: str | None,
    heading_style: str = "ATX",
    strip_tags: Iterable[str] = DEFAULT_STRIP_TAGS,
) -> str:
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(strip_tags)):
        tag.decompose()
    text = markdownify(str(soup), heading_style=heading_style)
    text = _BLANK_RUN_RE.sub("\n\n", text).strip("\n")
    return text + "\n" if text.strip() else ""
