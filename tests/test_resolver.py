"""Tests for feed URL resolution."""

import pytest

from substack_dl.errors import InvalidInput
from substack_dl.resolver import resolve_feed_url


def test_bare_domain_gets_https_and_feed_path():
    assert resolve_feed_url("example.substack.com") == "https://example.substack.com/feed"


@pytest.mark.parametrize(
    "source",
    [
        "https://example.substack.com",
        "http://example.substack.com",
        "https://example.substack.com/",
        "  example.substack.com  ",
    ],
)
def test_scheme_and_trailing_slash_are_normalized(source):
    url = resolve_feed_url(source)

    assert url == "https://example.substack.com/feed"
    assert url.count("://") == 1


def test_custom_domain_keeps_path():
    assert resolve_feed_url("https://blog.example.com/newsletter") == "https://blog.example.com/newsletter/feed"


def test_custom_feed_path():
    assert resolve_feed_url("example.com", feed_path="rss.xml") == "https://example.com/rss.xml"


@pytest.mark.parametrize("source", ["", "   ", "https://", "https:///", "a://b://c"])
def test_empty_or_broken_input_is_rejected(source):
    with pytest.raises(InvalidInput):
        resolve_feed_url(source)


@pytest.mark.parametrize("source", ["example.com:notaport", "https://example.substack.com:abc/"])
def test_unparsable_host_is_rejected(source):
    with pytest.raises(InvalidInput):
        resolve_feed_url(source)
