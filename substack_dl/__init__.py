"""
substack-dl - save a publication's feed as Markdown files.

Fetches the feed of a Substack-style publication, converts each post's
HTML to Markdown, and writes one MM-DD-YYYY-{slug}.md file per post.

Main entry point is the CLI:

Example:
    $ substack-dl name.substack.com my-posts
"""

__all__ = [
    "__version__",
    "AppConfig",
    "load_config",
    "resolve_feed_url",
    "fetch_feed",
    "build_post",
    "build_posts",
    "write_posts",
    "run_pipeline",
]
__version__ = "0.1.0"

from .builder import build_post, build_posts
from .config import AppConfig, load_config
from .fetcher import fetch_feed
from .resolver import resolve_feed_url
from .runner import run_pipeline
from .writer import write_posts
