"""
Core data types for the feed download pipeline.

This module defines the structures passed between pipeline stages:
- RawEntry: One feed item as parsed from the syndication document
- Post: A built post, ready to be written to disk
- BuildReport: Posts plus the entries that could not be built
- WriteReport: Outcome of writing posts to the output directory
- PipelineState: Per-invocation state owned by the orchestrator
- RunResult: Terminal status of one pipeline run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .errors import SubstackDLError


@dataclass
class RawEntry:
    """A feed item prior to transformation.

    Attributes:
        title: Entry title, if present
        link: Canonical link to the post
        published: Publication date exactly as served (RFC 2822)
        content: HTML content (content:encoded, falling back to the summary)
    """
    title: str | None = None
    link: str | None = None
    published: str | None = None
    content: str | None = None


@dataclass(frozen=True)
class Post:
    """A post built from one feed entry.

    Attributes:
        slug: Last path segment of the entry link
        title: Entry title, used for logging only
        body: Markdown body
        published_at: Timezone-aware publication timestamp
    """
    slug: str
    title: str
    body: str
    published_at: datetime

    @property
    def filename(self) -> str:
        """Output filename in the form MM-DD-YYYY-{slug}.md."""
        return f"{self.published_at.strftime('%m-%d-%Y')}-{self.slug}.md"


@dataclass
class BuildFailure:
    """An entry that could not be turned into a Post."""
    index: int
    title: str | None
    link: str | None
    kind: str
    message: str


@dataclass
class BuildReport:
    posts: list[Post] = field(default_factory=list)
    failures: list[BuildFailure] = field(default_factory=list)


@dataclass
class WriteReport:
    """Result of a successful write.

    Attributes:
        directory: Directory the posts were written to
        written: Paths written, in write order
        overwritten: Whether an existing directory was cleared first
    """
    directory: Path
    written: list[Path] = field(default_factory=list)
    overwritten: bool = False

    @property
    def count(self) -> int:
        return len(self.written)


class Stage(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    BUILDING = "building"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineState:
    """State for a single invocation, passed explicitly between stages."""
    source: str
    output_dir: Path
    feed_url: str | None = None
    entries: list[RawEntry] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)
    failures: list[BuildFailure] = field(default_factory=list)
    stage: Stage = Stage.IDLE


@dataclass
class RunResult:
    """Terminal status of a pipeline run.

    Either report is set (status DONE) or error is set (status FAILED).
    failed_stage records the stage that was active when the error occurred.
    """
    status: Stage
    output_dir: Path
    feed_url: str | None = None
    report: WriteReport | None = None
    error: SubstackDLError | None = None
    failed_stage: Stage | None = None
    failures: list[BuildFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == Stage.DONE

    def summary(self) -> str:
        if self.error is not None:
            return f"Error [{self.error.kind}]: {self.error}"
        count = self.report.count if self.report else 0
        noun = "post" if count == 1 else "posts"
        line = f"Completed: wrote {count} {noun} to {self.output_dir}"
        if self.failures:
            line += f" ({len(self.failures)} skipped)"
        return line
