"""
Pipeline orchestration for substack-dl.

This module coordinates one download run:
1. Resolve the feed URL and output directory
2. Fetch and parse the feed
3. Build posts from the entries
4. Ask before replacing an existing output directory
5. Write one Markdown file per post

Each stage runs once. The first SubstackDLError ends the run with a
FAILED result; nothing after the failing stage is attempted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .builder import build_posts
from .config import AppConfig
from .converter import html_to_markdown
from .errors import DirectoryExists, InvalidInput, SubstackDLError
from .fetcher import fetch_feed
from .logging_utils import get_logger, log_event
from .resolver import resolve_feed_url
from .types import PipelineState, RunResult, Stage, WriteReport
from .writer import directory_exists, resolve_output_dir, write_posts


ConfirmFn = Callable[[str], bool]


def run_pipeline(
    source: str,
    output_dir: str | Path,
    cfg: AppConfig | None = None,
    confirm: ConfirmFn | None = None,
) -> RunResult:
    """Download a publication's feed into a directory of Markdown files.

    Args:
        source: Bare domain or full URL of the publication
        output_dir: Output directory name (relative names go under the staging root)
        cfg: Application configuration
        confirm: Yes/no prompt used when the output directory already exists.
            None, or a prompt that cannot be answered, counts as "no".

    Returns:
        RunResult with status DONE and a write report, or FAILED and the error
    """
    cfg = cfg or AppConfig()
    logger = get_logger()
    state = PipelineState(source=source, output_dir=Path(output_dir))

    log_event(
        logger,
        f"Pipeline start: {source} -> {output_dir}",
        level=logging.DEBUG,
        event="pipeline_start",
        source=source,
        output=str(output_dir),
    )

    try:
        _resolve(state, cfg)
        _fetch(state, cfg, logger)
        _build(state, cfg, logger)
        overwrite = _confirm_overwrite(state, cfg, confirm, logger)
        report = _write(state, overwrite)
    except SubstackDLError as exc:
        failed_stage = state.stage
        state.stage = Stage.FAILED
        log_event(
            logger,
            f"{exc.kind} during {failed_stage.value}: {exc}",
            level=logging.DEBUG,
            event="pipeline_failed",
            kind=exc.kind,
            stage=failed_stage.value,
        )
        return RunResult(
            status=Stage.FAILED,
            output_dir=state.output_dir,
            feed_url=state.feed_url,
            error=exc,
            failed_stage=failed_stage,
            failures=state.failures,
        )

    state.stage = Stage.DONE
    log_event(
        logger,
        f"Wrote {report.count} posts to {report.directory}",
        event="pipeline_done",
        count=report.count,
        skipped=len(state.failures),
        directory=str(report.directory),
    )
    return RunResult(
        status=Stage.DONE,
        output_dir=state.output_dir,
        feed_url=state.feed_url,
        report=report,
        failures=state.failures,
    )


def _resolve(state: PipelineState, cfg: AppConfig) -> None:
    state.stage = Stage.RESOLVING
    state.feed_url = resolve_feed_url(state.source, cfg.fetch.feed_path)

    raw_dir = str(state.output_dir).strip()
    if not raw_dir or raw_dir == ".":
        raise InvalidInput("an output directory name is required")
    staging_root = cfg.output.resolved_staging_root()
    resolved = resolve_output_dir(state.output_dir, staging_root)
    if resolved.resolve() in (staging_root.resolve(), Path(resolved.anchor)):
        raise InvalidInput(f"refusing to use {resolved} as the output directory")
    state.output_dir = resolved


def _fetch(state: PipelineState, cfg: AppConfig, logger: logging.Logger) -> None:
    state.stage = Stage.FETCHING
    log_event(logger, f"Fetching {state.feed_url}", event="feed_fetch", url=state.feed_url)
    state.entries = fetch_feed(state.feed_url, cfg.fetch)
    log_event(
        logger,
        f"Feed has {len(state.entries)} entries",
        level=logging.DEBUG,
        event="feed_fetched",
        count=len(state.entries),
    )


def _build(state: PipelineState, cfg: AppConfig, logger: logging.Logger) -> None:
    state.stage = Stage.BUILDING

    def convert(html: str | None) -> str:
        return html_to_markdown(html, cfg.build.heading_style, cfg.build.strip_tags)

    report = build_posts(state.entries, strict=cfg.build.strict, convert=convert)
    state.posts = report.posts
    state.failures = report.failures
    log_event(
        logger,
        f"Built {len(state.posts)} posts ({len(state.failures)} skipped)",
        level=logging.DEBUG,
        event="posts_built",
        count=len(state.posts),
        skipped=len(state.failures),
    )


def _confirm_overwrite(
    state: PipelineState,
    cfg: AppConfig,
    confirm: ConfirmFn | None,
    logger: logging.Logger,
) -> bool:
    """Decide whether an existing output directory may be replaced."""
    if not directory_exists(state.output_dir):
        return False
    if cfg.output.overwrite:
        return True

    state.stage = Stage.AWAITING_CONFIRMATION
    message = f"directory {state.output_dir} exists. Do you want to overwrite it?"
    if not _ask(confirm, message, logger):
        raise DirectoryExists(f"directory {state.output_dir} already exists; overwrite declined")
    return True


def _ask(confirm: ConfirmFn | None, message: str, logger: logging.Logger) -> bool:
    if confirm is None:
        return False
    try:
        return bool(confirm(message))
    except (EOFError, KeyboardInterrupt, OSError) as exc:
        log_event(
            logger,
            f"Prompt unavailable ({type(exc).__name__}); assuming no",
            level=logging.DEBUG,
            event="prompt_unavailable",
        )
        return False


def _write(state: PipelineState, overwrite: bool) -> WriteReport:
    state.stage = Stage.WRITING
    return write_posts(state.output_dir, state.posts, overwrite=overwrite)
