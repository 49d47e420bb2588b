"""
Persist posts as Markdown files.

The output directory is checked before anything is written: an existing
directory is left untouched unless overwrite is requested, in which case
it is removed first. Files are written one at a time and a failure stops
the batch without removing files already written.
"""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
from typing import Iterable

from .errors import CantDelete, DirectoryExists, WriteFailed
from .logging_utils import log_event
from .types import Post, WriteReport


logger = logging.getLogger(__name__)


def resolve_output_dir(output_dir: str | Path, staging_root: str | Path) -> Path:
    """Resolve an output directory name under the staging root.

    Relative names land inside staging_root; absolute paths are used as
    given.
    """
    path = Path(output_dir).expanduser()
    if path.is_absolute():
        return path
    return Path(staging_root) / path


def directory_exists(path: Path) -> bool:
    """True for a real directory. A symlink is never treated as one."""
    return path.is_dir() and not path.is_symlink()


def write_posts(directory: Path, posts: Iterable[Post], overwrite: bool = False) -> WriteReport:
    """Write one file per post into directory.

    Args:
        directory: Target directory (already resolved)
        posts: Posts to write, in order
        overwrite: Remove an existing directory instead of failing

    Returns:
        WriteReport listing every file written

    Raises:
        DirectoryExists: Directory (or another file) exists and overwrite is False
        CantDelete: The existing directory could not be removed
        WriteFailed: Creating the directory or writing a file failed
    """
    posts = list(posts)
    overwritten = False

    if directory.exists() or directory.is_symlink():
        if not directory_exists(directory):
            raise DirectoryExists(f"{directory} exists and is not a directory")
        if not overwrite:
            raise DirectoryExists(f"directory {directory} already exists")
        _delete_dir(directory)
        overwritten = True

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteFailed(f"could not create {directory}: {exc}") from exc

    log_event(
        logger,
        f"Saving {len(posts)} posts in {directory}",
        event="write_start",
        directory=str(directory),
        count=len(posts),
    )

    report = WriteReport(directory=directory, overwritten=overwritten)
    seen: dict[str, str] = {}
    for post in posts:
        name = post.filename
        if name in seen:
            log_event(
                logger,
                f"{name} is shared by '{seen[name]}' and '{post.title}'; the later post replaces the earlier",
                level=logging.WARNING,
                event="filename_collision",
                file=name,
            )
        seen[name] = post.title
        path = directory / name
        _write_file(path, post)
        log_event(
            logger,
            f"Wrote {name} ({post.title})",
            level=logging.DEBUG,
            event="post_written",
            path=str(path),
            title=post.title,
        )
        if path not in report.written:
            report.written.append(path)
    return report


def _delete_dir(directory: Path) -> None:
    log_event(logger, f"Removing existing directory {directory}", event="directory_removed", directory=str(directory))
    try:
        shutil.rmtree(directory)
    except OSError as exc:
        raise CantDelete(f"unable to delete directory {directory}: {exc}") from exc


def _write_file(path: Path, post: Post) -> None:
    try:
        path.write_bytes(post.body.encode("utf-8"))
    except (OSError, ValueError) as exc:
        raise WriteFailed(f"could not write {path.name}: {exc}") from exc
