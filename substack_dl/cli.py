"""
Command-line interface for substack-dl.

Uses Typer for argument handling and Rich for console output and the
overwrite prompt. Supports loading .env files for proxy settings.
"""

from __future__ import annotations

from pathlib import Path
import sys

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from .config import load_config
from .errors import SubstackDLError
from .logging_utils import setup_logging
from .runner import run_pipeline

app = typer.Typer(add_completion=False)
console = Console()
err_console = Console(stderr=True)


def _prompt(message: str) -> bool:
    return Confirm.ask(escape(message), default=False, console=console)


@app.command()
def main(
    source: str = typer.Argument(..., help="Publication domain or URL, e.g. name.substack.com"),
    output_dir: str = typer.Argument(..., help="Output directory (relative names go under the staging root)."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite an existing output directory without asking."),
    strict: bool | None = typer.Option(
        None, "--strict/--no-strict", help="Abort on the first entry that cannot be built."
    ),
    staging_root: Path | None = typer.Option(
        None, "--staging-root", help="Directory relative output names are resolved under."
    ),
    timeout: float | None = typer.Option(None, "--timeout", help="HTTP timeout in seconds."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file."),
):
    """Download a publication's feed and save each post as Markdown.

    Files are named MM-DD-YYYY-{slug}.md. If the output directory already
    exists you are asked before it is replaced; without a terminal the
    answer is no.

    Args:
        source: Bare domain or full URL of the publication
        output_dir: Output directory name
        config: Optional path to YAML config file
        yes: Replace an existing output directory without asking
        strict: Abort instead of skipping entries with a bad link or date
        staging_root: Override the staging root
        timeout: Override the HTTP timeout
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
    """
    load_dotenv()

    try:
        cfg = load_config(str(config) if config else None)
    except SubstackDLError as exc:
        err_console.print(escape(f"Error [{exc.kind}]: {exc}"), style="red", soft_wrap=True)
        raise typer.Exit(code=1)

    if yes:
        cfg.output.overwrite = True
    if strict is not None:
        cfg.build.strict = strict
    if staging_root is not None:
        cfg.output.staging_root = str(staging_root)
    if timeout is not None:
        cfg.fetch.timeout_seconds = timeout
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = str(log_file)

    setup_logging(cfg.logging, err_console)

    confirm = _prompt if sys.stdin.isatty() else None
    result = run_pipeline(source, output_dir, cfg, confirm=confirm)

    if not result.ok:
        err_console.print(escape(result.summary()), style="red", soft_wrap=True)
        raise typer.Exit(code=1)

    console.print(escape(result.summary()), soft_wrap=True)


if __name__ == "__main__":
    app()
