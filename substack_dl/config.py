"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Feed URL and HTTP fetching settings
- BuildConfig: Post building and HTML conversion settings
- OutputConfig: Output directory settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tempfile
from typing import Any

import yaml

from .errors import InvalidConfig


@dataclass
class FetchConfig:
    """Configuration for feed retrieval.

    Attributes:
        feed_path: Path appended to the publication host to reach its feed
        timeout_seconds: HTTP request timeout (connect, read and write)
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
    """

    feed_path: str = "/feed"
    timeout_seconds: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    trust_env: bool = True


@dataclass
class BuildConfig:
    """Configuration for turning feed entries into posts.

    Attributes:
        strict: Abort on the first bad entry instead of skipping it
        heading_style: markdownify heading style ("ATX", "ATX_CLOSED", "SETEXT")
        strip_tags: Tags removed (with their contents) before conversion
    """

    strict: bool = False
    heading_style: str = "ATX"
    strip_tags: list[str] = field(default_factory=lambda: ["script", "style", "noscript"])


@dataclass
class OutputConfig:
    """Configuration for output files.

    Attributes:
        staging_root: Directory that relative output names are resolved under.
            None means the platform temp directory.
        overwrite: Replace an existing output directory without asking
    """

    staging_root: str | None = None
    overwrite: bool = False

    def resolved_staging_root(self) -> Path:
        if self.staging_root:
            return Path(self.staging_root).expanduser()
        return Path(tempfile.gettempdir())


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to the console
        file: Optional path of a log file
        format: Log file format ("jsonl" or "plain")
    """

    level: str = "INFO"
    console: bool = True
    file: str | None = None
    format: str = "jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    Raises:
        InvalidConfig: If the file is not YAML or its top level is not a mapping
    """
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise InvalidConfig(f"{path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise InvalidConfig(f"{path} must contain a mapping of config sections")

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig, ignoring unknown keys."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data or not isinstance(value, dict):
            continue
        section = data[key]
        for name, item in value.items():
            if name in section:
                section[name] = item
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "fetch": {
            "feed_path": cfg.fetch.feed_path,
            "timeout_seconds": cfg.fetch.timeout_seconds,
            "user_agent": cfg.fetch.user_agent,
            "trust_env": cfg.fetch.trust_env,
        },
        "build": {
            "strict": cfg.build.strict,
            "heading_style": cfg.build.heading_style,
            "strip_tags": list(cfg.build.strip_tags),
        },
        "output": {
            "staging_root": cfg.output.staging_root,
            "overwrite": cfg.output.overwrite,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        build=BuildConfig(**data["build"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )
