"""Tests for pipeline orchestration."""

from __future__ import annotations

import pytest

from substack_dl import runner
from substack_dl.config import AppConfig
from substack_dl.errors import DirectoryExists, FeedParseError, InvalidInput, NetworkError
from substack_dl.types import RawEntry, Stage


ENTRIES = [
    RawEntry(
        title="My First Post",
        link="https://example.substack.com/p/my-first-post",
        published="Mon, 02 Mar 2024 10:00:00 GMT",
        content="<h1>Title</h1><p>Hello</p>",
    ),
    RawEntry(
        title="Second",
        link="https://example.substack.com/p/second",
        published="Tue, 05 Mar 2024 22:30:00 -0500",
        content="<p>Second body</p>",
    ),
]


@pytest.fixture
def cfg(tmp_path) -> AppConfig:
    cfg = AppConfig()
    cfg.output.staging_root = str(tmp_path)
    return cfg


@pytest.fixture
def fake_fetch(monkeypatch):
    calls = []

    def fetch(feed_url, fetch_cfg=None):
        calls.append(feed_url)
        return list(ENTRIES)

    monkeypatch.setattr(runner, "fetch_feed", fetch)
    return calls


def test_run_writes_posts_under_staging_root(cfg, tmp_path, fake_fetch):
    result = runner.run_pipeline("example.substack.com", "posts", cfg)

    assert result.ok
    assert result.status == Stage.DONE
    assert result.feed_url == "https://example.substack.com/feed"
    assert fake_fetch == ["https://example.substack.com/feed"]
    target = tmp_path / "posts"
    assert result.output_dir == target
    assert sorted(p.name for p in target.iterdir()) == [
        "03-02-2024-my-first-post.md",
        "03-05-2024-second.md",
    ]
    assert (target / "03-02-2024-my-first-post.md").read_text(encoding="utf-8").startswith("# Title")
    assert result.summary() == f"Completed: wrote 2 posts to {target}"


def test_existing_directory_without_prompt_fails(cfg, tmp_path, fake_fetch):
    target = tmp_path / "posts"
    target.mkdir()
    (target / "old.md").write_text("old", encoding="utf-8")

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=None)

    assert not result.ok
    assert isinstance(result.error, DirectoryExists)
    assert result.failed_stage == Stage.AWAITING_CONFIRMATION
    assert [p.name for p in target.iterdir()] == ["old.md"]
    assert result.summary().startswith("Error [DirectoryExists]:")


def test_existing_directory_confirmed_is_overwritten(cfg, tmp_path, fake_fetch):
    target = tmp_path / "posts"
    target.mkdir()
    (target / "old.md").write_text("old", encoding="utf-8")
    questions = []

    def confirm(message):
        questions.append(message)
        return True

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=confirm)

    assert result.ok
    assert result.report.overwritten
    assert len(questions) == 1
    assert str(target) in questions[0]
    assert "old.md" not in [p.name for p in target.iterdir()]


def test_existing_directory_declined(cfg, tmp_path, fake_fetch):
    target = tmp_path / "posts"
    target.mkdir()

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=lambda message: False)

    assert isinstance(result.error, DirectoryExists)
    assert list(target.iterdir()) == []


@pytest.mark.parametrize("exc", [EOFError, KeyboardInterrupt, OSError])
def test_unavailable_prompt_counts_as_no(cfg, tmp_path, fake_fetch, exc):
    (tmp_path / "posts").mkdir()

    def confirm(message):
        raise exc()

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=confirm)

    assert isinstance(result.error, DirectoryExists)


def test_overwrite_config_skips_prompt(cfg, tmp_path, fake_fetch):
    (tmp_path / "posts").mkdir()
    cfg.output.overwrite = True

    def confirm(message):
        raise AssertionError("prompt should not be shown")

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=confirm)

    assert result.ok
    assert result.report.count == 2


def test_prompt_not_shown_for_new_directory(cfg, fake_fetch):
    def confirm(message):
        raise AssertionError("prompt should not be shown")

    result = runner.run_pipeline("example.substack.com", "fresh", cfg, confirm=confirm)

    assert result.ok


@pytest.mark.parametrize("error", [NetworkError("down"), FeedParseError("bad xml")])
def test_fetch_errors_fail_before_any_write(cfg, tmp_path, monkeypatch, error):
    def fetch(feed_url, fetch_cfg=None):
        raise error

    monkeypatch.setattr(runner, "fetch_feed", fetch)

    result = runner.run_pipeline("example.substack.com", "posts", cfg)

    assert result.status == Stage.FAILED
    assert result.failed_stage == Stage.FETCHING
    assert result.error is error
    assert not (tmp_path / "posts").exists()


def test_invalid_entries_are_skipped_and_reported(cfg, tmp_path, monkeypatch):
    bad = RawEntry(title="Broken", link="https://example.substack.com/p/broken", published="sometime")
    monkeypatch.setattr(runner, "fetch_feed", lambda url, fetch_cfg=None: [bad] + ENTRIES)

    result = runner.run_pipeline("example.substack.com", "posts", cfg)

    assert result.ok
    assert result.report.count == 2
    assert [(f.kind, f.title) for f in result.failures] == [("InvalidDate", "Broken")]
    assert result.summary().endswith("(1 skipped)")


def test_strict_mode_aborts_on_invalid_entry(cfg, tmp_path, monkeypatch):
    bad = RawEntry(title="Broken", link="", published="Mon, 02 Mar 2024 10:00:00 GMT")
    monkeypatch.setattr(runner, "fetch_feed", lambda url, fetch_cfg=None: ENTRIES + [bad])
    cfg.build.strict = True

    result = runner.run_pipeline("example.substack.com", "posts", cfg)

    assert result.failed_stage == Stage.BUILDING
    assert result.error.kind == "MalformedLink"
    assert not (tmp_path / "posts").exists()


def test_empty_feed_creates_empty_directory(cfg, tmp_path, monkeypatch):
    monkeypatch.setattr(runner, "fetch_feed", lambda url, fetch_cfg=None: [])

    result = runner.run_pipeline("example.substack.com", "posts", cfg)

    assert result.ok
    assert result.report.count == 0
    assert list((tmp_path / "posts").iterdir()) == []


@pytest.mark.parametrize("source, output_dir", [("", "posts"), ("example.substack.com", ""), ("example.substack.com", ".")])
def test_invalid_input_fails_while_resolving(cfg, fake_fetch, source, output_dir):
    result = runner.run_pipeline(source, output_dir, cfg)

    assert isinstance(result.error, InvalidInput)
    assert result.failed_stage == Stage.RESOLVING
    assert fake_fetch == []


def test_unparsable_source_fails_while_resolving(cfg, fake_fetch):
    result = runner.run_pipeline("example.com:notaport", "posts", cfg)

    assert isinstance(result.error, InvalidInput)
    assert result.failed_stage == Stage.RESOLVING
    assert fake_fetch == []


def test_symlinked_output_dir_is_refused_without_prompt(cfg, tmp_path, fake_fetch):
    real = tmp_path / "real"
    real.mkdir()
    (real / "keep.md").write_text("keep", encoding="utf-8")
    (tmp_path / "posts").symlink_to(real, target_is_directory=True)

    def confirm(message):
        raise AssertionError("prompt should not be shown")

    result = runner.run_pipeline("example.substack.com", "posts", cfg, confirm=confirm)

    assert isinstance(result.error, DirectoryExists)
    assert result.failed_stage == Stage.WRITING
    assert "not a directory" in str(result.error)
    assert [p.name for p in real.iterdir()] == ["keep.md"]
    assert (tmp_path / "posts").is_symlink()
