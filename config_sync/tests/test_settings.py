"""Tests for sync.yaml, .slack-config and environment path resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from config_sync.paths import ENV_CLAUDE_DIR, ENV_HOME, ENV_ROOT, SyncPaths
from config_sync.settings import DEFAULT_SCHEDULE, load_settings, load_slack_webhook
from config_sync.tests.conftest import write


def test_missing_settings_file_gives_defaults(tmp_path: Path) -> None:
    """No sync.yaml means default schedule and no exclusions."""
    settings = load_settings(tmp_path / "sync.yaml")
    assert settings.schedule == DEFAULT_SCHEDULE
    assert settings.exclude == set()


def test_settings_are_read_from_yaml(tmp_path: Path) -> None:
    """Known keys override the defaults."""
    path = write(
        tmp_path / "sync.yaml",
        "schedule: '30 8 * * 1-5'\nbranch: trunk\nexclude:\n  - private-skill\n  - scripts/secret.sh/\n",
    )
    settings = load_settings(path)
    assert settings.schedule == "30 8 * * 1-5"
    assert settings.branch == "trunk"
    assert settings.exclude == {"private-skill", "scripts/secret.sh"}


def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    """A broken settings file is ignored rather than fatal."""
    path = write(tmp_path / "sync.yaml", "exclude: [unterminated\n")
    assert load_settings(path).schedule == DEFAULT_SCHEDULE


def test_non_mapping_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    """A top-level list is not a settings mapping."""
    path = write(tmp_path / "sync.yaml", "- a\n- b\n")
    assert load_settings(path).exclude == set()


@pytest.mark.parametrize(
    "content",
    [
        'SLACK_WEBHOOK_URL="https://hooks.slack.com/services/T/B/X"\n',
        "export SLACK_WEBHOOK_URL='https://hooks.slack.com/services/T/B/X'\n",
        "# comment\nSLACK_WEBHOOK_URL=https://hooks.slack.com/services/T/B/X\n",
    ],
)
def test_slack_webhook_parsed_from_shell_syntax(tmp_path: Path, content: str) -> None:
    """Quoted, exported and bare assignments are all understood."""
    path = write(tmp_path / ".slack-config", content)
    assert load_slack_webhook(path) == "https://hooks.slack.com/services/T/B/X"


def test_slack_webhook_absent(tmp_path: Path) -> None:
    """No file or an empty value disables notifications."""
    assert load_slack_webhook(tmp_path / ".slack-config") is None
    assert load_slack_webhook(write(tmp_path / "empty", 'SLACK_WEBHOOK_URL=""\n')) is None


def test_paths_follow_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """CS_ROOT and CS_CLAUDE_DIR override the defaults."""
    monkeypatch.setenv(ENV_HOME, str(tmp_path))
    monkeypatch.setenv(ENV_ROOT, str(tmp_path / "r"))
    monkeypatch.setenv(ENV_CLAUDE_DIR, str(tmp_path / "c"))
    paths = SyncPaths.from_env()
    assert paths.root == tmp_path / "r"
    assert paths.claude_dir == tmp_path / "c"
    assert paths.log_file == tmp_path / "r" / "logs" / "sync.log"


def test_paths_default_under_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Without overrides the repo lives at ~/claude-config-sync."""
    monkeypatch.setenv(ENV_HOME, str(tmp_path))
    monkeypatch.delenv(ENV_ROOT, raising=False)
    monkeypatch.delenv(ENV_CLAUDE_DIR, raising=False)
    paths = SyncPaths.from_env()
    assert paths.root == tmp_path / "claude-config-sync"
    assert paths.claude_dir == tmp_path / ".claude"
    assert paths.global_config == tmp_path / ".claude.json"


def test_explicit_arguments_beat_environment(paths: SyncPaths, tmp_path: Path) -> None:
    """CLI options take precedence over CS_* variables."""
    resolved = SyncPaths.from_env(root=tmp_path / "other")
    assert resolved.root == tmp_path / "other"
    assert resolved.claude_dir == paths.claude_dir


def test_claude_dir_setting(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """claude_dir expands ~ and resolves relative paths against the repository."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert load_settings(write(tmp_path / "a" / "sync.yaml", "claude_dir: ~/cfg\n")).claude_dir == (
        tmp_path / "home" / "cfg"
    )
    assert load_settings(write(tmp_path / "b" / "sync.yaml", "claude_dir: live\n")).claude_dir == (
        tmp_path / "b" / "live"
    )
    assert load_settings(tmp_path / "missing.yaml").claude_dir is None


def test_environment_beats_configured_claude_dir(
    paths: SyncPaths, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """CS_CLAUDE_DIR wins over sync.yaml, which wins over ~/.claude."""
    configured = tmp_path / "configured"
    assert SyncPaths.from_env(configured_claude_dir=configured).claude_dir == paths.claude_dir
    monkeypatch.delenv(ENV_CLAUDE_DIR)
    assert SyncPaths.from_env(configured_claude_dir=configured).claude_dir == configured
