"""Tests for the cron entry management."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from config_sync import schedule
from config_sync.errors import ConfigSyncError
from config_sync.paths import SyncPaths
from config_sync.schedule import CRON_TAG, add_entry, is_enabled, remove_entry

EXISTING = "0 * * * * /usr/bin/backup\n"


def test_add_entry_keeps_other_jobs() -> None:
    """Unrelated cron lines survive."""
    result = add_entry(EXISTING, "0 21 * * *", "claude-sync auto")
    assert "/usr/bin/backup" in result
    assert "0 21 * * * claude-sync auto" in result


def test_add_entry_replaces_previous_entry() -> None:
    """Enabling twice leaves a single job."""
    once = add_entry(EXISTING, "0 21 * * *", "claude-sync auto")
    twice = add_entry(once, "30 6 * * *", "claude-sync auto")
    jobs = [line for line in twice.splitlines() if CRON_TAG in line and not line.startswith("#")]
    assert jobs == [f"30 6 * * * claude-sync auto # {CRON_TAG}"]


def test_remove_entry_drops_comment_and_job() -> None:
    """Both tagged lines go; the rest is untouched."""
    assert remove_entry(add_entry(EXISTING, "0 21 * * *", "x")) == EXISTING


def test_remove_entry_of_only_job_gives_empty_crontab() -> None:
    assert remove_entry(add_entry("", "0 21 * * *", "x")) == ""


def test_is_enabled() -> None:
    assert is_enabled(add_entry("", "0 21 * * *", "x"))
    assert not is_enabled(EXISTING)


def test_auto_sync_command_targets_repo(paths: SyncPaths) -> None:
    """The cron command passes the repo root and appends to the auto log."""
    command = schedule.auto_sync_command(paths)
    assert str(paths.root) in command
    assert command.rstrip().endswith("2>&1")
    assert " auto >> " in command


def test_read_crontab_empty_when_user_has_none() -> None:
    """``no crontab for user`` is treated as an empty table."""
    result = MagicMock(returncode=1, stdout="", stderr="no crontab for me")
    with patch("config_sync.schedule.subprocess.run", return_value=result):
        assert schedule.read_crontab() == ""


def test_read_crontab_without_cron_installed() -> None:
    """A missing crontab binary is a fatal error."""
    with patch("config_sync.schedule.subprocess.run", side_effect=FileNotFoundError):
        with pytest.raises(ConfigSyncError):
            schedule.read_crontab()


def test_enable_installs_new_table(paths: SyncPaths) -> None:
    """enable() writes the table back through ``crontab -``."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs.get("input")))
        return subprocess.CompletedProcess(cmd, 0, stdout=EXISTING, stderr="")

    with patch("config_sync.schedule.subprocess.run", side_effect=fake_run):
        schedule.enable(paths, "0 21 * * *")

    assert calls[0][0] == ["crontab", "-l"]
    assert calls[1][0] == ["crontab", "-"]
    assert is_enabled(calls[1][1])
    assert "/usr/bin/backup" in calls[1][1]


def test_disable_without_entry_does_not_write() -> None:
    """Nothing is rewritten when auto-sync was never enabled."""
    with patch("config_sync.schedule.read_crontab", return_value=EXISTING), patch(
        "config_sync.schedule.write_crontab"
    ) as mock_write:
        assert schedule.disable() is False
    mock_write.assert_not_called()
