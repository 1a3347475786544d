"""Daily auto-sync through the user's crontab."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys

from config_sync.errors import ConfigSyncError
from config_sync.paths import SyncPaths

logger = logging.getLogger(__name__)

CRON_TAG = "claude-config-sync-auto"


def auto_sync_command(paths: SyncPaths) -> str:
    """Shell command cron runs: ``claude-sync auto`` with output appended to the auto log."""
    exe = shutil.which("claude-sync")
    base = [exe] if exe else [sys.executable, "-m", "config_sync"]
    argv = base + ["--root", str(paths.root), "--claude-dir", str(paths.claude_dir), "auto"]
    log = shlex.quote(str(paths.auto_log_file))
    return f"{shlex.join(argv)} >> {log} 2>&1"


def remove_entry(crontab: str) -> str:
    """Drop every line carrying our tag, keeping the rest untouched."""
    kept = [line for line in crontab.splitlines() if CRON_TAG not in line]
    return "\n".join(kept) + "\n" if kept else ""


def add_entry(crontab: str, schedule: str, command: str) -> str:
    """Replace any previous auto-sync entry with one running ``command`` on ``schedule``."""
    entry = f"# {CRON_TAG} - daily config sync\n{schedule} {command} # {CRON_TAG}\n"
    return entry + remove_entry(crontab)


def is_enabled(crontab: str) -> bool:
    return any(CRON_TAG in line and not line.lstrip().startswith("#") for line in crontab.splitlines())


def read_crontab() -> str:
    try:
        result = subprocess.run(["crontab", "-l"], capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ConfigSyncError("crontab not found; cron is required for auto-sync") from e
    if result.returncode != 0:
        # "no crontab for <user>" is the normal empty case
        logger.debug("crontab -l: %s", result.stderr.strip())
        return ""
    return result.stdout


def write_crontab(content: str) -> None:
    try:
        result = subprocess.run(["crontab", "-"], input=content, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ConfigSyncError("crontab not found; cron is required for auto-sync") from e
    if result.returncode != 0:
        raise ConfigSyncError(f"Failed to install crontab: {result.stderr.strip()}")


def enable(paths: SyncPaths, schedule: str) -> str:
    """Install the cron entry and return the command it runs."""
    command = auto_sync_command(paths)
    write_crontab(add_entry(read_crontab(), schedule, command))
    logger.info("Auto-sync enabled: %s %s", schedule, command)
    return command


def disable() -> bool:
    """Remove the cron entry. Returns False if there was none."""
    current = read_crontab()
    if CRON_TAG not in current:
        return False
    write_crontab(remove_entry(current))
    logger.info("Auto-sync disabled")
    return True
