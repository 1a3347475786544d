"""Fatal conditions reported by claude-sync."""

from __future__ import annotations

import click


class ConfigSyncError(click.ClickException):
    """Printed to stderr as ``Error: <message>`` and exits with status 1."""


class RootMissingError(ConfigSyncError):
    pass


class GitNotInitializedError(ConfigSyncError):
    pass


class GitCommandError(ConfigSyncError):
    def __init__(self, cmd: list[str], stderr: str) -> None:
        self.cmd = cmd
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(f"{' '.join(cmd)} failed: {detail}")


class LockHeldError(ConfigSyncError):
    pass
