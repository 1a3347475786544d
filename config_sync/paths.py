"""Filesystem layout of the sync repository and the live ~/.claude tree."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_ROOT = "CS_ROOT"
ENV_CLAUDE_DIR = "CS_CLAUDE_DIR"
ENV_HOME = "CS_HOME"

DEFAULT_ROOT_NAME = "claude-config-sync"
LOCK_FILENAME = ".sync.lock"
PID_FILENAME = ".sync.pid"
SLACK_CONFIG_FILENAME = ".slack-config"
SETTINGS_FILENAME = "sync.yaml"
LOG_FILENAME = "sync.log"
AUTO_LOG_FILENAME = "auto-sync.log"
STAGING_PREFIX = ".staging-"


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name, "").strip()
    return Path(value).expanduser() if value else None


@dataclass(frozen=True)
class SyncPaths:
    """Source locations under the user's home and their mirrors under ``root``."""

    root: Path
    home: Path
    claude_dir: Path

    @classmethod
    def from_env(
        cls,
        root: Path | None = None,
        claude_dir: Path | None = None,
        configured_claude_dir: Path | None = None,
    ) -> "SyncPaths":
        """Resolve paths from arguments, then CS_* environment variables, then defaults.

        ``configured_claude_dir`` (the ``claude_dir`` setting of sync.yaml) sits
        between the environment and the ``~/.claude`` default.
        """
        home = _env_path(ENV_HOME) or Path.home()
        if root is None:
            root = _env_path(ENV_ROOT) or home / DEFAULT_ROOT_NAME
        if claude_dir is None:
            claude_dir = _env_path(ENV_CLAUDE_DIR) or configured_claude_dir or home / ".claude"
        return cls(root=root.expanduser(), home=home, claude_dir=claude_dir.expanduser())

    # Git tree layout

    @property
    def lib_dir(self) -> Path:
        return self.root / "lib"

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def content_dir(self) -> Path:
        return self.root / "content"

    @property
    def log_dir(self) -> Path:
        return self.root / "logs"

    @property
    def manifests_dir(self) -> Path:
        return self.root / "plugins" / "manifests"

    @property
    def log_file(self) -> Path:
        return self.log_dir / LOG_FILENAME

    @property
    def auto_log_file(self) -> Path:
        return self.log_dir / AUTO_LOG_FILENAME

    @property
    def lock_file(self) -> Path:
        return self.root / LOCK_FILENAME

    @property
    def pid_file(self) -> Path:
        return self.root / PID_FILENAME

    @property
    def slack_config(self) -> Path:
        return self.root / SLACK_CONFIG_FILENAME

    @property
    def settings_file(self) -> Path:
        return self.root / SETTINGS_FILENAME

    # Live configuration sources

    @property
    def global_config(self) -> Path:
        """The assistant's global JSON config (MCP servers, plugins)."""
        return self.home / ".claude.json"

    @property
    def plugins_dir(self) -> Path:
        return self.claude_dir / "plugins"

    def ensure_layout(self) -> None:
        """Create the destination directories a sync pass writes into."""
        for path in (
            self.config_dir,
            self.content_dir / "scripts",
            self.content_dir / "skills",
            self.content_dir / "hooks",
            self.manifests_dir,
            self.log_dir,
        ):
            path.mkdir(parents=True, exist_ok=True)
