"""Shared fixtures: a fake home with a ~/.claude tree and an empty sync repo."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from config_sync.paths import ENV_CLAUDE_DIR, ENV_HOME, ENV_ROOT, SyncPaths


@pytest.fixture
def paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SyncPaths:
    """SyncPaths rooted in tmp_path, with the root directory already present."""
    home = tmp_path / "home"
    claude_dir = home / ".claude"
    root = tmp_path / "repo"
    claude_dir.mkdir(parents=True)
    root.mkdir()
    monkeypatch.setenv(ENV_HOME, str(home))
    monkeypatch.setenv(ENV_ROOT, str(root))
    monkeypatch.setenv(ENV_CLAUDE_DIR, str(claude_dir))
    return SyncPaths.from_env()


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def write_manifest(path: Path, plugins: dict) -> Path:
    return write(path, json.dumps({"version": 2, "plugins": plugins}))
