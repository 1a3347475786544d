"""Forced full backup: copy everything again, ignoring what changed."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

import click

from config_sync.errors import ConfigSyncError
from config_sync.mirror import copy_item, remove_item
from config_sync.paths import STAGING_PREFIX, SyncPaths
from config_sync.sync import check_root, step, update_gitignore

logger = logging.getLogger(__name__)


def _ok(message: str) -> None:
    click.echo("  " + click.style("✓", fg="green") + f" {message}")


def _info(message: str) -> None:
    click.echo("  " + click.style("ℹ", fg="blue") + f" {message}")


def _missing(message: str) -> None:
    click.echo("  " + click.style("✗", fg="red") + f" {message}")


def backup_file(source: Path, dest: Path, name: str) -> bool:
    if source.is_symlink():
        _info(f"{name} is a symlink (skipping - already synced)")
        return False
    if not source.is_file():
        _missing(f"{name} not found")
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest)
    _ok(f"Updated {name}")
    return True


def replace_directory(source: Path, dest: Path, name: str) -> bool:
    """Copy ``source`` next to ``dest`` first and swap it in once complete."""
    if source.is_symlink():
        _info(f"{name}/ is a symlink (skipping - already synced)")
        return False
    if not source.is_dir():
        _missing(f"{name}/ not found")
        return False

    dest.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f"{STAGING_PREFIX}{name}-", dir=dest.parent))
    staged = staging / name
    try:
        shutil.copytree(source, staged, symlinks=True)
    except (OSError, shutil.Error) as e:
        shutil.rmtree(staging, ignore_errors=True)
        logger.error("Failed to copy %s: %s", source, e)
        raise ConfigSyncError(f"Failed to copy {name}/") from e

    if dest.exists() or dest.is_symlink():
        remove_item(dest)
    staged.rename(dest)
    staging.rmdir()
    _ok(f"Updated {name}/")
    return True


def backup_skills(source: Path, dest: Path) -> list[str]:
    """Recopy every skill folder, keeping skills that exist only in the repo."""
    if source.is_symlink():
        _info("skills/ is a symlink (skipping - already synced)")
        return []
    if not source.is_dir():
        _missing("skills/ not found")
        return []

    updated = []
    for skill in sorted(source.iterdir()):
        if not skill.is_dir() or skill.is_symlink():
            continue
        target = dest / skill.name
        if target.exists() or target.is_symlink():
            remove_item(target)
        copy_item(skill, target)
        _ok(f"Updated skill: {skill.name}")
        updated.append(skill.name)
    _ok("Synced skills/")
    return updated


def run_backup(paths: SyncPaths) -> list[str]:
    """Copy settings, scripts, skills and hooks unconditionally.

    Returns the labels of what was written.
    """
    check_root(paths)
    paths.ensure_layout()
    update_gitignore(paths)
    logger.info("Full backup started: %s -> %s", paths.claude_dir, paths.root)

    click.secho("=== Claude Code Config Sync - Full Backup ===", bold=True)
    click.echo()
    click.echo(f"Pulling latest config from {paths.claude_dir} to {paths.root}")

    written: list[str] = []

    step("[1/4] Updating settings.json...")
    if backup_file(paths.claude_dir / "settings.json", paths.config_dir / "settings.json", "settings.json"):
        written.append("settings.json")

    step("[2/4] Updating scripts...")
    if replace_directory(paths.claude_dir / "scripts", paths.content_dir / "scripts", "scripts"):
        written.append("scripts")

    step("[3/4] Updating skills...")
    written.extend(
        f"skills/{name}" for name in backup_skills(paths.claude_dir / "skills", paths.content_dir / "skills")
    )

    step("[4/4] Updating hooks...")
    if replace_directory(paths.claude_dir / "hooks", paths.content_dir / "hooks", "hooks"):
        written.append("hooks")

    logger.info("Full backup wrote %d item(s)", len(written))
    click.echo()
    click.secho("=== Backup Complete! ===", fg="green", bold=True)
    click.echo()
    click.echo("Review changes with: git status")
    click.echo("Commit with: git add . && git commit -m 'Update config'")
    click.echo("Push with: git push")
    return written
