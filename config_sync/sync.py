"""One incremental sync pass over every category, and its summary."""

from __future__ import annotations

import logging
from datetime import datetime

import click

from config_sync.categories import build_categories
from config_sync.errors import RootMissingError
from config_sync.mirror import ChangeSet
from config_sync.paths import (
    LOCK_FILENAME,
    PID_FILENAME,
    SLACK_CONFIG_FILENAME,
    STAGING_PREFIX,
    SyncPaths,
)

logger = logging.getLogger(__name__)

GITIGNORE_MARKER = "# claude-config-sync local state"


def commit_message(prefix: str = "Sync", now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{prefix}: {now.strftime('%Y-%m-%d %H:%M')}"


def step(message: str, echo: bool = True) -> None:
    if echo:
        click.echo("\n" + click.style("▶", fg="blue") + f" {message}")


def check_root(paths: SyncPaths) -> None:
    if not paths.root.is_dir():
        raise RootMissingError(
            f"Sync directory not found: {paths.root}\n"
            f"Please ensure the repository is cloned to {paths.root}"
        )


def update_gitignore(paths: SyncPaths) -> list[str]:
    """Keep local-only state (lock, logs, webhook secret, backup staging) out of commits.

    Returns the entries that were added.
    """
    gitignore = paths.root / ".gitignore"
    entries = [
        LOCK_FILENAME,
        PID_FILENAME,
        SLACK_CONFIG_FILENAME,
        f"{paths.log_dir.name}/",
        "*.new",
        f"{STAGING_PREFIX}*",
    ]

    existing_lines: set[str] = set()
    if gitignore.exists():
        existing_lines = set(gitignore.read_text(encoding="utf-8").splitlines())

    new_entries = [e for e in entries if e not in existing_lines]
    if not new_entries:
        return []

    with gitignore.open("a", encoding="utf-8") as f:
        if GITIGNORE_MARKER not in existing_lines:
            f.write(f"\n{GITIGNORE_MARKER}\n" if existing_lines else f"{GITIGNORE_MARKER}\n")
        for entry in new_entries:
            f.write(f"{entry}\n")
    logger.info("Added to .gitignore: %s", ", ".join(new_entries))
    return new_entries


def run_sync(paths: SyncPaths, exclude: set[str] | None = None, echo: bool = True) -> ChangeSet:
    """Mirror all categories and return the changes made by this pass.

    Categories are visited in a fixed order. OSError from copying or diffing is
    not caught and aborts the pass.
    """
    check_root(paths)
    paths.ensure_layout()
    update_gitignore(paths)

    changes = ChangeSet(echo=echo)
    if echo:
        click.secho("=== Claude Code Config Sync - Incremental Backup ===", bold=True)

    logger.info("Sync started: %s -> %s", paths.claude_dir, paths.root)
    categories = build_categories(paths, exclude)
    for i, category in enumerate(categories, 1):
        step(f"[{i}/{len(categories)}] Checking {category.title}...", echo)
        category.sync(changes)

    logger.info("Sync finished with %d change(s)", len(changes))
    return changes


def report(changes: ChangeSet, now: datetime | None = None) -> None:
    """Print the end-of-pass summary and the commands to commit it.

    Nothing is committed here.
    """
    click.echo()
    if not changes:
        click.secho("=== No changes detected ===", fg="green")
        click.echo("Everything is already in sync.")
        return

    click.secho(f"=== Sync Complete! ({len(changes)} change(s)) ===", fg="green", bold=True)
    click.echo()
    click.echo("Commit changes:")
    click.echo("  git add .")
    click.echo(f"  git commit -m '{commit_message(now=now)}'")
    click.echo("  git push")
