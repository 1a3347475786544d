"""
claude-sync: back up ~/.claude into a Git repository.

Usage:
    claude-sync sync            # mirror changes into the repo and report them
    claude-sync quick           # sync, then commit and push
    claude-sync backup          # recopy everything regardless of changes
    claude-sync status          # file counts, lock, schedule and git status
    claude-sync push            # commit pending changes and push to origin
    claude-sync auto-enable     # run `claude-sync auto` daily from cron
    claude-sync auto-disable

The repository root defaults to ~/claude-config-sync (CS_ROOT overrides it) and
the source directory to ~/.claude (CS_CLAUDE_DIR, or claude_dir in sync.yaml,
overrides it).
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from pathlib import Path

import click

from config_sync import git, notify, schedule
from config_sync.backup import run_backup
from config_sync.categories import count_mirrored
from config_sync.errors import ConfigSyncError
from config_sync.lock import SyncLock, lock_is_held, read_marker
from config_sync.logs import setup_logging
from config_sync.paths import SyncPaths
from config_sync.settings import Settings, load_settings, load_slack_webhook
from config_sync.sync import check_root, commit_message, report, run_sync

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    paths: SyncPaths
    settings: Settings
    webhook_url: str | None


pass_app = click.make_pass_decorator(AppContext)


def _header(title: str) -> None:
    click.echo()
    click.secho(f"=== {title} ===", bold=True)
    click.echo()


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Sync repository root (default: $CS_ROOT or ~/claude-config-sync)",
)
@click.option(
    "--claude-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Live configuration directory (default: $CS_CLAUDE_DIR, claude_dir in sync.yaml, or ~/.claude)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.version_option(package_name="claude-config-sync")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, claude_dir: Path | None, verbose: bool) -> None:
    """Back up ~/.claude into a Git repository, incrementally."""
    paths = SyncPaths.from_env(root=root)
    # Only log to file inside an existing repo, so a typo'd root is not created
    setup_logging(paths.log_file if paths.root.is_dir() else None, verbose=verbose)
    settings = load_settings(paths.settings_file)
    paths = SyncPaths.from_env(
        root=paths.root,
        claude_dir=claude_dir,
        configured_claude_dir=settings.claude_dir,
    )
    ctx.obj = AppContext(
        paths=paths,
        settings=settings,
        webhook_url=load_slack_webhook(paths.slack_config),
    )


@cli.command("sync")
@pass_app
def sync_cmd(app: AppContext) -> None:
    """Mirror new, updated and deleted items into the repository."""
    check_root(app.paths)
    with SyncLock(app.paths):
        changes = run_sync(app.paths, exclude=app.settings.exclude)
    report(changes)


@cli.command()
@pass_app
def quick(app: AppContext) -> None:
    """Sync, then commit and push in one go."""
    repo = app.paths.root
    check_root(app.paths)
    git.check_git(repo)

    with SyncLock(app.paths):
        _header("Quick Sync")
        changes = run_sync(app.paths, exclude=app.settings.exclude)
        report(changes)

        _header("Committing & Pushing")
        message = commit_message()
        if not git.commit_all(repo, message, git.COMMIT_BODY):
            click.echo("No changes to commit.")
            return
        git.push(repo)

    count = git.files_in_last_commit(repo)
    notify.notify(
        app.webhook_url,
        f"✅ Manual sync complete!\n\n*Changes:* {count} file(s) updated\n"
        f"*Commit:* {message}\n*Host:* {socket.gethostname()}",
        notify.COLOR_OK,
    )
    _header("Done!")


@cli.command(hidden=True)
@pass_app
def auto(app: AppContext) -> None:
    """Unattended sync + commit + push, run from cron."""
    repo = app.paths.root
    logger.info("=== Auto-sync started ===")
    try:
        check_root(app.paths)
        git.check_git(repo)
        with SyncLock(app.paths):
            notify.notify(app.webhook_url, "🔄 Auto-sync started", notify.COLOR_INFO)
            run_sync(app.paths, exclude=app.settings.exclude, echo=False)

            if not git.has_changes(repo):
                logger.info("=== Auto-sync complete (no changes) ===")
                return

            message = commit_message("Auto-sync")
            git.commit_all(repo, message)
            git.push(repo)
    except ConfigSyncError as e:
        logger.error("Auto-sync failed: %s", e.format_message())
        notify.notify(app.webhook_url, f"❌ Auto-sync failed: {e.format_message()}", notify.COLOR_ERROR)
        raise

    logger.info("=== Auto-sync complete (changes pushed) ===")
    count = git.files_in_last_commit(repo)
    notify.notify(
        app.webhook_url,
        f"✅ Sync complete!\n\n*Changes:* {count} file(s) updated\n"
        f"*Commit:* {message}\n*Host:* {socket.gethostname()}",
        notify.COLOR_OK,
    )


@cli.command()
@pass_app
def backup(app: AppContext) -> None:
    """Recopy settings, scripts, skills and hooks regardless of changes."""
    check_root(app.paths)
    with SyncLock(app.paths):
        run_backup(app.paths)


@cli.command()
@pass_app
def status(app: AppContext) -> None:
    """Show mirrored file counts, lock and schedule state, and git status."""
    paths = app.paths
    check_root(paths)

    click.secho("=== Claude Code Config Sync - Status ===", bold=True)
    click.echo(f"Repository: {paths.root}")
    click.echo(f"Source:     {paths.claude_dir}")
    click.echo()
    for name, count in count_mirrored(paths).items():
        click.echo(f"  {name:10s} {count}")
    click.echo()

    marker = read_marker(paths)
    if lock_is_held(paths):
        holder = f"PID {marker.pid} ({int(marker.age() // 60)} min)" if marker else "yes"
        click.echo(f"Sync in progress: {holder}")
    elif marker:
        click.echo(f"Sync in progress: no (stale marker from PID {marker.pid})")
    else:
        click.echo("Sync in progress: no")

    try:
        scheduled = "enabled" if schedule.is_enabled(schedule.read_crontab()) else "disabled"
    except ConfigSyncError:
        scheduled = "unavailable (no crontab)"
    click.echo(f"Auto-sync: {scheduled}")

    if not (paths.root / ".git").exists():
        click.secho("Git repository not initialized", fg="yellow")
        return
    click.echo()
    click.echo("Git status:")
    output = git.short_status(paths.root)
    click.echo(output.rstrip() if output.strip() else "  clean")


@cli.command()
@pass_app
def push(app: AppContext) -> None:
    """Commit any pending changes and push to origin."""
    repo = app.paths.root
    check_root(app.paths)
    git.check_git(repo)

    url = git.remote_url(repo)
    if url is None:
        raise ConfigSyncError(
            "No git remote 'origin' found.\n"
            "To add a remote, run:\n"
            "  git remote add origin <your-repo-url>"
        )
    click.echo(f"Remote: {url}")

    if git.has_changes(repo):
        click.echo("Found uncommitted changes. Committing...")
        git.commit_all(repo, "Update Claude Code config")
        click.echo("  ✓ Committed changes")
    else:
        click.echo("No uncommitted changes.")

    click.echo("Pushing to remote...")
    git.push(repo, remote="origin", branch=app.settings.branch)
    click.secho("=== Push Complete! ===", fg="green")


@cli.command("auto-enable")
@pass_app
def auto_enable(app: AppContext) -> None:
    """Run an unattended sync + push every day from cron."""
    check_root(app.paths)
    schedule.enable(app.paths, app.settings.schedule)
    click.secho("✓ Auto-sync enabled!", fg="green")
    click.echo(f"Schedule: {app.settings.schedule}")
    click.echo(f"Log file: {app.paths.auto_log_file}")
    click.echo("To disable: claude-sync auto-disable")


@cli.command("auto-disable")
def auto_disable() -> None:
    """Remove the daily cron entry."""
    if schedule.disable():
        click.secho("✓ Auto-sync disabled", fg="green")
    else:
        click.echo("Auto-sync was not enabled")
    click.echo("To re-enable: claude-sync auto-enable")


@cli.command("help")
@click.pass_context
def help_cmd(ctx: click.Context) -> None:
    """Show this message and exit."""
    click.echo(ctx.parent.get_help())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
