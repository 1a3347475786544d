"""Thin wrappers around the git CLI for committing and pushing the mirror."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from config_sync.errors import GitCommandError, GitNotInitializedError

logger = logging.getLogger(__name__)

COMMIT_BODY = "Auto-synced from ~/.claude"


def run(repo: Path, cmd: list[str], check: bool = False) -> subprocess.CompletedProcess:
    """Run a command in the repo directory, logging it for traceability."""
    logger.debug("Running: %s", " ".join(cmd))
    result = subprocess.run(
        cmd,
        cwd=repo,
        capture_output=True,
        text=True,
    )
    if result.stdout.strip():
        logger.debug("stdout: %s", result.stdout.strip())
    if result.stderr.strip():
        logger.debug("stderr: %s", result.stderr.strip())
    if check and result.returncode != 0:
        raise GitCommandError(cmd, result.stderr)
    return result


def check_git(repo: Path) -> None:
    if not (repo / ".git").exists():
        raise GitNotInitializedError(f"Git repository not initialized\nRun: cd {repo} && git init")


def has_changes(repo: Path) -> bool:
    """Check if the working tree has any uncommitted changes, untracked included."""
    result = run(repo, ["git", "status", "--porcelain"])
    return bool(result.stdout.strip())


def stage_all(repo: Path) -> None:
    run(repo, ["git", "add", "-A"], check=True)


def has_staged_changes(repo: Path) -> bool:
    result = run(repo, ["git", "diff", "--cached", "--quiet"])
    return result.returncode != 0


def commit(repo: Path, message: str, body: str | None = None) -> None:
    cmd = ["git", "commit", "-m", message]
    if body:
        cmd += ["-m", body]
    run(repo, cmd, check=True)
    logger.info("Committed: %s", message)


def push(repo: Path, remote: str | None = None, branch: str | None = None) -> None:
    cmd = ["git", "push"]
    if remote and branch:
        cmd += ["-u", remote, branch]
    run(repo, cmd, check=True)
    logger.info("Pushed to %s.", remote or "upstream")


def files_in_last_commit(repo: Path) -> int:
    """Number of files touched by HEAD."""
    result = run(repo, ["git", "show", "--name-only", "--pretty=format:", "HEAD"])
    if result.returncode != 0:
        return 0
    return len([line for line in result.stdout.splitlines() if line.strip()])


def remote_url(repo: Path, remote: str = "origin") -> str | None:
    result = run(repo, ["git", "remote", "get-url", remote])
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def short_status(repo: Path) -> str:
    return run(repo, ["git", "status", "--short"], check=True).stdout


def commit_all(repo: Path, message: str, body: str | None = None) -> bool:
    """Stage everything and commit. Returns False when there was nothing to commit."""
    stage_all(repo)
    if not has_staged_changes(repo):
        logger.info("Nothing staged after git add, nothing to commit.")
        return False
    commit(repo, message, body)
    return True
