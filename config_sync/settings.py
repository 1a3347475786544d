"""Optional repository settings (sync.yaml) and the Slack webhook config."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE = "0 21 * * *"
DEFAULT_BRANCH = "main"

# SLACK_WEBHOOK_URL="https://hooks.slack.com/..."  (shell assignment syntax)
_ASSIGNMENT_RE = re.compile(r"""^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$""")


@dataclass
class Settings:
    schedule: str = DEFAULT_SCHEDULE
    branch: str = DEFAULT_BRANCH
    exclude: set[str] = field(default_factory=set)
    claude_dir: Path | None = None


def load_settings(path: Path) -> Settings:
    """Read sync.yaml, falling back to defaults when absent or unreadable.

    Recognised keys: ``claude_dir`` (live configuration directory; ``~`` is
    expanded and relative paths are taken from the repository root),
    ``schedule`` (cron expression for auto-sync), ``branch`` (branch pushed by
    ``claude-sync push``) and ``exclude`` (item names, such as
    ``my-private-skill`` or ``scripts/secret.sh``, never mirrored).
    """
    if not path.is_file():
        return Settings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.warning("Ignoring invalid %s: %s", path.name, e)
        return Settings()

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping at top level", path.name)
        return Settings()

    settings = Settings()
    if data.get("claude_dir"):
        claude_dir = Path(str(data["claude_dir"]).strip()).expanduser()
        settings.claude_dir = claude_dir if claude_dir.is_absolute() else path.parent / claude_dir
    if data.get("schedule"):
        settings.schedule = str(data["schedule"]).strip()
    if data.get("branch"):
        settings.branch = str(data["branch"]).strip()
    exclude = data.get("exclude") or []
    if isinstance(exclude, str):
        exclude = [exclude]
    settings.exclude = {str(e).strip().rstrip("/") for e in exclude if str(e).strip()}
    return settings


def load_slack_webhook(path: Path) -> str | None:
    """Return SLACK_WEBHOOK_URL from a shell-style .slack-config file, if set."""
    if not path.is_file():
        return None

    for line in path.read_text(encoding="utf-8").splitlines():
        if line.lstrip().startswith("#"):
            continue
        m = _ASSIGNMENT_RE.match(line)
        if not m or m.group(1) != "SLACK_WEBHOOK_URL":
            continue
        value = m.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        return value or None
    return None
