"""Flatten installed_plugins.json into a ``name@scope`` listing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from config_sync.mirror import Change, ChangeSet, mirror_item

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "user"
PLUGIN_LIST_LABEL = "plugins.txt"


class ManifestError(ValueError):
    """installed_plugins.json could not be read as a plugin mapping."""


def _scope_of(records: Any) -> str:
    if not isinstance(records, list):
        raise ManifestError(f"expected a list of installations, got {type(records).__name__}")
    if not records:
        return DEFAULT_SCOPE
    first = records[0]
    if not isinstance(first, dict):
        raise ManifestError(f"expected an installation record, got {type(first).__name__}")
    scope = first.get("scope")
    # null and false both fall back to the default scope
    if scope is None or scope is False:
        return DEFAULT_SCOPE
    return str(scope)


def extract_plugin_entries(manifest: Any) -> list[str]:
    """Return ``name@scope`` for each plugin, in document order.

    The scope comes from the first installation record and defaults to
    ``user``.
    """
    if not isinstance(manifest, dict) or not isinstance(manifest.get("plugins"), dict):
        raise ManifestError("missing 'plugins' mapping")
    return [f"{name}@{_scope_of(records)}" for name, records in manifest["plugins"].items()]


def read_plugin_entries(manifest_path: Path) -> list[str]:
    """Parse a manifest file; raises ManifestError on malformed content."""
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestError(f"invalid JSON: {e}") from e
    return extract_plugin_entries(manifest)


def count_plugins(manifest_path: Path) -> int:
    """Number of installed plugins, or 0 when the manifest is missing or malformed."""
    if not manifest_path.is_file():
        return 0
    try:
        return len(read_plugin_entries(manifest_path))
    except ManifestError:
        return 0


def sync_plugin_list(manifest_path: Path, dest: Path, changes: ChangeSet) -> Change | None:
    """Regenerate the plugin listing and mirror it onto ``dest`` if it changed.

    Best effort: a missing, malformed or empty manifest leaves ``dest`` alone.
    """
    if not manifest_path.is_file():
        return None

    try:
        entries = read_plugin_entries(manifest_path)
    except (ManifestError, UnicodeDecodeError) as e:
        logger.warning("Skipping plugin list, cannot parse %s: %s", manifest_path, e)
        return None

    if not entries:
        logger.debug("No plugins listed in %s", manifest_path)
        return None

    dest.parent.mkdir(parents=True, exist_ok=True)
    staged = dest.with_name(dest.name + ".new")
    staged.write_text("".join(f"{e}\n" for e in entries), encoding="utf-8")
    try:
        return mirror_item(staged, dest, PLUGIN_LIST_LABEL, changes)
    finally:
        staged.unlink(missing_ok=True)
