"""The fixed set of content categories mirrored into the Git tree.

Each category knows where its items live under ``~/.claude`` and where their
copies live in the repository, and mirrors item by item so that every change
is attributable to a single script, skill or hook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import click

from config_sync.mirror import ChangeSet, delete_item, mirror_item
from config_sync.paths import SyncPaths
from config_sync.plugins import count_plugins, sync_plugin_list

logger = logging.getLogger(__name__)

INSTALLED_PLUGINS = "installed_plugins.json"
KNOWN_MARKETPLACES = "known_marketplaces.json"
PLUGIN_MANIFESTS = (INSTALLED_PLUGINS, KNOWN_MARKETPLACES)


def note(changes: ChangeSet, message: str) -> None:
    """Informational line shown under the current step."""
    logger.debug(message.strip())
    if changes.echo:
        click.echo(f"  {message}")


def is_excluded(name: str, label: str, exclude: set[str]) -> bool:
    return name in exclude or label in exclude


class Category:
    """One kind of content synced as a unit of the pass."""

    def sync(self, changes: ChangeSet) -> ChangeSet:
        raise NotImplementedError


@dataclass
class FileCategory(Category):
    """A single file such as settings.json."""

    title: str
    source: Path
    dest: Path
    label: str

    def sync(self, changes: ChangeSet) -> ChangeSet:
        mirror_item(self.source, self.dest, self.label, changes)
        return changes


def _is_file(path: Path) -> bool:
    return path.is_file()


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


@dataclass
class DirectoryCategory(Category):
    """A directory whose immediate entries are mirrored one by one.

    ``item_kind`` is ``"file"`` for flat directories (scripts, hooks) and
    ``"dir"`` for directories of folders (skills). Symlinked folders are left to
    whatever they point at and are not copied.
    """

    title: str
    source_dir: Path
    dest_dir: Path
    prefix: str
    item_kind: str = "file"
    exclude: set[str] = field(default_factory=set)
    show_total: bool = False

    def _accepts(self) -> Callable[[Path], bool]:
        return _is_real_dir if self.item_kind == "dir" else _is_file

    def _present(self, path: Path) -> bool:
        # Deletion only considers the type of item, a symlinked skill still counts
        return path.is_dir() if self.item_kind == "dir" else path.is_file()

    def label_for(self, name: str) -> str:
        return f"{self.prefix}/{name}"

    def sync(self, changes: ChangeSet) -> ChangeSet:
        if not self.source_dir.is_dir():
            logger.debug("No %s directory at %s", self.prefix, self.source_dir)
            return changes

        self.dest_dir.mkdir(parents=True, exist_ok=True)
        accepts = self._accepts()

        for item in sorted(self.source_dir.iterdir()):
            label = self.label_for(item.name)
            if is_excluded(item.name, label, self.exclude) or not accepts(item):
                continue
            mirror_item(item, self.dest_dir / item.name, label, changes)

        for mirrored in sorted(self.dest_dir.iterdir()):
            label = self.label_for(mirrored.name)
            if is_excluded(mirrored.name, label, self.exclude):
                continue
            if not self._present(mirrored) or mirrored.is_symlink():
                continue
            if not self._present(self.source_dir / mirrored.name):
                delete_item(mirrored, label, changes)

        if self.show_total:
            total = sum(1 for p in self.dest_dir.iterdir() if self._present(p))
            note(changes, f"Total {self.prefix}: {total}")
        return changes


@dataclass
class PluginCategory(Category):
    """Plugin manifests plus the derived ``name@scope`` listing.

    Marketplace repositories under plugins/marketplaces are not copied; they
    can be re-registered from known_marketplaces.json.
    """

    title: str
    plugins_dir: Path
    manifests_dir: Path
    plugin_list: Path

    def sync(self, changes: ChangeSet) -> ChangeSet:
        for name in PLUGIN_MANIFESTS:
            source = self.plugins_dir / name
            if source.is_file():
                mirror_item(source, self.manifests_dir / name, f"plugins/manifests/{name}", changes)

        note(changes, f"Total plugins: {count_plugins(self.plugins_dir / INSTALLED_PLUGINS)}")

        marketplaces = self.plugins_dir / "marketplaces"
        if marketplaces.is_dir():
            total = sum(1 for _ in marketplaces.iterdir())
            note(changes, f"Total marketplaces: {total} (re-registered from manifests, not copied)")

        sync_plugin_list(self.plugins_dir / INSTALLED_PLUGINS, self.plugin_list, changes)
        return changes


def build_categories(paths: SyncPaths, exclude: set[str] | None = None) -> list[Category]:
    """All categories in the order a sync pass visits them."""
    exclude = exclude or set()
    return [
        FileCategory(
            title="settings.json",
            source=paths.claude_dir / "settings.json",
            dest=paths.config_dir / "settings.json",
            label="settings.json",
        ),
        DirectoryCategory(
            title="scripts",
            source_dir=paths.claude_dir / "scripts",
            dest_dir=paths.content_dir / "scripts",
            prefix="scripts",
            exclude=exclude,
        ),
        DirectoryCategory(
            title="skills",
            source_dir=paths.claude_dir / "skills",
            dest_dir=paths.content_dir / "skills",
            prefix="skills",
            item_kind="dir",
            exclude=exclude,
            show_total=True,
        ),
        DirectoryCategory(
            title="hooks",
            source_dir=paths.claude_dir / "hooks",
            dest_dir=paths.content_dir / "hooks",
            prefix="hooks",
            exclude=exclude,
        ),
        FileCategory(
            title=".claude.json (MCP servers, plugins)",
            source=paths.global_config,
            dest=paths.config_dir / ".claude.json",
            label=".claude.json",
        ),
        PluginCategory(
            title="plugins",
            plugins_dir=paths.plugins_dir,
            manifests_dir=paths.manifests_dir,
            plugin_list=paths.config_dir / "plugins.txt",
        ),
    ]


def count_mirrored(paths: SyncPaths) -> dict[str, int]:
    """Number of mirrored items per category, for ``claude-sync status``."""
    counts: dict[str, int] = {}
    for name in ("scripts", "hooks"):
        d = paths.content_dir / name
        counts[name] = sum(1 for p in d.iterdir() if p.is_file()) if d.is_dir() else 0
    skills = paths.content_dir / "skills"
    counts["skills"] = sum(1 for p in skills.iterdir() if p.is_dir()) if skills.is_dir() else 0
    counts["plugins"] = count_plugins(paths.manifests_dir / INSTALLED_PLUGINS)
    counts["config"] = sum(
        1 for name in ("settings.json", ".claude.json", "plugins.txt") if (paths.config_dir / name).is_file()
    )
    return counts
