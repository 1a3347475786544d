"""Diff-based mirroring of a single source path onto its copy in the Git tree.

An item is either copied (NEW), replaced wholesale because its content differs
(UPDATED), or removed because its source went away (DELETED). Every event is
recorded on a :class:`ChangeSet` that the caller creates per sync pass.
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

import click

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    NEW = "NEW"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


_KIND_COLORS = {
    ChangeKind.NEW: "green",
    ChangeKind.UPDATED: "yellow",
    ChangeKind.DELETED: "red",
}


@dataclass(frozen=True)
class Change:
    kind: ChangeKind
    label: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.label}"


@dataclass
class ChangeSet:
    """Accumulates the change events of one sync pass."""

    changes: list[Change] = field(default_factory=list)
    echo: bool = True

    def record(self, kind: ChangeKind, label: str) -> Change:
        change = Change(kind, label)
        self.changes.append(change)
        logger.info("%s", change)
        if self.echo:
            click.echo("  " + click.style(f"[{kind.value}]", fg=_KIND_COLORS[kind]) + f" {label}")
        return change

    def of_kind(self, kind: ChangeKind) -> list[Change]:
        return [c for c in self.changes if c.kind is kind]

    def labels(self) -> list[str]:
        return [c.label for c in self.changes]

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)


def trees_differ(left: Path, right: Path) -> bool:
    """Recursive content comparison of two directories (``diff -q -r``).

    Any file present on one side only, any type mismatch, or any file whose
    bytes differ makes the trees different.
    """
    # Stat signatures collide when a file is rewritten within one mtime tick
    filecmp.clear_cache()
    cmp = filecmp.dircmp(left, right, ignore=[])
    return _dircmp_differs(cmp)


def _links_differ(left: Path, right: Path) -> bool:
    if not (left.is_symlink() and right.is_symlink()):
        return True
    return os.readlink(left) != os.readlink(right)


def _dircmp_differs(cmp: filecmp.dircmp) -> bool:
    if cmp.left_only or cmp.right_only:
        return True

    # Links are copied as links, so compare their targets instead of following them
    links = set()
    for name in cmp.common:
        left, right = Path(cmp.left, name), Path(cmp.right, name)
        if left.is_symlink() or right.is_symlink():
            if _links_differ(left, right):
                return True
            links.add(name)

    if any(name not in links for name in cmp.common_funny):
        return True
    # dircmp only compares stat signatures; check bytes for the rest
    files = [name for name in cmp.common_files if name not in links]
    _, mismatch, errors = filecmp.cmpfiles(cmp.left, cmp.right, files, shallow=False)
    if mismatch or errors:
        return True
    return any(_dircmp_differs(sub) for name, sub in cmp.subdirs.items() if name not in links)


def files_differ(left: Path, right: Path) -> bool:
    """Byte-level comparison of two regular files."""
    if not right.is_file():
        return True
    filecmp.clear_cache()
    return not filecmp.cmp(left, right, shallow=False)


def copy_item(source: Path, dest: Path) -> None:
    """Copy a file or a directory tree to ``dest``, creating parents."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(source, dest, symlinks=True)
    else:
        shutil.copy2(source, dest)


def remove_item(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def mirror_item(source: Path, dest: Path, label: str, changes: ChangeSet) -> Change | None:
    """Bring ``dest`` in line with ``source`` and record what happened.

    A missing source is a no-op. A directory that differs in any way is removed
    and copied again in full rather than merged.
    """
    if not source.exists():
        logger.debug("Skipping %s: %s does not exist", label, source)
        return None

    if not dest.exists() and not dest.is_symlink():
        copy_item(source, dest)
        return changes.record(ChangeKind.NEW, label)

    if source.is_dir():
        if dest.is_dir() and not dest.is_symlink() and not trees_differ(source, dest):
            return None
        remove_item(dest)
        copy_item(source, dest)
        return changes.record(ChangeKind.UPDATED, label)

    if dest.is_symlink() or dest.is_dir():
        remove_item(dest)
    elif not files_differ(source, dest):
        return None
    copy_item(source, dest)
    return changes.record(ChangeKind.UPDATED, label)


def delete_item(dest: Path, label: str, changes: ChangeSet) -> Change:
    """Remove a mirrored item whose source no longer exists."""
    remove_item(dest)
    return changes.record(ChangeKind.DELETED, label)
