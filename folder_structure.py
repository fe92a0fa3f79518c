"""
Ownership manifest for an installed mod.

A FolderStructure mirrors a slice of the mods root: ``files`` are the leaf
filenames in one directory and ``subfolders`` maps (lowercased) directory
names to nested structures. It is always built from a live directory listing
after an install has finished copying, never from the install plan, and it
is not modified afterwards. Uninstalling walks it to know what to delete.

Serialized form (stored per mod in the registry)::

    {
        "files": [],
        "subfolders": {
            "bikes": {"files": ["Yamaha.pkz"], "subfolders": {}}
        }
    }
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_serializer

_log = logging.getLogger(__name__)


class FolderStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    files: frozenset[str] = Field(default_factory=frozenset)
    subfolders: dict[str, FolderStructure] = Field(default_factory=dict)

    @field_serializer("files")
    def _sorted_files(self, files: frozenset[str]) -> list[str]:
        return sorted(files)

    # ── Construction ──────────────────────────────────────────────────

    @classmethod
    def build(cls, location: str | Path) -> FolderStructure:
        """Record everything currently inside ``location``."""
        return _freeze(_scan(Path(location)))

    @classmethod
    def from_destinations(
        cls, root: str | Path, destinations: Iterable[str | Path]
    ) -> FolderStructure:
        """Build a manifest rooted at ``root`` covering ``destinations``.

        Each destination is a path under ``root`` that an install wrote. A
        file is recorded if it exists; a directory is recorded together with
        its entire current contents. Paths outside ``root`` or no longer on
        disk are skipped.
        """
        root = Path(root)
        tree = _new_node()
        for dest in destinations:
            dest = Path(dest)
            try:
                rel_parts = dest.relative_to(root).parts
            except ValueError:
                _log.warning("Ignoring destination outside %s: %s", root, dest)
                continue
            if not rel_parts:
                _merge(tree, _scan(root))
                continue

            if dest.is_dir():
                node = tree
                for part in rel_parts:
                    node = node["subfolders"].setdefault(part.lower(), _new_node())
                _merge(node, _scan(dest))
            elif dest.is_file():
                node = tree
                for part in rel_parts[:-1]:
                    node = node["subfolders"].setdefault(part.lower(), _new_node())
                node["files"].add(rel_parts[-1])
            else:
                _log.warning("Destination missing after copy: %s", dest)
        return _freeze(tree)

    # ── Queries ───────────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return not self.files and not self.subfolders

    def iter_files(self) -> Iterator[str]:
        """Yield every recorded file as a '/'-joined path relative to the root."""
        for name in sorted(self.files):
            yield name
        for dirname, sub in sorted(self.subfolders.items()):
            for rel in sub.iter_files():
                yield f"{dirname}/{rel}"

    def iter_dirs(self) -> Iterator[str]:
        for dirname, sub in sorted(self.subfolders.items()):
            yield dirname
            for rel in sub.iter_dirs():
                yield f"{dirname}/{rel}"


FolderStructure.model_rebuild()


def _new_node() -> dict:
    return {"files": set(), "subfolders": {}}


def _scan(location: Path) -> dict:
    node = _new_node()
    try:
        with os.scandir(location) as it:
            entries = list(it)
    except OSError as exc:
        _log.warning("Could not list %s while building manifest: %s", location, exc)
        return node

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            child = node["subfolders"].setdefault(entry.name.lower(), _new_node())
            _merge(child, _scan(Path(entry.path)))
        else:
            node["files"].add(entry.name)
    return node


def _merge(into: dict, other: dict):
    into["files"].update(other["files"])
    for name, sub in other["subfolders"].items():
        _merge(into["subfolders"].setdefault(name, _new_node()), sub)


def _freeze(node: dict) -> FolderStructure:
    return FolderStructure(
        files=frozenset(node["files"]),
        subfolders={name: _freeze(sub) for name, sub in node["subfolders"].items()},
    )
