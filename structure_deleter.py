"""
Removes an installed mod from disk by walking its FolderStructure manifest.

The walk is depth-first and post-order: listed files in a directory are
deleted, then each listed subfolder is processed, and finally the directory
itself is removed if it is empty and its name isn't one the base game owns.
Individual failures are logged and skipped; uninstalling never raises.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from folder_structure import FolderStructure

_log = logging.getLogger(__name__)

# Directory names owned by the base game. Never removed, even when empty.
WHITELISTED_DIRS: frozenset[str] = frozenset({
    "bikes",
    "tracks",
    "rider",
    "tyres",
    "misc",
    "fonts",
    "pitboard",
    "animations",
    "boots",
    "helmetcams",
    "helmets",
    "protections",
    "riders",
    "default_mx",
    "enduro",
    "motocross",
    "supercross",
    "supermoto",
})


def _resolve_child(directory: Path, name: str) -> Path:
    """Find ``name`` inside ``directory`` ignoring case (manifest keys are lowercased)."""
    exact = directory / name
    if exact.exists():
        return exact
    try:
        for child in directory.iterdir():
            if child.name.lower() == name.lower() and child.is_dir():
                return child
    except OSError as exc:
        _log.warning("Could not list %s: %s", directory, exc)
    return exact


def _delete_path(path: Path) -> bool:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
        return True
    except FileNotFoundError:
        _log.warning("Already missing: %s", path)
    except OSError as exc:
        _log.error("Could not delete %s: %s", path, exc)
    return False


def delete_structure(structure: FolderStructure, directory: str | Path) -> int:
    """Delete everything ``structure`` records under ``directory``.

    ``directory`` itself is never removed; only directories below it that
    end up empty (and aren't whitelisted) are. Returns the number of
    files removed.
    """
    directory = Path(directory)
    return _delete(structure, directory, is_root=True)


def _delete(structure: FolderStructure, directory: Path, is_root: bool) -> int:
    removed = 0
    for name in sorted(structure.files):
        if _delete_path(directory / name):
            removed += 1
            _log.debug("Removed: %s", directory / name)

    for name, sub in sorted(structure.subfolders.items()):
        removed += _delete(sub, _resolve_child(directory, name), is_root=False)

    if is_root:
        return removed

    try:
        is_empty = not any(directory.iterdir())
    except FileNotFoundError:
        return removed
    except OSError as exc:
        _log.error("Could not inspect %s: %s", directory, exc)
        return removed

    if is_empty and directory.name.lower() not in WHITELISTED_DIRS:
        try:
            directory.rmdir()
            _log.debug("Removed empty dir: %s", directory)
        except OSError as exc:
            _log.error("Could not remove %s: %s", directory, exc)
    return removed
