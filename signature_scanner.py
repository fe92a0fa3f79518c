"""
Recursive search primitives used to figure out what a mod contains.

All scans walk entries in name order so the same tree always yields the same
results. A directory that can't be listed counts as empty: it is logged and
the rest of the scan continues.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

_log = logging.getLogger(__name__)


def _list_dir(directory: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        _log.warning("Skipping unreadable directory %s: %s", directory, exc)
        return []


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def find_dirs_containing_file(root: str | Path, filename: str) -> list[Path]:
    """Return every directory under ``root`` (inclusive) holding ``filename``.

    The match is exact and case-sensitive. Directories below a match are
    still searched.
    """
    root = Path(root)
    found: list[Path] = []
    for entry in _list_dir(root):
        if entry.name == filename and not _is_dir(entry):
            found.append(root)
        elif _is_dir(entry):
            found.extend(find_dirs_containing_file(entry.path, filename))
    return found


def find_files_by_ext(
    root: str | Path,
    ext: str,
    exclude_dirs: list[Path] | None = None,
) -> list[Path]:
    """Return files under ``root`` ending in ``ext`` (case-insensitive).

    Any directory listed in ``exclude_dirs`` is skipped along with its whole
    subtree, including ``root`` itself.
    """
    if not ext.startswith("."):
        ext = "." + ext
    ext = ext.lower()
    excluded = {Path(d) for d in exclude_dirs or []}
    return _find_files_by_ext(Path(root), ext, excluded)


def _find_files_by_ext(directory: Path, ext: str, excluded: set[Path]) -> list[Path]:
    if directory in excluded:
        return []
    files: list[Path] = []
    for entry in _list_dir(directory):
        if _is_dir(entry):
            files.extend(_find_files_by_ext(Path(entry.path), ext, excluded))
        elif os.path.splitext(entry.name)[1].lower() == ext:
            files.append(Path(entry.path))
    return files


def find_deepest_named_subdir(root: str | Path, name: str) -> Path | None:
    """Return the deepest directory below ``root`` named ``name`` (any case).

    A match nested further from ``root`` wins over a shallower one; between
    matches at the same depth the first in name order wins.
    """
    target = name.lower()
    deepest: Path | None = None
    max_depth = -1

    def visit(directory: Path, depth: int):
        nonlocal deepest, max_depth
        for entry in _list_dir(directory):
            if not _is_dir(entry):
                continue
            if entry.name.lower() == target and depth > max_depth:
                max_depth = depth
                deepest = Path(entry.path)
            visit(Path(entry.path), depth + 1)

    visit(Path(root), 0)
    return deepest
