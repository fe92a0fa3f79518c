"""
Decides what an unpacked mod contains.

Two outcomes are possible:

1. Canonical layout -- the author shipped a ``mods`` folder laid out like the
   game's own. Its contents are taken as-is.
2. Heuristic decomposition -- no ``mods`` folder, so every signature scan is
   run and each category gets a list of matched paths:

       boots.edf       -> rider/boots
       rider.edf       -> rider/riders
       helmet.edf      -> rider/helmets
       model.edf       -> bikes/<bike>
       engine.scl      -> bikes/<bike>
       p_mx.edf        -> tyres
       *.tyre          -> tyres
       protection.edf  -> rider/protections
       *.map           -> tracks/<folder>
       leftover *.edf  -> ask the user

Paints (.pnt) and leftover packaged models (.pkz) are swept up afterwards by
the installer, outside anything claimed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal

from signature_scanner import (
    find_deepest_named_subdir,
    find_dirs_containing_file,
    find_files_by_ext,
)

_log = logging.getLogger(__name__)

ModType = Literal["bike", "track", "rider", "other"]
TrackType = Literal["motocross", "supercross", "enduro", "supermoto"]

TRACK_TYPES: tuple[str, ...] = ("motocross", "supercross", "enduro", "supermoto")
CANONICAL_DIR_NAME = "mods"


class Category(str, Enum):
    BOOTS = "boots"
    RIDERS = "riders"
    HELMETS = "helmets"
    BIKE = "bike"
    SOUND = "sound"
    WHEEL = "wheel"
    TYRE = "tyre"
    PROTECTION = "protection"
    TRACK = "track"
    PAINT = "paint"
    PACKAGED_MODEL = "packaged-model"
    UNRECOGNIZED_EDF = "needs-disambiguation"


# Exact filename signatures, in scan order. The match is the containing dir.
FILENAME_SIGNATURES: tuple[tuple[str, Category], ...] = (
    ("boots.edf", Category.BOOTS),
    ("rider.edf", Category.RIDERS),
    ("helmet.edf", Category.HELMETS),
    ("model.edf", Category.BIKE),
    ("engine.scl", Category.SOUND),
    ("p_mx.edf", Category.WHEEL),
    ("protection.edf", Category.PROTECTION),
)

EXTENSION_SIGNATURES: dict[str, Category] = {
    ".tyre": Category.TYRE,
    ".map": Category.TRACK,
    ".pnt": Category.PAINT,
    ".pkz": Category.PACKAGED_MODEL,
    ".edf": Category.UNRECOGNIZED_EDF,
}

# Order in which decomposition runs and the installer processes categories.
SCAN_ORDER: tuple[Category, ...] = (
    Category.BOOTS,
    Category.RIDERS,
    Category.HELMETS,
    Category.BIKE,
    Category.SOUND,
    Category.WHEEL,
    Category.TYRE,
    Category.PROTECTION,
    Category.TRACK,
    Category.UNRECOGNIZED_EDF,
)

_MODS_CHILD_TYPES: dict[str, ModType] = {
    "bikes": "bike",
    "tracks": "track",
    "rider": "rider",
}


@dataclass
class Classification:
    """Result of classifying one unpacked source tree.

    ``canonical_dir`` is set when the canonical fast path applies, in which
    case ``matches`` is empty. Otherwise ``matches`` maps each category in
    ``SCAN_ORDER`` to the directories it claimed.
    """

    root: Path
    canonical_dir: Path | None = None
    matches: dict[Category, list[Path]] = field(default_factory=dict)

    @property
    def is_canonical(self) -> bool:
        return self.canonical_dir is not None

    def claimed_dirs(self) -> list[Path]:
        claimed: list[Path] = []
        for category in SCAN_ORDER:
            for path in self.matches.get(category, []):
                if path not in claimed:
                    claimed.append(path)
        return claimed


def mod_type_from_mods_subdir(mods_dir: str | Path) -> ModType:
    """Infer the mod type from the first-level children of a ``mods`` folder."""
    mods_dir = Path(mods_dir)
    if not mods_dir.is_dir():
        return "other"
    for child in sorted(mods_dir.iterdir()):
        if child.is_dir():
            mod_type = _MODS_CHILD_TYPES.get(child.name.lower())
            if mod_type:
                return mod_type
    return "other"


def _unique_parents(files: list[Path]) -> list[Path]:
    parents: list[Path] = []
    for f in files:
        if f.parent not in parents:
            parents.append(f.parent)
    return parents


def decompose(root: str | Path) -> dict[Category, list[Path]]:
    """Run every signature scan over ``root`` and return the match lists.

    Extension signatures (.tyre, .map) are reported as the directories that
    contain them. Leftover .edf files outside every claimed directory are
    grouped by directory so one mod folder is only asked about once.
    """
    root = Path(root)
    matches: dict[Category, list[Path]] = {}

    for filename, category in FILENAME_SIGNATURES:
        matches[category] = find_dirs_containing_file(root, filename)

    matches[Category.TYRE] = _unique_parents(find_files_by_ext(root, ".tyre"))
    matches[Category.TRACK] = _unique_parents(find_files_by_ext(root, ".map"))

    claimed = [path for paths in matches.values() for path in paths]
    leftover_edfs = find_files_by_ext(root, ".edf", claimed)
    matches[Category.UNRECOGNIZED_EDF] = _unique_parents(leftover_edfs)

    return {category: matches[category] for category in SCAN_ORDER}


def classify(root: str | Path) -> Classification:
    root = Path(root)
    canonical = find_deepest_named_subdir(root, CANONICAL_DIR_NAME)
    if canonical is not None:
        _log.info("Found canonical mods folder at %s", canonical)
        return Classification(root=root, canonical_dir=canonical)

    matches = decompose(root)
    summary = {c.value: len(paths) for c, paths in matches.items() if paths}
    _log.info("Decomposed %s: %s", root, summary or "no signatures")
    return Classification(root=root, matches=matches)
