"""
Routes classified mod content to its place under the mods root.

Every destination decision is table-driven: a Route says where a category
lands, which mod type it implies and which question (if any) has to be asked
first. One generic routine consumes the tables, so adding a category means
adding a row rather than another branch.

Cancelling a question skips only what it was asked for. The exceptions are
the first question of the paint and packaged-model sweeps, which skip the
whole sweep. Copies merge into what is already there and overwrite files of
the same name; nothing is deleted beforehand.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from errors import MissingPrerequisite
from mod_classifier import (
    SCAN_ORDER,
    TRACK_TYPES,
    Category,
    Classification,
    ModType,
    TrackType,
    mod_type_from_mods_subdir,
)
from prompts import Prompter
from signature_scanner import find_files_by_ext
from source_unpacker import sanitize_name

_log = logging.getLogger(__name__)

CREATE_NEW = "Create New"

PromptKind = Literal["none", "bike", "track_folder"]
CopyMode = Literal["dir", "contents"]
InstanceListing = Literal["pkz", "dirs", "dirs_and_pkz"]


@dataclass(frozen=True)
class Route:
    """Where one kind of content goes, relative to the mods root."""

    destination: tuple[str, ...]
    mod_type: ModType
    prompt: PromptKind = "none"
    copy_mode: CopyMode = "dir"


@dataclass(frozen=True)
class PaintTarget:
    """Where paints of one kind go: ``<entity_dir>/<instance>/<subdir>``."""

    entity_dir: tuple[str, ...]
    subdir: str
    mod_type: ModType
    listing: InstanceListing
    noun: str


CATEGORY_ROUTES: dict[Category, Route] = {
    Category.BOOTS: Route(("rider", "boots"), "rider"),
    Category.RIDERS: Route(("rider", "riders"), "rider"),
    Category.HELMETS: Route(("rider", "helmets"), "rider"),
    Category.BIKE: Route(("bikes",), "bike", prompt="bike", copy_mode="contents"),
    Category.SOUND: Route(("bikes",), "bike", prompt="bike", copy_mode="contents"),
    Category.WHEEL: Route(("tyres",), "bike"),
    Category.TYRE: Route(("tyres",), "bike"),
    Category.PROTECTION: Route(("rider", "protections"), "rider"),
    Category.TRACK: Route(("tracks",), "track", prompt="track_folder"),
}

# Offered for unrecognized .edf groups and leftover .pkz files.
MODEL_KINDS: dict[str, Route] = {
    "helmets": Route(("rider", "helmets"), "rider"),
    "boots": Route(("rider", "boots"), "rider"),
    "riders": Route(("rider", "riders"), "rider"),
    "tracks": Route(("tracks",), "track", prompt="track_folder"),
    "bikes": Route(("bikes",), "bike"),
    "tyres": Route(("tyres",), "bike"),
    "protections": Route(("rider", "protections"), "rider"),
    "helmet addon": Route(("rider", "helmetcams"), "rider"),
}

PAINT_KINDS: dict[str, PaintTarget] = {
    "bikes": PaintTarget(("bikes",), "paints", "bike", "pkz", "bike"),
    "helmets": PaintTarget(("rider", "helmets"), "paints", "rider", "dirs_and_pkz", "helmet"),
    "goggles": PaintTarget(("rider", "helmets"), "goggles", "rider", "dirs_and_pkz", "helmet"),
    "boots": PaintTarget(("rider", "boots"), "paints", "rider", "dirs_and_pkz", "boots"),
    "gloves": PaintTarget(("rider", "riders"), "gloves", "rider", "dirs", "rider"),
    "riders": PaintTarget(("rider", "riders"), "paints", "rider", "dirs", "rider"),
    "protections": PaintTarget(("rider", "protections"), "paints", "rider", "dirs_and_pkz", "protection"),
}


class CategoryInstaller:
    """Copies one mod's classified content into ``mods_root``.

    After ``install()`` returns, ``destinations`` lists every path written
    (files and copied directories), ``mod_type`` is the type implied by the
    last category that copied anything and ``track_type`` is set when a track
    went into one of the standard track-type folders.
    """

    def __init__(self, mods_root: str | Path, prompter: Prompter, mod_name: str):
        self.mods_root = Path(mods_root)
        self.prompter = prompter
        self.mod_name = mod_name
        self.destinations: list[Path] = []
        self.mod_type: ModType = "other"
        self.track_type: Optional[TrackType] = None

    # ── Entry point ───────────────────────────────────────────────────

    def install(self, classification: Classification):
        if classification.canonical_dir is not None:
            self.install_canonical(classification.canonical_dir)
            return

        for category in SCAN_ORDER:
            for match in classification.matches.get(category, []):
                if category is Category.UNRECOGNIZED_EDF:
                    self._install_edf_group(match)
                else:
                    self._install_match(CATEGORY_ROUTES[category], match)

        claimed = classification.claimed_dirs()
        self.install_paints(classification.root, claimed)
        self.install_packaged_models(classification.root, claimed)

    # ── Canonical layout ──────────────────────────────────────────────

    def install_canonical(self, mods_dir: Path):
        """Merge an author-supplied ``mods`` folder into the mods root."""
        self.mod_type = mod_type_from_mods_subdir(mods_dir)
        for dirpath, dirnames, filenames in os.walk(mods_dir):
            dirnames.sort()
            rel = Path(dirpath).relative_to(mods_dir)
            target_dir = self.mods_root / rel
            if not dirnames and not filenames:
                target_dir.mkdir(parents=True, exist_ok=True)
                self.destinations.append(target_dir)
                continue
            for filename in sorted(filenames):
                self._copy_into(Path(dirpath) / filename, target_dir)

    # ── Signature categories ──────────────────────────────────────────

    def _install_match(self, route: Route, match: Path):
        dest = self._resolve_destination(route, match.name)
        if dest is None:
            _log.info("Skipped %s", match)
            return

        if route.copy_mode == "contents":
            try:
                children = sorted(match.iterdir())
            except OSError as exc:
                _log.warning("Could not list %s, skipping: %s", match, exc)
                children = []
            copied_any = any([self._copy_into(child, dest) for child in children])
        else:
            copied_any = self._copy_into(match, dest) is not None

        if copied_any:
            self.mod_type = route.mod_type

    def _install_edf_group(self, group: Path):
        kind = self.prompter.ask(
            "Select mod type",
            f"What type of mod is {group.name}?",
            list(MODEL_KINDS),
        )
        if kind is None:
            _log.info("No type selected for %s, skipping", group)
            return
        self._install_match(MODEL_KINDS[kind], group)

    def _resolve_destination(self, route: Route, label: str) -> Optional[Path]:
        base = self.mods_root.joinpath(*route.destination)
        if route.prompt == "bike":
            bike = self._select_bike(label)
            return base / bike if bike else None
        if route.prompt == "track_folder":
            folder = self._select_track_folder()
            return base / folder if folder else None
        return base

    # ── Sweeps ────────────────────────────────────────────────────────

    def install_paints(self, root: Path, exclude_dirs: list[Path]):
        pnts = find_files_by_ext(root, ".pnt", exclude_dirs)
        if not pnts:
            return

        kind = self.prompter.ask(
            "Select paint type",
            "What type of paints are you installing?",
            list(PAINT_KINDS),
        )
        if kind is None:
            _log.info("No paint type selected, skipping %d paint(s)", len(pnts))
            return

        target = PAINT_KINDS[kind]
        instances = self._list_instances(target.entity_dir, target.listing)
        if not instances:
            raise MissingPrerequisite(
                f"Unable to install {kind} paints: no {target.noun} models are installed"
            )

        if len(pnts) == 1:
            message = f"Which {target.noun} does this paint belong to?"
        else:
            message = f"Which {target.noun} do these paints belong to?"
        instance = self.prompter.ask(f"Select a {target.noun}", message, instances)
        if instance is None:
            _log.info("No %s selected, skipping paints", target.noun)
            return

        dest = self.mods_root.joinpath(*target.entity_dir, instance, target.subdir)
        if any([self._copy_into(pnt, dest) for pnt in pnts]):
            self.mod_type = target.mod_type

    def install_packaged_models(self, root: Path, exclude_dirs: list[Path]):
        pkzs = find_files_by_ext(root, ".pkz", exclude_dirs)
        if not pkzs:
            return

        kind = self.prompter.ask(
            "Select mod type",
            f"What type of mod is {self.mod_name}?",
            list(MODEL_KINDS),
        )
        if kind is None:
            _log.info("No model type selected, skipping %d pkz file(s)", len(pkzs))
            return

        route = MODEL_KINDS[kind]
        dest = self._resolve_destination(route, self.mod_name)
        if dest is None:
            return
        if any([self._copy_into(pkz, dest) for pkz in pkzs]):
            self.mod_type = route.mod_type

    # ── Questions ─────────────────────────────────────────────────────

    def _select_bike(self, label: str) -> Optional[str]:
        bikes = self._list_instances(("bikes",), "pkz")
        if not bikes:
            raise MissingPrerequisite(
                f"Unable to install {label}: no bikes are installed to install into"
            )
        return self.prompter.ask("Select a bike", f"Which bike is {label} for?", bikes)

    def _select_track_folder(self) -> Optional[str]:
        existing = self._list_instances(("tracks",), "dirs")
        options = list(TRACK_TYPES) + [
            name for name in existing if name.lower() not in TRACK_TYPES
        ]
        options.append(CREATE_NEW)

        folder = self.prompter.ask(
            "Select Track Type",
            f"What kind of track is {self.mod_name}?",
            options,
        )
        if folder is None:
            return None
        if folder == CREATE_NEW:
            name = self.prompter.ask_text(
                "Create new track folder",
                "Enter a name for the new track folder",
                "",
            )
            if not name or not name.strip():
                return None
            folder = sanitize_name(name.strip())

        if folder.lower() in TRACK_TYPES:
            self.track_type = folder.lower()
        return folder

    def _list_instances(self, entity_dir: tuple[str, ...], listing: InstanceListing) -> list[str]:
        """Names of what's currently installed in ``entity_dir``."""
        directory = self.mods_root.joinpath(*entity_dir)
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name.lower())
        except OSError:
            return []

        names: list[str] = []
        for entry in entries:
            if entry.is_dir() and listing != "pkz":
                name = entry.name
            elif entry.is_file() and entry.suffix.lower() == ".pkz" and listing != "dirs":
                name = entry.stem
            else:
                continue
            if name not in names:
                names.append(name)
        return names

    # ── Copying ───────────────────────────────────────────────────────

    def _copy_into(self, source: Path, dest_dir: Path) -> Optional[Path]:
        """Copy ``source`` (file or directory) to ``dest_dir/<name>``."""
        target = dest_dir / source.name
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                shutil.copy2(source, target)
        except OSError as exc:
            _log.error("Could not copy %s to %s: %s", source, dest_dir, exc)
            return None
        _log.info("Copied: %s -> %s", source.name, dest_dir)
        self.destinations.append(target)
        return target
