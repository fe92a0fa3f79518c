"""
Install and uninstall orchestration.

install():
    1. unpack the source into a private scratch directory
    2. classify it (canonical ``mods`` folder or heuristic decomposition)
    3. route each category into the mods root, asking the user where needed
    4. build the ownership manifest from what is now on disk

Each install gets its own scratch directory, removed afterwards on a best
effort basis. Only unsupported sources, extraction failures and missing
prerequisites abort an install, and an aborted install removes anything it
had already copied into the mods root. Everything else degrades to a partial
install with the problem logged.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from category_installer import CategoryInstaller
from folder_structure import FolderStructure
from mod_classifier import classify
from mod_registry import Mod
from prompts import Prompter
from source_unpacker import sanitize_name, unpack_source
from structure_deleter import delete_structure

_log = logging.getLogger(__name__)

SCRATCH_PREFIX = "mxb-mod-extract-"


class ModInstaller:
    def __init__(self, mods_dir: str | Path, prompter: Prompter):
        self.mods_dir = Path(mods_dir)
        self.prompter = prompter

    def set_mods_dir(self, mods_dir: str | Path):
        self.mods_dir = Path(mods_dir)

    def install(self, source: str | Path, name: str | None = None) -> Mod:
        source = Path(source)
        mod_name = name or source.stem
        _log.info("Installing %s as '%s'", source, mod_name)

        with tempfile.TemporaryDirectory(
            prefix=SCRATCH_PREFIX, ignore_cleanup_errors=True
        ) as scratch:
            tmp_src = unpack_source(source, Path(scratch) / sanitize_name(mod_name))
            classification = classify(tmp_src)

            installer = CategoryInstaller(self.mods_dir, self.prompter, mod_name)
            try:
                installer.install(classification)
            except Exception:
                self._roll_back(mod_name, installer.destinations)
                raise

            files = FolderStructure.from_destinations(self.mods_dir, installer.destinations)

        mod = Mod(
            name=mod_name,
            type=installer.mod_type,
            track_type=installer.track_type if installer.mod_type == "track" else None,
            files=files,
        )
        _log.info(
            "Installed '%s' (%s): %d file(s)",
            mod.name, mod.type, sum(1 for _ in files.iter_files()),
        )
        return mod

    def _roll_back(self, mod_name: str, destinations: list[Path]):
        """Remove whatever an aborted install already copied into the mods root."""
        if not destinations:
            return
        partial = FolderStructure.from_destinations(self.mods_dir, destinations)
        removed = delete_structure(partial, self.mods_dir)
        _log.warning("Install of '%s' aborted, rolled back %d file(s)", mod_name, removed)

    def uninstall(self, mod: Mod) -> int:
        _log.info("Uninstalling '%s'", mod.name)
        return delete_structure(mod.files, self.mods_dir)
