"""
Persisted record of installed mods, keyed by display name.

Stored as JSON::

    {
        "version": 1,
        "mods": {
            "<name>": {"name": ..., "type": ..., "track_type": ...,
                       "install_date": ..., "files": {<FolderStructure>}}
        }
    }

A mod's ``files`` manifest is the only record of what it owns on disk.
Re-installing under the same name replaces the whole record.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, Field

from folder_structure import FolderStructure
from mod_classifier import ModType, TrackType

REGISTRY_VERSION = 1

_log = logging.getLogger(__name__)


class Mod(BaseModel):
    name: str
    type: ModType = "other"
    track_type: Optional[TrackType] = None
    install_date: str = Field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    files: FolderStructure = Field(default_factory=FolderStructure)


class ModRegistry:
    def __init__(self, data_file: str | Path):
        self.data_file = Path(data_file)
        self._mods: dict[str, Mod] = {}

    def load(self):
        if not self.data_file.exists():
            self._mods = {}
            return
        try:
            data = json.loads(self.data_file.read_text(encoding="utf-8") or "{}")
            if data and data.get("version") != REGISTRY_VERSION:
                raise ValueError(f"Unsupported registry version: {data.get('version')!r}")
            self._mods = {
                name: Mod.model_validate(rec)
                for name, rec in data.get("mods", {}).items()
            }
            _log.info("Loaded %d installed mod(s) from %s", len(self._mods), self.data_file)
        except Exception as exc:
            _log.warning("Could not load mod registry %s: %s", self.data_file, exc)
            self._mods = {}
            self.save()

    def save(self):
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        self.data_file.write_text(
            json.dumps(
                {
                    "version": REGISTRY_VERSION,
                    "mods": {
                        name: mod.model_dump(mode="json")
                        for name, mod in self._mods.items()
                    },
                },
                indent=2,
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )

    def get(self, name: str) -> Optional[Mod]:
        return self._mods.get(name)

    def put(self, mod: Mod):
        self._mods[mod.name] = mod

    def remove(self, name: str) -> Optional[Mod]:
        return self._mods.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._mods, key=str.lower)

    def __contains__(self, name: object) -> bool:
        return name in self._mods

    def __iter__(self) -> Iterator[Mod]:
        return iter(list(self._mods.values()))

    def __len__(self) -> int:
        return len(self._mods)
