"""
Normalizes an install source into a plain directory tree.

A source may be a folder, a .zip/.7z/.rar archive, or a single packaged
.pkz/.pnt file. Whatever it is, the result is a directory holding the mod's
files that the scanner can walk.
"""

from __future__ import annotations

import logging
import re
import shutil
import sys
import zipfile
from pathlib import Path

import py7zr
import rarfile

from errors import ExtractionFailure, UnsupportedSourceType

_log = logging.getLogger(__name__)

# Point rarfile at UnRAR.exe: frozen exe uses _MEIPASS, dev uses assets/
if getattr(sys, "frozen", False):
    _unrar = Path(sys._MEIPASS) / "UnRAR.exe"
else:
    _unrar = Path(__file__).parent / "assets" / "UnRAR.exe"
if _unrar.exists():
    rarfile.UNRAR_TOOL = str(_unrar)

ARCHIVE_EXTENSIONS = {".zip", ".7z", ".rar"}
PACKAGED_EXTENSIONS = {".pkz", ".pnt"}
SUPPORTED_EXTENSIONS = ARCHIVE_EXTENSIONS | PACKAGED_EXTENSIONS


def sanitize_name(name: str) -> str:
    cleaned = re.sub(r'[<>:"/\\|?*]', "_", name).strip().rstrip(".")
    return cleaned or "UnnamedMod"


def extract_archive(archive_path: str | Path, dest: str | Path):
    """Extract a whole archive into ``dest``, creating it if needed.

    Raises ExtractionFailure on any error. ``dest`` is removed again on
    failure so callers never see a half-extracted tree.
    """
    archive_path = Path(archive_path)
    dest = Path(dest)
    ext = archive_path.suffix.lower()
    if ext not in ARCHIVE_EXTENSIONS:
        raise UnsupportedSourceType(f"Unrecognized compression type: '{archive_path.suffix}'")

    existed = dest.exists()
    dest.mkdir(parents=True, exist_ok=True)
    try:
        if ext == ".zip":
            with zipfile.ZipFile(archive_path, "r") as zf:
                zf.extractall(dest)
        elif ext == ".7z":
            with py7zr.SevenZipFile(archive_path, "r") as sz:
                if sz.needs_password():
                    raise ExtractionFailure("Password protected archives are not supported")
                sz.extractall(dest)
        elif ext == ".rar":
            with rarfile.RarFile(archive_path, "r") as rf:
                if rf.needs_password():
                    raise ExtractionFailure("Password protected archives are not supported")
                rf.extractall(dest)
    except Exception as exc:
        if not existed:
            shutil.rmtree(dest, ignore_errors=True)
        if isinstance(exc, ExtractionFailure):
            raise
        raise ExtractionFailure(
            f"Unable to extract {archive_path.name}: {exc}. "
            "Password protected ZIP, 7z and RAR files are not supported."
        ) from exc


def unpack_source(source: str | Path, dest: str | Path) -> Path:
    """Lay ``source`` out as a directory tree at ``dest`` and return ``dest``.

    Folders are copied in whole (so ``dest/<folder name>/...``), archives are
    extracted into ``dest`` and single packaged files are copied into it.
    """
    source = Path(source)
    dest = Path(dest)

    if not source.exists():
        raise FileNotFoundError(f"Mod source does not exist: {source}")

    if source.is_dir():
        _log.info("Copying folder %s", source)
        dest.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest / source.name, dirs_exist_ok=True)
        return dest

    ext = source.suffix.lower()
    if ext in ARCHIVE_EXTENSIONS:
        _log.info("Extracting %s", source)
        extract_archive(source, dest)
    elif ext in PACKAGED_EXTENSIONS:
        _log.info("Copying packaged file %s", source)
        dest.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest / source.name)
    else:
        raise UnsupportedSourceType(f"Unknown file type for mod: '{source.suffix}'")
    return dest
