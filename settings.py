"""
Application settings: where the game lives and where its mods folder is.

config.ini::

    [settings]
    base_game_folder = C:\\Program Files (x86)\\Steam\\steamapps\\common\\MX Bikes
    mods_folder = C:\\Users\\me\\Documents\\PiBoSo\\MX Bikes\\mods

The mods folder is normally read from the game's own ``mxbikes.ini``
(``[mods]`` ``folder=``) and falls back to Documents/PiBoSo/MX Bikes/mods.
"""

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path

_log = logging.getLogger(__name__)

APP_DIR_NAME = "MXBModManager"
SECTION = "settings"
DEFAULT_BASE_GAME_FOLDER = r"C:\Program Files (x86)\Steam\steamapps\common\MX Bikes"
GAME_EXE = "mxbikes.exe"
GAME_INI = "mxbikes.ini"

# Base game directories expected under the mods root.
BASE_GAME_DIRS = ("bikes", "tracks", "rider", "tyres")


@dataclass
class Settings:
    base_game_folder: str = ""
    mods_folder: str = ""


def app_data_dir() -> Path:
    return Path(os.environ.get("APPDATA", Path.home())) / APP_DIR_NAME


def default_config_path() -> Path:
    return app_data_dir() / "config.ini"


def default_data_file() -> Path:
    return app_data_dir() / "ModsData" / "mods.json"


def default_mods_folder() -> Path:
    return Path.home() / "Documents" / "PiBoSo" / "MX Bikes" / "mods"


def is_base_game_folder(path: str | Path) -> bool:
    path = Path(path)
    return (path / GAME_EXE).is_file() and (path / GAME_INI).is_file()


def mods_folder_from_game_config(base_game_folder: str | Path) -> Path:
    """Read the mods folder out of the game's mxbikes.ini."""
    ini_path = Path(base_game_folder) / GAME_INI
    parser = configparser.ConfigParser(strict=False, interpolation=None)
    try:
        parser.read(ini_path, encoding="utf-8")
    except configparser.Error as exc:
        _log.warning("Could not parse %s: %s", ini_path, exc)
        return default_mods_folder()

    folder = parser.get("mods", "folder", fallback="").strip().strip('"')
    return Path(folder) if folder else default_mods_folder()


def load_settings(config_path: str | Path | None = None) -> Settings:
    config_path = Path(config_path) if config_path else default_config_path()
    parser = configparser.ConfigParser(interpolation=None)
    if config_path.exists():
        try:
            parser.read(config_path, encoding="utf-8")
        except configparser.Error as exc:
            _log.warning("Ignoring unreadable config %s: %s", config_path, exc)

    settings = Settings(
        base_game_folder=parser.get(SECTION, "base_game_folder", fallback=""),
        mods_folder=parser.get(SECTION, "mods_folder", fallback=""),
    )
    if not settings.base_game_folder and is_base_game_folder(DEFAULT_BASE_GAME_FOLDER):
        settings.base_game_folder = DEFAULT_BASE_GAME_FOLDER
    if settings.base_game_folder and not settings.mods_folder:
        if is_base_game_folder(settings.base_game_folder):
            settings.mods_folder = str(mods_folder_from_game_config(settings.base_game_folder))
    return settings


def save_settings(settings: Settings, config_path: str | Path | None = None):
    config_path = Path(config_path) if config_path else default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    parser = configparser.ConfigParser(interpolation=None)
    parser[SECTION] = {
        "base_game_folder": settings.base_game_folder,
        "mods_folder": settings.mods_folder,
    }
    with config_path.open("w", encoding="utf-8") as f:
        parser.write(f)
