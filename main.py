#!/usr/bin/env python3
"""MX Bikes Mod Manager - Entry Point"""

import argparse
import faulthandler
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from settings import (
    app_data_dir,
    default_data_file,
    is_base_game_folder,
    load_settings,
    mods_folder_from_game_config,
    save_settings,
)


LOG_FILENAME = "mxbmodmanager.log"
CRASH_FILENAME = "crash.log"
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s: %(message)s"


def setup_logging(log_dir: Path | None = None) -> logging.Logger:
    """Send every module's log records to a rotating file in the app data dir."""
    log_dir = log_dir or app_data_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=1024 * 1024,
        backupCount=2,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    return logging.getLogger("mxbmodmanager")


def install_crash_handler(logger: logging.Logger, log_dir: Path | None = None):
    log_dir = log_dir or app_data_dir()

    def log_unhandled(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical(
            "Unhandled exception:\n%s",
            "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        )

    sys.excepthook = log_unhandled

    # Native crashes bypass logging; faulthandler needs its own open file.
    crash_file = (log_dir / CRASH_FILENAME).open("w", encoding="utf-8")
    faulthandler.enable(crash_file, all_threads=True)
    return crash_file


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MX Bikes Mod Manager")
    parser.add_argument("--mods-dir", help="Override the mods folder")
    parser.add_argument("--game-dir", help="Base game folder (contains mxbikes.exe)")
    parser.add_argument("--config", help="Path to config.ini")
    parser.add_argument("--data-file", help="Path to the installed mods registry")

    sub = parser.add_subparsers(dest="command", required=True)
    install = sub.add_parser("install", help="Install one or more mods")
    install.add_argument("sources", nargs="+", help="Folder, .zip/.7z/.rar, .pkz or .pnt")
    uninstall = sub.add_parser("uninstall", help="Uninstall a mod by name")
    uninstall.add_argument("name")
    rename = sub.add_parser("rename", help="Change an installed mod's name")
    rename.add_argument("old_name")
    rename.add_argument("new_name")
    sub.add_parser("list", help="List installed mods")
    return parser.parse_args(argv)


def resolve_mods_dir(args: argparse.Namespace) -> Path | None:
    settings = load_settings(args.config)
    if args.game_dir:
        if not is_base_game_folder(args.game_dir):
            print(f"Could not find MX Bikes in {args.game_dir}")
            return None
        settings.base_game_folder = args.game_dir
        settings.mods_folder = str(mods_folder_from_game_config(args.game_dir))
        save_settings(settings, args.config)
    if args.mods_dir:
        return Path(args.mods_dir)
    if settings.mods_folder:
        return Path(settings.mods_folder)
    print("Mods folder not configured. Pass --game-dir or --mods-dir.")
    return None


def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    from mod_manager import ModManager
    from prompts import ConsolePrompter

    mods_dir = resolve_mods_dir(args)
    if mods_dir is None:
        return 2

    def echo(msg: str):
        logger.info(msg)
        print(msg)

    manager = ModManager(
        mods_dir=mods_dir,
        data_file=args.data_file or default_data_file(),
        prompter=ConsolePrompter(),
        log_callback=echo,
    )
    manager.load_mods()
    for issue in manager.validate_paths():
        print(f"Warning: {issue}")

    if args.command == "list":
        for name, mod in sorted(manager.installed.items(), key=lambda kv: kv[0].lower()):
            track = f" [{mod.track_type}]" if mod.track_type else ""
            print(f"{name:40s} {mod.type}{track}  installed {mod.install_date}")
        return 0

    if args.command == "install":
        ok, msg = manager.install_mods(args.sources)
    elif args.command == "uninstall":
        ok, msg = manager.uninstall_mod(args.name)
    else:
        ok, msg = manager.rename_mod(args.old_name, args.new_name)

    print(msg)
    return 0 if ok else 1


def main() -> int:
    args = parse_args()
    logger = setup_logging()
    install_crash_handler(logger)
    logger.info("Starting MX Bikes Mod Manager")
    return run(args, logger)


if __name__ == "__main__":
    raise SystemExit(main())
