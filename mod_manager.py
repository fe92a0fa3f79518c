"""
MX Bikes Mod Manager - Core Logic

Handles mod installation/uninstallation and the installed-mods registry.
"""

from pathlib import Path
from typing import Callable, Optional

from mod_installer import ModInstaller
from mod_registry import Mod, ModRegistry
from prompts import Prompter
from settings import BASE_GAME_DIRS


class ModManager:
    """
    Main mod manager controller.

    Workflow:
        1. load_mods() to read the registry of installed mods
        2. install_mod() / uninstall_mod() to manage mods
        3. rename_mod() to change a mod's display name
    """

    def __init__(
        self,
        mods_dir: str | Path,
        data_file: str | Path,
        prompter: Prompter,
        log_callback: Optional[Callable[[str], None]] = None,
    ):
        self.mods_dir = Path(mods_dir)
        self.prompter = prompter
        self.registry = ModRegistry(data_file)
        self.installer = ModInstaller(self.mods_dir, prompter)
        self._log_cb = log_callback or print

    # ── Logging ───────────────────────────────────────────────────────

    def log(self, msg: str):
        self._log_cb(msg)

    # ── Installed Mods Tracking ───────────────────────────────────────

    def load_mods(self):
        self.registry.load()
        self.log(f"Loaded installed mods: {len(self.registry)} mod(s) recorded")

    @property
    def installed(self) -> dict[str, Mod]:
        return {mod.name: mod for mod in self.registry}

    def get_mod(self, name: str) -> Optional[Mod]:
        return self.registry.get(name)

    # ── Install ───────────────────────────────────────────────────────

    def install_mod(self, source: str | Path) -> tuple[bool, str]:
        source = Path(source)
        default_name = source.stem
        name = self.prompter.ask_text(
            "Enter mod name", "Enter a name for this mod", default_name
        )
        name = (name or "").strip() or default_name

        self.log(f"Installing '{name}' from {source.name}...")
        try:
            mod = self.installer.install(source, name)
        except Exception as e:
            self.log(f"  Install failed: {e}")
            return False, str(e)

        if name in self.registry:
            self.log(f"  Replacing existing record for '{name}'")
        self.registry.put(mod)
        self.registry.save()

        count = sum(1 for _ in mod.files.iter_files())
        if not count:
            self.log(f"  WARNING: nothing from {source.name} was installed")
        self.log(f"  Successfully installed '{name}' as {mod.type} mod ({count} files)")
        return True, f"Installed {count} file(s)"

    def install_mods(self, sources: list[str | Path]) -> tuple[bool, str]:
        messages = []
        for source in sources:
            ok, msg = self.install_mod(source)
            if not ok:
                return False, msg
            messages.append(msg)
        return True, "; ".join(messages)

    # ── Uninstall ─────────────────────────────────────────────────────

    def uninstall_mod(self, name: str) -> tuple[bool, str]:
        mod = self.registry.get(name)
        if not mod:
            return False, f"No installed mod named '{name}'"

        self.log(f"Uninstalling '{name}'...")
        removed = self.installer.uninstall(mod)

        self.registry.remove(name)
        self.registry.save()

        self.log(f"  Successfully uninstalled '{name}'")
        return True, f"Removed {removed} file(s)"

    # ── Rename ────────────────────────────────────────────────────────

    def rename_mod(self, old_name: str, new_name: str) -> tuple[bool, str]:
        mod = self.registry.get(old_name)
        if not mod:
            return False, f"No installed mod named '{old_name}'"
        new_name = new_name.strip()
        if not new_name:
            return False, "Mod name cannot be empty"
        if new_name != old_name and new_name in self.registry:
            return False, f"A mod named '{new_name}' is already installed"

        self.registry.remove(old_name)
        self.registry.put(mod.model_copy(update={"name": new_name}))
        self.registry.save()
        self.log(f"Renamed '{old_name}' to '{new_name}'")
        return True, f"Renamed to {new_name}"

    # ── Validation ────────────────────────────────────────────────────

    def validate_paths(self) -> list[str]:
        issues = []

        if not self.mods_dir.exists():
            issues.append(f"Mods directory does not exist: {self.mods_dir}")
            return issues

        for name in BASE_GAME_DIRS:
            if not (self.mods_dir / name).is_dir():
                issues.append(f"Base game folder missing from mods directory: {name}")

        return issues
