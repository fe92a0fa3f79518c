"""
Tests for ModManager covering install, uninstall, rename and the registry.
"""

import json
import tempfile

import pytest

from mod_installer import SCRATCH_PREFIX
from mod_manager import ModManager
from tests.conftest import ScriptedPrompter, make_zip, write_tree


# ── helpers ──────────────────────────────────────────────────────────────────

def make_manager(mods_root, data_file, answers=None, text_answers=None):
    prompter = ScriptedPrompter(answers, text_answers)
    manager = ModManager(mods_root, data_file, prompter, log_callback=lambda _: None)
    manager.load_mods()
    return manager


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "ModsData" / "mods.json"


@pytest.fixture
def scratch_dir(tmp_path, monkeypatch):
    scratch = tmp_path / "tmp"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


def helmet_source(tmp_path):
    return write_tree(tmp_path / "downloads" / "HelmetX", {
        "helmet.edf": "edf",
        "paints/default.pnt": "pnt",
    })


# ── install ──────────────────────────────────────────────────────────────────

def test_install_canonical_archive(mods_root, data_file, tmp_path):
    archive = make_zip(tmp_path / "yamaha_pack.zip", {
        "Yamaha Pack/mods/bikes/Yamaha.pkz": "pkz",
    })
    manager = make_manager(mods_root, data_file)

    ok, msg = manager.install_mod(archive)

    assert ok, msg
    assert msg == "Installed 1 file(s)"
    assert (mods_root / "bikes" / "Yamaha.pkz").read_text() == "pkz"
    mod = manager.get_mod("yamaha_pack")
    assert mod.type == "bike"
    assert mod.track_type is None
    assert list(mod.files.iter_files()) == ["bikes/Yamaha.pkz"]
    assert manager.prompter.asked_text[0][2] == "yamaha_pack"


def test_install_uses_entered_name(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file, text_answers=["  Cool Helmet  "])

    ok, _ = manager.install_mod(helmet_source(tmp_path))

    assert ok
    assert list(manager.installed) == ["Cool Helmet"]


def test_install_manifest_matches_disk(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file)

    manager.install_mod(helmet_source(tmp_path))

    mod = manager.get_mod("HelmetX")
    assert mod.type == "rider"
    files = list(mod.files.iter_files())
    assert files == [
        "rider/helmets/helmetx/helmet.edf",
        "rider/helmets/helmetx/paints/default.pnt",
    ]
    assert (mods_root / "rider" / "helmets" / "HelmetX" / "helmet.edf").is_file()
    assert (mods_root / "rider" / "helmets" / "HelmetX" / "paints" / "default.pnt").is_file()


def test_install_track_records_track_type(mods_root, data_file, tmp_path):
    pkz = tmp_path / "RedBud.pkz"
    pkz.write_text("track")
    manager = make_manager(mods_root, data_file, answers=["tracks", "enduro"])

    ok, _ = manager.install_mod(pkz)

    assert ok
    mod = manager.get_mod("RedBud")
    assert mod.type == "track"
    assert mod.track_type == "enduro"
    assert (mods_root / "tracks" / "enduro" / "RedBud.pkz").is_file()


def test_installed_mods_persist(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file)
    manager.install_mod(helmet_source(tmp_path))

    reloaded = make_manager(mods_root, data_file)

    assert reloaded.get_mod("HelmetX") == manager.get_mod("HelmetX")
    raw = json.loads(data_file.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["mods"]["HelmetX"]["type"] == "rider"


def test_unsupported_source_fails_cleanly(mods_root, data_file, tmp_path):
    src = tmp_path / "notes.txt"
    src.write_text("")
    manager = make_manager(mods_root, data_file)

    ok, msg = manager.install_mod(src)

    assert not ok
    assert "Unknown file type" in msg
    assert manager.installed == {}


def test_missing_prerequisite_is_reported(mods_root, data_file, tmp_path):
    pnt = tmp_path / "red.pnt"
    pnt.write_text("")
    manager = make_manager(mods_root, data_file, answers=["bikes"])

    ok, msg = manager.install_mod(pnt)

    assert not ok
    assert "no bike models are installed" in msg
    assert "red" not in manager.installed


def test_failed_install_rolls_back_copied_files(mods_root, data_file, tmp_path):
    src = write_tree(tmp_path / "downloads" / "Pack", {
        "HelmetX/helmet.edf": "edf",
        "loose.pnt": "pnt",
    })
    manager = make_manager(mods_root, data_file, answers=["bikes"])

    ok, msg = manager.install_mod(src)

    assert not ok
    assert "no bike models are installed" in msg
    assert manager.installed == {}
    assert [p for p in mods_root.rglob("*") if p.is_file()] == []
    assert not (mods_root / "rider" / "helmets" / "HelmetX").exists()
    assert (mods_root / "rider" / "helmets").is_dir()


def test_rollback_leaves_other_mods_alone(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file, answers=["bikes"])
    manager.install_mod(helmet_source(tmp_path))
    src = write_tree(tmp_path / "downloads" / "Boots", {
        "BootsA/boots.edf": "",
        "paint.pnt": "",
    })

    ok, _ = manager.install_mod(src)

    assert not ok
    assert not (mods_root / "rider" / "boots" / "BootsA").exists()
    assert (mods_root / "rider" / "helmets" / "HelmetX" / "helmet.edf").is_file()
    assert list(manager.installed) == ["HelmetX"]


def test_scratch_directory_removed_after_install(mods_root, data_file, tmp_path, scratch_dir):
    manager = make_manager(mods_root, data_file)

    manager.install_mod(helmet_source(tmp_path))
    bad = tmp_path / "broken.zip"
    bad.write_bytes(b"garbage")
    manager.install_mod(bad)

    assert not any(p.name.startswith(SCRATCH_PREFIX) for p in scratch_dir.iterdir())


def test_reinstall_replaces_record(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file)
    src = helmet_source(tmp_path)
    manager.install_mod(src)
    (src / "paints" / "default.pnt").unlink()

    ok, _ = manager.install_mod(src)

    assert ok
    assert len(manager.installed) == 1


def test_install_mods_stops_at_first_failure(mods_root, data_file, tmp_path):
    bad = tmp_path / "bad.txt"
    bad.write_text("")
    manager = make_manager(mods_root, data_file)

    ok, msg = manager.install_mods([helmet_source(tmp_path), bad])

    assert not ok
    assert "Unknown file type" in msg
    assert "HelmetX" in manager.installed


# ── uninstall ────────────────────────────────────────────────────────────────

def test_uninstall_removes_everything_installed(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file)
    manager.install_mod(helmet_source(tmp_path))

    ok, msg = manager.uninstall_mod("HelmetX")

    assert ok
    assert msg == "Removed 2 file(s)"
    assert not (mods_root / "rider" / "helmets" / "HelmetX").exists()
    assert (mods_root / "rider" / "helmets").is_dir()
    assert manager.installed == {}
    assert make_manager(mods_root, data_file).installed == {}


def test_uninstall_keeps_whitelisted_track_folder(mods_root, data_file, tmp_path):
    pkz = tmp_path / "OnlyTrack.pkz"
    pkz.write_text("")
    manager = make_manager(mods_root, data_file, answers=["tracks", "motocross"])
    manager.install_mod(pkz)

    manager.uninstall_mod("OnlyTrack")

    assert not (mods_root / "tracks" / "motocross" / "OnlyTrack.pkz").exists()
    assert (mods_root / "tracks" / "motocross").is_dir()


def test_uninstall_unknown_mod(mods_root, data_file):
    manager = make_manager(mods_root, data_file)

    ok, msg = manager.uninstall_mod("Nothing")

    assert not ok
    assert "Nothing" in msg


# ── rename ───────────────────────────────────────────────────────────────────

def test_rename_mod(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file)
    manager.install_mod(helmet_source(tmp_path))

    ok, _ = manager.rename_mod("HelmetX", "Race Helmet")

    assert ok
    assert list(manager.installed) == ["Race Helmet"]
    assert manager.get_mod("Race Helmet").type == "rider"
    assert list(make_manager(mods_root, data_file).installed) == ["Race Helmet"]


def test_rename_rejects_taken_or_empty_names(mods_root, data_file, tmp_path):
    manager = make_manager(mods_root, data_file, text_answers=[None, "Second"])
    manager.install_mod(helmet_source(tmp_path))
    manager.install_mod(helmet_source(tmp_path))

    assert manager.rename_mod("HelmetX", "Second")[0] is False
    assert manager.rename_mod("HelmetX", "   ")[0] is False
    assert manager.rename_mod("Missing", "Other")[0] is False
    assert set(manager.installed) == {"HelmetX", "Second"}


# ── registry / validation ────────────────────────────────────────────────────

def test_corrupt_registry_is_reset(mods_root, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json", encoding="utf-8")

    manager = make_manager(mods_root, data_file)

    assert manager.installed == {}
    assert json.loads(data_file.read_text(encoding="utf-8")) == {"version": 1, "mods": {}}


def test_validate_paths(mods_root, data_file, tmp_path):
    assert make_manager(mods_root, data_file).validate_paths() == []

    missing = make_manager(tmp_path / "nowhere", data_file).validate_paths()
    assert len(missing) == 1

    bare = tmp_path / "bare"
    bare.mkdir()
    assert len(make_manager(bare, data_file).validate_paths()) == 4
