"""
Shared fixtures and helpers for the MX Bikes Mod Manager test suite.
"""

import zipfile
from pathlib import Path

import pytest

BASE_GAME_DIRS = (
    "bikes",
    "tracks/motocross",
    "tracks/supercross",
    "tracks/enduro",
    "tracks/supermoto",
    "rider/boots",
    "rider/helmets",
    "rider/riders",
    "rider/protections",
    "rider/helmetcams",
    "tyres",
)


class ScriptedPrompter:
    """Answers prompts from queues and records every question asked."""

    def __init__(self, answers=None, text_answers=None):
        self.answers = list(answers or [])
        self.text_answers = list(text_answers or [])
        self.asked: list[tuple[str, str, list[str]]] = []
        self.asked_text: list[tuple[str, str, str]] = []

    def ask(self, title, message, options):
        self.asked.append((title, message, list(options)))
        assert self.answers, f"Unexpected prompt: {title!r} {options}"
        answer = self.answers.pop(0)
        assert answer is None or answer in options, f"{answer!r} not in {options}"
        return answer

    def ask_text(self, title, message, default=""):
        self.asked_text.append((title, message, default))
        if not self.text_answers:
            return None
        return self.text_answers.pop(0)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``{relative_path: content}`` under root; a trailing '/' makes a dir."""
    for rel, content in files.items():
        path = root / rel
        if rel.endswith("/"):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def make_zip(path: Path, members: dict[str, str]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for member, data in members.items():
            zf.writestr(member, data)
    return path


@pytest.fixture
def mods_root(tmp_path):
    """A mods folder with the base game's directory layout."""
    root = tmp_path / "mods"
    for rel in BASE_GAME_DIRS:
        (root / rel).mkdir(parents=True)
    return root


@pytest.fixture
def source_root(tmp_path):
    """An empty directory to lay out an unpacked mod in."""
    root = tmp_path / "unpacked" / "SomeMod"
    root.mkdir(parents=True)
    return root
