"""
User disambiguation during installs.

The installer never talks to a UI directly; it asks a Prompter. ``ask``
offers a fixed list of options and returns the chosen one exactly as it was
passed in (or None when cancelled). ``ask_text`` asks for free text.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol


class Prompter(Protocol):
    def ask(self, title: str, message: str, options: list[str]) -> Optional[str]: ...

    def ask_text(self, title: str, message: str, default: str = "") -> Optional[str]: ...


class ConsolePrompter:
    """Prompter backed by stdin, used by the command line entry point.

    Options are listed with 1-based numbers; an empty answer or ``0``
    cancels.
    """

    def __init__(
        self,
        input_func: Optional[Callable[[str], str]] = None,
        output_func: Optional[Callable[[str], None]] = None,
    ):
        self._input = input_func or input
        self._output = output_func or print

    def ask(self, title: str, message: str, options: list[str]) -> Optional[str]:
        if not options:
            return None
        self._output(f"\n== {title} ==")
        self._output(message)
        for i, option in enumerate(options, start=1):
            self._output(f"  {i}) {option[:1].upper()}{option[1:]}")
        self._output("  0) Cancel")

        while True:
            try:
                raw = self._input("> ").strip()
            except EOFError:
                return None
            if raw in ("", "0"):
                return None
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                return options[int(raw) - 1]
            for option in options:
                if raw.lower() == option.lower():
                    return option
            self._output(f"Please enter a number between 0 and {len(options)}.")

    def ask_text(self, title: str, message: str, default: str = "") -> Optional[str]:
        self._output(f"\n== {title} ==")
        suffix = f" [{default}]" if default else ""
        try:
            raw = self._input(f"{message}{suffix}: ")
        except EOFError:
            return None
        return raw.strip() or default or None
