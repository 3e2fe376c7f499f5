"""Clipboard access for Neovim's clipboard provider requests."""

from __future__ import annotations

import os
from typing import Any, Protocol


class ClipboardError(RuntimeError):
    """Raised when clipboard contents cannot be read or written."""


class ClipboardProvider(Protocol):
    def get_contents(self) -> str: ...

    def set_contents(self, text: str) -> None: ...


class MemoryClipboard:
    """A clipboard that keeps its contents in memory."""

    def __init__(self, contents: str = "") -> None:
        self._contents = contents

    def get_contents(self) -> str:
        return self._contents

    def set_contents(self, text: str) -> None:
        self._contents = text


class Clipboard:
    """The system clipboard plus an optional primary selection for ``*``."""

    def __init__(
        self,
        clipboard: ClipboardProvider | None = None,
        selection: ClipboardProvider | None = None,
    ) -> None:
        self.clipboard = clipboard if clipboard is not None else MemoryClipboard()
        self.selection = selection

    def _provider(self, register: str) -> ClipboardProvider:
        if register == "*" and self.selection is not None:
            return self.selection
        return self.clipboard

    def get_contents(self, register: str) -> str:
        return self._provider(register).get_contents()

    def set_contents(self, lines: str, register: str) -> None:
        self._provider(register).set_contents(lines)


def _register_name(register: Any) -> str:
    return register if isinstance(register, str) else "+"


def get_clipboard_contents(clipboard: Clipboard, register: Any) -> list:
    """Return ``[lines, paste_mode]`` as Neovim's clipboard provider expects.

    The paste mode is ``"V"`` (linewise) when the text ends with a newline,
    ``"v"`` otherwise.
    """
    raw = clipboard.get_contents(_register_name(register)).replace("\r", "")
    paste_mode = "V" if raw.endswith("\n") else "v"
    return [raw.split("\n"), paste_mode]


def set_clipboard_contents(
    clipboard: Clipboard,
    value: Any,
    register: Any,
    endline: str | None = None,
) -> None:
    """Join the string lines of ``value`` and store them in ``register``."""
    if endline is None:
        endline = "\r\n" if os.name == "nt" else "\n"
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise ClipboardError("can't build string from provided text")
    lines = endline.join(
        item.replace("\r", "") for item in value if isinstance(item, str)
    )
    clipboard.set_contents(lines, _register_name(register))