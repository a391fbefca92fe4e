from __future__ import annotations

import curses
from dataclasses import dataclass
from typing import List

ESC = "\x1b"
ENTER_KEYS = {"\n", "\r", getattr(curses, "KEY_ENTER", 343)}
BACKSPACE_KEYS = {curses.KEY_BACKSPACE, "\b", "\x7f"}


@dataclass(frozen=True)
class Keybind:
    key: str
    modifier: str
    description: str
    action: str

    @property
    def key_label(self) -> str:
        return format_key(self.key)


KEYBINDS: List[Keybind] = [
    Keybind("n", "", "Create new Task.", "new_task"),
    Keybind("s", "", "Select Task.", "select_task"),
    Keybind("p", "", "Change Task Priority.", "change_priority"),
    Keybind("t", "", "Toggle Task Completion.", "toggle_done"),
    Keybind("D", "Shift", "Delete Task.", "delete"),
    Keybind("h", "", "Split completed tasks.", "split_view"),
    Keybind(ESC, "", "Clear Selected / Cancel Input.", "cancel"),
    Keybind("k", "", "Show this Modal.", "keybinds"),
    Keybind("q", "", "Quit the App.", "quit"),
]

_ACTIONS = {bind.key: bind.action for bind in KEYBINDS}


def action_for(key: object) -> str | None:
    if not isinstance(key, str):
        return None
    return _ACTIONS.get(key)


def format_key(token: str) -> str:
    if token == ESC:
        return "Esc"
    if token in ("\n", "\r"):
        return "Enter"
    return token


def is_enter(key: object) -> bool:
    return key in ENTER_KEYS


def is_backspace(key: object) -> bool:
    return key in BACKSPACE_KEYS


def is_text(key: object) -> bool:
    return isinstance(key, str) and len(key) == 1 and key.isprintable()
