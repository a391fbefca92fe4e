from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List

from .keybinds import ESC, action_for, is_backspace, is_enter, is_text
from .tasks import MAX_DESCRIPTION, Task, parse_priority

logger = logging.getLogger(__name__)


class Mode(enum.Enum):
    NORMAL = "normal"
    NEW_TASK = "new task"
    SELECT_TASK = "select task"
    CHANGE_PRIORITY = "change priority"

    @property
    def is_entering(self) -> bool:
        return self is not Mode.NORMAL


ENTRY_ACTIONS = {
    "new_task": Mode.NEW_TASK,
    "select_task": Mode.SELECT_TASK,
    "change_priority": Mode.CHANGE_PRIORITY,
}


@dataclass
class Session:
    tasks: List[Task] = field(default_factory=list)
    file_label: str = ""
    mode: Mode = Mode.NORMAL
    text_buf: str = ""
    selected: int | None = None
    show_keybinds: bool = False
    split_tasks: bool = False
    exit_requested: bool = False

    def selected_task(self) -> Task | None:
        if self.selected is None:
            return None
        return self.tasks[self.selected]

    def clamp_selection(self) -> None:
        if self.selected is not None and not 0 <= self.selected < len(self.tasks):
            self.selected = None

    def reset_input(self, mode: Mode = Mode.NORMAL) -> None:
        self.text_buf = ""
        self.mode = mode


def parse_index(text: str) -> int | None:
    body = text[1:] if text.startswith("+") else text
    if not body or not body.isascii() or not body.isdigit():
        return None
    return int(body)


def commit_entry(session: Session) -> None:
    text = session.text_buf
    if session.mode is Mode.NEW_TASK:
        session.tasks.append(Task(description=text))
        logger.debug("Added task %d: %r", len(session.tasks) - 1, text)
    elif session.mode is Mode.SELECT_TASK:
        index = parse_index(text)
        session.selected = index if index is not None and index < len(session.tasks) else None
    elif session.mode is Mode.CHANGE_PRIORITY:
        priority = parse_priority(text)
        task = session.selected_task()
        if priority is not None and task is not None:
            task.priority = priority
    session.reset_input()


def handle_entry_key(session: Session, key: object) -> None:
    if key == ESC:
        session.reset_input()
    elif is_backspace(key):
        session.text_buf = session.text_buf[:-1]
    elif is_enter(key):
        commit_entry(session)
    elif is_text(key):
        if len(session.text_buf) < MAX_DESCRIPTION:
            session.text_buf += key


def delete_selected(session: Session) -> None:
    if session.selected is not None:
        removed = session.tasks.pop(session.selected)
        logger.debug("Deleted task %d: %r", session.selected, removed.description)
    session.selected = None


def toggle_selected(session: Session) -> None:
    task = session.selected_task()
    if task is not None:
        task.toggle_completed()


def handle_normal_key(session: Session, key: object) -> None:
    action = action_for(key)
    if action is None:
        return
    if action in ENTRY_ACTIONS:
        session.reset_input(ENTRY_ACTIONS[action])
    elif action == "quit":
        session.exit_requested = True
    elif action == "toggle_done":
        toggle_selected(session)
    elif action == "delete":
        delete_selected(session)
    elif action == "keybinds":
        session.show_keybinds = not session.show_keybinds
    elif action == "split_view":
        session.split_tasks = not session.split_tasks
    elif action == "cancel":
        session.selected = None
        session.text_buf = ""


def handle_key(session: Session, key: object) -> None:
    """Apply one key press to the session; never raises on any key."""
    previous = session.mode
    if session.mode.is_entering:
        handle_entry_key(session, key)
    else:
        handle_normal_key(session, key)
    session.clamp_selection()
    if session.mode is not previous:
        logger.debug("Mode %s -> %s", previous.value, session.mode.value)
