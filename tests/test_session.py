# tests/test_session.py

from __future__ import annotations

import curses
import random

from daytodo.keybinds import ESC
from daytodo.session import Mode, Session, handle_key
from daytodo.tasks import Task


def press(session: Session, *keys: object) -> None:
    for key in keys:
        handle_key(session, key)


def type_text(session: Session, text: str) -> None:
    press(session, *text)


def test_new_task_is_appended_with_defaults(session: Session) -> None:
    press(session, "n")
    assert session.mode is Mode.NEW_TASK
    type_text(session, "Buy milk")
    press(session, "\n")

    assert len(session.tasks) == 4
    assert session.tasks[-1] == Task(description="Buy milk", priority=0, completed=False)
    assert session.mode is Mode.NORMAL
    assert session.text_buf == ""


def test_escape_cancels_entry_without_touching_tasks(session: Session) -> None:
    before = [Task(t.description, t.priority, t.completed) for t in session.tasks]
    press(session, "n")
    type_text(session, "never mind")
    press(session, ESC)

    assert session.tasks == before
    assert session.mode is Mode.NORMAL
    assert session.text_buf == ""


def test_command_keys_are_text_while_entering(session: Session) -> None:
    press(session, "n")
    type_text(session, "quick task")
    assert not session.exit_requested
    assert not session.show_keybinds
    assert session.text_buf == "quick task"


def test_select_task_by_index(session: Session) -> None:
    press(session, "s", "1", "\n")
    assert session.selected == 1
    press(session, "s")
    type_text(session, "+2")
    press(session, "\r")
    assert session.selected == 2


def test_select_out_of_range_or_garbage_clears_selection(session: Session) -> None:
    for text in ("3", "99", "x", "-1", "", "1.0"):
        session.selected = 0
        press(session, "s")
        type_text(session, text)
        press(session, "\n")
        assert session.selected is None, text


def test_change_priority_of_selected_task(session: Session) -> None:
    press(session, "s", "0", "\n", "p")
    assert session.mode is Mode.CHANGE_PRIORITY
    type_text(session, "-5")
    press(session, curses.KEY_ENTER)
    assert session.tasks[0].priority == -5
    assert session.selected == 0


def test_change_priority_without_selection_is_noop(session: Session) -> None:
    before = [t.priority for t in session.tasks]
    press(session, "p", "5", "\n")
    assert [t.priority for t in session.tasks] == before
    assert session.mode is Mode.NORMAL


def test_change_priority_rejects_out_of_range_values(session: Session) -> None:
    session.selected = 0
    for text in ("128", "-129", "abc", "1_0"):
        press(session, "p")
        type_text(session, text)
        press(session, "\n")
        assert session.tasks[0].priority == 10, text
    press(session, "p", "1", "2", "7", "\n")
    assert session.tasks[0].priority == 127


def test_toggle_requires_selection(session: Session) -> None:
    press(session, "t")
    assert [t.completed for t in session.tasks] == [False, True, False]
    session.selected = 1
    press(session, "t")
    assert session.tasks[1].completed is False
    press(session, "t")
    assert session.tasks[1].completed is True


def test_delete_selected_shifts_indices_and_clears_selection(session: Session) -> None:
    session.selected = 1
    press(session, "D")
    assert [t.description for t in session.tasks] == ["Write report", "Ship release"]
    assert session.selected is None

    press(session, "D")
    assert len(session.tasks) == 2


def test_delete_last_selected_task(session: Session) -> None:
    for expected in (2, 1, 0):
        session.selected = expected
        press(session, "D")
        assert session.selected is None
        assert len(session.tasks) == expected


def test_lowercase_d_does_not_delete(session: Session) -> None:
    session.selected = 0
    press(session, "d")
    assert len(session.tasks) == 3
    assert session.selected == 0


def test_buffer_is_capped_at_80_characters(session: Session) -> None:
    press(session, "n")
    type_text(session, "a" * 79 + "bcd")
    assert session.text_buf == "a" * 79 + "b"
    press(session, "\n")
    assert len(session.tasks[-1].description) == 80


def test_backspace_edits_buffer(session: Session) -> None:
    press(session, "n", curses.KEY_BACKSPACE)
    assert session.text_buf == ""
    type_text(session, "abc")
    press(session, "\x7f", "\b")
    assert session.text_buf == "a"
    press(session, curses.KEY_BACKSPACE)
    assert session.text_buf == ""
    assert session.mode is Mode.NEW_TASK


def test_special_keys_are_ignored_while_entering(session: Session) -> None:
    press(session, "n", "a", curses.KEY_UP, "\t", "b")
    assert session.text_buf == "ab"


def test_view_toggles_and_quit(session: Session) -> None:
    press(session, "k", "h")
    assert session.show_keybinds and session.split_tasks
    press(session, "k", "h")
    assert not session.show_keybinds and not session.split_tasks
    press(session, "q")
    assert session.exit_requested


def test_escape_in_normal_clears_selection(session: Session) -> None:
    session.selected = 2
    press(session, ESC)
    assert session.selected is None
    assert session.text_buf == ""


def test_unknown_keys_are_ignored(session: Session) -> None:
    press(session, "K", "Q", "x", "\n", curses.KEY_UP, curses.KEY_BACKSPACE, "1")
    assert session.mode is Mode.NORMAL
    assert not session.exit_requested
    assert not session.show_keybinds
    assert len(session.tasks) == 3


def test_entering_clears_stale_buffer(session: Session) -> None:
    session.text_buf = "leftover"
    press(session, "s")
    assert session.text_buf == ""


def test_selection_stays_valid_under_random_keys() -> None:
    rng = random.Random(1234)
    alphabet = ["n", "s", "p", "t", "D", "k", "h", ESC, "\n", curses.KEY_BACKSPACE, "0", "1", "2", "5", "-", "x"]
    session = Session(tasks=[Task(description=f"task {i}") for i in range(4)])
    for _ in range(5000):
        handle_key(session, rng.choice(alphabet))
        assert session.selected is None or 0 <= session.selected < len(session.tasks)
        assert len(session.text_buf) <= 80
        assert session.mode.is_entering or session.text_buf == ""


def test_control_characters_are_plain_keys(session: Session) -> None:
    # raw mode delivers Ctrl-C, Ctrl-Z and Ctrl-\ as characters
    for key in ("\x03", "\x1a", "\x1c"):
        press(session, key)
        assert session.mode is Mode.NORMAL
        assert not session.exit_requested
    press(session, "n", "a", "\x03", "b", "\n")
    assert session.tasks[-1].description == "ab"
    assert len(session.tasks) == 4
