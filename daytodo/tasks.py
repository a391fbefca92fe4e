from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

PRIORITY_MIN = -128
PRIORITY_MAX = 127
MAX_DESCRIPTION = 80


class TaskFileError(ValueError):
    def __init__(self, path: Path, line_no: int, reason: str) -> None:
        super().__init__(f"{path}: line {line_no}: {reason}")
        self.path = path
        self.line_no = line_no
        self.reason = reason


@dataclass
class Task:
    description: str
    priority: int = 0
    completed: bool = False

    def toggle_completed(self) -> None:
        self.completed = not self.completed

    def to_line(self) -> str:
        return f"{self.priority},{'true' if self.completed else 'false'},{self.description}"

    def display_row(self) -> str:
        completed = "true" if self.completed else "false"
        return f"{self.priority: >8} | {completed: ^9} | {self.description}"


@dataclass
class LoadResult:
    tasks: List[Task] = field(default_factory=list)
    skipped: List[TaskFileError] = field(default_factory=list)


def parse_priority(text: str) -> int | None:
    """Parse a signed decimal priority; None when it is not one or out of range."""
    body = text[1:] if text[:1] in ("+", "-") else text
    if not body or not body.isascii() or not body.isdigit():
        return None
    value = int(text)
    if value < PRIORITY_MIN or value > PRIORITY_MAX:
        return None
    return value


def parse_line(line: str) -> Task:
    """Parse one stored line. Raises ValueError with a short reason."""
    parts = line.split(",", 2)
    if len(parts) < 2:
        raise ValueError("missing priority separator")
    if len(parts) < 3:
        raise ValueError("missing completed separator")
    raw_priority, raw_completed, description = parts
    priority = parse_priority(raw_priority)
    if priority is None:
        raise ValueError(f"priority {raw_priority!r} is not an integer in {PRIORITY_MIN}..{PRIORITY_MAX}")
    if raw_completed not in ("true", "false"):
        raise ValueError(f"completed {raw_completed!r} must be true or false")
    return Task(description=description, priority=priority, completed=raw_completed == "true")


def load_tasks(todo_path: Path, *, skip_malformed: bool = False) -> LoadResult:
    """Load tasks from the todo file; a missing file is an empty list."""
    result = LoadResult()
    try:
        text = todo_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No task file at %s, starting empty", todo_path)
        return result

    for line_no, raw in enumerate(text.split("\n"), 1):
        line = raw.rstrip("\r")
        if not line:
            continue
        try:
            result.tasks.append(parse_line(line))
        except ValueError as exc:
            error = TaskFileError(todo_path, line_no, str(exc))
            if not skip_malformed:
                raise error from exc
            logger.warning("Skipping malformed line: %s", error)
            result.skipped.append(error)
    logger.info("Loaded %d tasks from %s", len(result.tasks), todo_path)
    return result


def save_tasks(tasks: List[Task], todo_path: Path) -> None:
    """Persist tasks to the todo file path, creating parent directories as needed."""
    todo_path.parent.mkdir(parents=True, exist_ok=True)
    todo_path.write_text("".join(f"{task.to_line()}\n" for task in tasks), encoding="utf-8")
    logger.info("Saved %d tasks to %s", len(tasks), todo_path)


def backup_file(todo_path: Path) -> Path:
    backup = todo_path.with_name(todo_path.name + ".bak")
    backup.write_bytes(todo_path.read_bytes())
    logger.warning("Copied %s to %s before rewriting", todo_path, backup)
    return backup


def format_listing(tasks: List[Task]) -> str:
    lines = ["Priority | Completed | Task"]
    lines.extend(task.display_row() for task in tasks)
    return "\n".join(lines)
