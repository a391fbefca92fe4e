# tests/conftest.py

from __future__ import annotations

from typing import List

import pytest

from daytodo.config import DEFAULT_PALETTE
from daytodo.session import Session
from daytodo.tasks import Task


@pytest.fixture()
def palette():
    return DEFAULT_PALETTE


@pytest.fixture()
def tasks() -> List[Task]:
    return [
        Task(description="Write report", priority=10),
        Task(description="Review PR", priority=90, completed=True),
        Task(description="Ship release", priority=120),
    ]


@pytest.fixture()
def session(tasks: List[Task]) -> Session:
    return Session(tasks=tasks, file_label="01-01-25.todo")
