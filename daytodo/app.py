from __future__ import annotations

import logging
from typing import Mapping, Protocol, Tuple

from .config import POLL_TIMEOUT_MS
from .render import Grid, render
from .session import Session, handle_key

logger = logging.getLogger(__name__)


class Terminal(Protocol):
    def size(self) -> Tuple[int, int]: ...

    def draw(self, grid: Grid) -> None: ...

    def poll_key(self, timeout_ms: int) -> object | None: ...


def run(session: Session, terminal: Terminal, palette: Mapping[str, str], poll_timeout_ms: int = POLL_TIMEOUT_MS) -> None:
    """Render, then wait for one key, until quit is requested.

    A timeout simply redraws, which picks up terminal resizes.
    """
    logger.info("Session started on %s with %d tasks", session.file_label, len(session.tasks))
    while not session.exit_requested:
        width, height = terminal.size()
        terminal.draw(render(session, width, height, palette))
        key = terminal.poll_key(poll_timeout_ms)
        if key is not None:
            handle_key(session, key)
    logger.info("Session ended with %d tasks", len(session.tasks))
