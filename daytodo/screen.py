from __future__ import annotations

import curses
import logging
from typing import Dict, List, Tuple

from .render import Cell, Grid, Style

logger = logging.getLogger(__name__)

ESCAPE_DELAY_MS = 25

# RGB values of the eight standard curses colors, for terminals without custom colors
BASE_COLORS: List[Tuple[int, Tuple[int, int, int]]] = [
    (curses.COLOR_BLACK, (0, 0, 0)),
    (curses.COLOR_RED, (205, 0, 0)),
    (curses.COLOR_GREEN, (0, 205, 0)),
    (curses.COLOR_YELLOW, (205, 205, 0)),
    (curses.COLOR_BLUE, (0, 0, 238)),
    (curses.COLOR_MAGENTA, (205, 0, 205)),
    (curses.COLOR_CYAN, (0, 205, 205)),
    (curses.COLOR_WHITE, (229, 229, 229)),
]
FIRST_CUSTOM_COLOR = 16


def hex_to_rgb(hex_code: str) -> Tuple[int, int, int]:
    h = hex_code.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def nearest_base_color(rgb: Tuple[int, int, int]) -> int:
    def distance(candidate: Tuple[int, int, int]) -> int:
        return sum((a - b) ** 2 for a, b in zip(rgb, candidate))
    return min(BASE_COLORS, key=lambda pair: distance(pair[1]))[0]


class ColorTable:
    """Lazily maps palette hex colors and (fg, bg) pairs onto curses numbers."""

    def __init__(self) -> None:
        self.colors: Dict[str | None, int] = {None: -1}
        self.pairs: Dict[Tuple[int, int], int] = {(-1, -1): 0}
        self.enabled = curses.has_colors()
        self.custom = self.enabled and curses.can_change_color() and curses.COLORS > FIRST_CUSTOM_COLOR
        self.next_color = FIRST_CUSTOM_COLOR

    def color(self, hex_code: str | None) -> int:
        if hex_code in self.colors:
            return self.colors[hex_code]
        rgb = hex_to_rgb(hex_code)
        if self.custom and self.next_color < curses.COLORS:
            number = self.next_color
            self.next_color += 1
            curses.init_color(number, *(c * 1000 // 255 for c in rgb))
        else:
            number = nearest_base_color(rgb)
        self.colors[hex_code] = number
        return number

    def attr(self, style: Style) -> int:
        if not self.enabled:
            return (curses.A_BOLD if style.bold else 0) | (curses.A_DIM if style.dim else 0)
        key = (self.color(style.fg), self.color(style.bg))
        pair = self.pairs.get(key)
        if pair is None:
            pair = len(self.pairs)
            if pair >= curses.COLOR_PAIRS:
                logger.debug("Out of color pairs, using default for %s", style)
                pair = 0
            else:
                curses.init_pair(pair, *key)
                self.pairs[key] = pair
        attr = curses.color_pair(pair)
        if style.bold:
            attr |= curses.A_BOLD
        if style.dim:
            attr |= curses.A_DIM
        return attr


def runs(row: List[Cell]) -> List[Tuple[int, str, Style]]:
    """Group a row into (x, text, style) runs of identically styled cells."""
    out: List[Tuple[int, str, Style]] = []
    start = 0
    for x in range(1, len(row) + 1):
        if x == len(row) or row[x].style != row[start].style:
            out.append((start, "".join(c.char for c in row[start:x]), row[start].style))
            start = x
    return out


class CursesTerminal:
    """Full-screen curses surface. Use as a context manager so the terminal is always restored."""

    def __init__(self) -> None:
        self.stdscr: curses.window | None = None
        self.colors: ColorTable | None = None

    def __enter__(self) -> CursesTerminal:
        self.enter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.leave()

    def enter(self) -> None:
        if hasattr(curses, "set_escdelay"):
            curses.set_escdelay(ESCAPE_DELAY_MS)
        self.stdscr = curses.initscr()
        try:
            curses.noecho()
            curses.raw()
            self.stdscr.keypad(True)
            try:
                curses.curs_set(0)
            except curses.error:
                pass
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
            self.colors = ColorTable()
        except Exception:
            self.leave()
            raise
        logger.debug("Terminal entered (%d colors, custom=%s)", getattr(curses, "COLORS", 0), self.colors.custom)

    def leave(self) -> None:
        if self.stdscr is None:
            return
        try:
            self.stdscr.keypad(False)
            curses.noraw()
            curses.echo()
        finally:
            curses.endwin()
            self.stdscr = None
            logger.debug("Terminal restored")

    def size(self) -> Tuple[int, int]:
        height, width = self.stdscr.getmaxyx()
        return width, height

    def draw(self, grid: Grid) -> None:
        win = self.stdscr
        win.erase()
        for y, row in enumerate(grid.cells):
            for x, text, style in runs(row):
                try:
                    win.addstr(y, x, text, self.colors.attr(style))
                except curses.error:
                    # writing the bottom-right cell moves the cursor off screen
                    pass
        win.refresh()

    def poll_key(self, timeout_ms: int) -> object | None:
        """Wait up to timeout_ms for a key; None on timeout or resize."""
        self.stdscr.timeout(timeout_ms)
        try:
            key = self.stdscr.get_wch()
        except curses.error:
            return None
        if key == curses.KEY_RESIZE:
            return None
        return key
