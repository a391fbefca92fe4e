"""Pure layout and rendering of a session into a grid of styled cells.

Nothing here touches the terminal: `render` is a function of the session,
the viewport size and the palette, so frames can be compared in tests.
The curses painter in `screen.py` copies the grid onto the real screen.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, replace
from typing import Iterator, List, Mapping, Sequence, Tuple

from .keybinds import KEYBINDS
from .session import Session
from .tasks import Task

TITLE = " daytodo "
HINT_KEY = " <K>"
HINT_TEXT = " for Keybindings "
INPUT_WIDTH = 80
OVERLAY_WIDTH = 47
MIN_WIDTH = 50
MIN_HEIGHT = 11
BORDER = "─"


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def rows(self) -> Iterator[Rect]:
        for y in range(self.y, self.bottom):
            yield Rect(self.x, y, self.width, 1)


@dataclass(frozen=True)
class Style:
    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    dim: bool = False

    def patch(self, other: Style) -> Style:
        return Style(
            fg=other.fg if other.fg is not None else self.fg,
            bg=other.bg if other.bg is not None else self.bg,
            bold=self.bold or other.bold,
            dim=self.dim or other.dim,
        )


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: Style = Style()


Span = Tuple[str, Style]


def char_width(char: str) -> int:
    return 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1


def text_width(text: str) -> int:
    return sum(char_width(char) for char in text)


def tail(text: str, width: int) -> str:
    """Longest suffix of text that fits in width cells."""
    used = 0
    start = len(text)
    while start > 0 and used + char_width(text[start - 1]) <= width:
        start -= 1
        used += char_width(text[start])
    return text[start:]


class Grid:
    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.cells: List[List[Cell]] = [[Cell() for _ in range(self.width)] for _ in range(self.height)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.cells == other.cells

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height})"

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def _clip(self, rect: Rect) -> Tuple[range, range]:
        xs = range(max(0, rect.x), min(self.width, rect.right))
        ys = range(max(0, rect.y), min(self.height, rect.bottom))
        return xs, ys

    def set_style(self, rect: Rect, style: Style) -> None:
        xs, ys = self._clip(rect)
        for y in ys:
            row = self.cells[y]
            for x in xs:
                row[x] = replace(row[x], style=row[x].style.patch(style))

    def clear(self, rect: Rect) -> None:
        xs, ys = self._clip(rect)
        for y in ys:
            for x in xs:
                self.cells[y][x] = Cell()

    def put(self, x: int, y: int, text: str, style: Style, limit: int | None = None) -> int:
        """Write text from (x, y), stopping at `limit` or the grid edge. Returns the next x."""
        end = self.width if limit is None else min(limit, self.width)
        if not 0 <= y < self.height:
            return x
        row = self.cells[y]
        for char in text:
            width = char_width(char)
            if x + width > end:
                break
            if x >= 0:
                row[x] = Cell(char, row[x].style.patch(style))
                if width == 2:
                    # right half of a wide character, painted by the left half
                    row[x + 1] = Cell("", row[x + 1].style.patch(style))
            x += width
        return x

    def put_line(self, rect: Rect, spans: Sequence[Span], line_style: Style | None = None) -> None:
        if line_style is not None:
            self.set_style(rect, line_style)
        x = rect.x
        for text, style in spans:
            x = self.put(x, rect.y, text, style, rect.right)

    def text_rows(self) -> List[str]:
        return ["".join(cell.char for cell in row) for row in self.cells]


@dataclass(frozen=True)
class Layout:
    header: Rect
    title: Rect
    input: Rect
    hint: Rect
    body: Rect
    tasks: Rect
    pending: Rect
    completed: Rect
    overlay: Rect


def compute_layout(width: int, height: int, overlay_rows: int = len(KEYBINDS)) -> Layout:
    header = Rect(0, 0, width, min(1, height))
    body = Rect(0, header.bottom, width, max(0, height - header.height))

    title = Rect(0, 0, min(len(TITLE), width), header.height)
    hint_width = len(HINT_KEY) + len(HINT_TEXT)
    hint_x = max(title.right, width - hint_width)
    hint = Rect(hint_x, 0, width - hint_x, header.height)
    middle_width = hint.x - title.right
    pad = (middle_width - INPUT_WIDTH) // 2 if middle_width > INPUT_WIDTH else 0
    input_rect = Rect(title.right + pad, 0, middle_width - 2 * pad, header.height)

    tasks = Rect(0, body.y + 1, width, max(0, body.height - 1))
    completed_height = tasks.height // 2
    pending = Rect(0, tasks.y, width, tasks.height - completed_height)
    completed = Rect(0, pending.bottom, width, completed_height)

    overlay_width = min(OVERLAY_WIDTH, max(0, width - 2))
    overlay_height = min(overlay_rows, max(0, body.height - 3))
    overlay_x = (width - overlay_width) // 2
    overlay_y = body.y + max(2, (body.height - overlay_height) // 2)
    overlay = Rect(overlay_x, overlay_y, overlay_width, overlay_height)

    return Layout(
        header=header,
        title=title,
        input=input_rect,
        hint=hint,
        body=body,
        tasks=tasks,
        pending=pending,
        completed=completed,
        overlay=overlay,
    )


def priority_color(priority: int, palette: Mapping[str, str]) -> str:
    if priority < 50:
        return palette["green"]
    if priority < 100:
        return palette["orange"]
    return palette["red"]


def task_spans(index: int, task: Task, palette: Mapping[str, str]) -> List[Span]:
    if task.completed:
        desc_style = Style(fg=palette["base_2"], dim=True)
    else:
        desc_style = Style(fg=palette["yellow"])
    return [
        (f"{index: >4}", Style(fg=palette["white"])),
        (f"{task.priority: ^8}", Style(fg=priority_color(task.priority, palette))),
        (task.description, desc_style),
    ]


def render_header(grid: Grid, layout: Layout, session: Session, palette: Mapping[str, str]) -> None:
    grid.put_line(layout.title, [(TITLE, Style(fg=palette["white"]))])
    if session.mode.is_entering and layout.input.width > 0:
        # keep the end of the buffer visible when it outgrows the band
        visible = tail(session.text_buf, layout.input.width)
        grid.put_line(layout.input, [(visible, Style(fg=palette["white"]))], Style(bg=palette["base_1"]))
    grid.put_line(
        layout.hint,
        [(HINT_KEY, Style(fg=palette["light_blue"])), (HINT_TEXT, Style(fg=palette["white"]))],
    )


def render_border(grid: Grid, layout: Layout, session: Session, palette: Mapping[str, str]) -> None:
    top = Rect(layout.body.x, layout.body.y, layout.body.width, min(1, layout.body.height))
    grid.put_line(top, [(BORDER * top.width, Style(fg=palette["base_1"]))])
    label = f" {session.file_label} "[: top.width]
    grid.put(max(top.x, top.right - text_width(label)), top.y, label, Style(fg=palette["purple"]), top.right)


def render_tasks(grid: Grid, layout: Layout, session: Session, palette: Mapping[str, str]) -> None:
    if session.split_tasks:
        regions = {False: layout.pending.rows(), True: layout.completed.rows()}
    else:
        shared = layout.tasks.rows()
        regions = {False: shared, True: shared}

    for index, task in enumerate(session.tasks):
        row = next(regions[task.completed], None)
        if row is None:
            continue
        line_style = Style(bg=palette["base_1"]) if index == session.selected else None
        grid.put_line(row, task_spans(index, task, palette), line_style)


def render_overlay(grid: Grid, layout: Layout, palette: Mapping[str, str]) -> None:
    grid.clear(layout.overlay)
    grid.set_style(layout.overlay, Style(bg=palette["base_1"]))
    for row, bind in zip(layout.overlay.rows(), KEYBINDS):
        grid.put_line(
            row,
            [
                (f"{bind.key_label:^5}", Style(fg=palette["light_blue"])),
                ("|", Style(fg=palette["white"])),
                (f"{bind.modifier:^8}", Style(fg=palette["light_blue"])),
                ("|", Style(fg=palette["white"])),
                (f" {bind.description}", Style(fg=palette["yellow"])),
            ],
        )


def render_too_small(grid: Grid, palette: Mapping[str, str]) -> None:
    width, height = grid.width, grid.height
    grid.set_style(grid.area, Style(bg=palette["background"]))
    msg = f"daytodo needs at least {MIN_WIDTH}x{MIN_HEIGHT}. current: {width}x{height}"
    hint = "resize your terminal to continue"
    y = max(0, height // 2 - 1)
    grid.put(max(0, (width - len(msg)) // 2), y, msg, Style(fg=palette["white"], bold=True))
    grid.put(max(0, (width - len(hint)) // 2), y + 1, hint, Style(fg=palette["white"]))


def render(session: Session, width: int, height: int, palette: Mapping[str, str]) -> Grid:
    grid = Grid(width, height)
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        render_too_small(grid, palette)
        return grid

    layout = compute_layout(width, height)
    grid.set_style(grid.area, Style(bg=palette["background"]))
    render_header(grid, layout, session, palette)
    render_border(grid, layout, session, palette)
    render_tasks(grid, layout, session, palette)
    if session.show_keybinds:
        render_overlay(grid, layout, palette)
    return grid
