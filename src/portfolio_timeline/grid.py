from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style
from rich.text import Text

BLANK = " "


@dataclass(frozen=True)
class Rect:
    """Target rectangle in grid cells."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass
class Cell:
    char: str = BLANK
    style: Style | None = None


class CellGrid:
    """
    Caller-owned character buffer that renderers paint into.

    Writes outside the buffer are dropped, so renderers can be handed any
    rectangle without bounds checks on their side.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._cells = [[Cell() for _ in range(self.width)] for _ in range(self.height)]

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def cell(self, x: int, y: int) -> Cell:
        return self._cells[y][x]

    def put(self, x: int, y: int, char: str, style: Style | None = None) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self._cells[y][x] = Cell(char[:1] or BLANK, style)

    def put_text(self, x: int, y: int, text: str, style: Style | None = None, max_x: int | None = None) -> None:
        """Write `text` left to right, stopping at `max_x` (exclusive) or the grid edge."""
        limit = self.width if max_x is None else min(max_x, self.width)
        for offset, char in enumerate(text):
            column = x + offset
            if column >= limit:
                break
            self.put(column, y, char, style)

    def row_text(self, y: int) -> str:
        return "".join(cell.char for cell in self._cells[y])

    def lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self.height)]

    def to_text(self) -> Text:
        """Rich Text with one line per row; adjacent cells sharing a style form one span."""
        text = Text(no_wrap=True, overflow="crop")
        for y, row in enumerate(self._cells):
            if y:
                text.append("\n")
            run: list[str] = []
            run_style: Style | None = None
            for cell in row:
                if run and cell.style != run_style:
                    text.append("".join(run), run_style)
                    run = []
                run.append(cell.char)
                run_style = cell.style
            if run:
                text.append("".join(run), run_style)
        return text
