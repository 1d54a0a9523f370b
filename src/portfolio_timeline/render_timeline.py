from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from rich.style import Style

from .config import DEFAULT_CONFIG, TimelineConfig
from .coordinates import AxisTick, CoordinateMapper, visible_range
from .grid import CellGrid, Rect
from .lanes import LaneAssignment
from .portfolio_models import Interval, IntervalStatus
from .viewport import ViewportSnapshot

# Glyphs and styles; bars keep a distinct pattern per status for monochrome terminals.
BAR_GLYPHS = {
    IntervalStatus.ACTIVE: "█",
    IntervalStatus.OVERDUE: "▓",
    IntervalStatus.COMPLETED: "░",
}
STATUS_COLORS = {
    IntervalStatus.ACTIVE: "rgb(0,255,255)",
    IntervalStatus.OVERDUE: "rgb(255,50,50)",
    IntervalStatus.COMPLETED: "rgb(0,255,128)",
}
MARKER_GLYPH = "◆"
SELECTED_GLYPH = " "
TODAY_GLYPH = "│"
TODAY_HEADER_GLYPH = "▼"
MIN_LABEL_WIDTH = 3  # narrower bars carry no label

AXIS_STYLE = Style(color="rgb(0,200,200)", bold=True)
TODAY_STYLE = Style(color="rgb(255,255,0)", bold=True)
SELECTED_STYLE = Style(color="black", bgcolor="rgb(255,0,255)", bold=True)


def bar_style(status: IntervalStatus) -> Style:
    return Style(color=STATUS_COLORS[status])


def label_style(status: IntervalStatus) -> Style:
    return Style(color="black", bgcolor=STATUS_COLORS[status], bold=True)


@dataclass(frozen=True)
class PlacedBar:
    """One interval as drawn: lane, grid row and clipped columns relative to the rectangle."""

    index: int
    interval_id: str
    lane: int
    row: int
    first_column: int
    last_column: int
    clipped_left: bool
    clipped_right: bool
    status: IntervalStatus
    selected: bool


@dataclass
class TimelineFrame:
    bars: list[PlacedBar] = field(default_factory=list)
    ticks: list[AxisTick] = field(default_factory=list)
    today_column: int | None = None
    hidden_lanes: int = 0

    def bar_for(self, interval_id: str) -> PlacedBar | None:
        for bar in self.bars:
            if bar.interval_id == interval_id:
                return bar
        return None


def render_timeline(
    grid: CellGrid,
    rect: Rect,
    intervals: Sequence[Interval],
    lanes: LaneAssignment,
    viewport: ViewportSnapshot,
    today: date,
    config: TimelineConfig = DEFAULT_CONFIG,
) -> TimelineFrame:
    """
    Paint the timeline into `rect` of `grid` and describe what was drawn.

    - Row 0 of the rectangle is the axis; lane n is drawn on row n + 1.
    - Lanes that do not fit are dropped, not scrolled.
    - The selected interval overrides its status style.
    - The today marker is drawn last so bars never hide it.
    """

    frame = TimelineFrame()
    rect = _clip_rect(rect, grid)
    if rect.is_empty:
        return frame

    mapper = CoordinateMapper(viewport)
    frame.ticks = mapper.axis_ticks(rect.width, config.min_tick_spacing)
    _draw_axis(grid, rect, frame.ticks)

    lane_rows = rect.height - 1
    frame.hidden_lanes = max(0, lanes.lane_count - lane_rows)

    for index, interval in enumerate(intervals):
        if index >= len(lanes.by_index):
            break
        lane = lanes.lane_of(index)
        if lane >= lane_rows:
            continue

        first, last = mapper.span_columns(interval.start, interval.end)
        visible = visible_range(first, last, rect.width)
        if visible is None:
            continue

        selected = index == viewport.selected_index
        bar = PlacedBar(
            index=index,
            interval_id=interval.id,
            lane=lane,
            row=lane + 1,
            first_column=visible[0],
            last_column=visible[1],
            clipped_left=first < visible[0],
            clipped_right=last > visible[1],
            status=interval.status(today),
            selected=selected,
        )
        _draw_bar(grid, rect, bar, interval)
        frame.bars.append(bar)

    today_column = mapper.date_to_column(today)
    if 0 <= today_column < rect.width:
        frame.today_column = today_column
        _draw_today(grid, rect, today_column)

    return frame


def _clip_rect(rect: Rect, grid: CellGrid) -> Rect:
    x0 = max(rect.x, 0)
    y0 = max(rect.y, 0)
    x1 = min(rect.x + rect.width, grid.width)
    y1 = min(rect.y + rect.height, grid.height)
    return Rect(x0, y0, max(0, x1 - x0), max(0, y1 - y0))


def _draw_axis(grid: CellGrid, rect: Rect, ticks: list[AxisTick]) -> None:
    right = rect.x + rect.width
    for tick in ticks:
        grid.put_text(rect.x + tick.column, rect.y, tick.label, AXIS_STYLE, max_x=right)


def _draw_bar(grid: CellGrid, rect: Rect, bar: PlacedBar, interval: Interval) -> None:
    y = rect.y + bar.row
    x0 = rect.x + bar.first_column
    x1 = rect.x + bar.last_column

    if interval.start >= interval.end and not (bar.clipped_left or bar.clipped_right):
        style = SELECTED_STYLE if bar.selected else bar_style(bar.status)
        grid.put(x0, y, MARKER_GLYPH, style)
        return

    if bar.selected:
        glyph, style, text_style = SELECTED_GLYPH, SELECTED_STYLE, SELECTED_STYLE
    else:
        glyph, style, text_style = BAR_GLYPHS[bar.status], bar_style(bar.status), label_style(bar.status)

    for x in range(x0, x1 + 1):
        grid.put(x, y, glyph, style)

    if x1 - x0 + 1 >= MIN_LABEL_WIDTH:
        grid.put_text(x0, y, interval.label, text_style, max_x=x1 + 1)


def _draw_today(grid: CellGrid, rect: Rect, column: int) -> None:
    x = rect.x + column
    grid.put(x, rect.y, TODAY_HEADER_GLYPH, TODAY_STYLE)
    for y in range(rect.y + 1, rect.y + rect.height):
        grid.put(x, y, TODAY_GLYPH, TODAY_STYLE)
