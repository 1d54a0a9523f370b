"""
Date <-> column mapping for a viewport snapshot, plus axis tick placement.

Columns are signed: anything left of the viewport is negative and anything
right of it is >= width, so callers clip. Several dates share a column when
zoom > 1, which makes column -> date -> column exact but date -> column ->
date lossy (it returns the first date of the column).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator, NamedTuple

from .config import MIN_TICK_SPACING
from .viewport import MAX_ORDINAL, ViewportSnapshot, clamp_ordinal

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class TickGranularity:
    name: str
    nominal_days: int


DAY = TickGranularity("day", 1)
WEEK = TickGranularity("week", 7)
MONTH = TickGranularity("month", 30)
QUARTER = TickGranularity("quarter", 91)
GRANULARITIES = (DAY, WEEK, MONTH, QUARTER)


class AxisTick(NamedTuple):
    column: int
    label: str


class CoordinateMapper:
    def __init__(self, viewport: ViewportSnapshot) -> None:
        self._zoom = viewport.zoom
        self._origin = viewport.origin_ordinal

    @property
    def zoom(self) -> int:
        return self._zoom

    def date_to_column(self, value: date) -> int:
        # Floor division keeps earlier days in the column they fall within.
        return (value.toordinal() - self._origin) // self._zoom

    def column_to_date(self, column: int) -> date:
        return date.fromordinal(clamp_ordinal(self._origin + column * self._zoom))

    def column_last_date(self, column: int) -> date:
        """Last date covered by `column`."""
        return date.fromordinal(clamp_ordinal(self._origin + (column + 1) * self._zoom - 1))

    def span_columns(self, start: date, end: date) -> tuple[int, int]:
        """Inclusive column range of an inclusive date range."""
        first = self.date_to_column(start)
        last = self.date_to_column(end) if end >= start else first
        return first, last

    def axis_ticks(self, viewport_width_columns: int, min_spacing: int = MIN_TICK_SPACING) -> list[AxisTick]:
        """
        Calendar-aligned tick labels for the visible columns.

        Labels that would overlap the previous one (plus one blank column)
        are dropped, so the header row always reads left to right.
        """
        if viewport_width_columns <= 0:
            return []

        granularity = choose_granularity(self._zoom, min_spacing)
        first = self.column_to_date(0)
        last = self.column_last_date(viewport_width_columns - 1)

        ticks: list[AxisTick] = []
        next_free = 0
        for boundary in _boundaries(first, last, granularity):
            column = self.date_to_column(boundary)
            if column < next_free or column >= viewport_width_columns:
                continue
            label = tick_label(boundary, granularity)
            ticks.append(AxisTick(column, label))
            next_free = column + len(label) + 1
        return ticks


def choose_granularity(zoom: int, min_spacing: int = MIN_TICK_SPACING) -> TickGranularity:
    """Smallest granularity whose ticks are at least `min_spacing` columns apart."""
    for granularity in GRANULARITIES:
        if granularity.nominal_days >= min_spacing * zoom:
            return granularity
    return GRANULARITIES[-1]


def tick_label(value: date, granularity: TickGranularity) -> str:
    year = f"{value.year % 100:02d}"
    if granularity is DAY:
        return MONTH_ABBR[value.month - 1] if value.day == 1 else f"{value.day:02d}"
    if granularity is WEEK:
        return f"W{value.isocalendar()[1]:02d}"
    if granularity is MONTH:
        return f"{MONTH_ABBR[value.month - 1]}'{year}"
    return f"Q{(value.month - 1) // 3 + 1}'{year}"


def _boundaries(first: date, last: date, granularity: TickGranularity) -> Iterator[date]:
    current = _first_boundary(first, granularity)
    while current is not None and current <= last:
        yield current
        current = _next_boundary(current, granularity)


def _first_boundary(value: date, granularity: TickGranularity) -> date | None:
    if granularity is DAY:
        return value
    if granularity is WEEK:
        days = (7 - value.weekday()) % 7
        ordinal = value.toordinal() + days
        return date.fromordinal(ordinal) if ordinal <= MAX_ORDINAL else None
    step = 1 if granularity is MONTH else 3
    month_index = value.year * 12 + value.month - 1
    aligned = month_index - month_index % step
    if aligned == month_index and value.day == 1:
        return value
    return _month_start(aligned + step)


def _next_boundary(value: date, granularity: TickGranularity) -> date | None:
    if granularity in (DAY, WEEK):
        ordinal = value.toordinal() + granularity.nominal_days
        return date.fromordinal(ordinal) if ordinal <= MAX_ORDINAL else None
    step = 1 if granularity is MONTH else 3
    return _month_start(value.year * 12 + value.month - 1 + step)


def _month_start(month_index: int) -> date | None:
    year, month0 = divmod(month_index, 12)
    if year > date.max.year:
        return None
    return date(year, month0 + 1, 1)


def visible_range(first: int, last: int, width: int) -> tuple[int, int] | None:
    """Clip an inclusive column range to [0, width); None when nothing is visible."""
    if width <= 0 or last < 0 or first >= width:
        return None
    return max(first, 0), min(last, width - 1)

