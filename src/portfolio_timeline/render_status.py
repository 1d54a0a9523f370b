from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from rich.style import Style
from rich.text import Text

from .coordinates import CoordinateMapper
from .portfolio_models import Interval, IntervalStatus
from .render_timeline import STATUS_COLORS
from .viewport import ViewportSnapshot

NO_SELECTION = "No project selected"
SEPARATOR = " │ "

# Segment hints, resolved to rich styles by `StatusLine.to_text`.
HINT_STYLES = {
    "zoom": Style(color="rgb(0,255,255)", bold=True),
    "position": Style(color="rgb(200,200,200)"),
    "muted": Style(color="rgb(100,100,100)"),
    "label": Style(color="rgb(255,0,255)", bold=True),
    "range": Style(color="rgb(200,200,200)"),
    IntervalStatus.ACTIVE.value: Style(color=STATUS_COLORS[IntervalStatus.ACTIVE]),
    IntervalStatus.OVERDUE.value: Style(color=STATUS_COLORS[IntervalStatus.OVERDUE], bold=True),
    IntervalStatus.COMPLETED.value: Style(color=STATUS_COLORS[IntervalStatus.COMPLETED]),
}


@dataclass(frozen=True)
class StatusSegment:
    text: str
    hint: str


@dataclass
class StatusLine:
    segments: list[StatusSegment] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    def add(self, text: str, hint: str) -> None:
        self.segments.append(StatusSegment(text, hint))

    def to_text(self) -> Text:
        text = Text(no_wrap=True, overflow="ellipsis")
        for segment in self.segments:
            text.append(segment.text, HINT_STYLES.get(segment.hint))
        return text


def format_zoom(zoom: int) -> str:
    return f"{zoom} day/column" if zoom == 1 else f"{zoom} days/column"


def render_status_line(
    viewport: ViewportSnapshot,
    intervals: Sequence[Interval],
    today: date,
) -> StatusLine:
    """Zoom, date at column 0, then the selected interval or a placeholder."""

    line = StatusLine()
    line.add(f"Zoom: {format_zoom(viewport.zoom)}", "zoom")
    line.add(SEPARATOR, "muted")
    column0 = CoordinateMapper(viewport).column_to_date(0)
    line.add(f"From {column0.isoformat()}", "position")
    line.add(SEPARATOR, "muted")

    index = viewport.selected_index
    if index is None or not 0 <= index < len(intervals):
        line.add(NO_SELECTION, "muted")
        return line

    interval = intervals[index]
    status = interval.status(today)
    line.add(f"[{index + 1}/{len(intervals)}] ", "muted")
    line.add(interval.label, "label")
    line.add(f" {interval.start.isoformat()} → {interval.end.isoformat()} ", "range")
    line.add(f"({status.value})", status.value)
    return line
