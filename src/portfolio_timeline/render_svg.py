from __future__ import annotations

import datetime as dt
from importlib import metadata
from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
from matplotlib.patches import Patch, Polygon

from .coordinates import DAY, MONTH, WEEK, choose_granularity
from .lanes import LaneAssignment, allocate_lanes
from .portfolio_models import Interval, IntervalStatus

# Layout tuning knobs.
LANE_HEIGHT = 0.6
TIMELINE_PAD_DAYS = 7  # breathing room before first and after last date
MARKER_HALF_WIDTH = 0.45  # days
AXIS_COLUMNS = 60  # nominal tick slots across the chart, as on a terminal axis
TITLE_FONT = 14
LABEL_FONT = 8
FOOTER_FONT = 7
TICK_FONT = 9

STATUS_HEX = {
    IntervalStatus.ACTIVE: "#00c8c8",
    IntervalStatus.OVERDUE: "#ff3232",
    IntervalStatus.COMPLETED: "#00c864",
}
TODAY_HEX = "#d4b000"


def render_svg(
    intervals: Sequence[Interval],
    out_path: str,
    today: dt.date,
    title: str = "",
    lanes: LaneAssignment | None = None,
    min_date: dt.date | None = None,
    max_date: dt.date | None = None,
) -> None:
    """
    Write the lane layout as a static SVG Gantt chart to `out_path`.

    - One horizontal track per lane, the same packing the terminal view uses.
    - Bars are coloured by status relative to `today`; single-day intervals are lozenges.
    - A dashed vertical line marks today when it falls inside the date window.
    """

    if not intervals:
        raise ValueError("intervals must not be empty")

    lanes = lanes or allocate_lanes(intervals)
    min_date, max_date = _resolve_date_window(intervals, min_date, max_date)
    span_days = (max_date - min_date).days + 1

    fig_height = max(3.0, LANE_HEIGHT * lanes.lane_count + 2.0)
    fig_width = max(10.0, min(24.0, 6.0 + span_days / 5.0))
    fig, ax = plt.subplots(figsize=(fig_width, fig_height))

    ax.set_ylim(-1, max(lanes.lane_count, 1))
    ax.invert_yaxis()
    ax.set_xlim(
        mdates.date2num(min_date - dt.timedelta(days=TIMELINE_PAD_DAYS)),
        mdates.date2num(max_date + dt.timedelta(days=TIMELINE_PAD_DAYS)),
    )
    ax.xaxis_date()
    ax.xaxis.tick_top()
    major_locator, major_formatter = _major_tick_strategy(span_days)
    ax.xaxis.set_major_locator(major_locator)
    ax.xaxis.set_major_formatter(major_formatter)
    ax.grid(True, axis="x", which="major", linestyle="--", alpha=0.4)
    ax.tick_params(axis="x", labelrotation=30, labelsize=TICK_FONT, pad=4)
    ax.set_yticks(range(lanes.lane_count))
    ax.set_yticklabels([f"Lane {lane + 1}" for lane in range(lanes.lane_count)], fontsize=LABEL_FONT)

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT)
    footer = f"Generated {today.isoformat()} by portfolio-timeline v{_tool_version()}"
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    for index, interval in enumerate(intervals):
        y = lanes.lane_of(index)
        color = STATUS_HEX[interval.status(today)]
        if interval.layout_end == interval.start:
            center_x = mdates.date2num(interval.start) + 0.5
            half_height = LANE_HEIGHT / 1.5
            diamond = [
                (center_x - MARKER_HALF_WIDTH, y),
                (center_x, y - half_height),
                (center_x + MARKER_HALF_WIDTH, y),
                (center_x, y + half_height),
            ]
            ax.add_patch(Polygon(diamond, closed=True, facecolor=color, edgecolor="black"))
            continue

        start_num = mdates.date2num(interval.start)
        end_num = mdates.date2num(interval.layout_end + dt.timedelta(days=1))
        ax.barh(
            y,
            width=end_num - start_num,
            left=start_num,
            height=LANE_HEIGHT,
            color=color,
            edgecolor="black",
            linewidth=0.5,
        )
        ax.text(
            start_num + 0.3,
            y,
            interval.label,
            ha="left",
            va="center",
            fontsize=LABEL_FONT,
            clip_on=True,
        )

    if min_date <= today <= max_date:
        ax.axvline(mdates.date2num(today), color=TODAY_HEX, linestyle="--", linewidth=1.5)

    ax.legend(
        handles=[Patch(color=STATUS_HEX[status], label=status.value.capitalize()) for status in IntervalStatus],
        loc="lower right",
        fontsize=LABEL_FONT,
    )

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _resolve_date_window(
    intervals: Sequence[Interval], min_date: dt.date | None, max_date: dt.date | None
) -> tuple[dt.date, dt.date]:
    computed_min = min_date or min(interval.start for interval in intervals)
    computed_max = max_date or max(interval.layout_end for interval in intervals)
    if computed_max < computed_min:
        raise ValueError(f"max_date {computed_max} precedes min_date {computed_min}")
    return computed_min, computed_max


def _major_tick_strategy(span_days: int) -> tuple[mdates.DateLocator, mdates.DateFormatter]:
    """Same day / week / month / quarter ladder the terminal axis uses."""
    granularity = choose_granularity(max(1, span_days // AXIS_COLUMNS))
    if granularity is DAY:
        return mdates.DayLocator(interval=2), mdates.DateFormatter("%d %b")
    if granularity is WEEK:
        return mdates.WeekdayLocator(byweekday=mdates.MO), mdates.DateFormatter("%d %b")
    if granularity is MONTH:
        return mdates.MonthLocator(), mdates.DateFormatter("%b %Y")
    return mdates.MonthLocator(bymonth=(1, 4, 7, 10)), mdates.DateFormatter("%b %Y")


def _tool_version() -> str:
    try:
        return metadata.version("portfolio-timeline")
    except metadata.PackageNotFoundError:
        return "0.0.0"
