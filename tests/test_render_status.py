import datetime as dt

from portfolio_timeline.portfolio_models import Interval
from portfolio_timeline.render_status import NO_SELECTION, format_zoom, render_status_line
from portfolio_timeline.viewport import ViewportSnapshot

EPOCH = dt.date(2024, 1, 1)
TODAY = dt.date(2024, 1, 12)

INTERVALS = [
    Interval("a", dt.date(2024, 1, 1), dt.date(2024, 1, 10), "Alpha"),
    Interval("b", dt.date(2024, 1, 5), dt.date(2024, 1, 15), "Beta"),
]


def _snapshot(zoom=1, scroll_offset=0, selected_index=None):
    return ViewportSnapshot(zoom=zoom, scroll_offset=scroll_offset, selected_index=selected_index, epoch=EPOCH)


def test_format_zoom():
    assert format_zoom(1) == "1 day/column"
    assert format_zoom(7) == "7 days/column"


def test_placeholder_without_selection():
    line = render_status_line(_snapshot(zoom=7, scroll_offset=3), INTERVALS, TODAY)

    assert line.text.startswith("Zoom: 7 days/column")
    assert "From 2024-01-04" in line.text
    assert line.text.endswith(NO_SELECTION)


def test_selected_interval_details():
    line = render_status_line(_snapshot(selected_index=1), INTERVALS, TODAY)

    assert "[2/2] Beta 2024-01-05 → 2024-01-15 (active)" in line.text
    assert line.segments[-1].hint == "active"


def test_overdue_status_is_reported():
    line = render_status_line(_snapshot(selected_index=0), INTERVALS, TODAY)

    assert line.text.endswith("(overdue)")


def test_stale_selection_falls_back_to_placeholder():
    line = render_status_line(_snapshot(selected_index=5), INTERVALS, TODAY)

    assert line.text.endswith(NO_SELECTION)


def test_rich_text_matches_plain_text():
    line = render_status_line(_snapshot(selected_index=0), INTERVALS, TODAY)

    assert line.to_text().plain == line.text
