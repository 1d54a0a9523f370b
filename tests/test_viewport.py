import datetime as dt

import pytest

from portfolio_timeline.config import TimelineConfig
from portfolio_timeline.coordinates import CoordinateMapper
from portfolio_timeline.viewport import ScrollDirection, Viewport

TODAY = dt.date(2024, 3, 15)
EPOCH = dt.date(2024, 1, 1)


def _viewport(**kwargs):
    kwargs.setdefault("config", TimelineConfig(epoch=EPOCH))
    kwargs.setdefault("width", 80)
    return Viewport(TODAY, **kwargs)


def _mapper(viewport):
    return CoordinateMapper(viewport.snapshot())


def test_defaults_center_today_with_no_selection():
    viewport = _viewport()

    assert viewport.zoom == 1
    assert viewport.selected_index is None
    assert _mapper(viewport).date_to_column(TODAY) == 40


def test_fields_cannot_be_assigned_directly():
    viewport = _viewport()

    with pytest.raises(AttributeError):
        viewport.zoom = 5
    with pytest.raises(AttributeError):
        viewport.scroll_offset = 0


def test_scroll_moves_by_columns_times_zoom():
    viewport = _viewport(zoom=7)
    before = viewport.scroll_offset

    viewport.scroll(2, ScrollDirection.RIGHT)
    assert viewport.scroll_offset == before + 14

    viewport.scroll_left(3)
    assert viewport.scroll_offset == before - 7


def test_scroll_saturates_at_representable_dates():
    viewport = _viewport(zoom=30)

    viewport.scroll(10**12, ScrollDirection.LEFT)
    assert viewport.snapshot().column0_date == dt.date.min
    assert _mapper(viewport).column_to_date(-5) == dt.date.min

    viewport.scroll(10**12, ScrollDirection.RIGHT)
    assert viewport.snapshot().column0_date == dt.date.max
    assert _mapper(viewport).column_to_date(79) == dt.date.max


def test_zoom_is_clamped():
    viewport = _viewport()

    viewport.zoom_in()
    assert viewport.zoom == 1

    for _ in range(40):
        viewport.zoom_out()
    assert viewport.zoom == 30


@pytest.mark.parametrize("steps", [1, 3, 12, 29])
def test_zoom_keeps_center_date_in_center_column(steps):
    viewport = _viewport()
    for _ in range(steps):
        center_date = _mapper(viewport).column_to_date(40)
        viewport.zoom_out()
        assert _mapper(viewport).date_to_column(center_date) == 40

    for _ in range(steps):
        center_date = _mapper(viewport).column_to_date(40)
        viewport.zoom_in()
        assert _mapper(viewport).date_to_column(center_date) == 40


def test_zoom_uses_explicit_width_when_given():
    viewport = _viewport()
    center_date = _mapper(viewport).column_to_date(10)

    viewport.zoom_out(viewport_width_columns=20)

    assert _mapper(viewport).date_to_column(center_date) == 10


def test_selection_wraps_both_ways():
    viewport = _viewport()

    viewport.select_next(3)
    assert viewport.selected_index == 0
    viewport.select_next(3).select_next(3)
    assert viewport.selected_index == 2
    viewport.select_next(3)
    assert viewport.selected_index == 0
    viewport.select_previous(3)
    assert viewport.selected_index == 2


def test_selection_is_noop_for_empty_list():
    viewport = _viewport()

    viewport.select_next(0)
    viewport.select_previous(0)

    assert viewport.selected_index is None


def test_sync_selection_clamps_after_list_change():
    viewport = _viewport()
    viewport.sync_selection(5)
    assert viewport.selected_index == 0

    viewport.select(4, 5)
    viewport.sync_selection(2)
    assert viewport.selected_index == 1

    viewport.sync_selection(0)
    assert viewport.selected_index is None


def test_center_on_today_and_jump_to_start():
    viewport = _viewport(zoom=3)

    viewport.center_on_today(TODAY, viewport_width_columns=20)
    assert _mapper(viewport).date_to_column(TODAY) == 10

    viewport.jump_to_start()
    assert viewport.scroll_offset == 0
    assert viewport.snapshot().column0_date == EPOCH


def test_scroll_to_puts_date_in_first_column():
    viewport = _viewport(zoom=7)

    viewport.scroll_to(dt.date(2023, 6, 1))

    assert _mapper(viewport).column_to_date(0) == dt.date(2023, 6, 1)


def test_snapshot_is_immutable_copy():
    viewport = _viewport()
    snapshot = viewport.snapshot()

    viewport.scroll_right(5)

    assert snapshot.scroll_offset == viewport.scroll_offset - 5
    with pytest.raises(AttributeError):
        snapshot.zoom = 3
