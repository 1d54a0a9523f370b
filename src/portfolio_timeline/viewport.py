from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date

from .config import DEFAULT_CONFIG, TimelineConfig

MIN_ORDINAL = date.min.toordinal()
MAX_ORDINAL = date.max.toordinal()


class ScrollDirection(enum.Enum):
    LEFT = -1
    RIGHT = 1


def clamp_ordinal(ordinal: int) -> int:
    """Saturate a proleptic ordinal into the range `date` can represent."""
    return max(MIN_ORDINAL, min(MAX_ORDINAL, ordinal))


@dataclass(frozen=True)
class ViewportSnapshot:
    """Immutable copy of the viewport used for a single frame."""

    zoom: int
    scroll_offset: int
    selected_index: int | None
    epoch: date

    @property
    def origin_ordinal(self) -> int:
        """Ordinal of the first date in column 0."""
        return clamp_ordinal(self.epoch.toordinal() + self.scroll_offset)

    @property
    def column0_date(self) -> date:
        return date.fromordinal(self.origin_ordinal)


class Viewport:
    """
    Navigable window over the date axis: zoom, scroll offset and selection.

    State is only changed through the transition methods below, each of which
    leaves zoom inside the configured bounds, the scroll offset inside the
    representable date range and the selection inside the list.
    """

    def __init__(
        self,
        today: date,
        config: TimelineConfig = DEFAULT_CONFIG,
        width: int | None = None,
        zoom: int = 1,
    ) -> None:
        self._config = config
        self._epoch_ordinal = config.epoch.toordinal()
        self._zoom = config.clamp_zoom(zoom)
        self._scroll_offset = 0
        self._selected_index: int | None = None
        self._width = max(0, width if width is not None else config.default_width)
        self.center_on_today(today)

    # Read-only state -----------------------------------------------------

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def selected_index(self) -> int | None:
        return self._selected_index

    @property
    def width(self) -> int:
        return self._width

    def snapshot(self) -> ViewportSnapshot:
        return ViewportSnapshot(
            zoom=self._zoom,
            scroll_offset=self._scroll_offset,
            selected_index=self._selected_index,
            epoch=self._config.epoch,
        )

    # Transitions ---------------------------------------------------------

    def resize(self, width: int) -> "Viewport":
        """Record the grid width that zoom and centring operate on."""
        self._width = max(0, width)
        return self

    def scroll(self, amount_columns: int, direction: ScrollDirection) -> "Viewport":
        """Shift by whole columns; empty space before or after the data is allowed."""
        delta = amount_columns * self._zoom * direction.value
        self._set_origin(self._origin_ordinal() + delta)
        return self

    def scroll_left(self, amount_columns: int = 1) -> "Viewport":
        return self.scroll(amount_columns, ScrollDirection.LEFT)

    def scroll_right(self, amount_columns: int = 1) -> "Viewport":
        return self.scroll(amount_columns, ScrollDirection.RIGHT)

    def zoom_in(self, viewport_width_columns: int | None = None) -> "Viewport":
        return self._set_zoom(self._zoom - 1, viewport_width_columns)

    def zoom_out(self, viewport_width_columns: int | None = None) -> "Viewport":
        return self._set_zoom(self._zoom + 1, viewport_width_columns)

    def center_on_today(self, today: date, viewport_width_columns: int | None = None) -> "Viewport":
        center = self._center_column(viewport_width_columns)
        self._set_origin(today.toordinal() - center * self._zoom)
        return self

    def jump_to_start(self) -> "Viewport":
        self._scroll_offset = 0
        return self

    def scroll_to(self, value: date) -> "Viewport":
        """Put `value` in column 0."""
        self._set_origin(value.toordinal())
        return self

    def select_next(self, total: int) -> "Viewport":
        if total <= 0:
            return self
        if self._selected_index is None:
            self._selected_index = 0
        else:
            self._selected_index = (min(self._selected_index, total - 1) + 1) % total
        return self

    def select_previous(self, total: int) -> "Viewport":
        if total <= 0:
            return self
        if self._selected_index is None:
            self._selected_index = total - 1
        else:
            self._selected_index = (min(self._selected_index, total - 1) - 1) % total
        return self

    def select(self, index: int, total: int) -> "Viewport":
        """Select `index`, clamped into the list; no-op for an empty list."""
        if total > 0:
            self._selected_index = max(0, min(index, total - 1))
        return self

    def sync_selection(self, total: int) -> "Viewport":
        """Re-clamp the selection after the interval list was replaced."""
        if total <= 0:
            self._selected_index = None
        elif self._selected_index is None:
            self._selected_index = 0
        else:
            self._selected_index = max(0, min(self._selected_index, total - 1))
        return self

    # Internals -----------------------------------------------------------

    def _origin_ordinal(self) -> int:
        return self._epoch_ordinal + self._scroll_offset

    def _set_origin(self, ordinal: int) -> None:
        self._scroll_offset = clamp_ordinal(ordinal) - self._epoch_ordinal

    def _center_column(self, viewport_width_columns: int | None) -> int:
        width = self._width if viewport_width_columns is None else max(0, viewport_width_columns)
        return width // 2

    def _set_zoom(self, zoom: int, viewport_width_columns: int | None) -> "Viewport":
        new_zoom = self._config.clamp_zoom(zoom)
        if new_zoom == self._zoom:
            return self
        center = self._center_column(viewport_width_columns)
        # First day of the centre column stays in the centre column.
        center_ordinal = self._origin_ordinal() + center * self._zoom
        self._zoom = new_zoom
        self._set_origin(center_ordinal - center * new_zoom)
        return self
