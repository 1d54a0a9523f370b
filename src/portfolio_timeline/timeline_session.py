from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Sequence

from .commands import NavigationCommand, apply_command
from .config import DEFAULT_CONFIG, TimelineConfig
from .grid import CellGrid
from .lanes import LaneCache
from .portfolio_models import Interval
from .render_status import StatusLine, render_status_line
from .render_timeline import TimelineFrame, render_timeline
from .viewport import Viewport

logger = logging.getLogger(__name__)


class TimelineSession:
    """
    Timeline state owned by a single draw loop: viewport, intervals and lane cache.

    Each draw takes one viewport snapshot so a frame never mixes states.
    """

    def __init__(
        self,
        today: Callable[[], date] = date.today,
        config: TimelineConfig = DEFAULT_CONFIG,
        zoom: int = 1,
    ) -> None:
        self.config = config
        self._today = today
        self._intervals: list[Interval] = []
        self._lanes = LaneCache()
        self.viewport = Viewport(today(), config, zoom=zoom)
        self._sized = False

    @property
    def today(self) -> date:
        return self._today()

    @property
    def intervals(self) -> list[Interval]:
        return self._intervals

    def resize(self, width: int) -> None:
        """Track the drawing width; the first real width re-centres on today."""
        self.viewport.resize(width)
        if width > 0 and not self._sized:
            self._sized = True
            self.viewport.center_on_today(self.today)

    def replace_intervals(self, intervals: Sequence[Interval]) -> None:
        """Swap in a fresh snapshot; lanes are recomputed on the next draw."""
        self._intervals = list(intervals)
        self._lanes.invalidate()
        self.viewport.sync_selection(len(self._intervals))
        logger.debug("Timeline now holds %d intervals", len(self._intervals))

    def apply(self, command: NavigationCommand, width: int | None = None) -> None:
        apply_command(self.viewport, command, len(self._intervals), self.today, width)

    def draw(self, width: int, height: int) -> tuple[CellGrid, TimelineFrame]:
        grid = CellGrid(width, height)
        intervals = self._intervals
        frame = render_timeline(
            grid,
            grid.area,
            intervals,
            self._lanes.get(intervals),
            self.viewport.snapshot(),
            self.today,
            self.config,
        )
        if frame.hidden_lanes:
            logger.debug("%d lanes do not fit in %d rows", frame.hidden_lanes, height)
        return grid, frame

    def status_line(self) -> StatusLine:
        return render_status_line(self.viewport.snapshot(), self._intervals, self.today)
