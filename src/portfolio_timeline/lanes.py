from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from .portfolio_models import Interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaneAssignment:
    """
    Lane per interval for one input snapshot.

    `by_index[i]` is the lane of the i-th interval in caller order.
    """

    by_index: tuple[int, ...]
    by_id: dict[str, int]
    lane_count: int

    def lane_of(self, index: int) -> int:
        return self.by_index[index]

    def lane_for(self, interval_id: str) -> int | None:
        return self.by_id.get(interval_id)

    def members(self, lane: int) -> list[int]:
        """Input indices placed on `lane`, in input order."""
        return [idx for idx, assigned in enumerate(self.by_index) if assigned == lane]


EMPTY_ASSIGNMENT = LaneAssignment(by_index=(), by_id={}, lane_count=0)


def allocate_lanes(intervals: Sequence[Interval]) -> LaneAssignment:
    """
    Greedy interval partitioning onto the fewest lanes.

    - Intervals are visited by start date; equal starts keep caller order.
    - Each goes to the lowest lane whose last end is strictly before its start.
      Ranges are inclusive, so sharing a boundary day is a conflict.
    - A reversed range (end < start) is laid out as a single day at start.
    """

    if not intervals:
        return EMPTY_ASSIGNMENT

    order = sorted(range(len(intervals)), key=lambda idx: (intervals[idx].start, idx))
    lane_ends: list[date] = []
    lanes = [0] * len(intervals)

    for idx in order:
        interval = intervals[idx]
        lane = _first_free_lane(lane_ends, interval.start)
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(interval.layout_end)
        else:
            lane_ends[lane] = interval.layout_end
        lanes[idx] = lane

    by_id: dict[str, int] = {}
    for idx, interval in enumerate(intervals):
        by_id.setdefault(interval.id, lanes[idx])

    return LaneAssignment(by_index=tuple(lanes), by_id=by_id, lane_count=len(lane_ends))


def _first_free_lane(lane_ends: list[date], start: date) -> int | None:
    for lane, end in enumerate(lane_ends):
        if end < start:
            return lane
    return None


def max_concurrency(intervals: Sequence[Interval]) -> int:
    """Largest number of intervals open on any single day (inclusive ranges)."""

    events: list[tuple[date, int]] = []
    for interval in intervals:
        events.append((interval.start, 0))
        events.append((interval.layout_end, 1))
    # Opens sort before closes on the same day, so touching ranges count as overlapping.
    events.sort()

    open_now = 0
    peak = 0
    for _, kind in events:
        if kind == 0:
            open_now += 1
            peak = max(peak, open_now)
        else:
            open_now -= 1
    return peak


class LaneCache:
    """
    Memoises the assignment for the most recent interval list.

    Any change of list identity or length recomputes everything; there is no
    incremental update.
    """

    def __init__(self) -> None:
        self._source: Sequence[Interval] | None = None
        self._length = -1
        self._assignment: LaneAssignment = EMPTY_ASSIGNMENT

    def get(self, intervals: Sequence[Interval]) -> LaneAssignment:
        if intervals is not self._source or len(intervals) != self._length:
            self._assignment = allocate_lanes(intervals)
            self._source = intervals
            self._length = len(intervals)
            logger.debug(
                "Recomputed lanes for %d intervals (%d lanes)",
                self._length,
                self._assignment.lane_count,
            )
        return self._assignment

    def invalidate(self) -> None:
        self._source = None
        self._length = -1
        self._assignment = EMPTY_ASSIGNMENT
