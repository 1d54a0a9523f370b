import datetime as dt
import random

from portfolio_timeline.lanes import LaneCache, allocate_lanes, max_concurrency
from portfolio_timeline.portfolio_models import Interval


def _interval(iid, start, end):
    return Interval(id=iid, start=start, end=end, label=iid.upper())


def _jan(day):
    return dt.date(2024, 1, day)


def _assert_no_overlap(intervals, assignment):
    for lane in range(assignment.lane_count):
        members = sorted((intervals[i] for i in assignment.members(lane)), key=lambda iv: iv.start)
        for earlier, later in zip(members, members[1:]):
            assert earlier.layout_end < later.start


def test_overlapping_pair_then_lane_reuse():
    first = _interval("a", _jan(1), _jan(10))
    second = _interval("b", _jan(5), _jan(15))

    assert allocate_lanes([first, second]).by_index == (0, 1)

    third = _interval("c", _jan(11), _jan(20))
    assignment = allocate_lanes([first, second, third])

    assert assignment.by_index == (0, 1, 0)
    assert assignment.lane_count == 2
    assert assignment.lane_for("c") == 0


def test_shared_boundary_day_is_a_conflict():
    assignment = allocate_lanes([_interval("a", _jan(1), _jan(10)), _interval("b", _jan(10), _jan(12))])

    assert assignment.by_index == (0, 1)


def test_empty_and_single_inputs():
    empty = allocate_lanes([])
    assert empty.by_index == ()
    assert empty.lane_count == 0

    single = allocate_lanes([_interval("a", _jan(3), _jan(4))])
    assert single.by_index == (0,)
    assert single.lane_count == 1


def test_identical_ranges_each_get_a_lane():
    intervals = [_interval(f"i{n}", _jan(2), _jan(9)) for n in range(4)]

    assert allocate_lanes(intervals).by_index == (0, 1, 2, 3)


def test_equal_starts_keep_caller_order():
    long = _interval("long", _jan(1), _jan(5))
    short = _interval("short", _jan(1), _jan(2))

    assert allocate_lanes([long, short]).by_index == (0, 1)
    assert allocate_lanes([short, long]).by_index == (0, 1)


def test_lanes_follow_start_order_not_list_order():
    late = _interval("late", _jan(20), _jan(25))
    early = _interval("early", _jan(1), _jan(3))

    assignment = allocate_lanes([late, early])

    assert assignment.by_index == (0, 0)
    assert assignment.lane_count == 1


def test_reversed_range_is_laid_out_as_single_day():
    reversed_range = _interval("r", _jan(5), _jan(1))
    same_day = _interval("s", _jan(5), _jan(6))
    next_day = _interval("n", _jan(6), _jan(8))

    assignment = allocate_lanes([reversed_range, same_day, next_day])

    assert assignment.by_index == (0, 1, 0)


def test_random_layouts_are_valid_minimal_and_deterministic():
    rng = random.Random(1234)
    for _ in range(25):
        intervals = []
        for n in range(rng.randint(1, 30)):
            start = _jan(1) + dt.timedelta(days=rng.randint(0, 60))
            end = start + dt.timedelta(days=rng.randint(0, 20))
            intervals.append(_interval(f"i{n}", start, end))

        assignment = allocate_lanes(intervals)

        _assert_no_overlap(intervals, assignment)
        assert assignment.lane_count == max_concurrency(intervals)
        assert allocate_lanes(intervals) == assignment


def test_cache_recomputes_on_identity_or_length_change():
    intervals = [_interval("a", _jan(1), _jan(10)), _interval("b", _jan(5), _jan(15))]
    cache = LaneCache()

    first = cache.get(intervals)
    assert cache.get(intervals) is first

    intervals.append(_interval("c", _jan(11), _jan(20)))
    grown = cache.get(intervals)
    assert grown is not first
    assert grown.by_index == (0, 1, 0)

    copy = list(intervals)
    assert cache.get(copy) is not grown
    assert cache.get(copy) == grown


def test_cache_invalidate_forces_recompute():
    intervals = [_interval("a", _jan(1), _jan(10))]
    cache = LaneCache()
    first = cache.get(intervals)

    cache.invalidate()

    assert cache.get(intervals) is not first
