"""
Unit tests for the lane assigner.

Tests the lane packing algorithm in isolation.
"""

import logging
import random
from datetime import date, timedelta

import pytest

from timelane.core.items import TimelineItem
from timelane.core.lane_assigner import (
    LaneAssigner,
    assign_lanes,
    filter_valid_items,
    max_lane,
    sort_items,
)
from timelane.core.sample_data import generate_large_dataset


def _record(item_id, start, end, **extra):
    return {"id": item_id, "name": f"Item {item_id}", "startDate": start, "endDate": end, **extra}


def _lanes_by_id(laned):
    return {entry.id: entry.lane for entry in laned}


class TestFilterValidItems:
    def test_drops_malformed_records(self, caplog):
        items = [
            _record(1, "2025-01-01", "2025-01-05"),
            {"id": 2, "name": "No dates"},
            _record(3, "2025-01-10", "2025-01-01"),
            _record(4, "bogus", "2025-01-02"),
            None,
            _record(5, "2025-02-01", "2025-02-02"),
        ]

        with caplog.at_level(logging.DEBUG, logger="timelane.core.lane_assigner"):
            valid = filter_valid_items(items)

        assert [item.id for item in valid] == [1, 5]
        assert "Dropped 4 malformed timeline items" in caplog.text

    @pytest.mark.parametrize("items", [None, [], "not a list", {"id": 1}, 12])
    def test_non_sequences_are_empty(self, items):
        assert filter_valid_items(items) == []


class TestAssignLanes:
    """Tests for assign_lanes."""

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_empty_and_none_inputs(self, strategy):
        assert assign_lanes([], strategy=strategy) == []
        assert assign_lanes(None, strategy=strategy) == []

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_gap_of_two_days_shares_lane(self, strategy):
        laned = assign_lanes(
            [_record("A", "2025-01-01", "2025-01-05"), _record("B", "2025-01-07", "2025-01-10")],
            strategy=strategy,
        )
        assert _lanes_by_id(laned) == {"A": 0, "B": 0}

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_next_day_start_shares_lane(self, strategy):
        laned = assign_lanes(
            [_record("A", "2025-01-01", "2025-01-05"), _record("B", "2025-01-06", "2025-01-08")],
            strategy=strategy,
        )
        assert _lanes_by_id(laned) == {"A": 0, "B": 0}

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_touching_items_do_not_share_lane(self, strategy):
        laned = assign_lanes(
            [_record("A", "2025-01-01", "2025-01-05"), _record("B", "2025-01-05", "2025-01-08")],
            strategy=strategy,
        )
        assert _lanes_by_id(laned) == {"A": 0, "B": 1}

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_identical_spans_stack(self, strategy):
        items = [_record(i, "2025-03-01", "2025-03-10") for i in range(10)]

        laned = assign_lanes(items, strategy=strategy)

        assert [entry.lane for entry in laned] == list(range(10))
        # Stable sort keeps input order for ties
        assert [entry.id for entry in laned] == list(range(10))

    @pytest.mark.parametrize("strategy", ["scan", "indexed"])
    def test_lane_reuse(self, strategy):
        items = [
            _record("D", "2025-01-14", "2025-01-20"),
            _record("B", "2025-01-03", "2025-01-12"),
            _record("C", "2025-01-12", "2025-01-15"),
            _record("A", "2025-01-01", "2025-01-10"),
        ]

        laned = assign_lanes(items, strategy=strategy)

        assert [entry.id for entry in laned] == ["A", "B", "C", "D"]
        assert [entry.lane for entry in laned] == [0, 1, 0, 1]

    def test_output_sorted_by_start_then_end(self):
        items = [
            _record(1, "2025-01-05", "2025-01-09"),
            _record(2, "2025-01-01", "2025-01-20"),
            _record(3, "2025-01-05", "2025-01-06"),
            _record(4, "2025-01-01", "2025-01-02"),
        ]

        laned = assign_lanes(items)

        assert [entry.id for entry in laned] == [4, 2, 3, 1]

    def test_lowest_free_lane_is_chosen(self):
        items = [
            _record("long", "2025-01-01", "2025-01-31"),
            _record("short1", "2025-01-01", "2025-01-03"),
            _record("short2", "2025-01-01", "2025-01-04"),
            _record("late", "2025-01-10", "2025-01-12"),
        ]

        laned = assign_lanes(items)

        # Lanes 0 and 1 are both free for "late"; the lower one wins
        assert _lanes_by_id(laned) == {"short1": 0, "short2": 1, "long": 2, "late": 0}

    def test_custom_gap(self):
        items = [_record("A", "2025-01-01", "2025-01-05"), _record("B", "2025-01-07", "2025-01-10")]

        assert _lanes_by_id(assign_lanes(items, gap_days=2)) == {"A": 0, "B": 0}
        assert _lanes_by_id(assign_lanes(items, gap_days=3)) == {"A": 0, "B": 1}

    def test_zero_gap_lets_touching_items_share(self):
        items = [_record("A", "2025-01-01", "2025-01-05"), _record("B", "2025-01-05", "2025-01-08")]
        assert _lanes_by_id(assign_lanes(items, gap_days=0)) == {"A": 0, "B": 0}

    def test_malformed_items_are_skipped(self):
        items = [
            _record("A", "2025-01-01", "2025-01-05"),
            {"name": "no id", "startDate": "2025-01-01", "endDate": "2025-01-05"},
            _record("B", "2025-01-01", "2025-01-05"),
        ]

        laned = assign_lanes(items)

        assert _lanes_by_id(laned) == {"A": 0, "B": 1}

    def test_accepts_timeline_item_instances(self):
        items = [
            TimelineItem(id=1, name="A", start_date=date(2025, 1, 1), end_date=date(2025, 1, 3)),
            TimelineItem(id=2, name="B", start_date=date(2025, 1, 2), end_date=date(2025, 1, 3)),
        ]

        laned = assign_lanes(items)

        assert laned[0].item is items[0]
        assert _lanes_by_id(laned) == {1: 0, 2: 1}

    def test_unknown_strategy_raises(self):
        with pytest.raises(ValueError):
            assign_lanes([], strategy="fastest")

    def test_input_is_not_mutated(self):
        items = [_record("B", "2025-01-05", "2025-01-06"), _record("A", "2025-01-01", "2025-01-02")]
        snapshot = [dict(item) for item in items]

        assign_lanes(items)

        assert items == snapshot


def _random_items(rng, count):
    base = date(2025, 1, 1)
    items = []
    for i in range(count):
        start = base + timedelta(days=rng.randint(0, 120))
        items.append(
            TimelineItem(
                id=i,
                name=f"R{i}",
                start_date=start,
                end_date=start + timedelta(days=rng.randint(0, 20)),
            )
        )
    return items


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
@pytest.mark.parametrize("gap_days", [0, 1, 3])
def test_indexed_strategy_matches_scan(seed, gap_days):
    items = _random_items(random.Random(seed), 300)

    scan = assign_lanes(items, gap_days=gap_days, strategy="scan")
    indexed = assign_lanes(items, gap_days=gap_days, strategy="indexed")

    assert [(e.id, e.lane) for e in scan] == [(e.id, e.lane) for e in indexed]


def test_no_lane_holds_overlapping_items():
    laned = assign_lanes(generate_large_dataset(2000, seed=3), strategy="indexed")

    last_end_by_lane = {}
    for entry in laned:
        previous_end = last_end_by_lane.get(entry.lane)
        if previous_end is not None:
            assert (entry.start_date - previous_end).days >= 1
        last_end_by_lane[entry.lane] = entry.end_date


def test_max_lane():
    assert max_lane([]) == 0
    laned = assign_lanes([_record(i, "2025-01-01", "2025-01-02") for i in range(4)])
    assert max_lane(laned) == 3


def test_sort_items_is_stable():
    a = TimelineItem(id="a", name="", start_date=date(2025, 1, 1), end_date=date(2025, 1, 2))
    b = TimelineItem(id="b", name="", start_date=date(2025, 1, 1), end_date=date(2025, 1, 2))
    assert [item.id for item in sort_items([b, a])] == ["b", "a"]


class TestLaneAssigner:
    def test_remembers_lane_count(self):
        assigner = LaneAssigner(strategy="indexed")

        laned = assigner.assign([_record(i, "2025-01-01", "2025-01-02") for i in range(3)])

        assert len(laned) == 3
        assert assigner.lane_count == 3

        assigner.assign([])
        assert assigner.lane_count == 0

    def test_rejects_unknown_strategy(self):
        with pytest.raises(ValueError):
            LaneAssigner(strategy="heap")
