"""
Lane Assigner Module.

Provides the lane packing algorithm for organizing items on the timeline
without overlaps using a greedy "First Fit" approach.

Items are validated, sorted by (start, end) and placed in the lowest-index
lane whose last item ends at least ``gap_days`` before the new item starts.
Items that touch (end == next start) count as overlapping with the default
one-day gap. Greedy first fit on start-sorted intervals is optimal in lane
count.
"""

import logging
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional

from timelane.app.constants import (
    DEFAULT_LANE_GAP_DAYS,
    LANE_STRATEGIES,
    LANE_STRATEGY_INDEXED,
    LANE_STRATEGY_SCAN,
)
from timelane.core.items import LanedItem, TimelineItem, coerce_item
from timelane.core.protocols import DateUtility

logger = logging.getLogger(__name__)

# Ordinal used for lane slots that have not been opened yet
_UNOPENED = date.max.toordinal() + 1


def filter_valid_items(
    items: Any, date_utility: Optional[DateUtility] = None
) -> List[TimelineItem]:
    """
    Drops every malformed record from the input.

    Args:
        items: A sequence of records. None, strings and mappings are treated
            as "no items".
        date_utility: Optional date collaborator used for parsing.

    Returns:
        List[TimelineItem]: Valid items in input order.
    """
    if items is None or isinstance(items, (str, bytes, Mapping)):
        return []
    try:
        iterator = iter(items)
    except TypeError:
        return []

    valid: List[TimelineItem] = []
    dropped = 0
    for record in iterator:
        item = coerce_item(record, date_utility)
        if item is None:
            dropped += 1
            continue
        valid.append(item)

    if dropped:
        logger.debug(f"Dropped {dropped} malformed timeline items")
    return valid


def sort_items(items: Iterable[TimelineItem]) -> List[TimelineItem]:
    """Sorts by start date, then end date. Ties keep their input order."""
    return sorted(items, key=lambda item: (item.start_date, item.end_date))


def assign_lanes(
    items: Any,
    gap_days: int = DEFAULT_LANE_GAP_DAYS,
    strategy: str = LANE_STRATEGY_SCAN,
    date_utility: Optional[DateUtility] = None,
) -> List[LanedItem]:
    """
    Packs items into the minimum number of lanes.

    Args:
        items: Sequence of TimelineItem instances or mappings.
        gap_days: Minimum whole days between the end of one item and the
            start of the next item in the same lane.
        strategy: ``"scan"`` for the linear lane scan or ``"indexed"`` for
            the segment tree search. Both produce identical output.
        date_utility: Optional date collaborator used for parsing.

    Returns:
        List[LanedItem]: Valid items in sorted order, each with its lane.

    Raises:
        ValueError: If the strategy name is unknown.
    """
    if strategy not in LANE_STRATEGIES:
        raise ValueError(f"Unknown lane strategy: {strategy!r}")

    sorted_items = sort_items(filter_valid_items(items, date_utility))
    if not sorted_items:
        return []

    if strategy == LANE_STRATEGY_INDEXED:
        lanes = _pack_indexed(sorted_items, gap_days)
    else:
        lanes = _pack_scan(sorted_items, gap_days)

    result = [LanedItem(item=item, lane=lane) for item, lane in zip(sorted_items, lanes)]
    logger.debug(
        f"Packed {len(result)} items into {max(lanes) + 1} lanes ({strategy})"
    )
    return result


def max_lane(laned_items: Iterable[LanedItem]) -> int:
    """Returns the highest lane index in use, 0 when there are no items."""
    return max((item.lane for item in laned_items), default=0)


def _pack_scan(sorted_items: List[TimelineItem], gap_days: int) -> List[int]:
    """First fit with a linear scan over lanes. O(n * lanes)."""
    lane_ends: List[int] = []
    assignments: List[int] = []

    for item in sorted_items:
        latest_end = item.start_date.toordinal() - gap_days
        assigned_lane = -1
        for lane_index, lane_end in enumerate(lane_ends):
            if lane_end <= latest_end:
                assigned_lane = lane_index
                break

        if assigned_lane == -1:
            assigned_lane = len(lane_ends)
            lane_ends.append(0)

        lane_ends[assigned_lane] = item.end_date.toordinal()
        assignments.append(assigned_lane)

    return assignments


def _pack_indexed(sorted_items: List[TimelineItem], gap_days: int) -> List[int]:
    """First fit using a min segment tree over lane end dates. O(n log n)."""
    index = _LaneEndIndex(len(sorted_items))
    assignments: List[int] = []

    for item in sorted_items:
        latest_end = item.start_date.toordinal() - gap_days
        assigned_lane = index.first_at_or_below(latest_end)
        if assigned_lane is None:
            assigned_lane = index.lane_count
            index.lane_count += 1
        index.update(assigned_lane, item.end_date.toordinal())
        assignments.append(assigned_lane)

    return assignments


class _LaneEndIndex:
    """
    Min segment tree over lane end ordinals.

    Finds the lowest lane index whose end is at or below a threshold in
    O(log n). Unopened slots hold a sentinel above every real date, so the
    search only ever returns open lanes.
    """

    def __init__(self, capacity: int):
        size = 1
        while size < max(capacity, 1):
            size *= 2
        self._size = size
        self._tree = [_UNOPENED] * (2 * size)
        self.lane_count = 0

    def update(self, lane: int, end_ordinal: int) -> None:
        pos = lane + self._size
        self._tree[pos] = end_ordinal
        pos //= 2
        while pos:
            self._tree[pos] = min(self._tree[2 * pos], self._tree[2 * pos + 1])
            pos //= 2

    def first_at_or_below(self, threshold: int) -> Optional[int]:
        if self._tree[1] > threshold:
            return None
        pos = 1
        while pos < self._size:
            left = 2 * pos
            pos = left if self._tree[left] <= threshold else left + 1
        return pos - self._size


class LaneAssigner:
    """
    Handles lane packing for timeline items.

    Thin stateful wrapper around :func:`assign_lanes` that remembers its
    settings and the lane count of the last run.
    """

    def __init__(
        self,
        gap_days: int = DEFAULT_LANE_GAP_DAYS,
        strategy: str = LANE_STRATEGY_SCAN,
        date_utility: Optional[DateUtility] = None,
    ):
        """
        Initializes the LaneAssigner.

        Args:
            gap_days: Minimum gap in days between items sharing a lane.
            strategy: ``"scan"`` or ``"indexed"``.
            date_utility: Optional date collaborator used for parsing.

        Raises:
            ValueError: If the strategy name is unknown.
        """
        if strategy not in LANE_STRATEGIES:
            raise ValueError(f"Unknown lane strategy: {strategy!r}")
        self.gap_days = gap_days
        self.strategy = strategy
        self.date_utility = date_utility
        self.lane_count = 0

    def assign(self, items: Any) -> List[LanedItem]:
        """
        Packs items into lanes.

        Args:
            items: Sequence of TimelineItem instances or mappings.

        Returns:
            List[LanedItem]: Sorted items with lanes.
        """
        laned = assign_lanes(
            items,
            gap_days=self.gap_days,
            strategy=self.strategy,
            date_utility=self.date_utility,
        )
        self.lane_count = max_lane(laned) + 1 if laned else 0
        return laned
