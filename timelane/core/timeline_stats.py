"""
Timeline Statistics Module.

Summary figures for an item set: how many records were supplied, how many
are valid, how many lanes they pack into and how many days they span.
"""

from dataclasses import dataclass
from typing import Any, Optional

from timelane.app.constants import DEFAULT_LANE_GAP_DAYS, LANE_STRATEGY_SCAN
from timelane.core.lane_assigner import assign_lanes


@dataclass(frozen=True)
class TimelineStats:
    """
    Attributes:
        total_items: Number of input records.
        valid_items: Number of records that passed validation.
        total_lanes: Lanes needed to pack the valid items.
        span_days: Days from the earliest start to the latest end, or None
            when there are no valid items.
    """

    total_items: int
    valid_items: int
    total_lanes: int
    span_days: Optional[int]

    def to_dict(self) -> dict:
        return {
            "total_items": self.total_items,
            "valid_items": self.valid_items,
            "total_lanes": self.total_lanes,
            "span_days": self.span_days,
        }


def summarize_items(
    items: Any,
    gap_days: int = DEFAULT_LANE_GAP_DAYS,
    strategy: str = LANE_STRATEGY_SCAN,
) -> TimelineStats:
    """
    Computes summary statistics for an item set.

    Args:
        items: Sequence of TimelineItem instances or mappings.
        gap_days: Lane gap used for packing.
        strategy: Lane search strategy.

    Returns:
        TimelineStats: The summary.
    """
    try:
        total = len(items)
    except TypeError:
        total = 0

    laned = assign_lanes(items, gap_days=gap_days, strategy=strategy)
    if not laned:
        return TimelineStats(total_items=total, valid_items=0, total_lanes=0, span_days=None)

    earliest = min(item.start_date for item in laned)
    latest = max(item.end_date for item in laned)
    return TimelineStats(
        total_items=total,
        valid_items=len(laned),
        total_lanes=max(item.lane for item in laned) + 1,
        span_days=(latest - earliest).days,
    )
