"""
Timeline Pipeline Module.

Explicit two-stage recomputation of the timeline:

1. ``build_layout`` runs once per item-set change: validates and packs the
   items and derives the padded date range.
2. ``recompute`` runs after every viewport event: builds the coordinate
   mapper for the current zoom and culls the layout to a view model.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional

from timelane.core.coordinates import CoordinateMapper, DateRange, compute_date_range
from timelane.core.items import LanedItem
from timelane.core.lane_assigner import assign_lanes, max_lane
from timelane.core.protocols import DateUtility
from timelane.core.timeline_config import TimelineConfig
from timelane.core.viewport_culler import ViewModel, ViewportState, cull_viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineLayout:
    """
    Packed item set and its date range.

    Attributes:
        laned_items: Valid items sorted by (start, end) with lanes.
        max_lane: Highest lane in use, 0 when empty.
        date_range: Padded union of the item spans.
    """

    laned_items: List[LanedItem] = field(default_factory=list)
    max_lane: int = 0
    date_range: Optional[DateRange] = None

    @property
    def lane_count(self) -> int:
        return self.max_lane + 1 if self.laned_items else 0

    def find(self, item_id: Any) -> Optional[LanedItem]:
        """Returns the laned item with the given id, if present."""
        for laned in self.laned_items:
            if laned.id == item_id:
                return laned
        return None


def build_layout(
    items: Any,
    config: TimelineConfig,
    today: Optional[date] = None,
    date_utility: Optional[DateUtility] = None,
) -> TimelineLayout:
    """
    Packs items into lanes and derives the padded date range.

    Args:
        items: Sequence of TimelineItem instances or mappings.
        config: Supplies lane gap, strategy and date padding.
        today: Anchor date for an empty item set.
        date_utility: Optional date collaborator used for parsing.

    Returns:
        TimelineLayout: The packed layout.
    """
    laned_items = assign_lanes(
        items,
        gap_days=config.lane_gap_days,
        strategy=config.lane_strategy,
        date_utility=date_utility,
    )
    date_range = compute_date_range(
        laned_items, padding_days=config.date_padding_days, today=today
    )
    return TimelineLayout(
        laned_items=laned_items,
        max_lane=max_lane(laned_items),
        date_range=date_range,
    )


def build_mapper(
    layout: TimelineLayout, zoom_level: float, config: TimelineConfig
) -> CoordinateMapper:
    """Creates the coordinate mapper for a layout at a zoom level."""
    if layout.date_range is None:
        raise ValueError("Layout has no date range")
    return CoordinateMapper.for_range(
        layout.date_range, zoom_level=zoom_level, base_width=config.base_width
    )


def recompute(
    layout: TimelineLayout, viewport: ViewportState, config: TimelineConfig
) -> ViewModel:
    """
    Computes the view model for a layout and viewport state.

    Args:
        layout: Output of build_layout.
        viewport: Current scroll offsets, container size and zoom.
        config: Geometry and buffer settings.

    Returns:
        ViewModel: Render-ready output.
    """
    mapper = build_mapper(layout, viewport.zoom_level, config)
    return cull_viewport(
        viewport,
        layout.laned_items,
        layout.max_lane,
        mapper,
        layout.date_range,
        config,
    )
