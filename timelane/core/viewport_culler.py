"""
Viewport Culler Module.

Computes the render-ready view model for the visible part of the timeline:
- Visible lane band, padded by a lane buffer
- Visible pixel band and its date window, padded by a day buffer
- The subset of laned items intersecting both bands, with pixel geometry
- Month-boundary axis markers near the visible window

Everything here is a pure function of its inputs. Items outside the buffered
viewport never get geometry computed for them.
"""

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import MAXYEAR, date
from typing import List, Sequence, Tuple

from timelane.core.coordinates import CoordinateMapper, DateRange
from timelane.core.dates import add_months, first_of_month, month_label
from timelane.core.items import LanedItem
from timelane.core.timeline_config import TimelineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportState:
    """
    Scroll position, container size and zoom of the timeline viewport.

    Attributes:
        scroll_top: Vertical scroll offset in pixels (>= 0).
        scroll_left: Horizontal scroll offset in pixels (>= 0).
        container_width: Visible width in pixels (> 0).
        container_height: Visible height in pixels (> 0).
        zoom_level: Current zoom level.
    """

    scroll_top: float = 0.0
    scroll_left: float = 0.0
    container_width: float = 800.0
    container_height: float = 600.0
    zoom_level: float = 1.0

    @classmethod
    def from_config(cls, config: TimelineConfig) -> "ViewportState":
        """Creates the initial viewport state from configuration defaults."""
        return cls(
            container_width=config.default_container_width,
            container_height=config.default_container_height,
            zoom_level=config.clamp_zoom(config.default_zoom),
        )


@dataclass(frozen=True)
class VisibleRanges:
    """
    The buffered region of the timeline that must be rendered.

    Attributes:
        start_lane: First lane to render.
        end_lane: Last lane to render (inclusive).
        start_pixel: Left edge of the pixel window.
        end_pixel: Right edge of the pixel window.
        start_date: First whole day touching start_pixel.
        end_date: Last whole day touching end_pixel.
    """

    start_lane: int
    end_lane: int
    start_pixel: float
    end_pixel: float
    start_date: date
    end_date: date

    @property
    def lane_range(self) -> Tuple[int, int]:
        return (self.start_lane, self.end_lane)

    @property
    def pixel_range(self) -> Tuple[float, float]:
        return (self.start_pixel, self.end_pixel)

    @property
    def date_range(self) -> Tuple[date, date]:
        return (self.start_date, self.end_date)


@dataclass(frozen=True)
class VisibleItem:
    """
    A laned item positioned in timeline content coordinates.

    Attributes:
        laned_item: The item and its lane.
        x: Left edge in pixels.
        width: Distance from the start date to the end date in pixels.
        y: Top edge in pixels, below the header.
        height: Lane height in pixels.
    """

    laned_item: LanedItem
    x: float
    width: float
    y: float
    height: float

    @property
    def id(self):
        return self.laned_item.id

    @property
    def lane(self) -> int:
        return self.laned_item.lane


@dataclass(frozen=True)
class TimeMarker:
    """
    A month boundary on the date axis.

    Attributes:
        date: First day of the month.
        pixel: Horizontal position in pixels.
        label: Display text, e.g. "Jan 2025".
    """

    date: date
    pixel: float
    label: str


@dataclass(frozen=True)
class ViewModel:
    """
    Render-ready output of the timeline engine.

    Attributes:
        ranges: The buffered visible region.
        visible_items: Items intersecting the visible lanes and dates.
        visible_markers: Month markers near the visible window.
        total_width: Full scrollable width in pixels.
        total_height: Full scrollable height in pixels.
    """

    ranges: VisibleRanges
    visible_items: List[VisibleItem] = field(default_factory=list)
    visible_markers: List[TimeMarker] = field(default_factory=list)
    total_width: float = 0.0
    total_height: float = 0.0

    @property
    def visible_lane_range(self) -> Tuple[int, int]:
        return self.ranges.lane_range

    @property
    def visible_pixel_range(self) -> Tuple[float, float]:
        return self.ranges.pixel_range

    @property
    def visible_ids(self) -> List:
        return [visible.id for visible in self.visible_items]


def total_height(max_lane: int, config: TimelineConfig) -> float:
    """Full scrollable height for lanes 0..max_lane plus the header."""
    return (max_lane + 1) * config.lane_height + config.header_height


def compute_visible_ranges(
    viewport: ViewportState,
    max_lane: int,
    mapper: CoordinateMapper,
    config: TimelineConfig,
) -> VisibleRanges:
    """
    Calculates the buffered lane band and pixel window.

    Args:
        viewport: Current scroll offsets, container size and zoom.
        max_lane: Highest lane in use.
        mapper: Coordinate mapper for the current zoom.
        config: Geometry and buffer settings.

    Returns:
        VisibleRanges: The region that must be rendered.
    """
    lane_height = config.lane_height
    header_height = config.header_height

    start_lane = max(
        0,
        math.floor((viewport.scroll_top - header_height) / lane_height)
        - config.lane_buffer,
    )
    end_lane = min(
        max_lane,
        math.ceil(
            (viewport.scroll_top + viewport.container_height - header_height)
            / lane_height
        )
        + config.lane_buffer,
    )

    total_width = mapper.total_width
    date_pad_pixels = mapper.days_to_pixels(config.item_buffer_days)
    start_pixel = max(0.0, viewport.scroll_left - date_pad_pixels)
    end_pixel = min(
        total_width, viewport.scroll_left + viewport.container_width + date_pad_pixels
    )

    return VisibleRanges(
        start_lane=start_lane,
        end_lane=end_lane,
        start_pixel=start_pixel,
        end_pixel=end_pixel,
        # Widen to whole days so the date window covers the pixel window
        start_date=mapper.pixel_to_date_floor(start_pixel),
        end_date=mapper.pixel_to_date_ceil(end_pixel),
    )


def cull_items(
    laned_items: Sequence[LanedItem],
    ranges: VisibleRanges,
    mapper: CoordinateMapper,
    config: TimelineConfig,
) -> List[VisibleItem]:
    """
    Selects the items inside both the lane band and the date window.

    Args:
        laned_items: Items sorted by start date, as produced by assign_lanes.
        ranges: The visible region.
        mapper: Coordinate mapper for the current zoom.
        config: Geometry settings.

    Returns:
        List[VisibleItem]: Visible items with pixel geometry, in input order.
    """
    # Nothing past this index can start inside the window
    stop = bisect_right(laned_items, ranges.end_date, key=lambda item: item.start_date)

    visible: List[VisibleItem] = []
    for laned in laned_items[:stop]:
        if laned.lane < ranges.start_lane or laned.lane > ranges.end_lane:
            continue
        if laned.end_date < ranges.start_date:
            continue

        x = mapper.date_to_pixel(laned.start_date)
        visible.append(
            VisibleItem(
                laned_item=laned,
                x=x,
                width=mapper.date_to_pixel(laned.end_date) - x,
                y=config.header_height + laned.lane * config.lane_height,
                height=config.lane_height,
            )
        )
    return visible


def generate_time_markers(
    date_range: DateRange,
    ranges: VisibleRanges,
    mapper: CoordinateMapper,
    config: TimelineConfig,
) -> List[TimeMarker]:
    """
    Generates month markers near the visible pixel window.

    Steps one calendar month at a time from the first day of the month
    containing ``min_date`` up to ``max_date``.

    Args:
        date_range: The padded timeline range.
        ranges: The visible region.
        mapper: Coordinate mapper for the current zoom.
        config: Supplies marker_slack.

    Returns:
        List[TimeMarker]: Markers within marker_slack of the window.
    """
    low = ranges.start_pixel - config.marker_slack
    high = ranges.end_pixel + config.marker_slack

    markers: List[TimeMarker] = []
    current = first_of_month(date_range.min_date)
    while current <= date_range.max_date:
        pixel = mapper.date_to_pixel(current)
        if low <= pixel <= high:
            markers.append(TimeMarker(date=current, pixel=pixel, label=month_label(current)))
        if current.year == MAXYEAR and current.month == 12:
            break
        current = add_months(current, 1)
    return markers


def cull_viewport(
    viewport: ViewportState,
    laned_items: Sequence[LanedItem],
    max_lane: int,
    mapper: CoordinateMapper,
    date_range: DateRange,
    config: TimelineConfig,
) -> ViewModel:
    """
    Computes the view model for one viewport state.

    Args:
        viewport: Current scroll offsets, container size and zoom.
        laned_items: Full packed item set, sorted by start date.
        max_lane: Highest lane in use.
        mapper: Coordinate mapper for the current zoom.
        date_range: The padded timeline range.
        config: Geometry and buffer settings.

    Returns:
        ViewModel: Visible items, visible markers and total extent.
    """
    ranges = compute_visible_ranges(viewport, max_lane, mapper, config)
    visible_items = cull_items(laned_items, ranges, mapper, config)
    markers = generate_time_markers(date_range, ranges, mapper, config)

    logger.debug(
        f"Culled {len(laned_items)} items to {len(visible_items)}: "
        f"lanes {ranges.start_lane}-{ranges.end_lane}, "
        f"pixels {ranges.start_pixel:.1f}-{ranges.end_pixel:.1f}, "
        f"{len(markers)} markers"
    )

    return ViewModel(
        ranges=ranges,
        visible_items=visible_items,
        visible_markers=markers,
        total_width=mapper.total_width,
        total_height=total_height(max_lane, config),
    )
