"""
Timeline Coordinates Module.

Provides the bidirectional mapping between calendar dates and horizontal
pixel offsets, and the padded date range the mapping is anchored to.

The full date range always spans ``base_width * zoom_level`` pixels.
Differences are whole days; there is no sub-day precision.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from timelane.app.constants import DEFAULT_BASE_WIDTH, DEFAULT_DATE_PADDING_DAYS

MIN_ORDINAL = date.min.toordinal()
MAX_ORDINAL = date.max.toordinal()

# Tolerance for float noise when snapping a pixel to a day boundary
DAY_EPSILON = 1e-6


@dataclass(frozen=True)
class DateRange:
    """
    Padded date span covered by the timeline.

    Attributes:
        min_date: Left edge of the timeline (pixel 0).
        max_date: Right edge of the timeline.
        total_days: Whole days between min_date and max_date.
    """

    min_date: date
    max_date: date
    total_days: int

    @property
    def is_empty(self) -> bool:
        return self.total_days == 0


def compute_date_range(
    items: Iterable,
    padding_days: int = DEFAULT_DATE_PADDING_DAYS,
    today: Optional[date] = None,
) -> DateRange:
    """
    Computes the padded union of all item spans.

    Args:
        items: Valid items exposing ``start_date`` and ``end_date``.
        padding_days: Days added on each side of the union.
        today: Anchor used when there are no items. Defaults to today.

    Returns:
        DateRange: The padded range, or a zero-day range at ``today`` when
            there are no items.
    """
    min_date: Optional[date] = None
    max_date: Optional[date] = None
    for item in items:
        if min_date is None or item.start_date < min_date:
            min_date = item.start_date
        if max_date is None or item.end_date > max_date:
            max_date = item.end_date

    if min_date is None or max_date is None:
        anchor = today if today is not None else date.today()
        return DateRange(min_date=anchor, max_date=anchor, total_days=0)

    # Padding stops at the calendar limits
    padded_min = date.fromordinal(max(MIN_ORDINAL, min_date.toordinal() - padding_days))
    padded_max = date.fromordinal(min(MAX_ORDINAL, max_date.toordinal() + padding_days))
    return DateRange(
        min_date=padded_min,
        max_date=padded_max,
        total_days=(padded_max - padded_min).days,
    )


@dataclass(frozen=True)
class CoordinateMapper:
    """
    Pure date <-> pixel transform.

    Attributes:
        min_date: Date mapped to pixel 0.
        total_days: Days spanned by the full width.
        zoom_level: Scalar applied to base_width.
        base_width: Logical width of the full range at zoom 1.0.
    """

    min_date: date
    total_days: int
    zoom_level: float = 1.0
    base_width: float = DEFAULT_BASE_WIDTH

    @classmethod
    def for_range(
        cls,
        date_range: DateRange,
        zoom_level: float = 1.0,
        base_width: float = DEFAULT_BASE_WIDTH,
    ) -> "CoordinateMapper":
        """Creates a mapper anchored to a DateRange."""
        return cls(
            min_date=date_range.min_date,
            total_days=date_range.total_days,
            zoom_level=zoom_level,
            base_width=base_width,
        )

    @property
    def total_width(self) -> float:
        """Pixel width of the full date range at the current zoom."""
        return self.base_width * self.zoom_level

    @property
    def pixels_per_day(self) -> float:
        """Pixels covered by one day, 0.0 for an empty range."""
        if self.total_days == 0:
            return 0.0
        return self.total_width / self.total_days

    def date_to_pixel(self, value: date) -> float:
        """
        Converts a date to its horizontal offset.

        Args:
            value: The date to place.

        Returns:
            float: Pixel offset from the left edge. 0.0 for an empty range.
        """
        if self.total_days == 0:
            return 0.0
        diff_days = (value - self.min_date).days
        return (diff_days / self.total_days) * self.total_width

    def pixel_to_date(self, pixel: float) -> date:
        """
        Converts a horizontal offset to the nearest calendar day.

        Args:
            pixel: Offset from the left edge.

        Returns:
            date: The day under the pixel. ``min_date`` for an empty range.
        """
        days = self._day_offset(pixel)
        if days is None:
            return self.min_date
        # Round half up so date_to_pixel -> pixel_to_date recovers the day
        return self._offset_date(math.floor(days + 0.5))

    def pixel_to_date_floor(self, pixel: float) -> date:
        """Converts a pixel to the day whose span contains it, rounding down."""
        days = self._day_offset(pixel)
        if days is None:
            return self.min_date
        return self._offset_date(math.floor(days + DAY_EPSILON))

    def pixel_to_date_ceil(self, pixel: float) -> date:
        """Converts a pixel to the first day boundary at or after it."""
        days = self._day_offset(pixel)
        if days is None:
            return self.min_date
        return self._offset_date(math.ceil(days - DAY_EPSILON))

    def _day_offset(self, pixel: float) -> Optional[float]:
        if self.total_days == 0 or self.total_width == 0 or math.isnan(pixel):
            return None
        ordinal = self.min_date.toordinal()
        days = (pixel / self.total_width) * self.total_days
        return min(max(days, MIN_ORDINAL - ordinal), MAX_ORDINAL - ordinal)

    def _offset_date(self, days: float) -> date:
        """Adds a day offset to min_date, clamped to the representable dates."""
        ordinal = self.min_date.toordinal()
        days = min(max(days, MIN_ORDINAL - ordinal), MAX_ORDINAL - ordinal)
        return date.fromordinal(ordinal + int(days))

    def days_to_pixels(self, days: float) -> float:
        """Converts a day count to a pixel distance at the current zoom."""
        return days * self.pixels_per_day
