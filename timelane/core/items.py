"""
Core Items Module.

Defines the TimelineItem record supplied by the host application and the
LanedItem projection produced by lane assignment.

TimelineItem is immutable from the engine's point of view. The derived lane
number never lives on the item itself; it is carried by a LanedItem that
wraps the canonical record.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from timelane.core.dates import format_date_for_input, parse_date
from timelane.core.protocols import DateUtility

logger = logging.getLogger(__name__)

# Keys understood by TimelineItem.from_dict; anything else is kept in `extra`.
_START_KEYS = ("startDate", "start_date")
_END_KEYS = ("endDate", "end_date")
_KNOWN_KEYS = frozenset(("id", "name", "color", "lane") + _START_KEYS + _END_KEYS)


@dataclass(frozen=True)
class TimelineItem:
    """
    A date-ranged record shown as a bar on the timeline.

    Attributes:
        id: Stable unique key.
        name: Display label.
        start_date: First day of the item (inclusive).
        end_date: Last day of the item (inclusive).
        color: Opaque presentation attribute, passed through unchanged.
        extra: Any additional fields from the input record.
    """

    id: Any
    name: str
    start_date: date
    end_date: date
    color: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def duration_days(self) -> int:
        """Inclusive length of the item in days."""
        return (self.end_date - self.start_date).days + 1

    def with_dates(self, start_date: date, end_date: date) -> "TimelineItem":
        """Returns a copy with new start and end dates."""
        return replace(self, start_date=start_date, end_date=end_date)

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the item to a dictionary using the host's field names.

        Returns:
            Dict[str, Any]: camelCase keys with ISO dates, plus extra fields.
        """
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "name": self.name,
                "startDate": format_date_for_input(self.start_date),
                "endDate": format_date_for_input(self.end_date),
                "color": self.color,
            }
        )
        return data

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], date_utility: Optional[DateUtility] = None
    ) -> "TimelineItem":
        """
        Creates a TimelineItem from a mapping.

        Args:
            data: Record with ``id``, ``name``, ``startDate``/``start_date``,
                ``endDate``/``end_date`` and optional ``color``.
            date_utility: Optional date collaborator used for parsing.

        Returns:
            TimelineItem: A new item.

        Raises:
            KeyError: If ``id`` or a date field is missing.
            ValueError: If a date cannot be parsed or the range is inverted.
        """
        parse = date_utility.parse if date_utility is not None else parse_date

        if "id" not in data or data["id"] is None:
            raise KeyError("id")

        start_raw = _first_present(data, _START_KEYS)
        end_raw = _first_present(data, _END_KEYS)
        start_date = parse(start_raw)
        end_date = parse(end_raw)
        if start_date is None or end_date is None:
            raise ValueError(f"Invalid dates: {start_raw!r} - {end_raw!r}")
        if end_date < start_date:
            raise ValueError(f"End date {end_date} is before start date {start_date}")

        name = data.get("name")
        extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}
        return cls(
            id=data["id"],
            name="" if name is None else str(name),
            start_date=start_date,
            end_date=end_date,
            color=data.get("color"),
            extra=extra,
        )


@dataclass(frozen=True)
class LanedItem:
    """
    A valid TimelineItem tagged with its computed lane.

    The lane is recomputed from scratch whenever the item set changes and is
    not a stable identity; only ``item.id`` is.
    """

    item: TimelineItem
    lane: int

    @property
    def id(self) -> Any:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def start_date(self) -> date:
        return self.item.start_date

    @property
    def end_date(self) -> date:
        return self.item.end_date

    @property
    def color(self) -> Optional[str]:
        return self.item.color

    def to_dict(self) -> Dict[str, Any]:
        """Returns the item's dictionary plus its ``lane``."""
        data = self.item.to_dict()
        data["lane"] = self.lane
        return data


def coerce_item(
    record: Any, date_utility: Optional[DateUtility] = None
) -> Optional[TimelineItem]:
    """
    Converts an input record into a valid TimelineItem.

    Never raises: anything that is not a well-formed record is reported as
    None so callers can silently drop it.

    Args:
        record: A TimelineItem or a mapping.
        date_utility: Optional date collaborator used for parsing.

    Returns:
        Optional[TimelineItem]: The valid item, or None if malformed.
    """
    if isinstance(record, TimelineItem):
        if record.id is None:
            return None
        if not (_is_day(record.start_date) and _is_day(record.end_date)):
            return None
        if record.end_date < record.start_date:
            return None
        return record
    if not isinstance(record, Mapping):
        return None
    try:
        return TimelineItem.from_dict(record, date_utility)
    except (KeyError, ValueError, TypeError):
        return None


def _first_present(data: Mapping[str, Any], keys) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _is_day(value: Any) -> bool:
    # datetime subclasses date but cannot be compared with one
    return isinstance(value, date) and not isinstance(value, datetime)
