"""
Protocol Interfaces for Loose Coupling.

This module defines Protocol interfaces (PEP 544) for the collaborators the
timeline engine relies on but does not own: date parsing/formatting and the
host application's item store.

Protocols allow structural subtyping where any class that implements the
required methods automatically satisfies the protocol without explicit
inheritance.
"""

from datetime import date
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class DateUtility(Protocol):
    """
    Protocol for the date parsing and formatting collaborator.

    The engine never parses or formats dates itself; it delegates to an
    object satisfying this protocol.
    """

    def parse(self, value: Any) -> Optional[date]:
        """
        Parse a value into a calendar date.

        Args:
            value: A date, datetime or date string.

        Returns:
            The parsed date, or None if the value is not a valid date.
        """
        ...

    def format(self, value: date) -> str:
        """
        Format a date for serialization.

        Args:
            value: The date to format.

        Returns:
            The formatted date string.
        """
        ...

    def day_difference(self, later: date, earlier: date) -> int:
        """
        Whole days from ``earlier`` to ``later``.

        Args:
            later: The later date.
            earlier: The earlier date.

        Returns:
            Number of days, negative if ``later`` precedes ``earlier``.
        """
        ...


@runtime_checkable
class ItemLookup(Protocol):
    """
    Protocol for reading the current version of an item from the host store.

    The host store is the source of truth. Drag and edit operations read
    through this interface before producing an updated copy.
    """

    def get_item(self, item_id: Any) -> Optional[Any]:
        """
        Get the current record for an item.

        Args:
            item_id: The stable item identifier.

        Returns:
            The item record (TimelineItem or mapping), or None if unknown.
        """
        ...
