"""
Timeline Controller Module.

Owns the viewport state and zoom level of a timeline and turns viewport
events into view models. Also hosts the drag, resize and edit interactions
that turn pointer positions and form input into validated item updates.

The controller follows the same loose-coupling rule as the rest of the app:
it never touches widgets or the item store directly. Results go out through
signals and the host store stays the source of truth.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from timelane.core.coordinates import MAX_ORDINAL, MIN_ORDINAL, CoordinateMapper
from timelane.core.dates import IsoDateUtility
from timelane.core.items import TimelineItem, coerce_item
from timelane.core.protocols import DateUtility, ItemLookup
from timelane.core.timeline_config import TimelineConfig
from timelane.core.timeline_pipeline import (
    TimelineLayout,
    build_layout,
    build_mapper,
    recompute,
)
from timelane.core.viewport_culler import ViewModel, ViewportState
from timelane.gui.widgets.viewport_binding import ViewportBinding

logger = logging.getLogger(__name__)


class DragMode(str, Enum):
    """Which part of an item a drag gesture manipulates."""

    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


class ZoomDirection(str, Enum):
    """Zoom requests accepted by set_zoom."""

    IN = "in"
    OUT = "out"
    RESET = "reset"


DRAG_IDLE = "idle"


@dataclass(frozen=True)
class DragState:
    """
    An active drag gesture.

    Attributes:
        item_id: Id of the dragged item.
        mode: Which part of the item is dragged.
        anchor_date: Date under the pointer when the drag began.
        origin_start: Start date of the item when the drag began.
        origin_end: End date of the item when the drag began.
    """

    item_id: Any
    mode: DragMode
    anchor_date: date
    origin_start: date
    origin_end: date


@dataclass
class EditSession:
    """
    Draft values of an inline edit in progress.

    Dates are kept as text exactly as typed or picked.
    """

    item_id: Any
    name: str
    start_date: str
    end_date: str
    date_utility: DateUtility

    @property
    def is_save_disabled(self) -> bool:
        """
        True while the draft cannot be committed.

        Saving is blocked for a blank name, a missing or unparseable date,
        or a start date after the end date.
        """
        if not self.name.strip() or not self.start_date or not self.end_date:
            return True
        start = self.date_utility.parse(self.start_date)
        end = self.date_utility.parse(self.end_date)
        if start is None or end is None:
            return True
        return start > end


class TimelineController(QObject):
    """
    Stateful orchestrator of the timeline engine.

    Handles:
    - Item-set changes (re-pack lanes, re-derive the date range)
    - Scroll, resize and zoom events (re-cull the view model)
    - Drag/resize gestures (idle -> dragging(mode) -> idle)
    - Inline edit commits, selection and viewport bindings
    """

    view_model_changed = Signal(object)  # ViewModel
    item_updated = Signal(object)  # TimelineItem proposed for the host store
    zoom_changed = Signal(float)
    drag_state_changed = Signal(str)  # "idle" or a DragMode value

    def __init__(
        self,
        items: Any = None,
        config: Optional[TimelineConfig] = None,
        on_item_update: Optional[Callable[[TimelineItem], None]] = None,
        item_lookup: Optional[ItemLookup] = None,
        date_utility: Optional[DateUtility] = None,
        today: Optional[date] = None,
        parent: Optional[QObject] = None,
    ):
        """
        Initializes the TimelineController.

        Args:
            items: Initial item records.
            config: Engine settings. Defaults to TimelineConfig().
            on_item_update: Callback connected to item_updated.
            item_lookup: Optional live view of the host store. When omitted
                the latest set_items snapshot is used.
            date_utility: Date collaborator. Defaults to IsoDateUtility.
            today: Anchor date for an empty timeline.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._config = config or TimelineConfig()
        self._date_utility = date_utility or IsoDateUtility()
        self._item_lookup = item_lookup
        self._today = today

        self._viewport = ViewportState.from_config(self._config)
        self._items: List[Any] = []
        self._items_by_id: Dict[Any, TimelineItem] = {}
        self._layout = TimelineLayout()
        self._mapper: Optional[CoordinateMapper] = None
        self._view_model: Optional[ViewModel] = None
        self._active = True

        self._drag: Optional[DragState] = None
        self._selected_item_id: Any = None
        self._edit_session: Optional[EditSession] = None
        self._bindings: List[ViewportBinding] = []

        if on_item_update is not None:
            self.item_updated.connect(on_item_update)

        self.set_items(items or [])

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def viewport(self) -> ViewportState:
        return self._viewport

    @property
    def zoom_level(self) -> float:
        return self._viewport.zoom_level

    @property
    def layout(self) -> TimelineLayout:
        return self._layout

    @property
    def mapper(self) -> Optional[CoordinateMapper]:
        return self._mapper

    @property
    def view_model(self) -> Optional[ViewModel]:
        return self._view_model

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def drag_state(self) -> Optional[DragState]:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def selected_item_id(self) -> Any:
        return self._selected_item_id

    @property
    def edit_session(self) -> Optional[EditSession]:
        return self._edit_session

    @property
    def bindings(self) -> Tuple[ViewportBinding, ...]:
        """Viewport bindings that are still attached."""
        return tuple(self._bindings)

    # ------------------------------------------------------------------
    # Item set and viewport events
    # ------------------------------------------------------------------

    def set_items(self, items: Any) -> Optional[ViewModel]:
        """
        Replaces the item snapshot and recomputes everything.

        Args:
            items: Sequence of TimelineItem instances or mappings.

        Returns:
            Optional[ViewModel]: The new view model, None after teardown.
        """
        if not self._active:
            logger.debug("set_items ignored after teardown")
            return None

        self._items = list(items) if items else []
        self._items_by_id = {}
        for record in self._items:
            item = coerce_item(record, self._date_utility)
            if item is not None:
                self._items_by_id[item.id] = item

        self._layout = build_layout(
            self._items,
            self._config,
            today=self._today,
            date_utility=self._date_utility,
        )
        logger.debug(
            f"Item set changed: {len(self._items)} records, "
            f"{len(self._layout.laned_items)} valid, {self._layout.lane_count} lanes"
        )
        return self._recompute()

    def on_scroll(self, top: float, left: float) -> Optional[ViewModel]:
        """
        Handles a scroll event.

        Args:
            top: Vertical scroll offset. Negative values are clamped to 0.
            left: Horizontal scroll offset. Negative values are clamped to 0.
        """
        if not self._active:
            return None
        self._viewport = replace(
            self._viewport, scroll_top=max(0.0, top), scroll_left=max(0.0, left)
        )
        return self._recompute()

    def on_resize(self, width: float, height: float) -> Optional[ViewModel]:
        """
        Handles a container resize.

        Non-positive sizes (collapsed or hidden containers) are ignored.

        Args:
            width: New container width in pixels.
            height: New container height in pixels.
        """
        if not self._active:
            return None
        if width <= 0 or height <= 0:
            logger.debug(f"Ignoring degenerate container size {width}x{height}")
            return self._view_model
        self._viewport = replace(
            self._viewport, container_width=width, container_height=height
        )
        return self._recompute()

    def set_zoom(self, direction: Any) -> Optional[ViewModel]:
        """
        Zooms in or out by one step, or resets the zoom.

        Args:
            direction: A ZoomDirection or its value ("in", "out", "reset").

        Raises:
            ValueError: If the direction is unknown.
        """
        direction = ZoomDirection(direction)
        current = self._viewport.zoom_level
        if direction is ZoomDirection.IN:
            target = current * self._config.zoom_step
        elif direction is ZoomDirection.OUT:
            target = current / self._config.zoom_step
        else:
            target = self._config.default_zoom
        return self.set_zoom_level(target)

    def zoom_in(self) -> Optional[ViewModel]:
        return self.set_zoom(ZoomDirection.IN)

    def zoom_out(self) -> Optional[ViewModel]:
        return self.set_zoom(ZoomDirection.OUT)

    def reset_zoom(self) -> Optional[ViewModel]:
        return self.set_zoom(ZoomDirection.RESET)

    def set_zoom_level(self, level: float) -> Optional[ViewModel]:
        """
        Sets the zoom level, clamped to the configured range.

        Args:
            level: Requested zoom level.

        Returns:
            Optional[ViewModel]: The current view model.
        """
        if not self._active:
            return None
        clamped = self._config.clamp_zoom(level)
        if clamped == self._viewport.zoom_level:
            return self._view_model

        self._viewport = replace(self._viewport, zoom_level=clamped)
        logger.debug(f"Zoom level set to {clamped:.3f}")
        self.zoom_changed.emit(clamped)
        return self._recompute()

    def _recompute(self) -> ViewModel:
        self._mapper = build_mapper(self._layout, self._viewport.zoom_level, self._config)
        self._view_model = recompute(self._layout, self._viewport, self._config)
        self.view_model_changed.emit(self._view_model)
        return self._view_model

    # ------------------------------------------------------------------
    # Drag and resize
    # ------------------------------------------------------------------

    def begin_drag(
        self, item_id: Any, mode: Any, pointer_x: Optional[float] = None
    ) -> bool:
        """
        Enters the dragging state for an item.

        Args:
            item_id: Id of the item under the pointer.
            mode: A DragMode or its value.
            pointer_x: Pointer position in content pixels. When omitted the
                drag is anchored at the item's start (move, resize-start)
                or end (resize-end).

        Returns:
            bool: True if the drag started, False if it was refused because
                a drag is already active or the item is unknown.

        Raises:
            ValueError: If the mode is unknown.
        """
        mode = DragMode(mode)
        if not self._active:
            return False
        if self._drag is not None:
            logger.warning(
                f"Refusing drag of {item_id!r}: already dragging {self._drag.item_id!r}"
            )
            return False

        item = self._current_item(item_id)
        if item is None:
            logger.warning(f"Refusing drag of unknown item {item_id!r}")
            return False

        if pointer_x is not None:
            anchor = self._mapper.pixel_to_date(pointer_x)
        elif mode is DragMode.RESIZE_END:
            anchor = item.end_date
        else:
            anchor = item.start_date

        self._drag = DragState(
            item_id=item_id,
            mode=mode,
            anchor_date=anchor,
            origin_start=item.start_date,
            origin_end=item.end_date,
        )
        logger.debug(f"Drag started: {item_id!r} ({mode.value}) at {anchor}")
        self.drag_state_changed.emit(mode.value)
        return True

    def update_drag(self, pixel_x: float) -> Optional[TimelineItem]:
        """
        Derives and emits the item proposed by the pointer position.

        A move shifts the dates the item had when the drag began by the
        distance from the drag anchor, so each step is independent of
        whether the host wrote earlier proposals back. Other fields are
        read from the store on every step, so an edit made elsewhere during
        the drag is never overwritten by a stale copy.

        Args:
            pixel_x: Pointer position in content pixels.

        Returns:
            Optional[TimelineItem]: The emitted proposal, or None when idle
                or when the item disappeared from the store.
        """
        if self._drag is None:
            return None

        item = self._current_item(self._drag.item_id)
        if item is None:
            logger.info(f"Dragged item {self._drag.item_id!r} vanished; ending drag")
            self.end_drag()
            return None

        new_date = self._mapper.pixel_to_date(pixel_x)
        mode = self._drag.mode

        if mode is DragMode.MOVE:
            drag = self._drag
            days = _clamp_shift(
                drag.origin_start, drag.origin_end, (new_date - drag.anchor_date).days
            )
            updated = item.with_dates(
                drag.origin_start + timedelta(days=days),
                drag.origin_end + timedelta(days=days),
            )
        elif mode is DragMode.RESIZE_START:
            start = new_date
            if start >= item.end_date:
                start = _day_before(item.end_date)
            updated = item.with_dates(start, item.end_date)
        else:
            end = new_date
            if end <= item.start_date:
                end = _day_after(item.start_date)
            updated = item.with_dates(item.start_date, end)

        self.item_updated.emit(updated)
        return updated

    def end_drag(self) -> None:
        """Returns to the idle state."""
        if self._drag is None:
            return
        logger.debug(f"Drag ended: {self._drag.item_id!r}")
        self._drag = None
        self.drag_state_changed.emit(DRAG_IDLE)

    # ------------------------------------------------------------------
    # Editing and selection
    # ------------------------------------------------------------------

    def commit_edit(
        self, item_id: Any, name: str, start_date: Any, end_date: Any
    ) -> Optional[TimelineItem]:
        """
        Validates an edit and emits the updated item.

        An inverted date range is repaired by swapping. A blank name, an
        unparseable date or an unknown item refuses the commit.

        Args:
            item_id: Id of the edited item.
            name: New display name.
            start_date: New start date (date or string).
            end_date: New end date (date or string).

        Returns:
            Optional[TimelineItem]: The emitted item, or None if refused.
        """
        clean_name = name.strip() if isinstance(name, str) else ""
        if not clean_name:
            logger.info(f"Edit of {item_id!r} refused: empty name")
            return None

        start = self._date_utility.parse(start_date)
        end = self._date_utility.parse(end_date)
        if start is None or end is None:
            logger.info(
                f"Edit of {item_id!r} refused: invalid dates {start_date!r} - {end_date!r}"
            )
            return None

        item = self._current_item(item_id)
        if item is None:
            logger.info(f"Edit of {item_id!r} refused: unknown item")
            return None

        if start > end:
            start, end = end, start

        updated = replace(item, name=clean_name, start_date=start, end_date=end)
        self.item_updated.emit(updated)
        return updated

    def start_editing(self, item_id: Any) -> Optional[EditSession]:
        """
        Opens an edit session pre-filled with the item's current values.

        Clears the selection.

        Returns:
            Optional[EditSession]: The session, or None for an unknown item.
        """
        item = self._current_item(item_id)
        if item is None:
            return None
        self._selected_item_id = None
        self._edit_session = EditSession(
            item_id=item_id,
            name=item.name,
            start_date=self._date_utility.format(item.start_date),
            end_date=self._date_utility.format(item.end_date),
            date_utility=self._date_utility,
        )
        return self._edit_session

    def save_edit(self) -> Optional[TimelineItem]:
        """
        Commits the open edit session.

        The session stays open when the draft is refused.

        Returns:
            Optional[TimelineItem]: The emitted item, or None if refused.
        """
        session = self._edit_session
        if session is None:
            return None
        if session.is_save_disabled:
            logger.info(f"Save of {session.item_id!r} refused: draft is incomplete")
            return None

        updated = self.commit_edit(
            session.item_id, session.name, session.start_date, session.end_date
        )
        if updated is not None:
            self._edit_session = None
        return updated

    def cancel_edit(self) -> None:
        """Discards the open edit session."""
        self._edit_session = None

    def select_item(self, item_id: Any) -> Any:
        """
        Toggles the selection of an item. Ignored while editing.

        Returns:
            The selected item id after the toggle, or None.
        """
        if self._edit_session is None:
            self._selected_item_id = None if self._selected_item_id == item_id else item_id
        return self._selected_item_id

    def clear_selection(self) -> None:
        """Clears the selection unless an edit is in progress."""
        if self._edit_session is None:
            self._selected_item_id = None

    # ------------------------------------------------------------------
    # Viewport bindings and teardown
    # ------------------------------------------------------------------

    def bind_viewport(self, scroll_area) -> ViewportBinding:
        """
        Subscribes the controller to a scroll area's resize and scroll events.

        Args:
            scroll_area: A QAbstractScrollArea hosting the timeline.

        Returns:
            ViewportBinding: The attached binding. Released on teardown.
        """
        binding = ViewportBinding(self, scroll_area)
        binding.released.connect(lambda: self._forget_binding(binding))
        binding.attach()
        self._bindings.append(binding)
        return binding

    def _forget_binding(self, binding: ViewportBinding) -> None:
        if binding in self._bindings:
            self._bindings.remove(binding)

    def teardown(self) -> None:
        """
        Releases every viewport binding and discards interaction state.

        After teardown the controller ignores further events.
        """
        for binding in list(self._bindings):
            binding.release()
        self._bindings.clear()
        self.end_drag()
        self._edit_session = None
        self._selected_item_id = None
        self._view_model = None
        self._active = False
        logger.debug("Timeline controller torn down")

    def _current_item(self, item_id: Any) -> Optional[TimelineItem]:
        if self._item_lookup is not None:
            return coerce_item(self._item_lookup.get_item(item_id), self._date_utility)
        return self._items_by_id.get(item_id)


def _day_before(value: date) -> date:
    return date.fromordinal(max(value.toordinal() - 1, MIN_ORDINAL))


def _day_after(value: date) -> date:
    return date.fromordinal(min(value.toordinal() + 1, MAX_ORDINAL))


def _clamp_shift(start: date, end: date, days: int) -> int:
    """Limits a shift of start..end so both dates stay representable."""
    low = MIN_ORDINAL - start.toordinal()
    high = MAX_ORDINAL - end.toordinal()
    return min(max(days, low), high)
