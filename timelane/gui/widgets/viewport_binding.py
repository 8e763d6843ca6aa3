"""
Viewport Binding Module.

Connects a QAbstractScrollArea to a timeline controller: viewport resize
events and scroll bar movements are forwarded as on_resize/on_scroll calls.
"""

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QEvent, QObject, Signal
from shiboken6 import isValid

if TYPE_CHECKING:
    from PySide6.QtWidgets import QAbstractScrollArea

    from timelane.app.timeline_controller import TimelineController

logger = logging.getLogger(__name__)


class ViewportBinding(QObject):
    """
    Subscription of a controller to one scroll area.

    The binding is released exactly once: explicitly, when the controller
    is torn down, or when the scroll area is destroyed.
    """

    released = Signal()

    def __init__(
        self, controller: "TimelineController", scroll_area: "QAbstractScrollArea"
    ):
        super().__init__()
        self._controller = controller
        self._scroll_area = scroll_area
        self._viewport = None
        self._attached = False

    @property
    def is_attached(self) -> bool:
        return self._attached

    def attach(self) -> "ViewportBinding":
        """
        Installs the event filter and connects the scroll bars.

        The controller immediately receives the current size and scroll
        offsets of the scroll area.
        """
        if self._attached:
            return self

        area = self._scroll_area
        self._viewport = area.viewport()
        self._viewport.installEventFilter(self)
        area.verticalScrollBar().valueChanged.connect(self._on_scroll_changed)
        area.horizontalScrollBar().valueChanged.connect(self._on_scroll_changed)
        area.destroyed.connect(self._on_area_destroyed)
        self._attached = True

        size = self._viewport.size()
        self._controller.on_resize(size.width(), size.height())
        self._on_scroll_changed()
        logger.debug("Viewport binding attached")
        return self

    def release(self) -> None:
        """Removes the event filter and disconnects the scroll bars."""
        if not self._attached:
            return
        self._attached = False

        area = self._scroll_area
        if isValid(area):
            area.verticalScrollBar().valueChanged.disconnect(self._on_scroll_changed)
            area.horizontalScrollBar().valueChanged.disconnect(self._on_scroll_changed)
            area.destroyed.disconnect(self._on_area_destroyed)
        if self._viewport is not None and isValid(self._viewport):
            self._viewport.removeEventFilter(self)
        self._viewport = None

        logger.debug("Viewport binding released")
        self.released.emit()

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if (
            self._attached
            and watched is self._viewport
            and event.type() == QEvent.Type.Resize
        ):
            size = event.size()
            self._controller.on_resize(size.width(), size.height())
        return False

    def _on_scroll_changed(self, _value: int = 0) -> None:
        if not self._attached or not isValid(self._scroll_area):
            return
        top = self._scroll_area.verticalScrollBar().value()
        left = self._scroll_area.horizontalScrollBar().value()
        self._controller.on_scroll(top, left)

    def _on_area_destroyed(self, _obj=None) -> None:
        # The C++ side is gone; signal connections died with it
        self._scroll_area = None
        self._viewport = None
        if self._attached:
            self._attached = False
            logger.debug("Scroll area destroyed; binding released")
            self.released.emit()

    def __enter__(self) -> "ViewportBinding":
        return self.attach()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
