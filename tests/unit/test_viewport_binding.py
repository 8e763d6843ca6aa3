"""
Unit tests for ViewportBinding.

Uses a real QScrollArea without a content widget, so scroll bar ranges set
by the test are left alone by the scroll area.
"""

import pytest
from PySide6.QtCore import QSize
from PySide6.QtGui import QResizeEvent
from PySide6.QtWidgets import QApplication, QScrollArea
from shiboken6 import delete

from timelane.app.timeline_controller import TimelineController
from timelane.gui.widgets.viewport_binding import ViewportBinding


def _make_area():
    area = QScrollArea()
    area.horizontalScrollBar().setRange(0, 2000)
    area.verticalScrollBar().setRange(0, 2000)
    return area


@pytest.fixture
def scroll_area(qtbot):
    area = _make_area()
    qtbot.addWidget(area)
    return area


@pytest.fixture
def controller(qapp, sample_items):
    controller = TimelineController(items=sample_items)
    yield controller
    controller.teardown()


def _send_resize(area, width, height):
    QApplication.sendEvent(
        area.viewport(), QResizeEvent(QSize(width, height), area.viewport().size())
    )


class TestViewportBinding:
    def test_attach_pushes_current_state(self, controller, scroll_area):
        scroll_area.horizontalScrollBar().setValue(120)
        emitted = []
        controller.view_model_changed.connect(emitted.append)

        binding = ViewportBinding(controller, scroll_area).attach()

        assert binding.is_attached
        assert controller.viewport.scroll_left == 120
        assert emitted

        binding.release()

    def test_scroll_bars_forward_offsets(self, controller, scroll_area):
        binding = ViewportBinding(controller, scroll_area).attach()

        scroll_area.horizontalScrollBar().setValue(250)
        scroll_area.verticalScrollBar().setValue(90)

        assert controller.viewport.scroll_left == 250
        assert controller.viewport.scroll_top == 90

        binding.release()

    def test_resize_event_forwards_size(self, controller, scroll_area):
        binding = ViewportBinding(controller, scroll_area).attach()

        _send_resize(scroll_area, 640, 200)

        assert controller.viewport.container_width == 640
        assert controller.viewport.container_height == 200

        binding.release()

    def test_release_stops_forwarding(self, controller, scroll_area):
        binding = ViewportBinding(controller, scroll_area).attach()
        binding.release()
        before = controller.viewport

        scroll_area.horizontalScrollBar().setValue(700)
        _send_resize(scroll_area, 300, 300)

        assert controller.viewport == before
        assert not binding.is_attached

    def test_release_is_idempotent(self, controller, scroll_area):
        binding = ViewportBinding(controller, scroll_area).attach()
        released = []
        binding.released.connect(lambda: released.append(True))

        binding.release()
        binding.release()

        assert released == [True]

    def test_context_manager(self, controller, scroll_area):
        with ViewportBinding(controller, scroll_area) as binding:
            assert binding.is_attached
            scroll_area.horizontalScrollBar().setValue(50)
            assert controller.viewport.scroll_left == 50

        assert not binding.is_attached
        scroll_area.horizontalScrollBar().setValue(500)
        assert controller.viewport.scroll_left == 50


class TestControllerBindings:
    def test_bind_viewport(self, controller, scroll_area):
        binding = controller.bind_viewport(scroll_area)

        scroll_area.verticalScrollBar().setValue(300)

        assert controller.bindings == (binding,)
        assert controller.viewport.scroll_top == 300

    def test_teardown_releases_bindings(self, controller, scroll_area):
        first = controller.bind_viewport(scroll_area)
        second = controller.bind_viewport(scroll_area)

        controller.teardown()

        assert not first.is_attached
        assert not second.is_attached
        assert controller.bindings == ()

    def test_explicit_release_forgets_binding(self, controller, scroll_area):
        binding = controller.bind_viewport(scroll_area)

        binding.release()

        assert controller.bindings == ()

    def test_destroyed_scroll_area_releases_binding(self, controller):
        area = _make_area()
        binding = controller.bind_viewport(area)

        delete(area)

        assert not binding.is_attached
        assert controller.bindings == ()
        # Releasing after the widget is gone is a no-op
        binding.release()
