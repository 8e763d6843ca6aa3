"""
GUI Widgets Package.
"""

from timelane.gui.widgets.viewport_binding import ViewportBinding

__all__ = ["ViewportBinding"]
