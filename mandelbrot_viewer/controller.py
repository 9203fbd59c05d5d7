"""
Pan, zoom and hover handling for the Mandelbrot viewer.

The ViewController is the only code that changes the ViewState. Every
change goes through refresh(), which saves the view, updates the
readout and asks the render scheduler for a (debounced) render.
"""

import logging
from dataclasses import dataclass

from .colors import list_policy_names
from .compute import iterate
from .coords import CENTER_X, to_plane, to_screen
from .view import DEFAULT_SCALE


logger = logging.getLogger(__name__)

MAX_READOUT_PRECISION = 12


@dataclass(frozen=True)
class HoverResult:
    """Point under the pointer with its trajectory in screen coordinates."""

    x: float
    y: float
    iterations: int
    trajectory: tuple


def format_coordinate(value, scale):
    """
    Format a plane coordinate with more digits the deeper the zoom.

    Uses min(12, scale) significant digits, clamped to at least 1 so
    zoomed-out views (scale < 1) still get a readout.
    """
    precision = min(MAX_READOUT_PRECISION, max(1, int(scale)))
    return f'{value:.{precision}g}'


def snap_to_step(length, step):
    """Round a frame length to the nearest multiple of the sampling step."""
    return int(round(max(1, round(length / step)) * step))


class ViewController:
    """
    Applies user interactions to the view and triggers renders.

    Args:
        view: The ViewState this controller owns
        scheduler: RenderScheduler (anything with request())
        sink: Optional paint sink with clear_overlay()/draw_trajectory()
        readout: Optional Readout receiving text updates
        store: Optional ViewStore used to save the view on every change
    """

    def __init__(self, view, scheduler, *, sink=None, readout=None, store=None):
        self.view = view
        self.scheduler = scheduler
        self.sink = sink
        self.readout = readout
        self.store = store

    @property
    def threshold(self):
        return self.view.threshold

    def restore(self):
        """Apply the saved view, if there is a usable one."""
        if self.store is None:
            return False
        saved = self.store.load()
        if saved is None:
            return False
        try:
            self.view.apply_saved(saved)
        except ValueError as e:
            logger.warning("Ignoring saved view: %s", e)
            return False
        logger.info("Restored view: scale %s, offset (%s, %s)",
                    self.view.scale, self.view.x_offset, self.view.y_offset)
        return True

    def refresh(self):
        """Save the view, update the readout and schedule a render."""
        if self.store is not None:
            self.store.save(self.view.to_saved())
        self._show('scale', self.view.scale)
        self._show('quality', self.view.quality)
        self._show('policy', self.view.color_policy)
        self.scheduler.request()

    def zoom(self, out):
        """Halve (out) or double (in) the scale, keeping the frame center fixed."""
        view = self.view
        x, _ = to_plane(view.frame_width / 2, view.frame_height / 2, view,
                        view.frame_width, view.frame_height)
        try:
            if out:
                view.zoom_out()
            else:
                view.zoom_in()
        except ValueError as e:
            logger.warning("Zoom ignored: %s", e)
            return
        view.x_offset = x - CENTER_X / view.scale
        self.refresh()

    def pan(self, col, row):
        """Recenter the view on the point under the pointer."""
        view = self.view
        x, y = to_plane(col, row, view, view.frame_width, view.frame_height)
        view.x_offset = x - CENTER_X / view.scale
        view.y_offset = -y
        self.refresh()

    def hover(self, col, row):
        """
        Evaluate the point under the pointer and draw its trajectory.

        Works on a snapshot and only touches the overlay, so it is safe to
        call on every pointer move, even while a frame is rendering.
        """
        view = self.view.snapshot()
        w, h = view.frame_width, view.frame_height
        x, y = to_plane(col, row, view, w, h)
        sample = iterate(x, y, view.threshold, capture_path=True)
        points = tuple(to_screen(px, py, view, w, h) for px, py in sample.trajectory)

        self._show('iterations', sample.iterations)
        try:
            x_text = format_coordinate(x, view.scale)
            y_text = format_coordinate(y, view.scale)
        except (ValueError, OverflowError) as e:
            logger.debug("Coordinate readout omitted: %s", e)
        else:
            self._show('x_offset', x_text)
            self._show('y_offset', y_text)

        if self.sink is not None:
            self.sink.clear_overlay()
            self.sink.draw_trajectory(points)

        return HoverResult(x, y, sample.iterations, points)

    def resize(self, width, height):
        """Snap the frame to the sampling grid and re-render."""
        step = self.view.step
        self.view.set_frame(snap_to_step(width, step), snap_to_step(height, step))
        self.refresh()

    def reset(self):
        """Go back to the default view."""
        self.view.scale = DEFAULT_SCALE
        self.view.x_offset = 0.0
        self.view.y_offset = 0.0
        self.refresh()

    def cycle_policy(self):
        """Switch to the next color policy."""
        names = list_policy_names()
        try:
            index = names.index(self.view.color_policy)
        except ValueError:
            index = -1
        self.view.color_policy = names[(index + 1) % len(names)]
        self.refresh()

    def _show(self, name, value):
        if self.readout is not None:
            self.readout.update(name, value)
