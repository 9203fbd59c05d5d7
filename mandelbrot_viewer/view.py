"""
View state for the Mandelbrot viewer.

ViewState is the single mutable record of where the user is looking
(zoom, pan, sampling quality, frame size, color policy). Only the
controller writes to it. Everything else reads a ViewSnapshot, a frozen
copy taken at the moment it is needed, so a render in progress never
sees a half-applied zoom or pan.
"""

import math
from dataclasses import dataclass

from .compute import threshold_for_scale, BASE_THRESHOLD


DEFAULT_SCALE = 1.0
DEFAULT_QUALITY = 100


def _check_scale(scale):
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError(f"scale must be a positive finite number, got {scale!r}")
    return float(scale)


def _check_quality(quality):
    if int(quality) != quality or not 1 <= quality <= 100:
        raise ValueError(f"quality must be an integer in 1..100, got {quality!r}")
    return int(quality)


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable copy of the view taken at render (or hover) time."""

    scale: float
    x_offset: float
    y_offset: float
    quality: int
    frame_width: int
    frame_height: int
    color_policy: str
    threshold: int

    @property
    def step(self):
        """Sampling step in raster units (1 at quality 100)."""
        return 100 / self.quality


class ViewState:
    """
    Mutable view parameters owned by the interaction controller.

    Args:
        scale: Multiplicative zoom factor, 1 shows the full set
        x_offset, y_offset: Pan offsets in plane units
        quality: Sampling quality 1..100 (step = 100 / quality)
        frame_width, frame_height: Frame size in raster units
        color_policy: Name of the active color policy
        base_threshold: Iteration cap at scale 1
    """

    def __init__(self, scale=DEFAULT_SCALE, x_offset=0.0, y_offset=0.0,
                 quality=DEFAULT_QUALITY, frame_width=800, frame_height=600,
                 color_policy='hsv', base_threshold=BASE_THRESHOLD):
        self._scale = _check_scale(scale)
        self.x_offset = float(x_offset)
        self.y_offset = float(y_offset)
        self._quality = _check_quality(quality)
        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)
        self.color_policy = color_policy
        self.base_threshold = base_threshold

    @property
    def scale(self):
        return self._scale

    @scale.setter
    def scale(self, value):
        self._scale = _check_scale(value)

    @property
    def quality(self):
        return self._quality

    @quality.setter
    def quality(self, value):
        self._quality = _check_quality(value)

    @property
    def step(self):
        return 100 / self._quality

    @property
    def threshold(self):
        """Iteration cap, always derived from the current scale."""
        return threshold_for_scale(self._scale, self.base_threshold)

    def zoom_in(self):
        self.scale = self._scale * 2

    def zoom_out(self):
        self.scale = self._scale / 2

    def set_frame(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError(f"frame size must be positive, got {width}x{height}")
        self.frame_width = int(width)
        self.frame_height = int(height)

    def apply_saved(self, saved):
        """Apply a persisted ``{scale, xOffset, yOffset}`` mapping."""
        self.scale = saved['scale']
        self.x_offset = float(saved['xOffset'])
        self.y_offset = float(saved['yOffset'])

    def to_saved(self):
        return {
            'scale': self._scale,
            'xOffset': self.x_offset,
            'yOffset': self.y_offset,
        }

    def snapshot(self):
        return ViewSnapshot(
            scale=self._scale,
            x_offset=self.x_offset,
            y_offset=self.y_offset,
            quality=self._quality,
            frame_width=self.frame_width,
            frame_height=self.frame_height,
            color_policy=self.color_policy,
            threshold=self.threshold,
        )
