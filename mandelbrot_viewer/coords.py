"""
Screen <-> complex plane coordinate mapping.

The whole raster is mapped onto a fixed base window of the plane
(real span 3.5 starting at -2.5, imaginary span 2 starting at -1),
then zoom and pan are applied. Screen rows grow downwards.
"""

import math


BASE_X_SPAN = 3.5
BASE_X_MIN = 2.5
BASE_Y_SPAN = 2.0
BASE_Y_MIN = 1.0

# Plane x of the frame center at scale 1 with no offset
CENTER_X = BASE_X_SPAN / 2 - BASE_X_MIN


def to_plane(col, row, view, frame_width, frame_height):
    """
    Map a raster position to a point in the complex plane.

    Works element-wise when ``col`` (or ``row``) is a numpy array, which
    the renderer uses to build a whole row of sample points at once.

    Args:
        col, row: Position in raster units
        view: Anything with scale, x_offset and y_offset (ViewState/ViewSnapshot)
        frame_width, frame_height: Raster size

    Returns:
        (x, y) plane coordinates
    """
    scale = view.scale
    x = col / frame_width * BASE_X_SPAN / scale - BASE_X_MIN / scale + view.x_offset
    y = row / frame_height * BASE_Y_SPAN / scale - BASE_Y_MIN / scale - view.y_offset
    return x, y


def to_screen(x, y, view, frame_width, frame_height):
    """
    Inverse of to_plane, floored to whole raster units.

    Only approximately inverts to_plane: a round trip may land one
    unit away because of the flooring.
    """
    scale = view.scale
    col = math.floor(((x - view.x_offset) * scale + BASE_X_MIN) / BASE_X_SPAN * frame_width)
    row = math.floor(((y + view.y_offset) * scale + BASE_Y_MIN) / BASE_Y_SPAN * frame_height)
    return col, row
