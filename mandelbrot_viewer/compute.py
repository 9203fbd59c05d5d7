"""
Escape-time computation for the Mandelbrot set.

This module contains the iteration code shared by the renderer and the
hover readout:
- iterate(): one point, optionally recording its trajectory
- escape_counts_row(): a whole row of points, JIT-compiled with Numba
- threshold_for_scale(): iteration cap for a zoom level

Both iteration paths use the same counting rule. The counter is bumped
as part of the escape test, so a point that starts outside radius 2
returns 0, an escaping point returns the number of z <- z^2 + c updates
performed, and a point that never escapes returns exactly ``threshold``.
"""

import math
from collections import deque
from dataclasses import dataclass

import numpy as np
from numba import jit


BASE_THRESHOLD = 50  # Iteration cap at scale 1
TRAJECTORY_LENGTH = 50  # Most recent iterates kept for the hover overlay
ESCAPE_RADIUS_SQ = 4.0


@dataclass(frozen=True)
class Sample:
    """A single evaluated point.

    ``trajectory`` is newest first and only filled when requested.
    """

    x: float
    y: float
    iterations: int
    trajectory: tuple = ()


def threshold_for_scale(scale, base=BASE_THRESHOLD):
    """
    Iteration cap for a zoom level.

    Deeper zooms need more iterations to resolve the boundary, but the
    growth is kept logarithmic so the cost per frame stays bounded.
    """
    return int(base * max(1.0, math.log2(scale) + 1))


def iterate(x0, y0, threshold, capture_path=False):
    """
    Run the escape-time iteration for c = x0 + i*y0.

    Args:
        x0, y0: Starting point (also the constant c)
        threshold: Maximum iteration count
        capture_path: Record up to TRAJECTORY_LENGTH iterates, newest first.
            Only meant for single-point queries (hover), never for frames.

    Returns:
        Sample with the iteration count and optional trajectory
    """
    x, y = x0, y0
    path = deque([(x, y)], maxlen=TRAJECTORY_LENGTH) if capture_path else None
    iterations = 0
    while x * x + y * y <= ESCAPE_RADIUS_SQ:
        iterations += 1
        if iterations >= threshold:
            break
        x, y = x * x - y * y + x0, 2 * x * y + y0
        if path is not None:
            path.appendleft((x, y))

    return Sample(x0, y0, iterations, tuple(path) if path is not None else ())


@jit(nopython=True, cache=True)
def escape_counts_row(xs, y0, threshold):
    """
    Escape-time counts for one row of starting points.

    Args:
        xs: 1D float64 array of real parts
        y0: Shared imaginary part
        threshold: Maximum iteration count

    Returns:
        1D int64 array of iteration counts, same length as xs
    """
    out = np.empty(xs.shape[0], dtype=np.int64)
    for k in range(xs.shape[0]):
        x0 = xs[k]
        x = x0
        y = y0
        iterations = 0
        while x * x + y * y <= 4.0:
            iterations += 1
            if iterations >= threshold:
                break
            x_tmp = x * x - y * y + x0
            y = 2.0 * x * y + y0
            x = x_tmp
        out[k] = iterations
    return out


def warmup_jit():
    """
    Warm up JIT compilation with a tiny row.

    Call once at startup so the first real render does not stall on
    compilation.
    """
    escape_counts_row(np.linspace(-2.0, 1.0, 8), 0.0, 10)
