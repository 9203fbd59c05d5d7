"""
Mandelbrot Viewer Package

An interactive Mandelbrot set explorer using Pygame for display and
Numba for the JIT-compiled escape-time kernel. Frames are rendered
incrementally, row by row, on an asyncio loop so the window stays
responsive while a frame is being computed.

Quick Start:
    from mandelbrot_viewer import run
    run()

Or from command line:
    python -m mandelbrot_viewer

Package Structure:
    - view.py: View state (zoom, pan, quality) and immutable snapshots
    - coords.py: Screen <-> complex plane mapping
    - compute.py: Escape-time iteration (single point and JIT row kernel)
    - colors.py: Color policies (linear, quartic, grayscale, hsv)
    - renderer.py: Debounced, cancellable incremental frame renderer
    - controller.py: Pan, zoom, hover and resize handling
    - app.py: Main application and event loop

Controls:
    - Click: Center the view on the pointer
    - Scroll, Z / X: Zoom out / in
    - Hover: Show iteration count and trajectory of the point
    - C: Next color policy
    - R: Reset to default view
    - ESC: Quit
"""

from .app import run, MandelbrotApp
from .colors import POLICIES, colorize, get_policy, list_policy_names
from .compute import iterate, threshold_for_scale
from .controller import ViewController
from .renderer import RenderScheduler
from .view import ViewState

__version__ = "1.0.0"
__all__ = [
    "run",
    "MandelbrotApp",
    "RenderScheduler",
    "ViewController",
    "ViewState",
    "POLICIES",
    "colorize",
    "get_policy",
    "list_policy_names",
    "iterate",
    "threshold_for_scale",
]
