"""
Main application module for the Mandelbrot viewer.

Contains the MandelbrotApp class which handles:
- Window setup and the asyncio main loop
- User input (zoom, pan, hover, keyboard, resize)
- Drawing the frame, trajectory overlay and readout
- Wiring the controller, render scheduler and paint surfaces together
"""

import asyncio
import logging

import pygame

from .compute import warmup_jit
from .config import load_settings
from .controller import ViewController
from .persistence import ViewStore
from .readout import Readout
from .renderer import RenderScheduler
from .sinks import SurfaceSink
from .view import ViewState


logger = logging.getLogger(__name__)

CAPTION = "Mandelbrot Set - Click to center, scroll or Z/X to zoom, C colors, R reset"


class MandelbrotApp:
    """
    Main application class for the Mandelbrot viewer.

    Handles the pygame window and event loop, and translates input
    events into controller calls. Rendering runs as tasks on the same
    asyncio loop, yielding between rows so this loop keeps drawing.

    Args:
        settings: Settings instance (defaults to settings.json)
        store: ViewStore for saving the view (defaults to settings.store_path)
    """

    def __init__(self, settings=None, store=None):
        self.settings = settings or load_settings()
        self.width = self.settings.width
        self.height = self.settings.height

        self.view = ViewState(
            quality=self.settings.quality,
            frame_width=self.width,
            frame_height=self.height,
            color_policy=self.settings.color_policy,
            base_threshold=self.settings.base_threshold,
        )
        self.store = store or ViewStore(self.settings.store_path)

        # Pygame state (initialized in run())
        self.screen = None

        # Components
        self.sink = None
        self.readout = None
        self.scheduler = None
        self.controller = None

        self.running = False

    def run(self):
        """Run the application until the window is closed."""
        asyncio.run(self._main())

    async def _main(self):
        self._init_pygame()
        self._init_components()
        self._warmup()

        self.controller.restore()
        self.controller.resize(self.width, self.height)

        self.running = True
        try:
            while self.running:
                self._handle_events()
                self._draw()
                await asyncio.sleep(1 / self.settings.fps)
        finally:
            self.scheduler.shutdown()
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.width, self.height),
            pygame.RESIZABLE
        )
        pygame.display.set_caption(CAPTION)

    def _init_components(self):
        """Create paint surfaces, readout, scheduler and controller."""
        self.sink = SurfaceSink(self.width, self.height)
        self.readout = Readout()
        self.scheduler = RenderScheduler(
            self.view.snapshot,
            self.sink,
            debounce_ms=self.settings.debounce_ms,
            yield_ms=self.settings.yield_ms,
            status_fn=lambda status: self.readout.update('status', status),
        )
        self.controller = ViewController(
            self.view, self.scheduler,
            sink=self.sink, readout=self.readout, store=self.store
        )

    def _warmup(self):
        """Compile the row kernel before the first render."""
        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()
        pygame.display.set_caption(CAPTION)

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEMOTION:
                self.controller.hover(*event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self.controller.pan(*event.pos)
            elif event.type == pygame.MOUSEWHEEL:
                if event.y:
                    self.controller.zoom(out=event.y < 0)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)

    def _handle_key(self, event):
        """Handle keyboard input."""
        if event.key == pygame.K_z:
            self.controller.zoom(out=True)
        elif event.key == pygame.K_x:
            self.controller.zoom(out=False)
        elif event.key == pygame.K_c:
            self.controller.cycle_policy()
        elif event.key == pygame.K_r:
            self.controller.reset()
        elif event.key == pygame.K_ESCAPE:
            self.running = False

    def _handle_resize(self, width, height):
        self.width, self.height = width, height
        self.sink.resize(width, height)
        self.controller.resize(width, height)

    def _draw(self):
        """Draw the current frame."""
        self.screen.fill((0, 0, 0))
        self.sink.blit_to(self.screen)
        self.readout.draw(self.screen)
        pygame.display.flip()


def run(width=None, height=None, quality=None, color_policy=None):
    """
    Run the Mandelbrot viewer.

    Arguments override the values from settings.json.

    Args:
        width: Window width
        height: Window height
        quality: Sampling quality 1..100
        color_policy: One of colors.list_policy_names()
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    settings = load_settings().override(
        width=width, height=height, quality=quality, color_policy=color_policy
    )
    app = MandelbrotApp(settings)
    try:
        app.run()
    except KeyboardInterrupt:
        pass
