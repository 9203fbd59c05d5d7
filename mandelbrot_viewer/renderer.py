"""
Incremental, cancellable Mandelbrot frame renderer.

The RenderScheduler handles:
- Debouncing render requests so a burst of pans/zooms renders once
- Painting the frame row by row into a paint sink
- Yielding to the event loop between rows so input stays responsive
- Superseding: stopping a running render before starting a newer one

Everything runs on one asyncio loop. A render is never preempted; it
checks its stop flag after each row, so stopping it costs at most one
row of work. Two renders never paint at the same time.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .colors import build_palette
from .compute import escape_counts_row
from .coords import to_plane
from .debouncing import Debouncer


logger = logging.getLogger(__name__)

DEBOUNCE_MS = 750
YIELD_MS = 1
CELL_OVERLAP = 1.5  # Cells are painted 1.5 steps wide so no seams show


class JobState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    STOPPING = 'stopping'
    STOPPED = 'stopped'


@dataclass(eq=False)
class RenderJob:
    """
    One full-frame render.

    Attributes:
        generation: Increases by one for every job a scheduler starts
        cursor: Last fully painted row (raster units), -1 before the first
        stop_requested: Set by request_stop(), checked after each row
        stop_row: Row at which the stop was observed (captured once)
        state: Current JobState
    """

    generation: int
    cursor: float = -1
    stop_requested: bool = False
    stop_row: Optional[float] = None
    state: JobState = JobState.IDLE
    _finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def finished(self):
        return self.state in (JobState.COMPLETED, JobState.STOPPED)

    def request_stop(self):
        """Ask the job to stop after its current row. Returns False if already asked."""
        if self.stop_requested or self.finished:
            return False
        self.stop_requested = True
        if self.state == JobState.RUNNING:
            self.state = JobState.STOPPING
        return True

    async def wait_finished(self):
        await self._finished.wait()

    def _finish(self, state):
        self.state = state
        self._finished.set()


class RenderScheduler:
    """
    Serializes full-frame renders of the current view into a paint sink.

    Usage:
        scheduler = RenderScheduler(view.snapshot, sink)
        scheduler.request()         # debounced, from any view change
        await scheduler.render()    # immediate, supersedes a running job

    Args:
        snapshot_fn: Returns the ViewSnapshot to render, called at job start
        sink: Object with paint_cell(col, row, width, height, color)
        debounce_ms: Quiet period before a requested render starts
        yield_ms: Sleep at each cooperative yield between rows
        time_fn: Clock in seconds, used to time completed renders
        status_fn: Optional callable receiving short status strings
    """

    def __init__(self, snapshot_fn, sink, *, debounce_ms=DEBOUNCE_MS,
                 yield_ms=YIELD_MS, time_fn=time.perf_counter, status_fn=None):
        self._snapshot_fn = snapshot_fn
        self.sink = sink
        self._yield_s = yield_ms / 1000.0
        self._time_fn = time_fn
        self._status_fn = status_fn
        self._debouncer = Debouncer(self._start_render_task, delay_ms=debounce_ms)

        self._generation = 0
        self._superseding = False
        self._tasks = set()
        self.active_job = None
        self.last_job = None

    @property
    def is_rendering(self):
        return self.active_job is not None and not self.active_job.finished

    @property
    def render_pending(self):
        return self._debouncer.pending

    def request(self):
        """Schedule a render after the debounce quiet period."""
        self._debouncer()

    def cancel_pending(self):
        self._debouncer.cancel()

    def shutdown(self):
        """Drop pending renders and stop the running one."""
        self._debouncer.cancel()
        if self.active_job is not None:
            self.active_job.request_stop()
        for task in list(self._tasks):
            task.cancel()

    def _start_render_task(self):
        task = asyncio.get_running_loop().create_task(self.render())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Render failed", exc_info=task.exception())

    async def render(self):
        """
        Render the current view, superseding any running render.

        Returns:
            Elapsed milliseconds if the render completed, None if it was
            stopped or folded into a supersede that is already waiting
        """
        if self._superseding:
            # The waiting request reads the newest view when it starts
            logger.debug("Render request folded into pending supersede")
            return None

        job = self.active_job
        if job is not None and not job.finished:
            self._superseding = True
            try:
                job.request_stop()
                logger.debug("Superseding render job %d", job.generation)
                await job.wait_finished()
            finally:
                self._superseding = False

        elapsed = await self._run_job(self._snapshot_fn())
        if elapsed is not None:
            logger.info("Loaded in %d milliseconds!", elapsed)
        return elapsed

    async def _run_job(self, view):
        self._generation += 1
        job = RenderJob(self._generation)
        self.active_job = job
        job.state = JobState.RUNNING
        logger.debug("Render job %d started (quality %d, threshold %d)",
                     job.generation, view.quality, view.threshold)
        self._notify("Rendering...")

        width, height = view.frame_width, view.frame_height
        quality = view.quality
        step = view.step
        size = step * CELL_OVERLAP
        # Yield after rows whose position is a multiple of (100 - quality),
        # tested in integers: r * step % (100 - q) == 0 <=> r * 100 % (q * (100 - q)) == 0
        yield_period = quality * (100 - quality)
        n_cols = width * quality // 100 + 1
        n_rows = height * quality // 100 + 1

        cols = np.arange(n_cols) * step
        xs, _ = to_plane(cols, 0, view, width, height)
        xs = np.ascontiguousarray(xs, dtype=np.float64)
        col_positions = cols.tolist()
        colors = [tuple(c) for c in build_palette(view.color_policy, view.threshold).tolist()]
        paint_cell = self.sink.paint_cell

        start = self._time_fn()
        try:
            for r in range(n_rows):
                row = r * step
                _, y0 = to_plane(0, row, view, width, height)
                counts = escape_counts_row(xs, y0, view.threshold)
                for col, n in zip(col_positions, counts.tolist()):
                    paint_cell(col, row, size, size, colors[n])
                job.cursor = row

                if yield_period and (r * 100) % yield_period == 0:
                    await asyncio.sleep(self._yield_s)

                if job.stop_requested:
                    if job.stop_row is None:
                        job.stop_row = row
                    break
        except BaseException:
            # Failed or cancelled: release anyone waiting to supersede us
            job._finish(JobState.STOPPED)
            raise
        finally:
            self.last_job = job

        if job.stop_requested:
            job._finish(JobState.STOPPED)
            logger.debug("Render job %d stopped at row %s", job.generation, job.stop_row)
            self._notify("Stopped")
            return None

        job._finish(JobState.COMPLETED)
        elapsed = (self._time_fn() - start) * 1000.0
        self._notify(f"Loaded in {elapsed:.0f} ms")
        return elapsed

    def _notify(self, status):
        if self._status_fn is not None:
            self._status_fn(status)
