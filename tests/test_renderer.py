from __future__ import annotations

import asyncio
import logging
from unittest.mock import patch

import pytest

from mandelbrot_viewer.colors import colorize
from mandelbrot_viewer.compute import iterate
from mandelbrot_viewer.coords import to_plane
from mandelbrot_viewer.renderer import JobState, RenderJob, RenderScheduler
from mandelbrot_viewer.view import ViewState


def _scheduler(sink, view, **kwargs) -> RenderScheduler:
    kwargs.setdefault("debounce_ms", 10)
    return RenderScheduler(view.snapshot, sink, **kwargs)


def _count_yields():
    delays: list[float] = []
    real_sleep = asyncio.sleep

    async def _sleep(delay, *args, **kwargs):
        delays.append(delay)
        await real_sleep(0)

    return delays, patch("mandelbrot_viewer.renderer.asyncio.sleep", _sleep)


def test_completed_render_paints_every_cell(sink) -> None:
    view = ViewState(quality=50, frame_width=20, frame_height=10)
    scheduler = _scheduler(sink, view)

    elapsed = asyncio.run(scheduler.render())

    assert elapsed is not None and elapsed >= 0
    job = scheduler.last_job
    assert job.state is JobState.COMPLETED
    assert job.stop_row is None
    assert job.cursor == 10
    # step 2 over 0..20 x 0..10, both ends included
    assert len(sink.cells) == 11 * 6
    assert sorted(set(sink.rows)) == [0, 2, 4, 6, 8, 10]
    assert all(cell[2] == cell[3] == 3.0 for cell in sink.cells)


def test_cells_are_colored_from_their_escape_count(sink) -> None:
    view = ViewState(scale=2.0, x_offset=-0.5, quality=25, frame_width=64, frame_height=48,
                     color_policy="grayscale")
    scheduler = _scheduler(sink, view)
    asyncio.run(scheduler.render())

    snap = view.snapshot()
    for col, row, _, _, color in sink.cells:
        x, y = to_plane(col, row, snap, 64, 48)
        n = iterate(x, y, snap.threshold).iterations
        assert color == colorize(n, snap.threshold, "grayscale")


def test_rows_are_painted_top_to_bottom(sink) -> None:
    view = ViewState(quality=50, frame_width=10, frame_height=40)
    asyncio.run(_scheduler(sink, view).render())
    assert sink.rows == sorted(sink.rows)


def test_yields_after_rows_at_multiples_of_the_quality_gap(sink) -> None:
    # quality 50: step 2, yield at rows 0, 50, 100
    view = ViewState(quality=50, frame_width=10, frame_height=100)
    delays, patcher = _count_yields()
    with patcher:
        asyncio.run(_scheduler(sink, view, yield_ms=1).render())
    assert delays == [0.001, 0.001, 0.001]


def test_full_quality_never_yields(sink) -> None:
    view = ViewState(quality=100, frame_width=30, frame_height=30)
    delays, patcher = _count_yields()
    with patcher:
        elapsed = asyncio.run(_scheduler(sink, view).render())
    assert elapsed is not None
    assert delays == []
    assert len(sink.cells) == 31 * 31


def test_full_quality_still_honors_stop_requests(sink) -> None:
    view = ViewState(quality=100, frame_width=30, frame_height=30)
    scheduler = _scheduler(sink, view)

    def _stop_on_row_three(col, row):
        if row == 3:
            scheduler.active_job.request_stop()

    sink.on_paint = _stop_on_row_three
    result = asyncio.run(scheduler.render())

    assert result is None
    job = scheduler.last_job
    assert job.state is JobState.STOPPED
    assert job.stop_row == 3
    assert max(sink.rows) == 3
    # the stopped row itself is finished, never cut mid-row
    assert sink.rows.count(3) == 31


def test_supersede_stops_running_job_before_starting_new_one(sink) -> None:
    view = ViewState(quality=50, frame_width=40, frame_height=200)
    scheduler = _scheduler(sink, view, yield_ms=1)
    generations: list[int] = []
    sink.on_paint = lambda col, row: generations.append(scheduler.active_job.generation)

    async def scenario():
        task_a = asyncio.create_task(scheduler.render())
        await asyncio.sleep(0)
        first = scheduler.active_job
        assert first.state is JobState.RUNNING

        task_b = asyncio.create_task(scheduler.render())
        task_c = asyncio.create_task(scheduler.render())
        results = await asyncio.gather(task_a, task_b, task_c)
        return first, results

    first, (result_a, result_b, result_c) = asyncio.run(scenario())

    assert result_a is None
    assert result_b is not None
    assert result_c is None
    assert first.state is JobState.STOPPED
    assert first.stop_row == 0
    # exactly one new job, and the two never interleave
    assert scheduler.last_job.generation == 2
    assert scheduler.last_job.state is JobState.COMPLETED
    assert set(generations) == {1, 2}
    assert generations == sorted(generations)
    second_rows = [row for gen, row in zip(generations, sink.rows) if gen == 2]
    assert second_rows[0] == 0
    assert second_rows[-1] == 200


def test_stop_point_is_captured_once() -> None:
    job = RenderJob(generation=1, state=JobState.RUNNING)
    assert job.request_stop() is True
    assert job.state is JobState.STOPPING
    assert job.request_stop() is False


def test_render_uses_snapshot_taken_at_start(sink) -> None:
    view = ViewState(quality=50, frame_width=10, frame_height=100)
    snapshots = []

    def _snapshot():
        snapshots.append(view.snapshot())
        return snapshots[-1]

    scheduler = RenderScheduler(_snapshot, sink)

    async def scenario():
        task = asyncio.create_task(scheduler.render())
        await asyncio.sleep(0)
        view.zoom_in()
        await task

    asyncio.run(scenario())
    assert len(snapshots) == 1
    assert snapshots[0].scale == 1.0


def test_debounced_requests_render_once(sink) -> None:
    view = ViewState(quality=50, frame_width=10, frame_height=10)
    scheduler = _scheduler(sink, view, debounce_ms=20)

    async def scenario():
        for _ in range(5):
            scheduler.request()
            await asyncio.sleep(0.002)
        assert scheduler.render_pending
        for _ in range(300):
            if scheduler.last_job is not None and scheduler.last_job.finished:
                break
            await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert scheduler.last_job.generation == 1
    assert scheduler.last_job.state is JobState.COMPLETED
    assert not scheduler.render_pending


def test_completion_is_logged_and_reported(sink, caplog) -> None:
    statuses: list[str] = []
    view = ViewState(quality=50, frame_width=10, frame_height=10)
    ticks = iter([10.0, 10.25])
    scheduler = _scheduler(sink, view, time_fn=lambda: next(ticks), status_fn=statuses.append)

    with caplog.at_level(logging.INFO, logger="mandelbrot_viewer.renderer"):
        elapsed = asyncio.run(scheduler.render())

    assert elapsed == pytest.approx(250.0)
    assert "Loaded in 250 milliseconds!" in caplog.text
    assert statuses == ["Rendering...", "Loaded in 250 ms"]


def test_stopped_render_is_not_timed(sink, caplog) -> None:
    view = ViewState(quality=100, frame_width=10, frame_height=10)
    scheduler = _scheduler(sink, view)
    sink.on_paint = lambda col, row: scheduler.active_job.request_stop()

    with caplog.at_level(logging.INFO, logger="mandelbrot_viewer.renderer"):
        assert asyncio.run(scheduler.render()) is None

    assert "Loaded in" not in caplog.text


def test_failed_render_releases_the_job(sink) -> None:
    view = ViewState(quality=50, frame_width=10, frame_height=10)
    scheduler = _scheduler(sink, view)

    def _explode(col, row):
        raise RuntimeError("sink gone")

    sink.on_paint = _explode
    with pytest.raises(RuntimeError):
        asyncio.run(scheduler.render())
    assert scheduler.last_job.finished
    assert not scheduler.is_rendering

    sink.on_paint = None
    assert asyncio.run(scheduler.render()) is not None
    assert scheduler.last_job.generation == 2
