from __future__ import annotations

import pytest

from mandelbrot_viewer.compute import warmup_jit
from mandelbrot_viewer.view import ViewState


class RecordingSink:
    """Paint sink that remembers every call instead of drawing."""

    def __init__(self) -> None:
        self.cells: list[tuple] = []
        self.overlay_clears = 0
        self.trajectories: list[tuple] = []
        self.on_paint = None

    def paint_cell(self, col, row, width, height, color) -> None:
        self.cells.append((col, row, width, height, color))
        if self.on_paint is not None:
            self.on_paint(col, row)

    def clear_overlay(self) -> None:
        self.overlay_clears += 1

    def draw_trajectory(self, points) -> None:
        self.trajectories.append(tuple(points))

    @property
    def rows(self) -> list:
        return [cell[1] for cell in self.cells]


class FakeScheduler:
    def __init__(self) -> None:
        self.requests = 0

    def request(self) -> None:
        self.requests += 1


@pytest.fixture(scope="session", autouse=True)
def compiled_kernel() -> None:
    # Compile the row kernel once so timed tests never pay for it
    warmup_jit()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def view() -> ViewState:
    return ViewState(frame_width=800, frame_height=600)
