"""Tests for the maze control and the shared maze."""

import queue
import threading

import pytest

from mazetool.core.errors import LockError
from mazetool.core.grid import CellKind, Dimensions, Grid
from mazetool.core.maze_io import save_maze_file
from mazetool.core.solver import SolveMethod
from mazetool.schemas.messages import (
    GenerateMazeJob,
    LoadMazeJob,
    QuitJob,
    QuitRequest,
    SaveMaze,
    ShowError,
    ShowInfo,
    ShowMaze,
    SolveMazeJob,
)
from mazetool.services.maze_control import ControlState, MazeControl
from mazetool.services.shared_maze import SharedMaze


def drain(requests: queue.Queue) -> list:
    """Collect every request currently waiting on a queue."""
    items = []
    while True:
        try:
            items.append(requests.get_nowait())
        except queue.Empty:
            return items


@pytest.fixture
def control(settings) -> MazeControl:
    return MazeControl(queue.Queue(), queue.Queue(), settings=settings)


class TestSharedMaze:
    """Tests for SharedMaze."""

    def test_locked_yields_grid(self):
        grid = Grid(Dimensions(10, 10))
        shared = SharedMaze(grid)
        with shared.locked() as locked_grid:
            assert locked_grid is grid

    def test_lock_timeout(self):
        shared = SharedMaze(lock_timeout=0.01)
        with shared.locked():
            with pytest.raises(LockError):
                with shared.locked():
                    pass

    def test_lock_released_after_error(self):
        shared = SharedMaze(lock_timeout=0.01)
        with pytest.raises(RuntimeError):
            with shared.locked():
                raise RuntimeError("boom")
        with shared.locked():
            pass

    def test_replace_requires_lock(self):
        shared = SharedMaze()
        with pytest.raises(LockError):
            shared.replace(Grid())

    def test_touch_requires_lock(self):
        shared = SharedMaze()
        with pytest.raises(LockError):
            shared.touch()
        assert shared.generation == 0

    def test_lock_held_by_other_thread_does_not_count(self):
        """Test that only the thread holding the lock may replace the grid."""
        shared = SharedMaze()
        errors = []

        def replace_from_worker():
            try:
                shared.replace(Grid(Dimensions(12, 12)))
            except LockError as e:
                errors.append(e)

        with shared.locked():
            worker = threading.Thread(target=replace_from_worker)
            worker.start()
            worker.join(timeout=5)

        assert len(errors) == 1
        assert shared.generation == 0

    def test_replace_bumps_generation(self):
        shared = SharedMaze()
        replacement = Grid(Dimensions(12, 10))
        with shared.locked():
            shared.replace(replacement)
        assert shared.generation == 1
        assert shared.dimensions() == Dimensions(12, 10)


class TestGenerate:
    """Tests for generate jobs."""

    def test_generate_publishes_maze(self, control):
        assert control.handle_job(GenerateMazeJob(width=15, height=11, seed=3)) is True

        requests = drain(control.ui_requests)
        assert isinstance(requests[0], ShowInfo)
        assert requests[0].text == "Generating..."
        assert isinstance(requests[1], ShowMaze)
        assert requests[1].maze is control.maze
        assert len(requests) == 2

        assert control.state == ControlState.READY
        assert control.maze.dimensions() == Dimensions(15, 11)
        assert control.maze.generation == 1

    def test_generate_requests_save(self, settings):
        settings = settings.model_copy(update={"save_generated": True})
        control = MazeControl(queue.Queue(), queue.Queue(), settings=settings)

        control.handle_job(GenerateMazeJob(width=10, height=10, seed=1))

        save = drain(control.ui_requests)[-1]
        assert isinstance(save, SaveMaze)
        assert save.path == settings.maze_file

    def test_seed_makes_generation_repeatable(self, settings):
        first = MazeControl(queue.Queue(), queue.Queue(), settings=settings)
        second = MazeControl(queue.Queue(), queue.Queue(), settings=settings)
        first.handle_job(GenerateMazeJob(width=21, height=21, seed=99))
        second.handle_job(GenerateMazeJob(width=21, height=21, seed=99))

        with first.maze.locked() as a, second.maze.locked() as b:
            assert [c.kind for c in a.cells] == [c.kind for c in b.cells]

    def test_settings_seed_used_when_job_has_none(self, settings):
        settings = settings.model_copy(update={"seed": 5})
        first = MazeControl(queue.Queue(), queue.Queue(), settings=settings)
        second = MazeControl(queue.Queue(), queue.Queue(), settings=settings)
        first.handle_job(GenerateMazeJob(width=13, height=13))
        second.handle_job(GenerateMazeJob(width=13, height=13))

        with first.maze.locked() as a, second.maze.locked() as b:
            assert [c.kind for c in a.cells] == [c.kind for c in b.cells]

    def test_locked_maze_reports_error(self, settings):
        """Test that a lock timeout becomes an error message, not a crash."""
        maze = SharedMaze(lock_timeout=0.05)
        control = MazeControl(queue.Queue(), queue.Queue(), maze=maze, settings=settings)

        with maze.locked():
            assert control.handle_job(GenerateMazeJob(seed=1)) is True

        errors = [r for r in drain(control.ui_requests) if isinstance(r, ShowError)]
        assert len(errors) == 1
        assert "Could not lock the maze" in errors[0].text
        assert control.state == ControlState.IDLE

    def test_concurrent_generation_is_serialized(self, settings):
        """Test that two controls sharing a maze never interleave their writes."""
        maze = SharedMaze(lock_timeout=30.0)
        controls = [
            MazeControl(queue.Queue(), queue.Queue(), maze=maze, settings=settings)
            for _ in range(2)
        ]
        jobs = [
            GenerateMazeJob(width=61, height=41, seed=1),
            GenerateMazeJob(width=33, height=57, seed=2),
        ]
        threads = [
            threading.Thread(target=control.handle_job, args=(job,))
            for control, job in zip(controls, jobs)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert maze.generation == 2
        with maze.locked() as grid:
            assert grid.dimensions in (Dimensions(61, 41), Dimensions(33, 57))
            assert len(grid.cells) == grid.dimensions.cell_count
            assert grid.count(CellKind.START) == 1
            assert grid.count(CellKind.END) == 1


class TestSolve:
    """Tests for solve jobs."""

    def test_solve_without_maze(self, control):
        control.handle_job(SolveMazeJob())

        requests = drain(control.ui_requests)
        assert len(requests) == 1
        assert isinstance(requests[0], ShowError)
        assert "No maze to solve" in requests[0].text
        assert control.state == ControlState.IDLE

    @pytest.mark.parametrize("method", list(SolveMethod))
    def test_generate_then_solve(self, control, method):
        control.handle_job(GenerateMazeJob(width=19, height=19, seed=2021))
        drain(control.ui_requests)

        control.handle_job(SolveMazeJob(method=method))

        requests = drain(control.ui_requests)
        assert isinstance(requests[0], ShowInfo)
        assert requests[0].text.startswith(f"Solved with {method.value}: route of ")
        assert isinstance(requests[1], ShowMaze)
        assert control.state == ControlState.DONE
        assert control.last_result.method == method

        with control.maze.locked() as grid:
            assert grid.cells[grid.start].on_route
            assert grid.cells[grid.end].on_route

    def test_solve_twice(self, control):
        control.handle_job(GenerateMazeJob(width=11, height=11, seed=4))
        control.handle_job(SolveMazeJob())
        first = control.last_result.route
        control.handle_job(SolveMazeJob(method=SolveMethod.GRAPH_ONLY))

        assert control.last_result.route == first
        assert not any(isinstance(r, ShowError) for r in drain(control.ui_requests))


class TestLoad:
    """Tests for load jobs."""

    def test_load_then_solve(self, control, tmp_path, branching_maze):
        path = save_maze_file(branching_maze, tmp_path / "branching.txt")

        control.handle_job(LoadMazeJob(path=path))
        control.handle_job(SolveMazeJob())

        requests = drain(control.ui_requests)
        assert requests[0].text == f"Loaded maze of 7 x 7 from {path}"
        assert isinstance(requests[1], ShowMaze)
        assert control.last_result.route_length == 11
        assert control.state == ControlState.DONE

    def test_load_missing_file(self, control, tmp_path):
        control.handle_job(LoadMazeJob(path=tmp_path / "missing.txt"))

        requests = drain(control.ui_requests)
        assert len(requests) == 1
        assert isinstance(requests[0], ShowError)
        assert "not found" in requests[0].text
        assert control.state == ControlState.IDLE


class TestControlLoop:
    """Tests for the threaded job loop."""

    def test_quit_job_stops_loop(self, control):
        assert control.handle_job(QuitJob()) is False
        assert isinstance(control.ui_requests.get_nowait(), QuitRequest)

    def test_unknown_job_reports_error(self, control):
        assert control.handle_job(object()) is True
        request = control.ui_requests.get_nowait()
        assert isinstance(request, ShowError)
        assert "Unknown job" in request.text

    def test_runs_jobs_in_background(self, control):
        thread = control.start()
        control.jobs.put(GenerateMazeJob(width=10, height=10, seed=8))
        control.jobs.put(SolveMazeJob(method=SolveMethod.GRAPH_ELIMINATION))
        control.jobs.put(QuitJob())
        thread.join(timeout=30)

        assert not thread.is_alive()
        requests = drain(control.ui_requests)
        assert isinstance(requests[-1], QuitRequest)
        assert not any(isinstance(r, ShowError) for r in requests)
        assert control.state == ControlState.DONE
