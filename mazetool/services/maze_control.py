"""Maze control: runs generate and solve jobs against the shared maze."""

import logging
import queue
import random
import threading
from enum import Enum
from typing import Optional

from mazetool.config import Settings, get_settings
from mazetool.core import generator
from mazetool.core.errors import MazeError
from mazetool.core.maze_io import load_maze_file
from mazetool.core.solver import SolveResult, solve
from mazetool.schemas.messages import (
    GenerateMazeJob,
    Job,
    LoadMazeJob,
    QuitJob,
    QuitRequest,
    SaveMaze,
    ShowError,
    ShowInfo,
    ShowMaze,
    SolveMazeJob,
    UIRequest,
)
from mazetool.services.shared_maze import SharedMaze

logger = logging.getLogger(__name__)


class ControlState(Enum):
    """Lifecycle of the maze held by the control."""
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    SOLVING = "solving"
    DONE = "done"


class MazeControl:
    """
    Application logic between a user interface and the maze engine.

    Jobs arrive on one queue, UI requests leave on another. The shared maze
    is locked for the whole of each generate, load or solve job.

    Example usage:
        jobs, requests = queue.Queue(), queue.Queue()
        control = MazeControl(jobs, requests)
        thread = control.start()
        jobs.put(GenerateMazeJob(width=21, height=21))
        jobs.put(QuitJob())
        thread.join()
    """

    def __init__(
        self,
        jobs: "queue.Queue[Job]",
        ui_requests: "queue.Queue[UIRequest]",
        maze: Optional[SharedMaze] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.jobs = jobs
        self.ui_requests = ui_requests
        self.maze = maze or SharedMaze(lock_timeout=self.settings.lock_timeout_seconds)
        self.state = ControlState.IDLE
        self.last_result: Optional[SolveResult] = None

    def start(self) -> threading.Thread:
        """Run the control loop in a background thread."""
        thread = threading.Thread(target=self.run, name="MazeControl", daemon=True)
        thread.start()
        logger.info("Control thread started")
        return thread

    def run(self) -> None:
        """Handle jobs until a QuitJob arrives."""
        while True:
            job = self.jobs.get()
            try:
                keep_running = self.handle_job(job)
            finally:
                self.jobs.task_done()
            if not keep_running:
                break
        logger.info("Control loop stopped")

    def _send(self, request: UIRequest) -> None:
        self.ui_requests.put(request)

    def show_error(self, message: str) -> None:
        """Report an error to the user interface."""
        self._send(ShowError(text=message))

    def handle_job(self, job: Job) -> bool:
        """
        Handle a single job.

        Failures are reported to the user interface and never stop the loop.

        Returns:
            True if the control loop should keep running.
        """
        logger.debug(f"Received job: {job!r}")

        if isinstance(job, QuitJob):
            self._send(QuitRequest())
            return False

        try:
            if isinstance(job, GenerateMazeJob):
                self.generate_maze(job)
            elif isinstance(job, SolveMazeJob):
                self.solve_maze(job)
            elif isinstance(job, LoadMazeJob):
                self.load_maze(job)
            else:
                raise MazeError(f"Unknown job: {type(job).__name__}")
        except MazeError as e:
            logger.error(f"{type(job).__name__} failed: {type(e).__name__}: {e}")
            self.show_error(str(e))

        return True

    def generate_maze(self, job: GenerateMazeJob) -> None:
        """Generate a new maze and publish it."""
        logger.info(f"Request to generate a maze of {job.dimensions} received")
        self._send(ShowInfo(text="Generating..."))

        seed = job.seed if job.seed is not None else self.settings.seed
        rng = random.Random(seed)

        with self.maze.locked() as grid:
            self.state = ControlState.GENERATING
            try:
                generator.generate(grid, job.dimensions, rng)
            except MazeError:
                self.state = ControlState.IDLE
                raise
            self.maze.touch()
            self.state = ControlState.READY

        self._send(ShowMaze(maze=self.maze))
        if self.settings.save_generated:
            self._send(SaveMaze(maze=self.maze, path=self.settings.maze_file))

    def load_maze(self, job: LoadMazeJob) -> None:
        """Replace the shared maze with one read from a file."""
        logger.info(f"Request to load a maze from {job.path} received")
        loaded = load_maze_file(job.path)

        with self.maze.locked():
            self.maze.replace(loaded)
            self.state = ControlState.READY

        self._send(ShowInfo(text=f"Loaded maze of {loaded.dimensions} from {job.path}"))
        self._send(ShowMaze(maze=self.maze))

    def solve_maze(self, job: SolveMazeJob) -> None:
        """Solve the current maze and publish the marked route."""
        logger.info(f"Request to solve the maze with {job.method.value} received")

        if self.state not in (ControlState.READY, ControlState.DONE):
            raise MazeError("No maze to solve: generate or load one first")

        with self.maze.locked() as grid:
            self.state = ControlState.SOLVING
            try:
                result = solve(grid, job.method)
            except MazeError:
                self.state = ControlState.READY
                raise
            self.maze.touch()
            self.state = ControlState.DONE

        self.last_result = result
        self._send(
            ShowInfo(
                text=(
                    f"Solved with {result.method.value}: route of {result.route_length} cells, "
                    f"{result.expanded} nodes expanded"
                )
            )
        )
        self._send(ShowMaze(maze=self.maze))
