"""Common behaviour of the Mazetool user interfaces."""

import logging
import queue
from abc import ABC, abstractmethod
from typing import Optional

from mazetool.config import Settings, get_settings
from mazetool.core.errors import MazeError
from mazetool.core.maze_io import save_maze_file
from mazetool.schemas.messages import (
    Job,
    QuitRequest,
    SaveMaze,
    ShowError,
    ShowInfo,
    ShowMaze,
    UIRequest,
)
from mazetool.services.shared_maze import SharedMaze

logger = logging.getLogger(__name__)


class UserInterface(ABC):
    """Front end that submits jobs and reacts to requests from the control."""

    def __init__(
        self,
        jobs: "queue.Queue[Job]",
        ui_requests: "queue.Queue[UIRequest]",
        settings: Optional[Settings] = None,
    ):
        self.jobs = jobs
        self.ui_requests = ui_requests
        self.settings = settings or get_settings()
        self.error_count = 0

    def submit(self, job: Job) -> None:
        """Send a job to the control."""
        self.jobs.put(job)

    @abstractmethod
    def show_info(self, message: str) -> None:
        """Show an information message."""

    @abstractmethod
    def show_error(self, message: str) -> None:
        """Show an error message."""

    @abstractmethod
    def show_maze(self, maze: SharedMaze) -> None:
        """Draw the shared maze."""

    @abstractmethod
    def run(self) -> None:
        """Serve control requests until told to quit."""

    def save_maze(self, request: SaveMaze) -> None:
        """Persist the shared maze to the requested or configured file."""
        path = request.path or self.settings.maze_file
        try:
            with request.maze.locked() as grid:
                save_maze_file(grid, path)
        except MazeError as e:
            self.error_count += 1
            self.show_error(str(e))
            return
        self.show_info(f"Maze saved to {path}")

    def handle_request(self, request: UIRequest) -> bool:
        """
        Handle a single request from the control.

        Returns:
            True if the interface should keep running.
        """
        logger.debug(f"UI received request: {type(request).__name__}")

        if isinstance(request, ShowInfo):
            self.show_info(request.text)
        elif isinstance(request, ShowError):
            self.error_count += 1
            self.show_error(request.text)
        elif isinstance(request, ShowMaze):
            try:
                self.show_maze(request.maze)
            except MazeError as e:
                self.error_count += 1
                self.show_error(str(e))
        elif isinstance(request, SaveMaze):
            self.save_maze(request)
        elif isinstance(request, QuitRequest):
            logger.info("UI exiting")
            return False
        else:
            logger.warning(f"Ignoring unknown UI request: {request!r}")
        return True
