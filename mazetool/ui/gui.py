"""Windowed user interface drawn on a tkinter canvas."""

import logging
import queue
import tkinter as tk
from typing import Optional

from mazetool.config import Settings
from mazetool.core.grid import CellKind
from mazetool.schemas.messages import Job, QuitJob, UIRequest
from mazetool.services.shared_maze import SharedMaze
from mazetool.ui.base import UserInterface

logger = logging.getLogger(__name__)

BACKGROUND = "#1a334d"
COLORS = {
    CellKind.WALL: "#ffffff",
    CellKind.START: "#2ecc71",
    CellKind.END: "#e74c3c",
}
ROUTE_COLOR = "#c678dd"
VISITED_COLOR = "#34495e"


class GraphicalInterface(UserInterface):
    """
    Window showing the maze.

    The request queue is polled without blocking from the tkinter event
    loop; the maze is re-read under its lock on every redraw.
    """

    def __init__(
        self,
        jobs: "queue.Queue[Job]",
        ui_requests: "queue.Queue[UIRequest]",
        settings: Optional[Settings] = None,
    ):
        super().__init__(jobs, ui_requests, settings)
        self.root: Optional[tk.Tk] = None
        self.canvas: Optional[tk.Canvas] = None
        self.status: Optional[tk.StringVar] = None
        self.maze: Optional[SharedMaze] = None
        self._drawn_generation = -1
        self._running = False

    def _build_window(self) -> None:
        self.root = tk.Tk()
        self.root.title(self.settings.app_name)
        self.root.configure(background=BACKGROUND)
        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.root.bind("<Escape>", lambda _event: self.close())

        self.canvas = tk.Canvas(self.root, background=BACKGROUND, highlightthickness=0)
        self.canvas.pack(fill=tk.BOTH, expand=True)
        self.canvas.bind("<Configure>", lambda _event: self.redraw())

        self.status = tk.StringVar(value="")
        tk.Label(self.root, textvariable=self.status, anchor="w").pack(fill=tk.X)

    def show_info(self, message: str) -> None:
        logger.info(message)
        if self.status is not None:
            self.status.set(message)

    def show_error(self, message: str) -> None:
        logger.error(message)
        if self.status is not None:
            self.status.set(f"Error: {message}")

    def show_maze(self, maze: SharedMaze) -> None:
        self.maze = maze
        self._drawn_generation = -1
        self.redraw()

    def redraw(self) -> None:
        """Draw the maze scaled to the current canvas size."""
        if self.canvas is None or self.maze is None:
            return

        with self.maze.locked() as grid:
            self._drawn_generation = self.maze.generation
            width = max(self.canvas.winfo_width(), 1)
            height = max(self.canvas.winfo_height(), 1)
            block = max(min(width // grid.width, height // grid.height), 1)

            self.canvas.delete("all")
            for y in range(grid.height):
                for x in range(grid.width):
                    cell = grid.cells[x + y * grid.width]
                    color = COLORS.get(cell.kind)
                    if color is None:
                        if cell.on_route:
                            color = ROUTE_COLOR
                        elif cell.visited:
                            color = VISITED_COLOR
                        else:
                            continue
                    self.canvas.create_rectangle(
                        x * block, y * block, (x + 1) * block, (y + 1) * block,
                        fill=color, width=0,
                    )

    def _poll(self) -> None:
        """Drain pending requests, then schedule the next poll."""
        while self._running:
            try:
                request = self.ui_requests.get_nowait()
            except queue.Empty:
                break
            if not self.handle_request(request):
                # Keep the window open until the user closes it.
                self._running = False

        if self.maze is not None and self.maze.generation != self._drawn_generation:
            self.redraw()

        if self.root is not None:
            self.root.after(self.settings.gui_poll_interval_ms, self._poll)

    def close(self) -> None:
        """Close the window and stop the control if it is still running."""
        if self._running:
            self.submit(QuitJob())
            self._running = False
        if self.root is not None:
            self.root.destroy()
            self.root = None

    def run(self) -> None:
        logger.info("Graphical interface starting")
        self._build_window()
        self._running = True
        size = self.settings.gui_cell_size * max(self.settings.default_width, self.settings.default_height)
        self.root.geometry(f"{size}x{size + 24}")
        self._poll()
        self.root.mainloop()
