"""Text console user interface rendered with rich."""

import logging
import queue
from typing import Optional

from rich.console import Console
from rich.text import Text

from mazetool.config import Settings
from mazetool.core.grid import CellKind, Grid
from mazetool.schemas.messages import Job, UIRequest
from mazetool.services.shared_maze import SharedMaze
from mazetool.ui.base import UserInterface

logger = logging.getLogger(__name__)

ROUTE_GLYPH = "·"


def render_maze(grid: Grid, show_visited: bool = False) -> Text:
    """
    Build a styled text picture of a grid.

    Walls, start and end use their persistence glyphs. Route cells are
    drawn with a dot; visited cells off the route are shaded when
    `show_visited` is set.
    """
    text = Text()
    for y in range(grid.height):
        for x in range(grid.width):
            cell = grid.cells[x + y * grid.width]
            if cell.kind == CellKind.START:
                text.append("S", style="bold green")
            elif cell.kind == CellKind.END:
                text.append("E", style="bold red")
            elif cell.kind == CellKind.WALL:
                text.append(CellKind.WALL.value)
            elif cell.on_route:
                text.append(ROUTE_GLYPH, style="bold magenta")
            elif show_visited and cell.visited:
                text.append(ROUTE_GLYPH, style="dim")
            else:
                text.append(CellKind.PASSAGE.value)
        text.append("\n")
    return text


class ConsoleInterface(UserInterface):
    """
    Command line user interface.

    Blocks on the request queue and prints every request it receives.
    """

    def __init__(
        self,
        jobs: "queue.Queue[Job]",
        ui_requests: "queue.Queue[UIRequest]",
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        show_visited: bool = False,
    ):
        super().__init__(jobs, ui_requests, settings)
        self.console = console or Console()
        self.show_visited = show_visited

    def show_info(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)

    def show_error(self, message: str) -> None:
        self.console.print(Text(f"Error: {message}", style="bold red"), soft_wrap=True)

    def show_maze(self, maze: SharedMaze) -> None:
        with maze.locked() as grid:
            logger.debug(f"Size: {grid.dimensions}, cells len: {len(grid.cells)}")
            picture = render_maze(grid, self.show_visited)
        self.console.print(picture, end="", soft_wrap=True)

    def run(self) -> None:
        logger.info("Console interface starting")
        while self.handle_request(self.ui_requests.get()):
            pass
