"""
Randomized backtracking maze carver.

Carving hops two cells at a time so corridors stay separated by walls
one cell thick. Candidates are kept on an explicit work stack instead of
recursing, so large mazes do not exhaust the call stack.

Start and end markers are placed after carving: the start on row 0, the
end on the last row, both at random odd columns.
"""

import logging
import random
from typing import Optional

from mazetool.core.errors import InvalidDimensionsError
from mazetool.core.grid import CellKind, Dimensions, Direction, Grid

logger = logging.getLogger(__name__)

# Smallest grid with room for one carved cell inside the outer wall.
MIN_CARVABLE_DIMENSION = 3


def shuffled_directions(rng: random.Random) -> list[Direction]:
    """All four directions in random order."""
    directions = list(Direction)
    rng.shuffle(directions)
    return directions


def is_diggable(grid: Grid, position: int, direction: Direction) -> bool:
    """
    Check whether a corridor can be dug two cells from a position.

    The intermediate and destination cells must be walls (or the end),
    and every side of the destination except the way back must exist
    and be a wall or the end, so that the new corridor never touches an
    existing one.

    Args:
        grid: Grid being carved.
        position: Index of the cell to dig from.
        direction: Direction to dig in.

    Returns:
        True if both cells can be carved.
    """
    middle = grid.neighbor(position, direction)
    if middle is None or not grid.is_wall_or_end(middle):
        return False

    destination = grid.neighbor(middle, direction)
    if destination is None or not grid.is_wall_or_end(destination):
        return False

    return _are_sides_diggable(grid, destination, direction)


def _are_sides_diggable(grid: Grid, destination: int, direction: Direction) -> bool:
    back = direction.opposite
    for side in Direction:
        if side == back:
            continue
        neighbor = grid.neighbor(destination, side)
        if neighbor is None or not grid.is_wall_or_end(neighbor):
            return False
    return True


def carve(grid: Grid, start: int, rng: random.Random) -> int:
    """
    Carve a perfect maze outward from a start cell.

    Args:
        grid: All-wall grid to carve into.
        start: Index of the first passage cell.
        rng: Random source for direction order.

    Returns:
        Number of cells opened.
    """
    grid.carve(start)
    opened = 1

    stack: list[tuple[int, Direction]] = [
        (start, direction) for direction in shuffled_directions(rng)
    ]

    while stack:
        position, direction = stack.pop()
        if not is_diggable(grid, position, direction):
            continue

        middle = grid.neighbor(position, direction)
        destination = grid.neighbor(middle, direction)
        grid.carve(middle)
        grid.carve(destination)
        opened += 2

        stack.extend((destination, d) for d in shuffled_directions(rng))

    logger.debug(f"Carved {opened} cells starting from {grid.coordinates(start)}")
    return opened


def _open_toward(grid: Grid, border: int, inward: Direction) -> None:
    """Open cells from a border marker inward until a passage is reached."""
    position = grid.neighbor(border, inward)
    while position is not None and grid.kind(position) == CellKind.WALL:
        grid.carve(position)
        position = grid.neighbor(position, inward)


def _marker_columns(grid: Grid) -> list[int]:
    """Odd columns whose first carved row holds a passage."""
    return [
        x
        for x in range(1, grid.width - 1, 2)
        if grid.kind(grid.index(x, 1)) == CellKind.PASSAGE
    ]


def place_start_and_end(grid: Grid, rng: random.Random) -> None:
    """
    Place the start on row 0 and the end on the last row.

    Each marker gets a random odd column and is joined to the carved
    maze through its column.

    Raises:
        InvalidDimensionsError: If nothing was carved to connect to.
    """
    columns = _marker_columns(grid)
    if not columns:
        raise InvalidDimensionsError(f"No carved columns to place markers in {grid.dimensions}")

    start = grid.index(rng.choice(columns), 0)
    end = grid.index(rng.choice(columns), grid.height - 1)

    grid.set_start(start)
    _open_toward(grid, start, Direction.SOUTH)
    grid.set_end(end)
    _open_toward(grid, end, Direction.NORTH)

    logger.debug(
        f"Start placed at {grid.coordinates(start)}, end at {grid.coordinates(end)}"
    )


def generate(
    grid: Grid,
    dimensions: Dimensions,
    rng: Optional[random.Random] = None,
) -> Grid:
    """
    Reset a grid and fill it with a new random maze.

    Args:
        grid: Grid to reuse.
        dimensions: Size of the new maze.
        rng: Random source. A fresh unseeded one is used when omitted.

    Returns:
        The same grid, now holding the maze.

    Raises:
        InvalidDimensionsError: If either dimension is too small to carve.
    """
    if dimensions.width < MIN_CARVABLE_DIMENSION or dimensions.height < MIN_CARVABLE_DIMENSION:
        raise InvalidDimensionsError(f"Cannot carve a maze of {dimensions}")

    rng = rng or random.Random()
    grid.reset(dimensions)

    start_column = rng.choice(range(1, dimensions.width - 1, 2))
    carve(grid, grid.index(start_column, 1), rng)
    place_start_and_end(grid, rng)

    logger.info(f"Generated maze of {dimensions}")
    return grid
