"""
Topology reducer.

Walks the carved corridors from the start and links only the cells where
something happens: the start, the end, dead ends, corners and junctions.
Straight corridor runs between two such cells are skipped; their cells keep
their passage kind but carry no graph links.

An edge is stored as two half-edges: the node left behind points at the new
node in the walking direction, the new node points back the opposite way.
"""

import logging
from enum import Enum

from mazetool.core.errors import StartNotFoundError
from mazetool.core.grid import CellKind, Direction, Grid

logger = logging.getLogger(__name__)


class CorridorShape(Enum):
    """How a corridor continues after entering a passage cell."""
    DEAD_END = "dead_end"
    STRAIGHT = "straight"
    INTERSECTION = "intersection"


def usable_directions(grid: Grid, position: int, arrival: Direction) -> list[Direction]:
    """
    Directions a walk entering a cell can continue in.

    Every direction except the way back whose next cell exists and is not a wall.
    """
    back = arrival.opposite
    return [direction for direction in exits(grid, position) if direction != back]


def exits(grid: Grid, position: int) -> list[Direction]:
    """Directions leading from a cell to an open neighbor."""
    open_directions = []
    for direction in Direction:
        neighbor = grid.neighbor(position, direction)
        if neighbor is not None and grid.kind(neighbor) != CellKind.WALL:
            open_directions.append(direction)
    return open_directions


def classify(usable: list[Direction], arrival: Direction) -> CorridorShape:
    """Classify a passage cell from its usable continuation directions."""
    if not usable:
        return CorridorShape.DEAD_END
    if len(usable) == 1 and usable[0] == arrival:
        return CorridorShape.STRAIGHT
    return CorridorShape.INTERSECTION


def link(grid: Grid, previous: int, node: int, direction: Direction) -> None:
    """Record an undirected edge between two graph nodes."""
    grid.cells[previous].graph_links[direction.value] = node
    grid.cells[node].graph_links[direction.opposite.value] = previous


def reduce_topology(grid: Grid) -> int:
    """
    Build the sparse topology graph over a carved grid.

    Any previous graph is discarded first, so running the reducer twice on
    an unchanged grid gives the same links.

    Args:
        grid: Carved grid with a start cell.

    Returns:
        Number of graph nodes, the start included.

    Raises:
        StartNotFoundError: If the grid has no start cell.
    """
    if grid.start is None:
        raise StartNotFoundError("Cannot build topology graph: maze has no start")

    grid.clear_graph()
    start = grid.start
    nodes = 1

    # Frames are (last recorded node, current cell, walking direction).
    stack: list[tuple[int, int, Direction]] = [
        (start, start, direction) for direction in exits(grid, start)
    ]

    while stack:
        previous, position, direction = stack.pop()
        neighbor = grid.neighbor(position, direction)

        if neighbor is None or grid.kind(neighbor) == CellKind.WALL:
            logger.warning(
                f"Dropping walk from {grid.coordinates(position)} heading {direction.name}"
            )
            continue

        kind = grid.kind(neighbor)
        # A node that already has links was reached before through a loop.
        known = neighbor == start or grid.cells[neighbor].graph_degree > 0

        if kind in (CellKind.START, CellKind.END):
            link(grid, previous, neighbor, direction)
            if not known:
                nodes += 1
            continue

        usable = usable_directions(grid, neighbor, direction)
        shape = classify(usable, direction)

        if shape == CorridorShape.STRAIGHT:
            stack.append((previous, neighbor, direction))
            continue

        link(grid, previous, neighbor, direction)
        if known:
            continue
        nodes += 1
        if shape == CorridorShape.INTERSECTION:
            stack.extend((neighbor, neighbor, d) for d in usable)

    grid.has_graph = True
    logger.info(f"Topology graph built with {nodes} nodes")
    return nodes
