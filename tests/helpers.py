"""Shared assertions for maze tests."""

import random
from collections import deque

from mazetool.core.grid import CellKind, Direction, Grid


def open_cells(grid: Grid) -> set[int]:
    """Indices of every cell that is not a wall."""
    return {i for i, cell in enumerate(grid.cells) if cell.kind != CellKind.WALL}


def open_neighbors(grid: Grid, position: int) -> list[int]:
    result = []
    for direction in Direction:
        neighbor = grid.neighbor(position, direction)
        if neighbor is not None and grid.cells[neighbor].kind != CellKind.WALL:
            result.append(neighbor)
    return result


def reachable_from(grid: Grid, start: int) -> set[int]:
    """Open cells reachable from a cell through 4-connected moves."""
    seen = {start}
    queue = deque([start])
    while queue:
        position = queue.popleft()
        for neighbor in open_neighbors(grid, position):
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen


def adjacency_edge_count(grid: Grid) -> int:
    """Number of adjacent pairs of open cells."""
    edges = 0
    for position in open_cells(grid):
        for direction in (Direction.EAST, Direction.SOUTH):
            neighbor = grid.neighbor(position, direction)
            if neighbor is not None and grid.cells[neighbor].kind != CellKind.WALL:
                edges += 1
    return edges


def assert_consistent_half_edges(grid: Grid) -> None:
    """Every graph link must be matched by a link back the opposite way."""
    for position, cell in enumerate(grid.cells):
        for direction in Direction:
            target = cell.graph_links[direction.value]
            if target is not None:
                assert grid.cells[target].graph_links[direction.opposite.value] == position


def graph_snapshot(grid: Grid) -> list[list]:
    return [list(cell.graph_links) for cell in grid.cells]


class FirstChoiceRandom(random.Random):
    """Random source that keeps every order and always picks the first option."""

    def shuffle(self, x) -> None:
        pass

    def choice(self, seq):
        return seq[0]
