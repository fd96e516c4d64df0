"""
Mazetool Grid

Flat, row-major cell storage shared by every stage of the maze engine:
- Cell kinds and their persistence glyphs
- Directions with constant-time opposites
- Neighbor lookup without row or column wrap-around
- Per-cell solver annotations and topology graph links

Addressing:
    index = x + y * width
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from mazetool.core.errors import DigConflictError, InvalidPositionError

logger = logging.getLogger(__name__)

MAZE_DIMENSION_MIN = 10
MAZE_DIMENSION_MAX = 10000
MAZE_DIMENSION_DEFAULT = 19


class CellKind(Enum):
    """Kinds of cells in the maze, valued by their persistence glyph."""
    WALL = "█"
    PASSAGE = " "
    START = "S"
    END = "E"

    @classmethod
    def from_char(cls, char: str) -> "CellKind":
        """Convert a persistence glyph to a CellKind."""
        for kind in cls:
            if kind.value == char:
                return kind
        raise ValueError(f"Unknown cell glyph {char!r}")


class Direction(Enum):
    """Movement directions. The value is the slot used in Cell.graph_links."""
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    @property
    def opposite(self) -> "Direction":
        """Direction pointing back the way this one came."""
        return _OPPOSITES[self]

    @property
    def delta(self) -> tuple[int, int]:
        """Get (dx, dy) for this direction."""
        return _DELTAS[self]


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.EAST: Direction.WEST,
    Direction.SOUTH: Direction.NORTH,
    Direction.WEST: Direction.EAST,
}

_DELTAS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}


@dataclass(frozen=True)
class Dimensions:
    """Width and height of a maze in cells."""
    width: int
    height: int

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def __str__(self) -> str:
        return f"{self.width} x {self.height}"


@dataclass
class Cell:
    """One cell of the maze."""
    kind: CellKind = CellKind.WALL
    visited: bool = False
    on_route: bool = False
    graph_links: list[Optional[int]] = field(default_factory=lambda: [None] * 4)

    def reset(self) -> None:
        """Turn the cell back into an unvisited wall without graph links."""
        self.kind = CellKind.WALL
        self.visited = False
        self.on_route = False
        self.graph_links = [None] * 4

    @property
    def is_open(self) -> bool:
        """True for every kind a path can pass through."""
        return self.kind != CellKind.WALL

    @property
    def graph_degree(self) -> int:
        """Number of graph edges attached to this cell."""
        return sum(1 for link in self.graph_links if link is not None)


class Grid:
    """
    Rectangular maze grid.

    The grid is mutated in place by the generator, the topology reducer,
    the simplifier and the solver. Front ends only read it.

    Example usage:
        grid = Grid(Dimensions(19, 19))
        east = grid.neighbor(grid.index(1, 1), Direction.EAST)
    """

    def __init__(self, dimensions: Optional[Dimensions] = None):
        """
        Initialize an all-wall grid.

        Args:
            dimensions: Size of the grid. Defaults to the default maze size.
        """
        self.dimensions = Dimensions(0, 0)
        self.cells: list[Cell] = []
        self.start: Optional[int] = None
        self.end: Optional[int] = None
        self.has_graph = False

        self.reset(dimensions or Dimensions(MAZE_DIMENSION_DEFAULT, MAZE_DIMENSION_DEFAULT))

    @property
    def width(self) -> int:
        return self.dimensions.width

    @property
    def height(self) -> int:
        return self.dimensions.height

    def reset(self, dimensions: Dimensions) -> None:
        """
        Reshape the grid and clear all cell state.

        Storage is only re-allocated when the cell count changes.

        Args:
            dimensions: New size of the grid.
        """
        new_size = dimensions.cell_count
        self.dimensions = dimensions

        if len(self.cells) != new_size:
            self.cells = [Cell() for _ in range(new_size)]
        else:
            for cell in self.cells:
                cell.reset()

        self.start = None
        self.end = None
        self.has_graph = False

        logger.debug(
            f"Grid reset to {self.width} x {self.height}, cells len: {len(self.cells)}"
        )

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def contains(self, position: int) -> bool:
        """Check whether an index addresses a cell of this grid."""
        return 0 <= position < len(self.cells)

    def _check(self, position: int) -> None:
        if not self.contains(position):
            raise InvalidPositionError(
                f"Position {position} outside grid of {len(self.cells)} cells"
            )

    def index(self, x: int, y: int) -> int:
        """Convert (x, y) to a linear index."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidPositionError(f"Coordinates ({x}, {y}) outside {self.dimensions}")
        return x + y * self.width

    def coordinates(self, position: int) -> tuple[int, int]:
        """Convert a linear index to (x, y)."""
        self._check(position)
        return position % self.width, position // self.width

    def cell(self, position: int) -> Cell:
        """Get the cell at an index."""
        self._check(position)
        return self.cells[position]

    def kind(self, position: int) -> CellKind:
        """Get the kind of the cell at an index."""
        return self.cell(position).kind

    def neighbor(self, position: int, direction: Direction) -> Optional[int]:
        """
        Find the adjacent cell in a direction.

        Args:
            position: Index of the origin cell.
            direction: Direction to look in.

        Returns:
            Index of the neighbor, or None when the origin is on that edge.

        Raises:
            InvalidPositionError: If the origin is not inside the grid.
        """
        x, y = self.coordinates(position)
        dx, dy = direction.delta
        nx, ny = x + dx, y + dy
        if not (0 <= nx < self.width and 0 <= ny < self.height):
            return None
        return nx + ny * self.width

    def is_wall_or_end(self, position: int) -> bool:
        """True if the cell is a wall or the end marker."""
        return self.kind(position) in (CellKind.WALL, CellKind.END)

    def carve(self, position: int) -> None:
        """
        Open a wall into a passage. The end marker is left in place.

        Raises:
            DigConflictError: If the cell is already a passage or the start.
        """
        cell = self.cell(position)
        if cell.kind == CellKind.END:
            return
        if cell.kind != CellKind.WALL:
            raise DigConflictError(
                f"Cannot dig at {self.coordinates(position)}: cell is {cell.kind.name}"
            )
        cell.kind = CellKind.PASSAGE

    def set_start(self, position: int) -> None:
        """Mark a cell as the single start cell."""
        if self.start is not None and self.start != position:
            self.cells[self.start].kind = CellKind.PASSAGE
        self.cell(position).kind = CellKind.START
        self.start = position

    def set_end(self, position: int) -> None:
        """Mark a cell as the single end cell."""
        if self.end is not None and self.end != position:
            self.cells[self.end].kind = CellKind.PASSAGE
        self.cell(position).kind = CellKind.END
        self.end = position

    def clear_solution(self) -> None:
        """Drop visited and route annotations left by a previous solve."""
        for cell in self.cells:
            cell.visited = False
            cell.on_route = False

    def clear_graph(self) -> None:
        """Drop all topology graph links."""
        for cell in self.cells:
            cell.graph_links = [None] * 4
        self.has_graph = False

    def graph_nodes(self) -> list[int]:
        """Indices of all cells carrying at least one graph link."""
        return [i for i, cell in enumerate(self.cells) if cell.graph_degree > 0]

    def manhattan_distance(self, a: int, b: int) -> int:
        """Sum of the absolute column and row differences between two cells."""
        ax, ay = self.coordinates(a)
        bx, by = self.coordinates(b)
        return abs(ax - bx) + abs(ay - by)

    def count(self, kind: CellKind) -> int:
        """Number of cells of the given kind."""
        return sum(1 for cell in self.cells if cell.kind == kind)
