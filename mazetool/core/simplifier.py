"""
Leaf pruning for the topology graph.

A leaf is an ordinary passage node with exactly one graph edge. Removing
its edge may turn the node it was attached to into a leaf, so pruning
follows the branch back until it reaches a junction, the start or the end.
On a perfect maze what is left afterwards is the single route between the
start and the end.
"""

import logging
from typing import Optional

from mazetool.core.errors import InvalidDirectionError, MazeError
from mazetool.core.grid import CellKind, Direction, Grid

logger = logging.getLogger(__name__)


class GraphSimplifier:
    """
    Removes prunable leaves from a grid's topology graph.

    Example usage:
        simplifier = GraphSimplifier(grid)
        while simplifier.step():
            redraw(grid)
    """

    def __init__(self, grid: Grid):
        if not grid.has_graph:
            raise MazeError("Cannot simplify: topology graph has not been built")
        self.grid = grid
        self.removed = 0
        self._cursor: Optional[int] = None
        self._scan_from = 0

    def is_prunable(self, position: int) -> bool:
        """Check whether a node is a passage leaf."""
        cell = self.grid.cells[position]
        return cell.kind == CellKind.PASSAGE and cell.graph_degree == 1

    def _next_leaf(self) -> Optional[int]:
        if self._cursor is not None and self.is_prunable(self._cursor):
            return self._cursor

        cells = self.grid.cells
        for position in range(self._scan_from, len(cells)):
            if self.is_prunable(position):
                self._scan_from = position
                return position
        self._scan_from = len(cells)
        return None

    def step(self) -> bool:
        """
        Remove at most one leaf edge.

        Returns:
            True if an edge was removed, False once no prunable leaf remains.
        """
        leaf = self._next_leaf()
        if leaf is None:
            return False

        cells = self.grid.cells
        direction = next(
            (d for d in Direction if cells[leaf].graph_links[d.value] is not None), None
        )
        if direction is None:
            raise InvalidDirectionError(
                f"Leaf at {self.grid.coordinates(leaf)} has no linked direction"
            )
        other = cells[leaf].graph_links[direction.value]
        if cells[other].graph_links[direction.opposite.value] != leaf:
            raise InvalidDirectionError(
                f"Graph edge {self.grid.coordinates(leaf)} -> "
                f"{self.grid.coordinates(other)} has no matching half-edge"
            )

        cells[leaf].graph_links[direction.value] = None
        cells[other].graph_links[direction.opposite.value] = None
        self.removed += 1
        self._cursor = other
        # The former neighbor may sit before the scan position.
        self._scan_from = min(self._scan_from, other)
        return True

    def run(self) -> int:
        """
        Prune until no leaf remains.

        Returns:
            Number of edges removed by this call.
        """
        before = self.removed
        while self.step():
            pass
        removed = self.removed - before
        logger.info(f"Simplifier removed {removed} graph edges")
        return removed


def simplify(grid: Grid) -> int:
    """Prune every removable leaf of the grid's topology graph."""
    return GraphSimplifier(grid).run()
