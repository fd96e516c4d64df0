"""
A* maze solver.

The solver works either directly on grid cells or on the topology graph
built by the reducer, where an edge costs the length of the corridor it
stands for. All search state lives in a SolveSession, so separate solves
never share an open set or a closed list.

Open set:
    Binary heap ordered by f, ties broken by insertion order.
Closed list:
    Append-only history of every node that lowered the best known cost
    of its cell. It doubles as the visited set and as the source for
    tracing the route back from the end.
"""

import bisect
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from mazetool.core.errors import (
    MazeError,
    RouteNotFoundError,
    SolverError,
    StartNotFoundError,
)
from mazetool.core.grid import CellKind, Direction, Grid
from mazetool.core.simplifier import simplify
from mazetool.core.topology import reduce_topology

logger = logging.getLogger(__name__)


class SolveMethod(Enum):
    """Ways of solving a maze."""
    GRAPH_ONLY = "graph"
    GRAPH_ELIMINATION = "elimination"
    A_STAR = "astar"


class SolveStatus(Enum):
    """State of a solve session after a step."""
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(order=True)
class SolverNode:
    """A* working state for one cell."""
    f: int
    sequence: int
    position: int = field(compare=False)
    parent: int = field(compare=False)
    g: int = field(compare=False)
    h: int = field(compare=False)


@dataclass
class SolveResult:
    """Outcome of a finished solve."""
    method: SolveMethod
    route: list[int]
    expanded: int
    steps: int

    @property
    def route_length(self) -> int:
        """Number of cells on the route, start and end included."""
        return len(self.route)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "method": self.method.value,
            "route_length": self.route_length,
            "expanded": self.expanded,
            "steps": self.steps,
        }


class SolveSession:
    """
    One A* search over a grid.

    Example usage:
        session = SolveSession(grid)
        while session.step() == SolveStatus.RUNNING:
            redraw(grid)
        print(session.route)
    """

    def __init__(self, grid: Grid, use_graph: bool = False):
        """
        Prepare a search from the grid's start to its end.

        Args:
            grid: Maze with start and end cells.
            use_graph: Search the topology graph instead of raw cells.

        Raises:
            StartNotFoundError: If the maze has no start.
            MazeError: If it has no end, or the graph is required but missing.
        """
        if grid.start is None:
            raise StartNotFoundError("Cannot solve: maze has no start")
        if grid.end is None:
            raise MazeError("Cannot solve: maze has no end")
        if use_graph and not grid.has_graph:
            raise MazeError("Cannot solve on graph: topology graph has not been built")

        self.grid = grid
        self.use_graph = use_graph
        # Each cell can be entered from at most four sides.
        self.capacity = 4 * len(grid.cells)
        self.status = SolveStatus.RUNNING
        self.expanded = 0
        self.steps = 0
        self.route: list[int] = []

        self._open: list[SolverNode] = []
        self._closed: list[SolverNode] = []
        self._closed_index: dict[int, list[int]] = {}
        self._best_g: dict[int, int] = {}
        self._sequence = itertools.count()
        self._seeded = False
        self._reached_end = False

        grid.clear_solution()

    @property
    def open_count(self) -> int:
        return len(self._open)

    @property
    def closed(self) -> list[SolverNode]:
        return list(self._closed)

    def _node(self, position: int, parent: int, g: int) -> SolverNode:
        h = self.grid.manhattan_distance(position, self.grid.end)
        return SolverNode(
            f=g + h,
            sequence=next(self._sequence),
            position=position,
            parent=parent,
            g=g,
            h=h,
        )

    def _push(self, node: SolverNode) -> None:
        if len(self._open) >= self.capacity:
            raise SolverError(f"Open set exceeded its capacity of {self.capacity}")
        heapq.heappush(self._open, node)

    def _close(self, node: SolverNode) -> None:
        self._closed_index.setdefault(node.position, []).append(len(self._closed))
        self._closed.append(node)
        best = self._best_g.get(node.position)
        if best is None or node.g < best:
            self._best_g[node.position] = node.g

    def _pop(self) -> Optional[SolverNode]:
        """Pop the lowest-f node, dropping entries a cheaper path superseded."""
        while self._open:
            node = heapq.heappop(self._open)
            if node.g <= self._best_g[node.position]:
                return node
        return None

    def _seed(self) -> None:
        start = self.grid.start
        seed = SolverNode(f=0, sequence=next(self._sequence), position=start, parent=start, g=0, h=0)
        self._push(seed)
        self._close(seed)
        self._seeded = True

    def _successors(self, position: int) -> Iterator[tuple[int, int]]:
        """Yield (position, cost) pairs reachable from a cell."""
        grid = self.grid
        if self.use_graph:
            for target in grid.cells[position].graph_links:
                if target is not None:
                    yield target, grid.manhattan_distance(position, target)
            return

        for direction in Direction:
            neighbor = grid.neighbor(position, direction)
            if neighbor is not None and grid.kind(neighbor) != CellKind.WALL:
                yield neighbor, 1

    def step(self) -> SolveStatus:
        """
        Expand the lowest-f node of the open set.

        Returns:
            SolveStatus.FINISHED once the route has been marked.

        Raises:
            RouteNotFoundError: If the open set runs dry before the end is reached.
        """
        if self.status == SolveStatus.FINISHED:
            return self.status
        if not self._seeded:
            self._seed()
        node = self._pop()
        if node is None:
            raise RouteNotFoundError("No route from start to end")

        self.steps += 1
        cells = self.grid.cells
        cells[node.position].visited = True
        self.expanded += 1

        for position, cost in self._successors(node.position):
            if position == node.parent:
                continue

            successor = self._node(position, node.position, node.g + cost)

            if position == self.grid.end:
                cells[position].visited = True
                self._close(successor)
                self._open.clear()
                self._reached_end = True
                break

            # Another path already reached this cell at no greater cost.
            best = self._best_g.get(position)
            if best is not None and best <= successor.g:
                continue

            self._push(successor)
            self._close(successor)

        if self._open:
            return self.status
        if not self._reached_end:
            raise RouteNotFoundError("No route from start to end")

        self._mark_route()
        self.status = SolveStatus.FINISHED
        logger.info(
            f"Solved in {self.steps} steps, {self.expanded} nodes expanded, "
            f"route of {len(self.route)} cells"
        )
        return self.status

    def run(self) -> SolveStatus:
        """Step until the search finishes."""
        while self.step() == SolveStatus.RUNNING:
            pass
        return self.status

    def _cells_between(self, position: int, parent: int) -> Iterator[int]:
        """Yield the cells from position toward parent, parent excluded."""
        grid = self.grid
        x, y = grid.coordinates(position)
        px, py = grid.coordinates(parent)
        if x != px and y != py:
            raise SolverError(
                f"Route segment {(x, y)} -> {(px, py)} is not a straight corridor"
            )
        dx = (px > x) - (px < x)
        dy = (py > y) - (py < y)
        while (x, y) != (px, py):
            yield grid.index(x, y)
            x, y = x + dx, y + dy

    def _parent_entry(self, index: int) -> Optional[int]:
        """Latest closed entry for the parent of entry `index` that precedes it."""
        parent = self._closed[index].parent
        indices = self._closed_index.get(parent, [])
        found = bisect.bisect_left(indices, index)
        return indices[found - 1] if found > 0 else None

    def _mark_route(self) -> None:
        """Trace parents back from the last closed node and mark the route."""
        cells = self.grid.cells
        start = self.grid.start
        route: list[int] = []

        index: Optional[int] = len(self._closed) - 1
        while index is not None and self._closed[index].position != start:
            entry = self._closed[index]
            for position in self._cells_between(entry.position, entry.parent):
                cells[position].on_route = True
                route.append(position)
            index = self._parent_entry(index)

        if index is None:
            raise SolverError("Route trace did not lead back to the start")

        cells[start].on_route = True
        route.append(start)
        route.reverse()
        self.route = route


def solve(grid: Grid, method: SolveMethod = SolveMethod.A_STAR) -> SolveResult:
    """
    Solve a maze in place with the given method.

    GRAPH_ONLY searches the topology graph, GRAPH_ELIMINATION prunes the
    graph's leaves before searching it, A_STAR searches raw cells.

    Returns:
        SolveResult describing the marked route.
    """
    use_graph = method != SolveMethod.A_STAR
    if use_graph:
        reduce_topology(grid)
        if method == SolveMethod.GRAPH_ELIMINATION:
            simplify(grid)

    session = SolveSession(grid, use_graph=use_graph)
    session.run()
    return SolveResult(
        method=method,
        route=session.route,
        expanded=session.expanded,
        steps=session.steps,
    )
