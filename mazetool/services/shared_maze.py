"""Lock-guarded handle to the maze grid shared between threads."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from mazetool.core.errors import LockError
from mazetool.core.grid import Dimensions, Grid

logger = logging.getLogger(__name__)


class SharedMaze:
    """
    Reference to a Grid guarded by a mutual-exclusion lock.

    Every read or write of the grid goes through `locked()`; callers must
    not keep the yielded grid after the block ends. `replace()` and
    `touch()` may only be called by the thread holding the lock.

    Example usage:
        with shared.locked() as grid:
            render(grid)
    """

    def __init__(self, grid: Optional[Grid] = None, lock_timeout: float = 30.0):
        self._grid = grid if grid is not None else Grid()
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self.lock_timeout = lock_timeout
        self.generation = 0

    @contextmanager
    def locked(self, timeout: Optional[float] = None) -> Iterator[Grid]:
        """
        Hold the lock for the duration of a block.

        Raises:
            LockError: If the lock is not acquired within the timeout.
        """
        timeout = self.lock_timeout if timeout is None else timeout
        if not self._lock.acquire(timeout=timeout):
            raise LockError(f"Could not lock the maze within {timeout} seconds")
        self._owner = threading.get_ident()
        try:
            yield self._grid
        finally:
            self._owner = None
            self._lock.release()

    def _require_owner(self, action: str) -> None:
        if self._owner != threading.get_ident():
            raise LockError(f"{action} the maze requires holding its lock")

    def replace(self, grid: Grid) -> None:
        """
        Swap in a new grid.

        Raises:
            LockError: If the calling thread does not hold the lock.
        """
        self._require_owner("Replacing")
        self._grid = grid
        self.generation += 1

    def touch(self) -> None:
        """
        Note that the grid changed in place.

        Raises:
            LockError: If the calling thread does not hold the lock.
        """
        self._require_owner("Updating")
        self.generation += 1

    def dimensions(self) -> Dimensions:
        """Dimensions of the current grid, read under the lock."""
        with self.locked() as grid:
            return grid.dimensions
