"""Exceptions raised by the maze engine."""


class MazeError(Exception):
    """Base exception for all maze engine failures."""

    pass


class InvalidPositionError(MazeError):
    """Exception raised when a cell index lies outside the grid."""

    pass


class InvalidDirectionError(MazeError):
    """Exception raised when a direction set is handled inconsistently."""

    pass


class InvalidDimensionsError(MazeError):
    """Exception raised when maze dimensions cannot hold a maze."""

    pass


class DigConflictError(MazeError):
    """Exception raised when carving a cell that is already open."""

    pass


class StartNotFoundError(MazeError):
    """Exception raised when an operation needs a start cell that does not exist."""

    pass


class RouteNotFoundError(MazeError):
    """Exception raised when the solver exhausts its candidates without reaching the end."""

    pass


class SolverError(MazeError):
    """Exception raised when the solver state becomes unusable."""

    pass


class MazeIOError(MazeError):
    """Exception raised when reading or writing a maze file fails."""

    pass


class MazeParseError(MazeError):
    """Exception raised when a persisted maze cannot be parsed."""

    pass


class LockError(MazeError):
    """Exception raised when the shared maze cannot be locked."""

    pass
