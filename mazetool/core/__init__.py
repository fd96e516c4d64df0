# Core module
from .errors import (
    MazeError,
    InvalidPositionError,
    InvalidDirectionError,
    InvalidDimensionsError,
    DigConflictError,
    StartNotFoundError,
    RouteNotFoundError,
    SolverError,
    MazeIOError,
    MazeParseError,
    LockError,
)
from .grid import (
    MAZE_DIMENSION_DEFAULT,
    MAZE_DIMENSION_MAX,
    MAZE_DIMENSION_MIN,
    Cell,
    CellKind,
    Dimensions,
    Direction,
    Grid,
)
from .generator import generate
from .topology import reduce_topology
from .simplifier import GraphSimplifier, simplify
from .solver import SolveMethod, SolveResult, SolveSession, SolveStatus, solve
from .maze_io import (
    serialize_maze,
    parse_maze_text,
    save_maze_file,
    load_maze_file,
)

__all__ = [
    "MazeError",
    "InvalidPositionError",
    "InvalidDirectionError",
    "InvalidDimensionsError",
    "DigConflictError",
    "StartNotFoundError",
    "RouteNotFoundError",
    "SolverError",
    "MazeIOError",
    "MazeParseError",
    "LockError",
    "MAZE_DIMENSION_DEFAULT",
    "MAZE_DIMENSION_MAX",
    "MAZE_DIMENSION_MIN",
    "Cell",
    "CellKind",
    "Dimensions",
    "Direction",
    "Grid",
    "generate",
    "reduce_topology",
    "GraphSimplifier",
    "simplify",
    "SolveMethod",
    "SolveResult",
    "SolveSession",
    "SolveStatus",
    "solve",
    "serialize_maze",
    "parse_maze_text",
    "save_maze_file",
    "load_maze_file",
]
