"""Pytest configuration and fixtures."""

import random
from pathlib import Path

import pytest

from mazetool.config import Settings
from mazetool.core.generator import generate
from mazetool.core.grid import Dimensions, Grid
from mazetool.core.maze_io import parse_maze_text

SNAPSHOT_DIR = Path(__file__).parent / "snapshots"

# Hand-drawn perfect maze:
#   start (1, 0), end (5, 6)
#   junctions at (1, 3) and (3, 3), corners at (1, 5), (3, 1), (5, 3)
#   dead ends at (3, 5) and (5, 1)
BRANCHING_MAZE = (
    "Maze 7 7\n"
    "█S█████\n"
    "█ █   █\n"
    "█ █ ███\n"
    "█     █\n"
    "█ ███ █\n"
    "█   █ █\n"
    "█████E█\n"
)

# Same corridors with both dead-end branches opened into loops.
LOOPED_MAZE = (
    "Maze 7 7\n"
    "█S█████\n"
    "█ █   █\n"
    "█ █ █ █\n"
    "█     █\n"
    "█ █ █ █\n"
    "█   █ █\n"
    "█████E█\n"
)

# Start on the left border instead of the top row; one corridor to the end.
SIDE_START_MAZE = (
    "Maze 7 5\n"
    "███████\n"
    "S     █\n"
    "█████ █\n"
    "█     █\n"
    "█E█████\n"
)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and the working directory."""
    return Settings(
        _env_file=None,
        maze_file=tmp_path / "maze.txt",
        save_generated=False,
        lock_timeout_seconds=5.0,
    )


@pytest.fixture
def branching_maze() -> Grid:
    """Small hand-drawn maze with known topology."""
    return parse_maze_text(BRANCHING_MAZE)


@pytest.fixture
def looped_maze() -> Grid:
    """Small hand-drawn maze containing two loops."""
    return parse_maze_text(LOOPED_MAZE)


@pytest.fixture
def maze_19() -> Grid:
    """Generated 19 x 19 maze with a fixed seed."""
    return generate(Grid(), Dimensions(19, 19), random.Random(2021))


@pytest.fixture(params=[(10, 10), (19, 19), (20, 14), (31, 17)])
def generated_maze(request) -> Grid:
    """Generated mazes of odd, even and mixed dimensions."""
    width, height = request.param
    return generate(Grid(), Dimensions(width, height), random.Random(width * 1000 + height))


@pytest.fixture
def side_start_maze() -> Grid:
    """Small maze whose start sits on the left border."""
    return parse_maze_text(SIDE_START_MAZE)


def open_room_text(width: int, height: int) -> str:
    """Maze text with a walled border around an all-passage interior."""
    rows = [
        "█S" + "█" * (width - 2),
        *["█" + " " * (width - 2) + "█" for _ in range(height - 2)],
        "█" * (width - 2) + "E█",
    ]
    return f"Maze {width} {height}\n" + "\n".join(rows) + "\n"
