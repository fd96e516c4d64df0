"""
Maze text persistence.

Saves and loads mazes in a plain text format.

Maze Format:
    Maze <width> <height>      header line
    <height> rows of <width> glyphs:
        █ = Wall
          = Passage (a space)
        S = Start
        E = End

Only cell kinds are stored. Solver annotations and graph links are not.
"""

import logging
from pathlib import Path

from mazetool.core.errors import MazeIOError, MazeParseError
from mazetool.core.grid import CellKind, Dimensions, Grid

logger = logging.getLogger(__name__)

HEADER_TAG = "Maze"
VALID_CHARS = {kind.value for kind in CellKind}


def serialize_maze(grid: Grid) -> str:
    """
    Render a grid in the persistence format.

    Args:
        grid: Grid to serialize.

    Returns:
        Text ending with a newline.
    """
    lines = [f"{HEADER_TAG} {grid.width} {grid.height}"]
    for y in range(grid.height):
        row = grid.cells[y * grid.width:(y + 1) * grid.width]
        lines.append("".join(cell.kind.value for cell in row))
    return "\n".join(lines) + "\n"


def _parse_header(line: str) -> Dimensions:
    parts = line.split()
    if len(parts) != 3 or parts[0] != HEADER_TAG:
        raise MazeParseError(f"Invalid maze header: {line!r}")
    try:
        width, height = int(parts[1]), int(parts[2])
    except ValueError as e:
        raise MazeParseError(f"Invalid maze dimensions in header: {line!r}") from e
    if width <= 0 or height <= 0:
        raise MazeParseError(f"Maze dimensions must be positive, got {width} x {height}")
    return Dimensions(width, height)


def parse_maze_text(maze_text: str) -> Grid:
    """
    Parse persisted maze text into a grid.

    Args:
        maze_text: Text in the persistence format.

    Returns:
        Grid holding the parsed cell kinds, start and end.

    Raises:
        MazeParseError: If the header, the body size or a glyph is invalid,
            or the maze does not have exactly one start and one end.
    """
    if not maze_text or not maze_text.strip():
        raise MazeParseError("Maze text is empty")

    # Rows are not stripped: a passage is a space.
    lines = maze_text.replace("\r\n", "\n").split("\n")
    dimensions = _parse_header(lines[0])
    rows = lines[1:1 + dimensions.height]

    if len(rows) != dimensions.height:
        raise MazeParseError(
            f"Expected {dimensions.height} rows, found {len(rows)}"
        )
    trailing = [line for line in lines[1 + dimensions.height:] if line.strip()]
    if trailing:
        raise MazeParseError(f"Unexpected content after {dimensions.height} rows")

    grid = Grid(dimensions)

    start: tuple[int, int] | None = None
    end: tuple[int, int] | None = None

    for y, row in enumerate(rows):
        if len(row) != dimensions.width:
            raise MazeParseError(
                f"Row {y} has {len(row)} cells, expected {dimensions.width}"
            )
        for x, char in enumerate(row):
            if char not in VALID_CHARS:
                raise MazeParseError(
                    f"Invalid character {char!r} at position ({x}, {y})"
                )
            kind = CellKind.from_char(char)
            position = grid.index(x, y)

            if kind == CellKind.START:
                if start is not None:
                    raise MazeParseError(
                        f"Multiple start positions found: "
                        f"first at {start}, second at ({x}, {y})"
                    )
                start = (x, y)
                grid.set_start(position)
            elif kind == CellKind.END:
                if end is not None:
                    raise MazeParseError(
                        f"Multiple end positions found: "
                        f"first at {end}, second at ({x}, {y})"
                    )
                end = (x, y)
                grid.set_end(position)
            else:
                grid.cells[position].kind = kind

    if start is None:
        raise MazeParseError("Maze must have a start position (S)")
    if end is None:
        raise MazeParseError("Maze must have an end position (E)")

    return grid


def save_maze_file(grid: Grid, file_path: Path | str) -> Path:
    """
    Write a grid to a maze file.

    Raises:
        MazeIOError: If the file cannot be written.
    """
    file_path = Path(file_path)
    try:
        file_path.write_text(serialize_maze(grid), encoding="utf-8")
    except OSError as e:
        raise MazeIOError(f"Failed to write maze file {file_path}: {e}") from e

    logger.info(f"Maze of {grid.dimensions} saved to {file_path}")
    return file_path


def load_maze_file(file_path: Path | str) -> Grid:
    """
    Load and parse a maze file from the filesystem.

    Args:
        file_path: Path to the maze file.

    Returns:
        Grid holding the loaded maze.

    Raises:
        MazeIOError: If the file does not exist or cannot be read.
        MazeParseError: If the content is not a valid maze.
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise MazeIOError(f"Maze file not found: {file_path}")

    try:
        maze_text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MazeIOError(f"Failed to read maze file {file_path}: {e}") from e

    grid = parse_maze_text(maze_text)
    logger.info(f"Maze of {grid.dimensions} loaded from {file_path}")
    return grid
