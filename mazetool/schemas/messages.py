"""Messages exchanged between a user interface and the maze control."""

from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from mazetool.core.grid import (
    MAZE_DIMENSION_DEFAULT,
    MAZE_DIMENSION_MAX,
    MAZE_DIMENSION_MIN,
    Dimensions,
)
from mazetool.core.solver import SolveMethod
from mazetool.services.shared_maze import SharedMaze


# Jobs: user interface -> control


class GenerateMazeJob(BaseModel):
    """Request to generate a new random maze."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(MAZE_DIMENSION_DEFAULT, ge=MAZE_DIMENSION_MIN, le=MAZE_DIMENSION_MAX)
    height: int = Field(MAZE_DIMENSION_DEFAULT, ge=MAZE_DIMENSION_MIN, le=MAZE_DIMENSION_MAX)
    seed: int | None = None

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)


class SolveMazeJob(BaseModel):
    """Request to solve the current maze."""

    model_config = ConfigDict(frozen=True)

    method: SolveMethod = SolveMethod.A_STAR


class LoadMazeJob(BaseModel):
    """Request to replace the current maze with one read from a file."""

    model_config = ConfigDict(frozen=True)

    path: Path


class QuitJob(BaseModel):
    """Request to stop the control loop."""

    model_config = ConfigDict(frozen=True)


Job = Union[GenerateMazeJob, SolveMazeJob, LoadMazeJob, QuitJob]


# UI requests: control -> user interface


class ShowInfo(BaseModel):
    """Informational message for the user."""

    text: str


class ShowError(BaseModel):
    """Error message for the user."""

    text: str


class ShowMaze(BaseModel):
    """Ask the interface to draw the shared maze."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    maze: SharedMaze


class SaveMaze(BaseModel):
    """Ask the interface to persist the shared maze."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    maze: SharedMaze
    path: Path | None = None


class QuitRequest(BaseModel):
    """Tell the interface to exit."""

    pass


UIRequest = Union[ShowInfo, ShowError, ShowMaze, SaveMaze, QuitRequest]
