"""Mazetool command line entry point."""

import argparse
import logging
import queue
import sys
from pathlib import Path
from typing import Optional, Sequence

from mazetool.config import Settings, get_settings
from mazetool.core.grid import MAZE_DIMENSION_MAX, MAZE_DIMENSION_MIN
from mazetool.core.solver import SolveMethod
from mazetool.schemas.messages import (
    GenerateMazeJob,
    Job,
    LoadMazeJob,
    QuitJob,
    SolveMazeJob,
    UIRequest,
)
from mazetool.services.maze_control import MazeControl
from mazetool.ui.base import UserInterface
from mazetool.ui.console import ConsoleInterface

logger = logging.getLogger("mazetool")

COMMANDS_HELP = f"""\
Commands:
  generate [width height]           Generate a new random maze of given size
  solve [method] [width height]     Generate a maze and solve it
                                    (methods: {", ".join(m.value for m in SolveMethod)})
  help                              Print this help

Dimensions must be between {MAZE_DIMENSION_MIN} and {MAZE_DIMENSION_MAX}.
"""


class CommandLineError(Exception):
    """Exception raised for invalid command line input."""

    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise CommandLineError(message)


def setup_logging(settings: Settings) -> None:
    """Configure process-wide logging."""
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _ArgumentParser(
        prog="mazetool",
        usage="%(prog)s <command> [options]",
        description="Generate and solve rectangular grid mazes.",
        epilog=COMMANDS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("command", choices=["generate", "solve", "help"], help=argparse.SUPPRESS)
    parser.add_argument("params", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument("--gui", action="store_true", help="show the maze in a window")
    parser.add_argument("--seed", type=int, default=None, help="random seed for a reproducible maze")
    parser.add_argument("--load", type=Path, default=None, metavar="FILE",
                        help="solve a saved maze instead of generating one")
    parser.add_argument("--save", type=Path, default=None, metavar="FILE",
                        help="file to save generated mazes to")
    parser.add_argument("--no-save", action="store_true", help="do not save generated mazes")
    parser.add_argument("--show-visited", action="store_true",
                        help="shade cells the solver examined (console only)")
    return parser


def print_usage(parser: argparse.ArgumentParser) -> None:
    parser.print_help(file=sys.stdout)


def parse_dimension(arg: str) -> int:
    """Parse one maze dimension."""
    try:
        value = int(arg)
    except ValueError as e:
        raise CommandLineError(f"Invalid dimension: {arg!r}") from e
    if not MAZE_DIMENSION_MIN <= value <= MAZE_DIMENSION_MAX:
        raise CommandLineError(
            f"Dimension {value} outside {MAZE_DIMENSION_MIN}..{MAZE_DIMENSION_MAX}"
        )
    return value


def _generate_job(params: list[str], settings: Settings, seed: Optional[int]) -> GenerateMazeJob:
    if not params:
        logger.info("No dimensions given. Using default size.")
        return GenerateMazeJob(width=settings.default_width, height=settings.default_height, seed=seed)
    if len(params) == 2:
        return GenerateMazeJob(
            width=parse_dimension(params[0]),
            height=parse_dimension(params[1]),
            seed=seed,
        )
    raise CommandLineError("Expected either no dimensions or a width and a height")


def build_jobs(args: argparse.Namespace, settings: Settings) -> list[Job]:
    """
    Turn parsed arguments into the jobs to send to the control.

    Raises:
        CommandLineError: If the parameters do not fit the command.
    """
    params = list(args.params)

    if args.command == "generate":
        if args.load is not None:
            raise CommandLineError("--load can only be used with solve")
        return [_generate_job(params, settings, args.seed)]

    if args.command == "solve":
        method = SolveMethod.A_STAR
        if params and not params[0].lstrip("-").isdigit():
            try:
                method = SolveMethod(params.pop(0))
            except ValueError as e:
                raise CommandLineError(f"Unknown solve method: {e}") from e

        if args.load is not None:
            if params:
                raise CommandLineError("Dimensions cannot be combined with --load")
            first: Job = LoadMazeJob(path=args.load)
        else:
            first = _generate_job(params, settings, args.seed)
        return [first, SolveMazeJob(method=method)]

    raise CommandLineError(f"Unknown command: {args.command}")


def create_interface(
    use_gui: bool,
    jobs: "queue.Queue[Job]",
    ui_requests: "queue.Queue[UIRequest]",
    settings: Settings,
    show_visited: bool = False,
) -> UserInterface:
    """Create the requested user interface."""
    if use_gui:
        from mazetool.ui.gui import GraphicalInterface

        return GraphicalInterface(jobs, ui_requests, settings)
    return ConsoleInterface(jobs, ui_requests, settings, show_visited=show_visited)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run Mazetool. Returns the process exit status."""
    settings = get_settings()
    setup_logging(settings)

    parser = build_parser()
    logger.info("Parsing command line arguments")
    try:
        args = parser.parse_args(argv)
        if args.command == "help":
            print_usage(parser)
            return 0
        jobs_to_run = build_jobs(args, settings)
    except CommandLineError as e:
        print(f"Invalid parameters: {e}")
        print_usage(parser)
        return 1

    overrides: dict = {}
    if args.save is not None:
        overrides["maze_file"] = args.save
    if args.no_save:
        overrides["save_generated"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    jobs: "queue.Queue[Job]" = queue.Queue()
    ui_requests: "queue.Queue[UIRequest]" = queue.Queue()

    logger.info("Creating control")
    control = MazeControl(jobs, ui_requests, settings=settings)
    control_thread = control.start()

    logger.info("Creating user interface")
    ui = create_interface(args.gui, jobs, ui_requests, settings, args.show_visited)
    for job in jobs_to_run:
        ui.submit(job)
    if not args.gui:
        ui.submit(QuitJob())

    ui.run()

    logger.info("Main (UI) thread waiting for control to finish")
    control_thread.join()
    logger.info("Main thread exiting")
    return 1 if ui.error_count else 0


if __name__ == "__main__":
    sys.exit(main())
