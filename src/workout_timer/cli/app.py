"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.workout_store import WorkoutStore

# Shared --workouts-dir option type used across all commands
WorkoutsDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--workouts-dir",
        "-d",
        help="Directory with user workout files (default: ~/.workout-timer/workouts)",
    ),
]

WorkoutIdArgument = Annotated[str, typer.Argument(help="Workout ID (see 'list')")]

app = typer.Typer(
    name="workout-timer",
    help="Guided interval workout timer: countdowns, rests, reps and audio cues.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(workouts_dir: Path | None) -> WorkoutStore:
    """Get workout store for the given user directory or the default location."""
    return WorkoutStore(workouts_dir)
