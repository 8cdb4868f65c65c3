"""Workout library commands: list, show, validate, import, delete."""

import json
from pathlib import Path
from typing import Annotated

import typer

from ...core.engine.config_loader import load_settings
from ...core.sequence import build_steps, total_timed_seconds
from ...io.serializers import ValidationError, parse_workout_text, step_to_dict
from .. import views
from ..app import WorkoutIdArgument, WorkoutsDirOption, app, get_store

FileArgument = Annotated[
    Path,
    typer.Argument(help="Workout file (JSON or YAML)", exists=True, dir_okay=False, readable=True),
]


def _read_workout_file(path: Path):
    """Parse and validate a workout file, exiting with a message on failure."""
    try:
        return parse_workout_text(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        views.print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(f"Invalid workout in {path.name}: {e}")
        raise typer.Exit(1)


@app.command("list")
def list_workouts(
    workouts_dir: WorkoutsDirOption = None,
) -> None:
    """
    List available workouts.

    User workouts are marked with *.
    """
    store = get_store(workouts_dir)
    workouts = store.list_workouts()

    for message in store.load_errors():
        views.print_warning(f"Skipped {message}")

    if not workouts:
        views.print_info("No workouts found. Use 'import' to add one.")
        return

    user_ids = {w.id for w in workouts if store.is_user_workout(w.id)}
    views.print_workouts(workouts, user_ids, load_settings().default_rep_count)


@app.command()
def show(
    workout_id: WorkoutIdArgument,
    workouts_dir: WorkoutsDirOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output the step sequence as JSON"),
    ] = False,
) -> None:
    """
    Show the step sequence a workout expands to.

    Rests with 0 seconds and the final rest of the workout are never
    scheduled, so they do not appear here.
    """
    store = get_store(workouts_dir)
    workout = store.get(workout_id)
    if workout is None:
        views.print_error(f"Unknown workout '{workout_id}'")
        raise typer.Exit(1)

    steps = build_steps(workout, load_settings().default_rep_count)

    if json_out:
        print(json.dumps({
            "id": workout.id,
            "name": workout.name,
            "total_steps": len(steps),
            "timed_seconds": total_timed_seconds(steps),
            "steps": [step_to_dict(s) for s in steps],
        }, indent=2))
        return

    views.print_sequence(workout, steps)


@app.command()
def validate(
    path: FileArgument,
) -> None:
    """Check a workout file without importing it."""
    workout = _read_workout_file(path)
    steps = build_steps(workout, load_settings().default_rep_count)
    views.print_success(
        f"{path.name} is valid: '{workout.name}' ({workout.id}), "
        f"{len(workout.exercises)} exercises, {len(steps)} steps"
    )


@app.command("import")
def import_workout(
    path: FileArgument,
    workouts_dir: WorkoutsDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing workout with the same ID"),
    ] = False,
) -> None:
    """Validate a workout file and add it to your library."""
    workout = _read_workout_file(path)
    store = get_store(workouts_dir)

    if store.get(workout.id) is not None and not force:
        if not views.confirm_action(f"Workout '{workout.id}' already exists. Replace it?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    try:
        saved = store.save(workout)
    except OSError as e:
        views.print_error(f"Cannot save workout: {e}")
        raise typer.Exit(1)

    views.print_success(f"Imported '{workout.name}' as {workout.id} ({saved})")


@app.command()
def delete(
    workout_id: WorkoutIdArgument,
    workouts_dir: WorkoutsDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Delete without confirmation"),
    ] = False,
) -> None:
    """Delete a workout you imported."""
    store = get_store(workouts_dir)
    workout = store.get(workout_id)
    if workout is None:
        views.print_error(f"Unknown workout '{workout_id}'")
        raise typer.Exit(1)

    if not force and not views.confirm_action(f"Delete '{workout.name}' ({workout.id})?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete(workout_id)
    except KeyError as e:
        views.print_error(e.args[0])
        raise typer.Exit(1)
    except OSError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted workout {workout_id}")
