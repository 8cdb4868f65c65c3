"""
CLI entry point using Typer.

Provides commands for guided workouts:
- list: Show available workouts
- show: Show the step sequence of a workout
- run: Run a workout interactively with countdowns and cues
- simulate: Dry-run a workout on a synthetic clock
- validate / import / delete: Manage workout files
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import views
from .app import app
from .commands import session as session_commands
from .commands import workouts as workout_commands


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _prompt_workout_id() -> str | None:
    raw = views.console.input("Workout ID (Enter to cancel): ").strip()
    return raw or None


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Guided workout timer. Run without a command for interactive mode.
    """
    _configure_logging(verbose)

    if ctx.invoked_subcommand is not None:
        return  # sub-command handles it

    # ── Interactive main menu ───────────────────────────────────────────────
    views.console.print()
    views.console.print("[bold cyan]workout-timer[/bold cyan]: guided interval workouts")
    views.console.print()

    menu = {
        "1": ("list",     "List workouts"),
        "2": ("run",      "Start a workout"),
        "3": ("show",     "Show a workout's steps"),
        "4": ("simulate", "Dry-run a workout"),
        "0": ("quit",     "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = menu.get(choice, (None, ""))[0]
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "list":
        ctx.invoke(workout_commands.list_workouts)
        return

    workout_id = _prompt_workout_id()
    if workout_id is None:
        views.print_info("Cancelled.")
        return

    if chosen == "run":
        ctx.invoke(session_commands.run, workout_id=workout_id)
    elif chosen == "show":
        ctx.invoke(workout_commands.show, workout_id=workout_id)
    elif chosen == "simulate":
        ctx.invoke(session_commands.simulate, workout_id=workout_id)


if __name__ == "__main__":
    app()
