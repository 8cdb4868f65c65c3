"""
CLI view formatters using Rich for pretty console output.

Handles the workout tables, the step sequence table and the live session
frame.  Everything here reads models/snapshots and never mutates state.
"""

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from ..core.config import DEFAULT_REP_COUNT, MAX_DIFFICULTY
from ..core.models import RestStep, SessionSnapshot, Step, WorkoutSpec, WorkStep
from ..core.sequence import build_steps, total_timed_seconds

console = Console()

BAR_WIDTH = 40


def format_clock(total: int) -> str:
    """Render seconds as MM:SS (minutes are not wrapped at 60)."""
    total = max(0, int(total))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"


def difficulty_dots(level: int) -> str:
    """Five-dot difficulty gauge, e.g. ●●●○○ for level 3."""
    level = max(0, min(level, MAX_DIFFICULTY))
    return "●" * level + "○" * (MAX_DIFFICULTY - level)


def _fmt_target(step: Step) -> str:
    if isinstance(step, RestStep):
        return "rest"
    if step.is_timed:
        return "time"
    return f"{step.rep_count} reps"


def _fmt_duration(step: Step) -> str:
    if step.has_countdown:
        return format_clock(step.duration_seconds or 0)
    return "—"


def _fmt_estimate(steps: list[Step]) -> str:
    timed = format_clock(total_timed_seconds(steps))
    has_reps = any(isinstance(s, WorkStep) and not s.is_timed for s in steps)
    return f"{timed} + reps" if has_reps else timed


def format_workouts_table(
    workouts: list[WorkoutSpec],
    user_ids: set[str] | None = None,
    default_rep_count: int = DEFAULT_REP_COUNT,
) -> Table:
    """
    Build the workout list table.

    Args:
        workouts: Workouts to list
        user_ids: Ids loaded from the user directory (marked with *)
        default_rep_count: Reps for exercises that declare none

    Returns:
        Rich Table
    """
    user_ids = user_ids or set()
    table = Table(title="Workouts")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Level", style="yellow")
    table.add_column("Exercises", justify="right")
    table.add_column("Type")
    table.add_column("Steps", justify="right")
    table.add_column("Time", justify="right")

    for w in workouts:
        steps = build_steps(w, default_rep_count)
        name = f"{w.name} *" if w.id in user_ids else w.name
        rounds = f" ×{w.repeat_count}" if w.repeat_count > 1 else ""
        table.add_row(
            w.id,
            name,
            difficulty_dots(w.difficulty_level),
            f"{len(w.exercises)}{rounds}",
            "timed" if w.has_timed_exercises else "reps only",
            str(len(steps)),
            _fmt_estimate(steps),
        )
    return table


def format_sequence_table(workout: WorkoutSpec, steps: list[Step]) -> Table:
    """Build the table of built steps for `show`."""
    table = Table(title=f"{workout.name}: {len(steps)} steps")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Round", justify="right")
    table.add_column("Exercise")
    table.add_column("Set", justify="right")
    table.add_column("Target")
    table.add_column("Duration", justify="right")

    for i, step in enumerate(steps, 1):
        if isinstance(step, RestStep):
            name = "[green]Rest[/green]"
        else:
            name = step.title
        table.add_row(
            str(i),
            str(step.workout_repeat_index + 1),
            name,
            str(step.exercise_repeat_index + 1),
            _fmt_target(step),
            _fmt_duration(step),
        )
    return table


def print_workouts(
    workouts: list[WorkoutSpec],
    user_ids: set[str] | None = None,
    default_rep_count: int = DEFAULT_REP_COUNT,
) -> None:
    console.print(format_workouts_table(workouts, user_ids, default_rep_count))


def print_sequence(workout: WorkoutSpec, steps: list[Step]) -> None:
    """Print the step table followed by totals."""
    console.print(format_sequence_table(workout, steps))
    console.print(f"Estimated time: [bold]{_fmt_estimate(steps)}[/bold]")


# =============================================================================
# LIVE SESSION FRAME
# =============================================================================

KEY_HELP = "[dim]Enter[/dim] next  [dim]p[/dim] pause  [dim]s[/dim] skip countdown  [dim]q[/dim] stop"


def _bar(fraction: float, style: str = "bar.complete") -> ProgressBar:
    return ProgressBar(total=1.0, completed=fraction, width=BAR_WIDTH, complete_style=style)


def _step_body(snapshot: SessionSnapshot) -> list[RenderableType]:
    step = snapshot.step
    parts: list[RenderableType] = []

    if isinstance(step, RestStep):
        parts.append(Text("Rest", style="bold green"))
        upcoming = snapshot.next_step
        title = upcoming.title if isinstance(upcoming, WorkStep) else "—"
        parts.append(Text(f"Next: {title}", style="dim"))
        parts.append(Text(format_clock(snapshot.remaining), style="bold"))
        parts.append(_bar(snapshot.progress.step_fraction, "green"))
        return parts

    if isinstance(step, WorkStep):
        parts.append(Text(step.title, style="bold blue"))
        parts.append(Text(step.description, style="dim"))
        if step.media_reference:
            parts.append(Text(step.media_reference, style="dim underline"))
        if step.is_timed:
            parts.append(Text(format_clock(snapshot.remaining), style="bold"))
            parts.append(_bar(snapshot.progress.step_fraction, "blue"))
        else:
            parts.append(Text(f"Reps: {step.rep_count}", style="bold"))
            parts.append(Text("Press Enter when you are done.", style="italic"))
    return parts


def render_session(snapshot: SessionSnapshot) -> RenderableType:
    """Render one frame of the running session."""
    name = snapshot.workout.name if snapshot.workout else "Workout"

    if snapshot.phase == "idle":
        return Panel(Text("No workout selected."), title=name)

    if snapshot.phase == "finished":
        body = Group(
            Text("Workout complete!", style="bold magenta"),
            Text(f"Good work on {name}."),
            Text(""),
            Text("Press Enter to return to the list.", style="dim"),
        )
        return Panel(body, title=name, border_style="magenta")

    header = f"{name} • #{snapshot.step_number}/{snapshot.total_steps}"
    if snapshot.paused:
        header += "  [bold yellow]PAUSED[/bold yellow]"

    parts: list[RenderableType] = [_bar(snapshot.progress.global_fraction), Text("")]
    if snapshot.phase == "pre_countdown":
        parts.append(Text(f"Starting in {snapshot.pre_remaining}s…", style="bold"))
        if isinstance(snapshot.step, WorkStep):
            parts.append(Text(f"First up: {snapshot.step.title}", style="dim"))
    else:
        parts.extend(_step_body(snapshot))

    parts.extend([Text(""), Text.from_markup(KEY_HELP)])
    border = "green" if isinstance(snapshot.step, RestStep) and snapshot.phase == "in_step" else "blue"
    return Panel(Group(*parts), title=header, border_style=border)


# =============================================================================
# MESSAGES
# =============================================================================


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
