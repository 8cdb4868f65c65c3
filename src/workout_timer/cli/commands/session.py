"""Session commands: run (interactive) and simulate (synthetic clock)."""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional

import typer
from rich.live import Live
from rich.table import Table

from ...core.clock import Ticker
from ...core.cues import CuePlayer
from ...core.engine.config_loader import load_settings
from ...core.models import CueContext, Phase, RestStep, WorkStep
from ...core.session import WorkoutSession
from .. import views
from ..app import WorkoutIdArgument, WorkoutsDirOption, app, get_store
from ..sound import TerminalCuePlayer

logger = logging.getLogger(__name__)

QUIT_COMMANDS = ("q", "quit", "stop")
PAUSE_COMMANDS = ("p", "pause", "resume")
SKIP_COMMANDS = ("s", "skip")
NEXT_COMMANDS = ("", "n", "next")


def handle_command(session: WorkoutSession, raw: str) -> bool:
    """
    Apply one line of user input to the session.

    Returns:
        False when the interactive loop should end, True otherwise
    """
    cmd = raw.strip().lower()
    phase = session.phase

    if cmd in QUIT_COMMANDS:
        session.cancel()
        return False
    if phase == "finished":
        session.return_home()
        return False
    if phase == "idle":
        return False

    if cmd in PAUSE_COMMANDS:
        session.toggle_pause()
    elif cmd in SKIP_COMMANDS:
        session.skip_countdown()
    elif cmd in NEXT_COMMANDS:
        # Only repetition steps accept a manual "next"; elsewhere a no-op
        session.advance()
    else:
        logger.debug("Unknown command %r", raw)
    return True


@app.command()
def run(
    workout_id: WorkoutIdArgument,
    workouts_dir: WorkoutsDirOption = None,
    mute: Annotated[
        bool,
        typer.Option("--mute", "-m", help="Disable the countdown bells"),
    ] = False,
    tick_seconds: Annotated[
        Optional[float],
        typer.Option("--tick-seconds", help="Length of one timer second (for demos)", min=0.01),
    ] = None,
) -> None:
    """
    Run a workout interactively.

    Controls (type, then Enter): Enter = next (repetition exercises),
    p = pause/resume, s = skip countdown, q = stop.
    """
    store = get_store(workouts_dir)
    if store.get(workout_id) is None:
        views.print_error(f"Unknown workout '{workout_id}'")
        raise typer.Exit(1)

    settings = load_settings()
    player = TerminalCuePlayer(views.console, enabled=settings.sound and not mute)
    session = WorkoutSession(store.catalog(), player, settings)

    reached: list[Phase] = []
    session.subscribe(lambda _prev, current: reached.append(current))
    session.select_workout(workout_id)

    interval = tick_seconds if tick_seconds is not None else settings.tick_interval_seconds
    try:
        with Live(
            get_renderable=lambda: views.render_session(session.snapshot()),
            console=views.console,
            refresh_per_second=4,
        ), Ticker(session.tick, interval):
            while True:
                try:
                    raw = views.console.input()
                except EOFError:
                    session.cancel()
                    break
                if not handle_command(session, raw):
                    break
    except KeyboardInterrupt:
        session.cancel()
    finally:
        session.dispose()

    if "finished" in reached:
        views.print_success("Workout complete!")
    else:
        views.print_info("Workout stopped.")


class _CueCounter(CuePlayer):
    """Counts cues instead of playing them."""

    def __init__(self) -> None:
        self.short = 0
        self.long: dict[str, int] = {"work_end": 0, "rest_end": 0}
        self.fanfare = 0

    def emit_short_cue(self) -> None:
        self.short += 1

    def emit_long_cue(self, context: CueContext) -> None:
        self.long[context] += 1

    def emit_completion_fanfare(self) -> None:
        self.fanfare += 1


@dataclass
class TranscriptEntry:
    """One line of a simulated session."""

    elapsed: int
    step_number: int
    label: str
    detail: str


def simulate_session(
    session: WorkoutSession,
    workout_id: str,
    reps_seconds: int = 0,
) -> list[TranscriptEntry]:
    """
    Drive a session to completion with synthetic ticks.

    Repetition steps are confirmed after *reps_seconds* ticks.  Returns one
    entry per step start plus the countdown and the finish.
    """
    entries: list[TranscriptEntry] = []
    if not session.select_workout(workout_id):
        return entries

    elapsed = 0
    entries.append(TranscriptEntry(0, 0, "Countdown", f"{session.pre_remaining}s"))
    last_key: tuple[Phase, int] = (session.phase, session.current_index)
    waited = 0

    while session.phase not in ("finished", "idle"):
        snapshot = session.snapshot()
        if snapshot.can_advance and waited >= reps_seconds:
            session.advance()
            waited = 0
        else:
            session.tick()
            elapsed += 1
            if snapshot.can_advance:
                waited += 1

        key = (session.phase, session.current_index)
        if key == last_key:
            continue
        last_key = key
        snapshot = session.snapshot()
        step = snapshot.step
        if snapshot.phase == "finished":
            entries.append(TranscriptEntry(elapsed, 0, "Finished", ""))
        elif isinstance(step, RestStep):
            entries.append(TranscriptEntry(elapsed, snapshot.step_number, "Rest", views.format_clock(step.duration_seconds)))
        elif isinstance(step, WorkStep):
            detail = views.format_clock(step.duration_seconds or 0) if step.is_timed else f"{step.rep_count} reps"
            entries.append(TranscriptEntry(elapsed, snapshot.step_number, step.title, detail))

    return entries


@app.command()
def simulate(
    workout_id: WorkoutIdArgument,
    workouts_dir: WorkoutsDirOption = None,
    reps_seconds: Annotated[
        int,
        typer.Option("--reps-seconds", "-r", help="Seconds assumed per repetition exercise", min=0),
    ] = 0,
) -> None:
    """
    Dry-run a workout with a synthetic clock and print when each step starts.
    """
    store = get_store(workouts_dir)
    if store.get(workout_id) is None:
        views.print_error(f"Unknown workout '{workout_id}'")
        raise typer.Exit(1)

    counter = _CueCounter()
    session = WorkoutSession(store.catalog(), counter, load_settings())
    entries = simulate_session(session, workout_id, reps_seconds)

    table = Table(title=f"Simulated: {store.get(workout_id).name}")
    table.add_column("Time", justify="right", style="cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step")
    table.add_column("Detail", justify="right")
    for e in entries:
        table.add_row(
            views.format_clock(e.elapsed),
            str(e.step_number) if e.step_number else "",
            e.label,
            e.detail,
        )
    views.console.print(table)

    total = entries[-1].elapsed if entries else 0
    views.console.print(f"Total time: [bold]{views.format_clock(total)}[/bold]")
    views.console.print(
        f"Cues: {counter.short} short, {counter.long['work_end']} work-end, "
        f"{counter.long['rest_end']} rest-end, {counter.fanfare} fanfare"
    )
