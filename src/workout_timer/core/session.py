"""
Session tick state machine.

WorkoutSession owns one SessionState and walks it through

    idle -> pre_countdown -> in_step (one per step) -> finished -> idle

driven by tick() (one call == one elapsed second) and by user commands.
Commands that do not apply to the current state are silent no-ops and
return False; nothing on the tick/command surface raises.

Tick and commands run under one re-entrant lock. Side effects (audio cues,
phase notifications) are collected while the lock is held and dispatched
after it is released, in the order they were produced.
"""

import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

from .config import TimerSettings
from .cues import CuePlayer, NullCuePlayer, dispatch_safely
from .models import (
    CueContext,
    Phase,
    Progress,
    SessionSnapshot,
    SessionState,
    Step,
    WorkoutSpec,
    WorkStep,
)
from .progress import compute_progress
from .sequence import build_steps

logger = logging.getLogger(__name__)

PhaseListener = Callable[[Phase, Phase], None]
_Effect = tuple[Callable[[], None], str]


class WorkoutSession:
    """
    Stateful controller for one guided workout at a time.

    Args:
        catalog: Workouts selectable by id
        cue_player: Audio collaborator (defaults to a silent player)
        settings: Timing tunables (defaults to the built-in constants)
    """

    def __init__(
        self,
        catalog: Mapping[str, WorkoutSpec],
        cue_player: CuePlayer | None = None,
        settings: TimerSettings | None = None,
    ) -> None:
        self._catalog = catalog
        self._cues = cue_player if cue_player is not None else NullCuePlayer()
        self._settings = settings if settings is not None else TimerSettings()
        self._state = SessionState()
        self._lock = threading.RLock()
        self._listeners: list[PhaseListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to idle from any state."""
        with self._mutation() as fx:
            previous = self._state.phase
            self._state.reset()
            self._notify(fx, previous)

    def dispose(self) -> None:
        """Reset and detach all collaborators."""
        self.reset()
        with self._lock:
            self._listeners.clear()
            self._cues = NullCuePlayer()

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """
        Register a phase listener called as listener(previous, current).

        Returns a callable that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_workout(self, workout_id: str) -> bool:
        """Load a workout and start the pre-countdown. Only valid when idle."""
        with self._mutation() as fx:
            if self._state.phase != "idle":
                logger.debug("select_workout(%s) ignored in phase %s", workout_id, self._state.phase)
                return False
            workout = self._catalog.get(workout_id)
            if workout is None:
                logger.info("Unknown workout id %r; staying idle", workout_id)
                return False

            sequence = build_steps(workout, self._settings.default_rep_count)
            previous = self._state.phase
            self._state.load(workout, sequence, self._settings.pre_countdown_seconds)
            logger.debug("Selected %s: %d steps", workout.id, len(sequence))
            self._notify(fx, previous)
            return True

    def cancel(self) -> bool:
        """Abandon the current session and return to idle."""
        with self._mutation() as fx:
            if self._state.phase == "idle":
                return False
            previous = self._state.phase
            self._state.reset()
            logger.debug("Session cancelled from %s", previous)
            self._notify(fx, previous)
            return True

    def return_home(self) -> bool:
        """Leave the finished screen and return to idle."""
        with self._mutation() as fx:
            if self._state.phase != "finished":
                return False
            self._state.reset()
            self._notify(fx, "finished")
            return True

    def advance(self) -> bool:
        """Confirm a repetition-based work step and move on."""
        with self._mutation() as fx:
            step = self._state.current_step
            if self._state.phase != "in_step" or not isinstance(step, WorkStep) or step.is_timed:
                return False
            self._advance(fx)
            return True

    def toggle_pause(self) -> bool:
        """Pause or resume; only while counting down or inside a step."""
        with self._lock:
            if self._state.phase not in ("pre_countdown", "in_step"):
                return False
            self._state.paused = not self._state.paused
            logger.debug("paused=%s", self._state.paused)
            return True

    def skip_countdown(self) -> bool:
        """Shorten the pre-countdown so the next tick starts the first step."""
        with self._lock:
            if self._state.phase != "pre_countdown" or self._state.pre_remaining <= 1:
                return False
            self._state.pre_remaining = 1
            return True

    def tick(self) -> None:
        """Advance time by one second."""
        with self._mutation() as fx:
            state = self._state
            if state.paused or state.phase in ("idle", "finished"):
                return

            if state.phase == "pre_countdown":
                value = state.pre_remaining
                self._countdown_cue(fx, value, "work_end")
                if value <= 1:
                    state.pre_remaining = 0
                    self._enter_current_step(fx)
                else:
                    state.pre_remaining = value - 1
                return

            step = state.current_step
            if step is None:
                self._finish(fx)
                return
            if not step.has_countdown:
                return

            value = state.remaining
            self._countdown_cue(fx, value, "rest_end" if step.kind == "rest" else "work_end")
            if value <= 1:
                state.remaining = 0
                self._advance(fx)
            else:
                state.remaining = value - 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        with self._lock:
            return self._state.phase

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._state.paused

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._state.remaining

    @property
    def pre_remaining(self) -> int:
        with self._lock:
            return self._state.pre_remaining

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._state.current_index

    @property
    def current_step(self) -> Step | None:
        with self._lock:
            return self._state.current_step

    @property
    def sequence(self) -> list[Step]:
        with self._lock:
            return list(self._state.sequence)

    def progress(self) -> Progress:
        with self._lock:
            return self._progress()

    def snapshot(self) -> SessionSnapshot:
        """Consistent read-only view of the session for rendering."""
        with self._lock:
            state = self._state
            step = state.current_step
            next_index = state.current_index + 1
            next_step = (
                state.sequence[next_index]
                if step is not None and next_index < len(state.sequence)
                else None
            )
            return SessionSnapshot(
                phase=state.phase,
                workout=state.workout,
                step=step,
                next_step=next_step,
                step_number=state.current_index + 1 if step is not None else 0,
                total_steps=len(state.sequence),
                remaining=state.remaining,
                pre_remaining=state.pre_remaining,
                paused=state.paused,
                progress=self._progress(),
            )

    # ------------------------------------------------------------------
    # Internal transitions (lock held)
    # ------------------------------------------------------------------

    @contextmanager
    def _mutation(self) -> Iterator[list[_Effect]]:
        effects: list[_Effect] = []
        with self._lock:
            yield effects
        for action, what in effects:
            dispatch_safely(action, what)

    def _progress(self) -> Progress:
        state = self._state
        if state.phase in ("in_step", "finished"):
            return compute_progress(state.sequence, state.current_index, state.remaining)
        return Progress()

    def _countdown_cue(self, fx: list[_Effect], value: int, context: CueContext) -> None:
        cues = self._cues
        if 1 < value <= self._settings.cue_window_seconds:
            fx.append((cues.emit_short_cue, "short cue"))
        elif value == 1:
            fx.append((lambda: cues.emit_long_cue(context), f"long {context} cue"))

    def _enter_current_step(self, fx: list[_Effect]) -> None:
        state = self._state
        if state.current_index >= len(state.sequence):
            self._finish(fx)
            return
        step = state.sequence[state.current_index]
        previous = state.phase
        state.phase = "in_step"
        state.remaining = (step.duration_seconds or 0) if step.has_countdown else 0
        state.paused = False
        logger.debug("Step %d/%d: %s", state.current_index + 1, len(state.sequence), step.kind)
        self._notify(fx, previous)

    def _advance(self, fx: list[_Effect]) -> None:
        state = self._state
        state.current_index = min(state.current_index + 1, len(state.sequence))
        if state.current_index >= len(state.sequence):
            self._finish(fx)
        else:
            self._enter_current_step(fx)

    def _finish(self, fx: list[_Effect]) -> None:
        state = self._state
        previous = state.phase
        state.phase = "finished"
        state.current_index = len(state.sequence)
        state.remaining = 0
        state.paused = False
        fx.append((self._cues.emit_completion_fanfare, "completion fanfare"))
        logger.debug("Workout finished")
        self._notify(fx, previous)

    def _notify(self, fx: list[_Effect], previous: Phase) -> None:
        current = self._state.phase
        if previous == current:
            return
        for listener in list(self._listeners):
            fx.append((lambda fn=listener: fn(previous, current), "phase listener"))
