"""
Data models for workout-timer.

Workout definitions (ExerciseSpec, WorkoutSpec), the flattened steps the
builder produces (WorkStep, RestStep), and the session state and snapshot
types owned by the session state machine.
"""

from dataclasses import dataclass, field
from typing import Literal, Union

from .config import MAX_DIFFICULTY, MIN_DIFFICULTY, PRE_COUNTDOWN_SECONDS

Phase = Literal["idle", "pre_countdown", "in_step", "finished"]
CueContext = Literal["work_end", "rest_end"]
StepKind = Literal["work", "rest"]


@dataclass(frozen=True)
class ExerciseSpec:
    """
    One exercise inside a workout.

    A positive duration_seconds makes the exercise timed; otherwise it is
    repetition-based and rep_count applies (None means "use the default").
    """

    name: str
    description: str
    media_reference: str | None = None
    duration_seconds: int | None = None
    rep_count: int | None = None
    rest_seconds: int = 0  # Rest taken after each repeat of this exercise
    repeat_count: int = 1

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if not self.description.strip():
            raise ValueError("description must be non-empty")
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")
        if self.rep_count is not None and self.rep_count <= 0:
            raise ValueError("rep_count must be positive")
        if self.rest_seconds < 0:
            raise ValueError("rest_seconds must be non-negative")
        if self.repeat_count <= 0:
            raise ValueError("repeat_count must be positive")

    @property
    def is_timed(self) -> bool:
        """True when a positive work duration is declared."""
        return bool(self.duration_seconds and self.duration_seconds > 0)


@dataclass(frozen=True)
class WorkoutSpec:
    """
    A workout: an ordered exercise list, optionally repeated as a whole.

    An empty exercise list is rejected by the validating loader
    (io.serializers), not here, so the engine can still be driven with one.
    """

    id: str
    name: str
    difficulty_level: int
    exercises: tuple[ExerciseSpec, ...] = ()
    repeat_count: int = 1

    def __post_init__(self) -> None:
        """Validate workout data."""
        if not self.id.strip():
            raise ValueError("id must be non-empty")
        if not MIN_DIFFICULTY <= self.difficulty_level <= MAX_DIFFICULTY:
            raise ValueError(
                f"difficulty_level must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
            )
        if self.repeat_count <= 0:
            raise ValueError("repeat_count must be positive")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "exercises", tuple(self.exercises))

    @property
    def has_timed_exercises(self) -> bool:
        return any(ex.is_timed for ex in self.exercises)


@dataclass(frozen=True)
class WorkStep:
    """An exercise interval, either timed or repetition-based."""

    workout_repeat_index: int
    exercise_index: int
    exercise_repeat_index: int
    title: str
    description: str
    media_reference: str | None = None
    is_timed: bool = False
    duration_seconds: int | None = None  # Set iff is_timed
    rep_count: int | None = None  # Set iff not is_timed

    kind: StepKind = field(default="work", init=False)

    def __post_init__(self) -> None:
        """Validate that exactly one of duration/reps is set."""
        if self.is_timed:
            if self.duration_seconds is None or self.duration_seconds <= 0:
                raise ValueError("timed work step needs a positive duration_seconds")
            if self.rep_count is not None:
                raise ValueError("timed work step must not carry rep_count")
        else:
            if self.rep_count is None or self.rep_count <= 0:
                raise ValueError("repetition work step needs a positive rep_count")
            if self.duration_seconds is not None:
                raise ValueError("repetition work step must not carry duration_seconds")

    @property
    def has_countdown(self) -> bool:
        return self.is_timed


@dataclass(frozen=True)
class RestStep:
    """A recovery interval following a work step."""

    workout_repeat_index: int
    exercise_index: int
    exercise_repeat_index: int
    duration_seconds: int

    kind: StepKind = field(default="rest", init=False)

    def __post_init__(self) -> None:
        """Validate rest duration."""
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")

    @property
    def has_countdown(self) -> bool:
        return True


Step = Union[WorkStep, RestStep]


@dataclass(frozen=True)
class Progress:
    """Derived progress fractions, both within [0, 1]."""

    global_fraction: float = 0.0
    step_fraction: float = 0.0


@dataclass
class SessionState:
    """
    Mutable state of one guided session.

    Owned by WorkoutSession; nothing else mutates it.
    """

    workout: WorkoutSpec | None = None
    sequence: list[Step] = field(default_factory=list)
    current_index: int = 0
    phase: Phase = "idle"
    pre_remaining: int = 0
    remaining: int = 0
    paused: bool = False

    def reset(self) -> None:
        """Return to the idle state, discarding the sequence."""
        self.workout = None
        self.sequence = []
        self.current_index = 0
        self.phase = "idle"
        self.pre_remaining = 0
        self.remaining = 0
        self.paused = False

    def load(
        self,
        workout: WorkoutSpec,
        sequence: list[Step],
        pre_countdown_seconds: int = PRE_COUNTDOWN_SECONDS,
    ) -> None:
        """Start a new session in the pre-countdown phase."""
        self.workout = workout
        self.sequence = list(sequence)
        self.current_index = 0
        self.phase = "pre_countdown"
        self.pre_remaining = pre_countdown_seconds
        self.remaining = 0
        self.paused = False

    @property
    def current_step(self) -> Step | None:
        if self.phase not in ("pre_countdown", "in_step"):
            return None
        if 0 <= self.current_index < len(self.sequence):
            return self.sequence[self.current_index]
        return None


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only view of a session for rendering.

    step_number is 1-based (0 when there is no current step).
    """

    phase: Phase
    workout: WorkoutSpec | None
    step: Step | None
    next_step: Step | None
    step_number: int
    total_steps: int
    remaining: int
    pre_remaining: int
    paused: bool
    progress: Progress

    @property
    def can_advance(self) -> bool:
        """True when the user may confirm the current step manually."""
        return (
            self.phase == "in_step"
            and isinstance(self.step, WorkStep)
            and not self.step.is_timed
        )
