"""
Step sequence builder.

Expands a WorkoutSpec (workout repeats x exercises x exercise repeats) into
the flat, ordered list of steps a session walks through.

Rest rules:
- an exercise with rest_seconds == 0 never produces a rest step;
- the rest that would follow the very last work step of the session is
  always dropped, whatever its configured duration.
"""

from .config import DEFAULT_REP_COUNT
from .models import ExerciseSpec, RestStep, Step, WorkoutSpec, WorkStep


def _work_step(
    exercise: ExerciseSpec,
    workout_repeat: int,
    exercise_index: int,
    exercise_repeat: int,
    default_rep_count: int,
) -> WorkStep:
    if exercise.is_timed:
        return WorkStep(
            workout_repeat_index=workout_repeat,
            exercise_index=exercise_index,
            exercise_repeat_index=exercise_repeat,
            title=exercise.name,
            description=exercise.description,
            media_reference=exercise.media_reference,
            is_timed=True,
            duration_seconds=exercise.duration_seconds,
        )
    rep_count = exercise.rep_count if exercise.rep_count is not None else default_rep_count
    return WorkStep(
        workout_repeat_index=workout_repeat,
        exercise_index=exercise_index,
        exercise_repeat_index=exercise_repeat,
        title=exercise.name,
        description=exercise.description,
        media_reference=exercise.media_reference,
        is_timed=False,
        rep_count=rep_count,
    )


def build_steps(
    workout: WorkoutSpec,
    default_rep_count: int = DEFAULT_REP_COUNT,
) -> list[Step]:
    """
    Build the ordered step sequence for a workout.

    Args:
        workout: Validated workout definition
        default_rep_count: Reps for exercises that declare neither a
            duration nor a rep count

    Returns:
        List of WorkStep / RestStep in execution order
    """
    steps: list[Step] = []
    last_exercise = len(workout.exercises) - 1

    for workout_repeat in range(workout.repeat_count):
        last_round = workout_repeat == workout.repeat_count - 1
        for exercise_index, exercise in enumerate(workout.exercises):
            for exercise_repeat in range(exercise.repeat_count):
                steps.append(
                    _work_step(
                        exercise,
                        workout_repeat,
                        exercise_index,
                        exercise_repeat,
                        default_rep_count,
                    )
                )

                is_last_overall = (
                    last_round
                    and exercise_index == last_exercise
                    and exercise_repeat == exercise.repeat_count - 1
                )
                if not is_last_overall and exercise.rest_seconds > 0:
                    steps.append(
                        RestStep(
                            workout_repeat_index=workout_repeat,
                            exercise_index=exercise_index,
                            exercise_repeat_index=exercise_repeat,
                            duration_seconds=exercise.rest_seconds,
                        )
                    )

    return steps


def expected_step_count(workout: WorkoutSpec) -> int:
    """
    Number of steps build_steps() produces, computed arithmetically.

    Counts one work step per exercise repeat plus one rest step where the
    exercise has rest, minus the terminal rest when the final exercise has
    one.
    """
    if not workout.exercises:
        return 0
    per_round = sum(
        ex.repeat_count * (2 if ex.rest_seconds > 0 else 1)
        for ex in workout.exercises
    )
    terminal_rest = 1 if workout.exercises[-1].rest_seconds > 0 else 0
    return workout.repeat_count * per_round - terminal_rest


def total_timed_seconds(steps: list[Step]) -> int:
    """Sum of all countdown durations (repetition steps contribute 0)."""
    return sum(
        step.duration_seconds or 0
        for step in steps
        if step.has_countdown
    )
