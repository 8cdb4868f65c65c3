"""
Serialization and validation for workout definitions.

Handles conversion between WorkoutSpec/ExerciseSpec and JSON/YAML-compatible
dicts.  Everything that reaches the engine passes through dict_to_workout().

Both snake_case keys and the camelCase keys used by exported workout files
are accepted (e.g. ``resting_seconds`` / ``restingSeconds``).
"""

import json
from typing import Any

import yaml

from ..core.config import MAX_DIFFICULTY, MIN_DIFFICULTY
from ..core.models import ExerciseSpec, RestStep, Step, WorkoutSpec


class ValidationError(Exception):
    """Raised when workout data validation fails."""

    pass


# Canonical key -> accepted aliases (first match wins)
_WORKOUT_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "name": ("name",),
    "difficulty_level": ("difficulty_level", "difficultyLevel", "dificultyLevel"),
    "repeat_count": ("repeat_count", "repeatCount"),
    "exercises": ("exercises",),
}

_EXERCISE_KEYS: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "description": ("description",),
    "media_url": ("media_url", "mediaUrl"),
    "working_seconds": ("working_seconds", "workingSeconds"),
    "resting_seconds": ("resting_seconds", "restingSeconds"),
    "repetitions_count": ("repetitions_count", "repetitionsCount"),
    "repeat_count": ("repeat_count", "repeatCount"),
}


def _lookup(data: dict[str, Any], aliases: tuple[str, ...]) -> Any:
    for key in aliases:
        if key in data:
            return data[key]
    return None


def _is_int(value: Any) -> bool:
    # bool is an int subclass; true/false in a workout file is a mistake
    return isinstance(value, int) and not isinstance(value, bool)


def validate_non_empty_string(value: Any, name: str) -> str:
    """
    Validate a required text field.

    Args:
        value: Raw value
        name: Field name for error message

    Returns:
        The stripped string

    Raises:
        ValidationError: If value is not a non-empty string
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'"{name}" must be a non-empty string')
    return value.strip()


def validate_positive_int(value: Any, name: str) -> int:
    """
    Validate that a value is a positive integer.

    Raises:
        ValidationError: If value is not an integer > 0
    """
    if not _is_int(value) or value <= 0:
        raise ValidationError(f'"{name}" must be a positive integer, got {value!r}')
    return value


def validate_non_negative_int(value: Any, name: str) -> int:
    """
    Validate that a value is an integer >= 0.

    Raises:
        ValidationError: If value is not a non-negative integer
    """
    if not _is_int(value) or value < 0:
        raise ValidationError(f'"{name}" must be an integer >= 0, got {value!r}')
    return value


def validate_difficulty(value: Any) -> int:
    """Validate the 1-5 difficulty level."""
    if not _is_int(value) or not MIN_DIFFICULTY <= value <= MAX_DIFFICULTY:
        raise ValidationError(
            f'"difficulty_level" must be an integer between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}'
        )
    return value


def dict_to_exercise(data: Any, index: int = 0) -> ExerciseSpec:
    """
    Convert dict to ExerciseSpec.

    Args:
        data: Dict representation of one exercise
        index: Zero-based position, used in error messages

    Returns:
        ExerciseSpec instance

    Raises:
        ValidationError: If data is invalid
    """
    label = f"exercise #{index + 1}"
    if not isinstance(data, dict):
        raise ValidationError(f"{label} must be a mapping")

    fields = {key: _lookup(data, aliases) for key, aliases in _EXERCISE_KEYS.items()}

    try:
        name = validate_non_empty_string(fields["name"], "name")
        description = validate_non_empty_string(fields["description"], "description")

        media = fields["media_url"]
        if media is not None:
            media = validate_non_empty_string(media, "media_url")

        working = fields["working_seconds"]
        if working is not None:
            working = validate_positive_int(working, "working_seconds")

        resting = fields["resting_seconds"]
        resting = 0 if resting is None else validate_non_negative_int(resting, "resting_seconds")

        reps = fields["repetitions_count"]
        if reps is not None:
            reps = validate_positive_int(reps, "repetitions_count")

        repeat = fields["repeat_count"]
        repeat = 1 if repeat is None else validate_positive_int(repeat, "repeat_count")
    except ValidationError as e:
        raise ValidationError(f"{label}: {e}") from e

    return ExerciseSpec(
        name=name,
        description=description,
        media_reference=media,
        duration_seconds=working,
        rep_count=reps,
        rest_seconds=resting,
        repeat_count=repeat,
    )


def dict_to_workout(data: Any) -> WorkoutSpec:
    """
    Convert dict to WorkoutSpec, validating every field.

    Args:
        data: Dict representation (parsed JSON or YAML)

    Returns:
        WorkoutSpec instance

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("A workout must be a mapping")

    fields = {key: _lookup(data, aliases) for key, aliases in _WORKOUT_KEYS.items()}

    workout_id = validate_non_empty_string(fields["id"], "id")
    name = validate_non_empty_string(fields["name"], "name")
    difficulty = validate_difficulty(fields["difficulty_level"])

    repeat = fields["repeat_count"]
    repeat = 1 if repeat is None else validate_positive_int(repeat, "repeat_count")

    raw_exercises = fields["exercises"]
    if not isinstance(raw_exercises, list) or not raw_exercises:
        raise ValidationError('"exercises" must be a list with at least one exercise')

    exercises = [dict_to_exercise(ex, i) for i, ex in enumerate(raw_exercises)]

    return WorkoutSpec(
        id=workout_id,
        name=name,
        difficulty_level=difficulty,
        exercises=tuple(exercises),
        repeat_count=repeat,
    )


def exercise_to_dict(exercise: ExerciseSpec) -> dict[str, Any]:
    """
    Convert ExerciseSpec to dict.

    Optional fields are omitted when they hold their default value.
    """
    d: dict[str, Any] = {
        "name": exercise.name,
        "description": exercise.description,
    }
    if exercise.media_reference is not None:
        d["media_url"] = exercise.media_reference
    if exercise.is_timed:
        d["working_seconds"] = exercise.duration_seconds
    if exercise.rep_count is not None:
        d["repetitions_count"] = exercise.rep_count
    if exercise.rest_seconds:
        d["resting_seconds"] = exercise.rest_seconds
    if exercise.repeat_count != 1:
        d["repeat_count"] = exercise.repeat_count
    return d


def workout_to_dict(workout: WorkoutSpec) -> dict[str, Any]:
    """Convert WorkoutSpec to a canonical snake_case dict."""
    d: dict[str, Any] = {
        "id": workout.id,
        "name": workout.name,
        "difficulty_level": workout.difficulty_level,
    }
    if workout.repeat_count != 1:
        d["repeat_count"] = workout.repeat_count
    d["exercises"] = [exercise_to_dict(ex) for ex in workout.exercises]
    return d


def step_to_dict(step: Step) -> dict[str, Any]:
    """Convert a built step to a JSON-compatible dict (used by `show --json`)."""
    d: dict[str, Any] = {
        "kind": step.kind,
        "workout_repeat_index": step.workout_repeat_index,
        "exercise_index": step.exercise_index,
        "exercise_repeat_index": step.exercise_repeat_index,
    }
    if isinstance(step, RestStep):
        d["duration_seconds"] = step.duration_seconds
        return d
    d["title"] = step.title
    d["description"] = step.description
    d["media_reference"] = step.media_reference
    d["is_timed"] = step.is_timed
    if step.is_timed:
        d["duration_seconds"] = step.duration_seconds
    else:
        d["rep_count"] = step.rep_count
    return d


def load_workout_documents(text: str) -> list[Any]:
    """
    Parse JSON or YAML text into a list of raw workout documents.

    A document holding a single mapping yields one entry; a list yields one
    entry per element; ``{"workouts": [...]}`` is also accepted.

    Raises:
        ValidationError: If the text cannot be parsed
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValidationError(f"Not valid JSON or YAML: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("workouts"), list):
        return list(data["workouts"])
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    raise ValidationError("Expected a workout mapping or a list of workouts")


def parse_workout_text(text: str) -> WorkoutSpec:
    """
    Parse and validate a single workout from JSON or YAML text.

    Raises:
        ValidationError: If the text is unparsable, holds more than one
            workout, or the workout is invalid
    """
    documents = load_workout_documents(text)
    if len(documents) != 1:
        raise ValidationError(f"Expected exactly one workout, found {len(documents)}")
    return dict_to_workout(documents[0])
