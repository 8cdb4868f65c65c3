"""
Progress fractions for the active session.

Pure functions recomputed on demand from session state; nothing here is
cached.
"""

from .models import Progress, Step


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def step_fraction(step: Step | None, remaining: int) -> float:
    """
    Fraction of the current step already elapsed.

    Countdown steps (timed work and rest) report (D - remaining) / D.
    Repetition-based work has no time base and always reports 0.
    """
    if step is None or not step.has_countdown:
        return 0.0
    total = step.duration_seconds or 0
    if total <= 0:
        return 0.0
    return _clamp((total - remaining) / total)


def compute_progress(
    sequence: list[Step],
    current_index: int,
    remaining: int,
) -> Progress:
    """
    Compute global and per-step progress.

    Args:
        sequence: Built step sequence
        current_index: Index of the current step (len(sequence) when finished)
        remaining: Seconds left in the current step

    Returns:
        Progress with both fractions clamped to [0, 1]
    """
    total = len(sequence)
    if total == 0:
        return Progress(global_fraction=0.0, step_fraction=0.0)

    step = sequence[current_index] if 0 <= current_index < total else None
    fraction = step_fraction(step, remaining)
    index = max(0, min(current_index, total))
    return Progress(
        global_fraction=_clamp((index + fraction) / total),
        step_fraction=fraction,
    )
