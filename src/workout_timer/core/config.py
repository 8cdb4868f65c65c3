"""
Configuration constants for the workout timer.

All adjustable parameters are centralized here. Users can override the
tunables in ~/.workout-timer/settings.yaml (see engine/config_loader.py).
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# SESSION TIMING
# =============================================================================

PRE_COUNTDOWN_SECONDS: Final[int] = 5  # Lead-in before the first step
TICK_INTERVAL_SECONDS: Final[float] = 1.0  # One tick == one elapsed second
CUE_WINDOW_SECONDS: Final[int] = 5  # Short cues fire while 1 < remaining <= window

# =============================================================================
# WORKOUT DEFAULTS
# =============================================================================

DEFAULT_REP_COUNT: Final[int] = 10  # Reps for an exercise declaring neither time nor reps
DEFAULT_REPEAT_COUNT: Final[int] = 1
DEFAULT_REST_SECONDS: Final[int] = 0
MIN_DIFFICULTY: Final[int] = 1
MAX_DIFFICULTY: Final[int] = 5

# =============================================================================
# AUDIO CUES (frequency Hz, duration ms)
# =============================================================================

SHORT_CUE_TONE: Final[tuple[int, int]] = (1000, 120)
WORK_END_TONE: Final[tuple[int, int]] = (700, 500)
REST_END_TONE: Final[tuple[int, int]] = (880, 500)
FANFARE_TONES: Final[tuple[tuple[int, int], ...]] = (
    (523, 150),
    (659, 150),
    (784, 150),
    (1047, 400),
)

# =============================================================================
# STORAGE
# =============================================================================

USER_DIR_NAME: Final[str] = ".workout-timer"
USER_WORKOUTS_SUBDIR: Final[str] = "workouts"
SETTINGS_FILE_NAME: Final[str] = "settings.yaml"


@dataclass(frozen=True)
class TimerSettings:
    """Tunables resolved from defaults plus the user's settings file."""

    pre_countdown_seconds: int = PRE_COUNTDOWN_SECONDS
    default_rep_count: int = DEFAULT_REP_COUNT
    cue_window_seconds: int = CUE_WINDOW_SECONDS
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS
    sound: bool = True
