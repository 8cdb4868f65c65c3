"""
Audio cue interface.

The session state machine calls a CuePlayer on tick boundaries. Players are
fire-and-forget: they must return quickly, and any failure stays inside the
player (see dispatch_safely).
"""

import logging
from collections.abc import Callable

from .config import FANFARE_TONES, REST_END_TONE, SHORT_CUE_TONE, WORK_END_TONE
from .models import CueContext

logger = logging.getLogger(__name__)

Tone = tuple[int, int]  # (frequency Hz, duration ms)


class CuePlayer:
    """
    Base cue player. Every method is a silent no-op.

    Subclasses override the methods they can actually render.
    """

    def emit_short_cue(self) -> None:
        """One countdown pip."""

    def emit_long_cue(self, context: CueContext) -> None:
        """Final-second cue; the tone depends on what is ending."""

    def emit_completion_fanfare(self) -> None:
        """Multi-tone sequence played when the workout finishes."""


class NullCuePlayer(CuePlayer):
    """Player used when sound is disabled."""


def tones_for_long_cue(context: CueContext) -> tuple[Tone, ...]:
    """Tone sequence for a long cue in the given context."""
    if context == "rest_end":
        return (REST_END_TONE,)
    return (WORK_END_TONE,)


def short_cue_tones() -> tuple[Tone, ...]:
    return (SHORT_CUE_TONE,)


def fanfare_tones() -> tuple[Tone, ...]:
    return FANFARE_TONES


def dispatch_safely(action: Callable[[], None], what: str) -> None:
    """
    Run a collaborator callback, logging instead of raising on failure.

    Used for cue players and phase listeners so the session timing is never
    affected by a broken collaborator.
    """
    try:
        action()
    except Exception:
        logger.warning("%s failed; continuing session", what, exc_info=True)
