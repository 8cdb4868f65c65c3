"""Terminal-bell cue player for the interactive `run` command."""

import logging

from rich.console import Console

from ..core.cues import CuePlayer, fanfare_tones, short_cue_tones, tones_for_long_cue
from ..core.models import CueContext

logger = logging.getLogger(__name__)


class TerminalCuePlayer(CuePlayer):
    """
    Renders cues as terminal bells.

    A terminal cannot play the configured tones, so each tone becomes one
    bell; the tone list still decides how many bells a cue gets.  Output
    errors (closed terminal, redirected stream) are logged and dropped.
    """

    def __init__(self, console: Console, enabled: bool = True) -> None:
        self.console = console
        self.enabled = enabled

    def _ring(self, count: int) -> None:
        if not self.enabled:
            return
        try:
            for _ in range(count):
                self.console.bell()
        except (OSError, ValueError) as e:
            logger.debug("Bell failed: %s", e)

    def emit_short_cue(self) -> None:
        self._ring(len(short_cue_tones()))

    def emit_long_cue(self, context: CueContext) -> None:
        self._ring(len(tones_for_long_cue(context)))

    def emit_completion_fanfare(self) -> None:
        self._ring(len(fanfare_tones()))
