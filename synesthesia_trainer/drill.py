from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from .mastery import MasteryTable, new_mastery_table, ranked, record_practice, select_next
from .stimulus import LETTERS, Stimulus, color_of, stimulus_for
from .tone import TONE_DURATION_MS

logger = logging.getLogger(__name__)


class RenderSink(Protocol):
    def render(self, letter: str, color_hex: str) -> None:
        """Show ``letter`` on a ``color_hex`` background."""


class ToneSink(Protocol):
    def play_tone(
        self,
        *,
        frequency_hz: float,
        volume_gain: float,
        azimuth_rad: float,
        duration_ms: int,
    ) -> None:
        """Sound a short spatialized tone; the sink owns stopping it."""


@dataclass(slots=True)
class SessionState:
    current_letter: str = "a"
    mastery: MasteryTable = field(default_factory=new_mastery_table)


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    letter: str
    color_hex: str
    score: int
    total_practiced: int
    weakest: tuple[str, ...]
    plays: int


class LetterDrill:
    """Event dispatcher for one drill session.

    Owns the SessionState. ``on_play_requested`` leaves it untouched and sends
    the current letter's tone to the tone sink; ``on_advance_requested`` credits
    the current letter and moves to the least-practised one. Sink failures are
    logged and never change session state.
    """

    def __init__(
        self,
        *,
        tone_sink: ToneSink | None = None,
        render_sink: RenderSink | None = None,
        state: SessionState | None = None,
        weakest_count: int = 3,
    ) -> None:
        if weakest_count < 0:
            raise ValueError("weakest_count must be >= 0")
        self._tone_sink = tone_sink
        self._render_sink = render_sink
        self._state = SessionState() if state is None else state
        if self._state.current_letter not in LETTERS:
            raise ValueError(f"current_letter must be a-z, got {self._state.current_letter!r}")
        self._weakest_count = int(weakest_count)
        self._plays = 0
        self._emit_render()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_letter(self) -> str:
        return self._state.current_letter

    @property
    def mastery(self) -> MasteryTable:
        return self._state.mastery

    def current_stimulus(self) -> Stimulus:
        return stimulus_for(self._state.current_letter)

    def on_play_requested(self) -> Stimulus:
        stim = self.current_stimulus()
        self._plays += 1
        if self._tone_sink is None:
            return stim
        try:
            self._tone_sink.play_tone(
                frequency_hz=stim.frequency_hz,
                volume_gain=stim.volume_gain,
                azimuth_rad=stim.azimuth_rad,
                duration_ms=TONE_DURATION_MS,
            )
        except Exception:
            logger.warning("tone sink failed for letter %r", stim.letter, exc_info=True)
        return stim

    def on_advance_requested(self) -> str:
        mastery = record_practice(self._state.mastery, self._state.current_letter)
        next_letter = select_next(mastery)
        self._state.mastery = mastery
        self._state.current_letter = next_letter
        logger.debug("advanced to %r (score %d)", next_letter, mastery[next_letter])
        self._emit_render()
        return next_letter

    def snapshot(self) -> DrillSnapshot:
        stim = self.current_stimulus()
        order = ranked(self._state.mastery)
        return DrillSnapshot(
            letter=stim.letter,
            color_hex=stim.color_hex,
            score=self._state.mastery.score(stim.letter),
            total_practiced=self._state.mastery.total(),
            weakest=tuple(letter for letter, _ in order[: self._weakest_count]),
            plays=self._plays,
        )

    def _emit_render(self) -> None:
        if self._render_sink is None:
            return
        letter = self._state.current_letter
        try:
            self._render_sink.render(letter, color_of(letter))
        except Exception:
            logger.warning("render sink failed for letter %r", letter, exc_info=True)
