from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, StrEnum
from typing import Protocol

from .sequencer import PhaseChange

logger = logging.getLogger(__name__)


class Cue(StrEnum):
    POP = "pop"  # counting / placing one item
    DING = "ding"
    WHOOSH = "whoosh"  # transition / movement
    CLICK = "click"
    SUCCESS = "success"
    BORROW = "borrow"
    CARRY = "carry"


class AudioSink(Protocol):
    def play(self, cue: str) -> None: ...


class SilentAudioSink:
    """Audio sink used when sound is muted or unavailable."""

    def play(self, cue: str) -> None:
        return None


class EffectDispatcher:
    """Fires side effects for phase transitions.

    The completion callback is guarded by a completion flag: it runs on the
    first transition into ``complete`` and never again until :meth:`reset`.
    Nothing is dispatched while paused or after :meth:`close`.
    """

    def __init__(
        self,
        *,
        audio: AudioSink,
        cue_for: Callable[[Enum], str | None],
        on_phase_change: Callable[[Enum], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._audio = audio
        self._cue_for = cue_for
        self._on_phase_change = on_phase_change
        self._on_complete = on_complete
        self._completed = False
        self._alive = True

    @property
    def completed(self) -> bool:
        return self._completed

    def phase_changed(self, change: PhaseChange, *, paused: bool = False) -> None:
        if not self._alive or paused:
            return
        if change.reached_terminal and self._completed:
            logger.warning("ignored repeated completion at tick %d", change.at_tick)
            return

        cue = self._cue_for(change.to_phase)
        if cue is not None:
            self._audio.play(str(cue))
        if self._on_phase_change is not None:
            self._on_phase_change(change.to_phase)

        if change.reached_terminal:
            self._completed = True
            logger.info("walkthrough complete at tick %d", change.at_tick)
            if self._on_complete is not None:
                self._on_complete()

    def beat(self, cue: str | None, *, paused: bool = False) -> None:
        if cue is None or not self._alive or paused:
            return
        self._audio.play(str(cue))

    def reset(self) -> None:
        self._completed = False

    def close(self) -> None:
        self._alive = False
