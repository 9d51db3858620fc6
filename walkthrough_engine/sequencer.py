from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .timeline import Timeline, is_terminal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PhaseChange:
    from_phase: Enum
    to_phase: Enum
    at_tick: int

    @property
    def reached_terminal(self) -> bool:
        return is_terminal(self.to_phase)


class PhaseSequencer:
    """Finite state machine over a timeline's ordered phases.

    - Starts in the timeline's first phase.
    - Advances at most one phase per evaluated tick, never backwards.
    - Stops in ``complete``; only :meth:`reset` leaves it.
    """

    def __init__(self, timeline: Timeline) -> None:
        self._timeline = timeline
        self._index = 0
        self._entered_at = 0
        self._last_tick = 0

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def phase(self) -> Enum:
        return self._timeline.spec_at(self._index).phase

    @property
    def index(self) -> int:
        return self._index

    @property
    def entered_at(self) -> int:
        """Tick at which the current phase became active."""
        return self._entered_at

    @property
    def finished(self) -> bool:
        return is_terminal(self.phase)

    def evaluate(self, tick: int) -> PhaseChange | None:
        if tick < self._last_tick:
            raise ValueError(f"tick went backwards ({tick} < {self._last_tick})")
        self._last_tick = tick

        if self.finished:
            return None

        nxt = self._timeline.spec_at(self._index + 1)
        if tick < nxt.at_tick:
            return None
        if nxt.guard is not None and not nxt.guard():
            return None

        prev = self.phase
        self._index += 1
        self._entered_at = tick
        change = PhaseChange(from_phase=prev, to_phase=nxt.phase, at_tick=tick)
        logger.debug("phase %s -> %s at tick %d", prev.value, nxt.phase.value, tick)
        return change

    def reset(self) -> None:
        self._index = 0
        self._entered_at = 0
        self._last_tick = 0
