"""Division as fair sharing.

``dividend`` items are dealt one at a time, round-robin, into ``divisor``
groups. Items that cannot be shared evenly stay behind as the remainder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import (
    ProblemParameters,
    RoundRobinLedger,
    on_beat,
    progressive_reveal,
    require_int,
    require_operands,
)
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, TIMING, Timeline, ms_to_ticks

SHARING_OBJECTS: tuple[str, ...] = ("🍎", "🍪", "🌟", "🎈", "💎", "🧁", "🍬", "🎁", "🌸", "🦋")
MAX_DIVIDEND = 999
MAX_GROUPS = 99


class FairSharingPhase(StrEnum):
    SETUP = "setup"
    DISTRIBUTING = "distributing"
    REMAINDER = "remainder"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class FairSharingTiming:
    start_delay_ms: float = TIMING["start_delay"]
    distribution_interval_ms: float = 500.0
    complete_delay_ms: float = TIMING["complete_delay"]


@dataclass(frozen=True, slots=True)
class FairSharingPayload:
    dividend: int
    divisor: int
    quotient: int
    remainder: int
    emoji: str
    placed: int
    groups: tuple[tuple[int, ...], ...]
    source_items: tuple[int, ...]
    remainder_items: tuple[int, ...]
    current_group: int | None
    show_result: bool


class FairSharingWalkthrough:
    title = "Fair Sharing"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: FairSharingTiming | None = None,
    ) -> None:
        raw = require_operands(params, 2, names=("dividend", "divisor"))
        ops = params.operands
        divisor_raw = raw[1]
        if divisor_raw == 0:
            raise InvalidProblemError(
                "We cannot share among zero groups! You need at least one group to share with.",
                operands=ops,
                reason="zero_divisor",
            )
        dividend = require_int(raw[0], name="dividend", operands=ops, minimum=0)
        divisor = require_int(divisor_raw, name="divisor", operands=ops, minimum=1)
        if dividend > MAX_DIVIDEND or divisor > MAX_GROUPS:
            raise InvalidProblemError(
                f"Sharing works with at most {MAX_DIVIDEND} items and {MAX_GROUPS} groups.",
                operands=ops,
                reason="out_of_range",
            )

        t = timing or FairSharingTiming()
        self._dividend = dividend
        self._divisor = divisor
        self._ledger = RoundRobinLedger(dividend, divisor)
        self._interval = ms_to_ticks(t.distribution_interval_ms, tick_period_ms)
        self._emoji = SHARING_OBJECTS[(dividend + divisor) % len(SHARING_OBJECTS)]

        start = ms_to_ticks(t.start_delay_ms, tick_period_ms)
        distributing = (self._ledger.distributable + 1) * self._interval
        settle = ms_to_ticks(t.complete_delay_ms, tick_period_ms)
        pairs: list[tuple[Enum, int]] = [
            (FairSharingPhase.SETUP, start),
            (FairSharingPhase.DISTRIBUTING, distributing),
        ]
        if self._ledger.remainder > 0:
            pairs.append((FairSharingPhase.REMAINDER, settle))
        pairs.append((FairSharingPhase.COMPLETE, 0))
        self._timeline = Timeline.from_durations(pairs)

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def ledger(self) -> RoundRobinLedger:
        return self._ledger

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> FairSharingPayload:
        ledger = self._ledger
        if phase is FairSharingPhase.DISTRIBUTING:
            ledger.advance_to(progressive_reveal(ledger.distributable, tick - phase_started_at, self._interval))
        elif phase is FairSharingPhase.REMAINDER:
            ledger.mark_remainder()
        elif phase is FairSharingPhase.COMPLETE:
            if ledger.remainder > 0:
                ledger.mark_remainder()
            else:
                ledger.advance_to(ledger.distributable)

        placed = ledger.placed
        current_group = None if placed == 0 else (placed - 1) % self._divisor
        return FairSharingPayload(
            dividend=self._dividend,
            divisor=self._divisor,
            quotient=ledger.quotient,
            remainder=ledger.remainder,
            emoji=self._emoji,
            placed=placed,
            groups=ledger.groups(),
            source_items=ledger.source_items(),
            remainder_items=ledger.remainder_items(),
            current_group=current_group,
            show_result=phase is FairSharingPhase.COMPLETE,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase is FairSharingPhase.COMPLETE:
            return Cue.SUCCESS
        return None

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        if phase is not FairSharingPhase.DISTRIBUTING:
            return None
        if on_beat(tick - phase_started_at, self._interval, count=self._ledger.distributable):
            return Cue.POP
        return None

    def narration(self, phase: Enum) -> str:
        d, n, e = self._dividend, self._divisor, self._emoji
        q, r = self._ledger.quotient, self._ledger.remainder
        if phase is FairSharingPhase.SETUP:
            return f"Let's share {d} {e} equally among {n} groups. How many will each group get?"
        if phase is FairSharingPhase.DISTRIBUTING:
            return f"We give one {e} to each group, then go around again. Watch as we share fairly!"
        if phase is FairSharingPhase.REMAINDER:
            return f"There are not enough {e} left to go around again."
        if r > 0:
            return f"Each group gets {q} {e}. We have {r} left over - that's the remainder!"
        return f"Each group gets {q} {e}. {d} ÷ {n} = {q}!"

    def reset(self) -> None:
        self._ledger.reset()
