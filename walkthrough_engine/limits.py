"""Limits: approaching a removable hole from the left and/or the right.

The function shown is ``f(x) = x + (L - a)`` with a hole at ``x = a``. The
approach point ramps toward ``a`` but always stays at least ``min_gap`` away,
so ``f`` is never evaluated at the hole.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, convergence_ramp, format_number, require_choice, require_operands
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, Timeline, ms_to_ticks

SIDES: tuple[str, ...] = ("both", "left", "right")


class LimitPhase(StrEnum):
    SETUP = "setup"
    EXPLAIN_NOTATION = "explain_notation"
    IDENTIFY_HOLE = "identify_hole"
    LEFT_EXPLAIN = "left_explain"
    LEFT_APPROACH = "left_approach"
    LEFT_VALUE = "left_value"
    RIGHT_EXPLAIN = "right_explain"
    RIGHT_APPROACH = "right_approach"
    RIGHT_VALUE = "right_value"
    CONVERGE = "converge"
    COMPLETE = "complete"


_LEFT = (LimitPhase.LEFT_EXPLAIN, LimitPhase.LEFT_APPROACH, LimitPhase.LEFT_VALUE)
_RIGHT = (LimitPhase.RIGHT_EXPLAIN, LimitPhase.RIGHT_APPROACH, LimitPhase.RIGHT_VALUE)


@dataclass(frozen=True, slots=True)
class LimitTiming:
    phase_ms: float = 2000.0
    converge_ms: float = 4000.0
    # The ramp finishes this long before the approach phase ends.
    settle_ms: float = 500.0
    start_distance: float = 2.0
    min_gap: float = 0.1


@dataclass(frozen=True, slots=True)
class LimitPayload:
    a: float
    limit: float
    side: str
    approach_from: str | None
    approach_x: float
    approach_y: float
    left_limit: float | None
    right_limit: float | None
    show_result: bool


def limit_phases(side: str) -> tuple[LimitPhase, ...]:
    phases = [LimitPhase.SETUP, LimitPhase.EXPLAIN_NOTATION, LimitPhase.IDENTIFY_HOLE]
    if side in ("both", "left"):
        phases.extend(_LEFT)
    if side in ("both", "right"):
        phases.extend(_RIGHT)
    if side == "both":
        phases.append(LimitPhase.CONVERGE)
    phases.append(LimitPhase.COMPLETE)
    return tuple(phases)


class LimitWalkthrough:
    title = "Limits"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: LimitTiming | None = None,
    ) -> None:
        raw = require_operands(params, 2, names=("a", "L"))
        self._side = require_choice(params, "side", "both", SIDES)
        self._a = float(raw[0])
        self._limit = float(raw[1])

        t = timing or LimitTiming()
        self._start_distance = t.start_distance
        self._min_gap = t.min_gap
        a, d, gap = self._a, t.start_distance, t.min_gap
        # Magnitudes where a +/- gap rounds back onto a leave no room to approach the hole.
        if not (a - d <= a - gap < a < a + gap <= a + d):
            raise InvalidProblemError(
                f"x = {format_number(a)} is too large to show an approach that stays off the hole.",
                operands=params.operands,
                reason="out_of_range",
            )
        step = ms_to_ticks(t.phase_ms, tick_period_ms)
        converge = ms_to_ticks(t.converge_ms, tick_period_ms)
        # at least one tick, even on coarse periods
        self._ramp_ticks = max(1, step - ms_to_ticks(t.settle_ms, tick_period_ms))

        phases = limit_phases(self._side)
        pairs: list[tuple[Enum, int]] = []
        for phase in phases:
            pairs.append((phase, converge if phase is LimitPhase.CONVERGE else step))
        self._phases = phases
        self._timeline = Timeline.from_durations(pairs)

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def side(self) -> str:
        return self._side

    def f(self, x: float) -> float:
        return x + (self._limit - self._a)

    def _approach(self, phase: Enum, elapsed: int) -> tuple[str | None, float]:
        a, d, gap = self._a, self._start_distance, self._min_gap
        if phase is LimitPhase.LEFT_APPROACH:
            return "left", convergence_ramp(
                a - d, a, elapsed_ticks=elapsed, duration_ticks=self._ramp_ticks, min_gap=gap
            )
        if phase is LimitPhase.RIGHT_APPROACH:
            return "right", convergence_ramp(
                a + d, a, elapsed_ticks=elapsed, duration_ticks=self._ramp_ticks, min_gap=gap
            )

        index = self._phases.index(phase)
        left_done = LimitPhase.LEFT_VALUE in self._phases[: index + 1]
        right_done = LimitPhase.RIGHT_VALUE in self._phases[: index + 1]
        if right_done:
            return "right", a + gap
        if left_done:
            return "left", a - gap
        if self._side == "right":
            return "right", a + d
        return "left", a - d

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> LimitPayload:
        side, x = self._approach(phase, tick - phase_started_at)
        index = self._phases.index(phase)
        seen = self._phases[: index + 1]
        return LimitPayload(
            a=self._a,
            limit=self._limit,
            side=self._side,
            approach_from=side,
            approach_x=x,
            approach_y=self.f(x),
            left_limit=self._limit if LimitPhase.LEFT_VALUE in seen else None,
            right_limit=self._limit if LimitPhase.RIGHT_VALUE in seen else None,
            show_result=phase is LimitPhase.COMPLETE,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase is LimitPhase.COMPLETE:
            return Cue.SUCCESS
        if phase in (LimitPhase.LEFT_APPROACH, LimitPhase.RIGHT_APPROACH):
            return Cue.WHOOSH
        return Cue.POP

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        return None

    def narration(self, phase: Enum) -> str:
        a, L = format_number(self._a), format_number(self._limit)
        scripts = {
            LimitPhase.SETUP: f"What happens to f(x) as x gets closer and closer to {a}?",
            LimitPhase.EXPLAIN_NOTATION: f"lim x→{a} f(x) asks which value f(x) approaches, not f({a}) itself.",
            LimitPhase.IDENTIFY_HOLE: f"f is undefined at x = {a}: there is a hole in the graph.",
            LimitPhase.LEFT_EXPLAIN: f"First we approach {a} from the left, with x a little less than {a}.",
            LimitPhase.LEFT_APPROACH: "Watch f(x) as x creeps closer from the left...",
            LimitPhase.LEFT_VALUE: f"From the left, f(x) approaches {L}.",
            LimitPhase.RIGHT_EXPLAIN: f"Now we approach {a} from the right, with x a little more than {a}.",
            LimitPhase.RIGHT_APPROACH: "Watch f(x) as x creeps closer from the right...",
            LimitPhase.RIGHT_VALUE: f"From the right, f(x) approaches {L}.",
            LimitPhase.CONVERGE: f"Both sides agree, so the limit exists and equals {L}.",
        }
        if phase is LimitPhase.COMPLETE:
            if self._side == "both":
                return f"lim x→{a} f(x) = {L}"
            arrow = "⁻" if self._side == "left" else "⁺"
            return f"lim x→{a}{arrow} f(x) = {L}"
        return scripts[phase]

    def reset(self) -> None:
        return None