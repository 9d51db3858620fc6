"""Trinomial factoring ``ax^2 + bx + c`` by searching factor pairs of ``a*c``."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, factor_pairs, require_int, require_operands
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, Timeline, ms_to_ticks

MAX_DISPLAYED_PAIRS = 6


class FactoringPhase(StrEnum):
    SETUP = "setup"
    ANALYZE = "analyze"
    FIND_FACTORS = "find_factors"
    VERIFY = "verify"
    NOT_FACTORABLE = "not_factorable"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class FactoringTiming:
    analyze_delay_ms: float = 1000.0
    first_pair_delay_ms: float = 500.0
    pair_interval_ms: float = 1200.0
    verify_delay_ms: float = 800.0
    complete_delay_ms: float = 2000.0


@dataclass(frozen=True, slots=True)
class Binomial:
    coef: int
    const: int

    def __str__(self) -> str:
        if self.coef == 1:
            x = "x"
        elif self.coef == -1:
            x = "-x"
        else:
            x = f"{self.coef}x"
        if self.const == 0:
            return f"({x})"
        sign = "+" if self.const > 0 else "-"
        return f"({x} {sign} {abs(self.const)})"


@dataclass(frozen=True, slots=True)
class FactoringPayload:
    a: int
    b: int
    c: int
    product: int
    target_sum: int
    pairs: tuple[tuple[int, int], ...]
    revealed: tuple[tuple[int, int], ...]
    current_pair: int | None
    correct_pair: tuple[int, int] | None
    factorable: bool
    factors: tuple[Binomial, Binomial] | None
    show_result: bool


def displayed_pairs(pairs: list[tuple[int, int]], target_sum: int) -> tuple[tuple[int, int], ...]:
    """At most six pairs, keeping the matching pair (if any) last."""

    if len(pairs) <= MAX_DISPLAYED_PAIRS:
        return tuple(pairs)
    wrong = [pq for pq in pairs if pq[0] + pq[1] != target_sum]
    right = [pq for pq in pairs if pq[0] + pq[1] == target_sum]
    return tuple(wrong[: MAX_DISPLAYED_PAIRS - 1] + right[:1])


def group_factors(a: int, p: int, q: int) -> tuple[Binomial, Binomial]:
    """Factor ``ax^2 + px + qx + c`` by grouping, where ``p*q == a*c``."""

    g = math.gcd(a, p)
    u, v = a // g, p // g
    return Binomial(u, v), Binomial(g, q // u)


def _term(coef: int, x: str, first: bool = False) -> str:
    if coef == 0:
        return ""
    body = x if abs(coef) == 1 and x else f"{abs(coef)}{x}"
    if first:
        return f"-{body}" if coef < 0 else body
    return f" - {body}" if coef < 0 else f" + {body}"


def format_trinomial(a: int, b: int, c: int) -> str:
    return _term(a, "x²", first=True) + _term(b, "x") + _term(c, "")


class FactoringWalkthrough:
    title = "Factoring"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: FactoringTiming | None = None,
    ) -> None:
        raw = require_operands(params, 3, names=("a", "b", "c"))
        ops = params.operands
        if raw[0] == 0:
            raise InvalidProblemError(
                "The x² coefficient cannot be zero, otherwise this is not a quadratic.",
                operands=ops,
                reason="zero_coefficient",
            )
        self._a = require_int(raw[0], name="a", operands=ops)
        self._b = require_int(raw[1], name="b", operands=ops)
        self._c = require_int(raw[2], name="c", operands=ops)
        self._product = self._a * self._c

        self._pairs = displayed_pairs(factor_pairs(self._product, self._b), self._b)
        self._solution = next((pq for pq in self._pairs if pq[0] + pq[1] == self._b), None)
        self._factors = None if self._solution is None else group_factors(self._a, *self._solution)

        t = timing or FactoringTiming()
        analyze = ms_to_ticks(t.analyze_delay_ms, tick_period_ms)
        find = analyze + ms_to_ticks(t.first_pair_delay_ms, tick_period_ms)
        self._interval = ms_to_ticks(t.pair_interval_ms, tick_period_ms)
        check = find + len(self._pairs) * self._interval + ms_to_ticks(t.verify_delay_ms, tick_period_ms)
        done = check + ms_to_ticks(t.complete_delay_ms, tick_period_ms)
        ending = FactoringPhase.VERIFY if self._solution is not None else FactoringPhase.NOT_FACTORABLE
        self._timeline = Timeline.from_thresholds(
            [
                (FactoringPhase.SETUP, 0),
                (FactoringPhase.ANALYZE, analyze),
                (FactoringPhase.FIND_FACTORS, find),
                (ending, check),
                (FactoringPhase.COMPLETE, done),
            ]
        )

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def pairs(self) -> tuple[tuple[int, int], ...]:
        return self._pairs

    @property
    def solution(self) -> tuple[int, int] | None:
        return self._solution

    @property
    def factors(self) -> tuple[Binomial, Binomial] | None:
        return self._factors

    def _revealed_count(self, phase: Enum, tick: int, phase_started_at: int) -> int:
        index = self._timeline.index(phase)
        find = self._timeline.index(FactoringPhase.FIND_FACTORS)
        if index < find:
            return 0
        if index > find:
            return len(self._pairs)
        # The first pair appears on entry, then one per interval.
        return min(len(self._pairs), (tick - phase_started_at) // self._interval + 1)

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> FactoringPayload:
        shown = self._revealed_count(phase, tick, phase_started_at)
        revealed = self._pairs[:shown]
        correct = self._solution if self._solution in revealed else None
        return FactoringPayload(
            a=self._a,
            b=self._b,
            c=self._c,
            product=self._product,
            target_sum=self._b,
            pairs=self._pairs,
            revealed=revealed,
            current_pair=shown - 1 if phase is FactoringPhase.FIND_FACTORS and shown else None,
            correct_pair=correct,
            factorable=self._solution is not None,
            factors=self._factors if phase is FactoringPhase.COMPLETE else None,
            show_result=phase is FactoringPhase.COMPLETE,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase in (FactoringPhase.ANALYZE, FactoringPhase.VERIFY):
            return Cue.WHOOSH
        return None

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        if phase is not FactoringPhase.FIND_FACTORS:
            return None
        elapsed = tick - phase_started_at
        if elapsed % self._interval != 0:
            return None
        i = elapsed // self._interval
        if i >= len(self._pairs):
            return None
        p, q = self._pairs[i]
        return Cue.SUCCESS if p + q == self._b else Cue.POP

    def narration(self, phase: Enum) -> str:
        a, b, c, product = self._a, self._b, self._c, self._product
        if phase is FactoringPhase.SETUP:
            return f"Let's factor {format_trinomial(a, b, c)}."
        if phase is FactoringPhase.ANALYZE:
            return f"We need two numbers that multiply to {product} AND add to {b}."
        if phase is FactoringPhase.FIND_FACTORS:
            return f"Testing factor pairs of {product}..."
        if phase is FactoringPhase.NOT_FACTORABLE:
            return f"No pair of integers multiplies to {product} and adds to {b}."
        if self._factors is None:
            return "This trinomial cannot be factored using integers."
        first, second = self._factors
        if phase is FactoringPhase.VERIFY:
            return f"Let's verify: {first}{second} using FOIL."
        return f"The factors are {first} and {second}."

    def reset(self) -> None:
        return None
