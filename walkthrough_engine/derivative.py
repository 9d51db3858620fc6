"""Derivative of ``f(x) = ax^2 + bx + c`` at ``x0``: secant lines turning into the tangent."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, format_number, require_operands
from .effects import Cue
from .timeline import DEFAULT_TICK_PERIOD_MS, Timeline, ms_to_ticks


class DerivativePhase(StrEnum):
    SETUP = "setup"
    FORMULA = "formula"
    SECANT = "secant"
    EXPLAIN_SLOPE = "explain_slope"
    APPROACH = "approach"
    LIMIT_CONCEPT = "limit_concept"
    TANGENT = "tangent"
    RESULT = "result"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class DerivativeTiming:
    phase_ms: float = 2000.0
    approach_ms: float = 4000.0
    shrink_every_ms: float = 400.0
    start_delta: float = 2.0
    shrink_by: float = 0.15
    min_delta: float = 0.3
    limit_delta: float = 0.1


@dataclass(frozen=True, slots=True)
class DerivativePayload:
    a: float
    b: float
    c: float
    x0: float
    y0: float
    delta_x: float | None
    x1: float | None
    y1: float | None
    secant_slope: float | None
    tangent_slope: float | None
    show_result: bool


class DerivativeWalkthrough:
    title = "Derivative"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: DerivativeTiming | None = None,
    ) -> None:
        raw = require_operands(params, 4, names=("a", "b", "c", "x0"))
        self._a, self._b, self._c, self._x0 = (float(v) for v in raw)
        self._timing = t = timing or DerivativeTiming()
        self._shrink_every = ms_to_ticks(t.shrink_every_ms, tick_period_ms)

        step = ms_to_ticks(t.phase_ms, tick_period_ms)
        self._timeline = Timeline.from_durations(
            [
                (DerivativePhase.SETUP, step),
                (DerivativePhase.FORMULA, step),
                (DerivativePhase.SECANT, step),
                (DerivativePhase.EXPLAIN_SLOPE, step),
                (DerivativePhase.APPROACH, ms_to_ticks(t.approach_ms, tick_period_ms)),
                (DerivativePhase.LIMIT_CONCEPT, step),
                (DerivativePhase.TANGENT, step),
                (DerivativePhase.RESULT, step),
                (DerivativePhase.COMPLETE, 0),
            ]
        )

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def tangent_slope(self) -> float:
        return 2 * self._a * self._x0 + self._b

    def f(self, x: float) -> float:
        return self._a * x * x + self._b * x + self._c

    def secant_slope(self, dx: float) -> float:
        # (f(x0 + dx) - f(x0)) / dx, simplified
        return 2 * self._a * self._x0 + self._b + self._a * dx

    def delta_x(self, phase: Enum, elapsed: int) -> float | None:
        """Width of the secant interval; ``None`` once the tangent is shown."""

        t = self._timing
        index = self._timeline.index(phase)
        if index < self._timeline.index(DerivativePhase.APPROACH):
            return t.start_delta
        if phase is DerivativePhase.APPROACH:
            return max(t.min_delta, t.start_delta - t.shrink_by * (elapsed // self._shrink_every))
        if phase is DerivativePhase.LIMIT_CONCEPT:
            return t.limit_delta
        return None

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> DerivativePayload:
        dx = self.delta_x(phase, tick - phase_started_at)
        shows_secant = self._timeline.index(phase) >= self._timeline.index(DerivativePhase.SECANT)
        x1 = y1 = slope = None
        if dx is not None and shows_secant:
            x1 = self._x0 + dx
            y1 = self.f(x1)
            slope = self.secant_slope(dx)
        return DerivativePayload(
            a=self._a,
            b=self._b,
            c=self._c,
            x0=self._x0,
            y0=self.f(self._x0),
            delta_x=dx,
            x1=x1,
            y1=y1,
            secant_slope=slope,
            tangent_slope=None if dx is not None else self.tangent_slope,
            show_result=phase in (DerivativePhase.RESULT, DerivativePhase.COMPLETE),
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase is DerivativePhase.COMPLETE:
            return Cue.SUCCESS
        if phase in (DerivativePhase.SECANT, DerivativePhase.TANGENT):
            return Cue.WHOOSH
        return Cue.POP

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        return None

    def narration(self, phase: Enum) -> str:
        x0 = format_number(self._x0)
        m = format_number(self.tangent_slope)
        if phase is DerivativePhase.SETUP:
            return f"The derivative tells us how steep f(x) is at exactly x = {x0}."
        if phase is DerivativePhase.FORMULA:
            return "f'(x) = lim h→0 [f(x + h) - f(x)] / h"
        if phase is DerivativePhase.SECANT:
            return "A secant line joins two points on the curve."
        if phase is DerivativePhase.EXPLAIN_SLOPE:
            return "Its slope is rise over run: Δy / Δx."
        if phase is DerivativePhase.APPROACH:
            return "Now we slide the second point closer, shrinking Δx..."
        if phase is DerivativePhase.LIMIT_CONCEPT:
            return "As Δx approaches 0, the secant slope approaches a single value."
        if phase is DerivativePhase.TANGENT:
            return f"In the limit the secant becomes the tangent line at x = {x0}."
        if phase is DerivativePhase.RESULT:
            return f"f'({x0}) = 2·{format_number(self._a)}·{x0} + {format_number(self._b)} = {m}"
        return f"The slope of the tangent at x = {x0} is {m}."

    def reset(self) -> None:
        return None