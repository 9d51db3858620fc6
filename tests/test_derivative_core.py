from __future__ import annotations

import pytest

from walkthrough_engine.derivative import DerivativePhase, DerivativeWalkthrough
from walkthrough_engine.derived import ProblemParameters
from walkthrough_engine.effects import Cue


def _w(a, b, c, x0) -> DerivativeWalkthrough:
    return DerivativeWalkthrough(ProblemParameters(operands=(a, b, c, x0)), 100)


def test_timeline() -> None:
    w = _w(1, 0, 0, 1)
    assert [s.at_tick for s in w.timeline] == [0, 20, 40, 60, 80, 120, 140, 160, 180]


def test_delta_shrinks_during_approach() -> None:
    w = _w(1, 0, 0, 1)
    assert w.delta_x(DerivativePhase.SECANT, 0) == 2.0
    assert w.delta_x(DerivativePhase.APPROACH, 0) == 2.0
    assert w.delta_x(DerivativePhase.APPROACH, 4) == pytest.approx(1.85)
    assert w.delta_x(DerivativePhase.APPROACH, 400) == pytest.approx(0.3)
    assert w.delta_x(DerivativePhase.LIMIT_CONCEPT, 0) == pytest.approx(0.1)
    assert w.delta_x(DerivativePhase.TANGENT, 0) is None

    widths = [w.delta_x(DerivativePhase.APPROACH, e) for e in range(40)]
    assert widths == sorted(widths, reverse=True)


def test_secant_turns_into_tangent() -> None:
    w = _w(1, 0, 0, 1)
    assert w.tangent_slope == 2

    setup = w.compute(phase=DerivativePhase.SETUP, tick=0, phase_started_at=0)
    assert setup.secant_slope is None
    assert setup.y0 == 1

    secant = w.compute(phase=DerivativePhase.SECANT, tick=40, phase_started_at=40)
    assert secant.x1 == 3
    assert secant.y1 == 9
    assert secant.secant_slope == pytest.approx(4.0)
    assert secant.secant_slope != w.tangent_slope
    assert secant.tangent_slope is None

    tangent = w.compute(phase=DerivativePhase.TANGENT, tick=140, phase_started_at=140)
    assert tangent.tangent_slope == 2
    assert tangent.secant_slope is None
    assert tangent.x1 is None


def test_secant_matches_difference_quotient() -> None:
    w = _w(3, -2, 5, 1.5)
    dx = 0.5
    expected = (w.f(1.5 + dx) - w.f(1.5)) / dx
    assert w.secant_slope(dx) == pytest.approx(expected)
    assert w.tangent_slope == pytest.approx(7.0)


def test_linear_function_has_constant_slope() -> None:
    w = _w(0, 3, 1, 2)
    assert w.secant_slope(2.0) == pytest.approx(3.0)
    assert w.tangent_slope == pytest.approx(3.0)


def test_cues_and_narration() -> None:
    w = _w(1, 0, 0, 1)
    assert w.phase_cue(DerivativePhase.SECANT) == Cue.WHOOSH
    assert w.phase_cue(DerivativePhase.TANGENT) == Cue.WHOOSH
    assert w.phase_cue(DerivativePhase.COMPLETE) == Cue.SUCCESS
    assert w.phase_cue(DerivativePhase.FORMULA) == Cue.POP
    assert w.narration(DerivativePhase.COMPLETE) == "The slope of the tangent at x = 1 is 2."
