from __future__ import annotations

import pytest

from walkthrough_engine.derived import ProblemParameters
from walkthrough_engine.effects import Cue
from walkthrough_engine.errors import InvalidProblemError
from walkthrough_engine.limits import LimitPhase, LimitWalkthrough


def _w(a, L, side="both") -> LimitWalkthrough:
    return LimitWalkthrough(ProblemParameters(operands=(a, L), flags={"side": side}), 100)


def test_both_sides_timeline() -> None:
    w = _w(2, 4)
    assert [s.at_tick for s in w.timeline] == [0, 20, 40, 60, 80, 100, 120, 140, 160, 180, 220]
    assert LimitPhase.CONVERGE in w.timeline


def test_left_only_drops_right_and_converge() -> None:
    w = _w(2, 4, "left")
    assert LimitPhase.RIGHT_APPROACH not in w.timeline
    assert LimitPhase.CONVERGE not in w.timeline
    assert w.timeline.total_ticks == 120
    assert w.narration(LimitPhase.COMPLETE) == "lim x→2⁻ f(x) = 4"


def test_left_approach_is_monotone_and_never_reaches_the_hole() -> None:
    w = _w(2, 4)
    xs = [w.compute(phase=LimitPhase.LEFT_APPROACH, tick=t, phase_started_at=80).approach_x for t in range(80, 100)]
    assert all(x < 2 for x in xs)
    assert xs == sorted(xs)
    assert xs[0] == pytest.approx(0.0)
    assert xs[15] == pytest.approx(1.9)
    assert xs[-1] == pytest.approx(1.9)

    p = w.compute(phase=LimitPhase.LEFT_APPROACH, tick=95, phase_started_at=80)
    assert p.approach_from == "left"
    assert p.approach_y == pytest.approx(3.9)


def test_right_approach_stays_above_a() -> None:
    w = _w(2, 4)
    xs = [
        w.compute(phase=LimitPhase.RIGHT_APPROACH, tick=t, phase_started_at=140).approach_x for t in range(140, 160)
    ]
    assert all(x > 2 for x in xs)
    assert xs == sorted(xs, reverse=True)


def test_one_sided_limits_are_revealed_in_order() -> None:
    w = _w(2, 4)
    left = w.compute(phase=LimitPhase.LEFT_VALUE, tick=100, phase_started_at=100)
    assert left.left_limit == 4
    assert left.right_limit is None
    done = w.compute(phase=LimitPhase.COMPLETE, tick=220, phase_started_at=220)
    assert done.left_limit == done.right_limit == 4
    assert done.show_result


def test_cues() -> None:
    w = _w(2, 4)
    assert w.phase_cue(LimitPhase.LEFT_APPROACH) == Cue.WHOOSH
    assert w.phase_cue(LimitPhase.IDENTIFY_HOLE) == Cue.POP
    assert w.phase_cue(LimitPhase.COMPLETE) == Cue.SUCCESS


def test_unknown_side_is_invalid() -> None:
    with pytest.raises(InvalidProblemError) as exc:
        _w(2, 4, "middle")
    assert exc.value.reason == "unknown_flag"


@pytest.mark.parametrize("a", [1e16, -1e16, 1e17])
def test_magnitudes_that_swallow_the_gap_are_invalid(a) -> None:
    with pytest.raises(InvalidProblemError) as exc:
        _w(a, 0, "left")
    assert exc.value.reason == "out_of_range"


def test_largest_usable_a_still_stays_off_the_hole() -> None:
    a = 1e14
    w = _w(a, 0, "left")
    xs = [w.compute(phase=LimitPhase.LEFT_APPROACH, tick=t, phase_started_at=80).approach_x for t in range(80, 100)]
    assert all(x < a for x in xs)
