from __future__ import annotations

import pytest

from walkthrough_engine.derived import ProblemParameters
from walkthrough_engine.effects import Cue
from walkthrough_engine.errors import InvalidProblemError
from walkthrough_engine.place_value import Digits, PlaceValuePhase, PlaceValueWalkthrough


def _w(n1, n2, operation="addition") -> PlaceValueWalkthrough:
    return PlaceValueWalkthrough(ProblemParameters(operands=(n1, n2), flags={"operation": operation}), 100)


def _cues(w: PlaceValueWalkthrough) -> list[str | None]:
    return [w.phase_cue(p) for p in w.timeline.phases[1:]]


def test_digits() -> None:
    assert Digits.of(307) == Digits(ones=7, tens=0, hundreds=3)


def test_addition_with_carry() -> None:
    w = _w(47, 35)
    assert w.result == 82
    assert PlaceValuePhase.CARRY in w.timeline
    assert PlaceValuePhase.HIGHLIGHT_HUNDREDS not in w.timeline
    assert w.timeline.total_ticks == 6 * 7
    assert _cues(w) == [Cue.CLICK, Cue.CLICK, Cue.CARRY, Cue.CLICK, Cue.CLICK, Cue.SUCCESS]

    before = w.compute(phase=PlaceValuePhase.ADD_ONES, tick=14, phase_started_at=14)
    assert before.carry is None
    assert before.ones_shown
    assert not before.tens_shown
    after = w.compute(phase=PlaceValuePhase.HIGHLIGHT_TENS, tick=28, phase_started_at=28)
    assert after.carry == 1
    assert after.active_column == "tens"


def test_subtraction_with_borrow() -> None:
    w = _w(52, 28, "subtraction")
    assert w.result == 24
    assert _cues(w) == [Cue.CLICK, Cue.BORROW, Cue.CLICK, Cue.CLICK, Cue.CLICK, Cue.SUCCESS]
    assert w.narration(PlaceValuePhase.BORROW) == "2 is smaller than 8, so we borrow 10 from the tens."
    assert w.narration(PlaceValuePhase.ADD_ONES) == "12 - 8 = 4"


def test_no_carry_no_extra_phases() -> None:
    w = _w(21, 34)
    assert PlaceValuePhase.CARRY not in w.timeline
    assert PlaceValuePhase.BORROW not in w.timeline
    assert w.narration(PlaceValuePhase.COMPLETE) == "21 + 34 = 55"


def test_hundreds_column_appears_when_needed() -> None:
    w = _w(47, 65)
    assert w.result == 112
    assert PlaceValuePhase.HIGHLIGHT_HUNDREDS in w.timeline
    p = w.compute(phase=PlaceValuePhase.COMPLETE, tick=w.timeline.total_ticks, phase_started_at=w.timeline.total_ticks)
    assert p.show_hundreds
    assert p.hundreds_shown
    assert p.needs_carry_tens
    assert p.result == Digits(ones=2, tens=1, hundreds=1)


@pytest.mark.parametrize(
    "ops,operation,reason",
    [
        ((-1, 3), "addition", "out_of_range"),
        ((1000, 3), "addition", "out_of_range"),
        ((12, 30), "subtraction", "negative_result"),
        ((1, 2), "division", "unknown_flag"),
    ],
)
def test_invalid_problems(ops, operation, reason) -> None:
    with pytest.raises(InvalidProblemError) as exc:
        _w(*ops, operation=operation)
    assert exc.value.reason == reason
