from __future__ import annotations

import pytest

from walkthrough_engine.derived import ProblemParameters
from walkthrough_engine.effects import Cue
from walkthrough_engine.errors import InvalidProblemError
from walkthrough_engine.fair_sharing import SHARING_OBJECTS, FairSharingPhase, FairSharingWalkthrough


def _w(*ops: float) -> FairSharingWalkthrough:
    return FairSharingWalkthrough(ProblemParameters(operands=ops), 100)


def test_timeline_includes_remainder_only_when_needed() -> None:
    with_rem = _w(13, 4).timeline
    assert with_rem.phases == (
        FairSharingPhase.SETUP,
        FairSharingPhase.DISTRIBUTING,
        FairSharingPhase.REMAINDER,
        FairSharingPhase.COMPLETE,
    )
    assert [s.at_tick for s in with_rem] == [0, 5, 70, 75]

    exact = _w(12, 4).timeline
    assert FairSharingPhase.REMAINDER not in exact
    assert exact.total_ticks == 70


def test_items_are_dealt_round_robin() -> None:
    w = _w(13, 4)
    p = w.compute(phase=FairSharingPhase.DISTRIBUTING, tick=20, phase_started_at=5)
    assert p.placed == 3
    assert p.groups == ((0,), (1,), (2,), ())
    assert p.current_group == 2
    assert p.emoji == SHARING_OBJECTS[(13 + 4) % len(SHARING_OBJECTS)]
    assert not p.show_result


def test_placements_never_move_backwards() -> None:
    w = _w(13, 4)
    w.compute(phase=FairSharingPhase.DISTRIBUTING, tick=40, phase_started_at=5)
    p = w.compute(phase=FairSharingPhase.DISTRIBUTING, tick=20, phase_started_at=5)
    assert p.placed == 7

    w.reset()
    p = w.compute(phase=FairSharingPhase.SETUP, tick=0, phase_started_at=0)
    assert p.placed == 0
    assert p.source_items == tuple(range(13))


def test_complete_marks_remainder() -> None:
    w = _w(13, 4)
    p = w.compute(phase=FairSharingPhase.COMPLETE, tick=75, phase_started_at=75)
    assert p.groups == ((0, 4, 8), (1, 5, 9), (2, 6, 10), (3, 7, 11))
    assert p.remainder_items == (12,)
    assert p.show_result
    assert "remainder" in w.narration(FairSharingPhase.COMPLETE)


def test_beats_and_cues() -> None:
    w = _w(13, 4)
    beats = [
        t for t in range(5, 70) if w.beat_cue(phase=FairSharingPhase.DISTRIBUTING, tick=t, phase_started_at=5)
    ]
    assert beats == [5 + 5 * i for i in range(1, 13)]
    assert w.phase_cue(FairSharingPhase.COMPLETE) == Cue.SUCCESS
    assert w.phase_cue(FairSharingPhase.DISTRIBUTING) is None


@pytest.mark.parametrize(
    "ops,reason",
    [((5, 0), "zero_divisor"), ((-1, 3), "out_of_range"), ((5.5, 2), "not_integer"), ((5,), "missing_operand")],
)
def test_invalid_operands(ops, reason) -> None:
    with pytest.raises(InvalidProblemError) as exc:
        _w(*ops)
    assert exc.value.reason == reason


def test_zero_items_still_completes() -> None:
    w = _w(0, 3)
    assert w.timeline.phases == (FairSharingPhase.SETUP, FairSharingPhase.DISTRIBUTING, FairSharingPhase.COMPLETE)
    p = w.compute(phase=FairSharingPhase.COMPLETE, tick=10, phase_started_at=10)
    assert p.groups == ((), (), ())


@pytest.mark.parametrize("ops", [(1e20, 3), (1000, 4), (10, 100)])
def test_oversized_problems_are_out_of_range(ops) -> None:
    with pytest.raises(InvalidProblemError) as exc:
        _w(*ops)
    assert exc.value.reason == "out_of_range"


def test_largest_allowed_problem_builds() -> None:
    w = _w(999, 99)
    assert w.ledger.quotient == 10
    assert w.ledger.remainder == 9
