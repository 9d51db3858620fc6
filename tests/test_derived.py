from __future__ import annotations

import math

import pytest

from walkthrough_engine.derived import (
    ItemLocation,
    ProblemParameters,
    RoundRobinLedger,
    convergence_ramp,
    factor_pairs,
    format_number,
    lcd,
    on_beat,
    progressive_reveal,
    reduce_fraction,
    require_choice,
    require_int,
    require_operands,
)
from walkthrough_engine.errors import InvalidProblemError


def test_progressive_reveal_and_beats() -> None:
    assert progressive_reveal(5, 0, 2) == 0
    assert progressive_reveal(5, 3, 2) == 1
    assert progressive_reveal(5, 100, 2) == 5
    assert progressive_reveal(0, 10, 2) == 0
    with pytest.raises(ValueError):
        progressive_reveal(5, 1, 0)

    beats = [t for t in range(0, 20) if on_beat(t, 4, count=3)]
    assert beats == [4, 8, 12]


def test_round_robin_13_into_4() -> None:
    ledger = RoundRobinLedger(13, 4)
    assert (ledger.quotient, ledger.remainder, ledger.distributable) == (3, 1, 12)

    added = ledger.advance_to(5)
    assert [p.group for p in added] == [0, 1, 2, 3, 0]
    assert ledger.groups() == ((0, 4), (1,), (2,), (3,))
    assert ledger.source_items() == tuple(range(5, 13))

    # Asking for fewer than already placed never moves anything.
    assert ledger.advance_to(3) == []
    assert ledger.placed == 5

    ledger.mark_remainder()
    assert ledger.groups() == ((0, 4, 8), (1, 5, 9), (2, 6, 10), (3, 7, 11))
    assert ledger.remainder_items() == (12,)
    assert ledger.source_items() == ()
    assert ledger.location(12).location is ItemLocation.REMAINDER
    assert ledger.location(9).group == 1

    ledger.reset()
    assert ledger.placed == 0
    assert ledger.location(0).location is ItemLocation.SOURCE


def test_round_robin_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        RoundRobinLedger(5, 0)
    with pytest.raises(ValueError):
        RoundRobinLedger(-1, 3)
    with pytest.raises(IndexError):
        RoundRobinLedger(3, 2).location(3)


def test_convergence_ramp_never_reaches_target() -> None:
    values = [
        convergence_ramp(0.0, 2.0, elapsed_ticks=t, duration_ticks=15, min_gap=0.1) for t in range(0, 40)
    ]
    assert values[0] == 0.0
    assert values[15] == pytest.approx(1.9)
    assert all(v < 2.0 for v in values)
    assert values == sorted(values)

    right = convergence_ramp(4.0, 2.0, elapsed_ticks=100, duration_ticks=15, min_gap=0.1)
    assert right == pytest.approx(2.1)
    assert right > 2.0

    with pytest.raises(ValueError):
        convergence_ramp(2.0, 2.0, elapsed_ticks=1, duration_ticks=15, min_gap=0.1)


def test_factor_pairs_puts_matching_pair_last() -> None:
    pairs = factor_pairs(12, 7)
    assert pairs[-1] == (3, 4)
    assert len(pairs) == 6
    assert all(p * q == 12 for p, q in pairs)

    assert factor_pairs(-6, 1)[-1] == (-2, 3)
    assert factor_pairs(0, 5) == [(0, 0), (0, 5)]
    assert all(p + q != 1 for p, q in factor_pairs(1, 1))


def test_fraction_helpers() -> None:
    assert lcd(2, 3) == 6
    assert lcd(4, 6) == 12
    assert reduce_fraction(6, 8) == (3, 4)
    assert reduce_fraction(6, -8) == (-3, 4)
    assert reduce_fraction(0, 5) == (0, 1)
    with pytest.raises(ZeroDivisionError):
        reduce_fraction(1, 0)


def test_operand_validation() -> None:
    params = ProblemParameters(operands=(1.0, math.nan))
    with pytest.raises(InvalidProblemError) as exc:
        require_operands(params, 2, names=("a", "b"))
    assert exc.value.reason == "not_finite"

    with pytest.raises(InvalidProblemError) as exc:
        require_operands(ProblemParameters(operands=(1,)), 2, names=("a", "b"))
    assert exc.value.reason == "missing_operand"

    with pytest.raises(InvalidProblemError) as exc:
        require_int(2.5, name="a", operands=(2.5,))
    assert exc.value.reason == "not_integer"
    assert require_int(4.0, name="a", operands=(4.0,)) == 4

    flagged = ProblemParameters(operands=(), flags={"side": "up"})
    with pytest.raises(InvalidProblemError):
        require_choice(flagged, "side", "both", ("both", "left", "right"))
    assert require_choice(ProblemParameters(operands=()), "side", "both", ("both",)) == "both"


def test_format_number() -> None:
    assert format_number(2.0) == "2"
    assert format_number(-0.5) == "-0.5"
