"""Derived-value strategies shared by all walkthroughs.

Every quantity a walkthrough exposes is recomputed from ``(phase, tick,
phase_started_at, parameters)``; nothing is accumulated from the previous
value. The one exception is :class:`RoundRobinLedger`, whose placements are
append-only until reset.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .errors import InvalidProblemError
from .timeline import Timeline


@dataclass(frozen=True, slots=True)
class ProblemParameters:
    """Immutable input for one walkthrough run."""

    operands: tuple[float, ...]
    flags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operands", tuple(self.operands))
        object.__setattr__(self, "flags", dict(self.flags))

    def flag(self, name: str, default: str) -> str:
        return str(self.flags.get(name, default))


class Walkthrough(Protocol):
    """Strategy supplying timeline, derived values and cues for one problem type."""

    title: str

    @property
    def timeline(self) -> Timeline: ...

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> object: ...

    def phase_cue(self, phase: Enum) -> str | None: ...

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None: ...

    def narration(self, phase: Enum) -> str: ...

    def reset(self) -> None: ...


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------


def require_operands(params: ProblemParameters, count: int, *, names: tuple[str, ...]) -> tuple[float, ...]:
    ops = params.operands
    if len(ops) < count:
        raise InvalidProblemError(
            f"Expected {count} operands ({', '.join(names)}), got {len(ops)}.",
            operands=ops,
            reason="missing_operand",
        )
    values = ops[:count]
    for name, value in zip(names, values):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise InvalidProblemError(
                f"Operand {name!r} is not a number.", operands=ops, reason="not_a_number"
            )
        if math.isnan(value) or math.isinf(value):
            raise InvalidProblemError(
                f"Operand {name!r} must be a finite number.", operands=ops, reason="not_finite"
            )
    return values


def require_int(value: float, *, name: str, operands: tuple[float, ...], minimum: int | None = None) -> int:
    if float(value) != int(value):
        raise InvalidProblemError(
            f"Operand {name!r} must be a whole number.", operands=operands, reason="not_integer"
        )
    n = int(value)
    if minimum is not None and n < minimum:
        raise InvalidProblemError(
            f"Operand {name!r} must be at least {minimum}.", operands=operands, reason="out_of_range"
        )
    return n


def require_choice(params: ProblemParameters, name: str, default: str, choices: tuple[str, ...]) -> str:
    value = params.flag(name, default)
    if value not in choices:
        raise InvalidProblemError(
            f"Unknown {name} {value!r}; expected one of {', '.join(choices)}.",
            operands=params.operands,
            reason="unknown_flag",
        )
    return value


# ---------------------------------------------------------------------------
# Progressive reveal
# ---------------------------------------------------------------------------


def progressive_reveal(total: int, elapsed_ticks: int, step_ticks: int) -> int:
    """Number of sub-elements revealed ``elapsed_ticks`` after phase start."""

    if step_ticks <= 0:
        raise ValueError("step_ticks must be > 0")
    if total <= 0 or elapsed_ticks <= 0:
        return 0
    return min(int(total), int(elapsed_ticks) // int(step_ticks))


def on_beat(elapsed_ticks: int, step_ticks: int, *, count: int) -> bool:
    """True on the tick that reveals element 1..count."""

    if elapsed_ticks <= 0 or elapsed_ticks % step_ticks != 0:
        return False
    return elapsed_ticks // step_ticks <= count


# ---------------------------------------------------------------------------
# Round-robin distribution
# ---------------------------------------------------------------------------


class ItemLocation(str, Enum):
    SOURCE = "source"
    GROUP = "group"
    REMAINDER = "remainder"


@dataclass(frozen=True, slots=True)
class ItemPlacement:
    item: int
    location: ItemLocation
    group: int | None = None


class RoundRobinLedger:
    """Append-only assignment of ``dividend`` items to ``divisor`` groups.

    Item ``i`` goes to group ``i % divisor`` while ``i < dividend - remainder``;
    the trailing ``remainder`` items are only ever marked as remainder.
    """

    def __init__(self, dividend: int, divisor: int) -> None:
        if divisor <= 0:
            raise ValueError("divisor must be > 0")
        if dividend < 0:
            raise ValueError("dividend must be >= 0")
        self._dividend = int(dividend)
        self._divisor = int(divisor)
        self._groups: list[int | None] = [None] * self._dividend
        self._placed = 0
        self._remainder_marked = False

    @property
    def quotient(self) -> int:
        return self._dividend // self._divisor

    @property
    def remainder(self) -> int:
        return self._dividend % self._divisor

    @property
    def distributable(self) -> int:
        return self._dividend - self.remainder

    @property
    def placed(self) -> int:
        return self._placed

    @property
    def remainder_marked(self) -> bool:
        return self._remainder_marked

    def advance_to(self, count: int) -> list[ItemPlacement]:
        """Place items until ``count`` are in groups; returns the new placements."""

        target = max(0, min(int(count), self.distributable))
        added: list[ItemPlacement] = []
        while self._placed < target:
            i = self._placed
            group = i % self._divisor
            self._groups[i] = group
            self._placed += 1
            added.append(ItemPlacement(item=i, location=ItemLocation.GROUP, group=group))
        return added

    def mark_remainder(self) -> None:
        self.advance_to(self.distributable)
        self._remainder_marked = True

    def location(self, item: int) -> ItemPlacement:
        if not 0 <= item < self._dividend:
            raise IndexError(item)
        group = self._groups[item]
        if group is not None:
            return ItemPlacement(item=item, location=ItemLocation.GROUP, group=group)
        if self._remainder_marked:
            return ItemPlacement(item=item, location=ItemLocation.REMAINDER)
        return ItemPlacement(item=item, location=ItemLocation.SOURCE)

    def groups(self) -> tuple[tuple[int, ...], ...]:
        out: list[list[int]] = [[] for _ in range(self._divisor)]
        for i in range(self._placed):
            group = self._groups[i]
            assert group is not None
            out[group].append(i)
        return tuple(tuple(g) for g in out)

    def source_items(self) -> tuple[int, ...]:
        if self._remainder_marked:
            return ()
        return tuple(range(self._placed, self._dividend))

    def remainder_items(self) -> tuple[int, ...]:
        if not self._remainder_marked:
            return ()
        return tuple(range(self.distributable, self._dividend))

    def reset(self) -> None:
        self._groups = [None] * self._dividend
        self._placed = 0
        self._remainder_marked = False


# ---------------------------------------------------------------------------
# Convergence ramp
# ---------------------------------------------------------------------------


def convergence_ramp(
    start: float,
    target: float,
    *,
    elapsed_ticks: int,
    duration_ticks: int,
    min_gap: float,
) -> float:
    """Linear approach from ``start`` toward ``target`` that stops ``min_gap`` short.

    The result is monotone in ``elapsed_ticks`` and always on ``start``'s side of
    the target, so the target itself (the hole) is never reached.
    """

    if duration_ticks <= 0:
        raise ValueError("duration_ticks must be > 0")
    if min_gap <= 0:
        raise ValueError("min_gap must be > 0")
    if start == target:
        raise ValueError("start must differ from target")

    direction = 1.0 if target > start else -1.0
    stop = target - direction * min_gap
    if direction * (stop - start) <= 0:
        return float(start)

    progress = min(1.0, max(0.0, elapsed_ticks / float(duration_ticks)))
    value = start + (stop - start) * progress
    if direction > 0:
        return min(value, stop)
    return max(value, stop)


# ---------------------------------------------------------------------------
# Factor-pair search
# ---------------------------------------------------------------------------


def factor_pairs(product: int, target_sum: int) -> list[tuple[int, int]]:
    """All distinct integer pairs ``(p, q)`` with ``p * q == product``.

    Pairs summing to ``target_sum`` are ordered last so the search ends on them.
    """

    pairs: list[tuple[int, int]] = []
    seen: set[tuple[int, int]] = set()

    def _add(p: int, q: int) -> None:
        key = (min(p, q), max(p, q))
        if key in seen or p * q != product:
            return
        seen.add(key)
        pairs.append((p, q))

    if product == 0:
        _add(0, 0)
        _add(0, target_sum)
    else:
        n = abs(product)
        i = 1
        while i * i <= n:
            if n % i == 0:
                j = n // i
                if product > 0:
                    _add(i, j)
                    _add(-i, -j)
                else:
                    _add(i, -j)
                    _add(-i, j)
            i += 1

    # sorted() is stable, so non-matching pairs keep enumeration order.
    return sorted(pairs, key=lambda pq: pq[0] + pq[1] == target_sum)


# ---------------------------------------------------------------------------
# Fractions
# ---------------------------------------------------------------------------


def lcd(a: int, b: int) -> int:
    return abs(a * b) // math.gcd(a, b)


def reduce_fraction(num: int, den: int) -> tuple[int, int]:
    if den == 0:
        raise ZeroDivisionError("denominator is zero")
    g = math.gcd(num, den) or 1
    num, den = num // g, den // g
    if den < 0:
        num, den = -num, -den
    return num, den


def format_number(value: float) -> str:
    """``2.0`` -> ``"2"``, ``2.5`` -> ``"2.5"``."""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"
