"""Column addition and subtraction with carrying and borrowing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, require_choice, require_int, require_operands
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, Timeline, ms_to_ticks

OPERATIONS: tuple[str, ...] = ("addition", "subtraction")
MAX_OPERAND = 999


class PlaceValuePhase(StrEnum):
    SETUP = "setup"
    HIGHLIGHT_ONES = "highlight_ones"
    BORROW = "borrow"
    ADD_ONES = "add_ones"
    CARRY = "carry"
    HIGHLIGHT_TENS = "highlight_tens"
    ADD_TENS = "add_tens"
    HIGHLIGHT_HUNDREDS = "highlight_hundreds"
    ADD_HUNDREDS = "add_hundreds"
    COMPLETE = "complete"


_ACTIVE_COLUMN: dict[PlaceValuePhase, str] = {
    PlaceValuePhase.HIGHLIGHT_ONES: "ones",
    PlaceValuePhase.BORROW: "ones",
    PlaceValuePhase.ADD_ONES: "ones",
    PlaceValuePhase.CARRY: "ones",
    PlaceValuePhase.HIGHLIGHT_TENS: "tens",
    PlaceValuePhase.ADD_TENS: "tens",
    PlaceValuePhase.HIGHLIGHT_HUNDREDS: "hundreds",
    PlaceValuePhase.ADD_HUNDREDS: "hundreds",
}


@dataclass(frozen=True, slots=True)
class PlaceValueTiming:
    step_interval_ms: float = 700.0


@dataclass(frozen=True, slots=True)
class Digits:
    ones: int
    tens: int
    hundreds: int

    @classmethod
    def of(cls, n: int) -> "Digits":
        return cls(ones=n % 10, tens=(n % 100) // 10, hundreds=n // 100)


@dataclass(frozen=True, slots=True)
class PlaceValuePayload:
    operation: str
    first: Digits
    second: Digits
    result: Digits
    show_hundreds: bool
    active_column: str | None
    ones_shown: bool
    tens_shown: bool
    hundreds_shown: bool
    carry: int | None
    borrow_active: bool
    needs_carry_tens: bool
    needs_borrow_tens: bool


class PlaceValueWalkthrough:
    title = "Place Value"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: PlaceValueTiming | None = None,
    ) -> None:
        raw = require_operands(params, 2, names=("n1", "n2"))
        ops = params.operands
        self._operation = require_choice(params, "operation", "addition", OPERATIONS)
        n1 = require_int(raw[0], name="n1", operands=ops, minimum=0)
        n2 = require_int(raw[1], name="n2", operands=ops, minimum=0)
        if n1 > MAX_OPERAND or n2 > MAX_OPERAND:
            raise InvalidProblemError(
                f"Place value columns go up to hundreds; operands must be at most {MAX_OPERAND}.",
                operands=ops,
                reason="out_of_range",
            )
        subtracting = self._operation == "subtraction"
        if subtracting and n1 < n2:
            raise InvalidProblemError(
                f"{n1} - {n2} would be negative; the first number must be the larger one.",
                operands=ops,
                reason="negative_result",
            )

        self._n1, self._n2 = n1, n2
        self._result = n1 - n2 if subtracting else n1 + n2
        self._first, self._second = Digits.of(n1), Digits.of(n2)
        self._result_digits = Digits.of(self._result)

        a, b = self._first, self._second
        self._needs_carry_ones = not subtracting and a.ones + b.ones >= 10
        self._needs_carry_tens = not subtracting and a.tens + b.tens + int(self._needs_carry_ones) >= 10
        self._needs_borrow_ones = subtracting and a.ones < b.ones
        self._needs_borrow_tens = subtracting and a.tens - int(self._needs_borrow_ones) < b.tens
        self._show_hundreds = max(n1, n2, self._result) >= 100

        phases = [PlaceValuePhase.SETUP, PlaceValuePhase.HIGHLIGHT_ONES]
        if self._needs_borrow_ones:
            phases.append(PlaceValuePhase.BORROW)
        phases.append(PlaceValuePhase.ADD_ONES)
        if self._needs_carry_ones:
            phases.append(PlaceValuePhase.CARRY)
        phases += [PlaceValuePhase.HIGHLIGHT_TENS, PlaceValuePhase.ADD_TENS]
        if self._show_hundreds:
            phases += [PlaceValuePhase.HIGHLIGHT_HUNDREDS, PlaceValuePhase.ADD_HUNDREDS]
        phases.append(PlaceValuePhase.COMPLETE)

        t = timing or PlaceValueTiming()
        interval = ms_to_ticks(t.step_interval_ms, tick_period_ms)
        self._timeline = Timeline.from_thresholds([(p, i * interval) for i, p in enumerate(phases)])

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def result(self) -> int:
        return self._result

    def _reached(self, phase: Enum, target: PlaceValuePhase) -> bool:
        return target in self._timeline and self._timeline.index(phase) >= self._timeline.index(target)

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> PlaceValuePayload:
        return PlaceValuePayload(
            operation=self._operation,
            first=self._first,
            second=self._second,
            result=self._result_digits,
            show_hundreds=self._show_hundreds,
            active_column=_ACTIVE_COLUMN.get(phase),
            ones_shown=self._reached(phase, PlaceValuePhase.ADD_ONES),
            tens_shown=self._reached(phase, PlaceValuePhase.ADD_TENS),
            hundreds_shown=self._reached(phase, PlaceValuePhase.ADD_HUNDREDS),
            carry=1 if self._reached(phase, PlaceValuePhase.CARRY) else None,
            borrow_active=self._reached(phase, PlaceValuePhase.BORROW),
            needs_carry_tens=self._needs_carry_tens,
            needs_borrow_tens=self._needs_borrow_tens,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase is PlaceValuePhase.CARRY:
            return Cue.CARRY
        if phase is PlaceValuePhase.BORROW:
            return Cue.BORROW
        if phase is PlaceValuePhase.COMPLETE:
            return Cue.SUCCESS
        return Cue.CLICK

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        return None

    def narration(self, phase: Enum) -> str:
        a, b, r = self._first, self._second, self._result_digits
        sym = "-" if self._operation == "subtraction" else "+"
        adding = self._operation == "addition"
        if phase is PlaceValuePhase.SETUP:
            return f"Let's line up {self._n1} {sym} {self._n2} by place value."
        if phase is PlaceValuePhase.HIGHLIGHT_ONES:
            return "Start with the ones column."
        if phase is PlaceValuePhase.BORROW:
            return f"{a.ones} is smaller than {b.ones}, so we borrow 10 from the tens."
        if phase is PlaceValuePhase.ADD_ONES:
            ones = a.ones + 10 * int(self._needs_borrow_ones)
            total = ones + b.ones if adding else ones - b.ones
            return f"{ones} {sym} {b.ones} = {total}"
        if phase is PlaceValuePhase.CARRY:
            return f"{a.ones + b.ones} is 10 or more: write {r.ones} and carry the 1 to the tens."
        if phase is PlaceValuePhase.HIGHLIGHT_TENS:
            return "Now the tens column."
        if phase is PlaceValuePhase.ADD_TENS:
            return f"The tens digit of the answer is {r.tens}."
        if phase is PlaceValuePhase.HIGHLIGHT_HUNDREDS:
            return "Finally the hundreds column."
        if phase is PlaceValuePhase.ADD_HUNDREDS:
            return f"The hundreds digit of the answer is {r.hundreds}."
        return f"{self._n1} {sym} {self._n2} = {self._result}"

    def reset(self) -> None:
        return None
