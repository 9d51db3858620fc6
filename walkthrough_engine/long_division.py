"""Long division: Divide, Multiply, Subtract, Bring down.

The full step list is generated once from the operands; the walkthrough then
reveals one step per interval. Quotient digits and work lines shown at any tick
are rebuilt from the revealed prefix of that list.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, on_beat, progressive_reveal, require_int, require_operands
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, TIMING, Timeline, ms_to_ticks


class LongDivisionPhase(StrEnum):
    SETUP = "setup"
    SOLVING = "solving"
    COMPLETE = "complete"


class StepKind(StrEnum):
    DIVIDE = "divide"
    MULTIPLY = "multiply"
    SUBTRACT = "subtract"
    BRING_DOWN = "bringdown"


@dataclass(frozen=True, slots=True)
class DivisionStep:
    kind: StepKind
    description: str
    column_end: int
    quotient_digit: int | None = None
    product: int | None = None
    difference: int | None = None
    brought_down: int | None = None


@dataclass(frozen=True, slots=True)
class WorkLine:
    kind: str  # "product" | "difference" | "bringdown"
    value: int
    column_end: int


@dataclass(frozen=True, slots=True)
class LongDivisionTiming:
    start_delay_ms: float = TIMING["start_delay"]
    step_interval_ms: float = 1200.0


@dataclass(frozen=True, slots=True)
class LongDivisionPayload:
    dividend: int
    divisor: int
    quotient: int
    remainder: int
    steps_shown: int
    total_steps: int
    current_step: DivisionStep | None
    quotient_digits: tuple[int, ...]
    work_lines: tuple[WorkLine, ...]
    show_result: bool


def long_division_steps(dividend: int, divisor: int) -> tuple[DivisionStep, ...]:
    if divisor <= 0:
        raise ValueError("divisor must be > 0")
    if dividend < 0:
        raise ValueError("dividend must be >= 0")

    digits = [int(ch) for ch in str(dividend)]
    steps: list[DivisionStep] = []
    value = 0
    idx = 0
    column = -1

    # Gather leading digits silently until the divisor fits (156 / 12 starts at 15).
    while idx < len(digits):
        value = value * 10 + digits[idx]
        column = idx
        idx += 1
        if value >= divisor:
            break

    if value < divisor and idx >= len(digits):
        steps.append(
            DivisionStep(
                kind=StepKind.DIVIDE,
                description=f"{value} < {divisor}, so quotient is 0",
                column_end=column,
                quotient_digit=0,
            )
        )
        return tuple(steps)

    while True:
        q = value // divisor
        steps.append(
            DivisionStep(
                kind=StepKind.DIVIDE,
                description=f"{value} ÷ {divisor} = {q}",
                column_end=column,
                quotient_digit=q,
            )
        )
        product = q * divisor
        steps.append(
            DivisionStep(
                kind=StepKind.MULTIPLY,
                description=f"{q} × {divisor} = {product}",
                column_end=column,
                product=product,
            )
        )
        difference = value - product
        steps.append(
            DivisionStep(
                kind=StepKind.SUBTRACT,
                description=f"{value} - {product} = {difference}",
                column_end=column,
                difference=difference,
            )
        )
        value = difference

        if idx >= len(digits):
            break

        column = idx
        steps.append(
            DivisionStep(
                kind=StepKind.BRING_DOWN,
                description=f"Bring down {digits[idx]}",
                column_end=column,
                brought_down=digits[idx],
            )
        )
        value = value * 10 + digits[idx]
        idx += 1

        # Still too small after bringing down: the quotient gets a 0 here.
        while value < divisor and idx < len(digits):
            steps.append(
                DivisionStep(
                    kind=StepKind.DIVIDE,
                    description=f"{value} < {divisor}, quotient digit is 0",
                    column_end=column,
                    quotient_digit=0,
                )
            )
            column = idx
            steps.append(
                DivisionStep(
                    kind=StepKind.BRING_DOWN,
                    description=f"Bring down {digits[idx]}",
                    column_end=column,
                    brought_down=digits[idx],
                )
            )
            value = value * 10 + digits[idx]
            idx += 1

        if value < divisor:
            # The last digit brought down still doesn't fit: it is a 0 in the quotient.
            steps.append(
                DivisionStep(
                    kind=StepKind.DIVIDE,
                    description=f"{value} < {divisor}, quotient digit is 0",
                    column_end=column,
                    quotient_digit=0,
                )
            )
            break

    return tuple(steps)


def _work_lines(steps: tuple[DivisionStep, ...]) -> tuple[WorkLine, ...]:
    lines: list[WorkLine] = []
    last_difference = 0
    for step in steps:
        if step.kind is StepKind.MULTIPLY and step.product is not None:
            lines.append(WorkLine(kind="product", value=step.product, column_end=step.column_end))
        elif step.kind is StepKind.SUBTRACT and step.difference is not None:
            lines.append(WorkLine(kind="difference", value=step.difference, column_end=step.column_end))
            last_difference = step.difference
        elif step.kind is StepKind.BRING_DOWN and step.brought_down is not None:
            last_difference = last_difference * 10 + step.brought_down
            lines.append(WorkLine(kind="bringdown", value=last_difference, column_end=step.column_end))
    return tuple(lines)


class LongDivisionWalkthrough:
    title = "Long Division"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: LongDivisionTiming | None = None,
    ) -> None:
        raw = require_operands(params, 2, names=("dividend", "divisor"))
        ops = params.operands
        if raw[1] == 0:
            raise InvalidProblemError(
                "We cannot divide by zero! Imagine trying to share cookies among zero friends"
                " - it doesn't make sense.",
                operands=ops,
                reason="zero_divisor",
            )
        self._dividend = require_int(raw[0], name="dividend", operands=ops, minimum=0)
        self._divisor = require_int(raw[1], name="divisor", operands=ops, minimum=1)
        self._quotient, self._remainder = divmod(self._dividend, self._divisor)
        self._steps = long_division_steps(self._dividend, self._divisor)

        t = timing or LongDivisionTiming()
        self._interval = ms_to_ticks(t.step_interval_ms, tick_period_ms)
        self._timeline = Timeline.from_durations(
            [
                (LongDivisionPhase.SETUP, ms_to_ticks(t.start_delay_ms, tick_period_ms)),
                (LongDivisionPhase.SOLVING, (len(self._steps) + 1) * self._interval),
                (LongDivisionPhase.COMPLETE, 0),
            ]
        )

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def steps(self) -> tuple[DivisionStep, ...]:
        return self._steps

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> LongDivisionPayload:
        if phase is LongDivisionPhase.SOLVING:
            shown = progressive_reveal(len(self._steps), tick - phase_started_at, self._interval)
        elif phase is LongDivisionPhase.COMPLETE:
            shown = len(self._steps)
        else:
            shown = 0

        revealed = self._steps[:shown]
        digits = tuple(s.quotient_digit for s in revealed if s.quotient_digit is not None)
        return LongDivisionPayload(
            dividend=self._dividend,
            divisor=self._divisor,
            quotient=self._quotient,
            remainder=self._remainder,
            steps_shown=shown,
            total_steps=len(self._steps),
            current_step=revealed[-1] if revealed else None,
            quotient_digits=digits,
            work_lines=_work_lines(revealed),
            show_result=phase is LongDivisionPhase.COMPLETE,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        return Cue.SUCCESS if phase is LongDivisionPhase.COMPLETE else None

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        if phase is LongDivisionPhase.SOLVING and on_beat(
            tick - phase_started_at, self._interval, count=len(self._steps)
        ):
            return Cue.POP
        return None

    def narration(self, phase: Enum) -> str:
        d, n = self._dividend, self._divisor
        if phase is LongDivisionPhase.SETUP:
            return (
                f"Let's divide {d} by {n}. We'll use the long division method: "
                "Divide, Multiply, Subtract, Bring down."
            )
        if phase is LongDivisionPhase.SOLVING:
            return "Divide, multiply, subtract, then bring down the next digit."
        if self._remainder > 0:
            return f"Done! The answer is {self._quotient} with a remainder of {self._remainder}."
        return f"Done! {d} ÷ {n} = {self._quotient} exactly!"

    def reset(self) -> None:
        return None
