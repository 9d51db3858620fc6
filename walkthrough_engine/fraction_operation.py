"""Fraction addition, subtraction, multiplication and division.

Addition and subtraction with different denominators take the longer LCD
path (show the pieces, find the common denominator, convert both fractions,
then operate). Everything else uses the short three-step path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum

from .derived import ProblemParameters, lcd, reduce_fraction, require_choice, require_int, require_operands
from .effects import Cue
from .errors import InvalidProblemError
from .timeline import DEFAULT_TICK_PERIOD_MS, Timeline, ms_to_ticks

OPERATIONS: tuple[str, ...] = ("addition", "subtraction", "multiplication", "division")

OPERATION_SYMBOLS: dict[str, str] = {
    "addition": "+",
    "subtraction": "−",
    "multiplication": "×",
    "division": "÷",
}


class FractionPhase(StrEnum):
    SETUP = "setup"
    STEP1 = "step1"
    STEP2 = "step2"
    STEP3 = "step3"
    SHOW_ORIGINAL = "show_original"
    EXPLAIN_LCD = "explain_lcd"
    SHOW_MULTIPLIERS = "show_multipliers"
    CONVERT_FIRST = "convert_first"
    CONVERT_SECOND = "convert_second"
    SHOW_CONVERTED = "show_converted"
    OPERATE = "operate"
    COMPLETE = "complete"


SIMPLE_PATH: tuple[FractionPhase, ...] = (
    FractionPhase.SETUP,
    FractionPhase.STEP1,
    FractionPhase.STEP2,
    FractionPhase.STEP3,
    FractionPhase.COMPLETE,
)

LCD_PATH: tuple[FractionPhase, ...] = (
    FractionPhase.SETUP,
    FractionPhase.SHOW_ORIGINAL,
    FractionPhase.EXPLAIN_LCD,
    FractionPhase.SHOW_MULTIPLIERS,
    FractionPhase.CONVERT_FIRST,
    FractionPhase.CONVERT_SECOND,
    FractionPhase.SHOW_CONVERTED,
    FractionPhase.OPERATE,
    FractionPhase.COMPLETE,
)


@dataclass(frozen=True, slots=True)
class FractionTiming:
    step_interval_ms: float = 1200.0
    lcd_step_interval_ms: float = 1800.0


@dataclass(frozen=True, slots=True)
class LcdConversion:
    lcd: int
    multiplier1: int
    multiplier2: int
    numerator1: int
    numerator2: int


@dataclass(frozen=True, slots=True)
class FractionPayload:
    operation: str
    symbol: str
    first: tuple[int, int]
    second: tuple[int, int]
    conversion: LcdConversion | None
    first_shown: tuple[int, int]
    second_shown: tuple[int, int]
    step: int
    description: str | None
    result: tuple[int, int]
    show_result: bool


class FractionOperationWalkthrough:
    title = "Fraction Operation"

    def __init__(
        self,
        params: ProblemParameters,
        tick_period_ms: float = DEFAULT_TICK_PERIOD_MS,
        *,
        timing: FractionTiming | None = None,
    ) -> None:
        raw = require_operands(params, 4, names=("n1", "d1", "n2", "d2"))
        ops = params.operands
        operation = require_choice(params, "operation", "addition", OPERATIONS)
        if raw[1] == 0 or raw[3] == 0:
            raise InvalidProblemError(
                "Denominators cannot be zero. A fraction's denominator tells us how many equal"
                " parts the whole is divided into.",
                operands=ops,
                reason="zero_denominator",
            )
        n1 = require_int(raw[0], name="n1", operands=ops)
        d1 = require_int(raw[1], name="d1", operands=ops)
        n2 = require_int(raw[2], name="n2", operands=ops)
        d2 = require_int(raw[3], name="d2", operands=ops)
        if operation == "division" and n2 == 0:
            raise InvalidProblemError(
                f"When dividing by a fraction, the fraction cannot have a numerator of zero"
                f" (that would be 0/{d2} = 0).",
                operands=ops,
                reason="zero_divisor",
            )

        self._operation = operation
        self._first = (n1, d1)
        self._second = (n2, d2)
        self._needs_lcd = operation in ("addition", "subtraction") and d1 != d2
        self._conversion: LcdConversion | None = None
        if self._needs_lcd:
            common = lcd(d1, d2)
            m1, m2 = common // d1, common // d2
            self._conversion = LcdConversion(
                lcd=common, multiplier1=m1, multiplier2=m2, numerator1=n1 * m1, numerator2=n2 * m2
            )
        self._result = self._solve()
        self._descriptions = self._step_descriptions()

        t = timing or FractionTiming()
        if self._needs_lcd:
            path, interval_ms = LCD_PATH, t.lcd_step_interval_ms
        else:
            path, interval_ms = SIMPLE_PATH, t.step_interval_ms
        interval = ms_to_ticks(interval_ms, tick_period_ms)
        self._timeline = Timeline.from_thresholds([(phase, i * interval) for i, phase in enumerate(path)])

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def needs_lcd(self) -> bool:
        return self._needs_lcd

    @property
    def result(self) -> tuple[int, int]:
        return self._result

    def _solve(self) -> tuple[int, int]:
        (n1, d1), (n2, d2) = self._first, self._second
        op = self._operation
        if op in ("addition", "subtraction"):
            sign = 1 if op == "addition" else -1
            if d1 == d2:
                return reduce_fraction(n1 + sign * n2, d1)
            c = self._conversion
            assert c is not None
            return reduce_fraction(c.numerator1 + sign * c.numerator2, c.lcd)
        if op == "multiplication":
            return reduce_fraction(n1 * n2, d1 * d2)
        # Keep, change, flip.
        return reduce_fraction(n1 * d2, d1 * n2)

    def _step_descriptions(self) -> tuple[str, ...]:
        (n1, d1), (n2, d2) = self._first, self._second
        rn, rd = self._result
        op = self._operation
        if op in ("addition", "subtraction"):
            word, sym = ("add", "+") if op == "addition" else ("subtract", "-")
            if not self._needs_lcd:
                combined = n1 + n2 if op == "addition" else n1 - n2
                verb = "Add the numerators" if op == "addition" else "Subtract numerators"
                return ("Same denominators!", verb, f"{n1} {sym} {n2} = {combined}", "Simplify if needed")
            c = self._conversion
            assert c is not None
            return (
                f"Different denominators: {d1} and {d2}",
                f"We need same-size pieces to {word}!",
                f"Multiply each fraction to get {c.lcd} pieces",
                f"{n1}/{d1} × {c.multiplier1}/{c.multiplier1} = {c.numerator1}/{c.lcd}",
                f"{n2}/{d2} × {c.multiplier2}/{c.multiplier2} = {c.numerator2}/{c.lcd}",
                "Now both fractions have the same denominator!",
                f"{c.numerator1}/{c.lcd} {sym} {c.numerator2}/{c.lcd}",
                f"= {rn}/{rd}",
            )
        if op == "multiplication":
            return (
                "Multiply numerators",
                f"{n1} × {n2} = {n1 * n2}",
                "Multiply denominators",
                f"{d1} × {d2} = {d1 * d2}",
            )
        return ("Keep first fraction", "Change ÷ to ×", "Flip second fraction", "Now multiply!")

    def compute(self, *, phase: Enum, tick: int, phase_started_at: int) -> FractionPayload:
        step = self._timeline.index(phase)
        description = self._descriptions[step - 1] if step > 0 else None
        first_shown, second_shown = self._first, self._second

        c = self._conversion
        if c is not None:
            after_first = step >= LCD_PATH.index(FractionPhase.CONVERT_FIRST)
            after_second = step >= LCD_PATH.index(FractionPhase.CONVERT_SECOND)
            if after_first:
                first_shown = (c.numerator1, c.lcd)
            if after_second:
                second_shown = (c.numerator2, c.lcd)
        elif self._operation == "division" and phase in (FractionPhase.STEP3, FractionPhase.COMPLETE):
            second_shown = (self._second[1], self._second[0])

        return FractionPayload(
            operation=self._operation,
            symbol=OPERATION_SYMBOLS[self._operation],
            first=self._first,
            second=self._second,
            conversion=c,
            first_shown=first_shown,
            second_shown=second_shown,
            step=step,
            description=description,
            result=self._result,
            show_result=phase is FractionPhase.COMPLETE,
        )

    def phase_cue(self, phase: Enum) -> str | None:
        if phase is FractionPhase.COMPLETE:
            return Cue.SUCCESS
        if phase in (FractionPhase.CONVERT_FIRST, FractionPhase.CONVERT_SECOND):
            return Cue.WHOOSH
        return Cue.POP

    def beat_cue(self, *, phase: Enum, tick: int, phase_started_at: int) -> str | None:
        return None

    def narration(self, phase: Enum) -> str:
        (n1, d1), (n2, d2) = self._first, self._second
        if phase is FractionPhase.SETUP:
            sym = OPERATION_SYMBOLS[self._operation]
            return f"Let's work out {n1}/{d1} {sym} {n2}/{d2}."
        if phase is FractionPhase.COMPLETE:
            rn, rd = self._result
            return f"The answer is {rn}/{rd}."
        step = self._timeline.index(phase)
        return self._descriptions[step - 1]

    def reset(self) -> None:
        return None
