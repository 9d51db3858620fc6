"""Walkthrough variants and the session builder.

``WALKTHROUGHS`` maps a variant key (``"fair-sharing"``) to the class that
builds it. ``PROBLEM_TYPES`` maps curriculum problem types onto a variant plus
the flags that variant needs, so a host can go straight from a generated
problem to a running walkthrough.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .clock import Clock
from .derived import ProblemParameters, Walkthrough
from .derivative import DerivativeWalkthrough
from .effects import AudioSink
from .errors import ConfigurationError
from .factoring import FactoringWalkthrough
from .fair_sharing import FairSharingWalkthrough
from .fraction_operation import FractionOperationWalkthrough
from .limits import LimitWalkthrough
from .long_division import LongDivisionWalkthrough
from .place_value import PlaceValueWalkthrough
from .session import SessionController, SessionOptions

WALKTHROUGHS: Mapping[str, Callable[[ProblemParameters, float], Walkthrough]] = MappingProxyType(
    {
        "fair-sharing": FairSharingWalkthrough,
        "long-division": LongDivisionWalkthrough,
        "fraction-operation": FractionOperationWalkthrough,
        "factoring": FactoringWalkthrough,
        "limit": LimitWalkthrough,
        "derivative": DerivativeWalkthrough,
        "place-value": PlaceValueWalkthrough,
    }
)


@dataclass(frozen=True, slots=True)
class ProblemType:
    variant: str
    hint: str
    flags: Mapping[str, str] = field(default_factory=dict)


def _pt(variant: str, hint: str, **flags: str) -> ProblemType:
    return ProblemType(variant=variant, hint=hint, flags=MappingProxyType(dict(flags)))


PROBLEM_TYPES: Mapping[str, ProblemType] = MappingProxyType(
    {
        "vertical_addition_2digit_no_carry": _pt(
            "place-value", "Line up the ones. Add ones, then tens.", operation="addition"
        ),
        "vertical_addition_2digit_with_carry": _pt(
            "place-value", "Add the ones first. If 10 or more, carry to tens!", operation="addition"
        ),
        "vertical_addition_3digit": _pt(
            "place-value", "Start with ones, then tens, then hundreds. Carry if needed.", operation="addition"
        ),
        "vertical_subtraction_2digit_no_borrow": _pt(
            "place-value", "Subtract ones, then tens. Easy when no borrowing!", operation="subtraction"
        ),
        "vertical_subtraction_2digit_with_borrow": _pt(
            "place-value", "Can you subtract the ones? If not, borrow from tens!", operation="subtraction"
        ),
        "vertical_subtraction_3digit": _pt(
            "place-value", "Start with ones. Borrow if needed from the next place.", operation="subtraction"
        ),
        "division_intro": _pt("fair-sharing", "Division means sharing equally into groups."),
        "division_exact": _pt("fair-sharing", "How many groups of this size can you make?"),
        "division_with_remainder": _pt("fair-sharing", "Divide, and what's left over is the remainder."),
        "division_2digit_by_1digit": _pt("long-division", "How many times does it go into the first digit?"),
        "division_3digit_by_1digit": _pt(
            "long-division", "Divide step by step: divide, multiply, subtract, bring down."
        ),
        "fraction_addition": _pt(
            "fraction-operation", "Same-size pieces first, then add the numerators.", operation="addition"
        ),
        "fraction_subtraction": _pt(
            "fraction-operation", "Same-size pieces first, then subtract the numerators.", operation="subtraction"
        ),
        "fraction_multiplication": _pt(
            "fraction-operation", "Multiply across: tops together, bottoms together.", operation="multiplication"
        ),
        "fraction_division": _pt("fraction-operation", "Keep, change, flip!", operation="division"),
        "factor_trinomial_leading_1": _pt("factoring", "Find two numbers that multiply to c and add to b."),
        "factor_trinomial_leading_a": _pt("factoring", "Find two numbers that multiply to ac and add to b."),
        "limits": _pt("limit", "What value does f(x) get close to?", side="both"),
        "one_sided_limits": _pt("limit", "Approach from one side only.", side="left"),
        "derivatives": _pt("derivative", "Shrink the secant until it becomes the tangent."),
    }
)


def variants() -> tuple[str, ...]:
    return tuple(WALKTHROUGHS)


def variant_for(problem_type: str) -> ProblemType:
    try:
        return PROBLEM_TYPES[problem_type]
    except KeyError:
        raise ConfigurationError(
            f"unknown problem type {problem_type!r}", {"problem_type": problem_type}
        ) from None


def build_session(
    *,
    variant: str,
    operands: Sequence[float],
    flags: Mapping[str, str] | None = None,
    clock: Clock,
    audio: AudioSink | None = None,
    options: SessionOptions | None = None,
    on_complete: Callable[[], None] | None = None,
    on_phase_change: Callable[[Enum], None] | None = None,
) -> SessionController:
    """Wire a :class:`SessionController` for one problem of the given variant.

    Unknown variants are a programmer error (``ConfigurationError``). Bad
    operands are not: the returned session is simply in the ``invalid`` state.
    """

    try:
        factory = WALKTHROUGHS[variant]
    except KeyError:
        raise ConfigurationError(
            f"unknown walkthrough variant {variant!r}",
            {"variant": variant, "known": list(WALKTHROUGHS)},
        ) from None

    params = ProblemParameters(operands=tuple(operands), flags=dict(flags or {}))
    return SessionController(
        factory=factory,
        params=params,
        clock=clock,
        audio=audio,
        options=options,
        on_phase_change=on_phase_change,
        on_complete=on_complete,
    )


def build_session_for_problem(
    problem_type: str,
    operands: Sequence[float],
    *,
    clock: Clock,
    **kwargs: object,
) -> SessionController:
    entry = variant_for(problem_type)
    flags = dict(entry.flags)
    extra = kwargs.pop("flags", None)
    if extra:
        flags.update(extra)  # type: ignore[arg-type]
    return build_session(variant=entry.variant, operands=operands, flags=flags, clock=clock, **kwargs)  # type: ignore[arg-type]
