"""Declarative phase timelines.

A timeline is built once per walkthrough from its problem parameters and is
never mutated afterwards. Thresholds are expressed in delivered ticks, so a
paused session resumes against exactly the same schedule.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigurationError

INITIAL_PHASE_VALUE = "setup"
TERMINAL_PHASE_VALUE = "complete"

DEFAULT_TICK_PERIOD_MS = 100.0

# Pacing shared by all walkthroughs, in milliseconds.
TIMING: dict[str, int] = {
    "slow": 800,
    "medium": 500,
    "fast": 200,
    "phase_delay": 1000,
    "start_delay": 500,
    "complete_delay": 500,
}

SPEED_MULTIPLIERS: dict[str, float] = {
    "slow": 0.5,
    "normal": 1.0,
    "fast": 1.5,
    "fastest": 2.0,
}


def adjusted_period_ms(base_ms: float, speed: float = 1.0) -> int:
    """Tick period after applying a playback speed multiplier."""

    if speed <= 0:
        raise ConfigurationError("speed must be > 0", {"speed": speed})
    return int(round(float(base_ms) / float(speed)))


def ms_to_ticks(ms: float, period_ms: float) -> int:
    """Convert a delay to whole ticks (never less than one)."""

    if period_ms <= 0:
        raise ConfigurationError("period_ms must be > 0", {"period_ms": period_ms})
    return max(1, int(round(float(ms) / float(period_ms))))


@dataclass(frozen=True, slots=True)
class PhaseSpec:
    phase: Enum
    at_tick: int
    # Optional extra gate; the phase starts once both the threshold and guard hold.
    guard: Callable[[], bool] | None = None


class Timeline:
    """Ordered Phase -> activation tick table ending in ``complete``."""

    def __init__(self, specs: Iterable[PhaseSpec]) -> None:
        items = tuple(specs)
        _validate(items)
        self._specs = items
        self._index = {spec.phase: i for i, spec in enumerate(items)}

    @classmethod
    def from_thresholds(cls, pairs: Iterable[tuple[Enum, int]]) -> "Timeline":
        return cls(PhaseSpec(phase=phase, at_tick=int(at)) for phase, at in pairs)

    @classmethod
    def from_durations(cls, pairs: Iterable[tuple[Enum, int]]) -> "Timeline":
        """Build from ticks spent in each phase; the terminal duration is ignored."""

        specs: list[PhaseSpec] = []
        at = 0
        items = list(pairs)
        for i, (phase, duration) in enumerate(items):
            is_last = i == len(items) - 1
            if not is_last and int(duration) <= 0:
                raise ConfigurationError(
                    f"duration of phase {phase.value!r} must be > 0",
                    {"phase": phase.value, "duration": duration},
                )
            specs.append(PhaseSpec(phase=phase, at_tick=at))
            at += int(duration)
        return cls(specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self):
        return iter(self._specs)

    def __contains__(self, phase: object) -> bool:
        return phase in self._index

    @property
    def phases(self) -> tuple[Enum, ...]:
        return tuple(spec.phase for spec in self._specs)

    @property
    def initial(self) -> Enum:
        return self._specs[0].phase

    @property
    def terminal(self) -> Enum:
        return self._specs[-1].phase

    @property
    def total_ticks(self) -> int:
        return self._specs[-1].at_tick

    def spec_at(self, index: int) -> PhaseSpec:
        return self._specs[index]

    def index(self, phase: Enum) -> int:
        try:
            return self._index[phase]
        except KeyError:
            raise KeyError(f"phase {phase!r} not in timeline") from None

    def threshold(self, phase: Enum) -> int:
        return self._specs[self.index(phase)].at_tick


def is_terminal(phase: Enum) -> bool:
    return phase.value == TERMINAL_PHASE_VALUE


def _validate(specs: tuple[PhaseSpec, ...]) -> None:
    if not specs:
        raise ConfigurationError("timeline must contain at least one phase")

    first = specs[0]
    if first.at_tick != 0:
        raise ConfigurationError(
            "first phase must start at tick 0",
            {"phase": first.phase.value, "at_tick": first.at_tick},
        )

    seen: set[Enum] = set()
    prev: PhaseSpec | None = None
    for i, spec in enumerate(specs):
        if spec.phase in seen:
            raise ConfigurationError(f"duplicate phase {spec.phase.value!r}", {"phase": spec.phase.value})
        seen.add(spec.phase)
        if spec.at_tick < 0:
            raise ConfigurationError("thresholds must be non-negative", {"phase": spec.phase.value})
        if prev is not None and spec.at_tick <= prev.at_tick:
            raise ConfigurationError(
                "thresholds must be strictly increasing",
                {
                    "phase": spec.phase.value,
                    "at_tick": spec.at_tick,
                    "previous_phase": prev.phase.value,
                    "previous_at_tick": prev.at_tick,
                },
            )
        if is_terminal(spec.phase) and i != len(specs) - 1:
            raise ConfigurationError("'complete' must be the last phase", {"index": i})
        prev = spec

    if not is_terminal(specs[-1].phase):
        raise ConfigurationError(
            "last phase must be 'complete'",
            {"last_phase": specs[-1].phase.value},
        )
