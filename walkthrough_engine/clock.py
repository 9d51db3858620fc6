from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic clock abstraction.

    Tick logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class TickClock:
    """Fixed-period tick source for one walkthrough instance.

    The host calls :meth:`pump` once per frame; every whole period elapsed since
    the previous pump counts as one timer firing. Pausing does not stop the
    timer: firings keep happening at the same cadence but are not delivered, so
    everything downstream stays expressed in delivered ticks only.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        on_tick: Callable[[], None],
        max_catchup_ticks: int = 5,
    ) -> None:
        if max_catchup_ticks < 1:
            raise ConfigurationError("max_catchup_ticks must be >= 1")
        self._clock = clock
        self._on_tick = on_tick
        self._max_catchup_ticks = int(max_catchup_ticks)

        self._period_s: float | None = None
        self._running = False
        self._paused = False
        self._last_pump_at_s = 0.0
        self._accumulator_s = 0.0
        self._fired = 0
        self._delivered = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def period_ms(self) -> float | None:
        return None if self._period_s is None else self._period_s * 1000.0

    @property
    def fired(self) -> int:
        """Timer firings since the last start, delivered or not."""
        return self._fired

    @property
    def delivered(self) -> int:
        return self._delivered

    def start(self, period_ms: float) -> None:
        if self._running:
            raise RuntimeError("TickClock already started")
        if not period_ms > 0:
            raise ConfigurationError("period_ms must be > 0", {"period_ms": period_ms})
        self._period_s = float(period_ms) / 1000.0
        self._running = True
        self._last_pump_at_s = self._clock.now()
        self._accumulator_s = 0.0
        self._fired = 0
        self._delivered = 0
        logger.debug("tick clock started (period %.1f ms)", float(period_ms))

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._accumulator_s = 0.0
        logger.debug("tick clock stopped after %d firings", self._fired)

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def pump(self) -> int:
        """Fire once per whole period elapsed since the last pump.

        Returns the number of ticks delivered.
        """

        if not self._running:
            return 0
        assert self._period_s is not None

        now = self._clock.now()
        dt = now - self._last_pump_at_s
        self._last_pump_at_s = now
        if dt <= 0.0:
            return 0

        max_dt = self._period_s * self._max_catchup_ticks
        self._accumulator_s += min(dt, max_dt)

        delivered = 0
        while self._running and self._accumulator_s >= self._period_s:
            self._accumulator_s -= self._period_s
            if self.fire():
                delivered += 1
        return delivered

    def fire(self) -> bool:
        """One timer firing. Returns True when the tick was delivered."""

        # A callback already queued when stop() ran must not reach subscribers.
        if not self._running:
            return False
        self._fired += 1
        if self._paused:
            return False
        self._delivered += 1
        self._on_tick()
        return True
