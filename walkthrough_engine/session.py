"""Session controller: one running walkthrough per displayed problem.

The controller owns every piece of mutable state (tick counter, pause flag,
current phase, completion flag, stateful derived values) and is the only thing
the host talks to:

    host frame -> pump() -> TickClock firing -> _on_tick()
        1. TickState.current_tick += 1
        2. PhaseSequencer.evaluate(tick)
        3. Walkthrough.compute(phase, tick, phase_started_at)
        4. EffectDispatcher (phase cue, completion callback, beat cue)

Invalid problem parameters are caught at construction; the session then sits
in ``SessionState.INVALID`` and never starts its clock.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, StrEnum

from .clock import Clock, TickClock
from .derived import ProblemParameters, Walkthrough
from .effects import AudioSink, EffectDispatcher, SilentAudioSink
from .errors import ConfigurationError, InvalidProblemError
from .sequencer import PhaseSequencer
from .timeline import DEFAULT_TICK_PERIOD_MS, adjusted_period_ms

logger = logging.getLogger(__name__)

WalkthroughFactory = Callable[[ProblemParameters, float], Walkthrough]


class SessionState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"
    INVALID = "invalid"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class SessionOptions:
    show_solution: bool = False
    is_paused: bool = False
    tick_period_ms: float = DEFAULT_TICK_PERIOD_MS
    speed: float = 1.0

    def __post_init__(self) -> None:
        if not self.tick_period_ms > 0:
            raise ConfigurationError("tick_period_ms must be > 0", {"tick_period_ms": self.tick_period_ms})
        if not self.speed > 0:
            raise ConfigurationError("speed must be > 0", {"speed": self.speed})

    @property
    def timer_period_ms(self) -> int:
        """Real timer period after the speed multiplier."""
        return max(1, adjusted_period_ms(self.tick_period_ms, self.speed))


@dataclass(slots=True)
class TickState:
    current_tick: int = 0
    paused: bool = False


@dataclass(frozen=True, slots=True)
class WalkthroughSnapshot:
    """View model for the rendering layer (pure data)."""

    title: str
    state: SessionState
    phase: Enum | None
    tick: int
    ticks_in_phase: int
    progress: float
    narration: str
    payload: object | None = None
    invalid_reason: str | None = None


class SessionController:
    def __init__(
        self,
        *,
        factory: WalkthroughFactory,
        params: ProblemParameters,
        clock: Clock,
        audio: AudioSink | None = None,
        options: SessionOptions | None = None,
        on_phase_change: Callable[[Enum], None] | None = None,
        on_complete: Callable[[], None] | None = None,
        title: str = "",
    ) -> None:
        opts = options or SessionOptions()
        self._factory = factory
        self._options = opts
        self._audio: AudioSink = audio or SilentAudioSink()
        self._on_phase_change = on_phase_change
        self._on_complete = on_complete
        self._title = title

        self._tick_state = TickState(paused=bool(opts.is_paused))
        self._show_solution = False
        self._alive = True
        self._generation = 0

        self._clock = TickClock(clock=clock, on_tick=self._on_tick)
        if opts.is_paused:
            self._clock.pause()

        self._params = params
        self._walkthrough: Walkthrough | None = None
        self._sequencer: PhaseSequencer | None = None
        self._dispatcher: EffectDispatcher | None = None
        self._invalid: InvalidProblemError | None = None
        self._payload: object | None = None
        self._build()

        if opts.show_solution:
            self.set_show_solution(True)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        if not self._alive:
            return SessionState.CLOSED
        if self._invalid is not None:
            return SessionState.INVALID
        assert self._sequencer is not None
        if self._sequencer.finished:
            return SessionState.COMPLETE
        if self._clock.running:
            return SessionState.PAUSED if self._tick_state.paused else SessionState.RUNNING
        return SessionState.IDLE

    @property
    def tick_state(self) -> TickState:
        return TickState(current_tick=self._tick_state.current_tick, paused=self._tick_state.paused)

    @property
    def phase(self) -> Enum | None:
        return None if self._sequencer is None else self._sequencer.phase

    @property
    def completed(self) -> bool:
        return self._dispatcher is not None and self._dispatcher.completed

    @property
    def invalid_reason(self) -> str | None:
        return None if self._invalid is None else self._invalid.message

    @property
    def show_solution(self) -> bool:
        return self._show_solution

    @property
    def options(self) -> SessionOptions:
        return self._options

    @property
    def walkthrough(self) -> Walkthrough | None:
        return self._walkthrough

    @property
    def payload(self) -> object | None:
        return self._payload

    # ------------------------------------------------------------------
    # Host inputs
    # ------------------------------------------------------------------

    def set_show_solution(self, show: bool) -> None:
        show = bool(show)
        if show == self._show_solution or not self._alive:
            return
        self._show_solution = show
        self.reset()
        if show:
            self.start()

    def set_paused(self, paused: bool) -> None:
        paused = bool(paused)
        self._tick_state.paused = paused
        if paused:
            self._clock.pause()
        else:
            self._clock.resume()

    def set_problem(self, params: ProblemParameters) -> None:
        """Swap in new problem parameters; the run restarts from tick 0."""

        if not self._alive:
            return
        self._clock.stop()
        self._params = params
        self._build()
        self._generation += 1
        if self._show_solution:
            self.start()

    def start(self) -> bool:
        """Start ticking if armed. Returns True when the clock is running."""

        if not self._alive or self._invalid is not None or not self._show_solution:
            return False
        assert self._sequencer is not None
        if self._sequencer.finished:
            return False
        if not self._clock.running:
            self._clock.start(self._options.timer_period_ms)
            logger.info(
                "session %r started at tick %d",
                self._title or self._walkthrough_title(),
                self._tick_state.current_tick,
            )
        return True

    def stop(self) -> None:
        """Stop ticking without resetting progress."""
        self._clock.stop()

    def reset(self) -> None:
        self._clock.stop()
        self._tick_state.current_tick = 0
        self._generation += 1
        if self._walkthrough is not None:
            assert self._sequencer is not None and self._dispatcher is not None
            self._sequencer.reset()
            self._dispatcher.reset()
            self._walkthrough.reset()
            self._payload = self._compute()
        logger.info("session reset")

    def pump(self) -> int:
        return self._clock.pump()

    def tick(self) -> bool:
        """Deliver one timer firing (hosts that own their own timer)."""
        return self._clock.fire()

    def close(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self._clock.stop()
        if self._dispatcher is not None:
            self._dispatcher.close()
        logger.debug("session closed")

    def snapshot(self) -> WalkthroughSnapshot:
        title = self._title or self._walkthrough_title()
        if self._invalid is not None or self._walkthrough is None or self._sequencer is None:
            return WalkthroughSnapshot(
                title=title,
                state=self.state,
                phase=None,
                tick=0,
                ticks_in_phase=0,
                progress=0.0,
                narration="",
                payload=None,
                invalid_reason=self.invalid_reason,
            )

        tick = self._tick_state.current_tick
        total = self._sequencer.timeline.total_ticks
        progress = 1.0 if total <= 0 else min(1.0, tick / float(total))
        phase = self._sequencer.phase
        return WalkthroughSnapshot(
            title=title,
            state=self.state,
            phase=phase,
            tick=tick,
            ticks_in_phase=tick - self._sequencer.entered_at,
            progress=progress,
            narration=self._walkthrough.narration(phase),
            payload=self._payload,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build(self) -> None:
        self._tick_state.current_tick = 0
        if self._dispatcher is not None:
            self._dispatcher.close()
        try:
            walkthrough = self._factory(self._params, self._options.tick_period_ms)
        except InvalidProblemError as exc:
            logger.info("invalid problem %s: %s", list(self._params.operands), exc.message)
            self._walkthrough = None
            self._sequencer = None
            self._dispatcher = None
            self._payload = None
            self._invalid = exc
            return

        self._invalid = None
        self._walkthrough = walkthrough
        self._sequencer = PhaseSequencer(walkthrough.timeline)
        self._dispatcher = EffectDispatcher(
            audio=self._audio,
            cue_for=walkthrough.phase_cue,
            on_phase_change=self._on_phase_change,
            on_complete=self._on_complete,
        )
        self._payload = self._compute()

    def _compute(self) -> object:
        assert self._walkthrough is not None and self._sequencer is not None
        return self._walkthrough.compute(
            phase=self._sequencer.phase,
            tick=self._tick_state.current_tick,
            phase_started_at=self._sequencer.entered_at,
        )

    def _on_tick(self) -> None:
        if not self._alive or self._walkthrough is None:
            return
        assert self._sequencer is not None and self._dispatcher is not None

        self._tick_state.current_tick += 1
        tick = self._tick_state.current_tick
        generation = self._generation

        change = self._sequencer.evaluate(tick)
        self._payload = self._compute()
        phase = self._sequencer.phase
        beat = self._walkthrough.beat_cue(
            phase=phase,
            tick=tick,
            phase_started_at=self._sequencer.entered_at,
        )
        if self._sequencer.finished:
            self._clock.stop()

        paused = self._tick_state.paused
        if change is not None:
            self._dispatcher.phase_changed(change, paused=paused)
            # The completion callback may have reset or closed the session.
            if generation != self._generation or not self._alive:
                return
        self._dispatcher.beat(beat, paused=paused)

    def _walkthrough_title(self) -> str:
        if self._walkthrough is not None:
            return self._walkthrough.title
        return "Invalid problem"
