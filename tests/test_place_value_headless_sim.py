from __future__ import annotations

from dataclasses import dataclass

from walkthrough_engine.registry import build_session
from walkthrough_engine.session import SessionOptions, SessionState


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


class RecordingAudio:
    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, cue: str) -> None:
        self.played.append(str(cue))


def test_headless_carry_plays_carry_cue() -> None:
    audio = RecordingAudio()
    session = build_session(
        variant="place-value",
        operands=(47, 35),
        flags={"operation": "addition"},
        clock=FakeClock(),
        audio=audio,
        options=SessionOptions(show_solution=True),
    )
    while session.tick():
        pass

    assert audio.played == ["click", "click", "carry", "click", "click", "success"]
    assert session.snapshot().narration == "47 + 35 = 82"


def test_headless_pause_delays_borrow_without_losing_it() -> None:
    clock = FakeClock()
    audio = RecordingAudio()
    session = build_session(
        variant="place-value",
        operands=(52, 28),
        flags={"operation": "subtraction"},
        clock=clock,
        audio=audio,
        options=SessionOptions(show_solution=True),
    )
    for _ in range(10):
        session.tick()
    session.set_paused(True)
    for _ in range(50):
        session.tick()
    assert session.tick_state.current_tick == 10
    assert audio.played == ["click"]

    session.set_paused(False)
    while session.tick():
        pass
    assert audio.played == ["click", "borrow", "click", "click", "click", "success"]
    assert session.state is SessionState.COMPLETE
