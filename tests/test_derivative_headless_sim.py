from __future__ import annotations

from dataclasses import dataclass

from walkthrough_engine.registry import build_session
from walkthrough_engine.session import SessionOptions


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


def test_headless_derivative_secant_shrinks_then_tangent() -> None:
    audio = RecordingAudio()
    session = build_session(
        variant="derivative",
        operands=(1, 0, 0, 1),
        clock=FakeClock(),
        audio=audio,
        options=SessionOptions(show_solution=True),
    )
    widths = []
    while session.tick():
        if session.phase.value == "approach":
            widths.append(session.payload.delta_x)

    assert widths[0] == 2.0
    assert widths == sorted(widths, reverse=True)
    assert audio.played == ["pop", "whoosh", "pop", "pop", "pop", "whoosh", "pop", "success"]
    final = session.snapshot().payload
    assert final.tangent_slope == 2
    assert final.secant_slope is None
