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


def test_headless_factoring_ends_on_the_matching_pair() -> None:
    audio = RecordingAudio()
    done = []
    session = build_session(
        variant="factoring",
        operands=(1, 7, 12),
        clock=FakeClock(),
        audio=audio,
        options=SessionOptions(show_solution=True),
        on_complete=lambda: done.append(True),
    )
    while session.tick():
        pass

    assert session.tick_state.current_tick == 115
    assert done == [True]
    # analyze, six pairs, verify; complete itself is silent
    assert audio.played == ["whoosh"] + ["pop"] * 5 + ["success", "whoosh"]
    snap = session.snapshot()
    assert [str(f) for f in snap.payload.factors] == ["(x + 3)", "(x + 4)"]
    assert snap.narration == "The factors are (x + 3) and (x + 4)."


def test_headless_not_factorable() -> None:
    session = build_session(
        variant="factoring",
        operands=(1, 1, 1),
        clock=FakeClock(),
        options=SessionOptions(show_solution=True),
    )
    seen = set()
    while session.tick():
        seen.add(session.phase.value)

    assert "not_factorable" in seen
    assert "verify" not in seen
    assert session.state is SessionState.COMPLETE
