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


def test_headless_limit_never_evaluates_at_the_hole() -> None:
    session = build_session(
        variant="limit",
        operands=(2, 4),
        flags={"side": "both"},
        clock=FakeClock(),
        options=SessionOptions(show_solution=True),
    )
    xs = []
    while session.tick():
        xs.append(session.payload.approach_x)

    assert session.tick_state.current_tick == 220
    assert 2.0 not in xs
    final = session.snapshot().payload
    assert final.left_limit == final.right_limit == 4
    assert final.show_result


def test_headless_speed_only_changes_real_time() -> None:
    runs = []
    for speed in (1.0, 2.0):
        session = build_session(
            variant="limit",
            operands=(2, 4),
            flags={"side": "right"},
            clock=FakeClock(),
            options=SessionOptions(show_solution=True, speed=speed),
        )
        phases = []
        while session.tick():
            phases.append((session.tick_state.current_tick, session.phase))
        runs.append(phases)

    assert runs[0] == runs[1]


def test_headless_huge_a_shows_invalid_panel_instead_of_ticking() -> None:
    session = build_session(
        variant="limit",
        operands=(1e17, 0),
        flags={"side": "left"},
        clock=FakeClock(),
        options=SessionOptions(show_solution=True),
    )
    assert session.state is SessionState.INVALID
    assert not session.tick()
    assert "too large" in session.snapshot().invalid_reason
