from __future__ import annotations

from enum import StrEnum

from walkthrough_engine.effects import Cue, EffectDispatcher
from walkthrough_engine.sequencer import PhaseChange


class P(StrEnum):
    SETUP = "setup"
    WORK = "work"
    COMPLETE = "complete"


class RecordingAudio:
    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, cue: str) -> None:
        self.played.append(str(cue))


def _dispatcher(log: list[str]) -> tuple[EffectDispatcher, RecordingAudio]:
    audio = RecordingAudio()
    cues = {P.WORK: Cue.POP, P.COMPLETE: Cue.SUCCESS}
    d = EffectDispatcher(
        audio=audio,
        cue_for=cues.get,
        on_phase_change=lambda phase: log.append(f"phase:{phase.value}"),
        on_complete=lambda: log.append("complete"),
    )
    return d, audio


def test_cue_then_phase_callback_then_completion() -> None:
    log: list[str] = []
    d, audio = _dispatcher(log)

    d.phase_changed(PhaseChange(P.SETUP, P.WORK, 3))
    d.phase_changed(PhaseChange(P.WORK, P.COMPLETE, 6))

    assert audio.played == ["pop", "success"]
    assert log == ["phase:work", "phase:complete", "complete"]
    assert d.completed


def test_completion_fires_exactly_once_until_reset() -> None:
    log: list[str] = []
    d, audio = _dispatcher(log)
    done = PhaseChange(P.WORK, P.COMPLETE, 6)

    d.phase_changed(done)
    d.phase_changed(done)
    assert log.count("complete") == 1
    assert audio.played == ["success"]

    d.reset()
    d.phase_changed(done)
    assert log.count("complete") == 2


def test_nothing_dispatched_while_paused_or_after_close() -> None:
    log: list[str] = []
    d, audio = _dispatcher(log)

    d.phase_changed(PhaseChange(P.SETUP, P.WORK, 3), paused=True)
    d.beat(Cue.POP, paused=True)
    assert audio.played == [] and log == []

    d.close()
    d.phase_changed(PhaseChange(P.WORK, P.COMPLETE, 6))
    d.beat(Cue.POP)
    assert audio.played == [] and log == []
    assert not d.completed


def test_beat_plays_cue() -> None:
    d, audio = _dispatcher([])
    d.beat(None)
    d.beat(Cue.CLICK)
    assert audio.played == ["click"]
