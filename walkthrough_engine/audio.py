"""Pygame mixer audio sink.

Every cue is synthesised from generated 16-bit mono PCM at startup, so no
audio assets are needed. If the mixer cannot be initialised (no audio device,
dummy SDL driver) the sink stays silent.
"""

from __future__ import annotations

import logging
import math
from array import array

import pygame

from .effects import Cue

logger = logging.getLogger(__name__)


class PygameAudioSink:
    _sample_rate = 22050
    _amp = 32767

    def __init__(self, *, volume: float = 0.8) -> None:
        self._available = False
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._channel: pygame.mixer.Channel | None = None

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            self._sounds = self._build_cues()
            for sound in self._sounds.values():
                sound.set_volume(max(0.0, min(1.0, float(volume))))
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except pygame.error as exc:
            logger.warning("audio unavailable, cues will be silent: %s", exc)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def play(self, cue: str) -> None:
        if not self._available:
            return
        sound = self._sounds.get(str(cue))
        if sound is None:
            logger.debug("no sound for cue %r", cue)
            return
        assert self._channel is not None
        self._channel.play(sound)

    def stop(self) -> None:
        if self._available and self._channel is not None:
            self._channel.stop()

    def _build_cues(self) -> dict[str, pygame.mixer.Sound]:
        pcm: dict[str, array[int]] = {
            Cue.POP: self._render_tone_pcm(880.0, 0.06, gain=0.35, decay=18.0),
            Cue.DING: self._render_tone_pcm(1320.0, 0.22, gain=0.30, decay=9.0),
            Cue.WHOOSH: self._render_sweep_pcm(260.0, 1100.0, 0.25, gain=0.22),
            Cue.CLICK: self._render_tone_pcm(1800.0, 0.02, gain=0.30),
            Cue.SUCCESS: self._concat_pcm(
                (
                    self._render_tone_pcm(523.25, 0.10, gain=0.30),
                    self._render_tone_pcm(659.25, 0.10, gain=0.30),
                    self._render_tone_pcm(783.99, 0.22, gain=0.32, decay=6.0),
                )
            ),
            Cue.BORROW: self._concat_pcm(
                (
                    self._render_tone_pcm(660.0, 0.08, gain=0.30),
                    self._render_silence_pcm(0.015),
                    self._render_tone_pcm(440.0, 0.12, gain=0.30),
                )
            ),
            Cue.CARRY: self._concat_pcm(
                (
                    self._render_tone_pcm(440.0, 0.08, gain=0.30),
                    self._render_silence_pcm(0.015),
                    self._render_tone_pcm(660.0, 0.12, gain=0.30),
                )
            ),
        }
        return {str(name): pygame.mixer.Sound(buffer=data.tobytes()) for name, data in pcm.items()}

    def _envelope(self, idx: int, sample_count: int, fade_n: int, decay: float) -> float:
        envelope = 1.0
        if idx < fade_n:
            envelope = idx / float(fade_n)
        tail = sample_count - idx - 1
        if tail < fade_n:
            envelope = min(envelope, tail / float(fade_n))
        if decay > 0.0:
            envelope *= math.exp(-decay * idx / float(self._sample_rate))
        return max(0.0, envelope)

    def _render_tone_pcm(
        self, frequency_hz: float, duration_s: float, *, gain: float, decay: float = 0.0
    ) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.008))
        out = array("h")
        for idx in range(sample_count):
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(self._sample_rate)
            sample = math.sin(phase) * gain * self._envelope(idx, sample_count, fade_n, decay)
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out

    def _render_sweep_pcm(self, start_hz: float, end_hz: float, duration_s: float, *, gain: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.03))
        out = array("h")
        phase = 0.0
        for idx in range(sample_count):
            frac = idx / float(sample_count)
            freq = start_hz + (end_hz - start_hz) * frac
            phase += 2.0 * math.pi * freq / float(self._sample_rate)
            sample = math.sin(phase) * gain * self._envelope(idx, sample_count, fade_n, 0.0)
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out

    def _render_silence_pcm(self, duration_s: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        return array("h", [0] * sample_count)

    @staticmethod
    def _concat_pcm(parts: tuple[array[int], ...]) -> array[int]:
        out = array("h")
        for part in parts:
            out.extend(part)
        return out
