# karaoke/audio/effects.py
"""
Sound effects - synthesized metronome tones and the voices that play them.
"""

from __future__ import annotations
from typing import List
import numpy as np

CLICK_DURATION = 0.05


def synthesize_tone(
    frequency: float,
    duration: float = CLICK_DURATION,
    sample_rate: int = 44100,
    amplitude: float = 1.0,
) -> np.ndarray:
    """Mono sine burst, float32."""
    n = int(round(sample_rate * duration))
    t = np.arange(n, dtype=np.float64) / sample_rate
    return (np.sin(2 * np.pi * frequency * t) * amplitude).astype(np.float32)


class ToneVoice:
    """
    A tone waiting for (or in the middle of) playback.

    ``delay`` counts frames of silence before the tone starts, measured from
    the start of the next block it is mixed into. The mono tone is copied to
    every output channel.
    """

    __slots__ = ('tone', 'delay', 'position')

    def __init__(self, tone: np.ndarray, delay: int = 0):
        self.tone = tone
        self.delay = max(0, int(delay))
        self.position = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.tone)

    def mix_into(self, block: np.ndarray):
        frames = block.shape[0]
        if self.delay >= frames:
            self.delay -= frames
            return
        start = self.delay
        self.delay = 0
        n = min(frames - start, len(self.tone) - self.position)
        if n > 0:
            block[start:start + n] += self.tone[self.position:self.position + n, np.newaxis]
            self.position += n


class EffectMixer:
    """The set of currently sounding tones."""

    def __init__(self, max_voices: int = 32):
        self.max_voices = max_voices
        self._voices: List[ToneVoice] = []

    @property
    def full(self) -> bool:
        return len(self._voices) >= self.max_voices

    def add(self, voice: ToneVoice) -> bool:
        """Start ``voice``. Returns False, and never evicts, when all voices are busy."""
        if self.full:
            return False
        self._voices.append(voice)
        return True

    def drop_exhausted(self):
        self._voices = [v for v in self._voices if not v.exhausted]

    def clear(self):
        self._voices.clear()

    def mix_into(self, block: np.ndarray):
        for voice in self._voices:
            voice.mix_into(block)

    @property
    def voice_count(self) -> int:
        return len(self._voices)
