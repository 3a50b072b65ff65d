# karaoke/audio/state.py
"""Playback state published by the audio callback once per buffer."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class NotPlaying:
    pass


@dataclass(frozen=True)
class Playing:
    """
    Music time ``playback_time`` is heard at ``reference_instant``.

    ``reference_instant`` is on the ``time.perf_counter()`` clock and already
    includes the output latency reported by the device.
    """
    reference_instant: float
    playback_time: float


PlaybackState = Union[NotPlaying, Playing]

NOT_PLAYING = NotPlaying()


def extrapolate_position(state: PlaybackState, now: float) -> Optional[float]:
    """
    Current music time, or None when stopped.

    ``now`` may be earlier than the reference instant (the buffer has not hit
    the speaker yet), giving a small negative correction.
    """
    if not isinstance(state, Playing):
        return None
    return state.playback_time + (now - state.reference_instant)
