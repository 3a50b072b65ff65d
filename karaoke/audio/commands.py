# karaoke/audio/commands.py
"""
Audio commands (control thread -> audio thread).

Each command is a one-shot value drained in FIFO order at the start of the
next audio callback.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from ..time.metronome import SoundEffect
    from .sources import MusicSource


@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Seek:
    time: float


@dataclass(frozen=True)
class LoadMusic:
    """Install a decoded music source. ``source`` is decoded on the sending side."""
    path: str
    source: Optional[MusicSource] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class SetSoundEffectVolume:
    volume: float


@dataclass(frozen=True)
class SetSoundEffectSchedules:
    """Replace the pending tone schedule. The iterator is consumed by the audio thread."""
    schedule: Iterator[SoundEffect] = field(compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'schedule', iter(self.schedule))


AudioCommand = Union[
    Play,
    Pause,
    Seek,
    LoadMusic,
    SetVolume,
    SetSoundEffectVolume,
    SetSoundEffectSchedules,
]
