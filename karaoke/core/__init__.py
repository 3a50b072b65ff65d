# karaoke/core/__init__.py
"""Core module - beat arithmetic, configuration, errors."""

from .beats import (
    BeatPosition,
    BeatLength,
    DEFAULT_BPM,
    Bpm,
    MeasureLength,
)
from .config import (
    AudioConfig,
    MetronomeConfig,
    EditorConfig,
)
from .errors import (
    KaraokeError,
    AudioError,
    DecodeError,
    ChannelDisconnected,
    ConfigLoadError,
)

__all__ = [
    'BeatPosition',
    'BeatLength',
    'DEFAULT_BPM',
    'Bpm',
    'MeasureLength',
    'AudioConfig',
    'MetronomeConfig',
    'EditorConfig',
    'KaraokeError',
    'AudioError',
    'DecodeError',
    'ChannelDisconnected',
    'ConfigLoadError',
]
