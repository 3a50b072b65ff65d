# karaoke/__init__.py
"""
Karaoke score-editor playback core.

Core components:
- BeatPosition / BeatLength: exact rational beat arithmetic
- TempoMap / MeasureMap: piecewise-constant tempo and measure length
- iterate_beat_times: metronome tick generator
- AudioEngine (karaoke.audio.engine): real-time music + metronome mixing
"""

from .core import (
    BeatPosition,
    BeatLength,
    EditorConfig,
    AudioConfig,
    MetronomeConfig,
    KaraokeError,
    AudioError,
)

from .time import (
    TempoMap,
    MeasureMap,
    beat_to_time,
    time_to_beat,
    iterate_measures,
    iterate_beat_times,
    metronome_schedule,
    SoundEffect,
)

__version__ = "0.1.0"

__all__ = [
    'BeatPosition',
    'BeatLength',
    'EditorConfig',
    'AudioConfig',
    'MetronomeConfig',
    'KaraokeError',
    'AudioError',
    'TempoMap',
    'MeasureMap',
    'beat_to_time',
    'time_to_beat',
    'iterate_measures',
    'iterate_beat_times',
    'metronome_schedule',
    'SoundEffect',
]
