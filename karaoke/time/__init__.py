# karaoke/time/__init__.py
"""Time module - exact beat/time conversion, measures and metronome ticks."""

from .breakpoints import BreakpointMap
from .tempo import (
    TempoMap,
    beat_to_time,
    time_to_beat,
    elapsed_seconds,
)
from .measures import (
    MeasureMap,
    MeasureIterator,
    iterate_measures,
    measure_index_at,
)
from .metronome import (
    SoundEffect,
    BeatTimeIterator,
    iterate_beat_times,
    metronome_schedule,
)

__all__ = [
    'BreakpointMap',
    'TempoMap',
    'beat_to_time',
    'time_to_beat',
    'elapsed_seconds',
    'MeasureMap',
    'MeasureIterator',
    'iterate_measures',
    'measure_index_at',
    'SoundEffect',
    'BeatTimeIterator',
    'iterate_beat_times',
    'metronome_schedule',
]
