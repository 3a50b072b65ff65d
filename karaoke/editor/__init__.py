# karaoke/editor/__init__.py
"""Editor-side helpers: score timing, playback control, display strings, tap tempo."""

from .score import ScoreTiming
from .playback import PlaybackController, PlaybackPosition
from .formatting import format_time, format_beat_position, beat_label
from .tap_tempo import Linest, LinestResult, BpmDetector

__all__ = [
    'ScoreTiming',
    'PlaybackController',
    'PlaybackPosition',
    'format_time',
    'format_beat_position',
    'beat_label',
    'Linest',
    'LinestResult',
    'BpmDetector',
]
