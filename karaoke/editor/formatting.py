# karaoke/editor/formatting.py
"""Display strings for times and beat positions."""

from __future__ import annotations
import math

from ..core.beats import BeatPosition
from ..time.measures import measure_index_at


def format_time(seconds: float) -> str:
    """``m:ss.mmm``, rounded to the nearest millisecond."""
    millis = int((max(0.0, seconds) + 0.0005) * 1000)
    return f"{millis // 60000}:{millis % 60000 // 1000:02}.{millis % 1000:03}"


def format_beat_position(pos: BeatPosition) -> str:
    """Whole beats plus any fractional remainder, e.g. ``7+1/2``."""
    whole = math.trunc(pos.value)
    fract = pos.value - whole
    if fract == 0:
        return str(whole)
    return f"{whole}+{fract}"


def beat_label(measure_map, pos: BeatPosition, playing: bool = False) -> str:
    """
    ``measure:beat`` label for the status bar.

    The measure index counts from the start of the piece and does not restart
    at a measure-length breakpoint: with ``{16: 3}``, beat 20.5 is ``5:1+1/2``
    rather than ``1:1+1/2``.

    While playing only the whole beat inside the measure is shown; when the
    cursor is parked the exact fractional beat is.
    """
    index, start, _ = measure_index_at(measure_map, pos)
    in_measure = BeatPosition((pos - start).value)
    if playing:
        return f"{index}:{in_measure.floor()}"
    return f"{index}:{format_beat_position(in_measure)}"
