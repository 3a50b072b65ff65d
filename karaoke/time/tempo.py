# karaoke/time/tempo.py
"""
TempoMap - piecewise-constant tempo over the beat axis, and beat <-> time conversion.

Segments are half-open ``[breakpoint_i, breakpoint_i+1)``. Before the first
breakpoint the default tempo (120 BPM) applies; after the last one the last
tempo extends forever.

Usage:
    tempos = TempoMap({0: 240.0, 16: 120.0})
    beat_to_time(2.5, tempos, BeatPosition(17))    # -> 7.0
    time_to_beat(2.5, tempos, 7.0)                 # -> 17.0
"""

from __future__ import annotations
from fractions import Fraction
from typing import Iterator, Tuple, Union

from ..core.beats import BeatPosition, Bpm, DEFAULT_BPM, RationalLike
from .breakpoints import BreakpointMap

SECONDS_PER_MINUTE = Fraction(60)


class TempoMap(BreakpointMap):
    """Beat position -> beats-per-minute."""

    def _check(self, key: BeatPosition, value) -> Bpm:
        super()._check(key, value)
        bpm = float(value)
        if not bpm > 0.0:
            raise ValueError(f"Tempo must be positive, got {value!r} at beat {key}")
        return bpm

    def tempo_at(self, pos: Union[BeatPosition, RationalLike]) -> Bpm:
        pos = pos if isinstance(pos, BeatPosition) else BeatPosition(pos)
        found = self.last_at_or_before(pos)
        return DEFAULT_BPM if found is None else found[1]


def seconds_per_beat(bpm: Bpm) -> Fraction:
    """Exact seconds-per-beat for a float tempo."""
    return SECONDS_PER_MINUTE / Fraction(bpm)


def _segments(tempo_map) -> Iterator[Tuple[BeatPosition, Bpm]]:
    """Segment starts with their tempo, beginning with the implicit default at zero."""
    yield BeatPosition.zero(), DEFAULT_BPM
    yield from TempoMap.coerce(tempo_map)


def elapsed_seconds(tempo_map, pos: Union[BeatPosition, RationalLike]) -> Fraction:
    """
    Exact seconds from beat zero to ``pos``, without the lead-in offset.

    Walks the tempo segments from the start, accumulating the elapsed time of
    each segment until ``pos`` falls inside the current one.
    """
    pos = pos if isinstance(pos, BeatPosition) else BeatPosition(pos)

    segments = _segments(tempo_map)
    start, bpm = next(segments)
    elapsed = Fraction(0)
    for next_start, next_bpm in segments:
        if pos <= next_start:
            break
        elapsed += (next_start - start).value * seconds_per_beat(bpm)
        start, bpm = next_start, next_bpm
    return elapsed + (pos - start).value * seconds_per_beat(bpm)


def beat_to_time(offset: float, tempo_map, pos: Union[BeatPosition, RationalLike]) -> float:
    """Wall-clock time (seconds) at which beat ``pos`` is reached."""
    return float(offset) + float(elapsed_seconds(tempo_map, pos))


def time_to_beat(offset: float, tempo_map, time: float) -> float:
    """
    Beat reached at wall-clock ``time`` (seconds). Inverse of ``beat_to_time``.

    The same breakpoints are converted to elapsed wall time; the segment
    containing ``time`` is found and the linear relation inverted inside it.
    """
    target = Fraction(float(time)) - Fraction(float(offset))

    segments = _segments(tempo_map)
    start, bpm = next(segments)
    start_time = Fraction(0)
    for next_start, next_bpm in segments:
        end_time = start_time + (next_start - start).value * seconds_per_beat(bpm)
        if target <= end_time:
            break
        start, bpm, start_time = next_start, next_bpm, end_time
    return float(start.value + (target - start_time) / seconds_per_beat(bpm))
