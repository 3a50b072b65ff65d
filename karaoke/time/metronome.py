# karaoke/time/metronome.py
"""
Metronome scheduling - one tick per integer beat, with wall-clock times.

Tempo and measure iteration are interleaved here: each step advances exactly
one beat, crossing any tempo breakpoints that fall strictly inside it so the
beat's duration is accurate even when the tempo changes mid-beat.

Usage:
    ticks = iterate_beat_times(offset, measures, tempos, BeatPosition(11))
    schedule = metronome_schedule(ticks)
    engine.command_sender().send(SetSoundEffectSchedules(schedule))
"""

from __future__ import annotations
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple, Union

from ..core.beats import BeatLength, BeatPosition, RationalLike
from .measures import MeasureIterator
from .tempo import TempoMap, elapsed_seconds, seconds_per_beat

Tick = Tuple[bool, float]

DOWNBEAT_FREQUENCY = 1244.51
BEAT_FREQUENCY = 739.99


@dataclass(frozen=True)
class SoundEffect:
    """One scheduled tone: fire at ``time`` seconds with ``frequency`` Hz."""
    time: float
    frequency: float


class BeatTimeIterator:
    """
    Infinite iterator of ``(is_first_beat_of_measure, time)``.

    Starts at ``ceil(start_beat)``. Holds a cursor into the measure sequence
    and one into the tempo breakpoints; restart by building a new iterator.
    """

    def __init__(self, offset: float, measure_map, tempo_map,
                 start_beat: Union[BeatPosition, RationalLike] = 0):
        if not isinstance(start_beat, BeatPosition):
            start_beat = BeatPosition(start_beat)
        tempo_map = TempoMap.coerce(tempo_map)

        self._offset = float(offset)
        self._beat = BeatPosition(start_beat.ceil())
        self._elapsed = elapsed_seconds(tempo_map, self._beat)

        self._tempo_points = tempo_map.items()
        self._tempo_index = bisect_right(tempo_map.keys(), self._beat)
        self._bpm = tempo_map.tempo_at(self._beat)

        self._measures = MeasureIterator(measure_map)
        self._measure_start, self._measure_end = next(self._measures)

    def __iter__(self) -> BeatTimeIterator:
        return self

    def __next__(self) -> Tick:
        beat = self._beat
        while self._measure_end <= beat:
            self._measure_start, self._measure_end = next(self._measures)
        tick = (self._measure_start == beat, self._offset + float(self._elapsed))

        self._advance(beat + BeatLength.one())
        return tick

    def _advance(self, target: BeatPosition):
        cursor = self._beat
        elapsed = self._elapsed
        while self._tempo_index < len(self._tempo_points):
            at, bpm = self._tempo_points[self._tempo_index]
            if at >= target:
                break
            elapsed += (at - cursor).value * seconds_per_beat(self._bpm)
            cursor, self._bpm = at, bpm
            self._tempo_index += 1
        self._elapsed = elapsed + (target - cursor).value * seconds_per_beat(self._bpm)
        self._beat = target


def iterate_beat_times(offset: float, measure_map, tempo_map,
                       start_beat: Union[BeatPosition, RationalLike] = 0) -> BeatTimeIterator:
    return BeatTimeIterator(offset, measure_map, tempo_map, start_beat)


def metronome_schedule(ticks: Iterable[Tick],
                       downbeat_frequency: float = DOWNBEAT_FREQUENCY,
                       beat_frequency: float = BEAT_FREQUENCY) -> Iterator[SoundEffect]:
    """Turn ticks into a lazy tone schedule, accenting the downbeats."""
    for is_downbeat, time in ticks:
        yield SoundEffect(time, downbeat_frequency if is_downbeat else beat_frequency)
