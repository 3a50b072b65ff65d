# karaoke/time/measures.py
"""
MeasureMap - piecewise-constant measure length, and the measure sequence it implies.

A measure boundary sits exactly at each breakpoint, then every
``MeasureLength`` beats after it until the next breakpoint.
"""

from __future__ import annotations
import math
from typing import Optional, Tuple, Union

from ..core.beats import BeatPosition, MeasureLength, RationalLike
from .breakpoints import BreakpointMap

Measure = Tuple[BeatPosition, BeatPosition]


class MeasureMap(BreakpointMap):
    """Beat position -> measure length (beats per measure)."""

    def _check(self, key: BeatPosition, value) -> MeasureLength:
        super()._check(key, value)
        length = value if isinstance(value, MeasureLength) else MeasureLength(value)
        if length <= MeasureLength.zero():
            raise ValueError(f"Measure length must be positive, got {value!r} at beat {key}")
        return length

    def length_at(self, pos: Union[BeatPosition, RationalLike]) -> MeasureLength:
        pos = pos if isinstance(pos, BeatPosition) else BeatPosition(pos)
        found = self.last_at_or_before(pos)
        return MeasureLength.four() if found is None else found[1]


class MeasureIterator:
    """
    Infinite iterator over ``(measure_start, measure_end)`` pairs.

    Starts at beat zero with the default length of four. A breakpoint at the
    current measure start takes effect for this measure; one that falls
    strictly inside it cuts the measure short and applies from the next one.

    To restart, build a new iterator; there is no rewind.
    """

    def __init__(self, measure_map=None):
        self._breakpoints = MeasureMap.coerce(measure_map).items()
        self._index = 0
        self._length = MeasureLength.four()
        self._start = BeatPosition.zero()

    def _peek(self) -> Optional[Tuple[BeatPosition, MeasureLength]]:
        if self._index < len(self._breakpoints):
            return self._breakpoints[self._index]
        return None

    def __iter__(self) -> MeasureIterator:
        return self

    def __next__(self) -> Measure:
        end = self._start + self._length
        upcoming = self._peek()
        if upcoming is not None:
            at, length = upcoming
            if at == self._start:
                self._length = length
                end = self._start + self._length
                self._index += 1
            elif at < end:
                self._length = length
                end = at
                self._index += 1

        measure = (self._start, end)
        self._start = end
        return measure


def iterate_measures(measure_map=None) -> MeasureIterator:
    return MeasureIterator(measure_map)


def measure_index_at(measure_map, pos: Union[BeatPosition, RationalLike]) -> Tuple[int, BeatPosition, BeatPosition]:
    """
    Zero-based index and bounds of the measure containing ``pos`` (pos >= 0).

    The index is global, counted from beat zero across every measure-length
    breakpoint.
    """
    pos = pos if isinstance(pos, BeatPosition) else BeatPosition(pos)
    if pos < BeatPosition.zero():
        raise ValueError(f"No measure before the start of the piece: {pos}")

    measure_map = MeasureMap.coerce(measure_map)
    last = measure_map.last_at_or_before(pos)
    following = [key for key in measure_map.keys() if key > pos]

    index = 0
    for start, end in MeasureIterator(measure_map):
        if pos < end:
            return index, start, end
        if last is not None and start >= last[0]:
            # Past the governing breakpoint every measure has the same length,
            # so jump straight to the one holding pos.
            skip = math.floor((pos - start) / last[1])
            start = start + last[1] * skip
            end = start + last[1]
            if following and following[0] < end:
                end = following[0]
            return index + skip, start, end
        index += 1
    raise AssertionError("unreachable")
