# karaoke/core/beats.py
"""
Beat arithmetic - exact rational positions and lengths on the beat axis.

Positions and lengths are kept as ``fractions.Fraction`` all the way through
the tempo/measure model. Floats only appear at the very end, when a beat is
turned into a wall-clock time or a label.

    BeatPosition - BeatPosition -> BeatLength
    BeatPosition +/- BeatLength -> BeatPosition
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from numbers import Rational
from typing import Tuple, Union

RationalLike = Union[int, Fraction, str, Tuple[int, int]]

Bpm = float

DEFAULT_BPM: Bpm = 120.0


def as_fraction(value: RationalLike) -> Fraction:
    """Coerce an exact value into a Fraction. Floats are refused."""
    if isinstance(value, bool):
        raise TypeError("bool is not a beat value")
    if isinstance(value, (BeatPosition, BeatLength)):
        return value.value
    if isinstance(value, Rational):
        return Fraction(value)
    if isinstance(value, str):
        return Fraction(value.strip())
    if isinstance(value, tuple) and len(value) == 2:
        return Fraction(int(value[0]), int(value[1]))
    raise TypeError(
        f"cannot build an exact beat value from {type(value).__name__}; "
        "use int, Fraction, 'n/d' or (n, d)"
    )


@dataclass(frozen=True, order=True)
class BeatLength:
    """A duration measured in beats."""
    value: Fraction

    def __init__(self, value: RationalLike = 0):
        object.__setattr__(self, 'value', as_fraction(value))

    @classmethod
    def zero(cls) -> BeatLength:
        return cls(0)

    @classmethod
    def one(cls) -> BeatLength:
        return cls(1)

    @classmethod
    def four(cls) -> BeatLength:
        return cls(4)

    def __add__(self, other):
        if isinstance(other, BeatLength):
            return BeatLength(self.value + other.value)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, BeatLength):
            return BeatLength(self.value - other.value)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, (int, Fraction)) and not isinstance(other, bool):
            return BeatLength(self.value * other)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, BeatLength):
            return self.value / other.value
        return NotImplemented

    def __neg__(self) -> BeatLength:
        return BeatLength(-self.value)

    def __bool__(self) -> bool:
        return self.value != 0

    def __float__(self) -> float:
        return float(self.value)

    def __repr__(self) -> str:
        return f"BeatLength({self.value})"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, order=True)
class BeatPosition:
    """An absolute position on the beat axis, counted from the start of the piece."""
    value: Fraction

    def __init__(self, value: RationalLike = 0):
        object.__setattr__(self, 'value', as_fraction(value))

    @classmethod
    def zero(cls) -> BeatPosition:
        return cls(0)

    @classmethod
    def from_float(cls, beat: float, max_denominator: int = 1 << 20) -> BeatPosition:
        """Approximate a float beat (e.g. an extrapolated playhead) for display."""
        return cls(Fraction(beat).limit_denominator(max_denominator))

    def __add__(self, other):
        if isinstance(other, BeatLength):
            return BeatPosition(self.value + other.value)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, BeatPosition):
            return BeatLength(self.value - other.value)
        if isinstance(other, BeatLength):
            return BeatPosition(self.value - other.value)
        return NotImplemented

    def floor(self) -> int:
        return self.value.numerator // self.value.denominator

    def ceil(self) -> int:
        return -(-self.value.numerator // self.value.denominator)

    def __float__(self) -> float:
        return float(self.value)

    def __repr__(self) -> str:
        return f"BeatPosition({self.value})"

    def __str__(self) -> str:
        return str(self.value)


# Beats per measure, as stored in a measure map.
MeasureLength = BeatLength
