from fractions import Fraction

import pytest

from karaoke.core.beats import BeatPosition
from karaoke.time.tempo import TempoMap, beat_to_time, time_to_beat


OFFSET = 2.5

# 240 BPM from the start, back to 120 at beat 16, 240 again from beat 20.5
REFERENCE_TEMPOS = TempoMap({
    0: 240.0,
    8: 240.0,
    16: 120.0,
    Fraction(41, 2): 240.0,
})

REFERENCE_TIMES = [2.5 + beat * 0.25 for beat in range(17)] + [
    7.0,    # 17
    7.5,    # 18
    8.0,    # 19
    8.5,    # 20
    8.875,  # 21
    9.125,  # 22
]


def test_reference_table():
    for beat, expected in enumerate(REFERENCE_TIMES):
        got = beat_to_time(OFFSET, REFERENCE_TEMPOS, BeatPosition(beat))
        assert abs(got - expected) < 1e-9, (beat, got, expected)


def test_empty_map_uses_default_tempo():
    assert beat_to_time(0.0, TempoMap(), BeatPosition(4)) == 2.0
    assert time_to_beat(0.0, TempoMap(), 2.0) == 4.0
    assert beat_to_time(1.0, {}, BeatPosition(0)) == 1.0


def test_default_tempo_before_first_breakpoint():
    tempos = TempoMap({8: 240.0, 16: 120.0})
    assert beat_to_time(2.5, tempos, BeatPosition(8)) == 6.5
    assert beat_to_time(2.5, tempos, BeatPosition(16)) == 8.5
    assert beat_to_time(2.5, tempos, BeatPosition(17)) == 9.0


def test_extrapolates_after_last_breakpoint():
    tempos = TempoMap({0: 60.0})
    assert beat_to_time(0.0, tempos, BeatPosition(1000)) == 1000.0
    assert time_to_beat(0.0, tempos, 1000.0) == 1000.0


def test_negative_positions_extrapolate_linearly():
    assert beat_to_time(OFFSET, REFERENCE_TEMPOS, BeatPosition(-2)) == 1.5
    assert time_to_beat(OFFSET, REFERENCE_TEMPOS, 1.5) == -2.0


def test_inverse_law():
    positions = [BeatPosition(Fraction(n, 3)) for n in range(-6, 90)]
    for pos in positions:
        t = beat_to_time(OFFSET, REFERENCE_TEMPOS, pos)
        assert abs(time_to_beat(OFFSET, REFERENCE_TEMPOS, t) - float(pos)) < 1e-9


def test_beat_to_time_is_monotonic():
    tempos = TempoMap({Fraction(1, 3): 97.5, 5: 300.0, Fraction(23, 4): 40.0, 30: 180.0})
    times = [beat_to_time(0.0, tempos, BeatPosition(Fraction(n, 4))) for n in range(0, 160)]
    assert all(a <= b for a, b in zip(times, times[1:]))


def test_time_to_beat_is_monotonic():
    beats = [time_to_beat(OFFSET, REFERENCE_TEMPOS, t / 10) for t in range(0, 120)]
    assert all(a <= b for a, b in zip(beats, beats[1:]))


def test_tempo_at_and_map_ordering():
    tempos = TempoMap()
    tempos.set(16, 90.0)
    tempos.set(4, 150.0)
    assert [k for k, _ in tempos] == [BeatPosition(4), BeatPosition(16)]
    assert tempos.tempo_at(0) == 120.0
    assert tempos.tempo_at(4) == 150.0
    assert tempos.tempo_at(Fraction(31, 2)) == 150.0
    assert tempos.tempo_at(100) == 90.0
    tempos.remove(4)
    assert tempos.tempo_at(5) == 120.0


def test_rejects_bad_breakpoints():
    with pytest.raises(ValueError):
        TempoMap({0: 0.0})
    with pytest.raises(ValueError):
        TempoMap({-1: 120.0})
