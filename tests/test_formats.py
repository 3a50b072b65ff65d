import numpy as np
import pytest

from karaoke.audio.formats import SampleFormat, candidate_formats


BLOCK = np.array([[1.0], [-1.0], [0.5], [0.0]], dtype=np.float32)


def write(sample_format):
    out = np.zeros(BLOCK.shape, dtype=sample_format.dtype)
    sample_format.writer(out, BLOCK)
    return out[:, 0].tolist()


def test_float32_is_copied():
    assert write(SampleFormat.FLOAT32) == [1.0, -1.0, 0.5, 0.0]


def test_signed_formats_scale_to_full_range():
    assert write(SampleFormat.INT16) == [32767, -32767, 16383, 0]
    assert write(SampleFormat.INT8) == [127, -127, 63, 0]
    assert write(SampleFormat.INT32)[:2] == [2147483647, -2147483647]


def test_uint8_is_offset():
    assert write(SampleFormat.UINT8) == [255, 1, 191, 128]


def test_candidate_order():
    assert candidate_formats() == list(SampleFormat)
    preferred = candidate_formats("INT16")
    assert preferred[0] is SampleFormat.INT16
    assert sorted(f.value for f in preferred) == sorted(f.value for f in SampleFormat)


def test_parse():
    assert SampleFormat.parse("Float32") is SampleFormat.FLOAT32
    with pytest.raises(ValueError):
        SampleFormat.parse("float64")


def test_integer_writers_saturate():
    loud = np.array([[1.5], [-2.0]], dtype=np.float32)
    expected = {
        SampleFormat.INT16: [32767, -32767],
        SampleFormat.INT8: [127, -127],
        SampleFormat.UINT8: [255, 1],
    }
    for sample_format, values in expected.items():
        out = np.zeros(loud.shape, dtype=sample_format.dtype)
        sample_format.writer(out, loud)
        assert out[:, 0].tolist() == values, sample_format
