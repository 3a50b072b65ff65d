# karaoke/audio/formats.py
"""
Output sample formats.

The mix is always computed in float32. The device may want something else;
the matching writer is picked once when the stream is built, never per sample.
Integer writers saturate at full scale instead of wrapping.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, Dict, List, Optional
import numpy as np

Writer = Callable[[np.ndarray, np.ndarray], None]


class SampleFormat(Enum):
    FLOAT32 = 'float32'
    INT32 = 'int32'
    INT16 = 'int16'
    INT8 = 'int8'
    UINT8 = 'uint8'

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def writer(self) -> Writer:
        return _WRITERS[self]

    @classmethod
    def parse(cls, name: str) -> SampleFormat:
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unsupported sample format: {name!r}") from None


def _write_float32(out: np.ndarray, block: np.ndarray):
    out[:] = block


def _signed_writer(dtype: np.dtype) -> Writer:
    scale = float(np.iinfo(dtype).max)

    def write(out: np.ndarray, block: np.ndarray):
        out[:] = (np.clip(block.astype(np.float64), -1.0, 1.0) * scale).astype(dtype)
    return write


def _write_uint8(out: np.ndarray, block: np.ndarray):
    out[:] = (np.clip(block.astype(np.float64), -1.0, 1.0) * 127.0 + 128.0).astype(np.uint8)


_WRITERS: Dict[SampleFormat, Writer] = {
    SampleFormat.FLOAT32: _write_float32,
    SampleFormat.INT32: _signed_writer(np.dtype(np.int32)),
    SampleFormat.INT16: _signed_writer(np.dtype(np.int16)),
    SampleFormat.INT8: _signed_writer(np.dtype(np.int8)),
    SampleFormat.UINT8: _write_uint8,
}


def candidate_formats(preferred: Optional[str] = None) -> List[SampleFormat]:
    """Formats to probe, in order: the preferred one first, then the rest."""
    order = list(SampleFormat)
    if preferred:
        first = SampleFormat.parse(preferred)
        order.remove(first)
        order.insert(0, first)
    return order
