# karaoke/audio/sources.py
"""
Music sources - decoded audio converted to the output stream's shape.

A "uniform" source has the stream's sample rate and channel count, so the
callback can copy frames straight into the mix.

Usage:
    fmt = StreamFormat(sample_rate=48000, channels=2)
    source = decode_music("song.flac", fmt)
    source.seek(12.5)
    block = source.read(512)     # (512, 2) float32, silence past the end
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os
import numpy as np
import soundfile as sf

from ..core.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamFormat:
    sample_rate: int
    channels: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")


class MusicSource:
    """
    Decoded, uniform music. Owned by the audio callback once installed.

    ``data`` has shape (frames, channels) and dtype float32.
    """

    def __init__(self, data: np.ndarray, stream_format: StreamFormat, name: str = ""):
        if data.ndim != 2 or data.shape[1] != stream_format.channels:
            raise ValueError(
                f"Expected (frames, {stream_format.channels}) data, got {data.shape}"
            )
        self.data = np.ascontiguousarray(data, dtype=np.float32)
        self.format = stream_format
        self.name = name
        self._position = 0

    @property
    def num_frames(self) -> int:
        return self.data.shape[0]

    @property
    def duration(self) -> float:
        return self.num_frames / self.format.sample_rate

    @property
    def position(self) -> int:
        return self._position

    @property
    def exhausted(self) -> bool:
        return self._position >= self.num_frames

    def seek(self, seconds: float):
        """Move to ``seconds``. Negative times clamp to the start."""
        frame = int(round(max(0.0, seconds) * self.format.sample_rate))
        self._position = min(frame, self.num_frames)

    def read(self, frames: int) -> np.ndarray:
        """Next ``frames`` frames, zero-padded once the music runs out."""
        out = np.zeros((frames, self.format.channels), dtype=np.float32)
        start = self._position
        end = min(start + frames, self.num_frames)
        if end > start:
            out[:end - start] = self.data[start:end]
        self._position = max(end, start)
        return out


def resample(data: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Linear-interpolation resampling of (frames, channels) data."""
    if src_rate == dst_rate or len(data) == 0:
        return data

    new_length = int(round(len(data) * dst_rate / src_rate))
    src_positions = np.arange(len(data))
    dst_positions = np.linspace(0, len(data) - 1, new_length)
    result = np.zeros((new_length, data.shape[1]), dtype=np.float32)
    for ch in range(data.shape[1]):
        result[:, ch] = np.interp(dst_positions, src_positions, data[:, ch])
    return result


def remix(data: np.ndarray, channels: int) -> np.ndarray:
    """Convert (frames, n) data to (frames, channels)."""
    src_channels = data.shape[1]
    if src_channels == channels:
        return data
    if channels == 1:
        return data.mean(axis=1, keepdims=True).astype(np.float32)
    if src_channels == 1:
        return np.repeat(data, channels, axis=1)
    # Drop surplus channels, or cycle through the source ones to fill extras.
    picks = [i % src_channels for i in range(channels)]
    return data[:, picks]


def decode_music(path: str, stream_format: StreamFormat) -> MusicSource:
    """Decode a file and convert it to ``stream_format``. Raises DecodeError."""
    if not os.path.exists(path):
        raise DecodeError(path, "file not found")
    try:
        data, sample_rate = sf.read(path, dtype='float32', always_2d=True)
    except (RuntimeError, OSError) as e:
        raise DecodeError(path, str(e)) from e

    data = remix(data, stream_format.channels)
    data = resample(data, sample_rate, stream_format.sample_rate)
    source = MusicSource(data, stream_format, name=os.path.basename(path))
    logger.info(
        "Decoded %s (%.2fs, %d Hz -> %d Hz, %d ch)",
        path, source.duration, sample_rate, stream_format.sample_rate, stream_format.channels,
    )
    return source
