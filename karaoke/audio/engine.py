# karaoke/audio/engine.py
"""
AudioEngine - owns the output stream and the channels to its callback.

Usage:
    from karaoke.audio import Seek, Play
    from karaoke.audio.engine import AudioEngine

    engine = AudioEngine.open()
    sender = engine.command_sender()
    sender.load_music("song.ogg")
    sender.send(Seek(12.0))
    sender.send(Play())
    ...
    engine.playback_position()   # -> 12.34, or None while paused
    engine.close()
"""

from __future__ import annotations
from typing import Optional
import logging
import time

import sounddevice as sd

from ..core.config import AudioConfig
from ..core.errors import AudioError, ChannelDisconnected
from .callback import PlaybackCallback
from .channels import CommandChannel, CommandSender, StateSlot
from .formats import SampleFormat, candidate_formats
from .sources import StreamFormat
from .state import NOT_PLAYING, PlaybackState, extrapolate_position

logger = logging.getLogger(__name__)


def probe_output(config: AudioConfig):
    """
    Pick the output device and its first usable configuration.

    Returns ``(device_info, StreamFormat, SampleFormat)``. Raises AudioError.
    """
    try:
        device_info = sd.query_devices(config.device, kind='output')
    except (sd.PortAudioError, ValueError) as e:
        raise AudioError(f"No default output device found: {e}") from e

    channels = min(int(device_info['max_output_channels']), config.max_channels)
    sample_rate = int(device_info['default_samplerate'])
    if channels < 1 or sample_rate <= 0:
        raise AudioError(f"No audio configuration is available on {device_info['name']}")
    stream_format = StreamFormat(sample_rate, channels)

    for sample_format in candidate_formats(config.preferred_dtype):
        try:
            sd.check_output_settings(
                device=config.device,
                channels=channels,
                dtype=sample_format.value,
                samplerate=sample_rate,
            )
        except (sd.PortAudioError, ValueError):
            continue
        return device_info, stream_format, sample_format

    raise AudioError(f"No audio configuration is available on {device_info['name']}")


class AudioEngine:
    """
    Output stream plus the command sender and state slot that reach its callback.

    Create with ``AudioEngine.open()``.
    """

    def __init__(
        self,
        callback: PlaybackCallback,
        sender: CommandSender,
        state: StateSlot,
        sample_format: SampleFormat = SampleFormat.FLOAT32,
    ):
        self._callback = callback
        self._sender = sender
        self._state = state
        self.sample_format = sample_format
        self._writer = sample_format.writer
        self._stream: Optional[sd.OutputStream] = None

    @classmethod
    def open(cls, config: Optional[AudioConfig] = None) -> AudioEngine:
        """Probe the default output, build the stream and start it. Raises AudioError."""
        config = config or AudioConfig()
        device_info, stream_format, sample_format = probe_output(config)

        channel = CommandChannel()
        state: StateSlot[PlaybackState] = StateSlot(NOT_PLAYING)
        callback = PlaybackCallback(channel.receiver(), state, stream_format, config)
        engine = cls(callback, channel.sender(stream_format), state, sample_format)

        try:
            stream = sd.OutputStream(
                samplerate=stream_format.sample_rate,
                blocksize=config.blocksize,
                device=config.device,
                channels=stream_format.channels,
                dtype=sample_format.value,
                latency=config.latency,
                callback=engine._stream_callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            engine._sender.close()
            raise AudioError(f"Failed to start output stream: {e}") from e

        engine._stream = stream
        logger.info(
            "AudioEngine: started on %s (sr=%d, ch=%d, %s)",
            device_info['name'], stream_format.sample_rate,
            stream_format.channels, sample_format.value,
        )
        return engine

    def _stream_callback(self, outdata, frames: int, time_info, status):
        """Audio callback - runs on the audio thread."""
        now = time.perf_counter()
        if status:
            logger.warning("AudioEngine: %s", status)
        try:
            block = self._callback.render(
                frames, time_info.currentTime, time_info.outputBufferDacTime, now,
            )
        except ChannelDisconnected:
            logger.critical("AudioEngine: command channel disconnected, aborting stream")
            raise sd.CallbackAbort
        self._writer(outdata, block)

    def command_sender(self) -> CommandSender:
        return self._sender

    @property
    def stream_format(self) -> StreamFormat:
        return self._callback.format

    def playback_state(self) -> PlaybackState:
        return self._state.read()

    def playback_position(self) -> Optional[float]:
        """Extrapolated music time in seconds, or None when not playing."""
        return extrapolate_position(self._state.read(), time.perf_counter())

    def close(self):
        """Stop the stream and release the engine's sender."""
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            logger.info("AudioEngine: stopped")
        self._sender.close()

    @property
    def is_running(self) -> bool:
        return self._stream is not None and self._stream.active

    def __enter__(self) -> AudioEngine:
        return self

    def __exit__(self, *exc):
        self.close()


def list_output_devices():
    return sd.query_devices()
