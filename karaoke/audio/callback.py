# karaoke/audio/callback.py
"""
PlaybackCallback - the per-buffer work of the audio thread.

Kept free of any device handle so it can be driven directly with numpy
buffers; AudioEngine wraps it in a sounddevice callback.

Each call to ``render``:
    1. drains pending commands (never blocks)
    2. publishes the playback state
    3. works out where this buffer ends in music time
    4. starts a tone for every schedule entry due by then
    5. drops tones that have finished
    6. mixes music * volume + tones, hard-clamped
    7. advances the playback time
"""

from __future__ import annotations
from typing import Dict, Iterator, Optional
import logging
import numpy as np

from ..core.config import AudioConfig
from ..time.metronome import SoundEffect
from .channels import CommandReceiver, StateSlot
from .commands import (
    AudioCommand, Play, Pause, Seek, LoadMusic,
    SetVolume, SetSoundEffectVolume, SetSoundEffectSchedules,
)
from .effects import EffectMixer, ToneVoice, synthesize_tone
from .sources import MusicSource, StreamFormat
from .state import NOT_PLAYING, PlaybackState, Playing

logger = logging.getLogger(__name__)

TONE_CACHE_SIZE = 16


class PlaybackCallback:
    """Real-time playback state machine. Only the audio thread touches it."""

    def __init__(
        self,
        receiver: CommandReceiver,
        state: StateSlot,
        stream_format: StreamFormat,
        config: Optional[AudioConfig] = None,
    ):
        config = config or AudioConfig()
        self.receiver = receiver
        self.state = state
        self.format = stream_format

        self.playing = False
        self.playback_time = 0.0
        self.music: Optional[MusicSource] = None
        self.music_volume = config.music_volume
        self.effect_volume = config.effect_volume
        self.click_duration = config.click_duration
        self.clip_level = config.clip_level

        self.effects = EffectMixer(config.max_voices)
        self._schedule: Optional[Iterator[SoundEffect]] = None
        self._next_effect: Optional[SoundEffect] = None
        self._tones: Dict[float, np.ndarray] = {}

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def _apply_commands(self):
        for command in self.receiver.drain():
            self.apply(command)

    def apply(self, command: AudioCommand):
        if isinstance(command, Play):
            self.playing = True
        elif isinstance(command, Pause):
            self.playing = False
        elif isinstance(command, Seek):
            self._seek(command.time)
        elif isinstance(command, LoadMusic):
            if command.source is None:
                logger.warning("LoadMusic for %s arrived without a decoded source", command.path)
                return
            command.source.seek(self.playback_time)
            self.music = command.source
        elif isinstance(command, SetVolume):
            self.music_volume = command.volume
        elif isinstance(command, SetSoundEffectVolume):
            self.effect_volume = command.volume
        elif isinstance(command, SetSoundEffectSchedules):
            self._schedule = command.schedule
            self._next_effect = None
        else:
            logger.warning("Ignoring unknown audio command %r", command)

    def _seek(self, time: float):
        # Seeking always stops playback and forgets every pending or sounding tone.
        time = max(0.0, time)
        self._schedule = None
        self._next_effect = None
        self.effects.clear()
        self.playback_time = time
        if self.music is not None:
            self.music.seek(time)
        self.playing = False

    # -------------------------------------------------------------------------
    # Sound effects
    # -------------------------------------------------------------------------

    def _peek_effect(self) -> Optional[SoundEffect]:
        if self._next_effect is None and self._schedule is not None:
            try:
                self._next_effect = next(self._schedule)
            except StopIteration:
                self._schedule = None
        return self._next_effect

    def _tone(self, frequency: float) -> np.ndarray:
        tone = self._tones.get(frequency)
        if tone is None:
            if len(self._tones) >= TONE_CACHE_SIZE:
                self._tones.clear()
            tone = synthesize_tone(frequency, self.click_duration, self.format.sample_rate)
            self._tones[frequency] = tone
        return tone

    def _start_due_effects(self, playback_end: float):
        while True:
            effect = self._peek_effect()
            if effect is None or effect.time > playback_end:
                break
            if self.effects.full:
                self.effects.drop_exhausted()
            if self.effects.full:
                # Held over to the next buffer; it starts late but is never lost.
                logger.warning("All %d tone voices busy, deferring tone at %.3fs",
                               self.effects.max_voices, effect.time)
                break
            self._next_effect = None
            delay = int(round((effect.time - self.playback_time) * self.format.sample_rate))
            tone = self._tone(effect.frequency) * np.float32(self.effect_volume)
            self.effects.add(ToneVoice(tone, delay))

    # -------------------------------------------------------------------------
    # Per-buffer entry point
    # -------------------------------------------------------------------------

    def render(self, frames: int, callback_time: float, output_time: float, now: float) -> np.ndarray:
        """
        Produce one (frames, channels) float32 block.

        ``now`` is the perf_counter reading taken when the callback started;
        ``output_time - callback_time`` is the latency until the block is heard.
        Raises ChannelDisconnected when the control side is gone.
        """
        self._apply_commands()

        if self.playing:
            self.state.publish(Playing(now + (output_time - callback_time), self.playback_time))
        else:
            self.state.publish(NOT_PLAYING)

        playback_end = self.playback_time
        if self.playing:
            playback_end += frames / self.format.sample_rate

        self._start_due_effects(playback_end)
        self.effects.drop_exhausted()

        if self.playing and self.music is not None:
            block = self.music.read(frames)
            block *= np.float32(self.music_volume)
        else:
            block = np.zeros((frames, self.format.channels), dtype=np.float32)
        self.effects.mix_into(block)
        np.clip(block, -self.clip_level, self.clip_level, out=block)

        self.playback_time = playback_end
        return block

    @property
    def published_state(self) -> PlaybackState:
        return self.state.read()
