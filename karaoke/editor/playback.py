# karaoke/editor/playback.py
"""
PlaybackController - the editor's side of the audio command channel.

Starting playback from the cursor seeks the music to the cursor's time,
hands the audio thread a fresh metronome schedule, then plays.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union
import logging

from ..audio.channels import CommandSender
from ..audio.commands import Pause, Play, Seek, SetSoundEffectSchedules, SetSoundEffectVolume, SetVolume
from ..core.beats import BeatPosition, RationalLike
from ..core.config import MetronomeConfig
from ..time.metronome import metronome_schedule
from .score import ScoreTiming

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackPosition:
    time: float
    beat: BeatPosition


class PlaybackController:
    """
    Usage:
        controller = PlaybackController(engine.command_sender(), timing)
        controller.toggle(cursor)          # play from cursor
        controller.current_position(engine)
        controller.toggle(cursor)          # pause
    """

    def __init__(self, sender: CommandSender, timing: ScoreTiming,
                 metronome: Optional[MetronomeConfig] = None):
        self.sender = sender
        self.timing = timing
        self.metronome = metronome or MetronomeConfig()
        self.playing = False

    def play_from(self, cursor: Union[BeatPosition, RationalLike]):
        cursor = cursor if isinstance(cursor, BeatPosition) else BeatPosition(cursor)
        start_time = self.timing.beat_to_time(cursor)
        schedule = metronome_schedule(
            self.timing.iterate_beat_times(cursor),
            self.metronome.downbeat_frequency,
            self.metronome.beat_frequency,
        )
        self.sender.send(Seek(start_time))
        self.sender.send(SetSoundEffectSchedules(schedule))
        self.sender.send(Play())
        self.playing = True
        logger.debug("Playing from beat %s (%.3fs)", cursor, start_time)

    def pause(self):
        self.sender.send(Pause())
        self.playing = False

    def toggle(self, cursor: Union[BeatPosition, RationalLike]):
        if self.playing:
            self.pause()
        else:
            self.play_from(cursor)

    def set_volumes(self, music: float, metronome: float):
        self.sender.send(SetVolume(music))
        self.sender.send(SetSoundEffectVolume(metronome))

    def current_position(self, engine) -> Optional[PlaybackPosition]:
        """
        Playhead for display, from ``engine.playback_position()``.

        None while paused, or before the first buffer after Play is rendered.
        """
        if not self.playing:
            return None
        time = engine.playback_position()
        if time is None:
            return None
        return PlaybackPosition(time, BeatPosition.from_float(self.timing.time_to_beat(time)))
