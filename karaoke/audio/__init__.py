# karaoke/audio/__init__.py
"""
Audio System
============

Real-time playback of one music source plus synthesized metronome tones.

Quick Start:
    from karaoke.audio import Seek, Play
    from karaoke.audio.engine import AudioEngine

    engine = AudioEngine.open()
    sender = engine.command_sender()
    sender.load_music("song.wav")
    sender.send(Seek(0.0))
    sender.send(Play())
"""

from .commands import (
    AudioCommand,
    Play,
    Pause,
    Seek,
    LoadMusic,
    SetVolume,
    SetSoundEffectVolume,
    SetSoundEffectSchedules,
)
from .channels import CommandChannel, CommandSender, CommandReceiver, StateSlot
from .state import PlaybackState, Playing, NotPlaying, NOT_PLAYING, extrapolate_position
from .formats import SampleFormat
from .sources import StreamFormat, MusicSource, decode_music
from .effects import EffectMixer, ToneVoice, synthesize_tone
from .callback import PlaybackCallback

# AudioEngine lives in .engine and is imported from there: importing it loads
# PortAudio through sounddevice.

__all__ = [
    'AudioCommand',
    'Play',
    'Pause',
    'Seek',
    'LoadMusic',
    'SetVolume',
    'SetSoundEffectVolume',
    'SetSoundEffectSchedules',
    'CommandChannel',
    'CommandSender',
    'CommandReceiver',
    'StateSlot',
    'PlaybackState',
    'Playing',
    'NotPlaying',
    'NOT_PLAYING',
    'extrapolate_position',
    'SampleFormat',
    'StreamFormat',
    'MusicSource',
    'decode_music',
    'EffectMixer',
    'ToneVoice',
    'synthesize_tone',
    'PlaybackCallback',
]
