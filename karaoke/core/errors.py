# karaoke/core/errors.py
"""Exception types shared across the playback core."""

from __future__ import annotations


class KaraokeError(Exception):
    """Base class for errors raised by this package."""


class AudioError(KaraokeError):
    """The output device or stream could not be set up."""


class DecodeError(KaraokeError):
    """A music file could not be opened or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to decode {path}: {reason}")
        self.path = path
        self.reason = reason


class ChannelDisconnected(KaraokeError):
    """Every sender of the command channel has gone away."""


class ConfigLoadError(KaraokeError):
    """A configuration file is unreadable or holds illegal entries."""
