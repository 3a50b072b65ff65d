# karaoke/core/config.py
"""
Configuration dataclasses with JSON persistence.

    config = EditorConfig.load("karaoke.json")
    config.audio.music_volume = 0.6
    config.save("karaoke.json")
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional, Union
import json
import logging

from .errors import ConfigLoadError

logger = logging.getLogger(__name__)


@dataclass
class AudioConfig:
    device: Optional[Union[int, str]] = None  # None => system default output
    blocksize: int = 0                         # 0 => host chooses
    latency: Union[str, float] = "low"
    preferred_dtype: Optional[str] = None      # None => first supported format
    max_channels: int = 2
    click_duration: float = 0.05
    clip_level: float = 1.0
    music_volume: float = 0.4
    effect_volume: float = 0.4
    max_voices: int = 32                       # tones sounding at once

    def __post_init__(self):
        # Integer sample formats wrap above full scale
        if not 0.0 < self.clip_level <= 1.0:
            raise ValueError(f"clip_level must be in (0, 1], got {self.clip_level}")
        if self.max_voices < 1:
            raise ValueError(f"max_voices must be positive, got {self.max_voices}")


@dataclass
class MetronomeConfig:
    downbeat_frequency: float = 1244.51
    beat_frequency: float = 739.99


@dataclass
class EditorConfig:
    audio: AudioConfig = field(default_factory=AudioConfig)
    metronome: MetronomeConfig = field(default_factory=MetronomeConfig)
    offset: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EditorConfig:
        if not isinstance(data, dict):
            raise ConfigLoadError("Top-level configuration must be an object")
        data = dict(data)
        audio = _build(AudioConfig, data.pop('audio', {}), 'audio')
        metronome = _build(MetronomeConfig, data.pop('metronome', {}), 'metronome')
        offset = data.pop('offset', 0.0)
        if data:
            raise ConfigLoadError(f"Unknown configuration keys: {sorted(data)}")
        if not _is_number(offset):
            raise ConfigLoadError(f"offset must be a number, got {offset!r}")
        return cls(audio=audio, metronome=metronome, offset=float(offset))

    def save(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> EditorConfig:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigLoadError(f"Cannot read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Invalid JSON in {path}: {e}") from e
        config = cls.from_dict(data)
        logger.debug("Loaded configuration from %s", path)
        return config


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Accepted JSON types per field, keyed by the default value's type.
_CHECKS = {
    float: _is_number,
    int: lambda v: isinstance(v, int) and not isinstance(v, bool),
    str: lambda v: isinstance(v, str),
}


def _build(cls, data: Any, section: str):
    if not isinstance(data, dict):
        raise ConfigLoadError(f"[{section}] must be an object")
    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ConfigLoadError(f"Unknown keys in [{section}]: {sorted(unknown)}")

    defaults = cls()
    values = {}
    for name, value in data.items():
        default = getattr(defaults, name)
        check = _CHECKS.get(type(default))
        if default is None or name == 'latency':
            ok = value is None or isinstance(value, str) or _is_number(value)
        else:
            ok = check(value) if check else True
        if not ok:
            raise ConfigLoadError(f"[{section}] {name} has illegal value {value!r}")
        values[name] = float(value) if isinstance(default, float) else value
    try:
        return cls(**values)
    except ValueError as e:
        raise ConfigLoadError(f"[{section}] {e}") from e
