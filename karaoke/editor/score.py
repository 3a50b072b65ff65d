# karaoke/editor/score.py
"""
ScoreTiming - the timing half of a score: lead-in offset, tempo map, measure map.

Beat keys and measure lengths are stored as ``"n/d"`` strings in JSON so they
round-trip exactly.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
import json
import logging

from ..core.beats import BeatLength, BeatPosition, RationalLike
from ..core.errors import ConfigLoadError
from ..time.measures import MeasureIterator, MeasureMap
from ..time.metronome import BeatTimeIterator
from ..time.tempo import TempoMap, beat_to_time, time_to_beat

logger = logging.getLogger(__name__)


@dataclass
class ScoreTiming:
    offset: float = 0.0
    tempos: TempoMap = field(default_factory=TempoMap)
    measures: MeasureMap = field(default_factory=MeasureMap)

    def beat_to_time(self, pos: Union[BeatPosition, RationalLike]) -> float:
        return beat_to_time(self.offset, self.tempos, pos)

    def time_to_beat(self, time: float) -> float:
        return time_to_beat(self.offset, self.tempos, time)

    def iterate_measures(self) -> MeasureIterator:
        return MeasureIterator(self.measures)

    def iterate_beat_times(self, start_beat: Union[BeatPosition, RationalLike] = 0) -> BeatTimeIterator:
        return BeatTimeIterator(self.offset, self.measures, self.tempos, start_beat)

    def set_tempo(self, pos: Union[BeatPosition, RationalLike], bpm: Optional[float]):
        """Insert or replace a tempo breakpoint; ``None`` removes it."""
        if bpm is None:
            if pos in self.tempos:
                self.tempos.remove(pos)
        else:
            self.tempos.set(pos, bpm)

    def set_measure_length(self, pos: Union[BeatPosition, RationalLike],
                           length: Optional[Union[BeatLength, RationalLike]]):
        """Insert or replace a measure-length breakpoint; ``None`` removes it."""
        if length is None:
            if pos in self.measures:
                self.measures.remove(pos)
        else:
            self.measures.set(pos, length)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            'offset': self.offset,
            'tempos': [[str(pos), bpm] for pos, bpm in self.tempos],
            'measures': [[str(pos), str(length)] for pos, length in self.measures],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScoreTiming:
        try:
            return cls(
                offset=float(data.get('offset', 0.0)),
                tempos=TempoMap((BeatPosition(k), float(v)) for k, v in data.get('tempos', [])),
                measures=MeasureMap((BeatPosition(k), BeatLength(v)) for k, v in data.get('measures', [])),
            )
        except (AttributeError, TypeError, ValueError, ZeroDivisionError) as e:
            raise ConfigLoadError(f"Illegal score timing entry: {e}") from e

    def save(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> ScoreTiming:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigLoadError(f"Cannot load score timing from {path}: {e}") from e
        timing = cls.from_dict(data)
        logger.debug("Loaded %d tempo and %d measure breakpoints from %s",
                     len(timing.tempos), len(timing.measures), path)
        return timing
