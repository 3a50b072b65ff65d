# karaoke/editor/tap_tempo.py
"""
Tap-tempo detection.

The user taps along with the music; tap ``i`` at time ``t_i`` is treated as
beat ``i`` and a least-squares line ``t = a * i + b`` is fitted. The slope is
seconds per beat, the intercept is the lead-in offset.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LinestResult:
    a: float
    b: float
    r2: float


@dataclass
class Linest:
    """Running sums for a simple linear regression."""
    x_sum: float = 0.0
    x2_sum: float = 0.0
    y_sum: float = 0.0
    y2_sum: float = 0.0
    xy_sum: float = 0.0
    n: int = 0

    def push(self, x: float, y: float):
        self.x_sum += x
        self.x2_sum += x * x
        self.y_sum += y
        self.y2_sum += y * y
        self.xy_sum += x * y
        self.n += 1

    def estimate(self) -> Optional[LinestResult]:
        if self.n < 2:
            return None
        n = float(self.n)
        denom = n * self.x2_sum - self.x_sum * self.x_sum
        if denom == 0:
            return None
        cov = n * self.xy_sum - self.x_sum * self.y_sum
        a = cov / denom
        b = (self.x2_sum * self.y_sum - self.xy_sum * self.x_sum) / denom
        y_var = n * self.y2_sum - self.y_sum * self.y_sum
        r2 = cov * cov / denom / y_var if y_var > 0 else float('nan')
        return LinestResult(a, b, r2)


@dataclass
class BpmDetector:
    """Collects tap times and keeps the current fit."""
    cues: List[float] = field(default_factory=list)
    linest: Linest = field(default_factory=Linest)
    result: Optional[LinestResult] = None

    def push(self, time: float) -> Optional[LinestResult]:
        self.linest.push(float(len(self.cues)), time)
        self.cues.append(time)
        self.result = self.linest.estimate()
        return self.result

    @property
    def bpm(self) -> Optional[float]:
        if self.result is None or self.result.a <= 0:
            return None
        return 60.0 / self.result.a

    @property
    def offset(self) -> Optional[float]:
        return None if self.result is None else self.result.b

    def reset(self):
        self.cues.clear()
        self.linest = Linest()
        self.result = None
