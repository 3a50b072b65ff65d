# karaoke/time/breakpoints.py
"""
BreakpointMap - ordered, unique-keyed mapping from beat position to a value.

Both the tempo map and the measure map are piecewise-constant functions of the
beat position. They are stored the same way: a sorted key list for ordered
walks and bisect lookups, plus a dict for the values.
"""

from __future__ import annotations
from bisect import bisect_left, bisect_right, insort
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..core.beats import BeatPosition, RationalLike


class BreakpointMap:
    """Sorted beat -> value map. Iteration yields ``(beat, value)`` in beat order."""

    def __init__(self, items: Union[Mapping, Iterable[Tuple[Any, Any]], None] = None):
        self._keys: List[BeatPosition] = []
        self._values: Dict[BeatPosition, Any] = {}
        if items is None:
            return
        if isinstance(items, Mapping):
            items = items.items()
        for key, value in items:
            self.set(key, value)

    @classmethod
    def coerce(cls, items) -> BreakpointMap:
        if isinstance(items, cls):
            return items
        return cls(items)

    def _check(self, key: BeatPosition, value: Any) -> Any:
        if key < BeatPosition.zero():
            raise ValueError(f"Breakpoint before the start of the piece: {key}")
        return value

    def set(self, key: Union[BeatPosition, RationalLike], value: Any):
        key = key if isinstance(key, BeatPosition) else BeatPosition(key)
        value = self._check(key, value)
        if key not in self._values:
            insort(self._keys, key)
        self._values[key] = value

    def remove(self, key: Union[BeatPosition, RationalLike]) -> Any:
        key = key if isinstance(key, BeatPosition) else BeatPosition(key)
        value = self._values.pop(key)
        del self._keys[bisect_left(self._keys, key)]
        return value

    def get(self, key: Union[BeatPosition, RationalLike], default: Any = None) -> Any:
        key = key if isinstance(key, BeatPosition) else BeatPosition(key)
        return self._values.get(key, default)

    def last_at_or_before(self, pos: BeatPosition) -> Optional[Tuple[BeatPosition, Any]]:
        """The breakpoint in effect at ``pos``, or None before the first one."""
        i = bisect_right(self._keys, pos)
        if i == 0:
            return None
        key = self._keys[i - 1]
        return key, self._values[key]

    def items(self) -> List[Tuple[BeatPosition, Any]]:
        return [(k, self._values[k]) for k in self._keys]

    def keys(self) -> List[BeatPosition]:
        return list(self._keys)

    def copy(self) -> BreakpointMap:
        clone = type(self)()
        clone._keys = list(self._keys)
        clone._values = dict(self._values)
        return clone

    def __iter__(self) -> Iterator[Tuple[BeatPosition, Any]]:
        for key in self._keys:
            yield key, self._values[key]

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key) -> bool:
        key = key if isinstance(key, BeatPosition) else BeatPosition(key)
        return key in self._values

    def __eq__(self, other) -> bool:
        if not isinstance(other, BreakpointMap):
            return NotImplemented
        return type(self) is type(other) and self.items() == other.items()

    def __repr__(self) -> str:
        body = ', '.join(f"{k}: {v}" for k, v in self)
        return f"{type(self).__name__}({{{body}}})"
