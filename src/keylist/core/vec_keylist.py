from __future__ import annotations

import operator
from bisect import bisect_left
from typing import Any, Iterator, List, Optional, Tuple

from .hash_keylist import PairSource, iter_pairs
from .iter import ValueSlot


class _PairSlot(ValueSlot):
    """Slot onto the value half of a stored ``(key, value)`` tuple."""

    __slots__ = ()

    @property
    def value(self) -> Any:
        return self._row[self._offset][1]

    @value.setter
    def value(self, new_value: Any) -> None:
        self._row[self._offset] = (self._row[self._offset][0], new_value)


class Keylist:
    """List of ``(key, value)`` tuples with map-like lookups by linear scan."""

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Optional[PairSource] = None) -> None:
        self._pairs: List[Tuple[Any, Any]] = []
        if pairs is not None:
            self.extend(pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def is_empty(self) -> bool:
        return not self._pairs

    def __bool__(self) -> bool:
        return bool(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keylist):
            return NotImplemented
        return self._pairs == other._pairs

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Keylist({self._pairs!r})"

    def copy(self) -> "Keylist":
        return Keylist(self._pairs)

    __copy__ = copy

    def into_swapped(self) -> "Keylist":
        return Keylist((value, key) for key, value in self._pairs)

    # mutation
    def push(self, key: Any, value: Any) -> None:
        self._pairs.append((key, value))

    def extend(self, pairs: PairSource) -> None:
        self._pairs.extend(iter_pairs(pairs))

    def insert(self, index: int, key: Any, value: Any) -> None:
        index = operator.index(index)
        size = len(self._pairs)
        if index < 0 or index > size:
            raise IndexError(f"insertion index (is {index}) should be <= len (is {size})")
        self._pairs.insert(index, (key, value))

    def pop(self) -> Optional[Tuple[Any, Any]]:
        if not self._pairs:
            return None
        return self._pairs.pop()

    def remove(self, index: int) -> Tuple[Any, Any]:
        index = operator.index(index)
        size = len(self._pairs)
        if index < 0 or index >= size:
            raise IndexError(f"removal index (is {index}) should be < len (is {size})")
        return self._pairs.pop(index)

    def clear(self) -> None:
        self._pairs.clear()

    # iteration
    def iter(self) -> Iterator[Tuple[Any, Any]]:
        return iter(self._pairs)

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return iter(self._pairs)

    def iter_mut(self) -> Iterator[Tuple[Any, ValueSlot]]:
        for offset, (key, _) in enumerate(self._pairs):
            yield key, _PairSlot(key, self._pairs, offset)

    def keys(self) -> Iterator[Any]:
        return (key for key, _ in self._pairs)

    def values(self) -> Iterator[Any]:
        return (value for _, value in self._pairs)

    def values_mut(self) -> Iterator[ValueSlot]:
        return (slot for _, slot in self.iter_mut())

    def to_pairs(self) -> List[Tuple[Any, Any]]:
        return list(self._pairs)

    def into_iter(self) -> Iterator[Tuple[Any, Any]]:
        pairs, self._pairs = self._pairs, []
        return iter(pairs)

    # lookup
    def _find(self, key: Any) -> Optional[int]:
        for offset, (candidate, _) in enumerate(self._pairs):
            if candidate == key:
                return offset
        return None

    def get_key_value(self, key: Any) -> Optional[Tuple[Any, Any]]:
        offset = self._find(key)
        return None if offset is None else self._pairs[offset]

    def get_key_value_mut(self, key: Any) -> Optional[ValueSlot]:
        offset = self._find(key)
        if offset is None:
            return None
        return _PairSlot(self._pairs[offset][0], self._pairs, offset)

    def get(self, key: Any) -> Optional[Any]:
        pair = self.get_key_value(key)
        return None if pair is None else pair[1]

    get_mut = get_key_value_mut

    def get_all(self, key: Any) -> List[Any]:
        return [value for candidate, value in self._pairs if candidate == key]

    def get_all_key_value(self, key: Any) -> List[Tuple[Any, Any]]:
        return [pair for pair in self._pairs if pair[0] == key]

    def contains(self, item: Tuple[Any, Any]) -> bool:
        return tuple(item) in self._pairs

    # ordering
    def sort_by_key(self) -> None:
        self._pairs.sort(key=lambda pair: pair[0])

    def sort_by_value(self) -> None:
        self._pairs.sort(key=lambda pair: pair[1])

    def sort(self) -> None:
        self._pairs.sort()

    def get_key_value_sorted(self, key: Any) -> Optional[Tuple[Any, Any]]:
        """Binary-search lookup; the list must already be sorted by key."""

        offset = bisect_left(self._pairs, key, key=lambda pair: pair[0])
        if offset < len(self._pairs) and self._pairs[offset][0] == key:
            return self._pairs[offset]
        return None

    def get_sorted(self, key: Any) -> Optional[Any]:
        pair = self.get_key_value_sorted(key)
        return None if pair is None else pair[1]


__all__ = ["Keylist"]
