from __future__ import annotations

import logging
import operator
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from keylist.contracts.error import InvariantError

from .iter import IterMut, KeylistIter, RowKeyValueIter, ValueSlot, count_prior

logger = logging.getLogger("keylist")

PairSource = Union[Iterable[Tuple[Any, Any]], Mapping[Any, Any]]


class Row(list):
    """Values stored under one key, in insertion order, plus the canonical key."""

    __slots__ = ("key",)

    def __init__(self, key: Any, values: Iterable[Any] = ()) -> None:
        super().__init__(values)
        self.key = key


def iter_pairs(pairs: PairSource) -> Iterator[Tuple[Any, Any]]:
    if isinstance(pairs, Mapping):
        yield from pairs.items()
        return
    for pair in pairs:
        key, value = pair
        yield key, value


class HashKeylist:
    """Ordered multimap: a key sequence plus a hash index of per-key rows.

    ``_keys`` holds one entry per stored pair and decides global order.
    ``_data`` maps each distinct key to a non-empty :class:`Row`. Every public
    mutator updates both or neither.
    """

    __slots__ = ("_keys", "_data")

    def __init__(self, pairs: Optional[PairSource] = None) -> None:
        self._keys: List[Any] = []
        self._data: Dict[Hashable, Row] = {}
        if pairs is not None:
            self.extend(pairs)

    @classmethod
    def from_pairs(cls, pairs: PairSource) -> "HashKeylist":
        return cls(pairs)

    # ------------------------------------------------------------------
    # size / identity
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._keys)

    def is_empty(self) -> bool:
        return not self._keys

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashKeylist):
            return NotImplemented
        return self._keys == other._keys and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_pairs()!r})"

    def copy(self) -> "HashKeylist":
        clone = type(self)()
        clone._keys = list(self._keys)
        clone._data = {key: Row(row.key, row) for key, row in self._data.items()}
        return clone

    __copy__ = copy

    # ------------------------------------------------------------------
    # iteration
    # ------------------------------------------------------------------
    def iter(self) -> KeylistIter:
        return KeylistIter(self._keys, self._data)

    def __iter__(self) -> KeylistIter:
        return self.iter()

    def iter_mut(self) -> IterMut:
        return IterMut(self._keys, self._data)

    def keys(self) -> Iterator[Any]:
        return iter(self._keys)

    def values(self) -> Iterator[Any]:
        return (value for _, value in self.iter())

    def values_mut(self) -> Iterator[ValueSlot]:
        return (slot for _, slot in self.iter_mut())

    def into_iter(self) -> KeylistIter:
        """Detach all pairs and iterate them in global order; leaves ``self`` empty."""

        keys, data = self._keys, self._data
        self._keys = []
        self._data = {}
        return KeylistIter(keys, data)

    def to_pairs(self) -> List[Tuple[Any, Any]]:
        return list(self.iter())

    def into_pairs(self) -> List[Tuple[Any, Any]]:
        return list(self.into_iter())

    # ------------------------------------------------------------------
    # lookup
    # ------------------------------------------------------------------
    def get(self, key: Any) -> Optional[Any]:
        row = self._data.get(key)
        if not row:
            return None
        return row[0]

    def get_key_value(self, key: Any) -> Optional[Tuple[Any, Any]]:
        row = self._data.get(key)
        if not row:
            return None
        return row.key, row[0]

    def get_mut(self, key: Any) -> Optional[ValueSlot]:
        row = self._data.get(key)
        if not row:
            return None
        return ValueSlot(row.key, row, 0)

    def get_all(self, key: Any) -> Optional[List[Any]]:
        row = self._data.get(key)
        if row is None:
            return None
        return list(row)

    def get_all_mut(self, key: Any) -> Optional[Row]:
        """Return the live row for ``key``.

        Replacing elements is safe. Appending to or removing from the returned
        row does not touch the key sequence; add values with :meth:`push`.
        """

        return self._data.get(key)

    def get_all_key_value(self, key: Any) -> RowKeyValueIter:
        row = self._data.get(key)
        if row is None:
            return RowKeyValueIter(key, None)
        return RowKeyValueIter(row.key, row)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------
    def _row_for(self, key: Any) -> Row:
        row = self._data.get(key)
        if row is None:
            row = Row(key)
            self._data[key] = row
            logger.debug("Created row for key %r", key)
        return row

    def _drop_row_if_empty(self, key: Any, row: Row) -> None:
        if not row:
            del self._data[key]
            logger.debug("Dropped empty row for key %r", key)

    def _index_to_position(self, key: Any, index: int) -> int:
        return count_prior(self.iter(), key, index)

    def push(self, key: Any, value: Any) -> None:
        self._row_for(key).append(value)
        self._keys.append(key)

    def extend(self, pairs: PairSource) -> None:
        for key, value in iter_pairs(pairs):
            self.push(key, value)

    def insert(self, index: int, key: Any, value: Any) -> None:
        index = operator.index(index)
        size = len(self._keys)
        if index < 0 or index > size:
            raise IndexError(f"insertion index (is {index}) should be <= len (is {size})")
        position = self._index_to_position(key, index)
        self._row_for(key).insert(position, value)
        self._keys.insert(index, key)

    def pop(self) -> Optional[Tuple[Any, Any]]:
        if not self._keys:
            return None
        key = self._keys[-1]
        row = self._data.get(key)
        if not row:
            raise InvariantError(f"key {key!r} is in the key sequence but has no row")
        self._keys.pop()
        value = row.pop()
        self._drop_row_if_empty(key, row)
        return key, value

    def remove(self, index: int) -> Tuple[Any, Any]:
        index = operator.index(index)
        size = len(self._keys)
        if index < 0 or index >= size:
            raise IndexError(f"removal index (is {index}) should be < len (is {size})")
        key = self._keys[index]
        position = self._index_to_position(key, index)
        row = self._data.get(key)
        if row is None or position >= len(row):
            raise InvariantError(f"no value at offset {position} of row {key!r}")
        del self._keys[index]
        value = row.pop(position)
        self._drop_row_if_empty(key, row)
        return key, value

    def clear(self) -> None:
        self._keys.clear()
        self._data.clear()

    # ------------------------------------------------------------------
    # ordering
    # ------------------------------------------------------------------
    def sort_by_key(self) -> None:
        """Sort the key sequence only. Rows keep their order, so the n-th
        occurrence of a key is paired with the n-th value of its row."""

        self._keys = sorted(self._keys)

    def sort(self) -> None:
        keys = sorted(self._keys)
        ordered = {key: sorted(row) for key, row in self._data.items()}
        self._keys = keys
        for key, values in ordered.items():
            self._data[key][:] = values

    # ------------------------------------------------------------------
    # diagnostics
    # ------------------------------------------------------------------
    def check_invariants(self) -> None:
        counts: Dict[Hashable, int] = {}
        for key in self._keys:
            if key not in self._data:
                raise InvariantError(f"key {key!r} is in the key sequence but has no row")
            counts[key] = counts.get(key, 0) + 1
        for key, row in self._data.items():
            if not row:
                raise InvariantError(f"row for key {key!r} is empty but still indexed")
            expected = counts.get(key, 0)
            if len(row) != expected:
                raise InvariantError(
                    f"row for key {key!r} holds {len(row)} values but the key appears {expected} times",
                    hint="values appended through get_all_mut() bypass the key sequence; use push()",
                )


__all__ = ["HashKeylist", "PairSource", "Row", "iter_pairs"]
