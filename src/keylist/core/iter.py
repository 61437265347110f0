"""Global-order iteration over a key sequence plus per-key rows."""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Tuple


class ValueSlot:
    """Writable handle onto one value stored in a row."""

    __slots__ = ("key", "_row", "_offset")

    def __init__(self, key: Any, row: List[Any], offset: int) -> None:
        self.key = key
        self._row = row
        self._offset = offset

    @property
    def value(self) -> Any:
        return self._row[self._offset]

    @value.setter
    def value(self, new_value: Any) -> None:
        self._row[self._offset] = new_value

    def __repr__(self) -> str:
        return f"ValueSlot({self.key!r}, {self.value!r})"


class KeylistIter:
    """Yield ``(key, value)`` pairs by consuming each key's row as the key appears.

    One cursor walks the key sequence; a second, per-key cursor is created the
    first time a key is seen and advanced once per occurrence. Single pass.
    """

    __slots__ = ("_keys", "_rows", "_cursors")

    def __init__(self, keys: Iterable[Any], rows: Mapping[Hashable, List[Any]]) -> None:
        self._keys: Iterator[Any] = iter(keys)
        self._rows = rows
        self._cursors: Dict[Hashable, int] = {}

    def __iter__(self) -> "KeylistIter":
        return self

    def _advance(self) -> Tuple[Any, List[Any], int]:
        key = next(self._keys)
        row = self._rows.get(key)
        if row is None:
            raise StopIteration
        offset = self._cursors.get(key, 0)
        if offset >= len(row):
            raise StopIteration
        self._cursors[key] = offset + 1
        return key, row, offset

    def __next__(self) -> Tuple[Any, Any]:
        key, row, offset = self._advance()
        return key, row[offset]


class IterMut(KeylistIter):
    """Same walk as :class:`KeylistIter`, yielding writable slots."""

    __slots__ = ()

    def __next__(self) -> Tuple[Any, ValueSlot]:  # type: ignore[override]
        key, row, offset = self._advance()
        return key, ValueSlot(key, row, offset)


class RowKeyValueIter:
    """Pair a canonical key with every value of its row, in row order."""

    __slots__ = ("_key", "_values")

    def __init__(self, key: Any, row: Optional[Iterable[Any]]) -> None:
        self._key = key
        self._values: Iterator[Any] = iter(row if row is not None else ())

    def __iter__(self) -> "RowKeyValueIter":
        return self

    def __next__(self) -> Tuple[Any, Any]:
        return self._key, next(self._values)


def count_prior(pairs: Iterable[Tuple[Any, Any]], key: Any, index: int) -> int:
    """Count occurrences of ``key`` among the first ``index`` pairs."""

    seen = 0
    for position, (candidate, _) in enumerate(pairs):
        if position >= index:
            break
        if candidate == key:
            seen += 1
    return seen


__all__ = ["IterMut", "KeylistIter", "RowKeyValueIter", "ValueSlot", "count_prior"]
