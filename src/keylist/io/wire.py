"""JSON wire codec for keylists.

Two shapes are accepted on read:

* ``[[key, value], ...]`` -- lossless, keeps duplicates and order.
* ``{"key": value, ...}`` -- lossy, a mapping cannot repeat a key.

Writes always use the first shape.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping, Sequence
from contextlib import suppress
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

from jsonschema import Draft202012Validator

from keylist.contracts.error import BadInputError, IOErrorEnvelope
from keylist.core import HashKeylist, Keylist

logger = logging.getLogger("keylist")

KeylistT = TypeVar("KeylistT", HashKeylist, Keylist)


def hashable_key(obj: Any) -> Any:
    """Turn a decoded JSON key into a hashable one; arrays become tuples at every depth."""

    if isinstance(obj, list):
        return tuple(hashable_key(item) for item in obj)
    if isinstance(obj, dict):
        raise BadInputError("JSON objects cannot be used as keys", hint="use a string or an array key")
    return obj


@lru_cache(maxsize=1)
def _wire_validator() -> Draft202012Validator:
    schema_resource = resources.files("keylist.contracts") / "wire_schema.json"
    with schema_resource.open(encoding="utf-8") as stream:
        return Draft202012Validator(json.load(stream))


def validate_wire(obj: Any) -> list[str]:
    """Return schema violations for a decoded JSON document (empty when valid)."""

    errors = sorted(_wire_validator().iter_errors(obj), key=lambda err: list(err.path))
    return [f"{err.message} @ {list(err.path)}" for err in errors]


def to_wire(keylist: HashKeylist | Keylist) -> list[list[Any]]:
    return [[key, value] for key, value in keylist.iter()]


def from_wire(obj: Any, cls: type[KeylistT] = HashKeylist) -> KeylistT:  # type: ignore[assignment]
    """Rebuild a keylist from either wire shape, appending in arrival order."""

    result = cls()
    if isinstance(obj, Mapping):
        for key, value in obj.items():
            result.push(key, value)
        return result
    if isinstance(obj, (str, bytes)) or not isinstance(obj, Sequence):
        raise BadInputError(
            f"Expected a list of [key, value] pairs or an object, got {type(obj).__name__}"
        )
    for position, item in enumerate(obj):
        if isinstance(item, (str, bytes)) or not isinstance(item, Sequence) or len(item) != 2:
            raise BadInputError(f"Entry {position} is not a [key, value] pair: {item!r}")
        key, value = item
        result.push(hashable_key(key), value)
    return result


def dumps(
    keylist: HashKeylist | Keylist, *, indent: int | None = None, ensure_ascii: bool = False
) -> str:
    return json.dumps(to_wire(keylist), indent=indent, ensure_ascii=ensure_ascii)


def loads(text: str | bytes, cls: type[KeylistT] = HashKeylist) -> KeylistT:  # type: ignore[assignment]
    try:
        payload = json.loads(text)
    except UnicodeDecodeError as exc:
        raise BadInputError(f"Document is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise BadInputError(f"Invalid JSON: {exc}") from exc
    problems = validate_wire(payload)
    if problems:
        raise BadInputError(
            f"Not a keylist document: {problems[0]}",
            hint="expected [[key, value], ...] or {\"key\": value}",
        )
    return from_wire(payload, cls)


def read_document(
    path: str | Path, cls: type[KeylistT] = HashKeylist, *, missing_ok: bool = False  # type: ignore[assignment]
) -> KeylistT:
    source = Path(path)
    if missing_ok and not source.exists():
        logger.debug("No document at %s; starting from an empty keylist", source)
        return cls()
    try:
        text = source.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise IOErrorEnvelope(f"Keylist document not found: {source}") from exc
    except UnicodeDecodeError as exc:
        raise BadInputError(f"{source} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise IOErrorEnvelope(f"Cannot read {source}: {exc}") from exc
    if not text.strip():
        logger.debug("Empty document %s; starting from an empty keylist", source)
        return cls()
    return loads(text, cls)


def write_document(
    keylist: HashKeylist | Keylist,
    path: str | Path,
    *,
    indent: int | None = None,
    ensure_ascii: bool = False,
) -> Path:
    """Write ``keylist`` atomically by writing to a temp file first."""

    target = Path(path)
    payload = dumps(keylist, indent=indent, ensure_ascii=ensure_ascii)
    tmp = tempfile.NamedTemporaryFile(
        delete=False,
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    tmp_path = Path(tmp.name)
    tmp.close()
    try:
        tmp_path.write_text(payload + "\n", encoding="utf-8")
        os.replace(tmp_path, target)
    except Exception:
        with suppress(FileNotFoundError):
            tmp_path.unlink()
        raise
    logger.debug("Wrote %d pairs to %s", len(keylist), target)
    return target


__all__ = [
    "to_wire",
    "from_wire",
    "hashable_key",
    "dumps",
    "loads",
    "read_document",
    "validate_wire",
    "write_document",
]
