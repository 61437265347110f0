"""I/O helpers for keylist documents."""

from .wire import dumps, from_wire, hashable_key, loads, read_document, to_wire, validate_wire, write_document

__all__ = [
    "dumps",
    "from_wire",
    "hashable_key",
    "loads",
    "read_document",
    "to_wire",
    "validate_wire",
    "write_document",
]
