"""Ordered multimaps: a hash-indexed keylist and a plain list-backed one."""

from . import contracts, core, io
from .core import HashKeylist, Keylist, ValueSlot

__all__ = [
    "HashKeylist",
    "Keylist",
    "ValueSlot",
    "contracts",
    "core",
    "io",
]
