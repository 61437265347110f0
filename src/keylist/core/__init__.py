from .hash_keylist import HashKeylist, PairSource, Row, iter_pairs
from .iter import IterMut, KeylistIter, RowKeyValueIter, ValueSlot, count_prior
from .vec_keylist import Keylist

__all__ = [
    "HashKeylist",
    "Keylist",
    "PairSource",
    "Row",
    "ValueSlot",
    "KeylistIter",
    "IterMut",
    "RowKeyValueIter",
    "count_prior",
    "iter_pairs",
]
