from __future__ import annotations

import copy

import pytest

from keylist.contracts.error import InvariantError
from keylist.core import HashKeylist
from tests.util.builders import make_keylist


def test_from_pairs_builds_both_containers(sample: HashKeylist) -> None:
    keylist = HashKeylist([("oke", 1), ("test", 19), ("oke", 2)])
    assert keylist == sample
    assert HashKeylist.from_pairs([("oke", 1), ("test", 19), ("oke", 2)]) == sample


def test_from_mapping_gives_single_valued_rows() -> None:
    keylist = HashKeylist({"one": 1, "two": 2})
    assert keylist.get_all("one") == [1]
    assert list(keylist.keys()) == ["one", "two"]


def test_push_get_and_iteration() -> None:
    keylist = HashKeylist()
    keylist.push("oke", 1)
    keylist.push("test", 19)
    keylist.push("oke", 2)

    assert keylist.get("oke") == 1
    assert keylist.get_all("oke") == [1, 2]
    assert list(keylist.iter()) == [("oke", 1), ("test", 19), ("oke", 2)]
    assert list(keylist) == [("oke", 1), ("test", 19), ("oke", 2)]


def test_push_creates_rows_lazily(sample: HashKeylist) -> None:
    sample.push("oke", 3)
    assert sample == make_keylist(["oke", "test", "oke", "oke"], {"oke": [1, 2, 3], "test": [19]})

    sample.push("testing", 120)
    assert sample == make_keylist(
        ["oke", "test", "oke", "oke", "testing"],
        {"oke": [1, 2, 3], "test": [19], "testing": [120]},
    )


def test_extend_appends_in_order(sample: HashKeylist) -> None:
    sample.extend([("oke", 3), ("testing", 918), ("test", 55)])
    assert sample == make_keylist(
        ["oke", "test", "oke", "oke", "testing", "test"],
        {"oke": [1, 2, 3], "test": [19, 55], "testing": [918]},
    )


def test_insert_existing_key_keeps_other_values_in_order(sample: HashKeylist) -> None:
    sample.insert(1, "oke", 3)
    assert sample == make_keylist(["oke", "oke", "test", "oke"], {"oke": [1, 3, 2], "test": [19]})
    assert list(sample) == [("oke", 1), ("oke", 3), ("test", 19), ("oke", 2)]


def test_insert_computes_per_key_offset() -> None:
    keylist = make_keylist(
        ["oke", "oke", "test", "oke", "test", "oke", "oke", "test"],
        {"oke": [1, 2, 3, 4, 5], "test": [19, 21, 23]},
    )

    keylist.insert(3, "oke", 1234)
    assert keylist == make_keylist(
        ["oke", "oke", "test", "oke", "oke", "test", "oke", "oke", "test"],
        {"oke": [1, 2, 1234, 3, 4, 5], "test": [19, 21, 23]},
    )

    keylist.insert(3, "testing", 901)
    assert keylist == make_keylist(
        ["oke", "oke", "test", "testing", "oke", "oke", "test", "oke", "oke", "test"],
        {"oke": [1, 2, 1234, 3, 4, 5], "test": [19, 21, 23], "testing": [901]},
    )


def test_insert_at_len_appends(sample: HashKeylist) -> None:
    sample.insert(3, "oke", 7)
    assert list(sample)[-1] == ("oke", 7)
    assert sample.get_all("oke") == [1, 2, 7]


@pytest.mark.parametrize("index", [4, 100, -1])
def test_insert_out_of_range_raises_without_mutating(sample: HashKeylist, index: int) -> None:
    before = sample.copy()
    with pytest.raises(IndexError, match=r"insertion index \(is -?\d+\) should be <= len \(is 3\)"):
        sample.insert(index, "new", 0)
    assert sample == before
    assert "new" not in sample


def test_pop_returns_pairs_in_reverse(sample: HashKeylist) -> None:
    assert sample.pop() == ("oke", 2)
    assert sample.pop() == ("test", 19)
    assert sample.pop() == ("oke", 1)
    assert sample.pop() is None
    assert sample.is_empty()


def test_pop_drops_empty_rows(sample: HashKeylist) -> None:
    sample.pop()
    sample.pop()
    assert "test" not in sample
    assert sample.get_all("test") is None
    assert sample.get_all("oke") == [1]


def test_remove_by_index(sample: HashKeylist) -> None:
    assert sample.remove(1) == ("test", 19)
    assert list(sample) == [("oke", 1), ("oke", 2)]
    assert sample.remove(1) == ("oke", 2)
    assert sample.remove(0) == ("oke", 1)
    assert sample.pop() is None


def test_remove_first_repeatedly(sample: HashKeylist) -> None:
    assert sample.remove(0) == ("oke", 1)
    assert sample.remove(0) == ("test", 19)
    assert sample.remove(0) == ("oke", 2)
    assert sample.pop() is None


def test_remove_then_pop_matches_example(sample: HashKeylist) -> None:
    assert sample.remove(1) == ("test", 19)
    assert sample.pop() == ("oke", 2)


def test_remove_on_empty_raises() -> None:
    keylist = HashKeylist()
    with pytest.raises(IndexError, match=r"removal index \(is 0\) should be < len \(is 0\)"):
        keylist.remove(0)


def test_remove_negative_index_is_not_wrapped(sample: HashKeylist) -> None:
    with pytest.raises(IndexError):
        sample.remove(-1)
    assert len(sample) == 3


@pytest.mark.parametrize("index", [1.0, "1", None])
def test_non_integer_index_is_rejected_before_mutation(sample: HashKeylist, index: object) -> None:
    before = sample.copy()
    with pytest.raises(TypeError):
        sample.insert(index, "oke", 5)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        sample.remove(index)  # type: ignore[arg-type]
    assert sample == before
    sample.check_invariants()


def test_integer_like_index_is_accepted(sample: HashKeylist) -> None:
    sample.insert(True, "oke", 5)
    assert sample.to_pairs() == [("oke", 1), ("oke", 5), ("test", 19), ("oke", 2)]
    sample.check_invariants()


def test_is_empty_and_len(sample: HashKeylist) -> None:
    empty = HashKeylist()
    assert empty.is_empty()
    assert len(empty) == 0
    assert not empty
    assert not sample.is_empty()
    assert len(sample) == 3


def test_lookups_for_absent_keys_return_none(sample: HashKeylist) -> None:
    assert sample.get("missing") is None
    assert sample.get_all("missing") is None
    assert sample.get_key_value("missing") is None
    assert sample.get_mut("missing") is None
    assert sample.get_all_mut("missing") is None
    assert list(sample.get_all_key_value("missing")) == []


def test_get_key_value_uses_canonical_key() -> None:
    first, later = tuple(["k", 1]), tuple(["k", 1])
    assert first is not later
    keylist = HashKeylist()
    keylist.push(first, "a")
    keylist.push(later, "b")
    key, value = keylist.get_key_value(later)
    assert key is first
    assert value == "a"
    assert [k is first for k, _ in keylist.get_all_key_value(later)] == [True, True]


def test_get_all_key_value(sample: HashKeylist) -> None:
    assert list(sample.get_all_key_value("oke")) == [("oke", 1), ("oke", 2)]
    again = sample.get_all_key_value("oke")
    assert next(again) == ("oke", 1)


def test_get_all_returns_a_copy(sample: HashKeylist) -> None:
    row = sample.get_all("oke")
    assert row is not None
    row.append(99)
    assert sample.get_all("oke") == [1, 2]


def test_get_mut_writes_through(sample: HashKeylist) -> None:
    slot = sample.get_mut("oke")
    assert slot is not None
    slot.value += 13
    slot = sample.get_mut("test")
    assert slot is not None
    slot.value *= 2
    assert sample == make_keylist(["oke", "test", "oke"], {"oke": [14, 2], "test": [38]})


def test_get_all_mut_replacement_keeps_invariant(sample: HashKeylist) -> None:
    row = sample.get_all_mut("oke")
    assert row is not None
    row[1] = 20
    sample.check_invariants()
    assert list(sample) == [("oke", 1), ("test", 19), ("oke", 20)]


def test_get_all_mut_append_breaks_invariant(sample: HashKeylist) -> None:
    row = sample.get_all_mut("oke")
    assert row is not None
    row.append(3)
    with pytest.raises(InvariantError) as excinfo:
        sample.check_invariants()
    assert excinfo.value.hint is not None
    assert list(sample) == [("oke", 1), ("test", 19), ("oke", 2)]


def test_keys_and_values(sample: HashKeylist) -> None:
    assert list(sample.keys()) == ["oke", "test", "oke"]
    assert list(sample.values()) == [1, 19, 2]


def test_values_mut(sample: HashKeylist) -> None:
    for slot in sample.values_mut():
        slot.value *= 2
    assert sample == make_keylist(["oke", "test", "oke"], {"oke": [2, 4], "test": [38]})


def test_iter_mut_pairs_keys_with_slots(sample: HashKeylist) -> None:
    for key, slot in sample.iter_mut():
        if key == "test":
            slot.value = 0
    assert list(sample) == [("oke", 1), ("test", 0), ("oke", 2)]


def test_into_iter_consumes(sample: HashKeylist) -> None:
    pairs = sample.into_iter()
    assert sample.is_empty()
    assert list(pairs) == [("oke", 1), ("test", 19), ("oke", 2)]


def test_into_pairs_and_to_pairs(sample: HashKeylist) -> None:
    assert sample.to_pairs() == [("oke", 1), ("test", 19), ("oke", 2)]
    assert len(sample) == 3
    assert sample.into_pairs() == [("oke", 1), ("test", 19), ("oke", 2)]
    assert len(sample) == 0


def test_sort_by_key_reorders_keys_only() -> None:
    keylist = make_keylist(["oke", "test", "oke"], {"oke": [2, 1], "test": [19]})
    keylist.sort_by_key()
    assert keylist == make_keylist(["oke", "oke", "test"], {"oke": [2, 1], "test": [19]})
    assert list(keylist) == [("oke", 2), ("oke", 1), ("test", 19)]


def test_sort_sorts_keys_then_rows() -> None:
    keylist = make_keylist(
        ["oke", "test", "oke", "test", "oke"],
        {"oke": [2, 3, 1], "test": [21, 19]},
    )
    keylist.sort()
    assert keylist == make_keylist(
        ["oke", "oke", "oke", "test", "test"],
        {"oke": [1, 2, 3], "test": [19, 21]},
    )


def test_sort_by_key_with_unorderable_keys_leaves_state(sample: HashKeylist) -> None:
    sample.push(3, "int key")
    before = sample.copy()
    with pytest.raises(TypeError):
        sample.sort_by_key()
    assert sample == before


def test_sort_with_unorderable_values_leaves_state() -> None:
    keylist = HashKeylist([("a", 3), ("b", 1), ("a", "x"), ("a", 1)])
    before = keylist.copy()
    with pytest.raises(TypeError):
        keylist.sort()
    assert keylist == before
    keylist.check_invariants()


def test_mixed_workload_after_sort() -> None:
    keylist = HashKeylist({"one": 1, "two": 2, "three": 3, "four": 4})
    keylist.sort_by_key()
    keylist.push("one", 11)
    keylist.push("five", 5)
    keylist.push("five", 1)

    assert list(keylist) == [
        ("four", 4),
        ("one", 1),
        ("three", 3),
        ("two", 2),
        ("one", 11),
        ("five", 5),
        ("five", 1),
    ]

    keylist.insert(2, "five", 12)
    assert list(keylist) == [
        ("four", 4),
        ("one", 1),
        ("five", 12),
        ("three", 3),
        ("two", 2),
        ("one", 11),
        ("five", 5),
        ("five", 1),
    ]

    assert keylist.pop() == ("five", 1)
    assert keylist.remove(4) == ("two", 2)
    assert list(keylist.keys()) == ["four", "one", "five", "three", "one", "five"]
    assert list(keylist.values()) == [4, 1, 12, 3, 11, 5]
    assert keylist.into_pairs() == [
        ("four", 4),
        ("one", 1),
        ("five", 12),
        ("three", 3),
        ("one", 11),
        ("five", 5),
    ]


def test_copy_is_independent(sample: HashKeylist) -> None:
    clone = copy.copy(sample)
    clone.push("oke", 3)
    assert sample.get_all("oke") == [1, 2]
    assert clone.get_all("oke") == [1, 2, 3]
    assert clone != sample


def test_equality_ignores_row_insertion_order_of_dict() -> None:
    left = make_keylist(["a", "b"], {"a": [1], "b": [2]})
    right = make_keylist(["a", "b"], {"b": [2], "a": [1]})
    assert left == right
    assert left != make_keylist(["b", "a"], {"a": [1], "b": [2]})
    assert (left == [("a", 1), ("b", 2)]) is False


def test_contains_and_repr(sample: HashKeylist) -> None:
    assert "oke" in sample
    assert "nope" not in sample
    assert repr(sample) == "HashKeylist([('oke', 1), ('test', 19), ('oke', 2)])"


def test_clear(sample: HashKeylist) -> None:
    sample.clear()
    assert sample.is_empty()
    assert sample.get("oke") is None
    sample.check_invariants()


def test_unhashable_key_is_rejected_before_mutation(sample: HashKeylist) -> None:
    with pytest.raises(TypeError):
        sample.push(["list", "key"], 1)
    with pytest.raises(TypeError):
        sample.insert(0, ["list", "key"], 1)
    assert len(sample) == 3
    sample.check_invariants()


def test_check_invariants_reports_missing_row() -> None:
    keylist = make_keylist(["ghost"], {})
    with pytest.raises(InvariantError, match="ghost"):
        keylist.check_invariants()
    with pytest.raises(InvariantError):
        keylist.pop()


def test_check_invariants_reports_empty_row() -> None:
    keylist = make_keylist([], {"hollow": []})
    with pytest.raises(InvariantError, match="empty"):
        keylist.check_invariants()
