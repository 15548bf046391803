import copy
import logging
import pickle
import random
import threading

import pytest

from persistent_collections import OrderedMap, OrderedSet
from persistent_collections.abc import OrderedCollection


def test_from_list_sorts_and_drops_duplicates():
    assert OrderedSet.from_list([3, 1, 2, 3, 1]).to_list() == [1, 2, 3]


def test_diff_example():
    assert OrderedSet.from_list([1, 2, 3]).diff(OrderedSet.from_list([2, 3])).to_list() == [1]


def test_intersect_example():
    assert OrderedSet.from_list([1, 2, 3]).intersect(OrderedSet.from_list([2, 3, 4])).to_list() == [2, 3]


def test_map_collapses_collisions():
    """Four distinct members map onto two results"""
    assert OrderedSet.from_list([1, 2, 3, 4]).map(lambda v: v % 2).to_list() == [0, 1]


def test_partition_example():
    first, second = OrderedSet.from_list([1, 2, 3, 4]).partition(lambda v: v > 2)
    assert first.to_list() == [3, 4]
    assert second.to_list() == [1, 2]


def test_empty():
    s = OrderedSet.empty()
    assert s.is_empty()
    assert s.size() == 0
    assert s.to_list() == []
    assert not s
    assert OrderedSet() == s


def test_singleton():
    s = OrderedSet.singleton("x")
    assert s.to_list() == ["x"]
    assert s.member("x")
    assert not s.member("y")


def test_insert_is_idempotent():
    s = OrderedSet.from_list([1, 5])
    once = s.insert(3)
    twice = once.insert(3)
    assert once.to_list() == twice.to_list() == [1, 3, 5]
    assert twice is once


def test_insert_and_remove_membership():
    s = OrderedSet.from_list(range(10))
    assert s.insert(42).member(42)
    assert not s.remove(4).member(4)
    assert 42 in s.insert(42)
    assert 4 not in s.remove(4)


def test_remove_missing_is_not_an_error():
    s = OrderedSet.from_list([1, 2])
    assert s.remove(7) is s
    assert OrderedSet.empty().remove(7).is_empty()


def test_updates_do_not_change_the_original():
    s = OrderedSet.from_list([1, 2, 3])
    s.insert(4)
    s.remove(1)
    s.union(OrderedSet.from_list([9]))
    s.filter(lambda v: v > 1)
    s.map(lambda v: -v)
    assert s.to_list() == [1, 2, 3]


def test_size_matches_to_list(rng):
    s = OrderedSet.from_list(rng.randrange(50) for _ in range(100))
    assert s.size() == len(s) == len(s.to_list())


@pytest.mark.parametrize("length", [0, 1, 2, 17, 300])
def test_round_trip(rng, length):
    xs = [rng.randrange(length + 1) for _ in range(length)]
    assert OrderedSet.from_list(xs).to_list() == sorted(set(xs))
    assert OrderedSet(xs) == OrderedSet.from_iterable(xs)


def test_from_list_keeps_first_of_equal_elements():
    """Later equal elements are absorbed like repeated inserts"""
    s = OrderedSet.from_list([1.0, 2, 1, True])
    assert s.to_list() == [1.0, 2]
    assert type(s.to_list()[0]) is float
    assert type(OrderedSet.from_list([1, 1.0]).to_list()[0]) is int


def test_insert_keeps_stored_member():
    s = OrderedSet.singleton(1).insert(1.0)
    assert type(s.min()) is int


def test_from_list_accepts_ordered_collections():
    m = OrderedMap({3: "c", 1: "a"})
    assert OrderedSet.from_list(m).to_list() == [1, 3]
    s = OrderedSet.from_list([2, 1])
    assert isinstance(s, OrderedCollection)
    assert OrderedSet.from_list(s) == s


def test_from_list_rejects_non_iterables():
    with pytest.raises(TypeError):
        OrderedSet.from_list(3)
    with pytest.raises(TypeError):
        OrderedSet(3)


def test_union_size():
    a = OrderedSet.from_list(range(0, 50, 2))
    b = OrderedSet.from_list(range(1, 50, 2))
    assert a.union(b).size() == a.size() + b.size()
    c = OrderedSet.from_list(range(0, 50, 3))
    assert a.union(c).size() < a.size() + c.size()
    assert a.union(c).to_list() == sorted(set(range(0, 50, 2)) | set(range(0, 50, 3)))


def test_union_keeps_members_of_left_operand():
    s = OrderedSet.from_list([1.0]).union(OrderedSet.from_list([1, 2]))
    assert type(s.min()) is float


def test_diff_is_not_commutative():
    a = OrderedSet.from_list([1, 2, 3])
    b = OrderedSet.from_list([3, 4])
    assert a.diff(b).to_list() == [1, 2]
    assert b.diff(a).to_list() == [4]


@pytest.mark.parametrize("seed", range(5))
def test_set_algebra_matches_builtin_sets(seed):
    rng = random.Random(seed)
    xs = {rng.randrange(100) for _ in range(rng.randrange(60))}
    ys = {rng.randrange(100) for _ in range(rng.randrange(60))}
    a = OrderedSet.from_list(xs)
    b = OrderedSet.from_list(ys)
    assert a.union(b).to_list() == sorted(xs | ys)
    assert a.intersect(b).to_list() == sorted(xs & ys)
    assert a.diff(b).to_list() == sorted(xs - ys)
    assert a.symmetric_difference(b).to_list() == sorted(xs ^ ys)


def test_operators():
    a = OrderedSet.from_list([1, 2, 3])
    b = OrderedSet.from_list([3, 4])
    assert (a | b).to_list() == [1, 2, 3, 4]
    assert (a & b).to_list() == [3]
    assert (a - b).to_list() == [1, 2]
    assert (a ^ b).to_list() == [1, 2, 4]
    assert (a | {5}).to_list() == [1, 2, 3, 5]
    assert isinstance({2, 3} - a, OrderedSet)
    assert ({2, 3, 7} - a).to_list() == [7]
    with pytest.raises(TypeError):
        a | [5]


def test_named_operations_accept_iterables():
    a = OrderedSet.from_list([1, 2, 3])
    assert a.union([5, 0]).to_list() == [0, 1, 2, 3, 5]
    assert a.intersect(range(2, 10)).to_list() == [2, 3]
    assert a.diff((1,)).to_list() == [2, 3]
    with pytest.raises(TypeError):
        a.union(5)


def test_comparisons():
    a = OrderedSet.from_list([1, 2])
    b = OrderedSet.from_list([1, 2, 3])
    assert a <= b
    assert a < b
    assert b > a
    assert not b <= a
    assert a.issubset(b)
    assert b.issuperset([1, 2])
    assert a.isdisjoint(OrderedSet.from_list([7, 8]))
    assert a == {1, 2}
    assert {1, 2} == a


def test_equality_ignores_update_history():
    forwards = OrderedSet.empty()
    for i in range(50):
        forwards = forwards.insert(i)
    backwards = OrderedSet.from_list(reversed(range(100))).filter(lambda v: v < 50)
    assert forwards == backwards
    assert forwards != backwards.remove(10)


class Version:
    """Orders by number through `<` alone, hashing by identity."""

    def __init__(self, number):
        self.number = number

    def __lt__(self, other):
        return self.number < other.number


def test_sets_of_less_than_only_members_are_equal_but_unhashable():
    a = OrderedSet([Version(2), Version(1)])
    b = OrderedSet([Version(1), Version(2)])
    assert a == b
    assert Version(1) in a
    with pytest.raises(TypeError):
        hash(a)
    with pytest.raises(TypeError):
        hash(OrderedSet.from_list([1, 2]))
    with pytest.raises(TypeError):
        {a: "value"}


def test_to_list_and_iteration_are_increasing():
    s = OrderedSet.from_list(["pear", "apple", "fig"])
    assert s.to_list() == ["apple", "fig", "pear"]
    assert list(s) == s.to_list()
    assert list(reversed(s)) == ["pear", "fig", "apple"]


def test_fold_order(rng):
    s = OrderedSet.from_list(rng.randrange(1000) for _ in range(200))
    assert s.foldl(lambda v, acc: acc + [v], []) == s.to_list()
    assert s.foldr(lambda v, acc: acc + [v], []) == s.to_list()[::-1]


def test_folds_nest_as_documented():
    s = OrderedSet.from_list([1, 2, 3])
    assert s.foldl(lambda v, acc: f"f({v}, {acc})", "z") == "f(3, f(2, f(1, z)))"
    assert s.foldr(lambda v, acc: f"f({v}, {acc})", "z") == "f(1, f(2, f(3, z)))"
    assert OrderedSet.empty().foldl(lambda v, acc: acc + 1, 0) == 0


def test_map_applies_in_increasing_order():
    seen = []

    def record(v):
        seen.append(v)
        return v * 10

    assert OrderedSet.from_list([3, 1, 2]).map(record).to_list() == [10, 20, 30]
    assert seen == [1, 2, 3]


def test_map_collision_keeps_result_of_smallest_member():
    s = OrderedSet.from_list([1, 2])
    result = s.map(lambda v: 1.0 if v == 1 else 1)
    assert result.to_list() == [1.0]
    assert type(result.min()) is float


def test_map_logs_collapse(caplog):
    caplog.set_level(logging.DEBUG, logger="persistent_collections")
    OrderedSet.from_list([1, 2, 3, 4]).map(lambda v: v % 2)
    assert "map collapsed 4 members into 2" in caplog.text


def test_filter():
    s = OrderedSet.from_list(range(10))
    assert s.filter(lambda v: v % 3 == 0).to_list() == [0, 3, 6, 9]
    assert s.filter(lambda v: True) is s
    assert s.filter(lambda v: False).is_empty()


@pytest.mark.parametrize("threshold", [-1, 0, 5, 9, 20])
def test_partition_covers_exactly(threshold):
    s = OrderedSet.from_list(range(10))
    first, second = s.partition(lambda v: v < threshold)
    assert first.intersect(second).is_empty()
    assert first.union(second) == s
    assert first.size() + second.size() == s.size()
    assert first == s.filter(lambda v: v < threshold)


def test_callables_are_checked():
    s = OrderedSet.from_list([1])
    for method in (s.map, s.filter, s.partition):
        with pytest.raises(TypeError):
            method("not callable")
    with pytest.raises(TypeError):
        s.foldl(None, 0)
    with pytest.raises(TypeError):
        s.foldr(None, 0)


def test_min_max_and_split():
    s = OrderedSet.from_list([5, 1, 9, 3])
    assert s.min() == 1
    assert s.max() == 9
    lower, found, upper = s.split(5)
    assert (lower.to_list(), found, upper.to_list()) == ([1, 3], True, [9])
    lower, found, upper = s.split(4)
    assert (lower.to_list(), found, upper.to_list()) == ([1, 3], False, [5, 9])
    with pytest.raises(ValueError):
        OrderedSet.empty().min()
    with pytest.raises(ValueError):
        OrderedSet.empty().max()


def test_unhashable_and_tuple_members():
    s = OrderedSet.from_list([[2, 1], [1, 2], [2, 1]])
    assert s.to_list() == [[1, 2], [2, 1]]
    assert [2, 1] in s
    t = OrderedSet.from_list([(1, "b"), (1, "a"), (0, "z")])
    assert t.to_list() == [(0, "z"), (1, "a"), (1, "b")]


def test_incomparable_members_raise():
    with pytest.raises(TypeError):
        OrderedSet.from_list([1, "a"])
    with pytest.raises(TypeError):
        OrderedSet.from_list([1]).insert("a")


def test_repr():
    assert repr(OrderedSet()) == "OrderedSet()"
    assert repr(OrderedSet.from_list([3, 1])) == "OrderedSet([1, 3])"


def test_copy_and_pickle():
    s = OrderedSet.from_list([(1,), (2,)])
    assert copy.copy(s) is s
    assert s.copy() is s
    assert copy.deepcopy(s) == s
    restored = pickle.loads(pickle.dumps(s))
    assert restored == s
    assert isinstance(restored, OrderedSet)


def test_concurrent_readers_share_a_set():
    base = OrderedSet.from_list(range(100))
    results = [None] * 8

    def work(index):
        derived = base
        for i in range(100, 200):
            derived = derived.insert(i * (index + 1))
        results[index] = derived.size()

    threads = [threading.Thread(target=work, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert base.to_list() == list(range(100))
    assert results[0] == 200
