from __future__ import annotations
import logging
from collections.abc import Callable, ItemsView, Iterable, Iterator, KeysView, Mapping, ValuesView
from copy import deepcopy
from typing import Any, Generic, Optional, Tuple, Type, TypeVar

from persistent_collections._src.comparable import SupportsLessThan

__all__ = ["OrderedMap"]

logger = logging.getLogger(__name__)

# A subtree holds at most DELTA times as many entries as its sibling.
DELTA = 3
# Below RATIO a heavy child is fixed by a single rotation, otherwise a double.
RATIO = 2

KT = TypeVar("KT", bound=SupportsLessThan)
VT = TypeVar("VT")
S = TypeVar("S")

Self = TypeVar("Self", bound="OrderedMap")

reprs_seen: set[int] = set()


class _Node:
    __slots__ = {
        "key":
            "The key stored at this node.",
        "value":
            "The value the key maps to.",
        "left":
            "The subtree of smaller keys, or None.",
        "right":
            "The subtree of larger keys, or None.",
        "size":
            "The number of entries in this subtree.",
    }

    def __init__(self, key, value, left, right):
        self.key = key
        self.value = value
        self.left = left
        self.right = right
        self.size = _size(left) + _size(right) + 1


def _size(node: Optional[_Node]) -> int:
    return 0 if node is None else node.size


def _find(node: Optional[_Node], key: Any) -> Optional[_Node]:
    while node is not None:
        if key < node.key:
            node = node.left
        elif node.key < key:
            node = node.right
        else:
            return node
    return None


def _iter_nodes(node: Optional[_Node]) -> Iterator[_Node]:
    stack = []
    while stack or node is not None:
        if node is not None:
            stack.append(node)
            node = node.left
        else:
            node = stack.pop()
            yield node
            node = node.right


def _reversed_nodes(node: Optional[_Node]) -> Iterator[_Node]:
    stack = []
    while stack or node is not None:
        if node is not None:
            stack.append(node)
            node = node.right
        else:
            node = stack.pop()
            yield node
            node = node.left


def _build(items: list, start: int, stop: int) -> Optional[_Node]:
    if start >= stop:
        return None
    middle = (start + stop) // 2
    key, value = items[middle]
    return _Node(key, value, _build(items, start, middle), _build(items, middle + 1, stop))


def _balance(key, value, left: Optional[_Node], right: Optional[_Node]) -> _Node:
    """Join two subtrees whose weights are off by at most one insert or delete."""
    size_left = _size(left)
    size_right = _size(right)
    if size_left + size_right <= 1:
        return _Node(key, value, left, right)
    elif size_right > DELTA * size_left:
        if _size(right.left) < RATIO * _size(right.right):
            return _Node(right.key, right.value, _Node(key, value, left, right.left), right.right)
        inner = right.left
        return _Node(
            inner.key,
            inner.value,
            _Node(key, value, left, inner.left),
            _Node(right.key, right.value, inner.right, right.right),
        )
    elif size_left > DELTA * size_right:
        if _size(left.right) < RATIO * _size(left.left):
            return _Node(left.key, left.value, left.left, _Node(key, value, left.right, right))
        inner = left.right
        return _Node(
            inner.key,
            inner.value,
            _Node(left.key, left.value, left.left, inner.left),
            _Node(key, value, inner.right, right),
        )
    else:
        return _Node(key, value, left, right)


def _insert(node: Optional[_Node], key, value) -> _Node:
    if node is None:
        return _Node(key, value, None, None)
    elif key < node.key:
        left = _insert(node.left, key, value)
        if left is node.left:
            return node
        return _balance(node.key, node.value, left, node.right)
    elif node.key < key:
        right = _insert(node.right, key, value)
        if right is node.right:
            return node
        return _balance(node.key, node.value, node.left, right)
    elif node.value is value:
        return node
    else:
        # The key already stored is kept, only the value is replaced.
        return _Node(node.key, value, node.left, node.right)


def _insert_min(node: Optional[_Node], key, value) -> _Node:
    if node is None:
        return _Node(key, value, None, None)
    return _balance(node.key, node.value, _insert_min(node.left, key, value), node.right)


def _insert_max(node: Optional[_Node], key, value) -> _Node:
    if node is None:
        return _Node(key, value, None, None)
    return _balance(node.key, node.value, node.left, _insert_max(node.right, key, value))


def _pop_min(node: _Node) -> Tuple[_Node, Optional[_Node]]:
    if node.left is None:
        return node, node.right
    smallest, left = _pop_min(node.left)
    return smallest, _balance(node.key, node.value, left, node.right)


def _pop_max(node: _Node) -> Tuple[_Node, Optional[_Node]]:
    if node.right is None:
        return node, node.left
    largest, right = _pop_max(node.right)
    return largest, _balance(node.key, node.value, node.left, right)


def _glue(left: Optional[_Node], right: Optional[_Node]) -> Optional[_Node]:
    # Both subtrees are already balanced with respect to each other.
    if left is None:
        return right
    elif right is None:
        return left
    elif left.size > right.size:
        largest, left = _pop_max(left)
        return _balance(largest.key, largest.value, left, right)
    else:
        smallest, right = _pop_min(right)
        return _balance(smallest.key, smallest.value, left, right)


def _link(key, value, left: Optional[_Node], right: Optional[_Node]) -> _Node:
    """Join left < key < right for subtrees of any weight."""
    if left is None:
        return _insert_min(right, key, value)
    elif right is None:
        return _insert_max(left, key, value)
    elif DELTA * left.size < right.size:
        return _balance(right.key, right.value, _link(key, value, left, right.left), right.right)
    elif DELTA * right.size < left.size:
        return _balance(left.key, left.value, left.left, _link(key, value, left.right, right))
    else:
        return _Node(key, value, left, right)


def _merge(left: Optional[_Node], right: Optional[_Node]) -> Optional[_Node]:
    """Join left < right for subtrees of any weight."""
    if left is None:
        return right
    elif right is None:
        return left
    elif DELTA * left.size < right.size:
        return _balance(right.key, right.value, _merge(left, right.left), right.right)
    elif DELTA * right.size < left.size:
        return _balance(left.key, left.value, left.left, _merge(left.right, right))
    else:
        return _glue(left, right)


def _remove(node: Optional[_Node], key) -> Optional[_Node]:
    if node is None:
        return None
    elif key < node.key:
        left = _remove(node.left, key)
        if left is node.left:
            return node
        return _balance(node.key, node.value, left, node.right)
    elif node.key < key:
        right = _remove(node.right, key)
        if right is node.right:
            return node
        return _balance(node.key, node.value, node.left, right)
    else:
        return _glue(node.left, node.right)


def _split(node: Optional[_Node], key) -> Tuple[Optional[_Node], Optional[_Node], Optional[_Node]]:
    if node is None:
        return None, None, None
    elif key < node.key:
        lower, found, upper = _split(node.left, key)
        return lower, found, _link(node.key, node.value, upper, node.right)
    elif node.key < key:
        lower, found, upper = _split(node.right, key)
        return _link(node.key, node.value, node.left, lower), found, upper
    else:
        return node.left, node, node.right


def _union(node: Optional[_Node], other: Optional[_Node]) -> Optional[_Node]:
    # Keys and values of the first tree win on collisions.
    if other is None:
        return node
    elif node is None:
        return other
    lower, _, upper = _split(other, node.key)
    left = _union(node.left, lower)
    right = _union(node.right, upper)
    if left is node.left and right is node.right:
        return node
    return _link(node.key, node.value, left, right)


def _intersect(node: Optional[_Node], other: Optional[_Node]) -> Optional[_Node]:
    if node is None or other is None:
        return None
    lower, found, upper = _split(other, node.key)
    left = _intersect(node.left, lower)
    right = _intersect(node.right, upper)
    if found is None:
        return _merge(left, right)
    elif left is node.left and right is node.right:
        return node
    return _link(node.key, node.value, left, right)


def _diff(node: Optional[_Node], other: Optional[_Node]) -> Optional[_Node]:
    if node is None:
        return None
    elif other is None:
        return node
    lower, _, upper = _split(node, other.key)
    left = _diff(lower, other.left)
    right = _diff(upper, other.right)
    if _size(left) + _size(right) == node.size:
        return node
    return _merge(left, right)


def _filter(node: Optional[_Node], predicate: Callable[[Any, Any], bool]) -> Optional[_Node]:
    if node is None:
        return None
    # Visit in order so the predicate sees keys in increasing order.
    left = _filter(node.left, predicate)
    keep = predicate(node.key, node.value)
    right = _filter(node.right, predicate)
    if not keep:
        return _merge(left, right)
    elif left is node.left and right is node.right:
        return node
    return _link(node.key, node.value, left, right)


def _partition(node: Optional[_Node], predicate: Callable[[Any, Any], bool]) -> Tuple[Optional[_Node], Optional[_Node]]:
    if node is None:
        return None, None
    left_in, left_out = _partition(node.left, predicate)
    keep = predicate(node.key, node.value)
    right_in, right_out = _partition(node.right, predicate)
    if keep:
        if left_in is node.left and right_in is node.right:
            return node, None
        return _link(node.key, node.value, left_in, right_in), _merge(left_out, right_out)
    elif left_out is node.left and right_out is node.right:
        return None, node
    return _merge(left_in, right_in), _link(node.key, node.value, left_out, right_out)


class OrderedKeysView(KeysView[KT]):

    __slots__ = ()

    def __iter__(self: OrderedKeysView[KT], /) -> Iterator[KT]:
        return iter(self._mapping)

    def __reversed__(self: OrderedKeysView[KT], /) -> Iterator[KT]:
        return reversed(self._mapping)


class OrderedItemsView(ItemsView[KT, VT]):

    __slots__ = ()

    def __iter__(self: OrderedItemsView[KT, VT], /) -> Iterator[Tuple[KT, VT]]:
        return ((node.key, node.value) for node in _iter_nodes(self._mapping._root))

    def __reversed__(self: OrderedItemsView[KT, VT], /) -> Iterator[Tuple[KT, VT]]:
        return ((node.key, node.value) for node in _reversed_nodes(self._mapping._root))


class OrderedValuesView(ValuesView[VT]):

    __slots__ = ()

    def __iter__(self: OrderedValuesView[VT], /) -> Iterator[VT]:
        return (node.value for node in _iter_nodes(self._mapping._root))

    def __reversed__(self: OrderedValuesView[VT], /) -> Iterator[VT]:
        return (node.value for node in _reversed_nodes(self._mapping._root))


class OrderedMap(Mapping[KT, VT], Generic[KT, VT]):
    """
    A persistent mapping whose keys are kept in increasing order.

    Every update returns a new map and leaves the original untouched.
    Unchanged subtrees are shared between the old and the new map, so
    single-key updates cost O(log n) time and memory.

    Keys only need a total order through `<`; they do not need to be
    hashable. Equal keys are those where neither is less than the other.
    """
    __root: Optional[_Node]

    __slots__ = {
        "__root":
            "The root of a weight-balanced tree, or None when empty.",
    }

    def __init__(self: OrderedMap[KT, VT], iterable: Optional[Iterable[Tuple[KT, VT]]] = None, /) -> None:
        if iterable is None:
            self.__root = None
        elif isinstance(iterable, Mapping):
            self.__root = _insert_all(None, iterable.items())
        elif isinstance(iterable, Iterable):
            self.__root = _insert_all(None, iterable)
        else:
            raise TypeError(f"{type(self).__name__} expected a mapping or iterable, got {iterable!r}")

    def __contains__(self: OrderedMap[Any, Any], key: Any, /) -> bool:
        return _find(self.__root, key) is not None

    def __copy__(self: Self, /) -> Self:
        return self

    def __deepcopy__(self: Self, memo: Optional[dict] = None, /) -> Self:
        return type(self).from_sorted(
            (deepcopy(key, memo), deepcopy(value, memo))
            for key, value in self.items()
        )

    def __eq__(self: OrderedMap[Any, Any], other: Any, /) -> bool:
        if isinstance(other, OrderedMap):
            return len(self) == len(other) and all(
                not k1 < k2 and not k2 < k1 and v1 == v2
                for (k1, v1), (k2, v2) in zip(self.items(), other.items())
            )
        elif isinstance(other, Mapping):
            # Only the keys of the other mapping are hashed, never ours.
            missing = object()
            return len(self) == len(other) and all(
                self.get(key, missing) == value
                for key, value in other.items()
            )
        else:
            return NotImplemented

    def __getitem__(self: OrderedMap[KT, VT], key: KT, /) -> VT:
        node = _find(self.__root, key)
        if node is None:
            raise KeyError(key)
        return node.value

    def __iter__(self: OrderedMap[KT, Any], /) -> Iterator[KT]:
        return (node.key for node in _iter_nodes(self.__root))

    def __len__(self: OrderedMap[Any, Any], /) -> int:
        return _size(self.__root)

    def __reduce__(self: OrderedMap[KT, VT], /) -> Tuple[Type[OrderedMap[KT, VT]], Tuple[list]]:
        return (type(self), ([*self.items()],))

    def __repr__(self: OrderedMap[Any, Any], /) -> str:
        if id(self) in reprs_seen:
            return "..."
        elif len(self) == 0:
            return f"{type(self).__name__}()"
        reprs_seen.add(id(self))
        try:
            data = ", ".join([f"{key!r}: {value!r}" for key, value in self.items()])
            return f"{type(self).__name__}({{{data}}})"
        finally:
            reprs_seen.remove(id(self))

    def __reversed__(self: OrderedMap[KT, Any], /) -> Iterator[KT]:
        return (node.key for node in _reversed_nodes(self.__root))

    @classmethod
    def _from_root(cls: Type[Self], root: Optional[_Node], /) -> Self:
        self = cls.__new__(cls)
        self.__root = root
        return self

    def _derive(self: Self, root: Optional[_Node], /) -> Self:
        if root is self.__root:
            return self
        return self._from_root(root)

    @classmethod
    def empty(cls: Type[OrderedMap[KT, VT]], /) -> OrderedMap[KT, VT]:
        return cls._from_root(None)

    @classmethod
    def singleton(cls: Type[OrderedMap[KT, VT]], key: KT, value: VT, /) -> OrderedMap[KT, VT]:
        return cls._from_root(_Node(key, value, None, None))

    @classmethod
    def from_iterable(cls: Type[OrderedMap[KT, VT]], iterable: Iterable[Tuple[KT, VT]], /) -> OrderedMap[KT, VT]:
        if isinstance(iterable, Iterable):
            return cls(iterable)
        else:
            raise TypeError(f"from_iterable expects an iterable, got {iterable!r}")

    @classmethod
    def from_sorted(cls: Type[OrderedMap[KT, VT]], iterable: Iterable[Tuple[KT, VT]], /) -> OrderedMap[KT, VT]:
        """
        Build a map in linear time from pairs whose keys are already
        strictly increasing. The order is trusted, not checked.
        """
        if isinstance(iterable, Mapping):
            iterable = iterable.items()
        elif not isinstance(iterable, Iterable):
            raise TypeError(f"from_sorted expects an iterable, got {iterable!r}")
        items = [*iterable]
        logger.debug("building %s from %d sorted entries", cls.__name__, len(items))
        return cls._from_root(_build(items, 0, len(items)))

    def copy(self: Self, /) -> Self:
        return self

    def diff(self: Self, other: OrderedMap[Any, Any], /) -> Self:
        if not isinstance(other, OrderedMap):
            raise TypeError(f"diff expected an {OrderedMap.__name__}, got {other!r}")
        return self._derive(_diff(self.__root, other.__root))

    def filter(self: Self, predicate: Callable[[KT, VT], bool], /) -> Self:
        if not callable(predicate):
            raise TypeError(f"filter expected a callable, got {predicate!r}")
        return self._derive(_filter(self.__root, predicate))

    def foldl(self: OrderedMap[KT, VT], function: Callable[[KT, VT, S], S], initial: S, /) -> S:
        if not callable(function):
            raise TypeError(f"foldl expected a callable, got {function!r}")
        result = initial
        for node in _iter_nodes(self.__root):
            result = function(node.key, node.value, result)
        return result

    def foldr(self: OrderedMap[KT, VT], function: Callable[[KT, VT, S], S], initial: S, /) -> S:
        if not callable(function):
            raise TypeError(f"foldr expected a callable, got {function!r}")
        result = initial
        for node in _reversed_nodes(self.__root):
            result = function(node.key, node.value, result)
        return result

    def insert(self: Self, key: KT, value: VT, /) -> Self:
        return self._derive(_insert(self.__root, key, value))

    def intersect(self: Self, other: OrderedMap[Any, Any], /) -> Self:
        if not isinstance(other, OrderedMap):
            raise TypeError(f"intersect expected an {OrderedMap.__name__}, got {other!r}")
        return self._derive(_intersect(self.__root, other.__root))

    def is_empty(self: OrderedMap[Any, Any], /) -> bool:
        return self.__root is None

    def items(self: OrderedMap[KT, VT], /) -> OrderedItemsView[KT, VT]:
        return OrderedItemsView(self)

    def keys(self: OrderedMap[KT, Any], /) -> OrderedKeysView[KT]:
        return OrderedKeysView(self)

    def max_item(self: OrderedMap[KT, VT], /) -> Tuple[KT, VT]:
        node = self.__root
        if node is None:
            raise ValueError(f"max_item() arg is an empty {type(self).__name__}")
        while node.right is not None:
            node = node.right
        return node.key, node.value

    def member(self: OrderedMap[Any, Any], key: Any, /) -> bool:
        return _find(self.__root, key) is not None

    def min_item(self: OrderedMap[KT, VT], /) -> Tuple[KT, VT]:
        node = self.__root
        if node is None:
            raise ValueError(f"min_item() arg is an empty {type(self).__name__}")
        while node.left is not None:
            node = node.left
        return node.key, node.value

    def partition(self: Self, predicate: Callable[[KT, VT], bool], /) -> Tuple[Self, Self]:
        if not callable(predicate):
            raise TypeError(f"partition expected a callable, got {predicate!r}")
        inside, outside = _partition(self.__root, predicate)
        return self._derive(inside), self._derive(outside)

    def remove(self: Self, key: KT, /) -> Self:
        return self._derive(_remove(self.__root, key))

    def size(self: OrderedMap[Any, Any], /) -> int:
        return _size(self.__root)

    def split(self: Self, key: KT, /) -> Tuple[Self, Optional[Tuple[KT, VT]], Self]:
        """
        Split around a key into the entries below it, the entry for the
        key itself if present, and the entries above it.
        """
        lower, found, upper = _split(self.__root, key)
        entry = None if found is None else (found.key, found.value)
        return self._from_root(lower), entry, self._from_root(upper)

    def union(self: Self, other: OrderedMap[KT, VT], /) -> Self:
        if not isinstance(other, OrderedMap):
            raise TypeError(f"union expected an {OrderedMap.__name__}, got {other!r}")
        return self._derive(_union(self.__root, other.__root))

    def values(self: OrderedMap[Any, VT], /) -> OrderedValuesView[VT]:
        return OrderedValuesView(self)

    @property
    def _root(self: OrderedMap[Any, Any], /) -> Optional[_Node]:
        return self.__root


def _insert_all(node: Optional[_Node], pairs: Iterable[Tuple[Any, Any]]) -> Optional[_Node]:
    for key, value in pairs:
        node = _insert(node, key, value)
    return node
