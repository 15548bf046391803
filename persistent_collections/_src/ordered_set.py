from __future__ import annotations
import logging
from collections.abc import Callable, Iterable, Iterator, Set as AbstractSet
from copy import deepcopy
from itertools import islice
from typing import Any, Generic, Optional, Tuple, Type, TypeVar

from persistent_collections._src.collection import OrderedCollection
from persistent_collections._src.comparable import SupportsLessThan
from .ordered_map import OrderedMap

__all__ = ["OrderedSet"]

logger = logging.getLogger(__name__)

S = TypeVar("S")
T = TypeVar("T", bound=SupportsLessThan)
U = TypeVar("U", bound=SupportsLessThan)

Self = TypeVar("Self", bound="OrderedSet")

reprs_seen: set[int] = set()


def _unique_sorted(iterable: Iterable[T]) -> list[T]:
    # sorted() is stable, so the first of every run of equal elements is
    # also the first one seen in the input.
    elements = sorted(iterable)
    if len(elements) == 0:
        return elements
    result = [elements[0]]
    for element in islice(elements, 1, None):
        if result[-1] < element:
            result.append(element)
    return result


class OrderedSet(AbstractSet[T], Generic[T]):
    """
    A persistent set whose members are kept in increasing order.

    The set is an `OrderedMap` from each member to None. Every operation
    returns a new set and never changes an existing one, so sets may be
    shared freely, including across threads.

    Members only need a total order through `<`. Two members are equal
    when neither is less than the other.

    Equality between sets compares members, never the shape of the
    underlying tree, which depends on the order of past updates. Sets are
    not hashable.
    """
    __map: OrderedMap[T, None]

    __slots__ = {
        "__map":
            "Maps every member to None, the keys are the members.",
    }

    def __init__(self: OrderedSet[T], iterable: Optional[Iterable[T]] = None, /) -> None:
        if iterable is None:
            self.__map = OrderedMap.empty()
        elif isinstance(iterable, Iterable):
            self.__map = type(self).from_list(iterable)._map
        else:
            raise TypeError(f"{type(self).__name__} expected an iterable, got {iterable!r}")

    def __and__(self: Self, other: Any, /) -> Self:
        if isinstance(other, AbstractSet):
            return self.intersect(other)
        else:
            return NotImplemented

    def __contains__(self: OrderedSet[Any], element: Any, /) -> bool:
        return self.__map.member(element)

    def __copy__(self: Self, /) -> Self:
        return self

    def __deepcopy__(self: Self, memo: Optional[dict] = None, /) -> Self:
        return type(self).from_sorted(deepcopy(x, memo) for x in self)

    # Members are only required to support `<`, so no hash agrees with `==`.
    __hash__ = None

    def __iter__(self: OrderedSet[T], /) -> Iterator[T]:
        return iter(self.__map)

    def __len__(self: OrderedSet[Any], /) -> int:
        return self.__map.size()

    def __or__(self: Self, other: Any, /) -> Self:
        if isinstance(other, AbstractSet):
            return self.union(other)
        else:
            return NotImplemented

    def __reduce__(self: OrderedSet[T], /) -> Tuple[Type[OrderedSet[T]], Tuple[list[T]]]:
        return (type(self), (self.to_list(),))

    def __repr__(self: OrderedSet[Any], /) -> str:
        if id(self) in reprs_seen:
            return "..."
        elif len(self) == 0:
            return f"{type(self).__name__}()"
        reprs_seen.add(id(self))
        try:
            data = ", ".join([repr(x) for x in self])
            return f"{type(self).__name__}([{data}])"
        finally:
            reprs_seen.remove(id(self))

    def __reversed__(self: OrderedSet[T], /) -> Iterator[T]:
        return reversed(self.__map)

    def __sub__(self: Self, other: Any, /) -> Self:
        if isinstance(other, AbstractSet):
            return self.diff(other)
        else:
            return NotImplemented

    def __xor__(self: Self, other: Any, /) -> Self:
        if isinstance(other, AbstractSet):
            return self.symmetric_difference(other)
        else:
            return NotImplemented

    @classmethod
    def _from_iterable(cls: Type[OrderedSet[T]], iterable: Iterable[T], /) -> OrderedSet[T]:
        # Used by the collections.abc.Set mixins, e.g. for `{1, 2} - s`.
        return cls.from_list(iterable)

    @classmethod
    def _from_map(cls: Type[Self], mapping: OrderedMap[T, None], /) -> Self:
        self = cls.__new__(cls)
        self.__map = mapping
        return self

    def _derive(self: Self, mapping: OrderedMap[T, None], /) -> Self:
        if mapping is self.__map:
            return self
        return self._from_map(mapping)

    def _coerce(self: Self, other: Iterable[T], name: str, /) -> Self:
        if isinstance(other, OrderedSet):
            return other
        elif isinstance(other, Iterable):
            return type(self).from_list(other)
        else:
            raise TypeError(f"{name} expected an iterable, got {other!r}")

    @classmethod
    def empty(cls: Type[OrderedSet[T]], /) -> OrderedSet[T]:
        return cls._from_map(OrderedMap.empty())

    @classmethod
    def singleton(cls: Type[OrderedSet[T]], element: T, /) -> OrderedSet[T]:
        return cls._from_map(OrderedMap.singleton(element, None))

    @classmethod
    def from_list(cls: Type[OrderedSet[T]], iterable: Iterable[T], /) -> OrderedSet[T]:
        """
        Build a set from any iterable. The result is the same as inserting
        the elements one at a time from left to right: duplicates are
        dropped and the first of several equal elements is the one kept.
        """
        if isinstance(iterable, OrderedCollection):
            return cls.from_sorted(iterable)
        elif isinstance(iterable, Iterable):
            return cls.from_sorted(_unique_sorted(iterable))
        else:
            raise TypeError(f"from_list expects an iterable, got {iterable!r}")

    from_iterable = from_list

    @classmethod
    def from_sorted(cls: Type[OrderedSet[T]], iterable: Iterable[T], /) -> OrderedSet[T]:
        if isinstance(iterable, Iterable):
            return cls._from_map(OrderedMap.from_sorted((x, None) for x in iterable))
        else:
            raise TypeError(f"from_sorted expects an iterable, got {iterable!r}")

    def copy(self: Self, /) -> Self:
        return self

    def diff(self: Self, other: Iterable[Any], /) -> Self:
        return self._derive(self.__map.diff(self._coerce(other, "diff")._map))

    def filter(self: Self, predicate: Callable[[T], bool], /) -> Self:
        if not callable(predicate):
            raise TypeError(f"filter expected a callable, got {predicate!r}")
        return self._derive(self.__map.filter(lambda key, _: predicate(key)))

    def foldl(self: OrderedSet[T], function: Callable[[T, S], S], initial: S, /) -> S:
        """Combine the members from smallest to largest as `f(v_n, ... f(v_1, initial))`."""
        if not callable(function):
            raise TypeError(f"foldl expected a callable, got {function!r}")
        return self.__map.foldl(lambda key, _, result: function(key, result), initial)

    def foldr(self: OrderedSet[T], function: Callable[[T, S], S], initial: S, /) -> S:
        """Combine the members from largest to smallest as `f(v_1, ... f(v_n, initial))`."""
        if not callable(function):
            raise TypeError(f"foldr expected a callable, got {function!r}")
        return self.__map.foldr(lambda key, _, result: function(key, result), initial)

    def insert(self: Self, element: T, /) -> Self:
        return self._derive(self.__map.insert(element, None))

    def intersect(self: Self, other: Iterable[Any], /) -> Self:
        return self._derive(self.__map.intersect(self._coerce(other, "intersect")._map))

    def is_empty(self: OrderedSet[Any], /) -> bool:
        return self.__map.is_empty()

    def issubset(self: OrderedSet[Any], other: Iterable[Any], /) -> bool:
        return self.diff(other).is_empty()

    def issuperset(self: OrderedSet[Any], other: Iterable[Any], /) -> bool:
        return self._coerce(other, "issuperset").diff(self).is_empty()

    def map(self: OrderedSet[T], function: Callable[[T], U], /) -> OrderedSet[U]:
        """
        Apply a function to every member, smallest first, and collect the
        results into a new set. Members the function maps to equal results
        collapse into one, holding the result for the smallest of them.
        """
        if not callable(function):
            raise TypeError(f"map expected a callable, got {function!r}")
        result = type(self).from_list([function(x) for x in self])
        if len(result) < len(self):
            logger.debug("map collapsed %d members into %d", len(self), len(result))
        return result

    def max(self: OrderedSet[T], /) -> T:
        if self.is_empty():
            raise ValueError(f"max() arg is an empty {type(self).__name__}")
        return self.__map.max_item()[0]

    def member(self: OrderedSet[Any], element: Any, /) -> bool:
        return self.__map.member(element)

    def min(self: OrderedSet[T], /) -> T:
        if self.is_empty():
            raise ValueError(f"min() arg is an empty {type(self).__name__}")
        return self.__map.min_item()[0]

    def partition(self: Self, predicate: Callable[[T], bool], /) -> Tuple[Self, Self]:
        """Split into the members that satisfy the predicate and those that do not."""
        if not callable(predicate):
            raise TypeError(f"partition expected a callable, got {predicate!r}")
        inside, outside = self.__map.partition(lambda key, _: predicate(key))
        return self._derive(inside), self._derive(outside)

    def remove(self: Self, element: T, /) -> Self:
        # Unlike set.remove, a missing element is not an error.
        return self._derive(self.__map.remove(element))

    def size(self: OrderedSet[Any], /) -> int:
        return self.__map.size()

    def split(self: Self, pivot: T, /) -> Tuple[Self, bool, Self]:
        lower, found, upper = self.__map.split(pivot)
        return self._from_map(lower), found is not None, self._from_map(upper)

    def symmetric_difference(self: Self, other: Iterable[Any], /) -> Self:
        other = self._coerce(other, "symmetric_difference")
        return self.diff(other).union(other.diff(self))

    def to_list(self: OrderedSet[T], /) -> list[T]:
        return [*self.__map]

    def union(self: Self, other: Iterable[T], /) -> Self:
        return self._derive(self.__map.union(self._coerce(other, "union")._map))

    @property
    def _map(self: OrderedSet[T], /) -> OrderedMap[T, None]:
        return self.__map
