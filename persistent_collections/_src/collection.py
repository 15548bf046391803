from collections.abc import Iterable, Reversible, Sized
from typing import Any, Protocol, Type, TypeVar, runtime_checkable

from persistent_collections._src.comparable import SupportsLessThan

T_co = TypeVar("T_co", bound=SupportsLessThan, covariant=True)

Self = TypeVar("Self", bound="OrderedCollection")


@runtime_checkable
class OrderedCollection(Reversible[T_co], Sized, Protocol[T_co]):
    """
    An immutable collection whose iteration is strictly increasing and
    free of duplicates, so it never needs sorting again before being
    rebuilt into a set.
    """

    @classmethod
    def from_iterable(cls: Type[Self], iterable: Iterable[Any], /) -> "OrderedCollection[Any]": ...

    @classmethod
    def from_sorted(cls: Type[Self], iterable: Iterable[Any], /) -> "OrderedCollection[Any]": ...
