from typing import Any, Protocol, TypeVar, runtime_checkable

Self = TypeVar("Self", bound="SupportsLessThan")


@runtime_checkable
class SupportsLessThan(Protocol):
    """
    Elements of ordered collections are only ever compared with `<`.
    Two elements are equal when neither is less than the other, so `<`
    has to be a strict total order over everything stored together.
    """

    def __lt__(self: Self, other: Any, /) -> bool: ...
