from ._src.collection import OrderedCollection
from ._src.comparable import SupportsLessThan

__all__ = ["OrderedCollection", "SupportsLessThan"]
