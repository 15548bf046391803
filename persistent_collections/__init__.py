"""
Persistent ordered collections. Every update returns a new collection
and shares unchanged structure with the old one, so collections can be
passed around and kept as values without defensive copies. Written in
Python 3, this library also includes annotations/type-hints to make usage
with an IDE easier and protocols for recognising compatible collections.
"""
import logging

from . import abc
from ._src.ordered_map import OrderedMap
from ._src.ordered_set import OrderedSet

__all__ = ["OrderedMap", "OrderedSet", "abc"]

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
