"""
Stock adapters for the built-in owned/view type pairs.

Each adapter implements AdapterProtocol for one kind of data:

- TextAdapter: str roots, str views, str fragments
- ListAdapter: list roots, SequenceView views, any non-text sequence fragments
- TupleAdapter: tuple roots (fixed-size arrays), SequenceView views
- BytesAdapter: bytearray roots, read-only memoryview views, bytes-like fragments

The registry maps Python types to adapters so LazyConcat can pick one from
its initial value:

    ```python
    adapter = adapter_for([1, 2, 3])   # ListAdapter
    register_adapter(MyRope, MyRopeAdapter())
    ```
"""

import logging
from collections.abc import Sequence
from itertools import chain
from typing import Any, Iterable, Iterator

from lazy_concat.errors import UnsupportedTypeError
from lazy_concat.protocols import AdapterProtocol
from lazy_concat.views import SequenceView

logger = logging.getLogger(__name__)

_TEXT_LIKE = (str, bytes, bytearray, memoryview)


def _check_range(length: int, start: int, stop: int) -> None:
    if not 0 <= start <= stop <= length:
        raise IndexError(f"range [{start}:{stop}] exceeds length {length}")


class BaseAdapter:
    """
    Shared behaviour for adapters.

    Subclasses provide concat(), slice(), empty(), to_owned() and accepts().
    concat_many() folds several pieces in order and must be all-or-nothing:
    if it raises, owned is unchanged. The default applies concat() one piece
    at a time, which is only safe for adapters whose concat() builds a new
    value; adapters that grow the root in place override it.
    """

    name = "base"

    def length(self, value: Any) -> int:
        return len(value)

    def concat_many(self, owned: Any, pieces: Iterable[Any]) -> Any:
        for piece in pieces:
            owned = self.concat(owned, piece)
        return owned

    def iter_elements(self, data: Any) -> Iterator[Any]:
        return iter(data)

    def iter_range(self, value: Any, start: int, stop: int) -> Iterator[Any]:
        # By index, so no buffer export pins a growable root.
        for i in range(start, stop):
            yield value[i]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class TextAdapter(BaseAdapter):
    """Adapter for str. Views are str slices, since str has no borrowed form."""

    name = "text"

    def empty(self) -> str:
        return ""

    def slice(self, value: str, start: int, stop: int) -> str:
        _check_range(len(value), start, stop)
        return value[start:stop]

    def concat(self, owned: str, data: str) -> str:
        return owned + data

    def concat_many(self, owned: str, pieces: Iterable[str]) -> str:
        # One join keeps the fold linear in the total size.
        return "".join(chain((owned,), pieces))

    def to_owned(self, data: str) -> str:
        return str(data)

    def accepts(self, data: Any) -> bool:
        return isinstance(data, str)


class ListAdapter(BaseAdapter):
    """Adapter for list roots. The root list is extended in place."""

    name = "list"

    def empty(self) -> list:
        return []

    def slice(self, value: list, start: int, stop: int) -> SequenceView:
        _check_range(len(value), start, stop)
        return SequenceView(value, start, stop)

    def concat(self, owned: list, data: Sequence) -> list:
        owned.extend(data)
        return owned

    def concat_many(self, owned: list, pieces: Iterable[Sequence]) -> list:
        # Collect first: a piece failing halfway must leave owned untouched.
        extra = list(chain.from_iterable(pieces))
        owned.extend(extra)
        return owned

    def to_owned(self, data: Sequence) -> list:
        return list(data)

    def accepts(self, data: Any) -> bool:
        return isinstance(data, Sequence) and not isinstance(data, _TEXT_LIKE)


class TupleAdapter(BaseAdapter):
    """Adapter for tuple roots; each fold builds a new tuple."""

    name = "tuple"

    def empty(self) -> tuple:
        return ()

    def slice(self, value: tuple, start: int, stop: int) -> SequenceView:
        _check_range(len(value), start, stop)
        return SequenceView(value, start, stop)

    def concat(self, owned: tuple, data: Sequence) -> tuple:
        return owned + tuple(data)

    def concat_many(self, owned: tuple, pieces: Iterable[Sequence]) -> tuple:
        return tuple(chain(owned, *pieces))

    def to_owned(self, data: Sequence) -> tuple:
        return tuple(data)

    def accepts(self, data: Any) -> bool:
        return isinstance(data, Sequence) and not isinstance(data, _TEXT_LIKE)


class BytesAdapter(BaseAdapter):
    """
    Adapter for binary data.

    Roots are bytearrays grown in place; an immutable bytes root is promoted
    to a bytearray on its first fold. Views are read-only memoryviews, so the
    interpreter itself refuses to resize a root while a view is exported
    (BufferError). Elements are ints, as with iteration over bytes.
    """

    name = "bytes"

    def empty(self) -> bytearray:
        return bytearray()

    def length(self, value: Any) -> int:
        if isinstance(value, memoryview):
            return value.nbytes
        return len(value)

    def slice(self, value: bytearray, start: int, stop: int) -> memoryview:
        _check_range(len(value), start, stop)
        return memoryview(value)[start:stop].toreadonly()

    def concat(self, owned: bytearray, data: Any) -> bytearray:
        if not isinstance(owned, bytearray):
            owned = bytearray(owned)
        owned += data
        return owned

    def concat_many(self, owned: bytearray, pieces: Iterable[Any]) -> bytearray:
        return self.concat(owned, b"".join(pieces))

    def to_owned(self, data: Any) -> bytes:
        return bytes(data)

    def accepts(self, data: Any) -> bool:
        return isinstance(data, (bytes, bytearray, memoryview))

    def iter_elements(self, data: Any) -> Iterator[int]:
        if isinstance(data, memoryview):
            return iter(data.cast("B"))
        return iter(data)


TEXT = TextAdapter()
LIST = ListAdapter()
TUPLE = TupleAdapter()
BYTES = BytesAdapter()

_REGISTRY: dict[type, AdapterProtocol] = {
    str: TEXT,
    list: LIST,
    tuple: TUPLE,
    bytes: BYTES,
    bytearray: BYTES,
}


def register_adapter(value_type: type, adapter: AdapterProtocol) -> None:
    """
    Register the adapter used for roots of a given type.

    Lookup walks the MRO, so registering a base class covers its subclasses
    unless they have their own entry.

    Args:
        value_type: Type of the owned root value
        adapter: Adapter implementing AdapterProtocol

    Raises:
        TypeError: If adapter does not satisfy AdapterProtocol
    """
    if not isinstance(adapter, AdapterProtocol):
        raise TypeError(f"{adapter!r} does not implement AdapterProtocol")
    _REGISTRY[value_type] = adapter
    logger.debug("Registered %s for %s", adapter, value_type.__name__)


def adapter_for(value: Any) -> AdapterProtocol:
    """
    Find the adapter for a root value.

    Args:
        value: Initial owned value of a buffer

    Returns:
        The registered adapter for the value's type or nearest base type

    Raises:
        UnsupportedTypeError: If no adapter is registered along the MRO
    """
    for klass in type(value).__mro__:
        adapter = _REGISTRY.get(klass)
        if adapter is not None:
            return adapter
    raise UnsupportedTypeError(type(value))
