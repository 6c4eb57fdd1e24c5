"""
Capability contracts the buffer depends on.

The buffer never touches its data directly. Everything it needs from the
owned type and its borrowed view type goes through three small protocols:

- LengthProtocol: element count of an owned value, view or fragment
- SliceProtocol: a borrowed view over a half-open element range
- ConcatProtocol: owned value followed by a piece of data, as a new owned value

AdapterProtocol bundles them with the few helpers the buffer needs for
construction and iteration. Any object satisfying AdapterProtocol can be
passed to LazyConcat(adapter=...); the stock adapters live in
lazy_concat.adapters.
"""

from typing import Any, Iterable, Iterator, Protocol, runtime_checkable


@runtime_checkable
class LengthProtocol(Protocol):
    """Protocol for measuring values in elements (characters, items, bytes)."""

    def length(self, value: Any) -> int:
        """
        Count the elements of a value.

        Args:
            value: An owned value, a borrowed view, or fragment data

        Returns:
            Number of elements
        """
        ...


@runtime_checkable
class SliceProtocol(Protocol):
    """Protocol for taking borrowed views of an owned value."""

    def slice(self, value: Any, start: int, stop: int) -> Any:
        """
        Borrow the elements of value in [start, stop).

        Implementations must raise (not clamp) when the range exceeds the
        value's length.

        Args:
            value: The owned value to view
            start: First element index, inclusive
            stop: End element index, exclusive

        Returns:
            A read-only view of the range
        """
        ...


@runtime_checkable
class ConcatProtocol(Protocol):
    """Protocol for joining data onto an owned value."""

    def concat(self, owned: Any, data: Any) -> Any:
        """
        Append data to an owned value.

        The owned argument is consumed: implementations may extend it in
        place and return it. The data argument is only read.

        Args:
            owned: Owned value, possibly the adapter's empty() value
            data: Owned or borrowed fragment data

        Returns:
            Owned value whose content is owned's content followed by data's
        """
        ...


@runtime_checkable
class AdapterProtocol(LengthProtocol, SliceProtocol, ConcatProtocol, Protocol):
    """
    Full capability set for one owned/view type pair.

    Adds to the three capabilities:
    - empty(): the unit value to start folding from
    - concat_many(): concat() applied to several pieces, front to back;
      all-or-nothing, owned is unchanged if it raises
    - to_owned(): an independent copy of fragment data
    - accepts(): whether a value may be appended as a fragment
    - iter_elements(): element iteration over a view or fragment
    - iter_range(): element iteration over part of an owned value without
      holding a view on it

    lazy_concat.adapters.BaseAdapter supplies the generic parts.
    """

    name: str

    def empty(self) -> Any:
        ...

    def concat_many(self, owned: Any, pieces: Iterable[Any]) -> Any:
        ...

    def to_owned(self, data: Any) -> Any:
        ...

    def accepts(self, data: Any) -> bool:
        ...

    def iter_elements(self, data: Any) -> Iterator[Any]:
        ...

    def iter_range(self, value: Any, start: int, stop: int) -> Iterator[Any]:
        ...
