"""Read-only views over a range of a list or tuple root."""

from collections.abc import Sequence
from operator import index as as_index
from typing import Any, Iterator

from lazy_concat.errors import SliceBoundsError


def resolve_range(
    key: slice | None, available: int, *, open_end: bool = True
) -> tuple[int, int]:
    """
    Turn a slice into concrete [start, stop) bounds over `available` elements.

    A missing start means 0 and a missing stop means `available`. Unlike
    list slicing, nothing is clamped or wrapped: negative indices, reversed
    ranges, steps and stops past `available` are all rejected.

    Args:
        key: The requested range, or None for everything
        available: Number of elements that may be viewed
        open_end: Whether a missing stop is allowed at all

    Returns:
        (start, stop) with 0 <= start <= stop <= available

    Raises:
        SliceBoundsError: If the range cannot be served exactly
    """
    if key is None:
        key = slice(None)
    start = 0 if key.start is None else as_index(key.start)
    stop = None if key.stop is None else as_index(key.stop)

    if key.step not in (None, 1):
        raise SliceBoundsError(start, stop, available, "only step 1 is supported")
    if stop is None:
        if not open_end:
            raise SliceBoundsError(
                start, stop, available,
                "open-ended range needs every fragment normalized",
            )
        stop = available
    if start < 0 or stop < 0:
        raise SliceBoundsError(start, stop, available, "negative index")
    if start > stop:
        raise SliceBoundsError(start, stop, available, "start is after stop")
    if stop > available:
        raise SliceBoundsError(start, stop, available, "stop is past normalized data")
    return start, stop


class SequenceView(Sequence):
    """
    Borrowed, read-only window onto base[start:stop].

    Unlike base[start:stop], no elements are copied. The view reads through
    to the base sequence, so it is only meaningful while the base keeps its
    first `stop` elements unchanged. Roots only ever grow at the end, which
    keeps that true until the root is handed out by done().

    Attributes:
        start: First index of the window in the base
        stop: End index of the window in the base, exclusive
    """

    __slots__ = ("_base", "start", "stop")

    def __init__(self, base: Sequence, start: int, stop: int) -> None:
        if not 0 <= start <= stop <= len(base):
            raise IndexError(
                f"view range [{start}:{stop}] outside sequence of length {len(base)}"
            )
        self._base = base
        self.start = start
        self.stop = stop

    def __len__(self) -> int:
        return self.stop - self.start

    def __getitem__(self, index):
        if isinstance(index, slice):
            lo, hi, step = index.indices(len(self))
            if step != 1:
                return [self._base[self.start + i] for i in range(lo, hi, step)]
            return SequenceView(self._base, self.start + lo, self.start + max(lo, hi))
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("view index out of range")
        return self._base[self.start + index]

    def __iter__(self) -> Iterator[Any]:
        base = self._base
        for i in range(self.start, self.stop):
            yield base[i]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SequenceView, list, tuple)):
            return len(self) == len(other) and all(
                a == b for a, b in zip(self, other)
            )
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def tolist(self) -> list:
        """Copy the viewed elements into a new list."""
        return list(self)

    def __repr__(self) -> str:
        return f"SequenceView({list(self)!r})"
