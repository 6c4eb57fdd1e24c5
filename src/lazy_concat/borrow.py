"""
Split borrows: read the root while appending more data.

A SplitBorrow divides a buffer into two handles:
- RootSnapshot: read-only access to the root as it is now
- AppendHandle: can add fragments, cannot read, fold or slice

While the split is active the buffer refuses anything that would change the
root (folds, done()), so views handed out by the snapshot stay valid.
Releasing the split bumps the buffer's generation counter; both handles
check it on every call and raise StaleHandleError once it has moved on.
Views that support release() (memoryviews over a bytes root) are released
too, so they cannot outlive the split either. Iterating the snapshot holds
no view at all, and a leftover iterator raises StaleHandleError.
"""

from typing import TYPE_CHECKING, Any, Iterator

from lazy_concat.errors import StaleHandleError
from lazy_concat.views import resolve_range

if TYPE_CHECKING:
    from lazy_concat.buffer import LazyConcat


class _Handle:
    __slots__ = ("_buffer", "_generation")

    def __init__(self, buffer: "LazyConcat", generation: int) -> None:
        self._buffer = buffer
        self._generation = generation

    def _check(self) -> "LazyConcat":
        current = self._buffer._generation
        if current != self._generation:
            raise StaleHandleError(type(self).__name__, self._generation, current)
        return self._buffer

    @property
    def valid(self) -> bool:
        return self._buffer._generation == self._generation


class RootSnapshot(_Handle):
    """Read-only view of a buffer's root for the lifetime of a split."""

    __slots__ = ("_issued",)

    def __init__(self, buffer: "LazyConcat", generation: int) -> None:
        super().__init__(buffer, generation)
        self._issued: list[Any] = []

    def _issue(self, view: Any) -> Any:
        if hasattr(view, "release"):
            self._issued.append(view)
        return view

    @property
    def value(self) -> Any:
        """The whole root as a borrowed view."""
        return self.get_slice()

    def get_slice(self, key: slice | None = None) -> Any:
        """
        Borrow a range of the root.

        Raises:
            SliceBoundsError: If the range exceeds the root
            StaleHandleError: If the split was released
        """
        buffer = self._check()
        start, stop = resolve_range(key, len(self))
        return self._issue(buffer.adapter.slice(buffer._root, start, stop))

    def __getitem__(self, key: slice) -> Any:
        if not isinstance(key, slice):
            raise TypeError(
                f"RootSnapshot indices must be slices, not {type(key).__name__}"
            )
        return self.get_slice(key)

    def __len__(self) -> int:
        buffer = self._check()
        return buffer.adapter.length(buffer._root)

    def __iter__(self) -> Iterator[Any]:
        buffer = self._check()
        return self._iter_root(buffer.adapter.iter_range(buffer._root, 0, len(self)))

    def _iter_root(self, elements: Iterator[Any]) -> Iterator[Any]:
        # Reads by index, holding no view; stops working once the split ends.
        for element in elements:
            self._check()
            yield element

    def _release_views(self) -> None:
        for view in self._issued:
            view.release()
        self._issued.clear()


class AppendHandle(_Handle):
    """Append-only access to a buffer for the lifetime of a split."""

    __slots__ = ("appended",)

    def __init__(self, buffer: "LazyConcat", generation: int) -> None:
        super().__init__(buffer, generation)
        self.appended = 0

    def concat(self, data: Any, *, owned: bool = False) -> "AppendHandle":
        """
        Append a fragment to the underlying buffer.

        Raises:
            StaleHandleError: If the split was released
        """
        self._check().concat(data, owned=owned)
        self.appended += 1
        return self

    @property
    def pending(self) -> int:
        """Fragments pending on the buffer, including ones appended here."""
        return self._check().pending


class SplitBorrow:
    """
    An active split of a buffer into a snapshot and an append handle.

    Unpacks as (view, writer), both directly and as a context manager:

        ```python
        split = buf.split_borrow()
        view, writer = split
        ...
        split.release()

        with buf.split_borrow() as (view, writer):
            ...
        ```

    Attributes:
        view: RootSnapshot over the root
        writer: AppendHandle for new fragments
    """

    def __init__(self, buffer: "LazyConcat") -> None:
        self._buffer = buffer
        generation = buffer._open_borrow(self)
        self.view = RootSnapshot(buffer, generation)
        self.writer = AppendHandle(buffer, generation)

    @property
    def active(self) -> bool:
        return self.view.valid

    def release(self) -> None:
        """End the split. Safe to call more than once."""
        if not self.active:
            return
        self.view._release_views()
        self._buffer._close_borrow(self)

    def __iter__(self) -> Iterator[Any]:
        yield self.view
        yield self.writer

    def __enter__(self) -> "SplitBorrow":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
