"""
The deferred-concatenation buffer.

LazyConcat accumulates pieces of data without joining them. Appends are
O(1); the join (a "fold") happens only when a read needs it, and only as far
as that read needs:

    ```python
    buf = LazyConcat([])
    buf.concat([1, 2, 3]).concat([4, 5]).concat([6, 7, 8])

    buf.normalize_to_len(4)   # folds [1, 2, 3] and [4, 5] -> returns 5
    buf.get_slice(slice(1, 4))  # view of [2, 3, 4]
    buf.done()                # [1, 2, 3, 4, 5, 6, 7, 8]
    ```

The logical value of a buffer is always its root followed by every pending
fragment, in append order. Folding moves a prefix of the fragments into the
root, front to back, and never changes the logical value.

Slices are served from the root only. Callers either check
needs_normalization() or call normalize_to_len() first; slicing past the
root raises SliceBoundsError. Iteration needs no folding at all.
"""

import logging
from enum import Enum
from operator import index as as_index
from typing import Any, Iterator

from lazy_concat.adapters import adapter_for
from lazy_concat.borrow import SplitBorrow
from lazy_concat.config import settings
from lazy_concat.errors import BorrowConflictError, BufferConsumedError
from lazy_concat.fragment import Fragment, FragmentStore
from lazy_concat.protocols import AdapterProtocol
from lazy_concat.views import resolve_range

logger = logging.getLogger(__name__)


class BufferState(str, Enum):
    """
    Whether a buffer has pending fragments.

    NORMALIZED: Root holds the whole logical value
    FRAGMENTED: At least one fragment is waiting to be folded
    """

    NORMALIZED = "normalized"
    FRAGMENTED = "fragmented"


class BufferIterable:
    """
    Restartable iteration over a buffer's logical value at one point in time.

    Captures the root, its length and the pending fragments when created.
    Each iter() starts again from the first element. Later appends or folds
    on the buffer are not observed. The root is read by index, so a
    half-consumed iterator never blocks a fold of a bytearray root.
    """

    __slots__ = ("_adapter", "_root", "_root_length", "_fragments")

    def __init__(
        self,
        adapter: AdapterProtocol,
        root: Any,
        root_length: int,
        fragments: tuple[Fragment, ...],
    ) -> None:
        self._adapter = adapter
        self._root = root
        self._root_length = root_length
        self._fragments = fragments

    def __iter__(self) -> Iterator[Any]:
        adapter = self._adapter
        yield from adapter.iter_range(self._root, 0, self._root_length)
        for fragment in self._fragments:
            yield from adapter.iter_elements(fragment.data)

    def __len__(self) -> int:
        return self._root_length + sum(f.length for f in self._fragments)


class LazyConcat:
    """
    Buffer that defers concatenation until a read requires it.

    Attributes:
        adapter: Capability implementation for the root's type
    """

    def __init__(
        self,
        initial: Any = None,
        *,
        adapter: AdapterProtocol | None = None,
        max_pending_fragments: int | None = None,
    ) -> None:
        """
        Create a buffer.

        The initial value becomes the root without copying; the buffer takes
        it over and may grow it in place.

        Args:
            initial: Starting owned value. Defaults to the adapter's empty
                value, or "" if no adapter is given either.
            adapter: Explicit adapter; looked up from initial's type if omitted
            max_pending_fragments: Fold everything once more fragments than
                this are pending. Defaults to settings.max_pending_fragments.

        Raises:
            UnsupportedTypeError: If no adapter is registered for initial
        """
        if initial is None:
            initial = adapter.empty() if adapter is not None else ""
        self.adapter: AdapterProtocol = adapter or adapter_for(initial)
        self._root = initial
        self._fragments = FragmentStore()
        self._max_pending = (
            max_pending_fragments
            if max_pending_fragments is not None
            else settings.max_pending_fragments
        )
        self._borrow: SplitBorrow | None = None
        self._generation = 0
        self._consumed = False

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    def concat(self, data: Any, *, owned: bool = False) -> "LazyConcat":
        """
        Append a fragment. O(1) amortized; nothing is joined.

        Args:
            data: Piece of data of the buffer's kind
            owned: Copy data now instead of borrowing the caller's object.
                A borrowed object must not be mutated until it is folded.

        Returns:
            self, for chaining

        Raises:
            TypeError: If the adapter does not accept data
        """
        self._check_usable("concat")
        if not self.adapter.accepts(data):
            raise TypeError(
                f"{self.adapter.name} buffer cannot take {type(data).__name__} fragments"
            )
        if owned:
            fragment = Fragment.owned(data, self.adapter)
        else:
            fragment = Fragment.borrowed(data, self.adapter)
        self._fragments.append(fragment)

        if (
            self._max_pending is not None
            and self._borrow is None
            and len(self._fragments) > self._max_pending
        ):
            logger.debug(
                "Auto-folding %d pending fragments (limit %d)",
                len(self._fragments),
                self._max_pending,
            )
            self._fold(len(self._fragments))
        return self

    def extend(self, pieces, *, owned: bool = False) -> "LazyConcat":
        """Append several fragments in order."""
        for piece in pieces:
            self.concat(piece, owned=owned)
        return self

    __iadd__ = concat

    # ------------------------------------------------------------------
    # Normalizing
    # ------------------------------------------------------------------

    def _fold(self, count: int) -> None:
        """Fold the first `count` fragments into the root."""
        if count == 0:
            return
        pieces = [fragment.data for _, fragment in zip(range(count), self._fragments)]
        self._root = self.adapter.concat_many(self._root, pieces)
        self._fragments.drain_prefix(count)
        logger.debug(
            "Folded %d fragments, root length %d, %d pending",
            count,
            self.length(),
            len(self._fragments),
        )

    def normalize(self) -> "LazyConcat":
        """
        Fold every pending fragment into the root.

        A no-op when nothing is pending.

        Returns:
            self, for chaining

        Raises:
            BorrowConflictError: If a split borrow is active
        """
        self._check_usable("normalize")
        if not self._fragments:
            return self
        if self._borrow is not None:
            raise BorrowConflictError("normalize")
        self._fold(len(self._fragments))
        return self

    def normalize_to_len(self, target_len: int) -> int | None:
        """
        Fold the fewest leading fragments that make the root >= target_len.

        Nothing is folded if the root is already long enough, or if even all
        fragments together cannot reach the target.

        Args:
            target_len: Number of elements the root must cover

        Returns:
            Root length afterwards, or None if there is not enough data

        Raises:
            ValueError: If target_len is negative
            BorrowConflictError: If a fold is needed while a split borrow
                is active
        """
        self._check_usable("normalize")
        if target_len < 0:
            raise ValueError(f"target_len must be >= 0, got {target_len}")

        available = self.length()
        if available >= target_len:
            return available

        for count, length in enumerate(self._fragments.lengths(), start=1):
            available += length
            if available >= target_len:
                if self._borrow is not None:
                    raise BorrowConflictError("normalize")
                self._fold(count)
                return self.length()

        logger.debug(
            "Cannot normalize to %d: only %d elements in total",
            target_len,
            available,
        )
        return None

    def done(self) -> Any:
        """
        Normalize and hand out the root, consuming the buffer.

        Returns:
            The fully joined owned value

        Raises:
            BorrowConflictError: If a split borrow is active
        """
        self._check_usable("call done()")
        if self._borrow is not None:
            raise BorrowConflictError("call done()")
        self.normalize()
        root = self._root
        self._root = None
        self._consumed = True
        return root

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def length(self) -> int:
        """Number of elements already materialized in the root."""
        self._check_usable("read length")
        return self.adapter.length(self._root)

    def total_length(self) -> int:
        """Length of the logical value: root plus every pending fragment."""
        return self.length() + self._fragments.total_length()

    @property
    def pending(self) -> int:
        """Number of fragments waiting to be folded."""
        return len(self._fragments)

    @property
    def state(self) -> BufferState:
        if self._fragments:
            return BufferState.FRAGMENTED
        return BufferState.NORMALIZED

    def is_normal(self) -> bool:
        return not self._fragments

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def borrowed(self) -> bool:
        """True while a split borrow is active."""
        return self._borrow is not None

    def needs_normalization(self, key: slice | None = None) -> bool:
        """
        Check whether get_slice(key) would need more of the root than exists.

        Args:
            key: Range to be read; None or an open stop means the whole value

        Returns:
            True if a fold is needed first

        Raises:
            SliceBoundsError: If key can never be served (negative index,
                reversed range or step), however much is folded
        """
        self._check_usable("check normalization")
        if key is None:
            return bool(self._fragments)
        if key.stop is None:
            resolve_range(key, self.total_length())
            return bool(self._fragments)
        _, stop = resolve_range(key, as_index(key.stop))
        return stop > self.length()

    def get_slice(self, key: slice | None = None) -> Any:
        """
        Borrow a range of the root.

        Args:
            key: Range to read; None for the whole (fully normalized) value

        Returns:
            The adapter's view type (str, SequenceView, memoryview, ...)

        Raises:
            SliceBoundsError: If the root does not cover the range
        """
        self._check_usable("slice")
        start, stop = resolve_range(
            key, self.length(), open_end=not self._fragments
        )
        return self.adapter.slice(self._root, start, stop)

    def __getitem__(self, key: slice) -> Any:
        if not isinstance(key, slice):
            raise TypeError(
                f"LazyConcat indices must be slices, not {type(key).__name__}"
            )
        return self.get_slice(key)

    def iterate(self) -> BufferIterable:
        """
        Iterate the logical value without folding.

        Returns:
            Restartable iterable over root elements, then each pending
            fragment's elements, as of this call
        """
        self._check_usable("iterate")
        return BufferIterable(
            self.adapter, self._root, self.length(), self._fragments.snapshot()
        )

    def __iter__(self) -> Iterator[Any]:
        return iter(self.iterate())

    def materialize(self) -> Any:
        """Build a new owned copy of the logical value; the buffer is untouched."""
        self._check_usable("materialize")
        adapter = self.adapter
        copy = adapter.concat(adapter.empty(), self._root)
        return adapter.concat_many(copy, [f.data for f in self._fragments])

    def split_borrow(self) -> SplitBorrow:
        """
        Split into a read-only root snapshot and an append-only handle.

        Use as a context manager:

            ```python
            with buf.split_borrow() as (view, writer):
                head = view.get_slice(slice(0, 4))
                writer.concat("more")
            ```

        Until the split is released, folding and done() are refused. After
        release both handles raise StaleHandleError.

        Raises:
            BorrowConflictError: If a split is already active
        """
        self._check_usable("split borrow")
        return SplitBorrow(self)

    def _open_borrow(self, split: SplitBorrow) -> int:
        if self._borrow is not None:
            raise BorrowConflictError("open a second split borrow")
        self._borrow = split
        logger.debug("Opened split borrow at generation %d", self._generation)
        return self._generation

    def _close_borrow(self, split: SplitBorrow) -> None:
        if self._borrow is split:
            self._borrow = None
            self._generation += 1
            logger.debug("Released split borrow, now generation %d", self._generation)

    def _check_usable(self, operation: str) -> None:
        if self._consumed:
            raise BufferConsumedError(operation)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        if self._consumed:
            return "LazyConcat(<consumed>)"
        limit = settings.repr_fragment_limit
        shown = [repr(f.data) for _, f in zip(range(limit), self._fragments)]
        hidden = len(self._fragments) - len(shown)
        if hidden > 0:
            shown.append(f"+{hidden} more")
        return f"LazyConcat(root={self._root!r}, fragments=[{', '.join(shown)}])"

    def __str__(self) -> str:
        if self._consumed:
            return repr(self)
        return str(self.materialize())

    def __rich_repr__(self):
        yield "root", self._root
        yield "fragments", [f.data for f in self._fragments]
        yield "state", self.state.value
