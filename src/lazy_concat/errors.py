"""
Exception hierarchy for lazy-concat.

All errors raised by the buffer itself derive from LazyConcatError. Errors
raised by an adapter (a capability implementation) are not wrapped and
surface to the caller unchanged.

Note that running out of data in normalize_to_len() is not an error: it is
reported by returning None.
"""


class LazyConcatError(Exception):
    """Base class for all lazy-concat errors."""


class SliceBoundsError(LazyConcatError, IndexError):
    """
    Raised when a slice is requested beyond the normalized root.

    This is a caller contract violation: the caller must make sure the root
    covers the range (via normalize_to_len() or normalize()) before slicing.
    Returning truncated data instead would be silently wrong.

    Attributes:
        start: Requested start index (None if omitted)
        stop: Requested stop index (None if unbounded)
        available: Number of materialized elements in the root
        reason: Short description of what was wrong with the range
    """

    def __init__(
        self,
        start: int | None,
        stop: int | None,
        available: int,
        reason: str,
    ) -> None:
        self.start = start
        self.stop = stop
        self.available = available
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"Slice [{self.start}:{self.stop}] is out of bounds "
            f"({self.available} elements normalized): {self.reason}"
        )


class BorrowConflictError(LazyConcatError):
    """
    Raised when an operation would invalidate an active split borrow.

    While a SplitBorrow is live the root must not change, so folding and
    done() are refused. Opening a second split is refused as well.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation} while a split borrow is active; "
            "release the borrow first"
        )


class StaleHandleError(LazyConcatError):
    """
    Raised when a snapshot or append handle is used after its split ended.

    Attributes:
        handle: Name of the handle type that was misused
        generation: Generation the handle was issued for
        current: Current generation of the buffer
    """

    def __init__(self, handle: str, generation: int, current: int) -> None:
        self.handle = handle
        self.generation = generation
        self.current = current
        super().__init__(
            f"{handle} from generation {generation} is stale "
            f"(buffer is at generation {current})"
        )


class BufferConsumedError(LazyConcatError):
    """Raised when a buffer is used after done() handed out its value."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: buffer was consumed by done()")


class UnsupportedTypeError(LazyConcatError, TypeError):
    """Raised when no adapter is registered for a value's type."""

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type
        super().__init__(
            f"No adapter registered for {value_type.__name__!r}; "
            "use register_adapter() or pass adapter= explicitly"
        )
