"""
Deferred concatenation buffers.

LazyConcat collects pieces of text, lists or bytes and joins them only when,
and only as far as, a read needs it. Long chains of appends stay linear in
the number of appends.

Key types:
- LazyConcat: The buffer (concat, normalize, normalize_to_len, get_slice,
  iterate, split_borrow, done)
- BufferState: NORMALIZED / FRAGMENTED
- Fragment, FragmentStore: Pending pieces and their queue
- SplitBorrow, RootSnapshot, AppendHandle: Read-while-appending handles

Capability contracts:
- LengthProtocol, SliceProtocol, ConcatProtocol, AdapterProtocol

Adapters:
- TextAdapter, ListAdapter, TupleAdapter, BytesAdapter
- adapter_for(), register_adapter()
"""

from lazy_concat.adapters import (
    BaseAdapter,
    BytesAdapter,
    ListAdapter,
    TextAdapter,
    TupleAdapter,
    adapter_for,
    register_adapter,
)
from lazy_concat.borrow import AppendHandle, RootSnapshot, SplitBorrow
from lazy_concat.buffer import BufferIterable, BufferState, LazyConcat
from lazy_concat.errors import (
    BorrowConflictError,
    BufferConsumedError,
    LazyConcatError,
    SliceBoundsError,
    StaleHandleError,
    UnsupportedTypeError,
)
from lazy_concat.fragment import Fragment, FragmentStore
from lazy_concat.protocols import (
    AdapterProtocol,
    ConcatProtocol,
    LengthProtocol,
    SliceProtocol,
)
from lazy_concat.views import SequenceView

__all__ = [
    # Buffer
    "LazyConcat",
    "BufferState",
    "BufferIterable",
    "Fragment",
    "FragmentStore",
    "SplitBorrow",
    "RootSnapshot",
    "AppendHandle",
    "SequenceView",
    # Protocols
    "LengthProtocol",
    "SliceProtocol",
    "ConcatProtocol",
    "AdapterProtocol",
    # Adapters
    "BaseAdapter",
    "TextAdapter",
    "ListAdapter",
    "TupleAdapter",
    "BytesAdapter",
    "adapter_for",
    "register_adapter",
    # Errors
    "LazyConcatError",
    "SliceBoundsError",
    "BorrowConflictError",
    "StaleHandleError",
    "BufferConsumedError",
    "UnsupportedTypeError",
]
