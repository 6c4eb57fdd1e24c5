"""
Pending fragments and the store that queues them.

A Fragment is one piece of data appended to a buffer but not yet folded into
its root. It is either:
- owned: an independent copy made at append time, immune to later changes
  in the caller's object
- borrowed: a reference to the caller's object, which the caller promises
  not to mutate until the fragment is folded or the buffer is dropped

The FragmentStore is append-only at the back and drains only from the front,
which is the order folding requires.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator

from lazy_concat.protocols import AdapterProtocol


@dataclass(frozen=True)
class Fragment:
    """
    One pending, not-yet-joined piece of data.

    Attributes:
        data: The fragment's elements (owned copy or borrowed reference)
        length: Element count, measured once at creation
        is_owned: True if data is a private copy held by the buffer
    """

    data: Any
    length: int
    is_owned: bool = False

    @classmethod
    def owned(cls, data: Any, adapter: AdapterProtocol) -> "Fragment":
        """Copy data through the adapter and wrap the copy."""
        copy = adapter.to_owned(data)
        return cls(data=copy, length=adapter.length(copy), is_owned=True)

    @classmethod
    def borrowed(cls, data: Any, adapter: AdapterProtocol) -> "Fragment":
        """Wrap a reference to the caller's data without copying."""
        return cls(data=data, length=adapter.length(data), is_owned=False)

    def __len__(self) -> int:
        return self.length


class FragmentStore:
    """
    Ordered queue of pending fragments.

    Only two mutations exist: append() at the back and drain_prefix() at the
    front. Fragments are never reordered or removed from the middle.
    """

    __slots__ = ("_fragments",)

    def __init__(self) -> None:
        self._fragments: deque[Fragment] = deque()

    def append(self, fragment: Fragment) -> None:
        self._fragments.append(fragment)

    def drain_prefix(self, count: int) -> list[Fragment]:
        """
        Remove and return the first `count` fragments, in order.

        Args:
            count: Number of fragments to remove, 0 <= count <= len(store)

        Returns:
            The removed fragments, front first

        Raises:
            ValueError: If count is negative or larger than the store
        """
        if not 0 <= count <= len(self._fragments):
            raise ValueError(
                f"cannot drain {count} of {len(self._fragments)} fragments"
            )
        popleft = self._fragments.popleft
        return [popleft() for _ in range(count)]

    def lengths(self) -> list[int]:
        return [fragment.length for fragment in self._fragments]

    def total_length(self) -> int:
        return sum(fragment.length for fragment in self._fragments)

    def snapshot(self) -> tuple[Fragment, ...]:
        """Immutable copy of the current queue, front first."""
        return tuple(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __bool__(self) -> bool:
        return bool(self._fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments)
