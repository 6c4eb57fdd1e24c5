"""
Tests for split borrows (reading the root while appending).

These tests verify:
- The snapshot reads the root and the writer only appends
- Folds and done() are refused while the split is active
- Releasing the split invalidates both handles via the generation counter
- Memoryviews handed out over a bytes root are released with the split
"""

import pytest

from lazy_concat import (
    AppendHandle,
    BorrowConflictError,
    LazyConcat,
    RootSnapshot,
    SliceBoundsError,
    StaleHandleError,
)


@pytest.fixture
def hello():
    """Normalized text buffer holding "hello"."""
    return LazyConcat("hello")


class TestSplitBorrowHandles:
    """Tests for what each side of the split can do."""

    def test_unpacks_into_view_and_writer(self, hello):
        """The split should unpack into a snapshot and an append handle."""
        with hello.split_borrow() as (view, writer):
            assert isinstance(view, RootSnapshot)
            assert isinstance(writer, AppendHandle)

    def test_view_reads_root(self, hello):
        """The snapshot should expose the root as views and elements."""
        with hello.split_borrow() as (view, writer):
            assert view.value == "hello"
            assert len(view) == 5
            assert view.get_slice(slice(1, 3)) == "el"
            assert view[0:4] == "hell"
            assert "".join(view) == "hello"

    def test_view_bounds_are_checked(self, hello):
        """Snapshot slices past the root should raise."""
        with hello.split_borrow() as (view, writer):
            with pytest.raises(SliceBoundsError):
                view.get_slice(slice(0, 6))
            with pytest.raises(TypeError):
                view[0]

    def test_writer_appends_without_touching_root(self, hello):
        """Appends through the writer should stay pending."""
        with hello.split_borrow() as (view, writer):
            writer.concat(" ").concat("world")

            assert writer.appended == 2
            assert writer.pending == 2
            assert view.value == "hello"
            assert hello.length() == 5

        assert hello.done() == "hello world"

    def test_writer_has_no_read_or_fold_operations(self, hello):
        """Each handle should expose only its own side."""
        with hello.split_borrow() as (view, writer):
            assert not hasattr(writer, "get_slice")
            assert not hasattr(writer, "normalize")
            assert not hasattr(view, "concat")

    def test_view_sees_fragments_folded_before_the_split(self):
        """The snapshot should cover what was folded beforehand."""
        buf = LazyConcat("").concat("ab").concat("cd")
        buf.normalize_to_len(2)

        with buf.split_borrow() as (view, writer):
            assert view.value == "ab"


class TestSplitBorrowConflicts:
    """Tests for operations refused during a split."""

    def test_normalize_refused(self, hello):
        """normalize() should be refused while fragments would fold."""
        with hello.split_borrow() as (view, writer):
            writer.concat("!")
            with pytest.raises(BorrowConflictError):
                hello.normalize()
            assert hello.pending == 1

    def test_normalize_without_pending_is_still_a_noop(self, hello):
        """normalize() with nothing pending should still succeed."""
        with hello.split_borrow():
            assert hello.normalize() is hello

    def test_done_refused(self, hello):
        """done() should be refused during a split."""
        with hello.split_borrow():
            with pytest.raises(BorrowConflictError):
                hello.done()

    def test_normalize_to_len_needing_fold_refused(self, hello):
        """A partial fold should be refused during a split."""
        with hello.split_borrow() as (view, writer):
            writer.concat("!!")
            with pytest.raises(BorrowConflictError):
                hello.normalize_to_len(6)
            assert hello.pending == 1

    def test_normalize_to_len_already_satisfied_allowed(self, hello):
        """normalize_to_len() without a fold should still answer."""
        with hello.split_borrow() as (view, writer):
            writer.concat("!!")
            assert hello.normalize_to_len(5) == 5
            assert hello.normalize_to_len(10) is None

    def test_second_split_refused(self, hello):
        """Only one split may be active at a time."""
        with hello.split_borrow():
            with pytest.raises(BorrowConflictError):
                hello.split_borrow()

    def test_buffer_slicing_still_allowed(self, hello):
        """Reading the buffer's own slices is harmless during a split."""
        with hello.split_borrow():
            assert hello.get_slice(slice(0, 2)) == "he"

    def test_auto_fold_suppressed(self):
        """Auto-fold should wait until the split ends."""
        buf = LazyConcat("x", max_pending_fragments=1)

        with buf.split_borrow() as (view, writer):
            writer.concat("a").concat("b").concat("c")
            assert buf.pending == 3

        buf.concat("d")
        assert buf.pending == 0
        assert buf.done() == "xabcd"


class TestSplitBorrowRelease:
    """Tests for ending a split."""

    def test_release_invalidates_handles(self, hello):
        """Both handles should go stale on release."""
        split = hello.split_borrow()
        view, writer = split
        split.release()

        assert not split.active
        assert not view.valid
        with pytest.raises(StaleHandleError):
            view.value
        with pytest.raises(StaleHandleError):
            len(view)
        with pytest.raises(StaleHandleError):
            writer.concat("!")

    def test_stale_error_reports_generations(self, hello):
        """StaleHandleError should carry both generations."""
        with hello.split_borrow() as (view, writer):
            pass

        with pytest.raises(StaleHandleError) as exc_info:
            writer.concat("!")

        assert exc_info.value.handle == "AppendHandle"
        assert exc_info.value.generation == 0
        assert exc_info.value.current == 1

    def test_release_is_idempotent(self, hello):
        """Releasing twice should be harmless."""
        split = hello.split_borrow()
        split.release()
        split.release()

        assert not hello.borrowed

    def test_new_split_after_release(self, hello):
        """A new split should work after the old one ends."""
        with hello.split_borrow():
            pass
        with hello.split_borrow() as (view, writer):
            assert view.valid
            assert view.value == "hello"

    def test_released_on_exception(self, hello):
        """Leaving the with block by exception should release the split."""
        with pytest.raises(RuntimeError):
            with hello.split_borrow():
                assert hello.borrowed
                raise RuntimeError("boom")

        assert not hello.borrowed
        hello.concat("!").normalize()
        assert hello.done() == "hello!"

    def test_old_split_release_does_not_end_new_split(self, hello):
        """A stale split's release() should not end the current one."""
        first = hello.split_borrow()
        first.release()
        second = hello.split_borrow()

        first.release()

        assert second.active
        assert hello.borrowed


class TestSplitBorrowBytes:
    """Tests for memoryview snapshots over a bytearray root."""

    def test_views_released_with_split(self):
        """Memoryviews from the snapshot should be released with the split."""
        buf = LazyConcat(bytearray(b"ab"))

        with buf.split_borrow() as (view, writer):
            head = view.get_slice(slice(0, 2))
            assert bytes(head) == b"ab"
            writer.concat(b"cd")

        with pytest.raises(ValueError):
            bytes(head)

        buf.normalize()
        assert buf.done() == b"abcd"

    def test_live_snapshot_iterator_does_not_pin_root(self):
        """A leftover snapshot iterator should not block folds."""
        buf = LazyConcat(bytearray(b"ab"))

        with buf.split_borrow() as (view, writer):
            iterator = iter(view)
            assert next(iterator) == ord("a")
            writer.concat(b"cd")

        buf.normalize()

        assert buf.done() == b"abcd"
        with pytest.raises(StaleHandleError):
            next(iterator)

    def test_snapshot_iterator_yields_ints_during_split(self):
        """Iterating a bytes snapshot should yield ints."""
        buf = LazyConcat(bytearray(b"xyz"))

        with buf.split_borrow() as (view, writer):
            assert list(view) == list(b"xyz")
