"""Tests for the rich structural dump."""

import io

from rich.console import Console
from rich.tree import Tree

from lazy_concat import LazyConcat
from lazy_concat.display import print_buffer, render_tree


def _render(buf: LazyConcat) -> str:
    console = Console(file=io.StringIO(), width=100, color_system=None)
    print_buffer(buf, console=console)
    return console.file.getvalue()


class TestRenderTree:
    """Tests for render_tree() and print_buffer()."""

    def test_returns_tree_with_one_node_per_part(self):
        """The tree should have a node for root and each fragment."""
        buf = LazyConcat("hel").concat("lo the").concat("re!", owned=True)

        tree = render_tree(buf)

        assert isinstance(tree, Tree)
        assert len(tree.children) == 3

    def test_lists_root_and_fragments_in_order(self):
        """Output should describe root then fragments in fold order."""
        buf = LazyConcat("hel").concat("lo the").concat("re!", owned=True)

        output = _render(buf)

        assert "LazyConcat [text, fragmented]" in output
        assert "root (3): 'hel'" in output
        assert "#0 borrowed (6): 'lo the'" in output
        assert "#1 owned (3): 're!'" in output
        assert output.index("#0") < output.index("#1")

    def test_does_not_normalize(self):
        """Rendering should not fold anything."""
        buf = LazyConcat([]).concat([1, 2])

        _render(buf)

        assert buf.pending == 1

    def test_normalized_buffer(self):
        """A normalized buffer should be labelled as such."""
        buf = LazyConcat([1, 2])

        output = _render(buf)

        assert "[list, normalized]" in output
        assert "root (2): [1, 2]" in output

    def test_long_values_truncated(self):
        """Long previews should be cut with an ellipsis."""
        buf = LazyConcat("x" * 200)

        tree = render_tree(buf, width=20)

        assert str(tree.children[0].label).endswith("...")
