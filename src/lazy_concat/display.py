"""
Structural dump of a buffer for terminals.

render_tree() builds a rich Tree showing the root and every pending fragment
in fold order:

    LazyConcat [text, fragmented]
    ├── root (3): 'hel'
    ├── #0 borrowed (6): 'lo the'
    └── #1 owned (3): 're!'

Nothing is folded to produce it.
"""

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from lazy_concat.buffer import BufferState, LazyConcat


def _preview(value, width: int) -> str:
    text = repr(value)
    if len(text) > width:
        text = text[: width - 3] + "..."
    return text


def render_tree(buffer: LazyConcat, width: int = 60) -> Tree:
    """
    Build a tree of the buffer's root and pending fragments.

    Args:
        buffer: The buffer to describe
        width: Maximum characters of each value preview

    Returns:
        Tree ready for Console.print()
    """
    style = "green" if buffer.state is BufferState.NORMALIZED else "yellow"
    tree = Tree(
        Text.assemble(
            ("LazyConcat ", "bold"),
            (f"[{buffer.adapter.name}, {buffer.state.value}]", style),
        )
    )
    tree.add(
        Text(f"root ({buffer.length()}): {_preview(buffer._root, width)}", style="cyan")
    )
    for index, fragment in enumerate(buffer._fragments):
        kind = "owned" if fragment.is_owned else "borrowed"
        tree.add(
            Text(
                f"#{index} {kind} ({fragment.length}): "
                f"{_preview(fragment.data, width)}",
                style="dim" if not fragment.is_owned else "",
            )
        )
    return tree


def print_buffer(buffer: LazyConcat, console: Console | None = None) -> None:
    """Print render_tree(buffer) to the given console (stdout by default)."""
    (console or Console()).print(render_tree(buffer))
