"""Line writer that owns all indentation arithmetic for the encoder."""

from collections.abc import Iterable, Iterator

from .types import Line


class LineWriter:
    """
    Accumulates ``(content, depth)`` pairs and renders indented text.

    Encoders produce blocks of lines with depths relative to the block and
    hand them to the writer with a base depth; the writer is the only place
    that turns depth into leading spaces.

    Example:
        writer = LineWriter(indent=2)
        writer.push("user:", 0)
        writer.push("name: Alice", 1)
        writer.render()  # "user:\\n  name: Alice"
    """

    def __init__(self, indent: int = 2):
        if indent < 1:
            raise ValueError(f"indent must be positive, got {indent}")
        self.indent_unit = " " * indent
        self._lines: list[Line] = []

    def push(self, content: str, depth: int) -> None:
        """Add one line at the given depth."""
        if depth < 0:
            raise ValueError(f"depth must be non-negative, got {depth}")
        self._lines.append((content, depth))

    def push_block(self, lines: Iterable[Line], base_depth: int = 0) -> None:
        """Add a block of relative-depth lines, re-based at ``base_depth``."""
        for content, depth in lines:
            self.push(content, base_depth + depth)

    def lines(self) -> Iterator[str]:
        """Yield the rendered, indented lines in emission order."""
        for content, depth in self._lines:
            yield self.indent_unit * depth + content

    def render(self) -> str:
        """Join all rendered lines with newlines (no trailing newline)."""
        return "\n".join(self.lines())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)
