"""IR type definitions: Loop, Block and Program."""

from typing import Any, NamedTuple


class Loop(NamedTuple):
    """A single loop of a block's loop nest.

    Attributes:
        var: Loop variable name (e.g., ``"i"`` or ``"i_1"`` after a split).
        extent: Trip count.
        is_reduce: Whether the loop iterates a reduction axis.
    """

    var: str
    extent: int
    is_reduce: bool = False


class Block(NamedTuple):
    """A named, addressable compute region: a loop nest around one statement.

    Annotations record schedule decisions applied to the block as
    ``(key, value)`` pairs (e.g., ``("tile_size", 16)``) so blocks stay
    hashable.

    Attributes:
        name: Block name, unique within a program.
        loops: Loop nest from outermost to innermost.
        writes: Buffer written by the block.
        reads: Buffers read by the block, in operand order.
        annotations: Schedule annotations as ``(key, value)`` pairs.
    """

    name: str
    loops: tuple[Loop, ...]
    writes: str
    reads: tuple[str, ...]
    annotations: tuple[tuple[str, Any], ...] = ()

    @property
    def is_reduction(self) -> bool:
        """Whether any loop of the block iterates a reduction axis."""
        return any(loop.is_reduce for loop in self.loops)

    @property
    def iterations(self) -> int:
        """Total number of statement instances executed by the block."""
        total = 1
        for loop in self.loops:
            total *= loop.extent
        return total

    def annotation(self, key: str, default: Any = None) -> Any:
        """Look up an annotation value.

        Args:
            key: Annotation key.
            default: Value returned when the key is absent.

        Returns:
            The annotation value or ``default``.
        """
        for name, value in self.annotations:
            if name == key:
                return value
        return default

    def with_annotation(self, key: str, value: Any) -> "Block":
        """Return a copy of the block with ``key`` set to ``value``."""
        kept = tuple((name, old) for name, old in self.annotations if name != key)
        return self._replace(annotations=kept + ((key, value),))


class Program(NamedTuple):
    """Immutable loop-nest program: an ordered sequence of blocks.

    Programs are hashable, so identical schedules reached through different
    rule orderings compare equal.

    Attributes:
        name: Program name.
        blocks: Blocks in declaration (producer-before-consumer) order.
    """

    name: str
    blocks: tuple[Block, ...]

    def __repr__(self) -> str:
        """Return a readable multi-line representation."""
        lines = [f"Program(name={self.name!r},", "  blocks=("]
        for block in self.blocks:
            lines.append(f"    {block!r},")
        lines.append("  ))")
        return "\n".join(lines)
