"""Mutable schedule handle over an immutable ``Program`` snapshot.

``ScheduleIR`` is what rules rewrite. Every primitive swaps ``program`` for
a new snapshot instead of editing blocks in place, so copying a schedule
only copies a reference and two copies never observe each other's edits.
"""

import logging

from sketchtune.ir.types import Block, Loop, Program

logger = logging.getLogger(__name__)


class ScheduleIR:
    """Schedule handle exposing block queries and rewrite primitives.

    Attributes:
        program: Current program snapshot.
    """

    def __init__(self, program: Program) -> None:
        """Wrap a program snapshot.

        Args:
            program: Initial program.
        """
        self.program = program

    def get_module(self) -> Program:
        """Return the current program snapshot."""
        return self.program

    def get_all_blocks(self) -> list[str]:
        """Return all block names in declaration order."""
        return [block.name for block in self.program.blocks]

    def has_block(self, name: str) -> bool:
        """Return whether a block named ``name`` exists."""
        return any(block.name == name for block in self.program.blocks)

    def get_block(self, name: str) -> Block:
        """Look up a block by name.

        Raises:
            KeyError: If no block has that name.
        """
        for block in self.program.blocks:
            if block.name == name:
                return block
        raise KeyError(f"Block {name!r} not found in program {self.program.name!r}")

    def get_consumers(self, name: str) -> list[str]:
        """Return the names of blocks reading the buffer written by ``name``."""
        buffer = self.get_block(name).writes
        return [block.name for block in self.program.blocks if buffer in block.reads]

    def replace_block(self, block: Block) -> None:
        """Replace the block with the same name as ``block``.

        Raises:
            KeyError: If no block has that name.
        """
        self.get_block(block.name)
        blocks = tuple(block if old.name == block.name else old for old in self.program.blocks)
        self.program = self.program._replace(blocks=blocks)

    def remove_block(self, name: str) -> None:
        """Remove a block from the program.

        Raises:
            KeyError: If no block has that name.
        """
        self.get_block(name)
        blocks = tuple(block for block in self.program.blocks if block.name != name)
        self.program = self.program._replace(blocks=blocks)

    def annotate(self, name: str, key: str, value: object) -> None:
        """Set an annotation on a block."""
        self.replace_block(self.get_block(name).with_annotation(key, value))

    def split_all(self, name: str, factor: int) -> None:
        """Tile every loop of a block whose extent ``factor`` strictly divides.

        Each split loop ``v`` becomes an outer ``v_0`` and an inner ``v_1``
        of extent ``factor``. Outer loops are hoisted above all inner loops,
        preserving relative order, giving the two-level tiled structure.

        Args:
            name: Block to tile.
            factor: Inner tile extent.

        Raises:
            ValueError: If ``factor`` splits no loop of the block.
        """
        block = self.get_block(name)
        outer: list[Loop] = []
        inner: list[Loop] = []
        for loop in block.loops:
            if loop.extent > factor and loop.extent % factor == 0:
                outer.append(Loop(f"{loop.var}_0", loop.extent // factor, loop.is_reduce))
                inner.append(Loop(f"{loop.var}_1", factor, loop.is_reduce))
            else:
                inner.append(loop)
        if not outer:
            raise ValueError(f"Tile factor {factor} does not split any loop of block {name!r}")
        tiled = block._replace(loops=tuple(outer + inner)).with_annotation("tile_size", factor)
        self.replace_block(tiled)
        logger.debug("split_all(%s, %d): %d loops -> %d loops", name, factor, len(block.loops), len(tiled.loops))

    def compute_inline(self, name: str) -> None:
        """Inline a producer block into every consumer.

        The producer disappears and each consumer reads the producer's
        inputs in place of the producer's output buffer.

        Args:
            name: Producer block to inline.

        Raises:
            ValueError: If the block is a reduction or has no consumer.
        """
        block = self.get_block(name)
        consumers = self.get_consumers(name)
        if block.is_reduction or not consumers:
            raise ValueError(f"Block {name!r} cannot be inlined")
        for consumer_name in consumers:
            consumer = self.get_block(consumer_name)
            reads: list[str] = []
            for buffer in consumer.reads:
                for replacement in block.reads if buffer == block.writes else (buffer,):
                    if replacement not in reads:
                        reads.append(replacement)
            inlined = tuple(consumer.annotation("inlined", ())) + (name,)
            self.replace_block(consumer._replace(reads=tuple(reads)).with_annotation("inlined", inlined))
        self.remove_block(name)

    def copy(self) -> "ScheduleIR":
        """Return an independent handle over the same snapshot."""
        return ScheduleIR(self.program)

    def debug_string(self) -> str:
        """Render the program as an indented loop-nest listing."""
        lines = [f"program {self.program.name}"]
        for block in self.program.blocks:
            notes = ", ".join(f"{key}={value}" for key, value in block.annotations)
            lines.append(f"  block {block.name}" + (f" [{notes}]" if notes else ""))
            indent = "    "
            for loop in block.loops:
                suffix = "  # reduce" if loop.is_reduce else ""
                lines.append(f"{indent}for {loop.var} in range({loop.extent}):{suffix}")
                indent += "  "
            lines.append(f"{indent}{block.writes} = {block.name}({', '.join(block.reads)})")
        return "\n".join(lines)
