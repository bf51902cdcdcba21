"""Helpers for building common loop-nest programs.

Example::

    program = matmul_relu_program(m=128, n=128, k=64)
    schedule = ScheduleIR(program)
"""

from sketchtune.ir.types import Block, Loop, Program


def elementwise_block(name: str, shape: tuple[int, ...], reads: tuple[str, ...], writes: str) -> Block:
    """Build an elementwise block iterating ``shape``.

    Args:
        name: Block name.
        shape: Extent of each spatial loop, outermost first.
        reads: Input buffers.
        writes: Output buffer.

    Returns:
        The block, with loops named ``i0``, ``i1``, ...
    """
    loops = tuple(Loop(f"i{axis}", extent) for axis, extent in enumerate(shape))
    return Block(name=name, loops=loops, writes=writes, reads=reads)


def matmul_block(name: str, m: int, n: int, k: int, reads: tuple[str, str], writes: str) -> Block:
    """Build a matmul block with spatial ``i``/``j`` loops and reduction ``k``."""
    loops = (Loop("i", m), Loop("j", n), Loop("k", k, is_reduce=True))
    return Block(name=name, loops=loops, writes=writes, reads=reads)


def matmul_relu_program(m: int, n: int, k: int) -> Program:
    """Build ``relu(A @ B)`` as a matmul block followed by an elementwise block."""
    return Program(
        name="matmul_relu",
        blocks=(
            matmul_block("matmul", m, n, k, reads=("A", "B"), writes="C"),
            elementwise_block("relu", (m, n), reads=("C",), writes="D"),
        ),
    )


def elementwise_chain_program(shape: tuple[int, ...], length: int) -> Program:
    """Build a chain of ``length`` elementwise blocks ``T0 -> T1 -> ...``."""
    blocks = tuple(
        elementwise_block(f"ew{index}", shape, reads=(f"T{index}",), writes=f"T{index + 1}") for index in range(length)
    )
    return Program(name=f"elementwise_chain_{length}", blocks=blocks)
