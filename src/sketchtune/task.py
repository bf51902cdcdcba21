"""Tuning task definitions: the hardware target and the program to tune."""

from typing import NamedTuple

from sketchtune.ir import Program


class Target(NamedTuple):
    """Hardware target a program is tuned for.

    Attributes:
        kind: Target kind (e.g., ``"llvm"``, ``"cuda"``).
        num_cores: Parallel cores available to outer loops.
        vector_width: Elements processed per vector instruction.
        max_unroll_step: Largest unroll step the target profits from.
    """

    kind: str = "llvm"
    num_cores: int = 8
    vector_width: int = 8
    max_unroll_step: int = 128


class TuneTask(NamedTuple):
    """A program to tune together with its target and output buffers.

    Attributes:
        name: Task name used in logs.
        program: Lowered program to schedule.
        target: Hardware target.
        output_names: Buffers visible outside the program; their producers are never inlined.
    """

    name: str
    program: Program
    target: Target
    output_names: tuple[str, ...]
