"""Loop-nest program IR: immutable Program snapshots and the ScheduleIR handle."""

from sketchtune.ir.build import elementwise_block, elementwise_chain_program, matmul_block, matmul_relu_program
from sketchtune.ir.schedule import ScheduleIR
from sketchtune.ir.types import Block, Loop, Program

__all__ = [
    "Block",
    "Loop",
    "Program",
    "ScheduleIR",
    "elementwise_block",
    "elementwise_chain_program",
    "matmul_block",
    "matmul_relu_program",
]
