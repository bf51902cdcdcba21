"""Shared test utilities and fixtures for pytest."""

from typing import Any

import pytest

from sketchtune.ir import Program, ScheduleIR, elementwise_chain_program, matmul_relu_program
from sketchtune.rules import AutoGenRule, RuleApplyType
from sketchtune.task import Target, TuneTask


class ScriptedRule(AutoGenRule):
    """Rule with scripted apply types and position counts.

    ``init`` offers ``num_positions`` positions on the first block.
    ``analyse_apply_type`` reports ``block_apply_type`` on any existing
    block and ``apply_on_block`` branches ``fan_out`` times. Every rewrite
    annotates the block with ``(name, option)`` and is recorded in
    ``applied``.

    Attributes:
        num_positions: Positions offered by ``init``.
        fan_out: Successors produced by ``apply_on_block``.
        applied: Options applied so far, in order.
    """

    def __init__(
        self,
        name: str,
        num_positions: int = 1,
        init_apply_type: RuleApplyType = RuleApplyType.APPLY,
        block_apply_type: RuleApplyType = RuleApplyType.APPLY,
        fan_out: int = 1,
    ) -> None:
        super().__init__(Target())
        self.name = name
        self.num_positions = num_positions
        self.init_apply_type = init_apply_type
        self.block_apply_type = block_apply_type
        self.fan_out = fan_out
        self.applied: list[Any] = []

    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        if self.block_apply_type == RuleApplyType.CANNOT_APPLY or not ir_schedule.has_block(block_name):
            return []
        return list(range(self.fan_out))

    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        self.applied.append(candidate)
        count = ir_schedule.get_block(block_name).annotation(self.name, 0)
        ir_schedule.annotate(block_name, self.name, count + 1 + candidate)

    def init(self, ir_schedule: ScheduleIR) -> RuleApplyType:
        self._ir_schedule = ir_schedule
        blocks = ir_schedule.get_all_blocks()
        self._positions = [(blocks[0], index) for index in range(self.num_positions)] if blocks else []
        if not self._positions:
            return RuleApplyType.CANNOT_APPLY
        return self.init_apply_type


@pytest.fixture
def target() -> Target:
    """Default CPU-like target."""
    return Target()


@pytest.fixture
def matmul_relu() -> Program:
    """``relu(A @ B)`` with M=N=64, K=32: a reduction block and an elementwise output block."""
    return matmul_relu_program(m=64, n=64, k=32)


@pytest.fixture
def matmul_relu_task(matmul_relu: Program, target: Target) -> TuneTask:
    """Tuning task over ``matmul_relu`` whose output buffer is ``D``."""
    return TuneTask(name="matmul_relu", program=matmul_relu, target=target, output_names=("D",))


@pytest.fixture
def chain_task(target: Target) -> TuneTask:
    """Tuning task over a chain of three 32x32 elementwise blocks ending in ``T3``."""
    return TuneTask(
        name="chain", program=elementwise_chain_program((32, 32), 3), target=target, output_names=("T3",)
    )


@pytest.fixture
def single_block_task(target: Target) -> TuneTask:
    """Tuning task over a single 32x32 elementwise block writing ``T1``."""
    return TuneTask(
        name="single_block", program=elementwise_chain_program((32, 32), 1), target=target, output_names=("T1",)
    )
