"""Annotate blocks with an auto-unroll step."""

from typing import Any

from sketchtune.ir import ScheduleIR
from sketchtune.rules.base import AutoGenRule, RuleApplyType
from sketchtune.task import Target

DEFAULT_MAX_STEPS = (16, 64, 512)


class AutoUnroll(AutoGenRule):
    """Set ``auto_unroll_max_step`` on a block that has none yet.

    Steps larger than the target's ``max_unroll_step`` are not offered.
    Random mutation unrolls at most once per state.

    Attributes:
        max_steps: Candidate unroll steps.
    """

    name = "AutoUnroll"
    init_apply_type = RuleApplyType.APPLY_AND_SKIP_THIS_RULE

    def __init__(self, target: Target, max_steps: tuple[int, ...] = DEFAULT_MAX_STEPS) -> None:
        super().__init__(target)
        self.max_steps = tuple(step for step in max_steps if step <= target.max_unroll_step)

    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        if not ir_schedule.has_block(block_name):
            return []
        block = ir_schedule.get_block(block_name)
        if not block.loops or block.annotation("auto_unroll_max_step") is not None:
            return []
        return list(self.max_steps)

    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        ir_schedule.annotate(block_name, "auto_unroll_max_step", candidate)
