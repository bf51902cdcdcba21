"""Inline elementwise producers into their consumers."""

from typing import Any

from sketchtune.ir import ScheduleIR
from sketchtune.rules.base import AutoGenRule, RuleApplyType
from sketchtune.task import Target


class AutoInline(AutoGenRule):
    """Inline a non-reduction block that feeds other blocks.

    Blocks writing one of ``output_names`` stay materialized. Inlining a
    block removes it, so on the block-restricted path the un-inlined parent
    is pruned in favour of the inlined child.

    Attributes:
        output_names: Buffers that must remain materialized.
    """

    name = "AutoInline"
    block_apply_type = RuleApplyType.APPLY_AND_SKIP_ALL_RULES

    def __init__(self, target: Target, output_names: tuple[str, ...]) -> None:
        super().__init__(target)
        self.output_names = tuple(output_names)

    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        """Offer a single option when the block can be inlined."""
        if not ir_schedule.has_block(block_name):
            return []
        block = ir_schedule.get_block(block_name)
        if block.is_reduction or block.writes in self.output_names:
            return []
        if not ir_schedule.get_consumers(block_name):
            return []
        return [None]

    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        ir_schedule.compute_inline(block_name)
