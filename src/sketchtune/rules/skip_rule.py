"""The veto rule: a no-op mutation that can end block expansion."""

from typing import Any

from sketchtune.ir import ScheduleIR
from sketchtune.rules.base import AutoGenRule, RuleApplyType
from sketchtune.state import SearchState


class SkipRule(AutoGenRule):
    """Rule that leaves the schedule unchanged.

    During random mutation it is one weighted no-op choice among the other
    rules, so a sketch may stop changing without ending the walk. Applied on
    a block it signals ``APPLY_AND_SKIP_ALL_RULES``. It must be the last rule
    of a registry; layered sketch generation drops it.
    """

    name = "SkipRule"
    block_apply_type = RuleApplyType.APPLY_AND_SKIP_ALL_RULES

    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        return [None]

    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        pass

    def init(self, ir_schedule: ScheduleIR) -> RuleApplyType:
        """Bind to a schedule with exactly one no-op position."""
        self._ir_schedule = ir_schedule
        self._positions = [("", None)]
        return self.init_apply_type

    def apply_on_block(self, state: SearchState, block_name: str) -> list[SearchState]:
        return [state.copy()]
