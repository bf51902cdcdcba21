"""Search state: one point in the sketch search tree."""

import zlib
from typing import TYPE_CHECKING

from sketchtune.ir import ScheduleIR

if TYPE_CHECKING:
    from sketchtune.rules.base import AutoGenRule


NOT_INIT_COST = float("inf")


class SearchState:
    """Snapshot of a schedule, its predicted cost and its remaining rules.

    States are copied before every mutation (copy-on-branch), so a state
    held by one generation never changes underneath another. Rule handles
    are shared between states; only the list holding them is per-state.

    Attributes:
        ir_schedule: Schedule handle over the program being transformed.
        predicted_cost: Cost predicted by the cost model, or ``NOT_INIT_COST``.
        applicable_rules: Rules still eligible to fire on this state.
    """

    def __init__(
        self,
        ir_schedule: ScheduleIR,
        predicted_cost: float = NOT_INIT_COST,
        applicable_rules: "list[AutoGenRule] | None" = None,
    ) -> None:
        """Initialize a state.

        Args:
            ir_schedule: Schedule handle; the state takes its own copy.
            predicted_cost: Initial predicted cost.
            applicable_rules: Eligible rules; the state keeps its own list.
        """
        self.ir_schedule = ir_schedule.copy()
        self.predicted_cost = predicted_cost
        self.applicable_rules: list[AutoGenRule] = list(applicable_rules or [])

    def copy(self) -> "SearchState":
        """Return a branch of this state that can be mutated independently."""
        return SearchState(self.ir_schedule, self.predicted_cost, self.applicable_rules)

    def debug_string(self) -> str:
        """Render the state's program as text."""
        return self.ir_schedule.debug_string()

    def program_hash(self) -> int:
        """Stable hash of the rendered program, for logs and reports."""
        return zlib.crc32(self.debug_string().encode())

    def __repr__(self) -> str:
        rules = [rule.get_rule_name() for rule in self.applicable_rules]
        return f"SearchState(hash={self.program_hash():08x}, cost={self.predicted_cost}, rules={rules})"
