"""Base class for sketch generation rules.

Every rule follows the init-then-apply protocol used by random mutation,
and the analyse-then-apply-on-block protocol used by layered sketch
generation:

1. ``init(ir_schedule)``: bind the rule to a schedule and enumerate every
   position (block, option) it could rewrite; report an apply type.
2. ``apply(index)``: rewrite the bound schedule at one enumerated position.
3. ``analyse_apply_type(state, block_name)``: classify the rule against one block.
4. ``apply_on_block(state, block_name)``: return one new state per position on the block.

To add a new rule:
1. Subclass AutoGenRule
2. Implement candidates() listing the positions on one block
3. Implement apply_candidate() rewriting one position
4. Set init_apply_type / block_apply_type if the rule excludes itself or others
"""

import enum
import logging
from abc import ABC, abstractmethod
from typing import Any

from sketchtune.ir import ScheduleIR
from sketchtune.state import SearchState
from sketchtune.task import Target

logger = logging.getLogger(__name__)


class RuleApplyType(enum.IntEnum):
    """How a rule can be applied and what it excludes afterwards.

    ``APPLY_AND_SKIP_THIS_RULE`` keeps the rule in this round's weight table
    but drops it from later rounds. ``APPLY_AND_SKIP_ALL_RULES`` keeps it in
    this round's weight table but ends mutation of the state after this round.
    """

    CANNOT_APPLY = 0
    APPLY = 1
    APPLY_AND_SKIP_THIS_RULE = 2
    APPLY_AND_SKIP_ALL_RULES = 3


class AutoGenRule(ABC):
    """Base class for schedule rewriting rules.

    Rules are shared between search states and hold per-round state only
    between ``init`` and ``apply``; they must not be used from two rounds
    at once.

    Attributes:
        name: Rule name for logging and diagnostics.
        init_apply_type: Apply type ``init`` reports when any position exists.
        block_apply_type: Apply type ``analyse_apply_type`` reports when the block has positions.
        target: Hardware target the rule specializes for.
    """

    name: str
    init_apply_type: RuleApplyType = RuleApplyType.APPLY
    block_apply_type: RuleApplyType = RuleApplyType.APPLY

    def __init__(self, target: Target) -> None:
        """Initialize the rule for a target.

        Args:
            target: Hardware target.
        """
        self.target = target
        self._ir_schedule: ScheduleIR | None = None
        self._positions: list[tuple[str, Any]] = []

    @abstractmethod
    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        """List the rewrite options this rule offers on one block.

        Args:
            ir_schedule: Schedule to inspect.
            block_name: Block to inspect.

        Returns:
            Rule-specific options; empty when the rule cannot apply.
        """

    @abstractmethod
    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        """Rewrite ``ir_schedule`` in place with one option from ``candidates()``.

        Args:
            ir_schedule: Schedule to rewrite.
            block_name: Block to rewrite.
            candidate: Option returned by ``candidates()``.
        """

    def get_rule_name(self) -> str:
        """Return the rule name."""
        return self.name

    def init(self, ir_schedule: ScheduleIR) -> RuleApplyType:
        """Bind to a schedule and enumerate all positions across its blocks.

        Args:
            ir_schedule: Schedule that ``apply`` will rewrite.

        Returns:
            ``CANNOT_APPLY`` when no position exists, else ``init_apply_type``.
        """
        self._ir_schedule = ir_schedule
        self._positions = [
            (block_name, candidate)
            for block_name in ir_schedule.get_all_blocks()
            for candidate in self.candidates(ir_schedule, block_name)
        ]
        return self.init_apply_type if self._positions else RuleApplyType.CANNOT_APPLY

    def number_applicable(self) -> int:
        """Return the number of positions found by the last ``init``."""
        return len(self._positions)

    def apply(self, index: int) -> None:
        """Rewrite the bound schedule at one position found by ``init``.

        Args:
            index: Position index in ``[0, number_applicable())``.

        Raises:
            RuntimeError: If called before ``init``.
            IndexError: If ``index`` is out of range.
        """
        if self._ir_schedule is None:
            raise RuntimeError(f"Rule {self.name} applied before init()")
        if not 0 <= index < len(self._positions):
            raise IndexError(f"Rule {self.name} has {len(self._positions)} positions, got index {index}")
        block_name, candidate = self._positions[index]
        logger.debug("%s: apply %r on block %s", self.name, candidate, block_name)
        self.apply_candidate(self._ir_schedule, block_name, candidate)

    def analyse_apply_type(self, state: SearchState, block_name: str) -> RuleApplyType:
        """Classify this rule against one block of a state.

        Args:
            state: State to inspect.
            block_name: Block to inspect.

        Returns:
            ``CANNOT_APPLY`` when the block offers no position, else ``block_apply_type``.
        """
        if not self.candidates(state.ir_schedule, block_name):
            return RuleApplyType.CANNOT_APPLY
        return self.block_apply_type

    def apply_on_block(self, state: SearchState, block_name: str) -> list[SearchState]:
        """Branch ``state`` once per position on ``block_name``.

        Args:
            state: Parent state; left untouched.
            block_name: Block to rewrite.

        Returns:
            One new state per option.
        """
        results: list[SearchState] = []
        for candidate in self.candidates(state.ir_schedule, block_name):
            new_state = state.copy()
            self.apply_candidate(new_state.ir_schedule, block_name, candidate)
            results.append(new_state)
        return results
