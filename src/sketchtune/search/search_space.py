"""Sketch generation and schedule mutation.

``SearchSpace`` owns the rule registry of one tuning task and produces
candidate schedules ("sketches") in three ways:

- unpruned random sketches: repeated single-step random mutation;
- random-pruned sketches: per-block layered expansion with random step
  counts and random pruning;
- rule-pruned sketches: per-block layered expansion, blocks in reverse
  order, pruned by the rules' own skip-all signal.

Every random draw comes from the space's root ``RandomState`` (directly or
through forked sampler seeds), so a fixed root seed reproduces the whole
search.
"""

import logging
from collections.abc import Callable, Sequence

import numpy as np
from tqdm import tqdm

from sketchtune.config import SearchSpaceConfig
from sketchtune.cost_model import ExprCostModel
from sketchtune.ir import ScheduleIR
from sketchtune.rules import AutoGenRule, RuleApplyType, default_rules
from sketchtune.search.report import summarize_states
from sketchtune.search.sampler import BlockSampler, RuleSampler
from sketchtune.search.trace import SearchTrace
from sketchtune.state import NOT_INIT_COST, SearchState
from sketchtune.task import TuneTask
from sketchtune.utils.random_engine import (
    LinearRandomEngine,
    RandomState,
    sample_uniform_double,
    sample_uniform_int,
)

logger = logging.getLogger(__name__)

SKETCH_STRATEGIES = ("rule_prune", "random_prune")


class SearchSpace:
    """Sketch generator and mutator for one tuning task.

    Attributes:
        tune_task: The task being tuned.
        config: Search options.
        sketch_rules: Rule registry; the last rule is the veto rule.
        rand_seed: Root seed cell for all search randomness.
        trace: Provenance graph, or None when ``config.record_trace`` is off.
    """

    def __init__(
        self,
        tune_task: TuneTask,
        config: SearchSpaceConfig | None = None,
        rules: Sequence[AutoGenRule] | None = None,
    ) -> None:
        """Build the rule registry and seed the root random state.

        Args:
            tune_task: Task to generate sketches for.
            config: Search options; defaults to ``SearchSpaceConfig()``.
            rules: Rule registry, veto rule last; defaults to ``default_rules(tune_task)``.
        """
        self.tune_task = tune_task
        self.config = config if config is not None else SearchSpaceConfig()
        self.sketch_rules: list[AutoGenRule] = list(rules) if rules is not None else default_rules(tune_task)
        self.rand_seed = RandomState(0)
        LinearRandomEngine(self.rand_seed).init_state(self.config.rand_seed)
        self.trace = SearchTrace() if self.config.record_trace else None
        logger.debug(
            "SearchSpace(%s): rules=%s, seed=%d",
            tune_task.name,
            [rule.get_rule_name() for rule in self.sketch_rules],
            self.rand_seed.value,
        )

    def _init_schedule(self) -> ScheduleIR:
        return ScheduleIR(self.tune_task.program)

    def _pruning_rules(self) -> list[AutoGenRule]:
        """Return the registry without its trailing veto rule.

        Raises:
            ValueError: If no rule remains.
        """
        rules = self.sketch_rules[:-1]
        if not rules:
            raise ValueError(f"Number of init rules cannot be 0 (registry: {self.sketch_rules})")
        return rules

    def _record(self, parent: SearchState, child: SearchState, rule: AutoGenRule) -> None:
        if self.trace is not None:
            self.trace.record(parent, child, rule.get_rule_name())

    def get_random_initial_sketch(self, num: int) -> list[SearchState]:
        """Generate ``num`` sketches by repeated random mutation of the root.

        Each sketch starts from the unscheduled program with the full
        registry and is mutated until the depth budget is spent or no rule
        remains applicable. Duplicates are kept.

        Args:
            num: Number of sketches.

        Returns:
            The sketches in generation order.
        """
        logger.debug("Start get_random_initial_sketch with num: %d", num)
        init_schedule = self._init_schedule()
        result: list[SearchState] = []
        for _ in tqdm(range(num), desc="Generating sketches", unit="sketch", disable=not self.config.show_progress):
            state = SearchState(init_schedule, NOT_INIT_COST, self.sketch_rules)
            for depth in range(self.config.init_sketch_random_depth):
                logger.debug("Generating random sketch at depth: %d", depth)
                state = self.random_schedule_mutate(state)
                if not state.applicable_rules:
                    break
            logger.debug("Sketch-%d generated, hash: %08x\n%s", len(result), state.program_hash(), state.debug_string())
            result.append(state)
        return result

    def get_schedule_mutate(self, state: SearchState, cost_model: ExprCostModel) -> SearchState:
        """Mutate a state one step and, if enabled, predict the new cost.

        Args:
            state: State to mutate; left untouched.
            cost_model: Model used when ``config.use_cost_model`` is set.

        Returns:
            The mutated state.
        """
        logger.debug("Start get_schedule_mutate in state: %08x", state.program_hash())
        has_manual_schedule = False
        if has_manual_schedule:
            return self.manual_schedule_mutate(state)
        ret = self.random_schedule_mutate(state)
        if self.config.use_cost_model:
            ret.predicted_cost = cost_model.predict(ret.ir_schedule.get_module(), self.tune_task.target)
        return ret

    def manual_schedule_mutate(self, state: SearchState) -> SearchState:
        """Placeholder for human-authored schedules: returns the state unchanged."""
        return state

    def random_schedule_mutate(self, state: SearchState) -> SearchState:
        """Apply one rule at one position, chosen with weight proportional to fan-out.

        Every applicable rule contributes ``number_applicable()`` positions
        to one sample space; a uniform draw over that space picks both the
        rule and the position within it.

        Args:
            state: State to mutate; left untouched.

        Returns:
            A mutated copy, or an unmutated copy when no rule can apply.
        """
        ret = state.copy()
        offsets: list[int] = []
        weighted_rules: list[AutoGenRule] = []
        total_weight = 0
        remaining: list[AutoGenRule] = []
        for rule in ret.applicable_rules:
            apply_type = rule.init(ret.ir_schedule)
            logger.debug("Evaluate rule: %s = %s", rule.get_rule_name(), apply_type.name)
            if apply_type == RuleApplyType.CANNOT_APPLY:
                remaining.append(rule)
                continue
            weight = rule.number_applicable()
            if weight > 0:
                offsets.append(total_weight)
                weighted_rules.append(rule)
                total_weight += weight
            if apply_type == RuleApplyType.APPLY_AND_SKIP_ALL_RULES:
                remaining = []
                break
            if apply_type != RuleApplyType.APPLY_AND_SKIP_THIS_RULE:
                remaining.append(rule)
        ret.applicable_rules = remaining

        if not weighted_rules:
            logger.debug("No applicable rule")
            return ret

        sample_index = sample_uniform_int(0, total_weight, self.rand_seed)
        position = int(np.searchsorted(offsets, sample_index, side="right")) - 1
        sample_rule = weighted_rules[position]
        local_index = sample_index - offsets[position]
        logger.debug("Apply rule: %s with index=%d", sample_rule.get_rule_name(), local_index)
        sample_rule.apply(local_index)
        self._record(state, ret, sample_rule)
        return ret

    def get_random_pruned_initial_sketch(self) -> list[SearchState]:
        """Generate sketches block by block with random depth and random pruning.

        Blocks are drawn by a probabilistic sampler. For each block a random
        number of steps (bounded by the remaining depth budget) is spent
        expanding every frontier state; a state is pruned right after it
        produced successors.

        Returns:
            The final frontier.

        Raises:
            ValueError: If the registry holds only the veto rule.
        """
        logger.debug("Start generating random pruned sketch")
        init_rules = self._pruning_rules()
        init_schedule = self._init_schedule()
        block_sampler = BlockSampler.make(init_schedule.get_all_blocks(), "probabilistic", self.rand_seed)
        depth = self.config.init_sketch_random_depth

        frontier = [SearchState(init_schedule, NOT_INIT_COST, [])]
        total_steps = 0
        while total_steps < depth and (block_name := block_sampler.next_block()) is not None:
            steps = min(sample_uniform_int(0, len(init_rules) + 1, self.rand_seed), depth - total_steps)
            total_steps += steps
            next_frontier: list[SearchState] = []
            for state in frontier:
                rule_sampler = RuleSampler.make(init_rules, "probabilistic", self.rand_seed)
                next_frontier.extend(
                    self.collect_state_transfer(
                        state, block_name, rule_sampler, steps, prune_by_rule=False, prune_probability=1.0
                    )
                )
            frontier = next_frontier
        logger.debug("End generating random pruned sketch with new states num: %d", len(frontier))
        return frontier

    def get_rule_pruned_initial_sketch(self) -> list[SearchState]:
        """Generate sketches block by block, consumers first, pruned by the rules.

        Blocks are visited in reverse declaration order and every rule is
        tried once per block; a state is pruned only when a rule signals
        ``APPLY_AND_SKIP_ALL_RULES`` on it.

        Returns:
            The final frontier.

        Raises:
            ValueError: If the registry holds only the veto rule.
        """
        logger.debug("Start generating rule pruned sketch")
        init_rules = self._pruning_rules()
        init_schedule = self._init_schedule()
        block_sampler = BlockSampler.make(init_schedule.get_all_blocks()[::-1], "traversal", self.rand_seed)

        frontier = [SearchState(init_schedule, NOT_INIT_COST, [])]
        while (block_name := block_sampler.next_block()) is not None:
            next_frontier: list[SearchState] = []
            for state in frontier:
                rule_sampler = RuleSampler.make(init_rules, "traversal", self.rand_seed)
                next_frontier.extend(
                    self.collect_state_transfer(state, block_name, rule_sampler, 0, prune_by_rule=True)
                )
            frontier = next_frontier
        logger.debug("End generating rule pruned sketch with new states num: %d", len(frontier))
        return frontier

    def get_initial_sketch(self, num: int, strategy: str) -> list[SearchState]:
        """Collect ``num`` sketches from a pruned generation strategy.

        The strategy is run repeatedly; each run's sketches are taken
        newest first until ``num`` have been collected.

        Args:
            num: Number of sketches.
            strategy: ``"rule_prune"`` or ``"random_prune"``.

        Returns:
            Exactly ``num`` sketches.

        Raises:
            ValueError: If the strategy is unknown.
            RuntimeError: If a strategy run produces no sketch at all.
        """
        logger.debug("Start get_initial_sketch with num: %d, strategy: %s", num, strategy)
        generators: dict[str, Callable[[], list[SearchState]]] = {
            "rule_prune": self.get_rule_pruned_initial_sketch,
            "random_prune": self.get_random_pruned_initial_sketch,
        }
        if strategy not in generators:
            raise ValueError(f"Unimplemented init sketch strategy {strategy!r}, expected one of {SKETCH_STRATEGIES}")
        generate = generators[strategy]

        result: list[SearchState] = []
        while len(result) < num:
            sketches = generate()
            logger.debug("Generate sketch size: %d", len(sketches))
            if not sketches:
                raise RuntimeError(f"Sketch strategy {strategy!r} produced no state for task {self.tune_task.name}")
            for sketch in reversed(sketches):
                result.append(sketch)
                if len(result) == num:
                    break
        logger.debug("Initial sketches:\n%s", summarize_states(result))
        return result

    def collect_state_transfer(
        self,
        state: SearchState,
        block_name: str,
        rule_sampler: RuleSampler,
        steps: int,
        prune_by_rule: bool,
        prune_probability: float = 0.0,
    ) -> list[SearchState]:
        """Expand a state breadth-first with rewrites restricted to one block.

        Each step draws one rule and applies it to every live state that
        still contains the block. Successors join the live set; a state that
        was rewritten is pruned either when the rule signals
        ``APPLY_AND_SKIP_ALL_RULES`` (``prune_by_rule``) or with probability
        ``prune_probability``.

        Args:
            state: State to expand.
            block_name: Block the rewrites are restricted to.
            rule_sampler: Source of rules, one per step.
            steps: Number of steps; 0 runs until the sampler is exhausted.
            prune_by_rule: Prune by rule signal instead of at random.
            prune_probability: Chance of pruning a rewritten state when pruning at random.

        Returns:
            Every live state after the last step, the surviving input included.
        """
        layer = [state]
        step = 0
        logger.debug("Collect the states of all transfers within steps: %d", steps)
        while steps == 0 or step < steps:
            rule = rule_sampler.next_rule()
            if rule is None:
                break
            step += 1
            logger.debug("step = %d, rule: %s", step, rule.get_rule_name())
            survivors: list[SearchState] = []
            new_states: list[SearchState] = []
            for current in layer:
                if not current.ir_schedule.has_block(block_name):
                    survivors.append(current)
                    continue
                apply_type = rule.analyse_apply_type(current, block_name)
                if apply_type == RuleApplyType.CANNOT_APPLY:
                    survivors.append(current)
                    continue
                children = rule.apply_on_block(current, block_name)
                for child in children:
                    self._record(current, child, rule)
                new_states.extend(children)
                if prune_by_rule:
                    need_prune = apply_type == RuleApplyType.APPLY_AND_SKIP_ALL_RULES
                else:
                    need_prune = sample_uniform_double(0.0, 1.0, self.rand_seed) < prune_probability
                if not need_prune:
                    survivors.append(current)
            logger.debug("Apply on block: %s, generate %d new states at step %d", block_name, len(new_states), step)
            layer = survivors + new_states
        logger.debug("Apply on block: %s, %d states in final layer", block_name, len(layer))
        return layer
