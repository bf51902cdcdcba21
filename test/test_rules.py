"""Unit tests for sketchtune.rules.

Run with: pytest test/test_rules.py -v
"""

import pytest
from conftest import ScriptedRule

from sketchtune.ir import Program, ScheduleIR
from sketchtune.rules import AutoInline, AutoUnroll, MultiLevelTiling, RuleApplyType, SkipRule, default_rules
from sketchtune.state import SearchState
from sketchtune.task import Target, TuneTask


class TestAutoGenRuleProtocol:
    """Tests for the init/apply contract shared by all rules."""

    def test_apply_before_init(self, target: Target) -> None:
        """apply() on an unbound rule is a contract violation."""
        with pytest.raises(RuntimeError, match="before init"):
            MultiLevelTiling(target).apply(0)

    def test_apply_out_of_range(self, matmul_relu: Program, target: Target) -> None:
        """apply() rejects indices outside [0, number_applicable())."""
        rule = MultiLevelTiling(target)
        rule.init(ScheduleIR(matmul_relu))
        with pytest.raises(IndexError):
            rule.apply(rule.number_applicable())

    def test_rule_name(self, target: Target) -> None:
        """get_rule_name() returns the class-level name."""
        assert AutoUnroll(target).get_rule_name() == "AutoUnroll"

    def test_default_registry_order(self, matmul_relu_task: TuneTask) -> None:
        """The default registry ends with the veto rule."""
        names = [rule.get_rule_name() for rule in default_rules(matmul_relu_task)]
        assert names == ["AutoInline", "MultiLevelTiling", "AutoUnroll", "SkipRule"]


class TestMultiLevelTiling:
    """Tests for MultiLevelTiling."""

    def test_init_counts_sizes_per_block(self, matmul_relu: Program, target: Target) -> None:
        """Each block offers every tile size that splits one of its loops."""
        rule = MultiLevelTiling(target)
        assert rule.init(ScheduleIR(matmul_relu)) == RuleApplyType.APPLY
        assert rule.number_applicable() == 6

    def test_apply_selects_block_and_size(self, matmul_relu: Program, target: Target) -> None:
        """Positions enumerate blocks in order, then tile sizes."""
        schedule = ScheduleIR(matmul_relu)
        rule = MultiLevelTiling(target)
        rule.init(schedule)
        rule.apply(4)
        assert schedule.get_block("relu").annotation("tile_size") == 16
        assert schedule.get_block("matmul").annotation("tile_size") is None

    def test_tiled_block_not_retiled(self, matmul_relu: Program, target: Target) -> None:
        """A tiled block offers no further tiling."""
        state = SearchState(ScheduleIR(matmul_relu))
        state.ir_schedule.split_all("relu", 8)
        assert MultiLevelTiling(target).analyse_apply_type(state, "relu") == RuleApplyType.CANNOT_APPLY

    def test_apply_on_block_fans_out(self, matmul_relu: Program, target: Target) -> None:
        """One successor per tile size; the parent is untouched."""
        state = SearchState(ScheduleIR(matmul_relu))
        children = MultiLevelTiling(target).apply_on_block(state, "matmul")
        sizes = [child.ir_schedule.get_block("matmul").annotation("tile_size") for child in children]
        assert sizes == [8, 16, 32]
        assert state.ir_schedule.get_module() == matmul_relu


class TestAutoInline:
    """Tests for AutoInline."""

    def test_cannot_inline_reduction_or_output(self, matmul_relu_task: TuneTask) -> None:
        """Reductions and output producers stay materialized."""
        rule = AutoInline(matmul_relu_task.target, matmul_relu_task.output_names)
        assert rule.init(ScheduleIR(matmul_relu_task.program)) == RuleApplyType.CANNOT_APPLY
        assert rule.number_applicable() == 0

    def test_inline_chain(self, chain_task: TuneTask) -> None:
        """Every non-output elementwise block is an inline position."""
        rule = AutoInline(chain_task.target, chain_task.output_names)
        schedule = ScheduleIR(chain_task.program)
        assert rule.init(schedule) == RuleApplyType.APPLY
        assert rule.number_applicable() == 2
        rule.apply(0)
        assert schedule.get_all_blocks() == ["ew1", "ew2"]

    def test_block_signal_skips_all(self, chain_task: TuneTask) -> None:
        """On the block path an inlinable block signals skip-all; a missing block cannot apply."""
        rule = AutoInline(chain_task.target, chain_task.output_names)
        state = SearchState(ScheduleIR(chain_task.program))
        assert rule.analyse_apply_type(state, "ew0") == RuleApplyType.APPLY_AND_SKIP_ALL_RULES
        assert rule.analyse_apply_type(state, "ew2") == RuleApplyType.CANNOT_APPLY
        assert rule.analyse_apply_type(state, "gone") == RuleApplyType.CANNOT_APPLY


class TestAutoUnroll:
    """Tests for AutoUnroll."""

    def test_steps_capped_by_target(self) -> None:
        """Steps above the target's max_unroll_step are dropped."""
        assert AutoUnroll(Target(max_unroll_step=128)).max_steps == (16, 64)
        assert AutoUnroll(Target(max_unroll_step=512)).max_steps == (16, 64, 512)

    def test_init_skips_itself(self, matmul_relu: Program, target: Target) -> None:
        """Random mutation unrolls once: init reports skip-this-rule."""
        rule = AutoUnroll(target)
        assert rule.init(ScheduleIR(matmul_relu)) == RuleApplyType.APPLY_AND_SKIP_THIS_RULE
        assert rule.number_applicable() == 4

    def test_annotated_block_not_unrolled_again(self, matmul_relu: Program, target: Target) -> None:
        """A block with an unroll step offers no further positions."""
        state = SearchState(ScheduleIR(matmul_relu))
        child = AutoUnroll(target).apply_on_block(state, "relu")[1]
        assert child.ir_schedule.get_block("relu").annotation("auto_unroll_max_step") == 64
        assert AutoUnroll(target).analyse_apply_type(child, "relu") == RuleApplyType.CANNOT_APPLY


class TestSkipRule:
    """Tests for the veto rule."""

    def test_single_no_op_position(self, matmul_relu: Program, target: Target) -> None:
        """SkipRule offers one no-op position and stays applicable during mutation."""
        rule = SkipRule(target)
        schedule = ScheduleIR(matmul_relu)
        assert rule.init(schedule) == RuleApplyType.APPLY
        assert rule.number_applicable() == 1
        rule.apply(0)
        assert schedule.get_module() == matmul_relu

    def test_apply_on_block_copies(self, matmul_relu: Program, target: Target) -> None:
        """apply_on_block yields a single unchanged copy."""
        state = SearchState(ScheduleIR(matmul_relu))
        (child,) = SkipRule(target).apply_on_block(state, "relu")
        assert child is not state
        assert child.ir_schedule.get_module() == matmul_relu

    def test_vetoes_block_expansion(self, matmul_relu: Program, target: Target) -> None:
        """On a block the rule signals that no further rule applies."""
        state = SearchState(ScheduleIR(matmul_relu))
        assert SkipRule(target).analyse_apply_type(state, "relu") == RuleApplyType.APPLY_AND_SKIP_ALL_RULES


class TestScriptedRule:
    """Sanity checks for the scripted test rule used across the suite."""

    def test_positions_and_fan_out(self, matmul_relu: Program) -> None:
        """init offers num_positions; apply_on_block branches fan_out times."""
        rule = ScriptedRule("grow", num_positions=3, fan_out=2)
        assert rule.init(ScheduleIR(matmul_relu)) == RuleApplyType.APPLY
        assert rule.number_applicable() == 3
        children = rule.apply_on_block(SearchState(ScheduleIR(matmul_relu)), "relu")
        assert [child.ir_schedule.get_block("relu").annotation("grow") for child in children] == [1, 2]
