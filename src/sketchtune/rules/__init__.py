"""Sketch generation rules.

Rules are atomic schedule rewrites sharing the protocol defined by
``AutoGenRule``. The default registry, in order:

- ``AutoInline``: inlines elementwise producers into their consumers.
- ``MultiLevelTiling``: splits loops into outer and inner tiles.
- ``AutoUnroll``: annotates a block with an unroll step.
- ``SkipRule``: a no-op choice that vetoes block expansion; always last.
"""

from sketchtune.rules.auto_inline import AutoInline
from sketchtune.rules.auto_unroll import AutoUnroll
from sketchtune.rules.base import AutoGenRule, RuleApplyType
from sketchtune.rules.multi_level_tiling import MultiLevelTiling
from sketchtune.rules.skip_rule import SkipRule
from sketchtune.task import TuneTask


def default_rules(tune_task: TuneTask) -> list[AutoGenRule]:
    """Build the default rule registry for a task, veto rule last."""
    target = tune_task.target
    return [AutoInline(target, tune_task.output_names), MultiLevelTiling(target), AutoUnroll(target), SkipRule(target)]


__all__ = [
    "AutoGenRule",
    "RuleApplyType",
    "AutoInline",
    "MultiLevelTiling",
    "AutoUnroll",
    "SkipRule",
    "default_rules",
]
