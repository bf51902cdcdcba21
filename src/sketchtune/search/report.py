"""Tabular sketch summaries."""

from collections.abc import Sequence

import tabulate

from sketchtune.state import NOT_INIT_COST, SearchState


def summarize_states(states: Sequence[SearchState]) -> str:
    """Render one row per state: program hash, block count, cost and remaining rules.

    Args:
        states: States to summarize.

    Returns:
        The rendered table.
    """
    rows = []
    for index, state in enumerate(states):
        cost = "-" if state.predicted_cost == NOT_INIT_COST else f"{state.predicted_cost:.4g}"
        rules = ", ".join(rule.get_rule_name() for rule in state.applicable_rules) or "-"
        rows.append([index, f"{state.program_hash():08x}", len(state.ir_schedule.get_all_blocks()), cost, rules])
    return tabulate.tabulate(
        rows,
        headers=["Sketch", "Hash", "Blocks", "Predicted cost", "Applicable rules"],
        tablefmt="simple_outline",
        disable_numparse=True,
    )
