"""Sketch search for sketchtune.

Generates candidate schedules ("sketches") for a tuning task and mutates
existing ones. ``SearchSpace`` drives block and rule samplers over a shared
deterministic random state; ``SearchTrace`` optionally records where each
state came from.
"""

from sketchtune.search.report import summarize_states
from sketchtune.search.sampler import BlockSampler, RuleSampler
from sketchtune.search.search_space import SKETCH_STRATEGIES, SearchSpace
from sketchtune.search.trace import SearchTrace

__all__ = ["SearchSpace", "BlockSampler", "RuleSampler", "SearchTrace", "summarize_states", "SKETCH_STRATEGIES"]
