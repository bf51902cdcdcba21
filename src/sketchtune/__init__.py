"""sketchtune - sketch generation and schedule mutation for tensor program auto-tuning.

Pipeline: tuning task -> rule registry -> sketches -> cost model

Subpackages:
    ir: Immutable loop-nest programs and the ScheduleIR rewrite handle
    rules: Schedule rewriting rules (AutoInline, MultiLevelTiling, ...)
    search: SearchSpace, block/rule samplers, provenance trace, reports
    utils: Logging and the deterministic random engine
"""

from sketchtune.config import SearchSpaceConfig
from sketchtune.cost_model import ExprCostModel
from sketchtune.search import SearchSpace
from sketchtune.state import NOT_INIT_COST, SearchState
from sketchtune.task import Target, TuneTask

__all__ = ["SearchSpace", "SearchSpaceConfig", "SearchState", "NOT_INIT_COST", "ExprCostModel", "Target", "TuneTask"]
