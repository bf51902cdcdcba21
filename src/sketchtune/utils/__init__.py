"""Utility modules for sketchtune.

Provides logging configuration and the deterministic random engine.
"""

from sketchtune.utils.logging import MultilineFormatter, setup_logging
from sketchtune.utils.random_engine import (
    LinearRandomEngine,
    RandomState,
    fork_random_state,
    sample_uniform_double,
    sample_uniform_int,
)

__all__ = [
    "setup_logging",
    "MultilineFormatter",
    "LinearRandomEngine",
    "RandomState",
    "fork_random_state",
    "sample_uniform_double",
    "sample_uniform_int",
]
