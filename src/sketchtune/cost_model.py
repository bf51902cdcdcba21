"""Cost model scoring scheduled programs.

``ExprCostModel`` predicts a relative cost for a program on a target. Until
it has been trained it falls back to an analytic estimate; ``train`` and
``update`` fit a least-squares model over program features so measured
costs can steer later predictions.

Example::

    model = ExprCostModel()
    cost = model.predict(state.ir_schedule.get_module(), target)
    model.update([program], [measured_cost], target)
"""

import logging
import math
from collections.abc import Sequence

import numpy as np

from sketchtune.ir import Block, Program
from sketchtune.task import Target

logger = logging.getLogger(__name__)

FEATURE_NAMES = ("log_iterations", "num_blocks", "tiled_fraction", "unrolled_fraction", "max_depth", "bias")

_TILE_DISCOUNT = 0.6
_UNROLL_DISCOUNT = 0.85


def _block_cost(block: Block, target: Target) -> float:
    """Analytic cost of one block, in statement-instance units."""
    cost = float(block.iterations)
    if block.loops and block.loops[-1].extent % target.vector_width == 0:
        cost /= target.vector_width
    if block.annotation("tile_size") is not None:
        cost *= _TILE_DISCOUNT
    step = block.annotation("auto_unroll_max_step")
    if step:
        cost *= _UNROLL_DISCOUNT if step <= target.max_unroll_step else 1.0
    parallel = 1
    for loop in block.loops:
        if loop.is_reduce:
            break
        parallel *= loop.extent
    return cost / min(parallel, target.num_cores)


def extract_features(program: Program, target: Target) -> np.ndarray:
    """Compute the feature vector described by ``FEATURE_NAMES``.

    Args:
        program: Program to featurize.
        target: Hardware target.

    Returns:
        1-D float array of features.
    """
    blocks = program.blocks
    num_blocks = len(blocks)
    iterations = sum(block.iterations for block in blocks)
    tiled = sum(1 for block in blocks if block.annotation("tile_size") is not None)
    unrolled = sum(1 for block in blocks if block.annotation("auto_unroll_max_step"))
    max_depth = max((len(block.loops) for block in blocks), default=0)
    return np.array(
        [
            math.log1p(iterations / target.num_cores),
            num_blocks,
            tiled / num_blocks if num_blocks else 0.0,
            unrolled / num_blocks if num_blocks else 0.0,
            max_depth,
            1.0,
        ],
        dtype=np.float64,
    )


class ExprCostModel:
    """Least-squares cost model with an analytic fallback.

    Attributes:
        weights: Fitted feature weights, or None before training.
    """

    def __init__(self) -> None:
        self.weights: np.ndarray | None = None
        self._features: list[np.ndarray] = []
        self._costs: list[float] = []

    def predict(self, program: Program, target: Target) -> float:
        """Predict the cost of running ``program`` on ``target``.

        Args:
            program: Program to score.
            target: Hardware target.

        Returns:
            Predicted cost; lower is better.
        """
        if self.weights is None:
            return sum(_block_cost(block, target) for block in program.blocks)
        return float(extract_features(program, target) @ self.weights)

    def train(self, programs: Sequence[Program], costs: Sequence[float], target: Target) -> None:
        """Fit the model from scratch on measured costs.

        Args:
            programs: Measured programs.
            costs: Measured cost of each program.
            target: Target the costs were measured on.

        Raises:
            ValueError: If the inputs are empty or of different lengths.
        """
        self._features = []
        self._costs = []
        self.update(programs, costs, target)

    def update(self, programs: Sequence[Program], costs: Sequence[float], target: Target) -> None:
        """Add measured costs to the training set and refit.

        Raises:
            ValueError: If the inputs are empty or of different lengths.
        """
        if len(programs) != len(costs):
            raise ValueError(f"Got {len(programs)} programs but {len(costs)} costs")
        if not programs and not self._features:
            raise ValueError("Cannot fit a cost model without samples")
        self._features.extend(extract_features(program, target) for program in programs)
        self._costs.extend(float(cost) for cost in costs)
        features = np.stack(self._features)
        self.weights, *_ = np.linalg.lstsq(features, np.asarray(self._costs), rcond=None)
        logger.debug("Cost model refit on %d samples", len(self._costs))
