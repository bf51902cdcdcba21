"""Block and rule samplers.

A sampler hands out candidates one at a time until exhausted:

- ``traversal``: every candidate once, in input order.
- ``probabilistic``: candidates drawn with probability proportional to
  their weights from a private seed cell forked from the caller's, with
  (``remove=False``) or without (``remove=True``) replacement.

Example::

    sampler = BlockSampler.make(["matmul", "relu"], "probabilistic", rand_seed)
    while (block_name := sampler.next_block()) is not None:
        ...
"""

import logging
from collections.abc import Sequence
from typing import Generic, TypeVar

import numpy as np

from sketchtune.rules.base import AutoGenRule
from sketchtune.utils.random_engine import RandomState, fork_random_state, sample_uniform_double

logger = logging.getLogger(__name__)

T = TypeVar("T")

STRATEGIES = ("traversal", "probabilistic")


class Sampler(Generic[T]):
    """Hands out candidates one at a time under a sampling strategy.

    Attributes:
        candidates: Candidates in input order.
        strategy: ``"traversal"`` or ``"probabilistic"``.
        remove: Whether a sampled candidate leaves the pool.
    """

    def __init__(
        self,
        candidates: Sequence[T],
        strategy: str,
        rand_seed: RandomState,
        weights: Sequence[float] | None = None,
        remove: bool = True,
    ) -> None:
        """Initialize a sampler.

        Args:
            candidates: Candidates to hand out.
            strategy: ``"traversal"`` or ``"probabilistic"``.
            rand_seed: Parent seed cell; probabilistic samplers fork a private cell from it.
            weights: Per-candidate sampling weights; uniform when omitted.
            remove: Whether sampled candidates leave the pool.

        Raises:
            ValueError: If the strategy is unknown or the weights do not match the candidates.
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown sampling strategy {strategy!r}, expected one of {STRATEGIES}")
        if weights is not None and len(weights) != len(candidates):
            raise ValueError(f"Got {len(weights)} weights for {len(candidates)} candidates")
        self.candidates = list(candidates)
        self.strategy = strategy
        self.remove = remove
        self._cursor = 0
        self._weights = np.ones(len(self.candidates)) if weights is None else np.asarray(weights, dtype=np.float64)
        self._seed = RandomState(fork_random_state(rand_seed)) if strategy == "probabilistic" else None

    def next(self) -> T | None:
        """Return the next candidate, or None once the sampler is exhausted."""
        if self.strategy == "traversal":
            return self._next_traversal()
        return self._next_probabilistic()

    def _next_traversal(self) -> T | None:
        if self._cursor >= len(self.candidates):
            return None
        candidate = self.candidates[self._cursor]
        self._cursor += 1
        return candidate

    def _next_probabilistic(self) -> T | None:
        if self._seed is None:
            raise RuntimeError(f"Sampler built with strategy {self.strategy!r} has no random state")
        total = float(self._weights.sum())
        if total <= 0.0:
            return None
        offsets = np.cumsum(self._weights)
        point = sample_uniform_double(0.0, total, self._seed)
        index = min(int(np.searchsorted(offsets, point, side="right")), len(offsets) - 1)
        if self.remove:
            self._weights[index] = 0.0
        return self.candidates[index]


class BlockSampler(Sampler[str]):
    """Sampler over block names."""

    @classmethod
    def make(
        cls,
        blocks: Sequence[str],
        strategy: str,
        rand_seed: RandomState,
        weights: Sequence[float] | None = None,
        remove: bool = True,
    ) -> "BlockSampler":
        """Create a block sampler; see ``Sampler.__init__``."""
        logger.debug("BlockSampler(%s) over %d blocks", strategy, len(blocks))
        return cls(blocks, strategy, rand_seed, weights, remove)

    def next_block(self) -> str | None:
        """Return the next block name, or None once exhausted."""
        return self.next()


class RuleSampler(Sampler[AutoGenRule]):
    """Sampler over rules."""

    @classmethod
    def make(
        cls,
        rules: Sequence[AutoGenRule],
        strategy: str,
        rand_seed: RandomState,
        weights: Sequence[float] | None = None,
        remove: bool = True,
    ) -> "RuleSampler":
        """Create a rule sampler; see ``Sampler.__init__``."""
        return cls(rules, strategy, rand_seed, weights, remove)

    def next_rule(self) -> AutoGenRule | None:
        """Return the next rule, or None once exhausted."""
        return self.next()
