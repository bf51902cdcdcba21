"""Deterministic, forkable pseudo-random number generation.

All randomness in the search goes through ``LinearRandomEngine``, a
Park-Miller linear congruential generator that advances an externally owned
``RandomState`` cell. Forking derives an independent child seed from the
parent's sequence, so parallel workers seeded from one root stay
reproducible without drawing extra entropy from the host.

Example::

    seed = RandomState(42)
    LinearRandomEngine(seed).init_state(seed.value)
    child = RandomState(fork_random_state(seed))
    index = sample_uniform_int(0, 10, child)
"""

import secrets
from dataclasses import dataclass

__all__ = [
    "RandomState",
    "LinearRandomEngine",
    "fork_random_state",
    "sample_uniform_int",
    "sample_uniform_double",
]


UNSET_SEED = -1
_FORK_MULTIPLIER = 32767
_FORK_MODULUS = 1999999973


@dataclass
class RandomState:
    """Mutable seed cell read and advanced by ``LinearRandomEngine``.

    Attributes:
        value: Current generator state.
    """

    value: int


def _c_mod(value: int, modulus: int) -> int:
    """Remainder with the sign of the dividend, as in C integer arithmetic."""
    remainder = abs(value) % modulus
    return -remainder if value < 0 else remainder


class LinearRandomEngine:
    """Linear congruential generator bound to a ``RandomState`` cell.

    The engine does not own its seed: it reads and advances ``state.value``
    so that every component sharing the cell draws from one sequence.

    Attributes:
        state: The bound seed cell.
    """

    MULTIPLIER = 48271
    INCREMENT = 0
    MODULUS = 2147483647

    def __init__(self, state: RandomState) -> None:
        """Bind the engine to a seed cell.

        Args:
            state: Seed cell to read and advance.
        """
        self.state = state

    @staticmethod
    def min() -> int:
        """Smallest value the engine can produce."""
        return 0

    @classmethod
    def max(cls) -> int:
        """Largest value the engine can produce."""
        return cls.MODULUS - 1

    @classmethod
    def get_device_random_value(cls) -> int:
        """Draw a seed from host entropy, reduced modulo the modulus."""
        return secrets.randbits(63) % cls.MODULUS

    @classmethod
    def normalize_state(cls, state: int) -> int:
        """Normalize a seed into ``[1, MODULUS - 1]``.

        Args:
            state: Raw seed. ``-1`` requests a seed drawn from host entropy.

        Returns:
            The normalized seed.

        Raises:
            RuntimeError: If the normalized seed is negative.
        """
        if state == UNSET_SEED:
            state = cls.get_device_random_value()
        else:
            state = _c_mod(state, cls.MODULUS)
        if state == 0:
            state = 1
        if state < 0:
            raise RuntimeError(f"Random seed must be greater than 0, got {state}")
        return state

    def init_state(self, state: int) -> None:
        """Write the normalized form of ``state`` into the bound cell."""
        self.state.value = self.normalize_state(state)

    def next(self) -> int:
        """Advance the bound cell and return the new state."""
        self.state.value = (self.INCREMENT + self.state.value * self.MULTIPLIER) % self.MODULUS
        return self.state.value

    def __call__(self) -> int:
        return self.next()

    def fork_state(self) -> int:
        """Derive a child seed for another generator from the current state."""
        return (self.next() * _FORK_MULTIPLIER) % _FORK_MODULUS


def fork_random_state(state: RandomState) -> int:
    """Fork a child seed from ``state``, advancing ``state`` by one step.

    Args:
        state: Parent seed cell.

    Returns:
        The child seed.
    """
    return LinearRandomEngine(state).fork_state()


def sample_uniform_double(low: float, high: float, state: RandomState) -> float:
    """Sample a real number uniformly from ``[low, high)``.

    Args:
        low: Inclusive lower bound.
        high: Exclusive upper bound.
        state: Seed cell driving the draw.

    Returns:
        The sampled value.

    Raises:
        ValueError: If ``high <= low``.
    """
    if high <= low:
        raise ValueError(f"Empty sampling range [{low}, {high})")
    engine = LinearRandomEngine(state)
    unit = (engine.next() - engine.min()) / (engine.max() - engine.min() + 1)
    return low + (high - low) * unit


def sample_uniform_int(low: int, high: int, state: RandomState) -> int:
    """Sample an integer uniformly from ``[low, high)``.

    Args:
        low: Inclusive lower bound.
        high: Exclusive upper bound.
        state: Seed cell driving the draw.

    Returns:
        The sampled integer.

    Raises:
        ValueError: If ``high <= low``.
    """
    if high <= low:
        raise ValueError(f"Empty sampling range [{low}, {high})")
    return low + int(sample_uniform_double(0.0, float(high - low), state))
