"""Search space configuration."""

from dataclasses import dataclass


@dataclass
class SearchSpaceConfig:
    """Options controlling sketch generation and mutation.

    Attributes:
        use_cost_model: Predict the cost of every mutated state in ``get_schedule_mutate``.
        init_sketch_random_depth: Depth budget for random sketch generation.
        rand_seed: Root seed for all search randomness; ``-1`` draws one from host entropy.
        show_progress: Show a progress bar while generating unpruned random sketches.
        record_trace: Record parent/child provenance edges in a ``SearchTrace``.
    """

    use_cost_model: bool = True
    init_sketch_random_depth: int = 6
    rand_seed: int = -1
    show_progress: bool = False
    record_trace: bool = False

    def __post_init__(self) -> None:
        """Validate option values.

        Raises:
            ValueError: If the depth is negative or the seed is below ``-1``.
        """
        if self.init_sketch_random_depth < 0:
            raise ValueError(f"init_sketch_random_depth must be >= 0, got {self.init_sketch_random_depth}")
        if not isinstance(self.rand_seed, int) or self.rand_seed < -1:
            raise ValueError(f"rand_seed must be an int >= -1, got {self.rand_seed!r}")
