"""Multi-level tiling of block loop nests."""

from typing import Any

from sketchtune.ir import ScheduleIR
from sketchtune.rules.base import AutoGenRule
from sketchtune.task import Target

DEFAULT_TILE_SIZES = (8, 16, 32)


class MultiLevelTiling(AutoGenRule):
    """Split every divisible loop of a block into outer and inner tiles.

    Each tile size that splits at least one loop is a separate option, so a
    block with more usable tile sizes weighs more in random mutation. A
    block is tiled at most once.

    Attributes:
        tile_sizes: Candidate inner tile extents.
    """

    name = "MultiLevelTiling"

    def __init__(self, target: Target, tile_sizes: tuple[int, ...] = DEFAULT_TILE_SIZES) -> None:
        super().__init__(target)
        self.tile_sizes = tuple(tile_sizes)

    def candidates(self, ir_schedule: ScheduleIR, block_name: str) -> list[Any]:
        """Return the tile sizes that split at least one loop of an untiled block."""
        if not ir_schedule.has_block(block_name):
            return []
        block = ir_schedule.get_block(block_name)
        if block.annotation("tile_size") is not None:
            return []
        return [
            size
            for size in self.tile_sizes
            if any(loop.extent > size and loop.extent % size == 0 for loop in block.loops)
        ]

    def apply_candidate(self, ir_schedule: ScheduleIR, block_name: str, candidate: Any) -> None:
        ir_schedule.split_all(block_name, candidate)
