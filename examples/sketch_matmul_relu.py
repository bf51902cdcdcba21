"""Generate and mutate sketches for ``relu(A @ B)``.

Runs the three sketch generation strategies on a 256x256x128 matmul
followed by relu, scores the sketches with the analytic cost model, and
writes the search trace to ``sketch_matmul_relu.log``.
"""

import logging

from sketchtune import ExprCostModel, SearchSpace, SearchSpaceConfig, Target, TuneTask
from sketchtune.ir import matmul_relu_program
from sketchtune.search import summarize_states
from sketchtune.utils import setup_logging

setup_logging("sketch_matmul_relu.log", logging.DEBUG, msg_width=120, show_metadata=True)
logger = logging.getLogger(__name__)

M, N, K = 256, 256, 128


if __name__ == "__main__":
    task = TuneTask(
        name="matmul_relu", program=matmul_relu_program(M, N, K), target=Target(num_cores=16), output_names=("D",)
    )
    space = SearchSpace(task, SearchSpaceConfig(rand_seed=42, show_progress=True))
    model = ExprCostModel()

    random_sketches = space.get_random_initial_sketch(8)
    rule_sketches = space.get_initial_sketch(8, "rule_prune")
    pruned_sketches = space.get_initial_sketch(8, "random_prune")

    sketches = random_sketches + rule_sketches + pruned_sketches
    candidates = [space.get_schedule_mutate(state, model) for state in sketches]
    candidates.sort(key=lambda state: state.predicted_cost)
    logger.info("Scored %d candidates\n%s", len(candidates), summarize_states(candidates))
    logger.info("Best candidate:\n%s", candidates[0].debug_string())
