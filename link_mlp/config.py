"""Default settings shared by the network, the parallel loop and the scripts."""

import os

# Range the initial link weights are drawn from
DEFAULT_WEIGHT_RANGE = (-5.0, 5.0)

DEFAULT_ACTIVATION = 'sigmoid'

# Layers narrower than this run sequentially even when parallel execution is requested
PARALLEL_MIN_WIDTH = 64

DEFAULT_MAX_WORKERS = min(8, os.cpu_count() or 1)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
