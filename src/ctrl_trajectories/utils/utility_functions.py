import os

import torch

from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)


def set_cores(num_cores=None):
    """Set the number of torch intra-op threads, clamped to the available cores."""
    max_cores = os.cpu_count() or 1

    if num_cores is None:
        num_cores = max(1, max_cores - 1)
    else:
        num_cores = min(max(int(num_cores), 1), max_cores)

    torch.set_num_threads(num_cores)

    logger.debug(
        f"Number of threads set to {num_cores} out of {max_cores} available cores."
    )
    return num_cores
