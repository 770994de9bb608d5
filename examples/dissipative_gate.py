"""
√iSWAP on two dissipative transmons: build the three-trajectory ensemble and
evaluate the guess pulse.

The full configuration (5 levels per transmon, 2000 time steps) takes a few
minutes on a laptop; pass ``--quick`` for a truncated run.
"""

import sys
import time

import numpy as np

from ctrl_trajectories.api import TrajectoryAPI, load_dissipative_gate_config
from ctrl_trajectories.evolution.time_evolution import propagate_trajectory
from ctrl_trajectories.setup.basis_generation.basis_states import (
    computational_labels,
    ket,
    ketbra,
    logical_basis,
    population_observables,
    vectorize,
)
from ctrl_trajectories.setup.hamiltonian_generation import TransmonModel
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger("examples.dissipative_gate")


def main(quick=False):
    if quick:
        config = TransmonModel.default_config()
        config["parameters"]["n_levels"] = 3
        config["time_grid"]["nt"] = 401
        api = TrajectoryAPI(config)
    else:
        api = load_dissipative_gate_config()

    logger.info(api.get_config_summary())

    # Populations of the logical states when starting in |00>
    dims = api.model.dims
    basis = logical_basis(computational_labels(2), dims)
    rho_00 = vectorize(ketbra(ket((0, 0), dims), ket((0, 0), dims)))
    pops = propagate_trajectory(
        api.trajectories[0],
        api.tlist,
        initial_state=rho_00,
        observables=population_observables(basis),
    )
    for label, p in zip(computational_labels(2), pops[-1]):
        logger.info(f"Final population of {label}: {p:.4f}")

    start = time.time()
    result = api.propagate_guess()
    logger.info(f"Guess propagation took {time.time() - start:.1f} s")
    logger.info(f"Leakage out of the logical subspace: {1 - np.sum(pops[-1]):.2e}")
    return result


if __name__ == "__main__":
    main(quick="--quick" in sys.argv)
