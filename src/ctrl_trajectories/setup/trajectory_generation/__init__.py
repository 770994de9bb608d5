from ctrl_trajectories.setup.trajectory_generation.trajectory import Trajectory
from ctrl_trajectories.setup.trajectory_generation.three_states import (
    normalize_weights,
    state_to_state_trajectory,
    target_basis,
    three_state_density_matrices,
    three_state_trajectories,
)

__all__ = [
    "Trajectory",
    "normalize_weights",
    "state_to_state_trajectory",
    "target_basis",
    "three_state_density_matrices",
    "three_state_trajectories",
]
