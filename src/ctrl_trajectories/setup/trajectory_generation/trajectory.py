from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.setup.hamiltonian_generation.generator import Generator


def _frozen_state(state, dim, name):
    state = np.array(state, dtype=complex).reshape(-1)
    if state.size != dim:
        raise DimensionError(
            f"{name} has length {state.size}, but the generator has dimension {dim}"
        )
    state.setflags(write=False)
    return state


@dataclass(frozen=True, eq=False)
class Trajectory:
    """One initial state, the generator that evolves it, a target and a weight.

    States are either pure state vectors or vectorized density matrices; their
    length must equal the generator dimension. States are stored as read-only
    copies, so trajectories in an ensemble share no mutable data.
    """

    initial_state: Any
    generator: Generator
    target_state: Any = None
    weight: float = 1.0

    def __post_init__(self):
        dim = self.generator.dim
        object.__setattr__(
            self, "initial_state", _frozen_state(self.initial_state, dim, "initial_state")
        )
        if self.target_state is not None:
            object.__setattr__(
                self, "target_state", _frozen_state(self.target_state, dim, "target_state")
            )
        object.__setattr__(self, "weight", float(self.weight))

    def substitute(self, mapping) -> Trajectory:
        """Copy of the trajectory with controls of the generator replaced."""
        return Trajectory(
            initial_state=self.initial_state,
            generator=self.generator.substitute(mapping),
            target_state=self.target_state,
            weight=self.weight,
        )
