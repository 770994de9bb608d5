from __future__ import annotations

import numpy as np

from ctrl_trajectories.setup.hamiltonian_generation.base import (
    GeneratorModel,
    register_model,
)
from ctrl_trajectories.setup.operator_generation.generate_operators import (
    sigma_operators,
)


@register_model("two_level")
class TwoLevelModel(GeneratorModel):
    r"""Driven two-level system in the basis :math:`\{|0\rangle, |1\rangle\}`.

    .. math::

        H(t) = -\frac{\omega}{2}\,\sigma_z + \epsilon(t)\,\sigma_x

    An optional decay rate :math:`\gamma` adds the collapse operator
    :math:`\sqrt{\gamma}\,\sigma_-`.
    """

    def __init__(self, omega: float = 1.0, decay_rate: float = 0.0):
        if decay_rate < 0:
            raise ValueError("Decay rate must be non-negative")
        self.omega = float(omega)
        self.decay_rate = float(decay_rate)
        self._sx, _, self._sz, self._sm = sigma_operators()

    @property
    def dims(self) -> tuple[int, ...]:
        return (2,)

    def build_drift(self):
        return (-0.5 * self.omega * self._sz).tocsr()

    def build_control_ops(self) -> list:
        return [self._sx]

    def collapse_operators(self) -> list:
        if self.decay_rate > 0:
            return [np.sqrt(self.decay_rate) * self._sm]
        return []

    @classmethod
    def from_config(cls, params: dict) -> TwoLevelModel:
        return cls(
            omega=params.get("omega", 1.0), decay_rate=params.get("decay_rate", 0.0)
        )

    @classmethod
    def default_config(cls) -> dict:
        """Population transfer |0> -> |1> with a Blackman flattop guess pulse."""
        return {
            "model": "two_level",
            "parameters": {"omega": 1.0, "decay_rate": 0.0},
            "controls": [
                {"type": "flattop", "amplitude": 0.2, "rise_time": 0.3, "shape": "blackman"}
            ],
            "time_grid": {"T": 5.0, "nt": 500},
            "target": {"initial": [0], "final": [1]},
            "optimization": {
                "open_system": False,
                "J_T": "J_T_sm",
                "iter_stop": 500,
                "J_T_threshold": 1e-3,
                "prop_method": "expm_multiply",
            },
        }


def tls_hamiltonian(control, omega: float = 1.0):
    """Two-level-system Hamiltonian with a single control on sigma_x."""
    return TwoLevelModel(omega=omega).hamiltonian([control])
