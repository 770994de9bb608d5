r"""Coupled multi-level transmons with decay and dephasing.

Each transmon is truncated to ``n_levels`` states :math:`|0\rangle, \dots,
|N-1\rangle`; the Hilbert space dimension is ``n_levels ** n_transmons``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ctrl_trajectories import units
from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.setup.hamiltonian_generation.base import (
    GeneratorModel,
    register_model,
)
from ctrl_trajectories.setup.operator_generation.generate_operators import (
    ladder_operators,
)
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)

GHz, MHz, us = units.GHz, units.MHz, units.us


@dataclass(frozen=True)
class TransmonParameters:
    """Physical parameters in internal units (GHz with factor 2π, ns).

    The defaults describe two fixed-frequency transmons driven at a common
    frequency between their two transition frequencies.
    """

    n_levels: int = 5
    qubit_frequencies: tuple = (4.3796 * GHz, 4.6137 * GHz)
    drive_frequency: float = 4.4985 * GHz
    anharmonicities: tuple = (-239.3 * MHz, -242.8 * MHz)
    coupling: float = -2.3 * MHz
    decay_rates: tuple = (1 / (38.0 * us), 1 / (32.0 * us))
    dephasing_rates: tuple = (1 / (29.5 * us), 1 / (16.0 * us))

    def __post_init__(self):
        n = len(self.qubit_frequencies)
        for name in ("anharmonicities", "decay_rates", "dephasing_rates"):
            values = tuple(float(v) for v in getattr(self, name))
            if len(values) != n:
                raise DimensionError(
                    f"{name} has {len(values)} entries for {n} transmon(s)"
                )
            object.__setattr__(self, name, values)
        object.__setattr__(
            self, "qubit_frequencies", tuple(float(v) for v in self.qubit_frequencies)
        )
        if any(r < 0 for r in self.decay_rates + self.dephasing_rates):
            raise ValueError("Decay and dephasing rates must be non-negative")

    @property
    def n_transmons(self) -> int:
        return len(self.qubit_frequencies)


@register_model("transmon")
class TransmonModel(GeneratorModel):
    r"""Chain of anharmonic transmons in the frame rotating at the drive frequency.

    Drift Hamiltonian
    -----------------
    .. math::

        H_0 = \sum_i \Bigl[(\omega_i - \omega_d - \tfrac{\delta_i}{2})\,\hat{n}_i
            + \tfrac{\delta_i}{2}\,\hat{n}_i^2\Bigr]
            + J \sum_i \bigl(b_i^\dagger b_{i+1} + b_i b_{i+1}^\dagger\bigr)

    Control Hamiltonian
    -------------------
    .. math::

        H_1(t) = \Omega_{\mathrm{re}}(t)\,\tfrac{1}{2}\sum_i (b_i + b_i^\dagger)
            + \Omega_{\mathrm{im}}(t)\,\tfrac{\mathrm{i}}{2}\sum_i (b_i^\dagger - b_i)

    Dissipation
    -----------
    Collapse operators :math:`\sqrt{\gamma_{1,i}}\, b_i` (decay) and
    :math:`\sqrt{\gamma_{2,i}}\, \hat{n}_i` (dephasing). Channels with a zero
    rate are left out, so the corresponding dynamics is unitary.
    """

    def __init__(self, params: TransmonParameters | None = None):
        self.params = params if params is not None else TransmonParameters()
        self._build_operators()

    def _build_operators(self):
        self._b = ladder_operators(self.dims)
        self._bdag = [b.conj().T.tocsr() for b in self._b]
        self._n_op = [(bd @ b).tocsr() for b, bd in zip(self._b, self._bdag)]

    @property
    def dims(self) -> tuple[int, ...]:
        return (self.params.n_levels,) * self.params.n_transmons

    def build_drift(self):
        p = self.params
        H = 0 * self._n_op[0]
        for i in range(p.n_transmons):
            n = self._n_op[i]
            H = H + (p.qubit_frequencies[i] - p.drive_frequency - p.anharmonicities[i] / 2) * n
            H = H + (p.anharmonicities[i] / 2) * (n @ n)
        for i in range(p.n_transmons - 1):
            H = H + p.coupling * (
                self._bdag[i] @ self._b[i + 1] + self._b[i] @ self._bdag[i + 1]
            )
        return H.tocsr()

    def build_control_ops(self) -> list:
        H_re = 0 * self._b[0]
        H_im = 0 * self._b[0]
        for b, bd in zip(self._b, self._bdag):
            H_re = H_re + 0.5 * (b + bd)
            H_im = H_im + 0.5j * (bd - b)
        return [H_re.tocsr(), H_im.tocsr()]

    def collapse_operators(self) -> list:
        p = self.params
        c_ops = []
        for i in range(p.n_transmons):
            if p.decay_rates[i] > 0:
                c_ops.append(np.sqrt(p.decay_rates[i]) * self._b[i])
        for i in range(p.n_transmons):
            if p.dephasing_rates[i] > 0:
                c_ops.append(np.sqrt(p.dephasing_rates[i]) * self._n_op[i])
        return c_ops

    # ------------------------------------------------------------------
    # Configuration helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, params: dict) -> TransmonModel:
        """Construct from config dict.

        Frequencies are given in GHz, anharmonicities and coupling in MHz,
        ``T1`` (decay) and ``T2`` (dephasing) times in μs. A ``null`` time
        switches the channel off.
        """
        defaults = TransmonParameters()
        freqs = params.get("qubit_frequencies")
        n = len(freqs) if freqs is not None else defaults.n_transmons

        def times_to_rates(key, fallback):
            times = params.get(key)
            if times is None:
                return fallback
            return tuple(units.rate_from_time(None if t is None else t * us) for t in times)

        return cls(
            TransmonParameters(
                n_levels=int(params.get("n_levels", defaults.n_levels)),
                qubit_frequencies=(
                    tuple(f * GHz for f in freqs)
                    if freqs is not None
                    else defaults.qubit_frequencies
                ),
                drive_frequency=(
                    params["drive_frequency"] * GHz
                    if "drive_frequency" in params
                    else defaults.drive_frequency
                ),
                anharmonicities=(
                    tuple(a * MHz for a in params["anharmonicities"])
                    if "anharmonicities" in params
                    else defaults.anharmonicities[:n]
                ),
                coupling=(
                    params["coupling"] * MHz
                    if "coupling" in params
                    else defaults.coupling
                ),
                decay_rates=times_to_rates("T1", defaults.decay_rates[:n]),
                dephasing_rates=times_to_rates("T2", defaults.dephasing_rates[:n]),
            )
        )

    @classmethod
    def default_config(cls) -> dict:
        """Return the dissipative √iSWAP configuration for two transmons."""
        return {
            "model": "transmon",
            "parameters": {
                "n_levels": 5,
                "qubit_frequencies": [4.3796, 4.6137],
                "drive_frequency": 4.4985,
                "anharmonicities": [-239.3, -242.8],
                "coupling": -2.3,
                "T1": [38.0, 32.0],
                "T2": [29.5, 16.0],
            },
            "controls": [
                {
                    "type": "flattop",
                    "amplitude": 35.0,
                    "unit": "MHz",
                    "rise_time": 20.0,
                    "shape": "sinsq",
                },
                {"type": "constant", "value": 0.0},
            ],
            "time_grid": {"T": 400.0, "nt": 2000},
            "target": {
                "gate": "sqrtISWAP",
                "basis": [[0, 0], [0, 1], [1, 0], [1, 1]],
                "weights": [20, 1, 1],
                "purities": [0.3, 1.0, 0.25],
            },
            "optimization": {
                "open_system": True,
                "J_T": "J_T_re",
                "iter_stop": 3000,
                "J_T_threshold": 1e-3,
                "prop_method": "expm_multiply",
                "use_threads": True,
                "lambda_a": 1.0,
                "update_shape": {"rise_time": 20.0, "shape": "blackman"},
            },
        }


def transmon_hamiltonian(omega_re, omega_im, params: TransmonParameters | None = None):
    """Closed-system generator for the transmon chain with drive quadratures."""
    return TransmonModel(params).hamiltonian([omega_re, omega_im])


def transmon_liouvillian(
    omega_re,
    omega_im,
    params: TransmonParameters | None = None,
    convention: str = "TDSE",
):
    """Lindblad generator for the transmon chain with drive quadratures."""
    model = TransmonModel(params)
    logger.debug(
        f"Building transmon Liouvillian for {model.params.n_transmons} transmon(s) "
        f"with {model.params.n_levels} levels"
    )
    return model.liouvillian([omega_re, omega_im], convention=convention)
