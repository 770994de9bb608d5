r"""Final-time functionals over a trajectory ensemble.

With :math:`\tau_k = \langle \Psi_k^{tgt} | \Psi_k(T) \rangle` the overlap of
each propagated state with its target (for vectorized density matrices the
Hilbert-Schmidt overlap :math:`\mathrm{tr}(\rho_k^{tgt\dagger}\rho_k(T))`) and
:math:`w_k` the trajectory weights,

.. math::

    F_{ss} = \frac{1}{N}\sum_k w_k |\tau_k|^2, \quad
    F_{sm} = \frac{1}{N^2}\Big|\sum_k w_k \tau_k\Big|^2, \quad
    F_{re} = \frac{1}{N}\,\mathrm{Re}\sum_k w_k \tau_k

and :math:`J_T = 1 - F`.
"""

import numpy as np

from ctrl_trajectories.conditions.errors import DimensionError


def overlaps(states, trajectories):
    """Overlaps of the propagated ``states`` with the targets of ``trajectories``."""
    if len(states) != len(trajectories):
        raise DimensionError(
            f"Got {len(states)} state(s) for {len(trajectories)} trajectories"
        )
    tau = []
    for state, traj in zip(states, trajectories):
        if traj.target_state is None:
            raise ValueError("Trajectory has no target state")
        tau.append(np.vdot(traj.target_state, np.asarray(state).reshape(-1)))
    return np.array(tau, dtype=complex)


def _weights(trajectories):
    return np.array([traj.weight for traj in trajectories], dtype=float)


def F_ss(states, trajectories):
    tau = overlaps(states, trajectories)
    return float(np.sum(_weights(trajectories) * np.abs(tau) ** 2) / len(tau))


def F_sm(states, trajectories):
    tau = overlaps(states, trajectories)
    return float(np.abs(np.sum(_weights(trajectories) * tau)) ** 2 / len(tau) ** 2)


def F_re(states, trajectories):
    tau = overlaps(states, trajectories)
    return float(np.real(np.sum(_weights(trajectories) * tau)) / len(tau))


def J_T_ss(states, trajectories):
    """Phase-insensitive functional, 1 - F_ss."""
    return 1.0 - F_ss(states, trajectories)


def J_T_sm(states, trajectories):
    """Phase-sensitive functional with a free global phase, 1 - F_sm."""
    return 1.0 - F_sm(states, trajectories)


def J_T_re(states, trajectories):
    """Fully phase-sensitive functional, 1 - F_re.

    Used for the three-state ensemble of an open-system gate, where the weights
    are normalized by the purities of the initial states so that J_T_re = 0 for
    a perfect gate.
    """
    return 1.0 - F_re(states, trajectories)


FUNCTIONALS = {
    "J_T_ss": J_T_ss,
    "J_T_sm": J_T_sm,
    "J_T_re": J_T_re,
}


def get_functional(name):
    if name not in FUNCTIONALS:
        raise KeyError(
            f"Unknown functional '{name}'. Available: {', '.join(sorted(FUNCTIONALS))}"
        )
    return FUNCTIONALS[name]
