r"""Trajectory ensembles for gate and state-to-state optimization.

For a gate :math:`\hat{O}` on a logical subspace of dimension :math:`d`, the
optimization of an open quantum system can be tracked with three density
matrices instead of a full basis of :math:`d^2` matrices:

.. math::

    \hat\rho_1 &= \sum_{i=1}^{d} \frac{2(d-i+1)}{d(d+1)} |i\rangle\langle i| \\
    \hat\rho_2 &= \sum_{i,j=1}^{d} \frac{1}{d} |i\rangle\langle j| \\
    \hat\rho_3 &= \sum_{i=1}^{d} \frac{1}{d} |i\rangle\langle i|

:math:`\hat\rho_1` distinguishes all basis states, :math:`\hat\rho_2` fixes
the relative phases and :math:`\hat\rho_3` tracks the average population
transfer. Each is mapped to :math:`\hat{O}\hat\rho_k\hat{O}^\dagger`.

Since :math:`\hat\rho_1` and :math:`\hat\rho_3` are mixed, their
Hilbert-Schmidt overlap with the target saturates at the purity
:math:`\mathrm{tr}(\hat\rho_k^2) < 1` even for a perfect gate. The weights are
therefore divided by the purities.
"""

import numpy as np

from ctrl_trajectories.conditions.errors import DimensionError, NormalizationError
from ctrl_trajectories.setup.basis_generation.basis_states import (
    density_matrix,
    purity,
    vectorize,
)
from ctrl_trajectories.setup.gates import is_unitary
from ctrl_trajectories.setup.trajectory_generation.trajectory import Trajectory
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)


def three_state_density_matrices(d):
    """Return the logical ``(d, d)`` matrices rho_1, rho_2, rho_3."""
    if d < 1:
        raise DimensionError(f"Logical dimension must be positive, got {d}")
    i = np.arange(1, d + 1)
    rho_1 = np.diag(2 * (d - i + 1) / (d * (d + 1))).astype(complex)
    rho_2 = np.full((d, d), 1 / d, dtype=complex)
    rho_3 = np.eye(d, dtype=complex) / d
    return rho_1, rho_2, rho_3


def target_basis(gate, basis):
    """Images of the basis states under ``gate``: sum_i U[i, j] basis[i]."""
    B = np.column_stack(basis)
    return list((B @ np.asarray(gate, dtype=complex)).T)


def normalize_weights(weights, purities=None):
    """
    Rescale ``weights`` so that they sum to their count, then divide by ``purities``.

    Returns:
    - numpy.ndarray: w[i] / sum(w) * k / purities[i]
    """
    w = np.asarray(weights, dtype=float)
    if w.size == 0:
        raise ValueError("At least one weight is required")
    total = w.sum()
    if total <= 0:
        raise ValueError(f"Weights must have a positive sum, got {total}")
    w = w * (w.size / total)

    if purities is not None:
        p = np.asarray(purities, dtype=float)
        if p.shape != w.shape:
            raise DimensionError(
                f"Got {p.size} purities for {w.size} weight(s)"
            )
        if np.any(p <= 0):
            raise ValueError("Purities must be positive")
        w = w / p
    return w


def three_state_trajectories(
    generator,
    gate,
    basis,
    weights=(20, 1, 1),
    purities=None,
    check_unitary=True,
    atol=1e-8,
):
    """
    Build the three-trajectory ensemble for optimizing ``gate`` on an open system.

    Args:
    - generator (Generator): Liouvillian acting on vectorized density matrices.
    - gate (array_like): The (d, d) target gate on the logical subspace.
    - basis (sequence): The d logical basis states, embedded in the physical space.
    - weights (sequence): Relative weights of rho_1, rho_2, rho_3.
    - purities (sequence, optional): Purities used to normalize the weights.
      Defaults to the exact purities tr(rho_k^2).
    - check_unitary (bool): Fail with NormalizationError for a non-unitary gate.
    - atol (float): Tolerance of the unitarity check.

    Returns:
    - list of Trajectory: vec(rho_k) -> vec(U rho_k U^dagger), k = 1, 2, 3.

    Raises:
    - DimensionError: If the gate does not match the basis, or the vectorized
      states do not match the generator dimension.
    - NormalizationError: If ``check_unitary`` and the gate is not unitary.
    """
    gate = np.asarray(gate, dtype=complex)
    d = len(basis)
    if gate.shape != (d, d):
        raise DimensionError(
            f"Gate of shape {gate.shape} does not match a logical basis of {d} state(s)"
        )
    physical_dim = np.asarray(basis[0]).size
    if physical_dim**2 != generator.dim:
        raise DimensionError(
            f"Density matrices over a {physical_dim}-dimensional space do not fit "
            f"a generator of dimension {generator.dim}"
        )
    if check_unitary and not is_unitary(gate, atol=atol):
        raise NormalizationError(
            "Target gate is not unitary; U rho U^dagger would not be a density matrix"
        )

    rhos = three_state_density_matrices(d)
    if purities is None:
        purities = [purity(rho) for rho in rhos]
    if len(weights) != len(rhos):
        raise DimensionError(f"Expected {len(rhos)} weights, got {len(weights)}")
    final_weights = normalize_weights(weights, purities)

    basis_tgt = target_basis(gate, basis)
    trajectories = []
    for rho, w in zip(rhos, final_weights):
        trajectories.append(
            Trajectory(
                initial_state=vectorize(density_matrix(rho, basis)),
                generator=generator,
                target_state=vectorize(density_matrix(rho, basis_tgt)),
                weight=w,
            )
        )

    logger.debug(
        f"Built {len(trajectories)} gate trajectories for d={d} with weights "
        f"{np.round(final_weights, 4).tolist()}"
    )
    return trajectories


def state_to_state_trajectory(generator, initial_state, target_state, weight=1.0):
    """Single-trajectory ensemble for a state-to-state transfer."""
    return [
        Trajectory(
            initial_state=initial_state,
            generator=generator,
            target_state=target_state,
            weight=weight,
        )
    ]
