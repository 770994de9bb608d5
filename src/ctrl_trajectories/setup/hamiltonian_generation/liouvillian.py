r"""Lindblad generators for vectorized density matrices.

Density matrices are vectorized column by column, so that
:math:`\mathrm{vec}(A \rho B) = (B^T \otimes A)\,\mathrm{vec}(\rho)`. With this
convention the master equation

.. math::

    \partial_t \rho = -\mathrm{i} [H, \rho]
        + \sum_A \Bigl(A \rho A^\dagger
        - \tfrac{1}{2} \{A^\dagger A, \rho\}\Bigr)

turns into a linear equation for :math:`\vec\rho` with the superoperators
built below.
"""

import scipy.sparse as sp

from ctrl_trajectories.setup.hamiltonian_generation.generator import (
    CONVENTIONS,
    Generator,
)
from ctrl_trajectories.setup.operator_generation.generate_operators import identity
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)


def commutator_superoperator(H):
    """Superoperator of rho -> [H, rho]: I⊗H - H^T⊗I."""
    H = sp.csr_matrix(H, dtype=complex)
    one = identity(H.shape[0])
    return (sp.kron(one, H) - sp.kron(H.T, one)).tocsr()


def dissipator_superoperator(c_ops, dim):
    """Superoperator of the Lindblad dissipator for the collapse operators ``c_ops``."""
    one = identity(dim)
    D = sp.csr_matrix((dim * dim, dim * dim), dtype=complex)
    for A in c_ops:
        A = sp.csr_matrix(A, dtype=complex)
        AdA = (A.conj().T @ A).tocsr()
        D = D + sp.kron(A.conj(), A) - 0.5 * sp.kron(one, AdA) - 0.5 * sp.kron(AdA.T, one)
    return D.tocsr()


def liouvillian(H, c_ops=(), convention="TDSE"):
    """
    Build the Liouvillian for a Hamiltonian and a set of collapse operators.

    Args:
    - H (Generator): Hamiltonian with static part and control terms.
    - c_ops (sequence): Collapse operators, already scaled by the square root
      of their rates. Operators without non-zero entries (zero rate) are
      skipped.
    - convention (str): "TDSE" for d/dt rho = -i L rho, "LvN" for d/dt rho = L rho.

    Returns:
    - Generator: The Liouvillian, with the same controls as ``H``.
    """
    if convention not in CONVENTIONS:
        raise ValueError(
            f"Unknown convention '{convention}'. Available: {CONVENTIONS}"
        )
    if H.kind != "hamiltonian":
        raise ValueError(f"Expected a Hamiltonian, got a {H.kind}")

    active = [sp.csr_matrix(A, dtype=complex) for A in c_ops]
    active = [A for A in active if A.count_nonzero() > 0]

    D = dissipator_superoperator(active, H.dim)
    if convention == "TDSE":
        drift = commutator_superoperator(H.drift) + 1j * D
        terms = tuple(
            (commutator_superoperator(op), control) for op, control in H.terms
        )
    else:
        drift = -1j * commutator_superoperator(H.drift) + D
        terms = tuple(
            (-1j * commutator_superoperator(op), control) for op, control in H.terms
        )

    logger.debug(
        f"Built {convention} Liouvillian of dimension {H.dim**2} "
        f"from {len(active)} collapse operator(s)"
    )
    return Generator(drift, terms, kind="liouvillian", convention=convention)
