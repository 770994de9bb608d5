import itertools
import math

import numpy as np

from ctrl_trajectories.conditions.errors import DimensionError


def _as_tuple(labels):
    if isinstance(labels, (int, np.integer)):
        return (int(labels),)
    return tuple(int(label) for label in labels)


def ket(labels, dims):
    """
    Pure basis state for the integer quantum numbers ``labels``.

    Args:
    - labels (int or tuple of int): One quantum number per subsystem.
    - dims (int or tuple of int): Subsystem dimensions. A single int is used
      for every subsystem.

    Returns:
    - numpy.ndarray: Complex state vector of length prod(dims).

    Raises:
    - DimensionError: If a label is negative or at/beyond its truncation level,
      or if the number of labels does not match the number of subsystems.
    """
    labels = _as_tuple(labels)
    if isinstance(dims, (int, np.integer)):
        dims = (int(dims),) * len(labels)
    dims = tuple(int(d) for d in dims)

    if len(labels) != len(dims):
        raise DimensionError(
            f"Got {len(labels)} label(s) for {len(dims)} subsystem(s)"
        )

    psi = np.ones(1, dtype=complex)
    for label, dim in zip(labels, dims):
        if not 0 <= label < dim:
            raise DimensionError(
                f"Basis label {label} out of range for a subsystem with {dim} levels"
            )
        single = np.zeros(dim, dtype=complex)
        single[label] = 1.0
        psi = np.kron(psi, single)
    return psi


def bra(labels, dims):
    return ket(labels, dims).conj()


def ketbra(left, right):
    """Outer product |left><right| of two state vectors."""
    return np.outer(left, np.conj(right))


def computational_labels(n_subsystems):
    """Labels of the computational basis, e.g. (0,0), (0,1), (1,0), (1,1)."""
    return list(itertools.product((0, 1), repeat=n_subsystems))


def logical_basis(labels, dims):
    """Embed a list of logical labels as state vectors in the physical space."""
    return [ket(label, dims) for label in labels]


def density_matrix(coefficients, basis):
    """
    Build sum_ij C_ij |b_i><b_j| for a coefficient matrix C over a basis.

    The basis vectors may live in a larger space than the logical subspace
    spanned by them (e.g. qubit states of truncated transmons).
    """
    coefficients = np.asarray(coefficients, dtype=complex)
    B = np.column_stack(basis)
    if coefficients.shape != (B.shape[1], B.shape[1]):
        raise DimensionError(
            f"Coefficient matrix of shape {coefficients.shape} does not match "
            f"a basis of {B.shape[1]} state(s)"
        )
    return B @ coefficients @ B.conj().T


def vectorize(rho):
    """Flatten a density matrix in column-major order."""
    return np.asarray(rho).reshape(-1, order="F")


def unvectorize(vec):
    """Inverse of :func:`vectorize`."""
    vec = np.asarray(vec)
    n = math.isqrt(vec.size)
    if n * n != vec.size:
        raise DimensionError(
            f"Vector of length {vec.size} is not a vectorized square matrix"
        )
    return vec.reshape((n, n), order="F")


def purity(rho):
    rho = np.asarray(rho)
    if rho.ndim == 1:
        rho = unvectorize(rho)
    return float(np.real(np.trace(rho @ rho)))


def population(vec_rho, state):
    """Population <state|rho|state> of a vectorized density matrix."""
    rho = unvectorize(vec_rho)
    return float(np.real(np.vdot(state, rho @ state)))


def population_observables(basis):
    """One population observable per basis state, for use during propagation."""
    return tuple(
        (lambda vec_rho, state=state: population(vec_rho, state)) for state in basis
    )
