import numpy as np
import scipy.sparse as sp

from ctrl_trajectories.conditions.errors import DimensionError


def _check_levels(n_levels):
    if int(n_levels) != n_levels or n_levels < 2:
        raise DimensionError(
            f"A truncated subsystem needs at least 2 levels, got {n_levels}"
        )
    return int(n_levels)


def destroy(n_levels):
    """
    Truncated lowering operator with a|n> = sqrt(n)|n-1>.

    Args:
    - n_levels (int): Truncation level N (>= 2).

    Returns:
    - scipy.sparse.csr_matrix: The (N, N) lowering operator.
    """
    n_levels = _check_levels(n_levels)
    diagonal = np.sqrt(np.arange(1, n_levels, dtype=float)).astype(complex)
    return sp.diags(diagonal, offsets=1, shape=(n_levels, n_levels), format="csr")


def create(n_levels):
    """Truncated raising operator, the adjoint of :func:`destroy`."""
    return destroy(n_levels).conj().T.tocsr()


def number(n_levels):
    """Number operator diag(0, 1, ..., N-1)."""
    n_levels = _check_levels(n_levels)
    return sp.diags(
        np.arange(n_levels, dtype=complex), offsets=0, format="csr"
    )


def identity(dim):
    return sp.identity(int(dim), dtype=complex, format="csr")


def tensor_product(operators):
    """Kronecker product of a list of operators, left to right."""
    result = sp.csr_matrix(operators[0], dtype=complex)
    for op in operators[1:]:
        result = sp.kron(result, op, format="csr")
    return result


def embed_operator(op, index, dims):
    """
    Place a single-subsystem operator on subsystem ``index`` of the composite
    space with subsystem dimensions ``dims``, identity everywhere else.

    Raises:
    - DimensionError: If ``index`` does not name a subsystem, or if ``op`` does
      not act on a space of dimension ``dims[index]``.
    """
    dims = tuple(int(d) for d in dims)
    if not 0 <= index < len(dims):
        raise DimensionError(
            f"Subsystem index {index} out of range for {len(dims)} subsystem(s)"
        )
    if op.shape != (dims[index], dims[index]):
        raise DimensionError(
            f"Operator of shape {op.shape} does not act on subsystem {index} "
            f"of dimension {dims[index]}"
        )
    operators = [identity(d) for d in dims]
    operators[index] = op
    return tensor_product(operators)


def ladder_operators(dims):
    """Lowering operators for every subsystem, embedded in the full space."""
    return [embed_operator(destroy(d), i, dims) for i, d in enumerate(dims)]


def sigma_operators():
    """Pauli matrices (sigma_x, sigma_y, sigma_z) and the lowering operator sigma_-."""
    sx = sp.csr_matrix(np.array([[0, 1], [1, 0]], dtype=complex))
    sy = sp.csr_matrix(np.array([[0, -1j], [1j, 0]], dtype=complex))
    sz = sp.csr_matrix(np.array([[1, 0], [0, -1]], dtype=complex))
    sm = sp.csr_matrix(np.array([[0, 1], [0, 0]], dtype=complex))
    return sx, sy, sz, sm
