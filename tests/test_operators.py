"""Tests for truncated ladder operators and their embedding in composite spaces."""

import numpy as np
import pytest
import scipy.sparse as sp

from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.setup.operator_generation.generate_operators import (
    create,
    destroy,
    embed_operator,
    identity,
    ladder_operators,
    number,
    sigma_operators,
    tensor_product,
)


class TestLadderOperators:
    def test_destroy_matrix(self):
        a = destroy(3)
        assert sp.issparse(a)
        expected = np.array([[0, 1, 0], [0, 0, np.sqrt(2)], [0, 0, 0]])
        np.testing.assert_allclose(a.toarray(), expected)

    def test_destroy_lowers_fock_state(self):
        a = destroy(5).toarray()
        psi = np.zeros(5)
        psi[3] = 1.0
        expected = np.zeros(5)
        expected[2] = np.sqrt(3)
        np.testing.assert_allclose(a @ psi, expected)

    def test_create_is_adjoint(self):
        np.testing.assert_allclose(
            create(4).toarray(), destroy(4).toarray().conj().T
        )

    @pytest.mark.parametrize("n_levels", [2, 3, 5, 8])
    def test_truncated_commutator(self, n_levels):
        """[a, a^dagger] = 1 except for the last level, where it is 1 - N."""
        a = destroy(n_levels).toarray()
        comm = a @ a.conj().T - a.conj().T @ a
        expected = np.diag([1.0] * (n_levels - 1) + [1.0 - n_levels])
        np.testing.assert_allclose(comm, expected, atol=1e-12)

    def test_number_is_adag_a(self):
        a = destroy(4)
        np.testing.assert_allclose(
            number(4).toarray(), (a.conj().T @ a).toarray(), atol=1e-12
        )

    @pytest.mark.parametrize("n_levels", [0, 1])
    def test_too_few_levels(self, n_levels):
        with pytest.raises(DimensionError):
            destroy(n_levels)


class TestEmbedding:
    def test_embed_first_subsystem(self):
        a = destroy(3)
        embedded = embed_operator(a, 0, (3, 2))
        np.testing.assert_allclose(
            embedded.toarray(), np.kron(a.toarray(), np.eye(2))
        )

    def test_embed_second_subsystem(self):
        a = destroy(2)
        embedded = embed_operator(a, 1, (3, 2))
        np.testing.assert_allclose(
            embedded.toarray(), np.kron(np.eye(3), a.toarray())
        )

    @pytest.mark.parametrize("index", [2, 5, -1])
    def test_index_out_of_range(self, index):
        with pytest.raises(DimensionError):
            embed_operator(destroy(3), index, (3, 3))

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            embed_operator(destroy(2), 1, (3, 3))

    def test_ladder_operators_commute_across_subsystems(self):
        b1, b2 = ladder_operators((3, 3))
        assert b1.shape == (9, 9)
        comm = (b1 @ b2.conj().T - b2.conj().T @ b1).toarray()
        np.testing.assert_allclose(comm, 0, atol=1e-12)

    def test_tensor_product_dimension(self):
        op = tensor_product([identity(2), destroy(3), identity(4)])
        assert op.shape == (24, 24)


class TestSigmaOperators:
    def test_pauli_algebra(self):
        sx, sy, sz, _ = sigma_operators()
        np.testing.assert_allclose(
            (sx @ sy).toarray(), 1j * sz.toarray(), atol=1e-12
        )

    def test_sigma_minus_lowers(self):
        _, _, _, sm = sigma_operators()
        np.testing.assert_allclose(sm.toarray() @ np.array([0, 1]), [1, 0])
