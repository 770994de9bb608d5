"""Tests for trajectories and the three-state ensemble of open-system gates."""

import numpy as np
import pytest

from ctrl_trajectories import units
from ctrl_trajectories.conditions.errors import DimensionError, NormalizationError
from ctrl_trajectories.make_pulse.shapes import ConstantControl
from ctrl_trajectories.setup.basis_generation.basis_states import (
    computational_labels,
    density_matrix,
    ket,
    logical_basis,
    purity,
    unvectorize,
)
from ctrl_trajectories.setup.gates import get_gate, is_unitary
from ctrl_trajectories.setup.hamiltonian_generation import (
    TransmonParameters,
    tls_hamiltonian,
    transmon_hamiltonian,
    transmon_liouvillian,
)
from ctrl_trajectories.setup.trajectory_generation import (
    Trajectory,
    normalize_weights,
    state_to_state_trajectory,
    target_basis,
    three_state_density_matrices,
    three_state_trajectories,
)

PARAMS = TransmonParameters(
    n_levels=3,
    qubit_frequencies=(4.3796 * units.GHz, 4.6137 * units.GHz),
    anharmonicities=(-239.3 * units.MHz, -242.8 * units.MHz),
    decay_rates=(1 / (38 * units.us), 1 / (32 * units.us)),
    dephasing_rates=(1 / (29.5 * units.us), 1 / (16 * units.us)),
)


@pytest.fixture
def liouvillian():
    return transmon_liouvillian(ConstantControl(0.0), ConstantControl(0.0), PARAMS)


@pytest.fixture
def basis():
    return logical_basis(computational_labels(2), (3, 3))


class TestThreeStateDensityMatrices:
    def test_two_qubit_matrices(self):
        rho_1, rho_2, rho_3 = three_state_density_matrices(4)
        np.testing.assert_allclose(np.diag(rho_1).real, [0.4, 0.3, 0.2, 0.1])
        np.testing.assert_allclose(rho_2, np.full((4, 4), 0.25))
        np.testing.assert_allclose(rho_3, np.eye(4) / 4)

    @pytest.mark.parametrize("d", [2, 3, 4, 8])
    def test_valid_density_matrices(self, d):
        for rho in three_state_density_matrices(d):
            np.testing.assert_allclose(rho, rho.conj().T)
            assert np.trace(rho).real == pytest.approx(1.0)
            assert np.all(np.linalg.eigvalsh(rho) > -1e-12)

    def test_purities(self):
        purities = [purity(rho) for rho in three_state_density_matrices(4)]
        np.testing.assert_allclose(purities, [0.3, 1.0, 0.25])

    def test_purity_ordering(self):
        p1, p2, p3 = (purity(rho) for rho in three_state_density_matrices(5))
        assert p3 < p1 < p2

    def test_invalid_dimension(self):
        with pytest.raises(DimensionError):
            three_state_density_matrices(0)


class TestNormalizeWeights:
    def test_weights_sum_to_count(self):
        np.testing.assert_allclose(normalize_weights([20, 1, 1]), [60 / 22, 3 / 22, 3 / 22])
        assert normalize_weights([2, 5, 3, 10]).sum() == pytest.approx(4.0)

    def test_purity_normalization(self):
        w = normalize_weights([20, 1, 1], [0.3, 1.0, 0.25])
        np.testing.assert_allclose(
            w, [60 / 22 / 0.3, 3 / 22, 3 / 22 / 0.25], rtol=1e-12
        )

    def test_empty(self):
        with pytest.raises(ValueError):
            normalize_weights([])

    def test_zero_sum(self):
        with pytest.raises(ValueError):
            normalize_weights([0, 0, 0])

    def test_non_positive_purity(self):
        with pytest.raises(ValueError):
            normalize_weights([1, 1], [0.5, 0.0])

    def test_purity_count_mismatch(self):
        with pytest.raises(DimensionError):
            normalize_weights([1, 1, 1], [0.5, 0.5])


class TestThreeStateTrajectories:
    def test_ensemble(self, liouvillian, basis):
        trajectories = three_state_trajectories(
            liouvillian, get_gate("sqrtISWAP"), basis
        )
        assert len(trajectories) == 3
        for traj in trajectories:
            assert traj.generator is liouvillian
            assert traj.initial_state.shape == (81,)
            assert traj.target_state.shape == (81,)

    def test_default_weights_use_exact_purities(self, liouvillian, basis):
        trajectories = three_state_trajectories(liouvillian, get_gate("CZ"), basis)
        weights = [traj.weight for traj in trajectories]
        np.testing.assert_allclose(
            weights, [60 / 22 / 0.3, 3 / 22, 3 / 22 / 0.25], rtol=1e-12
        )

    def test_explicit_purities(self, liouvillian, basis):
        trajectories = three_state_trajectories(
            liouvillian, get_gate("CZ"), basis, weights=(1, 1, 1), purities=(1, 1, 1)
        )
        np.testing.assert_allclose([t.weight for t in trajectories], [1, 1, 1])

    def test_targets(self, liouvillian, basis):
        U = get_gate("sqrtISWAP")
        trajectories = three_state_trajectories(liouvillian, U, basis)
        B = np.column_stack(basis)
        for traj, rho in zip(trajectories, three_state_density_matrices(4)):
            np.testing.assert_allclose(
                unvectorize(traj.initial_state), B @ rho @ B.conj().T, atol=1e-14
            )
            np.testing.assert_allclose(
                unvectorize(traj.target_state),
                B @ U @ rho @ U.conj().T @ B.conj().T,
                atol=1e-14,
            )

    def test_target_basis(self, basis):
        U = get_gate("iSWAP")
        targets = target_basis(U, basis)
        # iSWAP maps |01> to i|10>
        np.testing.assert_allclose(targets[1], 1j * basis[2])
        np.testing.assert_allclose(targets[0], basis[0])

    def test_target_states_keep_trace_and_purity(self, liouvillian, basis):
        trajectories = three_state_trajectories(
            liouvillian, get_gate("sqrtISWAP"), basis
        )
        for traj in trajectories:
            rho_0 = unvectorize(traj.initial_state)
            rho_T = unvectorize(traj.target_state)
            assert np.trace(rho_T).real == pytest.approx(1.0)
            assert purity(rho_T) == pytest.approx(purity(rho_0))

    def test_gate_shape_mismatch(self, liouvillian, basis):
        with pytest.raises(DimensionError):
            three_state_trajectories(liouvillian, get_gate("X"), basis)

    def test_generator_dimension_mismatch(self, basis):
        H = transmon_hamiltonian(ConstantControl(0.0), ConstantControl(0.0), PARAMS)
        with pytest.raises(DimensionError):
            three_state_trajectories(H, get_gate("CZ"), basis)

    def test_wrong_number_of_weights(self, liouvillian, basis):
        with pytest.raises(DimensionError):
            three_state_trajectories(
                liouvillian, get_gate("CZ"), basis, weights=(1, 1)
            )

    def test_non_unitary_gate(self, liouvillian, basis):
        gate = np.diag([1.0, 1.0, 1.0, 0.5])
        assert not is_unitary(gate)
        with pytest.raises(NormalizationError):
            three_state_trajectories(liouvillian, gate, basis)
        trajectories = three_state_trajectories(
            liouvillian, gate, basis, check_unitary=False
        )
        assert len(trajectories) == 3


class TestTrajectory:
    def test_states_are_read_only_copies(self):
        psi = ket(0, 2)
        traj = Trajectory(psi, tls_hamiltonian(ConstantControl(0.0)), ket(1, 2))
        psi[0] = 0.0
        assert traj.initial_state[0] == 1.0
        with pytest.raises(ValueError):
            traj.initial_state[0] = 2.0

    def test_wrong_length(self):
        with pytest.raises(DimensionError):
            Trajectory(ket(0, 3), tls_hamiltonian(ConstantControl(0.0)))

    def test_target_optional(self):
        traj = Trajectory(ket(0, 2), tls_hamiltonian(ConstantControl(0.0)))
        assert traj.target_state is None
        assert traj.weight == 1.0

    def test_substitute(self):
        u = ConstantControl(0.0)
        w = ConstantControl(1.0)
        traj = Trajectory(ket(0, 2), tls_hamiltonian(u), ket(1, 2), weight=2.0)
        new = traj.substitute({u: w})
        assert new.generator.controls == (w,)
        assert traj.generator.controls == (u,)
        assert new.weight == 2.0
        np.testing.assert_array_equal(new.initial_state, traj.initial_state)

    def test_state_to_state(self):
        H = tls_hamiltonian(ConstantControl(0.0))
        trajectories = state_to_state_trajectory(H, ket(0, 2), ket(1, 2))
        assert len(trajectories) == 1
        assert trajectories[0].weight == 1.0
        np.testing.assert_allclose(trajectories[0].target_state, [0, 1])

    def test_density_matrix_embedding_in_transmons(self, basis):
        rho = density_matrix(np.eye(4) / 4, basis)
        assert rho.shape == (9, 9)
        assert np.trace(rho).real == pytest.approx(1.0)
