import numpy as np
import pytest

from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.make_pulse.shapes import ConstantControl
from ctrl_trajectories.objectives.functionals import (
    F_re,
    F_sm,
    F_ss,
    J_T_re,
    J_T_sm,
    J_T_ss,
    get_functional,
    overlaps,
)
from ctrl_trajectories.setup.basis_generation.basis_states import (
    computational_labels,
    ket,
    logical_basis,
)
from ctrl_trajectories.setup.gates import get_gate
from ctrl_trajectories.setup.hamiltonian_generation import (
    TransmonParameters,
    tls_hamiltonian,
    transmon_liouvillian,
)
from ctrl_trajectories.setup.trajectory_generation import (
    state_to_state_trajectory,
    three_state_trajectories,
)


@pytest.fixture
def tls_trajectories():
    return state_to_state_trajectory(
        tls_hamiltonian(ConstantControl(0.0)), ket(0, 2), ket(1, 2)
    )


@pytest.fixture
def gate_trajectories():
    params = TransmonParameters(n_levels=3)
    L = transmon_liouvillian(ConstantControl(0.0), ConstantControl(0.0), params)
    basis = logical_basis(computational_labels(2), (3, 3))
    return three_state_trajectories(L, get_gate("sqrtISWAP"), basis)


class TestStateToStateFunctionals:
    def test_perfect_transfer(self, tls_trajectories):
        states = [ket(1, 2)]
        assert J_T_ss(states, tls_trajectories) == pytest.approx(0.0)
        assert J_T_sm(states, tls_trajectories) == pytest.approx(0.0)
        assert J_T_re(states, tls_trajectories) == pytest.approx(0.0)

    def test_global_phase(self, tls_trajectories):
        phi = 0.7
        states = [np.exp(1j * phi) * ket(1, 2)]
        assert J_T_ss(states, tls_trajectories) == pytest.approx(0.0)
        assert J_T_sm(states, tls_trajectories) == pytest.approx(0.0)
        assert J_T_re(states, tls_trajectories) == pytest.approx(1 - np.cos(phi))

    def test_orthogonal_state(self, tls_trajectories):
        states = [ket(0, 2)]
        assert J_T_ss(states, tls_trajectories) == pytest.approx(1.0)
        assert J_T_sm(states, tls_trajectories) == pytest.approx(1.0)

    def test_superposition(self, tls_trajectories):
        states = [(ket(0, 2) + ket(1, 2)) / np.sqrt(2)]
        assert F_ss(states, tls_trajectories) == pytest.approx(0.5)
        assert F_sm(states, tls_trajectories) == pytest.approx(0.5)
        assert F_re(states, tls_trajectories) == pytest.approx(1 / np.sqrt(2))


class TestGateFunctionals:
    def test_perfect_gate_has_zero_J_T_re(self, gate_trajectories):
        states = [traj.target_state for traj in gate_trajectories]
        assert J_T_re(states, gate_trajectories) == pytest.approx(0.0, abs=1e-12)

    def test_overlaps_are_purities_for_perfect_gate(self, gate_trajectories):
        states = [traj.target_state for traj in gate_trajectories]
        np.testing.assert_allclose(
            overlaps(states, gate_trajectories), [0.3, 1.0, 0.25], atol=1e-12
        )

    def test_identity_is_not_sqrt_iswap(self, gate_trajectories):
        states = [traj.initial_state for traj in gate_trajectories]
        assert J_T_re(states, gate_trajectories) > 1e-3


class TestFunctionalErrors:
    def test_length_mismatch(self, tls_trajectories):
        with pytest.raises(DimensionError):
            overlaps([ket(1, 2), ket(0, 2)], tls_trajectories)

    def test_missing_target(self):
        trajectories = state_to_state_trajectory(
            tls_hamiltonian(ConstantControl(0.0)), ket(0, 2), None
        )
        with pytest.raises(ValueError):
            overlaps([ket(0, 2)], trajectories)

    def test_get_functional(self):
        assert get_functional("J_T_re") is J_T_re
        assert get_functional("J_T_sm") is J_T_sm
        with pytest.raises(KeyError):
            get_functional("J_T_hs")

