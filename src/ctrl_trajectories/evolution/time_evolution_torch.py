import numpy as np
import torch

from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.evolution.time_evolution import check_tlist
from ctrl_trajectories.make_pulse.shapes import discretize
from ctrl_trajectories.utils.conversion import array_to_tensor
from ctrl_trajectories.utils.device import resolve_cpu_cores, select_device
from ctrl_trajectories.utils.universal_logging import get_logger
from ctrl_trajectories.utils.utility_functions import set_cores

logger = get_logger(__name__)

# Upper bound on the number of complex entries held by one chunk of generators
MAX_CHUNK_ELEMENTS = 2**24


def exp_generator(G, dt, convention="TDSE"):
    """
    Batched step propagator of a generator.

    Parameters:
    G (torch.Tensor): A tensor of shape (..., D, D).
    dt (float): Time step.
    convention (str): "TDSE" for exp(-i G dt), "LvN" for exp(G dt).

    Returns:
    torch.Tensor: The matrix exponential, same shape as G.
    """
    if convention == "TDSE":
        return torch.linalg.matrix_exp(-1j * G * dt)
    return torch.linalg.matrix_exp(G * dt)


def apply_step(U, state):
    """
    Apply a batch of step propagators to a batch of states.

    Parameters:
    U (torch.Tensor): A tensor of shape (batch_size, D, D).
    state (torch.Tensor): A tensor of shape (batch_size, D).

    Returns:
    torch.Tensor: The propagated states of shape (batch_size, D).
    """
    return torch.einsum("bij,bj->bi", U, state)


def ensemble_tensors(trajectories, tlist, device="cpu", dtype=torch.complex128):
    """
    Dense drift, control operators and discretized amplitudes of an ensemble.

    Trajectories with fewer control terms than others are padded with zero
    operators.

    Returns:
    - drift: Tensor of shape (batch_size, D, D)
    - ops: Tensor of shape (batch_size, K, D, D)
    - amplitudes: Tensor of shape (n_steps, batch_size, K)
    - states: Tensor of shape (batch_size, D)
    """
    if not trajectories:
        raise ValueError("At least one trajectory is required")
    dim = trajectories[0].generator.dim
    convention = trajectories[0].generator.convention
    for traj in trajectories[1:]:
        if traj.generator.dim != dim:
            raise DimensionError(
                f"Trajectories of dimension {traj.generator.dim} and {dim} "
                "cannot be propagated in one batch"
            )
        if traj.generator.convention != convention:
            raise ValueError("All trajectories must use the same convention")

    n_steps = len(tlist) - 1
    n_terms = max(1, max(len(traj.generator.terms) for traj in trajectories))
    drift = np.zeros((len(trajectories), dim, dim), dtype=complex)
    ops = np.zeros((len(trajectories), n_terms, dim, dim), dtype=complex)
    amplitudes = np.zeros((n_steps, len(trajectories), n_terms), dtype=complex)
    states = np.zeros((len(trajectories), dim), dtype=complex)

    for b, traj in enumerate(trajectories):
        drift[b] = traj.generator.drift.toarray()
        for k, (op, control) in enumerate(traj.generator.terms):
            ops[b, k] = op.toarray()
            amplitudes[:, b, k] = discretize(control, tlist)
        states[b] = traj.initial_state

    return (
        array_to_tensor(drift, device, dtype),
        array_to_tensor(ops, device, dtype),
        array_to_tensor(amplitudes, device, dtype),
        array_to_tensor(states, device, dtype),
    )


def propagate_ensemble_torch(
    trajectories, tlist, compute_resource="cpu", cpu_cores=None
):
    """
    Propagate all trajectories of an ensemble as one batch with torch.

    Generators are evaluated at the interval midpoints, as in
    :func:`ctrl_trajectories.evolution.time_evolution.propagate`. Time steps are
    processed in chunks to cap peak memory at ``MAX_CHUNK_ELEMENTS``.

    Parameters:
    - trajectories: Sequence of Trajectory sharing dimension and convention.
    - tlist: Time grid.
    - compute_resource: "cpu" or "gpu".
    - cpu_cores: Number of torch threads on CPU, defaults to all cores but one.

    Returns:
    - numpy.ndarray: Final states of shape (batch_size, D).
    """
    tlist = check_tlist(tlist)
    device, backend = select_device(compute_resource)
    if backend == "cpu":
        set_cores(resolve_cpu_cores(cpu_cores))

    drift, ops, amplitudes, state = ensemble_tensors(trajectories, tlist, device)
    convention = trajectories[0].generator.convention
    n_steps, batch_size, _ = amplitudes.shape
    D = drift.shape[-1]
    dts = np.diff(tlist)
    uniform = np.allclose(dts, dts[0])

    chunk_size = max(1, min(n_steps, MAX_CHUNK_ELEMENTS // (batch_size * D * D)))
    if not uniform:
        chunk_size = 1

    with torch.no_grad():
        for start in range(0, n_steps, chunk_size):
            end = min(start + chunk_size, n_steps)
            G_chunk = drift.unsqueeze(0) + torch.einsum(
                "tbk,bkij->tbij", amplitudes[start:end], ops
            )
            # matrix_exp needs a contiguous (N, D, D) batch
            U_chunk = exp_generator(
                G_chunk.reshape(-1, D, D).contiguous(), float(dts[start]), convention
            ).reshape(end - start, batch_size, D, D)
            for n in range(end - start):
                state = apply_step(U_chunk[n], state)

    logger.debug(
        f"Propagated {batch_size} trajectories of dimension {D} over {n_steps} "
        f"steps on {backend}"
    )
    return state.cpu().numpy()
