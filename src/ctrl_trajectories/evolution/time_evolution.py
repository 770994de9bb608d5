import numpy as np
from scipy.linalg import expm
from scipy.sparse.linalg import expm_multiply

from ctrl_trajectories.conditions.errors import DimensionError
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)

PROP_METHODS = ("expm_multiply", "expm")


def check_tlist(tlist):
    tlist = np.asarray(tlist, dtype=float)
    if tlist.ndim != 1 or tlist.size < 2:
        raise ValueError("tlist must be a 1D array with at least two points")
    if np.any(np.diff(tlist) <= 0):
        raise ValueError("tlist must be strictly increasing")
    return tlist


def step_exponent(generator, t, dt):
    """Exponent A of a single step, state(t + dt) = exp(A) state(t)."""
    G = generator.at(t)
    if generator.convention == "TDSE":
        return -1j * dt * G
    return dt * G


def propagate(
    generator,
    state,
    tlist,
    observables=None,
    storage=False,
    prop_method="expm_multiply",
):
    """
    Propagate ``state`` over ``tlist`` under a piecewise-constant generator.

    The generator is evaluated at the midpoint of each interval of the time grid.

    Args:
    - generator (Generator): Hamiltonian or Liouvillian.
    - state (array_like): Initial state vector or vectorized density matrix.
    - tlist (array_like): Time grid.
    - observables (sequence, optional): Callables of the state, evaluated at
      every point of ``tlist``.
    - storage (bool): Return the states at every point of ``tlist``.
    - prop_method (str): "expm_multiply" (sparse, default) or "expm" (dense).

    Returns:
    - numpy.ndarray: The final state; with ``storage``, an array of shape
      (len(tlist), dim); with ``observables``, an array of shape
      (len(tlist), len(observables)).
    """
    if prop_method not in PROP_METHODS:
        raise ValueError(
            f"Unknown prop_method '{prop_method}'. Available: {', '.join(PROP_METHODS)}"
        )
    tlist = check_tlist(tlist)
    state = np.array(state, dtype=complex).reshape(-1)
    if state.size != generator.dim:
        raise DimensionError(
            f"State of length {state.size} does not match generator of "
            f"dimension {generator.dim}"
        )

    states = [state] if storage else None
    values = [[obs(state) for obs in observables]] if observables else None

    for n in range(tlist.size - 1):
        dt = tlist[n + 1] - tlist[n]
        A = step_exponent(generator, 0.5 * (tlist[n] + tlist[n + 1]), dt)
        if prop_method == "expm_multiply":
            state = expm_multiply(A, state)
        else:
            state = expm(A.toarray()) @ state
        if storage:
            states.append(state)
        if observables:
            values.append([obs(state) for obs in observables])

    logger.debug(
        f"Propagated a {generator.kind} of dimension {generator.dim} over "
        f"{tlist.size - 1} steps"
    )

    if observables:
        return np.array(values)
    if storage:
        return np.array(states)
    return state


def propagate_trajectory(trajectory, tlist, initial_state=None, **kwargs):
    """Propagate the initial state of a trajectory (or ``initial_state``) with its generator."""
    if initial_state is None:
        initial_state = trajectory.initial_state
    return propagate(trajectory.generator, initial_state, tlist, **kwargs)


def propagate_ensemble(trajectories, tlist, **kwargs):
    """Final states of all trajectories of an ensemble, in order."""
    return [propagate_trajectory(traj, tlist, **kwargs) for traj in trajectories]
