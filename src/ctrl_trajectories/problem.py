"""
Control problems: a trajectory ensemble on a time grid, with the functional,
update shape and stopping criteria that an optimizer consumes.

No optimizer is part of this package; the problem is the hand-off point.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Sequence

import numpy as np

from ctrl_trajectories.evolution.time_evolution import (
    PROP_METHODS,
    check_tlist,
    propagate_trajectory,
)
from ctrl_trajectories.make_pulse.shapes import PiecewiseControl
from ctrl_trajectories.objectives.functionals import get_functional
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)


@dataclass
class OptimizationResult:
    """Minimal optimizer state as seen by a convergence check."""

    iter: int = 0
    J_T: Optional[float] = None
    converged: bool = False
    message: str = "in progress"
    optimized_controls: list = field(default_factory=list)


def j_t_below(threshold: float) -> Callable[[OptimizationResult], bool]:
    """Convergence check that stops once ``result.J_T < threshold``."""

    def check(result: OptimizationResult) -> bool:
        if result.J_T is not None and result.J_T < threshold:
            result.converged = True
            result.message = f"J_T < {threshold:g}"
        return result.converged

    return check


@dataclass
class ControlProblem:
    trajectories: Sequence[Any]
    tlist: Any
    J_T: Any = "J_T_re"
    iter_stop: int = 5000
    check_convergence: Optional[Callable[[OptimizationResult], bool]] = None
    prop_method: str = "expm_multiply"
    update_shape: Optional[Callable[[float], float]] = None
    lambda_a: float = 1.0
    use_threads: bool = False

    def __post_init__(self):
        if not self.trajectories:
            raise ValueError("A control problem needs at least one trajectory")
        self.trajectories = list(self.trajectories)
        self.tlist = check_tlist(self.tlist)
        if isinstance(self.J_T, str):
            self.J_T = get_functional(self.J_T)
        if not callable(self.J_T):
            raise TypeError(f"J_T must be callable or a functional name, got {self.J_T!r}")
        if self.prop_method not in PROP_METHODS:
            raise ValueError(
                f"Unknown prop_method '{self.prop_method}'. "
                f"Available: {', '.join(PROP_METHODS)}"
            )
        if self.iter_stop < 0:
            raise ValueError(f"iter_stop must be non-negative, got {self.iter_stop}")
        if self.lambda_a <= 0:
            raise ValueError(f"lambda_a must be positive, got {self.lambda_a}")

    def controls(self) -> list:
        """Distinct controls of all trajectories, in order of first appearance."""
        controls = []
        for traj in self.trajectories:
            for control in traj.generator.controls:
                if not any(control is c for c in controls):
                    controls.append(control)
        return controls

    def propagate(self, trajectories=None) -> list:
        """Final states of ``trajectories`` (default: the problem's own)."""
        trajectories = self.trajectories if trajectories is None else trajectories

        def run(traj):
            return propagate_trajectory(traj, self.tlist, prop_method=self.prop_method)

        if self.use_threads:
            with ThreadPoolExecutor() as executor:
                return list(executor.map(run, trajectories))
        return [run(traj) for traj in trajectories]

    def guess_J_T(self) -> float:
        """Value of the functional for the guess controls."""
        J_T = self.J_T(self.propagate(), self.trajectories)
        logger.debug(f"J_T of the guess controls: {J_T:.6e}")
        return J_T

    def substitute(self, optimized) -> ControlProblem:
        """
        Copy of the problem with the controls replaced.

        Args:
        - optimized: Either a mapping from old to new controls, or a sequence
          with one entry per control in the order of :meth:`controls`. Entries
          that are arrays of one value per interval of ``tlist`` are wrapped in
          a PiecewiseControl.
        """
        if hasattr(optimized, "items"):
            mapping = list(optimized.items())
        else:
            controls = self.controls()
            optimized = list(optimized)
            if len(optimized) != len(controls):
                raise ValueError(
                    f"Expected {len(controls)} optimized control(s), got {len(optimized)}"
                )
            mapping = list(zip(controls, optimized))

        mapping = [
            (old, new if callable(new) else PiecewiseControl(np.asarray(new), self.tlist))
            for old, new in mapping
        ]
        return replace(
            self,
            trajectories=[traj.substitute(mapping) for traj in self.trajectories],
        )
