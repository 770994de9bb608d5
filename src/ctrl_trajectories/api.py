"""
API - A simple interface for building control problems from configuration files.

This module loads JSON configurations and turns them into generators, trajectory
ensembles and a ControlProblem, ready to be handed to an optimizer or to be
checked by propagating the guess controls.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np

from ctrl_trajectories.make_pulse.shapes import FlattopWindow, control_from_config
from ctrl_trajectories.problem import ControlProblem, j_t_below
from ctrl_trajectories.setup.basis_generation.basis_states import ket, logical_basis
from ctrl_trajectories.setup.gates import get_gate
from ctrl_trajectories.setup.hamiltonian_generation import get_model_class
from ctrl_trajectories.setup.trajectory_generation import (
    Trajectory,
    state_to_state_trajectory,
    target_basis,
    three_state_trajectories,
)
from ctrl_trajectories.utils.universal_logging import get_logger

logger = get_logger(__name__)

DATA_DIR = Path(__file__).parent / "data" / "json_input"


def _resolve_config_path(config: Union[str, Path]) -> Path:
    """Resolve a configuration file path.

    Existing paths are returned as-is; otherwise the file name is looked up in
    the packaged data/json_input folder.

    Raises FileNotFoundError if nothing resolves.
    """
    p = Path(config)
    if p.exists():
        return p

    packaged = DATA_DIR / p.name
    if packaged.exists():
        return packaged

    raise FileNotFoundError(f"Config file not found for: {config}")


class TrajectoryAPI:
    """
    High-level API for building trajectory ensembles and control problems.

    Sections of the configuration:
    - "model": registered model name, e.g. "transmon" or "two_level"
    - "parameters": passed to the model's ``from_config``
    - "controls": one entry per control channel (see ``control_from_config``)
    - "time_grid": {"T": duration in ns, "nt": number of grid points}
    - "target": either {"gate", "basis", "weights", "purities"} or
      {"initial", "final"} labels for a state-to-state transfer
    - "optimization": functional, stopping criteria and propagation options
    """

    def __init__(self, config: Union[str, Path, Dict[str, Any]]):
        """
        Initialize the API with a configuration.

        Args:
            config: Either a path to a JSON configuration file, or a dictionary
                   containing the configuration parameters.
        """
        if isinstance(config, (str, Path)):
            self.config_path = _resolve_config_path(config)
            with open(self.config_path, "r") as f:
                self.config = json.load(f)
        elif isinstance(config, dict):
            self.config = copy.deepcopy(config)
            self.config_path = None
        else:
            raise ValueError("Config must be a file path or dictionary")

        self._build()

    def _build(self):
        config = self.config
        for section in ("model", "parameters", "controls", "time_grid", "target"):
            if section not in config:
                raise KeyError(f"Configuration is missing the '{section}' section")
        options = config.get("optimization", {})

        self.model = get_model_class(config["model"]).from_config(config["parameters"])

        grid = config["time_grid"]
        T = float(grid["T"])
        self.tlist = np.linspace(0.0, T, int(grid["nt"]))

        self.controls = [control_from_config(spec, T) for spec in config["controls"]]
        self.generator = self.model.generator(
            self.controls,
            open_system=options.get("open_system"),
            convention=options.get("convention", "TDSE"),
        )
        self.trajectories = self._build_trajectories(config["target"])

        update_shape = None
        if "update_shape" in options:
            shape = options["update_shape"]
            update_shape = FlattopWindow(
                duration=T,
                rise_time=float(shape["rise_time"]),
                shape=shape.get("shape", "sinsq"),
            )

        check_convergence = None
        if "J_T_threshold" in options:
            check_convergence = j_t_below(float(options["J_T_threshold"]))

        self.problem = ControlProblem(
            trajectories=self.trajectories,
            tlist=self.tlist,
            J_T=options.get("J_T", "J_T_re" if self._is_open else "J_T_sm"),
            iter_stop=int(options.get("iter_stop", 5000)),
            check_convergence=check_convergence,
            prop_method=options.get("prop_method", "expm_multiply"),
            update_shape=update_shape,
            lambda_a=float(options.get("lambda_a", 1.0)),
            use_threads=bool(options.get("use_threads", False)),
        )
        logger.debug(
            f"Built '{config['model']}' problem with {len(self.trajectories)} "
            f"trajectories of dimension {self.generator.dim}"
        )

    @property
    def _is_open(self) -> bool:
        return self.generator.kind == "liouvillian"

    def _build_trajectories(self, target):
        dims = self.model.dims
        if "gate" in target:
            gate = get_gate(target["gate"])
            basis = logical_basis([tuple(label) for label in target["basis"]], dims)
            if self._is_open:
                return three_state_trajectories(
                    self.generator,
                    gate,
                    basis,
                    weights=target.get("weights", (20, 1, 1)),
                    purities=target.get("purities"),
                )
            return [
                Trajectory(initial_state=b, generator=self.generator, target_state=t)
                for b, t in zip(basis, target_basis(gate, basis))
            ]

        if "initial" in target and "final" in target:
            initial = ket(target["initial"], dims)
            final = ket(target["final"], dims)
            if self._is_open:
                initial = np.outer(initial, initial.conj()).reshape(-1, order="F")
                final = np.outer(final, final.conj()).reshape(-1, order="F")
            return state_to_state_trajectory(self.generator, initial, final)

        raise KeyError("Target needs either 'gate' and 'basis', or 'initial' and 'final'")

    def propagate_guess(self) -> Dict[str, Any]:
        """
        Propagate all trajectories under the guess controls.

        Returns:
            A dictionary with the final "states" and the value "J_T" of the
            functional.
        """
        states = self.problem.propagate()
        J_T = self.problem.J_T(states, self.problem.trajectories)
        logger.info(f"Guess J_T ({self.problem.J_T.__name__}): {J_T:.6e}")
        return {"states": states, "J_T": J_T}

    def get_config_summary(self) -> str:
        """
        Get a summary of the current configuration.

        Returns:
            A string summary of the configuration parameters.
        """
        options = self.config.get("optimization", {})
        grid = self.config["time_grid"]
        summary = []
        summary.append(f"Model: {self.config['model']}")
        summary.append(f"Subsystem dimensions: {self.model.dims}")
        summary.append(
            f"Generator: {self.generator.kind} of dimension {self.generator.dim}"
        )
        summary.append(f"Time grid: T={grid['T']} ns, {grid['nt']} points")
        summary.append(f"Controls: {len(self.controls)}")
        summary.append(f"Trajectories: {len(self.trajectories)}")
        summary.append(
            "Weights: "
            + ", ".join(f"{traj.weight:.4g}" for traj in self.trajectories)
        )
        summary.append(f"Functional: {self.problem.J_T.__name__}")
        summary.append(f"Max iterations: {self.problem.iter_stop}")
        if "J_T_threshold" in options:
            summary.append(f"Target J_T: {options['J_T_threshold']}")

        target = self.config["target"]
        if "gate" in target:
            summary.append(f"Target gate: {target['gate']}")
        else:
            summary.append(f"Transfer: {target['initial']} -> {target['final']}")

        return "\n".join(summary)

    def update_parameter(self, parameter_path: str, value: Any):
        """
        Update a specific parameter in the configuration and rebuild the problem.

        Args:
            parameter_path: Dot-separated path to the parameter (e.g., "optimization.iter_stop")
            value: New value for the parameter

        If the rebuild fails, the configuration and the built problem are left
        as they were.
        """
        keys = parameter_path.split(".")
        config = copy.deepcopy(self.config)
        config_ref = config

        for key in keys[:-1]:
            if key not in config_ref:
                raise KeyError(f"Parameter path '{parameter_path}' not found")
            config_ref = config_ref[key]

        final_key = keys[-1]
        if final_key not in config_ref:
            raise KeyError(f"Parameter path '{parameter_path}' not found")

        config_ref[final_key] = value
        previous = dict(self.__dict__)
        self.config = config
        try:
            self._build()
        except Exception:
            self.__dict__.update(previous)
            raise


def load_config(config_path: Union[str, Path]) -> TrajectoryAPI:
    """
    Load a configuration from a JSON file.

    Args:
        config_path: Path to the JSON configuration file

    Returns:
        A TrajectoryAPI instance with the loaded configuration
    """
    return TrajectoryAPI(config_path)


def evaluate_from_config(config: Union[str, Path, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Build a problem from a configuration and propagate the guess controls.

    Returns:
        The result of :meth:`TrajectoryAPI.propagate_guess`.
    """
    return TrajectoryAPI(config).propagate_guess()


# Convenience functions for loading the provided example configurations
def load_dissipative_gate_config() -> TrajectoryAPI:
    """Load the dissipative √iSWAP gate on two transmons."""
    return TrajectoryAPI("dissipative_sqrt_iswap.json")


def load_state_to_state_config() -> TrajectoryAPI:
    """Load the two-level state-to-state transfer."""
    return TrajectoryAPI("tls_state_to_state.json")
