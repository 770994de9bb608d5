from __future__ import annotations

from abc import ABC, abstractmethod
from math import prod
from typing import Any, Callable, Sequence

from ctrl_trajectories.setup.hamiltonian_generation.generator import (
    Generator,
    hamiltonian,
)
from ctrl_trajectories.setup.hamiltonian_generation.liouvillian import liouvillian

# ======================================================================
# Generator model registry
# ======================================================================

_MODEL_REGISTRY: dict[str, type[GeneratorModel]] = {}


def register_model(name: str):
    """Decorator to register a :class:`GeneratorModel` subclass by name.

    Usage::

        @register_model("fluxonium")
        class FluxoniumModel(GeneratorModel):
            ...

    The model can then be looked up via :func:`get_model_class`.
    """

    def decorator(cls: type[GeneratorModel]) -> type[GeneratorModel]:
        if not (isinstance(cls, type) and issubclass(cls, GeneratorModel)):
            raise TypeError(
                f"Cannot register {cls!r}: must be a GeneratorModel subclass"
            )
        if name in _MODEL_REGISTRY:
            raise ValueError(
                f"Model name '{name}' is already registered to "
                f"{_MODEL_REGISTRY[name].__name__}"
            )
        _MODEL_REGISTRY[name] = cls
        return cls

    return decorator


def get_model_class(name: str) -> type[GeneratorModel]:
    """Look up a registered :class:`GeneratorModel` class by name.

    Raises :class:`KeyError` with a helpful message listing available names.
    """
    if name not in _MODEL_REGISTRY:
        available = ", ".join(sorted(_MODEL_REGISTRY.keys()))
        raise KeyError(
            f"Unknown model '{name}'. Available: {available or '(none registered)'}"
        )
    return _MODEL_REGISTRY[name]


def list_models() -> list[str]:
    """Return the names of all registered generator models."""
    return sorted(_MODEL_REGISTRY.keys())


# ======================================================================
# Abstract base class
# ======================================================================


class GeneratorModel(ABC):
    """Abstract base class for physical models that produce generators.

    A model fixes the operators of the bilinear control formulation

        H(t) = H_drift + sum_k  u_k(t) * H_ctrl_k

    and, for open systems, a set of rate-weighted collapse operators. The
    controls u_k(t) are supplied by the caller when a generator is requested,
    so one model instance can produce generators for different guess pulses.

    Subclasses must implement:
        - dims (property)      : subsystem dimensions
        - build_drift()        : the static Hamiltonian
        - build_control_ops()  : the fixed control operators
        - from_config()        : construct model instance from config dict

    Optionally:
        - collapse_operators() : Lindblad operators (default: closed system)
        - default_config()     : return a complete runnable config dict
    """

    @property
    @abstractmethod
    def dims(self) -> tuple[int, ...]:
        """Dimensions of the subsystems of the composite space."""
        ...

    @abstractmethod
    def build_drift(self):
        """Return the static Hamiltonian as a ``(D, D)`` sparse matrix."""
        ...

    @abstractmethod
    def build_control_ops(self) -> list:
        """Return the ``n_controls`` fixed control operators."""
        ...

    @classmethod
    @abstractmethod
    def from_config(cls, params: dict) -> GeneratorModel:
        """Construct a model instance from the ``"parameters"`` section of a config."""
        ...

    def collapse_operators(self) -> list:
        """Collapse operators scaled by the square root of their rates."""
        return []

    @classmethod
    def default_config(cls) -> dict:
        """Return a complete, runnable default configuration for this model."""
        raise NotImplementedError(f"{cls.__name__} does not provide a default_config")

    # ------------------------------------------------------------------
    # Generator construction (shared by all models)
    # ------------------------------------------------------------------

    @property
    def dim(self) -> int:
        """Hilbert space dimension D."""
        return prod(self.dims)

    @property
    def n_controls(self) -> int:
        return len(self.build_control_ops())

    def hamiltonian(self, controls: Sequence[Callable[[float], Any]]) -> Generator:
        ops = self.build_control_ops()
        if len(controls) != len(ops):
            raise ValueError(
                f"{type(self).__name__} has {len(ops)} control channel(s), "
                f"got {len(controls)} control(s)"
            )
        return hamiltonian(self.build_drift(), *zip(ops, controls))

    def liouvillian(
        self, controls: Sequence[Callable[[float], Any]], convention: str = "TDSE"
    ) -> Generator:
        return liouvillian(
            self.hamiltonian(controls), self.collapse_operators(), convention=convention
        )

    def generator(
        self,
        controls: Sequence[Callable[[float], Any]],
        open_system: bool | None = None,
        convention: str = "TDSE",
    ) -> Generator:
        """Hamiltonian or Liouvillian, depending on ``open_system``.

        With ``open_system=None`` a Liouvillian is built whenever the model
        has at least one collapse operator.
        """
        if open_system is None:
            open_system = len(self.collapse_operators()) > 0
        if open_system:
            return self.liouvillian(controls, convention=convention)
        return self.hamiltonian(controls)
