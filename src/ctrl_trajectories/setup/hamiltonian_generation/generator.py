r"""Time-dependent generators of motion.

A generator is a static operator plus a sum of operators with scalar,
time-dependent coefficients:

.. math::

    G(t) = G_0 + \sum_k u_k(t)\, G_k

For a Hamiltonian the propagation follows the TDSE convention
:math:`\partial_t \Psi = -\mathrm{i}\, G(t) \Psi`. A Liouvillian acts on
vectorized density matrices and may use either the same ``"TDSE"`` convention
or the Liouville-von Neumann convention ``"LvN"``,
:math:`\partial_t \vec\rho = G(t)\, \vec\rho`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import scipy.sparse as sp

from ctrl_trajectories.conditions.errors import DimensionError

CONVENTIONS = ("TDSE", "LvN")
KINDS = ("hamiltonian", "liouvillian")


@dataclass(frozen=True, eq=False)
class Generator:
    """Static term plus ordered ``(operator, control)`` pairs.

    Controls are pure callables of time. Operators are stored as CSR matrices
    and are not modified after construction, so a generator can be shared
    between trajectories that are propagated in parallel.
    """

    drift: Any
    terms: tuple[tuple[Any, Callable[[float], complex]], ...] = ()
    kind: str = "hamiltonian"
    convention: str = "TDSE"
    _controls: tuple = field(init=False, repr=False)

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"Unknown generator kind '{self.kind}'")
        if self.convention not in CONVENTIONS:
            raise ValueError(
                f"Unknown convention '{self.convention}'. Available: {CONVENTIONS}"
            )

        drift = sp.csr_matrix(self.drift, dtype=complex)
        if drift.shape[0] != drift.shape[1]:
            raise DimensionError(f"Drift operator must be square, got {drift.shape}")

        terms = []
        for op, control in self.terms:
            op = sp.csr_matrix(op, dtype=complex)
            if op.shape != drift.shape:
                raise DimensionError(
                    f"Control operator of shape {op.shape} does not match "
                    f"drift of shape {drift.shape}"
                )
            if not callable(control):
                raise TypeError(f"Control {control!r} is not callable")
            terms.append((op, control))

        controls = []
        for _, control in terms:
            if not any(control is c for c in controls):
                controls.append(control)

        object.__setattr__(self, "drift", drift)
        object.__setattr__(self, "terms", tuple(terms))
        object.__setattr__(self, "_controls", tuple(controls))

    @property
    def dim(self) -> int:
        return self.drift.shape[0]

    @property
    def ops(self) -> list:
        """All operators, drift first."""
        return [self.drift] + [op for op, _ in self.terms]

    @property
    def controls(self) -> tuple:
        """Distinct controls, in order of first appearance."""
        return self._controls

    def at(self, t: float):
        """Evaluate the generator at time ``t`` as a sparse matrix."""
        G = self.drift.copy()
        for op, control in self.terms:
            G = G + complex(control(t)) * op
        return G

    def substitute(self, mapping) -> Generator:
        """Return a copy with controls replaced according to ``mapping``.

        Lookup is by identity, so two equal but distinct control objects are
        replaced independently.
        """
        pairs = list(mapping.items()) if hasattr(mapping, "items") else list(mapping)

        def lookup(control):
            for old, new in pairs:
                if control is old:
                    return new
            return control

        return Generator(
            self.drift,
            tuple((op, lookup(control)) for op, control in self.terms),
            kind=self.kind,
            convention=self.convention,
        )


def hamiltonian(drift, *terms) -> Generator:
    """Closed-system generator ``(H0, (H1, u1), (H2, u2), ...)``."""
    return Generator(drift, tuple(terms), kind="hamiltonian", convention="TDSE")
