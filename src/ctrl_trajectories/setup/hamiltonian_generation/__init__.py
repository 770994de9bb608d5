from ctrl_trajectories.setup.hamiltonian_generation.generator import (
    Generator,
    hamiltonian,
)
from ctrl_trajectories.setup.hamiltonian_generation.liouvillian import (
    commutator_superoperator,
    dissipator_superoperator,
    liouvillian,
)
from ctrl_trajectories.setup.hamiltonian_generation.base import (
    GeneratorModel,
    get_model_class,
    list_models,
    register_model,
)

# These imports trigger the @register_model decorators
from ctrl_trajectories.setup.hamiltonian_generation.transmon import (
    TransmonModel,
    TransmonParameters,
    transmon_hamiltonian,
    transmon_liouvillian,
)
from ctrl_trajectories.setup.hamiltonian_generation.two_level import (
    TwoLevelModel,
    tls_hamiltonian,
)

__all__ = [
    "Generator",
    "hamiltonian",
    "liouvillian",
    "commutator_superoperator",
    "dissipator_superoperator",
    "GeneratorModel",
    "TransmonModel",
    "TransmonParameters",
    "TwoLevelModel",
    "register_model",
    "get_model_class",
    "list_models",
    "transmon_hamiltonian",
    "transmon_liouvillian",
    "tls_hamiltonian",
]
