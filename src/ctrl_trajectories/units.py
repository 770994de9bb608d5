"""Internal units: GHz and ns.

Angular frequencies carry an implicit factor 2π, since the propagation assumes
ħ = 1 and frequencies ν convert to energies as E = hν. MHz and μs are converted
to GHz and ns, respectively.
"""

import numpy as np

GHz = 2 * np.pi
MHz = 0.001 * GHz
ns = 1.0
us = 1000 * ns


def rate_from_time(time):
    """Convert a lifetime to a rate, with ``None`` or ``inf`` meaning no decay."""
    if time is None or np.isinf(time):
        return 0.0
    if time <= 0:
        raise ValueError(f"Lifetimes must be positive, got {time}")
    return 1.0 / time


UNITS = {"GHz": GHz, "MHz": MHz, "ns": ns, "us": us}


def to_internal(value, unit=None):
    """Convert ``value`` given in ``unit`` (a key of ``UNITS``) to internal units."""
    if unit is None:
        return value
    if unit not in UNITS:
        raise ValueError(f"Unknown unit '{unit}'. Available: {', '.join(UNITS)}")
    return value * UNITS[unit]
