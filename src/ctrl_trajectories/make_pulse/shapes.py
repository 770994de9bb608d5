"""Pulse shapes and control amplitudes as explicit function objects.

Controls are callables of time. Instead of closures over module constants, the
shaped controls below carry their parameters as fields, so they can be
inspected, compared and serialized, and evaluated from several threads.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np

from ctrl_trajectories import units

WINDOW_SHAPES = ("sinsq", "blackman")


def box(t, t_start, t_stop):
    """1 for t_start <= t <= t_stop, 0 otherwise."""
    return 1.0 if t_start <= t <= t_stop else 0.0


def blackman(t, t_start, t_stop, a=0.16):
    """
    Blackman window between t_start and t_stop, zero outside.

    :param t: Time.
    :param t_start: Start of the window.
    :param t_stop: End of the window.
    :param a: Blackman coefficient, 0.16 for the standard window.
    :return: Window value in [0, 1].
    """
    if not t_start <= t <= t_stop:
        return 0.0
    x = (t - t_start) / (t_stop - t_start)
    return 0.5 * (1 - a) - 0.5 * np.cos(2 * np.pi * x) + 0.5 * a * np.cos(4 * np.pi * x)


def flattop(t, T, t_rise, t_start=0.0, func="sinsq"):
    """
    Flat-top window that switches on over ``t_rise``, stays at 1, and switches off
    over ``t_rise`` before ``T``.

    :param t: Time.
    :param T: End of the window.
    :param t_rise: Duration of the switch-on (and switch-off).
    :param t_start: Start of the window.
    :param func: "sinsq" for a sine-squared ramp, "blackman" for half a
        Blackman window.
    :return: Window value in [0, 1], zero outside [t_start, T].
    """
    if func not in WINDOW_SHAPES:
        raise ValueError(
            f"Unknown window shape '{func}'. Available: {', '.join(WINDOW_SHAPES)}"
        )
    if t_rise <= 0:
        raise ValueError(f"t_rise must be positive, got {t_rise}")
    if not t_start <= t <= T:
        return 0.0
    if func == "sinsq":
        if t <= t_start + t_rise:
            return float(np.sin(0.5 * np.pi * (t - t_start) / t_rise) ** 2)
        if t >= T - t_rise:
            return float(np.sin(0.5 * np.pi * (T - t) / t_rise) ** 2)
        return 1.0
    if t <= t_start + t_rise:
        return float(blackman(t, t_start, t_start + 2 * t_rise))
    if t >= T - t_rise:
        return float(blackman(t, T - 2 * t_rise, T))
    return 1.0


@dataclass(frozen=True)
class FlattopWindow:
    """Flat-top window over [start, start + duration]."""

    duration: float
    rise_time: float
    shape: str = "sinsq"
    start: float = 0.0

    def __post_init__(self):
        if self.shape not in WINDOW_SHAPES:
            raise ValueError(
                f"Unknown window shape '{self.shape}'. "
                f"Available: {', '.join(WINDOW_SHAPES)}"
            )
        if self.rise_time <= 0 or 2 * self.rise_time > self.duration:
            raise ValueError(
                f"rise_time must be positive and at most half the duration, "
                f"got rise_time={self.rise_time}, duration={self.duration}"
            )

    def __call__(self, t) -> float:
        return flattop(
            t,
            T=self.start + self.duration,
            t_rise=self.rise_time,
            t_start=self.start,
            func=self.shape,
        )

    def as_dict(self) -> dict:
        return {"type": "flattop_window", **asdict(self)}


@dataclass(frozen=True)
class ShapedControl:
    """Control amplitude ``amplitude * window(t)``."""

    amplitude: float
    window: FlattopWindow

    def __call__(self, t) -> float:
        return self.amplitude * self.window(t)

    def as_dict(self) -> dict:
        return {
            "type": "shaped",
            "amplitude": self.amplitude,
            "window": self.window.as_dict(),
        }


@dataclass(frozen=True)
class ConstantControl:
    value: float = 0.0

    def __call__(self, t) -> float:
        return self.value

    def as_dict(self) -> dict:
        return {"type": "constant", "value": self.value}


def _as_amplitudes(values):
    """Float array for real amplitudes, complex array otherwise."""
    values = np.array(values)
    if np.iscomplexobj(values):
        return values.astype(complex)
    return values.astype(float)


class PiecewiseControl:
    """Control given by one amplitude per interval of a time grid.

    This is the form in which optimized controls come back from an optimizer.
    Outside the grid the control is zero. Complex values are kept complex,
    real values are stored as floats.
    """

    def __init__(self, values, tlist):
        values = _as_amplitudes(values)
        tlist = np.array(tlist, dtype=float)
        if values.ndim != 1 or values.size != tlist.size - 1:
            raise ValueError(
                f"Expected {tlist.size - 1} values for a grid of {tlist.size} "
                f"points, got {values.size}"
            )
        values.setflags(write=False)
        tlist.setflags(write=False)
        self.values = values
        self.tlist = tlist

    def __call__(self, t):
        if t < self.tlist[0] or t > self.tlist[-1]:
            return 0.0
        n = np.searchsorted(self.tlist, t, side="right") - 1
        return self.values[min(n, self.values.size - 1)].item()

    def __repr__(self):
        return f"PiecewiseControl(n_intervals={self.values.size})"

    def as_dict(self) -> dict:
        return {
            "type": "piecewise",
            "values": self.values.tolist(),
            "tlist": self.tlist.tolist(),
        }


def discretize(control, tlist):
    """Evaluate a control on the midpoints of the intervals of ``tlist``."""
    tlist = np.asarray(tlist, dtype=float)
    midpoints = 0.5 * (tlist[1:] + tlist[:-1])
    return _as_amplitudes([control(t) for t in midpoints])


def control_from_config(spec, duration):
    """Build a control from a config entry.

    ``{"type": "flattop", "amplitude": ..., "rise_time": ..., "shape": ...}`` or
    ``{"type": "constant", "value": ...}``. An optional ``"unit"`` (a key of
    ``units.UNITS``) converts the amplitude or value to internal units.
    """
    kind = spec.get("type", "flattop")
    if kind == "constant":
        return ConstantControl(
            float(units.to_internal(spec.get("value", 0.0), spec.get("unit")))
        )
    if kind == "flattop":
        window = FlattopWindow(
            duration=float(spec.get("duration", duration)),
            rise_time=float(spec["rise_time"]),
            shape=spec.get("shape", "sinsq"),
            start=float(spec.get("start", 0.0)),
        )
        amplitude = units.to_internal(spec["amplitude"], spec.get("unit"))
        return ShapedControl(float(amplitude), window)
    raise ValueError(f"Unknown control type '{kind}'. Available: flattop, constant")
