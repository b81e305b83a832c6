"""Rate-law parameter objects and their batch evaluators.

Each rate law comes in two halves: a small frozen parameter object that is
validated on construction, and a jitted kernel that evaluates every reaction
of that law at once from a dense table (see ``tables.py``).

All kernels work in natural-log space:

    log k = log A + b log T - Ea / (R T)

and only exponentiate at the end.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from .constants import PLOG_CHECK_TEMPERATURES, R_GAS
from .errors import InvalidRateError


def _require_finite(owner, **values):
    for name, value in values.items():
        if not np.isfinite(value):
            raise InvalidRateError(f"{owner}: parameter '{name}' must be finite, got {value!r}")


@dataclass(frozen=True)
class ArrheniusRate:
    """Modified Arrhenius expression k = A T^b exp(-Ea / RT).

    Ea is in J/mol. Negative pre-exponential factors are rejected unless
    ``allow_negative_A`` is set (used for summed Plog terms).
    """

    A: float
    b: float = 0.0
    Ea: float = 0.0
    allow_negative_A: bool = False

    def __post_init__(self):
        _require_finite("ArrheniusRate", A=self.A, b=self.b, Ea=self.Ea)
        if self.A < 0.0 and not self.allow_negative_A:
            raise InvalidRateError(f"ArrheniusRate: negative pre-exponential factor {self.A}")

    @property
    def activation_temperature(self) -> float:
        return self.Ea / R_GAS

    def __call__(self, T: float) -> float:
        if self.A == 0.0:
            return 0.0
        log_k = math.log(abs(self.A)) + self.b * math.log(T) - self.activation_temperature / T
        return math.copysign(math.exp(log_k), self.A)


@dataclass(frozen=True)
class BlowersMaselRate:
    """Arrhenius form whose barrier follows the reaction enthalpy.

    Ea0 is the intrinsic barrier and w the average bond dissociation energy,
    both in J/mol.
    """

    A: float
    b: float = 0.0
    Ea0: float = 0.0
    w: float = 0.0

    def __post_init__(self):
        _require_finite("BlowersMaselRate", A=self.A, b=self.b, Ea0=self.Ea0, w=self.w)
        if self.A < 0.0:
            raise InvalidRateError(f"BlowersMaselRate: negative pre-exponential factor {self.A}")
        if self.Ea0 < 0.0:
            raise InvalidRateError(f"BlowersMaselRate: intrinsic barrier must be >= 0, got {self.Ea0}")
        if self.w <= self.Ea0:
            raise InvalidRateError(
                f"BlowersMaselRate: bond energy w={self.w} must exceed Ea0={self.Ea0}"
            )

    def effective_activation_energy(self, delta_H: float) -> float:
        if delta_H < -4.0 * self.Ea0:
            return 0.0
        if delta_H > 4.0 * self.Ea0:
            return delta_H
        w, Ea0 = self.w, self.Ea0
        vp = 2.0 * w * (w + Ea0) / (w - Ea0)
        denom = vp * vp - 4.0 * w * w + delta_H * delta_H
        if denom == 0.0:
            return 0.0
        return (w + delta_H / 2.0) * (vp - 2.0 * w + delta_H) ** 2 / denom


@dataclass(frozen=True)
class PlogRate:
    """Arrhenius expressions tabulated at discrete pressures.

    ``rates`` is a sequence of ``(pressure [Pa], ArrheniusRate)`` pairs. Several
    entries at the same pressure are summed into one node.
    """

    rates: Sequence[Tuple[float, ArrheniusRate]]
    nodes: Tuple[Tuple[float, Tuple[ArrheniusRate, ...]], ...] = field(init=False, repr=False)

    def __post_init__(self):
        if len(self.rates) == 0:
            raise InvalidRateError("PlogRate: at least one pressure node is required")
        grouped = {}
        for entry in self.rates:
            try:
                pressure, rate = entry
            except (TypeError, ValueError):
                raise InvalidRateError(f"PlogRate: expected (pressure, ArrheniusRate), got {entry!r}")
            if not isinstance(rate, ArrheniusRate):
                raise InvalidRateError(f"PlogRate: node rate must be an ArrheniusRate, got {rate!r}")
            pressure = float(pressure)
            if not np.isfinite(pressure) or pressure <= 0.0:
                raise InvalidRateError(f"PlogRate: node pressure must be positive, got {pressure}")
            grouped.setdefault(pressure, []).append(rate)

        nodes = tuple((p, tuple(grouped[p])) for p in sorted(grouped))
        for pressure, terms in nodes:
            for T in PLOG_CHECK_TEMPERATURES:
                if sum(rate(T) for rate in terms) <= 0.0:
                    raise InvalidRateError(
                        f"PlogRate: non-positive rate constant at P={pressure} Pa, T={T} K"
                    )
        object.__setattr__(self, "nodes", nodes)

    @property
    def pressures(self):
        return tuple(p for p, _ in self.nodes)

    @property
    def max_terms(self) -> int:
        return max(len(terms) for _, terms in self.nodes)


@dataclass(frozen=True)
class ChebyshevRate:
    """Rate constant as a 2-D Chebyshev surface in (1/T, log P).

    ``data[t, p]`` multiplies phi_t(T~) phi_p(P~); the surface gives log10(k).
    """

    temperature_range: Tuple[float, float]
    pressure_range: Tuple[float, float]
    data: Sequence[Sequence[float]]

    def __post_init__(self):
        try:
            Tmin, Tmax = (float(x) for x in self.temperature_range)
            Pmin, Pmax = (float(x) for x in self.pressure_range)
        except (TypeError, ValueError):
            raise InvalidRateError("ChebyshevRate: ranges must be (min, max) pairs")
        if not 0.0 < Tmin < Tmax:
            raise InvalidRateError(f"ChebyshevRate: invalid temperature range ({Tmin}, {Tmax})")
        if not 0.0 < Pmin < Pmax:
            raise InvalidRateError(f"ChebyshevRate: invalid pressure range ({Pmin}, {Pmax})")
        coeffs = np.array(self.data, dtype=float)
        if coeffs.ndim != 2 or coeffs.size == 0:
            raise InvalidRateError("ChebyshevRate: data must be a non-empty 2-D array")
        if not np.all(np.isfinite(coeffs)):
            raise InvalidRateError("ChebyshevRate: data contains non-finite values")
        object.__setattr__(self, "temperature_range", (Tmin, Tmax))
        object.__setattr__(self, "pressure_range", (Pmin, Pmax))
        object.__setattr__(self, "data", tuple(tuple(row) for row in coeffs))

    @property
    def coeffs(self) -> np.ndarray:
        return np.array(self.data)

    @property
    def n_temperature(self) -> int:
        return len(self.data)

    @property
    def n_pressure(self) -> int:
        return len(self.data[0])


# --- batch evaluators ------------------------------------------------------

@jax.jit
def arrhenius_rates(log_T, recip_T, table):
    """Evaluate every entry of an ArrheniusTable at one temperature."""
    log_k = table.log_A + table.b * log_T - table.Ea_R * recip_T
    return table.sign_A * jnp.exp(log_k)


@jax.jit
def blowers_masel_rates(log_T, recip_T, delta_H, table):
    """Evaluate Blowers-Masel rate constants.

    delta_H: (n,) reaction enthalpies [J/mol] for the reactions in ``table``.
    """
    Ea0 = table.Ea0
    w = table.w
    vp = 2.0 * w * (w + Ea0) / (w - Ea0)
    denom = vp * vp - 4.0 * w * w + delta_H * delta_H
    safe_denom = jnp.where(denom == 0.0, 1.0, denom)
    Ea_mid = (w + 0.5 * delta_H) * (vp - 2.0 * w + delta_H) ** 2 / safe_denom
    Ea_mid = jnp.where(denom == 0.0, 0.0, Ea_mid)

    Ea = jnp.where(delta_H < -4.0 * Ea0, 0.0, jnp.where(delta_H > 4.0 * Ea0, delta_H, Ea_mid))
    log_k = table.log_A + table.b * log_T - Ea / R_GAS * recip_T
    return jnp.exp(log_k)


@jax.jit
def plog_node_log_rates(log_T, recip_T, table):
    """Temperature half of Plog: log of the summed rate at every node.

    Returns an (n, max_nodes) array. Padded nodes repeat the last real node.
    """
    log_k = table.log_A + table.b * log_T - table.Ea_R * recip_T
    k_node = jnp.sum(table.sign_A * jnp.exp(log_k), axis=-1)
    return jnp.log(k_node)


@jax.jit
def plog_interpolate(log_P, node_log_k, table):
    """Pressure half of Plog: log-linear interpolation between bracketing nodes.

    Pressures outside a reaction's node range clamp to the end node.
    """
    n_nodes = table.n_nodes
    lp = jnp.clip(log_P, table.log_P[:, 0], table.log_P[:, -1])

    # Lower bracketing node: number of nodes after the first that lie at or below lp
    above_first = jnp.sum(table.log_P[:, 1:] <= lp[:, None], axis=1)
    i1 = jnp.minimum(above_first, jnp.maximum(n_nodes - 2, 0))
    i2 = jnp.minimum(i1 + 1, n_nodes - 1)

    lp1 = jnp.take_along_axis(table.log_P, i1[:, None], axis=1)[:, 0]
    lp2 = jnp.take_along_axis(table.log_P, i2[:, None], axis=1)[:, 0]
    lk1 = jnp.take_along_axis(node_log_k, i1[:, None], axis=1)[:, 0]
    lk2 = jnp.take_along_axis(node_log_k, i2[:, None], axis=1)[:, 0]

    span = lp2 - lp1
    frac = jnp.where(span > 0.0, (lp - lp1) / jnp.where(span > 0.0, span, 1.0), 0.0)
    return jnp.exp(lk1 + (lk2 - lk1) * frac)


def _chebyshev_basis(x, n_terms):
    # phi_n(x) = cos(n arccos x), valid since x is clamped to [-1, 1]
    degrees = jnp.arange(n_terms)
    return jnp.cos(degrees[None, :] * jnp.arccos(x)[:, None])


@jax.jit
def chebyshev_temperature_terms(T, table):
    """Temperature half of Chebyshev: contract the T basis with the coefficients.

    Returns an (n, max_pressure_terms) array.
    """
    Tc = jnp.clip(T, table.T_min, table.T_max)
    inv_min = 1.0 / table.T_min
    inv_max = 1.0 / table.T_max
    Tr = (2.0 / Tc - inv_min - inv_max) / (inv_max - inv_min)
    Tr = jnp.clip(Tr, -1.0, 1.0)
    phi_T = _chebyshev_basis(Tr, table.coeffs.shape[1])
    return jnp.einsum("nt,ntp->np", phi_T, table.coeffs)


@jax.jit
def chebyshev_rates(log10_P, temperature_terms, table):
    """Pressure half of Chebyshev: finish the double sum and exponentiate."""
    lp = jnp.clip(log10_P, table.log10_P_min, table.log10_P_max)
    Pr = (2.0 * lp - table.log10_P_min - table.log10_P_max) / (table.log10_P_max - table.log10_P_min)
    Pr = jnp.clip(Pr, -1.0, 1.0)
    phi_P = _chebyshev_basis(Pr, table.coeffs.shape[2])
    log10_k = jnp.sum(temperature_terms * phi_P, axis=1)
    return jnp.power(10.0, log10_k)
