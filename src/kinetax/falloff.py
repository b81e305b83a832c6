"""Third-body efficiencies and pressure-falloff blending.

Falloff reactions blend a low-pressure limit k0 and a high-pressure limit
k_inf through the reduced pressure Pr = k0 [M] / k_inf:

    k = k_inf * Pr / (1 + Pr) * F(Pr, T)        (falloff)
    k = k0 / (1 + Pr) * F(Pr, T)                 (chemically activated)

Supported blending functions F are Lindemann (F = 1), Troe and SRI. The
temperature-only part of F is computed once per temperature pass
(``falloff_temperature_terms``); the Pr-dependent part is finished in the
concentration pass (``falloff_rates``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import jax
import jax.numpy as jnp
import numpy as np

from .constants import BIG_NUMBER, SMALL_NUMBER
from .errors import InvalidRateError
from .rates import ArrheniusRate

# Blending-function codes stored in FalloffTable.blend_kind
LINDEMANN = 0
TROE = 1
SRI = 2


@dataclass(frozen=True)
class ThirdBody:
    """Collision efficiencies of an enhanced third body [M].

    Species not listed in ``efficiencies`` use ``default_efficiency``.
    """

    efficiencies: Mapping[str, float] = field(default_factory=dict)
    default_efficiency: float = 1.0

    def __post_init__(self):
        if not np.isfinite(self.default_efficiency) or self.default_efficiency < 0.0:
            raise InvalidRateError(
                f"ThirdBody: default efficiency must be >= 0, got {self.default_efficiency}"
            )
        for name, eff in self.efficiencies.items():
            if not np.isfinite(eff) or eff < 0.0:
                raise InvalidRateError(f"ThirdBody: efficiency of '{name}' must be >= 0, got {eff}")
        object.__setattr__(self, "efficiencies", dict(self.efficiencies))

    def efficiency(self, species: str) -> float:
        return self.efficiencies.get(species, self.default_efficiency)

    def without(self, species) -> "ThirdBody":
        """Copy with the listed species' efficiencies dropped."""
        drop = set(species)
        kept = {k: v for k, v in self.efficiencies.items() if k not in drop}
        return ThirdBody(kept, self.default_efficiency)


@dataclass(frozen=True)
class Lindemann:
    """F = 1."""

    code = LINDEMANN


@dataclass(frozen=True)
class Troe:
    """Troe centre-broadening with 3 or 4 parameters (T2 optional)."""

    A: float
    T3: float
    T1: float
    T2: Optional[float] = None

    code = TROE

    def __post_init__(self):
        values = {"A": self.A, "T3": self.T3, "T1": self.T1}
        if self.T2 is not None:
            values["T2"] = self.T2
        for name, value in values.items():
            if not np.isfinite(value):
                raise InvalidRateError(f"Troe: parameter '{name}' must be finite, got {value!r}")

    def params(self):
        # 1/T3 and 1/T1 with a zero parameter switching its term off
        rT3 = 1.0 / self.T3 if abs(self.T3) > SMALL_NUMBER else 1000.0
        rT1 = 1.0 / self.T1 if abs(self.T1) > SMALL_NUMBER else 1000.0
        # a zero T2 drops the third term, as a missing one does
        T2 = 0.0 if self.T2 is None else self.T2
        has_T2 = 1.0 if T2 != 0.0 else 0.0
        return [self.A, rT3, rT1, T2, has_T2]


@dataclass(frozen=True)
class Sri:
    """SRI blending: F = d [a exp(-b/T) + exp(-T/c)]^X T^e."""

    a: float
    b: float
    c: float
    d: float = 1.0
    e: float = 0.0

    code = SRI

    def __post_init__(self):
        for name in ("a", "b", "c", "d", "e"):
            value = getattr(self, name)
            if not np.isfinite(value):
                raise InvalidRateError(f"Sri: parameter '{name}' must be finite, got {value!r}")
        if self.c <= 0.0:
            raise InvalidRateError(f"Sri: parameter 'c' must be positive, got {self.c}")
        if self.d <= 0.0:
            raise InvalidRateError(f"Sri: parameter 'd' must be positive, got {self.d}")

    def params(self):
        return [self.a, self.b, self.c, self.d, self.e]


@dataclass(frozen=True)
class FalloffRate:
    """Low/high pressure Arrhenius limits joined by a blending function."""

    low: ArrheniusRate
    high: ArrheniusRate
    blending: object = field(default_factory=Lindemann)
    chemically_activated: bool = False

    def __post_init__(self):
        if not isinstance(self.low, ArrheniusRate):
            raise InvalidRateError(f"FalloffRate: missing low-pressure limit (got {self.low!r})")
        if not isinstance(self.high, ArrheniusRate):
            raise InvalidRateError(f"FalloffRate: missing high-pressure limit (got {self.high!r})")
        if not isinstance(self.blending, (Lindemann, Troe, Sri)):
            raise InvalidRateError(f"FalloffRate: unknown blending function {self.blending!r}")


# --- batch kernels ---------------------------------------------------------

@jax.jit
def third_body_concentrations(conc, total, table):
    """Effective [M] for every reaction in a ThirdBodyTable.

    M = default * C_tot + sum_k (eff_k - default) C_k
    """
    return table.default * total + table.efficiency_delta @ conc


@jax.jit
def falloff_temperature_terms(T, table):
    """Temperature-only part of the blending functions.

    Returns an (n, 2) work array: Troe rows hold [log10 Fcent, 0]; SRI rows
    hold [log10(a exp(-b/T) + exp(-T/c)), log10(d T^e)]; Lindemann rows are 0.
    """
    troe = table.troe
    f_cent = ((1.0 - troe[:, 0]) * jnp.exp(-T * troe[:, 1])
              + troe[:, 0] * jnp.exp(-T * troe[:, 2])
              + troe[:, 4] * jnp.exp(-troe[:, 3] / T))
    log10_fcent = jnp.log10(jnp.maximum(f_cent, SMALL_NUMBER))

    sri = table.sri
    sri_base = sri[:, 0] * jnp.exp(-sri[:, 1] / T) + jnp.exp(-T / sri[:, 2])
    log10_base = jnp.log10(jnp.maximum(sri_base, SMALL_NUMBER))
    log10_scale = jnp.log10(sri[:, 3]) + sri[:, 4] * jnp.log10(T)

    is_troe = table.blend_kind == TROE
    is_sri = table.blend_kind == SRI
    col0 = jnp.where(is_troe, log10_fcent, jnp.where(is_sri, log10_base, 0.0))
    col1 = jnp.where(is_sri, log10_scale, 0.0)
    return jnp.stack([col0, col1], axis=1)


@jax.jit
def falloff_rates(k0, k_inf, concm, work, table):
    """Effective rate constants of falloff reactions.

    Where k_inf is numerically zero the reaction is treated as limited by the
    low-pressure rate: k = k0 [M] for falloff and k = k0 for chemically
    activated reactions.
    """
    has_high = k_inf > SMALL_NUMBER
    pr = concm * k0 / jnp.where(has_high, k_inf, 1.0)
    pr = jnp.clip(pr, 0.0, BIG_NUMBER)
    lpr = jnp.log10(jnp.maximum(pr, SMALL_NUMBER))

    log10_fcent = work[:, 0]
    c = -0.4 - 0.67 * log10_fcent
    n = 0.75 - 1.27 * log10_fcent
    denom = n - 0.14 * (lpr + c)
    f1 = (lpr + c) / jnp.where(jnp.abs(denom) > 1e-5, denom, 1e-5)
    troe_lgf = log10_fcent / (1.0 + f1 * f1)

    x = 1.0 / (1.0 + lpr * lpr)
    sri_lgf = x * work[:, 0] + work[:, 1]

    lgf = jnp.where(table.blend_kind == TROE, troe_lgf,
                    jnp.where(table.blend_kind == SRI, sri_lgf, 0.0))
    F = jnp.power(10.0, lgf)

    k_falloff = k_inf * (pr / (1.0 + pr)) * F
    k_chemact = k0 * F / (1.0 + pr)
    k = jnp.where(table.chemically_activated, k_chemact, k_falloff)

    k_low_limited = jnp.where(table.chemically_activated, k0, k0 * concm)
    return jnp.where(has_high, k, k_low_limited)
