"""Thermodynamic-state collaborator for the kinetics manager.

``ThermoPhase`` is the contract GasKinetics relies on. ``IdealGasPhase`` is an
ideal-gas implementation backed by NASA-7 polynomials.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from .constants import ONE_ATM, R_GAS


class ThermoPhase(Protocol):
    """State queries consumed by GasKinetics."""

    species_names: Tuple[str, ...]

    @property
    def temperature(self) -> float: ...

    @property
    def pressure(self) -> float: ...

    @property
    def concentrations(self) -> np.ndarray:
        """Species molar concentrations [mol/m^3]."""
        ...

    @property
    def molar_density(self) -> float: ...

    @property
    def reference_pressure(self) -> float: ...

    @property
    def reference_concentration(self) -> float:
        """Concentration of the reference state, P_ref / RT [mol/m^3]."""
        ...

    def standard_chemical_potentials(self) -> np.ndarray:
        """Reference-state chemical potentials at the current T [J/mol]."""
        ...

    def partial_molar_enthalpies(self) -> np.ndarray:
        """Partial molar enthalpies at the current state [J/mol]."""
        ...


@dataclass(frozen=True)
class Species:
    """A species with two-range NASA-7 coefficients.

    ``nasa_low`` applies below ``T_mid``, ``nasa_high`` above it.
    """

    name: str
    nasa_low: Sequence[float]
    nasa_high: Sequence[float]
    T_mid: float = 1000.0

    def __post_init__(self):
        for label in ("nasa_low", "nasa_high"):
            coeffs = tuple(float(c) for c in getattr(self, label))
            if len(coeffs) != 7:
                raise ValueError(f"Species {self.name}: {label} needs 7 coefficients, got {len(coeffs)}")
            object.__setattr__(self, label, coeffs)


@jax.jit
def nasa7_h_RT_s_R(T, nasa_low, nasa_high, T_mid):
    """Non-dimensional enthalpy H/RT and entropy S/R for all species.

    H/RT = a0 + a1 T/2 + a2 T^2/3 + a3 T^3/4 + a4 T^4/5 + a5/T
    S/R  = a0 ln T + a1 T + a2 T^2/2 + a3 T^3/3 + a4 T^4/4 + a6
    """
    c = jnp.where((T > T_mid)[:, None], nasa_high, nasa_low)
    h_RT = (c[:, 0] + c[:, 1] * T / 2.0 + c[:, 2] * T**2 / 3.0
            + c[:, 3] * T**3 / 4.0 + c[:, 4] * T**4 / 5.0 + c[:, 5] / T)
    s_R = (c[:, 0] * jnp.log(T) + c[:, 1] * T + c[:, 2] * T**2 / 2.0
           + c[:, 3] * T**3 / 3.0 + c[:, 4] * T**4 / 4.0 + c[:, 6])
    return h_RT, s_R


@jax.jit
def nasa7_cp_R(T, nasa_low, nasa_high, T_mid):
    c = jnp.where((T > T_mid)[:, None], nasa_high, nasa_low)
    return c[:, 0] + c[:, 1] * T + c[:, 2] * T**2 + c[:, 3] * T**3 + c[:, 4] * T**4


class IdealGasPhase:
    """Ideal-gas mixture state (T, P, mole fractions).

    Changing ``reference_pressure`` changes every equilibrium constant; call
    ``GasKinetics.invalidate_cache()`` afterwards.
    """

    def __init__(self, species: Sequence[Species], reference_pressure: float = ONE_ATM):
        if len(species) == 0:
            raise ValueError("IdealGasPhase needs at least one species")
        names = [sp.name for sp in species]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate species names in {names}")
        self.species = tuple(species)
        self.species_names = tuple(names)
        self._index = {name: k for k, name in enumerate(names)}
        self._nasa_low = jnp.array([sp.nasa_low for sp in species])
        self._nasa_high = jnp.array([sp.nasa_high for sp in species])
        self._T_mid = jnp.array([sp.T_mid for sp in species])
        self._reference_pressure = float(reference_pressure)

        # Default state: 300 K, 1 atm, pure first species
        self._T = 300.0
        self._P = ONE_ATM
        self._X = np.zeros(self.n_species)
        self._X[0] = 1.0

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    def species_index(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise ValueError(f"Unknown species: {name}") from None

    def _parse_composition(self, value) -> np.ndarray:
        if isinstance(value, str):
            res = np.zeros(self.n_species)
            for part in value.split(","):
                spec, val = part.split(":")
                res[self.species_index(spec.strip())] = float(val)
            return res
        if isinstance(value, Mapping):
            res = np.zeros(self.n_species)
            for spec, val in value.items():
                res[self.species_index(spec)] = float(val)
            return res
        res = np.array(value, dtype=float)
        if res.shape != (self.n_species,):
            raise ValueError(f"Expected {self.n_species} values, got shape {res.shape}")
        return res

    # State
    @property
    def temperature(self) -> float:
        return self._T

    @property
    def pressure(self) -> float:
        return self._P

    @property
    def T(self): return self._T
    @T.setter
    def T(self, value):
        value = float(value)
        if not value > 0.0:
            raise ValueError(f"Temperature must be positive, got {value}")
        self._T = value

    @property
    def P(self): return self._P
    @P.setter
    def P(self, value):
        value = float(value)
        if not value > 0.0:
            raise ValueError(f"Pressure must be positive, got {value}")
        self._P = value

    @property
    def X(self): return self._X.copy()
    @X.setter
    def X(self, value):
        X = self._parse_composition(value)
        if np.any(X < 0.0) or X.sum() <= 0.0:
            raise ValueError("Mole fractions must be non-negative with a positive sum")
        self._X = X / X.sum()

    @property
    def TP(self): return self.T, self.P
    @TP.setter
    def TP(self, value):
        self.T, self.P = value

    @property
    def TPX(self): return self.T, self.P, self.X
    @TPX.setter
    def TPX(self, value):
        self.T, self.P, self.X = value

    @property
    def TC(self): return self.T, self.concentrations
    @TC.setter
    def TC(self, value):
        """Set temperature and species concentrations [mol/m^3]; P follows."""
        T, C = value
        C = self._parse_composition(C)
        if np.any(C < 0.0) or C.sum() <= 0.0:
            raise ValueError("Concentrations must be non-negative with a positive sum")
        self.T = T
        self.P = C.sum() * R_GAS * self.T
        self._X = C / C.sum()

    @property
    def molar_density(self) -> float:
        return self._P / (R_GAS * self._T)

    @property
    def concentrations(self) -> np.ndarray:
        return self._X * self.molar_density

    # Reference state
    @property
    def reference_pressure(self) -> float:
        return self._reference_pressure

    @reference_pressure.setter
    def reference_pressure(self, value):
        value = float(value)
        if not value > 0.0:
            raise ValueError(f"Reference pressure must be positive, got {value}")
        self._reference_pressure = value

    @property
    def reference_concentration(self) -> float:
        return self._reference_pressure / (R_GAS * self._T)

    # Species properties
    def _h_RT_s_R(self):
        T = jnp.atleast_1d(self._T)
        return nasa7_h_RT_s_R(T, self._nasa_low, self._nasa_high, self._T_mid)

    def standard_enthalpies_RT(self) -> np.ndarray:
        h_RT, _ = self._h_RT_s_R()
        return np.asarray(h_RT)

    def standard_entropies_R(self) -> np.ndarray:
        _, s_R = self._h_RT_s_R()
        return np.asarray(s_R)

    def standard_cp_R(self) -> np.ndarray:
        T = jnp.atleast_1d(self._T)
        return np.asarray(nasa7_cp_R(T, self._nasa_low, self._nasa_high, self._T_mid))

    def standard_chemical_potentials(self) -> np.ndarray:
        h_RT, s_R = self._h_RT_s_R()
        return np.asarray(h_RT - s_R) * R_GAS * self._T

    def partial_molar_enthalpies(self) -> np.ndarray:
        # ideal gas: no mixing enthalpy
        return self.standard_enthalpies_RT() * R_GAS * self._T
