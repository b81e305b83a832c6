"""Kinetax: cached gas-phase reaction rates on JAX."""

import jax

jax.config.update("jax_enable_x64", True)

from .constants import ONE_ATM, R_GAS
from .errors import (
    DuplicateReactionError,
    InvalidRateError,
    InvalidReactionError,
    KineticsError,
    UndeclaredSpeciesError,
)
from .falloff import FalloffRate, Lindemann, Sri, ThirdBody, Troe
from .kinetics import GasKinetics
from .rates import ArrheniusRate, BlowersMaselRate, ChebyshevRate, PlogRate
from .reaction import Reaction, ReactionKind
from .solution import Solution
from .thermo import IdealGasPhase, Species, ThermoPhase

__all__ = [
    "ONE_ATM",
    "R_GAS",
    "ArrheniusRate",
    "BlowersMaselRate",
    "ChebyshevRate",
    "DuplicateReactionError",
    "FalloffRate",
    "GasKinetics",
    "IdealGasPhase",
    "InvalidRateError",
    "InvalidReactionError",
    "KineticsError",
    "Lindemann",
    "PlogRate",
    "Reaction",
    "ReactionKind",
    "Solution",
    "Species",
    "Sri",
    "ThermoPhase",
    "ThirdBody",
    "Troe",
    "UndeclaredSpeciesError",
]
