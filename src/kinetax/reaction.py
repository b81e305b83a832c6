"""Reaction definitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import numpy as np

from .errors import InvalidReactionError
from .falloff import FalloffRate, ThirdBody
from .rates import ArrheniusRate, BlowersMaselRate, ChebyshevRate, PlogRate


class ReactionKind(enum.Enum):
    """Kinetic-law tag; each kind owns one evaluator table."""

    ELEMENTARY = "elementary"
    THIRD_BODY = "three-body"
    FALLOFF = "falloff"
    PLOG = "pressure-dependent-Arrhenius"
    CHEBYSHEV = "Chebyshev"
    BLOWERS_MASEL = "Blowers-Masel"


def _format_side(side: Mapping[str, float]) -> str:
    terms = []
    for name, nu in side.items():
        terms.append(name if nu == 1 else f"{nu:g} {name}")
    return " + ".join(terms)


@dataclass(frozen=True)
class Reaction:
    """One gas-phase reaction.

    Attributes:
        reactants: species -> stoichiometric coefficient.
        products: species -> stoichiometric coefficient.
        rate: ArrheniusRate, FalloffRate, PlogRate, ChebyshevRate or
            BlowersMaselRate.
        third_body: efficiencies of [M]. Required for three-body reactions;
            falloff reactions default to ``ThirdBody()``.
        reversible: whether a reverse rate is derived from Kc.
        orders: non-mass-action reaction orders for reactants (irreversible
            reactions only). Unlisted reactants use their stoichiometric
            coefficient.
        duplicate: allow another reaction with the same participants.
    """

    reactants: Mapping[str, float]
    products: Mapping[str, float]
    rate: Any
    third_body: Optional[ThirdBody] = None
    reversible: bool = True
    orders: Mapping[str, float] = field(default_factory=dict)
    duplicate: bool = False
    kind: ReactionKind = field(init=False)

    def __post_init__(self):
        for label, side in (("reactants", self.reactants), ("products", self.products)):
            for name, nu in side.items():
                if not np.isfinite(nu) or nu <= 0.0:
                    raise InvalidReactionError(
                        f"Stoichiometric coefficient of {label[:-1]} '{name}' must be positive, got {nu}"
                    )
        if not self.reactants:
            raise InvalidReactionError("A reaction needs at least one reactant")
        if not self.products:
            raise InvalidReactionError("A reaction needs at least one product")

        for name, order in self.orders.items():
            if name not in self.reactants:
                raise InvalidReactionError(f"Reaction order given for non-reactant '{name}'")
            if not np.isfinite(order) or order < 0.0:
                raise InvalidReactionError(f"Reaction order of '{name}' must be >= 0, got {order}")
        if self.orders and self.reversible:
            raise InvalidReactionError("Reaction orders may only be given for irreversible reactions")

        object.__setattr__(self, "reactants", dict(self.reactants))
        object.__setattr__(self, "products", dict(self.products))
        object.__setattr__(self, "orders", dict(self.orders))
        object.__setattr__(self, "kind", self._classify())

    def _classify(self) -> ReactionKind:
        rate = self.rate
        if isinstance(rate, FalloffRate):
            if self.third_body is None:
                object.__setattr__(self, "third_body", ThirdBody())
            return ReactionKind.FALLOFF
        if self.third_body is not None and not isinstance(rate, ArrheniusRate):
            raise InvalidReactionError(
                f"{type(rate).__name__} reactions cannot have an enhanced third body"
            )
        if isinstance(rate, ArrheniusRate):
            return ReactionKind.THIRD_BODY if self.third_body is not None else ReactionKind.ELEMENTARY
        if isinstance(rate, PlogRate):
            return ReactionKind.PLOG
        if isinstance(rate, ChebyshevRate):
            return ReactionKind.CHEBYSHEV
        if isinstance(rate, BlowersMaselRate):
            return ReactionKind.BLOWERS_MASEL
        raise InvalidReactionError(f"Unsupported rate parameterization: {rate!r}")

    @property
    def equation(self) -> str:
        if self.kind is ReactionKind.FALLOFF:
            suffix = " (+M)"
        elif self.kind is ReactionKind.THIRD_BODY:
            suffix = " + M"
        else:
            suffix = ""
        arrow = " <=> " if self.reversible else " => "
        return _format_side(self.reactants) + suffix + arrow + _format_side(self.products) + suffix

    @property
    def participants(self):
        """Every species named by the reaction (stoichiometry and orders)."""
        names = set(self.reactants) | set(self.products) | set(self.orders)
        return sorted(names)

    def order(self, species: str) -> float:
        return self.orders.get(species, self.reactants.get(species, 0.0))

    def __str__(self):
        return self.equation
