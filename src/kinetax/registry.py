"""Reaction registry: global reaction index <-> per-kind local index."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import jax.numpy as jnp
import numpy as np

from .errors import DuplicateReactionError, InvalidReactionError
from .reaction import Reaction, ReactionKind
from .tables import StoichTable

logger = logging.getLogger(__name__)


def _side_key(side):
    return tuple(sorted(side.items()))


def _third_body_key(reaction: Reaction):
    tb = reaction.third_body
    if tb is None:
        return None
    return (tb.default_efficiency, tuple(sorted(tb.efficiencies.items())))


class ReactionRegistry:
    """Ordered reactions grouped by kinetic-law kind.

    Every reaction has a global index (its registration order) and a local
    index within its kind. Evaluator tables are laid out by local index, so
    ``members(kind)[local]`` recovers the global index.
    """

    def __init__(self, species_names: Sequence[str]):
        self.species_names = tuple(species_names)
        self._species_index = {name: k for k, name in enumerate(self.species_names)}
        self._reactions: List[Reaction] = []
        self._local: List[int] = []
        self._members: Dict[ReactionKind, List[int]] = {kind: [] for kind in ReactionKind}

    def __len__(self):
        return len(self._reactions)

    def __getitem__(self, i) -> Reaction:
        return self._reactions[i]

    def __iter__(self):
        return iter(self._reactions)

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    def species_index(self, name: str) -> int:
        return self._species_index[name]

    def kind(self, i: int) -> ReactionKind:
        return self._reactions[i].kind

    def local_index(self, i: int) -> int:
        return self._local[i]

    def members(self, kind: ReactionKind) -> List[int]:
        return self._members[kind]

    def reactions_of(self, kind: ReactionKind) -> List[Reaction]:
        return [self._reactions[i] for i in self._members[kind]]

    def kinds_present(self):
        return [kind for kind, idx in self._members.items() if idx]

    def find_duplicate(self, reaction: Reaction) -> Optional[int]:
        """Index of a registered reaction that ``reaction`` would duplicate.

        Reactions marked ``duplicate`` never clash. Reversible reactions also
        clash with their reverse.
        """
        if reaction.duplicate:
            return None
        fwd = (_side_key(reaction.reactants), _side_key(reaction.products))
        rev = (fwd[1], fwd[0])
        tb_key = _third_body_key(reaction)
        for i, other in enumerate(self._reactions):
            if other.duplicate or other.kind is not reaction.kind:
                continue
            if _third_body_key(other) != tb_key:
                continue
            other_key = (_side_key(other.reactants), _side_key(other.products))
            if other_key == fwd:
                return i
            if other_key == rev and (reaction.reversible or other.reversible):
                return i
        return None

    def check_duplicate(self, reaction: Reaction):
        other = self.find_duplicate(reaction)
        if other is not None:
            raise DuplicateReactionError(reaction.equation, other)

    def add(self, reaction: Reaction) -> int:
        i = len(self._reactions)
        members = self._members[reaction.kind]
        self._reactions.append(reaction)
        self._local.append(len(members))
        members.append(i)
        logger.debug("Registered reaction %d (%s) as %s #%d",
                     i, reaction.equation, reaction.kind.value, self._local[i])
        return i

    def replace(self, i: int, reaction: Reaction):
        """Swap in new parameters for reaction ``i``, keeping index and kind."""
        if not 0 <= i < len(self._reactions):
            raise InvalidReactionError(f"Reaction index {i} out of range (0..{len(self) - 1})")
        old = self._reactions[i]
        if reaction.kind is not old.kind:
            raise InvalidReactionError(
                f"Cannot change kind of reaction {i} from {old.kind.value} to {reaction.kind.value}"
            )
        if reaction.reactants != old.reactants or reaction.products != old.products:
            raise InvalidReactionError(f"Cannot change participants of reaction {i} ({old.equation})")
        if reaction.reversible != old.reversible:
            raise InvalidReactionError(f"Cannot change reversibility of reaction {i} ({old.equation})")
        self._reactions[i] = reaction

    def build_stoichiometry(self) -> StoichTable:
        n_rxn, n_sp = len(self._reactions), self.n_species
        orders = np.zeros((n_rxn, n_sp))
        reac = np.zeros((n_rxn, n_sp))
        prod = np.zeros((n_rxn, n_sp))
        reversible = np.zeros(n_rxn, dtype=bool)

        for i, rxn in enumerate(self._reactions):
            for name, nu in rxn.reactants.items():
                reac[i, self._species_index[name]] = nu
                orders[i, self._species_index[name]] = rxn.order(name)
            for name, nu in rxn.products.items():
                prod[i, self._species_index[name]] = nu
            reversible[i] = rxn.reversible

        net = prod - reac
        return StoichTable(
            n_reactions=n_rxn,
            n_species=n_sp,
            reactant_orders=jnp.array(orders),
            reactant_stoich=jnp.array(reac),
            product_stoich=jnp.array(prod),
            net_stoich=jnp.array(net),
            delta_n=jnp.array(net.sum(axis=1)),
            is_reversible=jnp.array(reversible),
        )
