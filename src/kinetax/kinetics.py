"""Gas-phase kinetics manager.

GasKinetics owns the reaction registry, one dense evaluator table per kinetic
law, and a two-level cache:

* the temperature pass (``update_rates_T``) evaluates everything that depends
  on T alone: Arrhenius and Blowers-Masel rate constants, falloff limits and
  blending-function temperature terms, the temperature halves of Plog and
  Chebyshev, and the reciprocal equilibrium constants;
* the concentration pass (``update_rates_C``) evaluates third-body
  concentrations, falloff blending and the pressure halves of Plog and
  Chebyshev, producing the forward rate constants.

Each pass is skipped while its inputs are unchanged. Rates of progress are
assembled from the forward rate constants on demand (``update_rop``).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from .constants import BIG_NUMBER, R_GAS
from .errors import (
    DuplicateReactionError,
    InvalidReactionError,
    KineticsError,
    UndeclaredSpeciesError,
)
from .falloff import falloff_rates, falloff_temperature_terms, third_body_concentrations
from .rates import (
    arrhenius_rates,
    blowers_masel_rates,
    chebyshev_rates,
    chebyshev_temperature_terms,
    plog_interpolate,
    plog_node_log_rates,
)
from .reaction import Reaction, ReactionKind
from .registry import ReactionRegistry
from .tables import (
    build_arrhenius_table,
    build_blowers_masel_table,
    build_chebyshev_table,
    build_falloff_table,
    build_plog_table,
    build_third_body_table,
)

logger = logging.getLogger(__name__)

_TABLE_BUILDERS = {
    ReactionKind.ELEMENTARY: build_arrhenius_table,
    ReactionKind.THIRD_BODY: build_arrhenius_table,
    ReactionKind.FALLOFF: build_falloff_table,
    ReactionKind.PLOG: build_plog_table,
    ReactionKind.CHEBYSHEV: build_chebyshev_table,
    ReactionKind.BLOWERS_MASEL: build_blowers_masel_table,
}

_ENHANCED = (ReactionKind.THIRD_BODY, ReactionKind.FALLOFF)


@jax.jit
def rates_of_progress(kf, kr, conc, stoich):
    """Forward and reverse rates of progress [mol/m^3/s].

    q_f = kf * prod(C^order), q_r = kr * prod(C^nu_prod)
    """
    ropf = kf * jnp.prod(jnp.power(conc, stoich.reactant_orders), axis=1)
    ropr = kr * jnp.prod(jnp.power(conc, stoich.product_stoich), axis=1)
    return ropf, ropr


@jax.jit
def production_rates(ropf, ropr, stoich):
    """Species creation and destruction rates [mol/m^3/s]."""
    creation = stoich.product_stoich.T @ ropf + stoich.reactant_stoich.T @ ropr
    destruction = stoich.reactant_stoich.T @ ropf + stoich.product_stoich.T @ ropr
    return creation, destruction


class GasKinetics:
    """Kinetics manager for a gas-phase mechanism.

    Args:
        thermo: the thermodynamic-state collaborator (see ``thermo.ThermoPhase``).
        skip_undeclared_species: make ``add_reaction`` return False instead of
            raising when a reaction names a species ``thermo`` does not know.
        skip_undeclared_third_bodies: silently drop efficiencies of unknown
            species instead of rejecting the reaction.

    One instance belongs to one simulation loop; it is not reentrant.
    """

    def __init__(self, thermo, skip_undeclared_species=False, skip_undeclared_third_bodies=False):
        self.thermo = thermo
        self.registry = ReactionRegistry(thermo.species_names)
        self.skip_undeclared_species = skip_undeclared_species
        self.skip_undeclared_third_bodies = skip_undeclared_third_bodies

        self._tables = {}
        self._third_body_tables = {}
        self._members = {}
        self._stoich = None
        self._tables_dirty = True
        self._multipliers = np.ones(0)

        # recompute counters, observable by callers
        self.counters = {"rates_T": 0, "rates_C": 0, "rop": 0}

        self._t_generation = 0
        self._c_generation = -1
        self.invalidate_cache()

    # ------------------------------------------------------------------
    # Mechanism setup

    @property
    def n_reactions(self) -> int:
        return len(self.registry)

    @property
    def n_species(self) -> int:
        return self.registry.n_species

    def reaction(self, i: int) -> Reaction:
        return self.registry[i]

    def reactions(self) -> List[Reaction]:
        return list(self.registry)

    def reaction_kind(self, i: int) -> ReactionKind:
        return self.registry.kind(i)

    def is_reversible(self, i: int) -> bool:
        return self.registry[i].reversible

    def _check_species(self, reaction: Reaction) -> Reaction:
        known = set(self.registry.species_names)
        missing = [name for name in reaction.participants if name not in known]
        if missing:
            raise UndeclaredSpeciesError(reaction.equation, missing)

        tb = reaction.third_body
        if tb is not None:
            unknown = sorted(name for name in tb.efficiencies if name not in known)
            if unknown:
                if not self.skip_undeclared_third_bodies:
                    raise UndeclaredSpeciesError(reaction.equation, unknown)
                logger.debug("Dropping third-body efficiencies of undeclared species %s in '%s'",
                             unknown, reaction.equation)
                reaction = dataclasses.replace(reaction, third_body=tb.without(unknown))
        return reaction

    def add_reaction(self, reaction: Reaction, resize: bool = True) -> bool:
        """Register a reaction; returns False when it was skipped.

        Reactions are skipped (with a warning) when they duplicate a
        registered reaction, or name undeclared species while
        ``skip_undeclared_species`` is set. Malformed reactions and undeclared
        species otherwise raise. Nothing is registered on failure.

        With ``resize=False`` the evaluator tables are rebuilt lazily, which
        is cheaper when loading many reactions.
        """
        if not isinstance(reaction, Reaction):
            raise InvalidReactionError(f"Expected a Reaction, got {type(reaction).__name__}")
        try:
            reaction = self._check_species(reaction)
            self.registry.check_duplicate(reaction)
        except UndeclaredSpeciesError as err:
            if not self.skip_undeclared_species:
                raise
            logger.warning("Skipping reaction: %s", err)
            return False
        except DuplicateReactionError as err:
            logger.warning("Skipping reaction: %s", err)
            return False

        self.registry.add(reaction)
        self._multipliers = np.append(self._multipliers, 1.0)
        self._tables_dirty = True
        if resize:
            self.resize_reactions()
        else:
            self.invalidate_cache()
        return True

    def add_reactions(self, reactions: Sequence[Reaction]) -> List[bool]:
        """Register many reactions, rebuilding the tables once.

        Returns one flag per reaction telling whether it was accepted.
        """
        accepted = [self.add_reaction(r, resize=False) for r in reactions]
        self.resize_reactions()
        n_skipped = accepted.count(False)
        if n_skipped:
            logger.warning("Skipped %d of %d reactions", n_skipped, len(accepted))
        return accepted

    def modify_reaction(self, i: int, reaction: Reaction):
        """Replace the parameters of reaction ``i``.

        Kind, participants and reversibility must stay the same. All caches
        are invalidated.
        """
        if not isinstance(reaction, Reaction):
            raise InvalidReactionError(f"Expected a Reaction, got {type(reaction).__name__}")
        reaction = self._check_species(reaction)
        self.registry.replace(i, reaction)
        self._tables_dirty = True
        self.resize_reactions()

    def resize_reactions(self):
        """Rebuild every evaluator table from the registry."""
        reg = self.registry
        tables, third_body_tables, members = {}, {}, {}
        for kind in ReactionKind:
            members[kind] = np.array(reg.members(kind), dtype=int)
            if len(members[kind]) == 0:
                continue
            reactions = reg.reactions_of(kind)
            tables[kind] = _TABLE_BUILDERS[kind]([r.rate for r in reactions])
            if kind in _ENHANCED:
                third_body_tables[kind] = build_third_body_table(
                    [r.third_body for r in reactions], reg.species_index, reg.n_species)

        self._tables = tables
        self._third_body_tables = third_body_tables
        self._members = members
        self._stoich = reg.build_stoichiometry()
        self._tables_dirty = False
        logger.debug("Rebuilt evaluator tables: %s",
                     {kind.value: len(idx) for kind, idx in members.items() if len(idx)})
        self.invalidate_cache()

    def _ensure_tables(self):
        if self._tables_dirty:
            self.resize_reactions()

    def invalidate_cache(self):
        """Force the next query to redo both the T and the C pass."""
        self._temp = None
        self._log_temp = None
        self._logp_ref = None
        self._logc_ref = None
        self._pres = None
        self._conc = None
        self._rop_ok = False

    # ------------------------------------------------------------------
    # Rate multipliers

    def multiplier(self, i: int) -> float:
        return float(self._multipliers[i])

    def set_multiplier(self, value: float, i: int = None):
        """Scale the forward (and so reverse) rate of reaction ``i``, or of all."""
        if i is None:
            self._multipliers[:] = value
        else:
            self._multipliers[i] = value
        self._rop_ok = False

    # ------------------------------------------------------------------
    # Update passes

    def _has(self, kind: ReactionKind) -> bool:
        return kind in self._tables

    def update_rates_T(self):
        """Recompute temperature-dependent quantities if T has changed."""
        thermo = self.thermo
        T = thermo.temperature
        logp_ref = np.log(thermo.reference_pressure)
        if T == self._temp and logp_ref == self._logp_ref:
            return
        self._ensure_tables()

        log_T = np.log(T)
        recip_T = 1.0 / T
        rfn = np.zeros(self.n_reactions)
        K = ReactionKind

        for kind in (K.ELEMENTARY, K.THIRD_BODY):
            if self._has(kind):
                rfn[self._members[kind]] = arrhenius_rates(log_T, recip_T, self._tables[kind])

        if self._has(K.FALLOFF):
            table = self._tables[K.FALLOFF]
            self._rfn_low = np.asarray(arrhenius_rates(log_T, recip_T, table.low))
            self._rfn_high = np.asarray(arrhenius_rates(log_T, recip_T, table.high))
            self._falloff_work = falloff_temperature_terms(T, table)

        if self._has(K.BLOWERS_MASEL):
            idx = self._members[K.BLOWERS_MASEL]
            delta_H = np.asarray(self._stoich.net_stoich)[idx] @ thermo.partial_molar_enthalpies()
            rfn[idx] = blowers_masel_rates(log_T, recip_T, delta_H, self._tables[K.BLOWERS_MASEL])

        if self._has(K.PLOG):
            self._plog_node_log_k = plog_node_log_rates(log_T, recip_T, self._tables[K.PLOG])

        if self._has(K.CHEBYSHEV):
            self._cheb_T_terms = chebyshev_temperature_terms(T, self._tables[K.CHEBYSHEV])

        self._rfn = rfn
        self._logc_ref = np.log(thermo.reference_concentration)
        self._update_kc(T)

        self._temp = T
        self._log_temp = log_T
        self._logp_ref = logp_ref
        self._t_generation += 1
        self._rop_ok = False
        self.counters["rates_T"] += 1

    def _update_kc(self, T):
        # reciprocal equilibrium constants, zero for irreversible reactions
        stoich = self._stoich
        mu0 = self.thermo.standard_chemical_potentials()
        self._delta_gibbs0 = np.asarray(stoich.net_stoich) @ mu0
        delta_n = np.asarray(stoich.delta_n)
        with np.errstate(over="ignore"):
            rkcn = np.exp(self._delta_gibbs0 / (R_GAS * T) - delta_n * self._logc_ref)
        rkcn = np.minimum(rkcn, BIG_NUMBER)
        rkcn[~np.asarray(stoich.is_reversible)] = 0.0
        self._rkcn = rkcn

    def update_rates_C(self):
        """Recompute concentration- and pressure-dependent rate constants.

        Runs the temperature pass first, since falloff blending and the
        Plog/Chebyshev lookups need its results.
        """
        self.update_rates_T()
        thermo = self.thermo
        P = thermo.pressure
        conc = np.array(thermo.concentrations, dtype=float)
        if (P == self._pres and self._c_generation == self._t_generation
                and self._conc is not None and np.array_equal(conc, self._conc)):
            return

        K = ReactionKind
        kf = self._rfn.copy()
        total = thermo.molar_density

        if self._has(K.THIRD_BODY):
            self._concm_3b = np.asarray(
                third_body_concentrations(conc, total, self._third_body_tables[K.THIRD_BODY]))
            kf[self._members[K.THIRD_BODY]] *= self._concm_3b

        if self._has(K.FALLOFF):
            self._concm_falloff = np.asarray(
                third_body_concentrations(conc, total, self._third_body_tables[K.FALLOFF]))
            kf[self._members[K.FALLOFF]] = falloff_rates(
                self._rfn_low, self._rfn_high, self._concm_falloff,
                self._falloff_work, self._tables[K.FALLOFF])

        if self._has(K.PLOG):
            kf[self._members[K.PLOG]] = plog_interpolate(
                np.log(P), self._plog_node_log_k, self._tables[K.PLOG])

        if self._has(K.CHEBYSHEV):
            kf[self._members[K.CHEBYSHEV]] = chebyshev_rates(
                np.log10(P), self._cheb_T_terms, self._tables[K.CHEBYSHEV])

        bad = np.flatnonzero(~np.isfinite(kf))
        if bad.size:
            i = int(bad[0])
            raise KineticsError(
                f"Non-finite forward rate constant {kf[i]} for reaction {i} ({self.registry[i].equation})"
            )

        self._kf = kf
        self._pres = P
        self._conc = conc
        self._c_generation = self._t_generation
        self._rop_ok = False
        self.counters["rates_C"] += 1

    def update_rop(self):
        """Assemble forward, reverse and net rates of progress."""
        self.update_rates_C()
        if self._rop_ok:
            return
        kf = self._kf * self._multipliers
        kr = kf * self._rkcn
        ropf, ropr = rates_of_progress(kf, kr, self._conc, self._stoich)
        self._ropf = np.asarray(ropf)
        self._ropr = np.asarray(ropr)
        self._ropnet = self._ropf - self._ropr
        self._rop_ok = True
        self.counters["rop"] += 1

    # ------------------------------------------------------------------
    # Queries

    def get_fwd_rate_constants(self) -> np.ndarray:
        self.update_rates_C()
        return self._kf * self._multipliers

    def get_rev_rate_constants(self) -> np.ndarray:
        """Reverse rate constants; exactly zero for irreversible reactions."""
        self.update_rates_C()
        return self._kf * self._multipliers * self._rkcn

    def get_equilibrium_constants(self) -> np.ndarray:
        """Equilibrium constants in concentration units, for every reaction."""
        self.update_rates_T()
        delta_n = np.asarray(self._stoich.delta_n)
        with np.errstate(over="ignore"):
            return np.exp(-self._delta_gibbs0 / (R_GAS * self._temp) + delta_n * self._logc_ref)

    def get_delta_gibbs0(self) -> np.ndarray:
        """Standard Gibbs energy change of each reaction [J/mol]."""
        self.update_rates_T()
        return self._delta_gibbs0.copy()

    def get_delta_enthalpy(self) -> np.ndarray:
        """Enthalpy change of each reaction at the current state [J/mol]."""
        self._ensure_tables()
        return np.asarray(self._stoich.net_stoich) @ self.thermo.partial_molar_enthalpies()

    def get_fwd_rates_of_progress(self) -> np.ndarray:
        self.update_rop()
        return self._ropf.copy()

    def get_rev_rates_of_progress(self) -> np.ndarray:
        self.update_rop()
        return self._ropr.copy()

    def get_net_rates_of_progress(self) -> np.ndarray:
        self.update_rop()
        return self._ropnet.copy()

    def get_creation_rates(self) -> np.ndarray:
        self.update_rop()
        creation, _ = production_rates(self._ropf, self._ropr, self._stoich)
        return np.asarray(creation)

    def get_destruction_rates(self) -> np.ndarray:
        self.update_rop()
        _, destruction = production_rates(self._ropf, self._ropr, self._stoich)
        return np.asarray(destruction)

    def get_net_production_rates(self) -> np.ndarray:
        self.update_rop()
        creation, destruction = production_rates(self._ropf, self._ropr, self._stoich)
        return np.asarray(creation - destruction)
