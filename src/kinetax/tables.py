import equinox as eqx
import jax
import jax.numpy as jnp
import numpy as np

from .constants import R_GAS
from .falloff import LINDEMANN, SRI, TROE


class ArrheniusTable(eqx.Module):
    """Dense Arrhenius parameters for one group of reactions."""

    n_reactions: int = eqx.field(static=True)
    log_A: jax.Array        # (n,) log|A|, -inf where A == 0
    sign_A: jax.Array       # (n,) sign(A)
    b: jax.Array            # (n,)
    Ea_R: jax.Array         # (n,) activation temperature [K]


class BlowersMaselTable(eqx.Module):
    n_reactions: int = eqx.field(static=True)
    log_A: jax.Array        # (n,)
    b: jax.Array            # (n,)
    Ea0: jax.Array          # (n,) J/mol
    w: jax.Array            # (n,) J/mol


class PlogTable(eqx.Module):
    """Plog nodes padded to (n, max_nodes[, max_terms]).

    Padded nodes repeat the reaction's last node; padded terms have A = 0.
    """

    n_reactions: int = eqx.field(static=True)
    n_nodes: jax.Array      # (n,) int
    log_P: jax.Array        # (n, max_nodes) ln(P / Pa)
    log_A: jax.Array        # (n, max_nodes, max_terms)
    sign_A: jax.Array       # (n, max_nodes, max_terms)
    b: jax.Array            # (n, max_nodes, max_terms)
    Ea_R: jax.Array         # (n, max_nodes, max_terms)


class ChebyshevTable(eqx.Module):
    n_reactions: int = eqx.field(static=True)
    T_min: jax.Array        # (n,)
    T_max: jax.Array        # (n,)
    log10_P_min: jax.Array  # (n,)
    log10_P_max: jax.Array  # (n,)
    coeffs: jax.Array       # (n, max_T_terms, max_P_terms), zero padded


class ThirdBodyTable(eqx.Module):
    """Efficiency sets stored as default + per-species deviation."""

    n_reactions: int = eqx.field(static=True)
    default: jax.Array            # (n,)
    efficiency_delta: jax.Array   # (n, n_species) eff_k - default


class FalloffTable(eqx.Module):
    n_reactions: int = eqx.field(static=True)
    low: ArrheniusTable
    high: ArrheniusTable
    blend_kind: jax.Array             # (n,) LINDEMANN / TROE / SRI
    troe: jax.Array                   # (n, 5) [A, 1/T3, 1/T1, T2, has_T2]
    sri: jax.Array                    # (n, 5) [a, b, c, d, e]
    chemically_activated: jax.Array   # (n,) bool


class StoichTable(eqx.Module):
    """Dense stoichiometry of the whole mechanism."""

    n_reactions: int = eqx.field(static=True)
    n_species: int = eqx.field(static=True)
    reactant_orders: jax.Array    # (n_reactions, n_species) forward orders
    reactant_stoich: jax.Array    # (n_reactions, n_species)
    product_stoich: jax.Array     # (n_reactions, n_species) also reverse orders
    net_stoich: jax.Array         # (n_reactions, n_species)
    delta_n: jax.Array            # (n_reactions,) sum of net_stoich
    is_reversible: jax.Array      # (n_reactions,) bool


def _log_abs(A):
    A = np.asarray(A, dtype=float)
    with np.errstate(divide="ignore"):
        return np.where(A != 0.0, np.log(np.abs(A)), -np.inf)


def build_arrhenius_table(rates) -> ArrheniusTable:
    A = np.array([r.A for r in rates], dtype=float)
    return ArrheniusTable(
        n_reactions=len(rates),
        log_A=jnp.array(_log_abs(A)),
        sign_A=jnp.array(np.sign(A)),
        b=jnp.array([r.b for r in rates], dtype=float),
        Ea_R=jnp.array([r.Ea / R_GAS for r in rates], dtype=float),
    )


def build_blowers_masel_table(rates) -> BlowersMaselTable:
    return BlowersMaselTable(
        n_reactions=len(rates),
        log_A=jnp.array(_log_abs([r.A for r in rates])),
        b=jnp.array([r.b for r in rates], dtype=float),
        Ea0=jnp.array([r.Ea0 for r in rates], dtype=float),
        w=jnp.array([r.w for r in rates], dtype=float),
    )


def build_plog_table(rates) -> PlogTable:
    n = len(rates)
    max_nodes = max((len(r.nodes) for r in rates), default=1)
    max_terms = max((r.max_terms for r in rates), default=1)

    n_nodes = np.zeros(n, dtype=int)
    log_P = np.zeros((n, max_nodes))
    A = np.zeros((n, max_nodes, max_terms))
    b = np.zeros((n, max_nodes, max_terms))
    Ea_R = np.zeros((n, max_nodes, max_terms))

    for i, rate in enumerate(rates):
        n_nodes[i] = len(rate.nodes)
        for j in range(max_nodes):
            # repeat the last real node into the padding
            pressure, terms = rate.nodes[min(j, len(rate.nodes) - 1)]
            log_P[i, j] = np.log(pressure)
            for t, term in enumerate(terms):
                A[i, j, t] = term.A
                b[i, j, t] = term.b
                Ea_R[i, j, t] = term.Ea / R_GAS

    return PlogTable(
        n_reactions=n,
        n_nodes=jnp.array(n_nodes),
        log_P=jnp.array(log_P),
        log_A=jnp.array(_log_abs(A)),
        sign_A=jnp.array(np.sign(A)),
        b=jnp.array(b),
        Ea_R=jnp.array(Ea_R),
    )


def build_chebyshev_table(rates) -> ChebyshevTable:
    n = len(rates)
    max_T = max((r.n_temperature for r in rates), default=1)
    max_P = max((r.n_pressure for r in rates), default=1)
    coeffs = np.zeros((n, max_T, max_P))
    for i, rate in enumerate(rates):
        coeffs[i, :rate.n_temperature, :rate.n_pressure] = rate.coeffs

    return ChebyshevTable(
        n_reactions=n,
        T_min=jnp.array([r.temperature_range[0] for r in rates], dtype=float),
        T_max=jnp.array([r.temperature_range[1] for r in rates], dtype=float),
        log10_P_min=jnp.array([np.log10(r.pressure_range[0]) for r in rates], dtype=float),
        log10_P_max=jnp.array([np.log10(r.pressure_range[1]) for r in rates], dtype=float),
        coeffs=jnp.array(coeffs),
    )


def build_third_body_table(third_bodies, species_index, n_species) -> ThirdBodyTable:
    """Pack efficiency sets; ``species_index`` maps a name to its column."""
    n = len(third_bodies)
    default = np.array([tb.default_efficiency for tb in third_bodies], dtype=float)
    delta = np.zeros((n, n_species))
    for i, tb in enumerate(third_bodies):
        for name, eff in tb.efficiencies.items():
            delta[i, species_index(name)] = eff - tb.default_efficiency
    return ThirdBodyTable(
        n_reactions=n,
        default=jnp.array(default),
        efficiency_delta=jnp.array(delta),
    )


def build_falloff_table(rates) -> FalloffTable:
    n = len(rates)
    blend_kind = np.full(n, LINDEMANN, dtype=int)
    troe = np.zeros((n, 5))
    # neutral SRI row keeps exp(-T/c) finite for non-SRI reactions
    sri = np.tile([0.0, 0.0, 1.0, 1.0, 0.0], (n, 1))
    for i, rate in enumerate(rates):
        blend_kind[i] = rate.blending.code
        if rate.blending.code == TROE:
            troe[i] = rate.blending.params()
        elif rate.blending.code == SRI:
            sri[i] = rate.blending.params()

    return FalloffTable(
        n_reactions=n,
        low=build_arrhenius_table([r.low for r in rates]),
        high=build_arrhenius_table([r.high for r in rates]),
        blend_kind=jnp.array(blend_kind),
        troe=jnp.array(troe),
        sri=jnp.array(sri),
        chemically_activated=jnp.array([r.chemically_activated for r in rates], dtype=bool),
    )
