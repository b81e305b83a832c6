"""Small species sets and hand-written reference formulas shared by the tests."""

import math

import numpy as np

from kinetax import R_GAS, Species
from kinetax.falloff import falloff_rates, falloff_temperature_terms
from kinetax.rates import (
    chebyshev_rates,
    chebyshev_temperature_terms,
    plog_interpolate,
    plog_node_log_rates,
)
from kinetax.tables import build_chebyshev_table, build_falloff_table, build_plog_table


def const_cp_species(name, cp_R=3.5, h_offset=0.0, s_offset=20.0):
    """Constant-cp species: H/RT = cp_R + h_offset/(R T), S/R = cp_R ln T + s_offset.

    h_offset is in J/mol.
    """
    coeffs = [cp_R, 0.0, 0.0, 0.0, 0.0, h_offset / R_GAS, s_offset]
    return Species(name, coeffs, coeffs)


def toy_species():
    return [
        const_cp_species("A", 3.5, -2.0e4, 22.0),
        const_cp_species("B", 2.5, 1.0e4, 18.0),
        const_cp_species("C", 4.5, -6.0e4, 26.0),
        const_cp_species("AR", 2.5, 0.0, 17.0),
    ]


def g_RT(species, T):
    a = species.nasa_low
    return a[0] + a[5] / T - a[0] * math.log(T) - a[6]


def h_molar(species, T):
    a = species.nasa_low
    return (a[0] + a[5] / T) * R_GAS * T


def arrhenius(A, b, Ea, T):
    return A * T**b * math.exp(-Ea / (R_GAS * T))


def evaluate_plog(rate, T, P):
    table = build_plog_table([rate])
    node_log_k = plog_node_log_rates(np.log(T), 1.0 / T, table)
    return float(plog_interpolate(np.log(P), node_log_k, table)[0])


def evaluate_chebyshev(rate, T, P):
    table = build_chebyshev_table([rate])
    terms = chebyshev_temperature_terms(T, table)
    return float(chebyshev_rates(np.log10(P), terms, table)[0])


def evaluate_falloff(rate, T, M):
    table = build_falloff_table([rate])
    k0 = rate.low(T)
    k_inf = rate.high(T)
    work = falloff_temperature_terms(T, table)
    k = falloff_rates(np.array([k0]), np.array([k_inf]), np.array([M]), work, table)
    return float(k[0])


def troe_F(A, T3, T1, T2, T, pr):
    f_cent = (1 - A) * math.exp(-T / T3) + A * math.exp(-T / T1)
    if T2 is not None:
        f_cent += math.exp(-T2 / T)
    lf = math.log10(f_cent)
    c = -0.4 - 0.67 * lf
    n = 0.75 - 1.27 * lf
    f1 = (math.log10(pr) + c) / (n - 0.14 * (math.log10(pr) + c))
    return 10 ** (lf / (1 + f1 * f1))


def sri_F(a, b, c, d, e, T, pr):
    x = 1.0 / (1.0 + math.log10(pr) ** 2)
    return d * (a * math.exp(-b / T) + math.exp(-T / c)) ** x * T**e
