import time
import jax
import numpy as np
import os
import sys
from tabulate import tabulate

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

jax.config.update("jax_enable_x64", True)

from kinetax import (
    ONE_ATM,
    ArrheniusRate,
    BlowersMaselRate,
    ChebyshevRate,
    FalloffRate,
    PlogRate,
    Reaction,
    Solution,
    Species,
    ThirdBody,
    Troe,
)


def synthetic_mechanism(n_species, n_per_kind, seed=0):
    """Random species and reactions covering every kinetic law."""
    rng = np.random.default_rng(seed)
    species = []
    for k in range(n_species):
        coeffs = [rng.uniform(2.5, 5.0), 0.0, 0.0, 0.0, 0.0, rng.uniform(-3e4, 3e4), rng.uniform(10, 30)]
        species.append(Species(f"S{k}", coeffs, coeffs))
    names = [sp.name for sp in species]

    def pick():
        a, b, c = (str(name) for name in rng.choice(names, 3, replace=False))
        return {a: 1, b: 1}, {c: 1}

    def arr():
        return ArrheniusRate(10 ** rng.uniform(6, 13), rng.uniform(-1, 1), rng.uniform(0, 2e5))

    reactions = []
    for _ in range(n_per_kind):
        reac, prod = pick()
        reactions.append(Reaction(reac, prod, arr(), duplicate=True))
        reac, prod = pick()
        reactions.append(Reaction(reac, prod, arr(), third_body=ThirdBody({names[0]: 2.0}), duplicate=True))
        reac, prod = pick()
        reactions.append(Reaction(reac, prod, FalloffRate(arr(), arr(), Troe(0.6, 100.0, 2000.0)),
                                  duplicate=True))
        reac, prod = pick()
        reactions.append(Reaction(reac, prod, PlogRate([(P, arr()) for P in (0.1 * ONE_ATM, ONE_ATM, 10 * ONE_ATM)]),
                                  duplicate=True))
        reac, prod = pick()
        data = rng.uniform(-1, 1, (4, 3))
        data[0, 0] = 10.0
        reactions.append(Reaction(reac, prod, ChebyshevRate((300.0, 3000.0), (1e3, 1e7), data),
                                  duplicate=True))
        reac, prod = pick()
        reactions.append(Reaction(reac, prod, BlowersMaselRate(1e10, 0.0, 4e4, 4e5), duplicate=True))
    return species, reactions


def time_query(fn, n_runs=20):
    times = []
    for _ in range(n_runs):
        start = time.perf_counter()
        fn()
        times.append(time.perf_counter() - start)
    return np.median(times)


def benchmark_rates():
    results = []
    for n_species, n_per_kind in [(10, 5), (50, 50), (100, 250)]:
        species, reactions = synthetic_mechanism(n_species, n_per_kind)
        gas = Solution(species, reactions)
        kin = gas.kinetics
        gas.TPX = 1500.0, ONE_ATM, np.ones(n_species)

        # Warmup (compiles every kernel)
        kin.get_net_production_rates()

        def cached():
            kin.get_net_production_rates()

        def new_pressure():
            gas.P = ONE_ATM * np.random.uniform(0.5, 2.0)
            kin.get_net_production_rates()

        def new_temperature():
            gas.T = np.random.uniform(1000.0, 2000.0)
            kin.get_net_production_rates()

        def invalidated():
            kin.invalidate_cache()
            kin.get_net_production_rates()

        row = [n_species, kin.n_reactions]
        for fn in (cached, new_pressure, new_temperature, invalidated):
            row.append(time_query(fn) * 1000)
        print(f"{n_species} species / {kin.n_reactions} reactions: counters {kin.counters}")
        results.append(row)

    print("\nRate Evaluation Benchmark (median ms per query):")
    print(tabulate(results, headers=["Species", "Reactions", "Cached", "New P", "New T", "Invalidated"],
                   tablefmt="github", floatfmt=".4f"))


if __name__ == "__main__":
    benchmark_rates()
