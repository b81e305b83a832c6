import os
import sys
import jax
jax.config.update("jax_enable_x64", True)
import numpy as np
import pytest

ct = pytest.importorskip("cantera")

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from kinetax import (
    ONE_ATM,
    ArrheniusRate,
    ChebyshevRate,
    FalloffRate,
    Lindemann,
    PlogRate,
    Sri,
    Troe,
)

from helpers import evaluate_chebyshev, evaluate_falloff, evaluate_plog

# Cantera takes activation energies in J/kmol
KMOL = 1000.0

TEMPERATURES = [400.0, 800.0, 1200.0, 2000.0]


def ct_arrhenius(A, b, Ea):
    return ct.Arrhenius(A, b, Ea * KMOL)


def test_arrhenius_matches_cantera():
    for A, b, Ea in [(1.0e13, 0.0, 0.0), (3.5e9, 0.7, 8.0e4), (2.0e6, -1.5, 1.2e5)]:
        ours = ArrheniusRate(A, b, Ea)
        theirs = ct.ArrheniusRate(A, b, Ea * KMOL)
        for T in TEMPERATURES:
            assert ours(T) == pytest.approx(theirs(T), rel=1e-12)


def test_plog_matches_cantera():
    nodes = [
        (0.01 * ONE_ATM, (1.2e10, 0.3, 2.0e4)),
        (ONE_ATM, (5.0e10, 0.1, 3.0e4)),
        (ONE_ATM, (1.0e9, 0.0, 1.0e4)),
        (100.0 * ONE_ATM, (8.0e11, -0.2, 4.0e4)),
    ]
    ours = PlogRate([(P, ArrheniusRate(*arr)) for P, arr in nodes])
    theirs = ct.PlogRate([(P, ct_arrhenius(*arr)) for P, arr in nodes])
    for T in TEMPERATURES:
        for P in [1.0e2, 0.01 * ONE_ATM, 0.3 * ONE_ATM, ONE_ATM, 7.0 * ONE_ATM, 1.0e8]:
            assert evaluate_plog(ours, T, P) == pytest.approx(theirs(T, P), rel=1e-10)


def test_chebyshev_matches_cantera():
    data = [
        [8.2883, -1.1397, -0.12059, 0.016034],
        [1.9764, 1.0037, 7.2865e-03, -0.030432],
        [0.3177, 0.26889, 0.094806, -7.6385e-03],
    ]
    ours = ChebyshevRate((290.0, 3000.0), (1000.0, 1.0e7), data)
    theirs = ct.ChebyshevRate(temperature_range=(290.0, 3000.0), pressure_range=(1000.0, 1.0e7),
                              data=np.array(data))
    for T in TEMPERATURES:
        for P in [2000.0, ONE_ATM, 5.0e6]:
            assert evaluate_chebyshev(ours, T, P) == pytest.approx(theirs(T, P), rel=1e-10)


@pytest.mark.parametrize("blending, ct_cls, coeffs", [
    (Lindemann(), "LindemannRate", None),
    (Troe(0.7346, 94.0, 1756.0, 5182.0), "TroeRate", [0.7346, 94.0, 1756.0, 5182.0]),
    (Troe(0.562, 91.0, 5836.0), "TroeRate", [0.562, 91.0, 5836.0]),
    (Sri(1.106, 6769.0, 1.0e-10, 1.0, 0.0), "SriRate", [1.106, 6769.0, 1.0e-10, 1.0, 0.0]),
])
def test_falloff_matches_cantera(blending, ct_cls, coeffs):
    low, high = (1.0e10, -0.8, 0.0), (2.0e7, 0.3, 1.5e4)
    ours = FalloffRate(ArrheniusRate(*low), ArrheniusRate(*high), blending)
    kwargs = {"low": ct_arrhenius(*low), "high": ct_arrhenius(*high)}
    if coeffs is not None:
        kwargs["falloff_coeffs"] = coeffs
    theirs = getattr(ct, ct_cls)(**kwargs)
    for T in TEMPERATURES:
        for M in [1.0e-6, 1.0e-3, 1.0, 1.0e3]:
            k_ours = evaluate_falloff(ours, T, M)
            k_theirs = theirs(T, M)
            print(f"{ct_cls} T={T} M={M}: {k_ours:.8e} vs {k_theirs:.8e}")
            assert k_ours == pytest.approx(k_theirs, rel=1e-9)


if __name__ == "__main__":
    try:
        test_arrhenius_matches_cantera()
        test_plog_matches_cantera()
        test_chebyshev_matches_cantera()
        print("Cantera cross-check passed!")
    except Exception as e:
        print(f"Cantera cross-check failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
