import os
import sys
import jax
jax.config.update("jax_enable_x64", True)
import pytest

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from kinetax import (
    ONE_ATM,
    ArrheniusRate,
    ChebyshevRate,
    DuplicateReactionError,
    FalloffRate,
    InvalidReactionError,
    PlogRate,
    Reaction,
    ReactionKind,
    ThirdBody,
)
from kinetax.registry import ReactionRegistry

ARR = ArrheniusRate(1.0e10, 0.0, 1.0e4)


def test_classification_and_equation():
    elementary = Reaction({"H": 1, "O2": 1}, {"O": 1, "OH": 1}, ARR)
    three_body = Reaction({"H": 2}, {"H2": 1}, ARR, third_body=ThirdBody({"AR": 0.63}))
    falloff = Reaction({"H": 1, "O2": 1}, {"HO2": 1}, FalloffRate(ARR, ARR))
    irreversible = Reaction({"A": 1}, {"B": 1}, ARR, reversible=False)

    assert elementary.kind is ReactionKind.ELEMENTARY
    assert three_body.kind is ReactionKind.THIRD_BODY
    assert falloff.kind is ReactionKind.FALLOFF
    assert falloff.third_body == ThirdBody()

    assert elementary.equation == "H + O2 <=> O + OH"
    assert three_body.equation == "2 H + M <=> H2 + M"
    assert falloff.equation == "H + O2 (+M) <=> HO2 (+M)"
    assert str(irreversible) == "A => B"


def test_reaction_validation():
    with pytest.raises(InvalidReactionError):
        Reaction({}, {"B": 1}, ARR)
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 0}, ARR)
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 1}, "not a rate")
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 1}, PlogRate([(ONE_ATM, ARR)]), third_body=ThirdBody())
    # orders: reactants only, non-negative, irreversible reactions only
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 1}, ARR, reversible=False, orders={"B": 1.0})
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 1}, ARR, reversible=False, orders={"A": -1.0})
    with pytest.raises(InvalidReactionError):
        Reaction({"A": 1}, {"B": 1}, ARR, orders={"A": 0.5})


def test_orders_default_to_stoichiometry():
    rxn = Reaction({"A": 2, "B": 1}, {"C": 1}, ARR, reversible=False, orders={"B": 0.3})
    assert rxn.order("A") == 2
    assert rxn.order("B") == 0.3
    assert rxn.order("C") == 0.0


def test_registry_local_indices():
    reg = ReactionRegistry(["A", "B", "C"])
    cheb = ChebyshevRate((300.0, 2000.0), (1e3, 1e6), [[1.0]])
    reg.add(Reaction({"A": 1}, {"B": 1}, ARR))
    reg.add(Reaction({"B": 1}, {"C": 1}, cheb))
    reg.add(Reaction({"A": 1}, {"C": 1}, ARR))

    assert len(reg) == 3
    assert reg.members(ReactionKind.ELEMENTARY) == [0, 2]
    assert reg.members(ReactionKind.CHEBYSHEV) == [1]
    assert reg.local_index(2) == 1
    assert reg.kinds_present() == [ReactionKind.ELEMENTARY, ReactionKind.CHEBYSHEV]

    stoich = reg.build_stoichiometry()
    assert stoich.net_stoich.tolist() == [[-1, 1, 0], [0, -1, 1], [-1, 0, 1]]
    assert stoich.delta_n.tolist() == [0, 0, 0]


def test_registry_duplicates():
    reg = ReactionRegistry(["A", "B"])
    reg.add(Reaction({"A": 1}, {"B": 1}, ARR, reversible=False))
    # the reverse of an irreversible reaction is a different reaction
    assert reg.find_duplicate(Reaction({"B": 1}, {"A": 1}, ARR, reversible=False)) is None
    assert reg.find_duplicate(Reaction({"B": 1}, {"A": 1}, ARR)) == 0
    with pytest.raises(DuplicateReactionError):
        reg.check_duplicate(Reaction({"A": 1}, {"B": 1}, ARR, reversible=False))


def test_registry_replace():
    reg = ReactionRegistry(["A", "B"])
    reg.add(Reaction({"A": 1}, {"B": 1}, ARR))
    reg.replace(0, Reaction({"A": 1}, {"B": 1}, ArrheniusRate(5.0)))
    assert reg[0].rate.A == 5.0
    with pytest.raises(InvalidReactionError):
        reg.replace(0, Reaction({"A": 1}, {"B": 1}, ARR, third_body=ThirdBody()))
    with pytest.raises(InvalidReactionError):
        reg.replace(-1, Reaction({"A": 1}, {"B": 1}, ARR))


if __name__ == "__main__":
    try:
        test_classification_and_equation()
        test_registry_local_indices()
        print("Reaction validation passed!")
    except Exception as e:
        print(f"Reaction validation failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
