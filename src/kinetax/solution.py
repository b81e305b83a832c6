import numpy as np

from .kinetics import GasKinetics
from .thermo import IdealGasPhase


class Solution:
    """An ideal-gas phase bundled with its kinetics manager.

    This class is intended for ease of use and state management. Setting the
    state goes through the phase; the kinetics manager notices the change on
    the next query.
    """

    def __init__(self, species, reactions=(), **kinetics_options):
        self.thermo = IdealGasPhase(species)
        self.kinetics = GasKinetics(self.thermo, **kinetics_options)
        if reactions:
            self.kinetics.add_reactions(reactions)

    @property
    def species_names(self): return self.thermo.species_names

    @property
    def n_species(self): return self.thermo.n_species

    @property
    def n_reactions(self): return self.kinetics.n_reactions

    def reaction(self, i): return self.kinetics.reaction(i)

    # State
    @property
    def T(self): return self.thermo.T
    @T.setter
    def T(self, value): self.thermo.T = value

    @property
    def P(self): return self.thermo.P
    @P.setter
    def P(self, value): self.thermo.P = value

    @property
    def X(self): return self.thermo.X
    @X.setter
    def X(self, value): self.thermo.X = value

    @property
    def TP(self): return self.thermo.TP
    @TP.setter
    def TP(self, value): self.thermo.TP = value

    @property
    def TPX(self): return self.thermo.TPX
    @TPX.setter
    def TPX(self, value): self.thermo.TPX = value

    @property
    def TC(self): return self.thermo.TC
    @TC.setter
    def TC(self, value): self.thermo.TC = value

    def set_TPX(self, T, P, X):
        self.TPX = T, P, X

    @property
    def concentrations(self): return self.thermo.concentrations

    # Kinetics
    @property
    def forward_rate_constants(self): return self.kinetics.get_fwd_rate_constants()

    @property
    def reverse_rate_constants(self): return self.kinetics.get_rev_rate_constants()

    @property
    def equilibrium_constants(self): return self.kinetics.get_equilibrium_constants()

    @property
    def forward_rates_of_progress(self): return self.kinetics.get_fwd_rates_of_progress()

    @property
    def reverse_rates_of_progress(self): return self.kinetics.get_rev_rates_of_progress()

    @property
    def net_rates_of_progress(self): return self.kinetics.get_net_rates_of_progress()

    @property
    def creation_rates(self): return self.kinetics.get_creation_rates()

    @property
    def destruction_rates(self): return self.kinetics.get_destruction_rates()

    @property
    def net_production_rates(self): return self.kinetics.get_net_production_rates()

    def production_rates_by_species(self):
        """Net production rates keyed by species name."""
        wdot = self.net_production_rates
        return dict(zip(self.species_names, np.asarray(wdot).tolist()))
