"""Exceptions raised while setting up a reaction mechanism."""


class KineticsError(Exception):
    """Base class for kinetics manager errors."""


class InvalidRateError(KineticsError, ValueError):
    """Rate-law parameters are malformed (bad ranges, missing limits, ...)."""


class InvalidReactionError(KineticsError, ValueError):
    """A reaction definition is inconsistent or cannot replace another."""


class UndeclaredSpeciesError(KineticsError):
    """A reaction references a species the thermo phase does not know."""

    def __init__(self, equation, species):
        self.equation = equation
        self.species = tuple(species)
        names = ", ".join(self.species)
        super().__init__(f"Reaction '{equation}' contains undeclared species: {names}")


class DuplicateReactionError(KineticsError):
    """Two reactions share participants and kind without being marked duplicate."""

    def __init__(self, equation, other_index):
        self.equation = equation
        self.other_index = other_index
        super().__init__(
            f"Reaction '{equation}' duplicates reaction {other_index}; "
            "mark both with duplicate=True if intended"
        )
