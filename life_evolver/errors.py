"""Exceptions raised by the life evolver."""


class LifeEvolverError(Exception):
    """Base class for all life evolver errors."""


class ConfigurationError(LifeEvolverError, ValueError):
    """Invalid construction parameters (dimensions, population, rates)."""


class BoundsError(LifeEvolverError, IndexError):
    """Cell or region access outside the grid."""


class InternalConsistencyError(LifeEvolverError, AssertionError):
    """A neighborhood pattern is missing from the transition table."""


class GridFormatError(LifeEvolverError, ValueError):
    """A textual grid contains something other than 0s and 1s."""


class DatabaseError(LifeEvolverError, ValueError):
    """A configuration database file cannot be read."""
