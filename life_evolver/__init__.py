"""Life Evolver - evolve interesting Game of Life starting configurations with a genetic algorithm."""

from .configuration import Configuration
from .errors import (
    BoundsError,
    ConfigurationError,
    DatabaseError,
    GridFormatError,
    InternalConsistencyError,
    LifeEvolverError,
)
from .search import EvolutionaryEngine, SearchResult, random_search
from .simulator import LifeSimulator, build_transition_table, evaluate_neighborhood

__all__ = [
    "Configuration",
    "LifeSimulator",
    "EvolutionaryEngine",
    "SearchResult",
    "random_search",
    "build_transition_table",
    "evaluate_neighborhood",
    "LifeEvolverError",
    "ConfigurationError",
    "DatabaseError",
    "BoundsError",
    "InternalConsistencyError",
    "GridFormatError",
]
