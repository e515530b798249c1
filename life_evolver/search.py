"""Genetic algorithm for evolving Game of Life starting configurations."""

import numpy as np
from typing import List, Tuple, Optional, Callable
from dataclasses import dataclass, field

from .configuration import Configuration
from .errors import ConfigurationError
from .simulator import LifeSimulator, NOVEL_POSITION_BONUS, REPEAT_POSITION_BONUS


@dataclass
class SearchResult:
    """Results from an evolutionary run."""
    best_individual: Configuration
    best_ever: Configuration
    population: List[Configuration]
    generation: int
    history: List[Tuple[int, float, float]] = field(default_factory=list)  # (gen, best, average)
    hypermutation_events: List[int] = field(default_factory=list)


def rank(population: List[Configuration]) -> List[Configuration]:
    """Stable sort, fittest first."""
    return sorted(population, key=lambda config: config.fitness, reverse=True)


class EvolutionaryEngine:
    """Evolves starting configurations that score well under LifeSimulator."""

    def __init__(
        self,
        height: int = 12,
        width: int = 12,
        pop_size: int = 50,
        num_gens: int = 50,
        sim_generations: int = 30,
        num_elites: int = 2,
        tournament_size: int = 3,
        mutation_chance: float = 5.0,
        crossover_chance: float = 70.0,
        hypermutation: bool = False,
        hypermutation_threshold: float = 0.9,
        hypermutation_window: int = 5,
        hypermutation_multiplier: float = 3.0,
        initial_alive_chance: float = 10.0,
        novel_position_bonus: float = NOVEL_POSITION_BONUS,
        repeat_position_bonus: float = REPEAT_POSITION_BONUS,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.height = height
        self.width = width
        self.pop_size = pop_size
        self.num_gens = num_gens
        self.sim_generations = sim_generations
        self.num_elites = num_elites
        self.tournament_size = tournament_size
        self.mutation_chance = mutation_chance
        self.crossover_chance = crossover_chance
        self.hypermutation = hypermutation
        self.hypermutation_threshold = hypermutation_threshold
        self.hypermutation_window = hypermutation_window
        self.hypermutation_multiplier = hypermutation_multiplier
        self.initial_alive_chance = initial_alive_chance
        self._validate()

        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.simulator = LifeSimulator(
            height,
            width,
            novel_position_bonus=novel_position_bonus,
            repeat_position_bonus=repeat_position_bonus,
        )

        # Rates used by the next variation step; raised during hypermutation.
        self.mutation_rate = mutation_chance
        self.crossover_rate = crossover_chance

        self.population: List[Configuration] = []
        self.generation = 0
        self.history: List[Tuple[int, float, float]] = []
        self.best_ever: Optional[Configuration] = None
        self.hypermutation_events: List[int] = []
        self._gens_since_check = 0
        self._window_average: Optional[float] = None

    def _validate(self):
        if self.height <= 0 or self.width <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {self.height}x{self.width}")
        if self.pop_size <= 0:
            raise ConfigurationError(f"population size must be positive, got {self.pop_size}")
        if self.num_gens <= 0:
            raise ConfigurationError(f"number of generations must be positive, got {self.num_gens}")
        if self.sim_generations <= 0:
            raise ConfigurationError(f"simulated generations must be positive, got {self.sim_generations}")
        if not 0 <= self.num_elites <= self.pop_size:
            raise ConfigurationError(f"elites must be between 0 and {self.pop_size}, got {self.num_elites}")
        if self.tournament_size < 1:
            raise ConfigurationError(f"tournament size must be at least 1, got {self.tournament_size}")
        open_slots = self.pop_size - self.num_elites
        if open_slots > 0 and self.tournament_size > open_slots:
            raise ConfigurationError(
                f"tournament size {self.tournament_size} exceeds the {open_slots} non-elite configurations"
            )
        for name in ("mutation_chance", "crossover_chance", "initial_alive_chance"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be a percentage, got {value}")
        if self.hypermutation_threshold <= 0:
            raise ConfigurationError(f"hypermutation threshold must be positive, got {self.hypermutation_threshold}")
        if self.hypermutation_window <= 0:
            raise ConfigurationError(f"hypermutation window must be positive, got {self.hypermutation_window}")
        if self.hypermutation_multiplier <= 0:
            raise ConfigurationError(
                f"hypermutation multiplier must be positive, got {self.hypermutation_multiplier}"
            )

    def _new_configuration(self) -> Configuration:
        return Configuration(self.height, self.width, rng=self.rng)

    def initialize_population(self):
        """Create the starting population of sparse random grids."""
        self.population = []
        for _ in range(self.pop_size):
            config = self._new_configuration()
            config.set_random_configuration(self.initial_alive_chance)
            self.population.append(config)

    def evaluate(self, config: Configuration) -> float:
        """Score a single configuration and store the result on it."""
        fitness = self.simulator.evaluate(config, self.sim_generations)
        config.set_fitness(fitness)
        return fitness

    def evaluate_population(self):
        for config in self.population:
            self.evaluate(config)

    def rank_population(self):
        self.population = rank(self.population)

    def average_fitness(self) -> float:
        return float(np.mean([config.fitness for config in self.population]))

    def _update_best(self):
        """Track the best configuration ever seen."""
        current_best = max(self.population, key=lambda x: x.fitness)
        if self.best_ever is None or current_best.fitness > self.best_ever.fitness:
            self.best_ever = current_best.copy()

    def update_hypermutation(self, verbose: bool = False) -> bool:
        """Raise the variation rates for this generation if average fitness has dropped."""
        self.mutation_rate = self.mutation_chance
        self.crossover_rate = self.crossover_chance
        if not self.hypermutation:
            return False

        self._gens_since_check += 1
        if self._gens_since_check < self.hypermutation_window:
            return False
        self._gens_since_check = 0

        average = self.average_fitness()
        previous = self._window_average
        self._window_average = average
        if previous is None or average >= self.hypermutation_threshold * previous:
            return False

        self.mutation_rate = min(100.0, self.mutation_chance * self.hypermutation_multiplier)
        self.crossover_rate = min(100.0, self.crossover_chance * self.hypermutation_multiplier)
        self.hypermutation_events.append(self.generation)
        if verbose:
            print(f"  Hypermutation: average fitness {average:.1f} fell below "
                  f"{self.hypermutation_threshold:.0%} of {previous:.1f}")
        return True

    def tournament_select(self) -> Configuration:
        """Deep copy of the fittest of a random subset of the non-elite configurations."""
        contenders = self.population[self.num_elites:]
        self.rng.shuffle(contenders)
        self.population[self.num_elites:] = contenders
        winner = max(contenders[:self.tournament_size], key=lambda x: x.fitness)
        return winner.copy()

    def select_population(self) -> List[Configuration]:
        """Elites plus tournament winners; expects a ranked population."""
        new_population = [config.copy() for config in self.population[:self.num_elites]]
        while len(new_population) < self.pop_size:
            new_population.append(self.tournament_select())
        return new_population

    def crossover(self, first: Configuration, second: Configuration):
        """Swap a random rectangular region between two configurations."""
        row1, row2 = self.rng.integers(0, self.height, size=2)
        col1, col2 = self.rng.integers(0, self.width, size=2)
        top, left = int(min(row1, row2)), int(min(col1, col2))
        height, width = int(abs(row1 - row2)), int(abs(col1 - col2))

        region1 = first.get_cell_region(top, left, height, width)
        region2 = second.get_cell_region(top, left, height, width)
        first.set_cell_region(top, left, height, width, region2)
        second.set_cell_region(top, left, height, width, region1)

    def vary_population(self, population: List[Configuration]):
        """Mutate and recombine the non-elite part of population in place."""
        candidates = population[self.num_elites:]
        for config in candidates:
            config.mutation(self.mutation_rate)

        self.rng.shuffle(candidates)
        for i in range(0, len(candidates) - 1, 2):
            if self.rng.random() < self.crossover_rate / 100.0:
                self.crossover(candidates[i], candidates[i + 1])

    def evolve_generation(self, callback: Optional[Callable[[int, Configuration], None]] = None,
                          verbose: bool = False):
        """Evaluate, rank and replace the population once."""
        self.evaluate_population()
        self.rank_population()
        self._update_best()

        best = self.population[0]
        average = self.average_fitness()
        self.history.append((self.generation, best.fitness, average))
        if callback:
            callback(self.generation, best)

        self.update_hypermutation(verbose=verbose)
        new_population = self.select_population()
        self.vary_population(new_population)

        self.population = new_population
        self.generation += 1

    def run(
        self,
        generations: Optional[int] = None,
        callback: Optional[Callable[[int, Configuration], None]] = None,
        verbose: bool = True,
    ) -> SearchResult:
        """Run the genetic algorithm and return the fittest final configuration."""
        if generations is None:
            generations = self.num_gens
        if not self.population:
            if verbose:
                print("Initializing population...")
            self.initialize_population()

        for _ in range(generations):
            self.evolve_generation(callback, verbose=verbose)

            if verbose:
                _, best, average = self.history[-1]
                print(f"Gen {self.generation:3d}: Best={best:.1f} Avg={average:.1f}")

        self.evaluate_population()
        self.rank_population()
        self._update_best()

        return SearchResult(
            best_individual=self.population[0].copy(),
            best_ever=self.best_ever,
            population=self.population,
            generation=self.generation,
            history=self.history,
            hypermutation_events=self.hypermutation_events,
        )

    def get_top_configurations(self, n: int = 10) -> List[Configuration]:
        """Get the top N configurations from the current population."""
        return rank(self.population)[:n]


def random_search(
    num_samples: int = 1000,
    height: int = 12,
    width: int = 12,
    sim_generations: int = 30,
    alive_chance: float = 10.0,
    seed: Optional[int] = None,
    verbose: bool = True,
) -> List[Configuration]:
    """
    Simple random search baseline - sample random configurations and keep the best.
    """
    rng = np.random.default_rng(seed)
    simulator = LifeSimulator(height, width)
    results: List[Configuration] = []

    for i in range(num_samples):
        config = Configuration(height, width, rng=rng)
        config.set_random_configuration(alive_chance)
        config.set_fitness(simulator.evaluate(config, sim_generations))
        results.append(config)

        if verbose and (i + 1) % 100 == 0:
            best = max(results, key=lambda x: x.fitness)
            print(f"Sampled {i+1}/{num_samples}: Best={best.fitness:.1f}")

    return rank(results)
