"""Candidate starting grids for the Game of Life search."""

import numpy as np
from typing import Optional

from .errors import BoundsError, ConfigurationError


class Configuration:
    """A fixed-size grid of live/dead cells with a fitness score."""

    def __init__(self, height: int = 12, width: int = 12, rng: Optional[np.random.Generator] = None):
        if height <= 0 or width <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {height}x{width}")
        self.height = height
        self.width = width
        self.grid = np.zeros((height, width), dtype=bool)
        self.fitness = 0.0
        self.rng = rng if rng is not None else np.random.default_rng()

    def __repr__(self):
        return f"Configuration({self.height}x{self.width}, alive={self.population()}, fitness={self.fitness})"

    def _check_cell(self, row: int, col: int):
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise BoundsError(f"cell ({row}, {col}) outside {self.height}x{self.width} grid")

    def _check_region(self, top: int, left: int, height: int, width: int):
        if height < 0 or width < 0:
            raise BoundsError(f"region size must be non-negative, got {height}x{width}")
        if top < 0 or left < 0 or top + height > self.height or left + width > self.width:
            raise BoundsError(
                f"region at ({top}, {left}) of size {height}x{width} "
                f"outside {self.height}x{self.width} grid"
            )

    def set_cell(self, row: int, col: int, alive: bool):
        self._check_cell(row, col)
        self.grid[row, col] = bool(alive)

    def get_cell(self, row: int, col: int) -> bool:
        self._check_cell(row, col)
        return bool(self.grid[row, col])

    def get_cell_region(self, top: int, left: int, height: int, width: int) -> np.ndarray:
        """Return a copy of the sub-rectangle starting at (top, left)."""
        self._check_region(top, left, height, width)
        return self.grid[top:top + height, left:left + width].copy()

    def set_cell_region(self, top: int, left: int, height: int, width: int, region: np.ndarray):
        """Overwrite the sub-rectangle starting at (top, left) with region."""
        self._check_region(top, left, height, width)
        region = np.asarray(region, dtype=bool)
        if region.shape != (height, width):
            raise BoundsError(f"region of shape {region.shape} does not fit {height}x{width}")
        self.grid[top:top + height, left:left + width] = region

    def mutation(self, mutation_chance: float):
        """Replace each cell, with probability mutation_chance percent, by a random state."""
        mask = self.rng.random(self.grid.shape) < mutation_chance / 100.0
        values = self.rng.random(self.grid.shape) < 0.5
        self.grid[mask] = values[mask]

    def set_random_configuration(self, alive_chance: float = 30):
        """Make each cell alive with probability alive_chance percent."""
        alive_chance = min(100, max(0, alive_chance))
        self.grid = self.rng.random(self.grid.shape) < alive_chance / 100.0

    def set_fitness(self, fitness: float):
        self.fitness = float(fitness)

    def deep_copy(self, source: "Configuration"):
        """Copy cells and fitness from source into this configuration."""
        if source.grid.shape != self.grid.shape:
            raise BoundsError(
                f"cannot copy {source.height}x{source.width} configuration "
                f"into {self.height}x{self.width}"
            )
        np.copyto(self.grid, source.grid)
        self.fitness = source.fitness

    def copy(self) -> "Configuration":
        clone = Configuration(self.height, self.width, rng=self.rng)
        clone.deep_copy(self)
        return clone

    def compare(self, other: "Configuration") -> int:
        """Order by fitness, fittest first."""
        if self.fitness > other.fitness:
            return -1
        if self.fitness < other.fitness:
            return 1
        return 0

    def same_cells(self, other: "Configuration") -> bool:
        return bool(np.array_equal(self.grid, other.grid))

    def population(self) -> int:
        """Count live cells."""
        return int(np.sum(self.grid))

    def density(self) -> float:
        return self.population() / self.grid.size
