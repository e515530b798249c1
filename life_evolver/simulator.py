"""Bounded Game of Life simulation engine with a novelty-scoring heuristic.

The simulated grid is surrounded by a permanently dead one-cell border. Each
cell's next state comes from a table of all 512 possible 3x3 neighborhoods,
encoded as 9-character strings read row by row from the top-left corner
('1' alive, '0' dead).
"""

import numpy as np
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .configuration import Configuration
from .errors import BoundsError, ConfigurationError, InternalConsistencyError

EMPTY_NEIGHBORHOOD = "000000000"

# Pattern for every 9-bit code; the first character is the most significant bit.
PATTERNS = tuple(format(code, "09b") for code in range(512))

NOVEL_POSITION_BONUS = 500.0
REPEAT_POSITION_BONUS = 250.0


def evaluate_neighborhood(pattern: str) -> bool:
    """Apply B3/S23 to a 9-character neighborhood pattern."""
    alive = pattern[4] == "1"
    neighbors = pattern.count("1") - int(alive)
    if alive:
        return neighbors == 2 or neighbors == 3
    return neighbors == 3


def build_transition_table() -> Mapping[str, bool]:
    """Precompute the next state for every possible neighborhood."""
    return MappingProxyType({pattern: evaluate_neighborhood(pattern) for pattern in PATTERNS})


class LifeSimulator:
    """Game of Life on a bounded grid that scores each generation it computes."""

    # Same rule the table is built from.
    eval_neighborhood_type = staticmethod(evaluate_neighborhood)

    def __init__(
        self,
        height: int = 12,
        width: int = 12,
        transition_table: Optional[Mapping[str, bool]] = None,
        novel_position_bonus: float = NOVEL_POSITION_BONUS,
        repeat_position_bonus: float = REPEAT_POSITION_BONUS,
        record_history: bool = False,
    ):
        if height <= 0 or width <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {height}x{width}")
        self.height = height
        self.width = width
        self.working_grid = np.zeros((height + 2, width + 2), dtype=bool)
        self.transition_table = transition_table if transition_table is not None else build_transition_table()
        self.novel_position_bonus = novel_position_bonus
        self.repeat_position_bonus = repeat_position_bonus
        self.novelty_map: Dict[object, bool] = {}
        self.generation = 0
        self.record_history = record_history
        self._history: List[np.ndarray] = []

    @property
    def grid(self) -> np.ndarray:
        """Copy of the logical grid, without the dead border."""
        return self.working_grid[1:-1, 1:-1].copy()

    def set_starting_configuration(self, config: Configuration):
        """Load config into the interior of the working grid."""
        if config.grid.shape != (self.height, self.width):
            raise BoundsError(
                f"configuration is {config.height}x{config.width}, "
                f"simulator expects {self.height}x{self.width}"
            )
        self.working_grid = np.zeros((self.height + 2, self.width + 2), dtype=bool)
        self.working_grid[1:-1, 1:-1] = config.grid
        self.generation = 0
        self._history = [self.grid] if self.record_history else []

    def clear(self):
        self.working_grid = np.zeros((self.height + 2, self.width + 2), dtype=bool)
        self.generation = 0
        self._history = []

    def next_state(self, pattern: str) -> bool:
        try:
            return self.transition_table[pattern]
        except KeyError:
            raise InternalConsistencyError(f"neighborhood {pattern!r} missing from transition table") from None

    def _neighborhood_codes(self) -> np.ndarray:
        """9-bit neighborhood code of every interior cell."""
        codes = np.zeros((self.height, self.width), dtype=np.int32)
        bit = 8
        for dy in range(3):
            for dx in range(3):
                window = self.working_grid[dy:dy + self.height, dx:dx + self.width]
                codes |= window.astype(np.int32) << bit
                bit -= 1
        return codes

    def neighborhood(self, row: int, col: int) -> str:
        """Pattern around a cell of the logical grid."""
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise BoundsError(f"cell ({row}, {col}) outside {self.height}x{self.width} grid")
        block = self.working_grid[row:row + 3, col:col + 3]
        return "".join("1" if cell else "0" for cell in block.flat)

    def _novelty_bonus(self, pattern: str, row: int, col: int) -> float:
        if pattern == EMPTY_NEIGHBORHOOD:
            return 0.0
        placed = (pattern, row, col)
        if pattern not in self.novelty_map:
            self.novelty_map[pattern] = True
            self.novelty_map[placed] = True
            return 0.0
        if placed not in self.novelty_map:
            self.novelty_map[placed] = True
            return self.novel_position_bonus
        return self.repeat_position_bonus

    def next_gen(self) -> float:
        """Advance one generation and return its score."""
        codes = self._neighborhood_codes()
        new_grid = np.zeros_like(self.working_grid)
        score = 0.0

        for row in range(self.height):
            for col in range(self.width):
                pattern = PATTERNS[codes[row, col]]
                alive = self.next_state(pattern)
                new_grid[row + 1, col + 1] = alive
                if alive:
                    score += 1
                score += self._novelty_bonus(pattern, row, col)

        self.working_grid = new_grid
        self.generation += 1
        if self.record_history:
            self._history.append(self.grid)
        return score

    def run_game(self, num_generations: int) -> float:
        """Simulate num_generations steps from the current grid and return the total score."""
        self.novelty_map = {}
        total = 0.0
        for _ in range(num_generations):
            total += self.next_gen()
        return total

    def evaluate(self, config: Configuration, num_generations: int) -> float:
        """Score config as a starting configuration."""
        self.set_starting_configuration(config)
        return self.run_game(num_generations)

    def record_run(self, config: Configuration, num_generations: int) -> Tuple[float, List[np.ndarray]]:
        """Score config while recording every grid; leaves record_history as it was."""
        previous = self.record_history
        self.record_history = True
        try:
            fitness = self.evaluate(config, num_generations)
            return fitness, self._history
        finally:
            self.record_history = previous

    def get_history(self) -> List[np.ndarray]:
        """Recorded interior grids, starting configuration first."""
        return self._history

    def population(self) -> int:
        """Count live cells."""
        return int(np.sum(self.working_grid))
