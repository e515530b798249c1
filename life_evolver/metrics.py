"""Descriptive statistics for how a starting configuration plays out."""

import numpy as np
from typing import Dict, List, Optional
from dataclasses import dataclass
from scipy import ndimage

from .configuration import Configuration
from .simulator import LifeSimulator


@dataclass
class RunStatistics:
    """Summary of one simulated run of a configuration."""
    fitness: float
    generations: int
    initial_population: int
    final_population: int
    peak_population: int
    final_clusters: int  # Connected groups of live cells at the end
    activity_persistence: float  # Fraction of steps where something changed
    period: Optional[int]  # Smallest repeat period reached, if any

    def to_dict(self) -> Dict:
        return {
            "fitness": self.fitness,
            "generations": self.generations,
            "initial_population": self.initial_population,
            "final_population": self.final_population,
            "peak_population": self.peak_population,
            "final_clusters": self.final_clusters,
            "activity_persistence": self.activity_persistence,
            "period": self.period,
        }


def count_clusters(grid: np.ndarray) -> int:
    """Count 8-connected groups of live cells."""
    _, num_clusters = ndimage.label(grid, structure=np.ones((3, 3), dtype=int))
    return int(num_clusters)


def activity_lifespan(history: List[np.ndarray]) -> float:
    """Calculate what fraction of the run had any change between frames."""
    if len(history) < 2:
        return 0.0

    active_frames = 0
    for i in range(1, len(history)):
        if np.any(history[i] != history[i-1]):
            active_frames += 1

    return active_frames / (len(history) - 1)


def detect_period(history: List[np.ndarray]) -> Optional[int]:
    """Smallest p such that the last frame equals the frame p steps earlier."""
    if len(history) < 2:
        return None
    last = history[-1]
    for p in range(1, len(history)):
        if np.array_equal(history[-1 - p], last):
            return p
    return None


def describe_run(
    config: Configuration,
    generations: int = 30,
    simulator: Optional[LifeSimulator] = None,
) -> RunStatistics:
    """Simulate config and summarize what happened."""
    if simulator is None:
        simulator = LifeSimulator(config.height, config.width)
    fitness, history = simulator.record_run(config, generations)

    populations = [int(np.sum(grid)) for grid in history]
    return RunStatistics(
        fitness=fitness,
        generations=generations,
        initial_population=populations[0],
        final_population=populations[-1],
        peak_population=max(populations),
        final_clusters=count_clusters(history[-1]),
        activity_persistence=activity_lifespan(history),
        period=detect_period(history),
    )
