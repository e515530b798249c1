"""Parameter sweeps over the evolutionary search."""

import csv
import itertools
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass, asdict

from .errors import ConfigurationError
from .search import EvolutionaryEngine

# Set per trial by sweep itself.
RESERVED_PARAMETERS = ("mutation_chance", "crossover_chance", "hypermutation", "seed", "rng")


@dataclass
class TrialResult:
    """Outcome of one evolutionary run in a sweep."""
    mutation_chance: float
    crossover_chance: float
    hypermutation: bool
    trial: int
    seed: int
    best_fitness: float
    final_average: float
    hypermutation_events: int

    def to_dict(self) -> Dict:
        return asdict(self)


def sweep(
    mutation_chances: Sequence[float] = (1.0, 5.0, 10.0),
    crossover_chances: Sequence[float] = (0.0, 50.0, 90.0),
    hypermutation_options: Sequence[bool] = (False, True),
    trials: int = 3,
    seed: Optional[int] = None,
    verbose: bool = True,
    **engine_kwargs,
) -> List[TrialResult]:
    """Run every parameter combination `trials` times with independent seeds."""
    reserved = sorted(set(engine_kwargs) & set(RESERVED_PARAMETERS))
    if reserved:
        raise ConfigurationError(f"sweep sets {', '.join(reserved)} itself; pass them as sweep arguments instead")

    seeds = np.random.SeedSequence(seed)
    results: List[TrialResult] = []

    combos = list(itertools.product(mutation_chances, crossover_chances, hypermutation_options))
    for mutation, crossover, hyper in combos:
        for trial, child in enumerate(seeds.spawn(trials)):
            trial_seed = int(child.generate_state(1)[0])
            engine = EvolutionaryEngine(
                mutation_chance=mutation,
                crossover_chance=crossover,
                hypermutation=hyper,
                seed=trial_seed,
                **engine_kwargs,
            )
            result = engine.run(verbose=False)
            results.append(TrialResult(
                mutation_chance=mutation,
                crossover_chance=crossover,
                hypermutation=hyper,
                trial=trial,
                seed=trial_seed,
                best_fitness=result.best_individual.fitness,
                final_average=engine.average_fitness(),
                hypermutation_events=len(result.hypermutation_events),
            ))
            if verbose:
                print(f"mutation={mutation:5.1f} crossover={crossover:5.1f} hyper={str(hyper):5s} "
                      f"trial={trial}: best={result.best_individual.fitness:.1f}")

    return results


def summarize(results: List[TrialResult]) -> List[Dict]:
    """Aggregate trials per parameter combination, best mean first."""
    groups: Dict[tuple, List[TrialResult]] = {}
    for r in results:
        groups.setdefault((r.mutation_chance, r.crossover_chance, r.hypermutation), []).append(r)

    summary = []
    for (mutation, crossover, hyper), trials in groups.items():
        best = np.array([t.best_fitness for t in trials])
        summary.append({
            "mutation_chance": mutation,
            "crossover_chance": crossover,
            "hypermutation": hyper,
            "trials": len(trials),
            "mean_best": float(np.mean(best)),
            "std_best": float(np.std(best)),
            "max_best": float(np.max(best)),
            "mean_final_average": float(np.mean([t.final_average for t in trials])),
        })
    return sorted(summary, key=lambda s: s["mean_best"], reverse=True)


def export_results_csv(results: List[TrialResult], filepath: str):
    """Write one row per trial."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    columns = list(TrialResult.__dataclass_fields__)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        for r in results:
            writer.writerow(r.to_dict())
