import numpy as np
import pytest

from life_evolver.configuration import Configuration
from life_evolver.errors import ConfigurationError
from life_evolver.search import EvolutionaryEngine, random_search, rank
from life_evolver.simulator import LifeSimulator


def small_engine(**kwargs):
    params = dict(height=6, width=6, pop_size=10, num_gens=3, sim_generations=5,
                  num_elites=2, tournament_size=3, seed=123)
    params.update(kwargs)
    return EvolutionaryEngine(**params)


@pytest.mark.parametrize("kwargs", [
    {"pop_size": 0},
    {"pop_size": -5},
    {"height": 0},
    {"num_gens": 0},
    {"sim_generations": 0},
    {"num_elites": 11},
    {"num_elites": -1},
    {"tournament_size": 0},
    {"tournament_size": 9},
    {"mutation_chance": 101},
    {"crossover_chance": -1},
    {"hypermutation_threshold": 0},
    {"hypermutation_window": 0},
])
def test_invalid_parameters_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        small_engine(**kwargs)


def test_all_elites_needs_no_tournament_room():
    engine = small_engine(num_elites=10, tournament_size=3)
    assert engine.num_elites == 10


def test_initial_population():
    engine = small_engine(initial_alive_chance=100)
    engine.initialize_population()

    assert len(engine.population) == 10
    assert all(c.grid.shape == (6, 6) for c in engine.population)
    assert all(c.population() == 36 for c in engine.population)
    assert len({id(c) for c in engine.population}) == 10


def test_evaluate_population_stores_fitness():
    engine = small_engine()
    engine.initialize_population()
    engine.evaluate_population()

    sim = LifeSimulator(6, 6)
    for config in engine.population:
        assert config.fitness == sim.evaluate(config, 5)


def test_rank_is_stable_and_descending():
    configs = [Configuration(2, 2) for _ in range(4)]
    for config, fitness in zip(configs, [1, 3, 3, 2]):
        config.set_fitness(fitness)

    ranked = rank(configs)
    assert [c.fitness for c in ranked] == [3, 3, 2, 1]
    assert ranked[0] is configs[1] and ranked[1] is configs[2]


def test_selection_preserves_elites_as_copies():
    engine = small_engine(num_elites=3)
    engine.initialize_population()
    engine.evaluate_population()
    engine.rank_population()
    previous = list(engine.population)

    selected = engine.select_population()

    assert len(selected) == engine.pop_size
    for new, old in zip(selected[:3], previous[:3]):
        assert new is not old
        assert new.same_cells(old)
        assert new.fitness == old.fitness
    assert rank(selected)[0].fitness == previous[0].fitness


def test_tournament_winners_come_from_non_elites():
    engine = small_engine(num_elites=2, tournament_size=8)
    engine.initialize_population()
    engine.evaluate_population()
    engine.rank_population()
    elites = engine.population[:2]
    non_elites = list(engine.population[2:])

    selected = engine.select_population()

    best_non_elite = max(c.fitness for c in non_elites)
    for winner in selected[2:]:
        assert all(winner is not c for c in non_elites)
        assert any(winner.same_cells(c) and winner.fitness == c.fitness for c in non_elites)
        # With a tournament over every non-elite the best always wins
        assert winner.fitness == best_non_elite
    assert engine.population[:2] == elites


def test_crossover_swaps_a_rectangle():
    engine = small_engine()
    alive = Configuration(6, 6)
    alive.set_random_configuration(100)
    dead = Configuration(6, 6)

    for _ in range(20):
        engine.crossover(alive, dead)
        assert (alive.grid | dead.grid).all()
        assert not (alive.grid & dead.grid).any()
        assert alive.population() + dead.population() == 36


def test_variation_without_rates_changes_nothing():
    engine = small_engine(mutation_chance=0, crossover_chance=0)
    engine.initialize_population()
    before = [c.grid.copy() for c in engine.population]

    engine.vary_population(engine.population)

    for config, grid in zip(engine.population, before):
        assert np.array_equal(config.grid, grid)


def test_variation_leaves_elites_alone():
    engine = small_engine(num_elites=4, mutation_chance=100, crossover_chance=100)
    engine.initialize_population()
    elites = [c.grid.copy() for c in engine.population[:4]]
    rest = [c.grid.copy() for c in engine.population[4:]]

    engine.vary_population(engine.population)

    for config, grid in zip(engine.population[:4], elites):
        assert np.array_equal(config.grid, grid)
    changed = sum(
        not any(np.array_equal(c.grid, g) for g in rest) for c in engine.population[4:]
    )
    assert changed > 0


def _set_average(engine, value):
    for config in engine.population:
        config.set_fitness(value)


def test_hypermutation_boosts_rates_for_one_generation():
    engine = small_engine(hypermutation=True, hypermutation_window=1,
                          mutation_chance=5, crossover_chance=70, hypermutation_multiplier=3)
    engine.initialize_population()

    _set_average(engine, 100)
    assert engine.update_hypermutation() is False
    assert engine.mutation_rate == 5

    _set_average(engine, 50)
    assert engine.update_hypermutation() is True
    assert engine.mutation_rate == 15
    assert engine.crossover_rate == 100
    assert engine.hypermutation_events == [engine.generation]

    _set_average(engine, 50)
    assert engine.update_hypermutation() is False
    assert engine.mutation_rate == 5
    assert engine.crossover_rate == 70


def test_hypermutation_ignores_small_drops():
    engine = small_engine(hypermutation=True, hypermutation_window=1)
    engine.initialize_population()

    _set_average(engine, 100)
    engine.update_hypermutation()
    _set_average(engine, 95)
    assert engine.update_hypermutation() is False


def test_hypermutation_checks_once_per_window():
    engine = small_engine(hypermutation=True, hypermutation_window=3)
    engine.initialize_population()

    _set_average(engine, 100)
    assert [engine.update_hypermutation() for _ in range(3)] == [False, False, False]
    _set_average(engine, 10)
    assert engine.update_hypermutation() is False
    assert engine.update_hypermutation() is False
    assert engine.update_hypermutation() is True


def test_hypermutation_disabled():
    engine = small_engine(hypermutation=False, hypermutation_window=1)
    engine.initialize_population()
    _set_average(engine, 100)
    engine.update_hypermutation()
    _set_average(engine, 0)
    assert engine.update_hypermutation() is False
    assert engine.hypermutation_events == []


def test_no_variation_and_all_elites_is_a_no_op():
    engine = EvolutionaryEngine(height=6, width=6, pop_size=10, num_gens=5, sim_generations=10,
                                num_elites=10, mutation_chance=0, crossover_chance=0, seed=7)
    engine.initialize_population()
    initial = [c.copy() for c in engine.population]
    sim = LifeSimulator(6, 6)
    expected = sorted((sim.evaluate(c, 10) for c in initial), reverse=True)

    result = engine.run(verbose=False)

    assert [c.fitness for c in result.population] == expected
    for config in result.population:
        assert any(config.same_cells(c) for c in initial)
    assert result.generation == 5


def test_run_returns_fittest_configuration():
    engine = small_engine(num_gens=4)
    result = engine.run(verbose=False)

    assert result.generation == 4
    assert len(result.history) == 4
    assert len(result.population) == 10
    assert result.best_individual.fitness == max(c.fitness for c in result.population)
    assert result.best_individual.same_cells(result.population[0])
    assert result.best_ever.fitness >= result.best_individual.fitness


def test_runs_are_deterministic_for_a_seed():
    first = small_engine(seed=99).run(verbose=False)
    second = small_engine(seed=99).run(verbose=False)

    assert first.best_individual.fitness == second.best_individual.fitness
    assert first.best_individual.same_cells(second.best_individual)
    assert first.history == second.history


def test_callback_sees_every_generation():
    seen = []
    small_engine(num_gens=3).run(callback=lambda gen, best: seen.append((gen, best.fitness)), verbose=False)
    assert [gen for gen, _ in seen] == [0, 1, 2]


def test_verbose_progress(capsys):
    small_engine(num_gens=2).run(verbose=True)
    out = capsys.readouterr().out
    assert "Initializing population..." in out
    assert "Gen   2:" in out


def test_top_configurations():
    engine = small_engine()
    engine.run(verbose=False)
    top = engine.get_top_configurations(3)
    assert len(top) == 3
    assert top[0].fitness >= top[1].fitness >= top[2].fitness


def test_random_search_is_sorted():
    results = random_search(num_samples=12, height=5, width=5, sim_generations=4, seed=3, verbose=False)
    assert len(results) == 12
    fitnesses = [c.fitness for c in results]
    assert fitnesses == sorted(fitnesses, reverse=True)
