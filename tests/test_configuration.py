import numpy as np
import pytest

from life_evolver.configuration import Configuration
from life_evolver.errors import BoundsError, ConfigurationError


@pytest.fixture
def config():
    return Configuration(4, 5, rng=np.random.default_rng(0))


def test_new_configuration_is_dead(config):
    assert config.grid.shape == (4, 5)
    assert config.population() == 0
    assert config.fitness == 0.0


@pytest.mark.parametrize("height, width", [(0, 5), (5, 0), (-1, 3)])
def test_rejects_non_positive_dimensions(height, width):
    with pytest.raises(ConfigurationError):
        Configuration(height, width)


def test_set_and_get_cell(config):
    config.set_cell(3, 4, True)
    assert config.get_cell(3, 4) is True
    assert config.get_cell(0, 0) is False


@pytest.mark.parametrize("row, col", [(4, 0), (0, 5), (-1, 0), (0, -1)])
def test_cell_access_out_of_range(config, row, col):
    with pytest.raises(BoundsError):
        config.get_cell(row, col)
    with pytest.raises(BoundsError):
        config.set_cell(row, col, True)


def test_cell_region_round_trip(config):
    region = np.array([[True, False, True], [False, True, False]])
    config.set_cell_region(1, 2, 2, 3, region)

    assert np.array_equal(config.get_cell_region(1, 2, 2, 3), region)
    assert config.population() == 3
    assert config.get_cell(1, 2) and config.get_cell(2, 3)


def test_cell_region_is_a_copy(config):
    region = config.get_cell_region(0, 0, 2, 2)
    region[:] = True
    assert config.population() == 0


def test_empty_region_is_allowed(config):
    assert config.get_cell_region(2, 2, 0, 0).shape == (0, 0)
    config.set_cell_region(2, 2, 0, 0, np.zeros((0, 0), dtype=bool))
    assert config.population() == 0


def test_cell_region_out_of_range(config):
    with pytest.raises(BoundsError):
        config.get_cell_region(3, 0, 2, 2)
    with pytest.raises(BoundsError):
        config.get_cell_region(-1, 0, 1, 1)
    with pytest.raises(BoundsError):
        config.set_cell_region(0, 4, 1, 2, np.ones((1, 2), dtype=bool))


def test_cell_region_shape_mismatch(config):
    with pytest.raises(BoundsError):
        config.set_cell_region(0, 0, 2, 2, np.ones((3, 3), dtype=bool))


def test_random_configuration_extremes(config):
    config.set_random_configuration(100)
    assert config.population() == 20
    config.set_random_configuration(0)
    assert config.population() == 0


def test_random_configuration_clamps_chance(config):
    config.set_random_configuration(250)
    assert config.population() == 20
    config.set_random_configuration(-40)
    assert config.population() == 0


def test_random_configuration_density():
    config = Configuration(100, 100, rng=np.random.default_rng(1))
    config.set_random_configuration(30)
    assert 0.25 < config.density() < 0.35


def test_zero_mutation_changes_nothing(config):
    config.set_random_configuration(50)
    before = config.grid.copy()
    config.mutation(0)
    assert np.array_equal(config.grid, before)


def test_full_mutation_randomizes_cells():
    config = Configuration(20, 20, rng=np.random.default_rng(2))
    config.mutation(100)
    # Every cell is redrawn as a fair coin flip
    assert 120 < config.population() < 280


def test_deep_copy_copies_cells_and_fitness(config):
    config.set_random_configuration(50)
    config.set_fitness(42.5)

    other = Configuration(4, 5)
    other.deep_copy(config)

    assert other.same_cells(config)
    assert other.fitness == 42.5


def test_deep_copy_does_not_alias():
    rng = np.random.default_rng(3)
    source = Configuration(6, 6, rng=rng)
    source.set_random_configuration(50)
    copy = Configuration(6, 6, rng=rng)
    copy.deep_copy(source)
    snapshot = source.grid.copy()

    copy.mutation(100)
    copy.set_cell(0, 0, not snapshot[0, 0])
    assert np.array_equal(source.grid, snapshot)

    copy_snapshot = copy.grid.copy()
    source.set_cell_region(0, 0, 6, 6, ~source.grid)
    assert np.array_equal(copy.grid, copy_snapshot)


def test_copy_returns_independent_configuration(config):
    config.set_cell(1, 1, True)
    config.set_fitness(7)

    clone = config.copy()
    clone.set_cell(1, 1, False)

    assert clone is not config
    assert clone.fitness == 7
    assert config.get_cell(1, 1)


def test_deep_copy_rejects_other_dimensions(config):
    with pytest.raises(BoundsError):
        config.deep_copy(Configuration(5, 4))


def test_compare_orders_fittest_first():
    strong, weak, tied = Configuration(2, 2), Configuration(2, 2), Configuration(2, 2)
    strong.set_fitness(10)
    weak.set_fitness(1)
    tied.set_fitness(10)

    assert strong.compare(weak) == -1
    assert weak.compare(strong) == 1
    assert strong.compare(tied) == 0
