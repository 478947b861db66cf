import random

import numpy as np
import pytest

from gp_operator_plugins.dsl import SearchOptions
from gp_operator_plugins.loader import OperatorLoadError
from gp_operator_plugins.population import PopMember, Population
from gp_operator_plugins.survival import SurvivalIndexError, SurvivalRegistry, default_survival
from gp_operator_plugins.trees import constant

YOUNGEST_SOURCE = """
def replace_youngest(population, options, exclude_indices=()):
    births = [
        -1 if i in exclude_indices else m.birth
        for i, m in enumerate(population.members)
    ]
    return int(np.argmax(births))
"""


def _population(births: list[int]) -> Population:
    return Population(
        members=[
            PopMember(tree=constant(0.0), cost=1.0, loss=1.0, birth=b, ref=i)
            for i, b in enumerate(births)
        ]
    )


def test_default_replaces_oldest(population: Population, options: SearchOptions) -> None:
    first = default_survival(population, options)
    second = default_survival(population, options, exclude_indices=[first])
    assert (first, second) == (3, 5)


@pytest.mark.parametrize("seed", range(25))
def test_sequential_calls_never_collide(seed: int, options: SearchOptions) -> None:
    rng = random.Random(seed)  # noqa: S311 - deterministic unit tests
    n = rng.randint(2, 12)
    births = rng.sample(range(1_000), n)
    pop = _population(births)
    first = default_survival(pop, options)
    second = default_survival(pop, options, exclude_indices=[first])
    assert first != second
    assert first == births.index(min(births))
    rest = [b for i, b in enumerate(births) if i != first]
    assert births[second] == min(rest)


def test_everything_excluded_is_an_error(options: SearchOptions) -> None:
    with pytest.raises(ValueError):
        default_survival(_population([1, 2]), options, exclude_indices=[0, 1])


def test_registry_uses_default_without_override(
    population: Population, options: SearchOptions
) -> None:
    registry = SurvivalRegistry()
    assert registry.dispatch(population, options) == 3
    assert registry.dispatch(population, options, exclude_indices=[3]) == 5


def test_override_from_source(population: Population, options: SearchOptions) -> None:
    registry = SurvivalRegistry()
    registry.load_from_string("replace_youngest", YOUNGEST_SOURCE)
    assert registry.dispatch(population, options) == 2
    assert registry.dispatch(population, options, exclude_indices=[2]) == 6


def test_override_receives_exclusions(population: Population, options: SearchOptions) -> None:
    seen: list[list[int]] = []

    def spy(population, options, exclude_indices=()):
        seen.append(exclude_indices)
        return 0

    registry = SurvivalRegistry()
    registry.register("spy", spy)
    registry.dispatch(population, options, exclude_indices=(4, 1))
    assert seen == [[4, 1]]


@pytest.mark.parametrize("bad", [-1, 8, 100])
def test_out_of_range_override_is_fatal(
    bad: int, population: Population, options: SearchOptions
) -> None:
    registry = SurvivalRegistry()
    registry.register("bad", lambda population, options, exclude_indices=(): bad)
    with pytest.raises(SurvivalIndexError, match="must be in 0..7"):
        registry.dispatch(population, options)


def test_non_integer_override_is_fatal(population: Population, options: SearchOptions) -> None:
    registry = SurvivalRegistry()
    registry.register("flag", lambda population, options, exclude_indices=(): True)
    with pytest.raises(SurvivalIndexError):
        registry.dispatch(population, options)
    registry.register("half", lambda population, options, exclude_indices=(): 1.5)
    with pytest.raises(SurvivalIndexError):
        registry.dispatch(population, options)


def test_numpy_integer_override_is_accepted(
    population: Population, options: SearchOptions
) -> None:
    registry = SurvivalRegistry()
    registry.register("np_index", lambda population, options, exclude_indices=(): np.int64(7))
    idx = registry.dispatch(population, options)
    assert idx == 7
    assert type(idx) is int


def test_survival_without_exclude_keyword_is_rejected() -> None:
    registry = SurvivalRegistry()
    with pytest.raises(OperatorLoadError):
        registry.load_from_string("plain", "def plain(population, options):\n    return 0\n")
    assert registry.active is None


def test_fractional_births_are_compared_exactly(options: SearchOptions) -> None:
    pop = Population(
        members=[
            PopMember(tree=constant(0.0), cost=1.0, loss=1.0, birth=b, ref=i)
            for i, b in enumerate([1.7, 1.2, 3.0])
        ]
    )
    assert default_survival(pop, options) == 1
    assert default_survival(pop, options, exclude_indices=[1]) == 0


def test_equal_births_pick_lowest_index(options: SearchOptions) -> None:
    assert default_survival(_population([4, 2, 2, 9]), options) == 1
