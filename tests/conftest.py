from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from gp_operator_plugins.context import OperatorContext
from gp_operator_plugins.dsl import SearchOptions
from gp_operator_plugins.mutations import MutationRegistry
from gp_operator_plugins.population import PopMember, Population, RunningSearchStatistics
from gp_operator_plugins.trees import Node, binary, constant, variable

BIRTHS = [5, 3, 9, 1, 7, 2, 8, 4]
COSTS = [4.0, 2.5, 6.0, 3.0, 1.5, 5.0, 2.0, 7.0]


@pytest.fixture()
def options() -> SearchOptions:
    return SearchOptions(
        maxsize=20,
        population_size=len(BIRTHS),
        tournament_selection_n=4,
        tournament_selection_p=1.0,
        use_frequency_in_tournament=False,
    )


@pytest.fixture()
def tree() -> Node:
    return binary("*", variable(0), binary("-", variable(1), constant(2.0)))


@pytest.fixture()
def population() -> Population:
    members = [
        PopMember(
            tree=binary("+", variable(0), constant(float(i))),
            cost=cost,
            loss=cost,
            birth=birth,
            ref=i,
        )
        for i, (birth, cost) in enumerate(zip(BIRTHS, COSTS, strict=True))
    ]
    return Population(members=members)


@pytest.fixture()
def stats(options: SearchOptions) -> RunningSearchStatistics:
    return RunningSearchStatistics.from_options(options)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "custom_operators.yaml"


@pytest.fixture()
def write_config(config_path: Path) -> Callable[..., Path]:
    def _write(
        custom_mutations: dict[str, float] | None = None,
        builtin_weights: dict[str, float] | None = None,
    ) -> Path:
        data = {
            "custom_mutations": custom_mutations or {},
            "builtin_weights": builtin_weights or {},
        }
        config_path.write_text(yaml.safe_dump(data, sort_keys=False))
        return config_path

    return _write


@pytest.fixture()
def registry(config_path: Path) -> MutationRegistry:
    return MutationRegistry(config_path=config_path)


@pytest.fixture()
def context(config_path: Path) -> OperatorContext:
    return OperatorContext(config_path=config_path)
