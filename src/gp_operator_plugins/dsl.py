"""Typed configuration for the operator plugin layer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ujson as json
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/custom_operators.yaml")

SLOT_NAMES: tuple[str, ...] = tuple(f"custom_mutation_{i}" for i in range(1, 6))
NO_MUTATION = "none"


class SearchOptions(BaseModel):
    """Subset of the host's search options read by the default algorithms."""

    maxsize: int = Field(default=30, gt=0)
    population_size: int = Field(default=27, gt=0)
    tournament_selection_n: int = Field(default=12, gt=0)
    tournament_selection_p: float = Field(default=0.86, gt=0.0, le=1.0)
    adaptive_parsimony_scaling: float = Field(default=1040.0, ge=0.0)
    use_frequency_in_tournament: bool = True
    binary_operators: list[str] = Field(default_factory=lambda: ["+", "-", "*", "/"])
    unary_operators: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def tournament_fits_population(self) -> SearchOptions:
        if self.tournament_selection_n > self.population_size:
            raise ValueError("tournament_selection_n must be <= population_size")
        return self


class MutationWeights(BaseModel):
    """Relative frequency of each mutation kind, as read by the search loop.

    The ``custom_mutation_*`` fields are the slots that user-defined
    operators are projected onto.
    """

    mutate_constant: float = Field(default=0.0353, ge=0.0)
    mutate_operator: float = Field(default=3.63, ge=0.0)
    swap_operands: float = Field(default=0.00608, ge=0.0)
    rotate_tree: float = Field(default=1.42, ge=0.0)
    add_node: float = Field(default=0.0771, ge=0.0)
    insert_node: float = Field(default=2.44, ge=0.0)
    delete_node: float = Field(default=0.369, ge=0.0)
    simplify: float = Field(default=0.00148, ge=0.0)
    randomize: float = Field(default=0.00695, ge=0.0)
    do_nothing: float = Field(default=0.431, ge=0.0)
    optimize: float = Field(default=0.0, ge=0.0)
    custom_mutation_1: float = Field(default=0.0, ge=0.0)
    custom_mutation_2: float = Field(default=0.0, ge=0.0)
    custom_mutation_3: float = Field(default=0.0, ge=0.0)
    custom_mutation_4: float = Field(default=0.0, ge=0.0)
    custom_mutation_5: float = Field(default=0.0, ge=0.0)

    model_config = {"validate_assignment": True}


class OperatorConfig(BaseModel):
    """Declarative operator weights.

    ``custom_mutations`` drives the mutation weight table; ``builtin_weights``
    replaces weights on the host's :class:`MutationWeights` record.
    """

    custom_mutations: dict[str, float] = Field(default_factory=dict)
    builtin_weights: dict[str, float] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @field_validator("custom_mutations", "builtin_weights")
    @classmethod
    def non_negative(cls, value: dict[str, float]) -> dict[str, float]:
        negative = sorted(name for name, weight in value.items() if weight < 0)
        if negative:
            raise ValueError(f"weights must be >= 0: {', '.join(negative)}")
        return value


def load_operator_config(path: str | Path = DEFAULT_CONFIG_PATH) -> OperatorConfig:
    """Load operator weights from YAML or JSON.

    A missing file is not an error: the result is an empty config.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("Custom operator config not found at %s", path)
        return OperatorConfig()
    text = path.read_text()
    data: Any
    if path.suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    else:
        data = json.loads(text) if text.strip() else None
    try:
        return OperatorConfig(**(data or {}))
    except (ValidationError, TypeError) as exc:
        raise ValueError(f"Invalid operator config {path}") from exc


def save_operator_config(cfg: OperatorConfig, path: str | Path) -> None:
    """Persist operator weights as YAML or JSON based on file suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix in {".yaml", ".yml"}:
        path.write_text(yaml.safe_dump(cfg.model_dump(mode="python"), sort_keys=False))
    else:
        path.write_text(json.dumps(cfg.model_dump(mode="python"), indent=2))
