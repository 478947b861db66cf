"""Host entry points acting on the process-wide operator context."""

from __future__ import annotations

import random
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .context import default_context, reset_default_context
from .dsl import SearchOptions
from .loader import OperatorFn
from .population import PopMember, Population, RunningSearchStatistics
from .slots import setup_custom_mutations as _setup_custom_mutations
from .trees import ExpressionWrapper, Node

__all__ = [
    "default_context",
    "reset_default_context",
    "apply_custom_mutation",
    "load_mutation_from_string",
    "load_mutation_from_file",
    "register_mutation",
    "setup_dynamic_mutation",
    "clear_dynamic_mutations",
    "list_available_mutations",
    "list_enabled_custom_mutations",
    "reload_custom_mutations",
    "get_custom_mutation_weights",
    "get_builtin_weight_overrides",
    "setup_custom_mutations",
    "apply_custom_selection",
    "load_selection_from_string",
    "load_selection_from_file",
    "register_selection",
    "clear_dynamic_selections",
    "list_available_selections",
    "reload_custom_selections",
    "apply_custom_survival",
    "load_survival_from_string",
    "load_survival_from_file",
    "register_survival",
    "clear_dynamic_survivals",
    "list_available_survivals",
    "reload_custom_survivals",
]


# mutation


def apply_custom_mutation(
    name: str,
    tree: Node | ExpressionWrapper,
    options: SearchOptions,
    nfeatures: int,
    rng: random.Random | None = None,
) -> Any:
    """Apply a custom mutation by name; unknown names return ``tree`` unchanged."""
    return default_context().mutations.dispatch(name, tree, options, nfeatures, rng)


def load_mutation_from_string(name: str, code: str, weight: float | None = None) -> OperatorFn:
    return default_context().mutations.load_from_string(name, code, weight)


def load_mutation_from_file(
    name: str, filepath: str | Path, weight: float | None = None
) -> OperatorFn:
    return default_context().mutations.load_from_file(name, filepath, weight)


def register_mutation(name: str, func: OperatorFn, weight: float | None = None) -> OperatorFn:
    return default_context().mutations.register(name, func, weight)


def setup_dynamic_mutation(name: str, code: str, weight: float) -> str:
    """Load a mutation from code and enable it with ``weight``."""
    return default_context().mutations.setup_dynamic(name, code, weight)


def clear_dynamic_mutations() -> None:
    default_context().mutations.clear_dynamic()


def list_available_mutations() -> list[str]:
    return default_context().mutations.list_available()


def list_enabled_custom_mutations() -> list[str]:
    return default_context().mutations.list_enabled()


def reload_custom_mutations() -> None:
    default_context().mutations.reload()


def get_custom_mutation_weights() -> dict[str, float]:
    return default_context().mutations.weights()


def get_builtin_weight_overrides() -> dict[str, float]:
    return default_context().mutations.builtin_overrides()


def setup_custom_mutations(
    custom_mutation_names: dict[str, str], mutation_weights: Any
) -> list[str]:
    """Fill the host's mutation slots and weights; returns all enabled names."""
    return _setup_custom_mutations(
        custom_mutation_names, mutation_weights, default_context().mutations
    )


# selection


def apply_custom_selection(
    pop: Population,
    running_search_statistics: RunningSearchStatistics,
    options: SearchOptions,
    rng: random.Random | None = None,
) -> PopMember:
    return default_context().selection.dispatch(pop, running_search_statistics, options, rng)


def load_selection_from_string(name: str, code: str) -> OperatorFn:
    return default_context().selection.load_from_string(name, code)


def load_selection_from_file(name: str, filepath: str | Path) -> OperatorFn:
    return default_context().selection.load_from_file(name, filepath)


def register_selection(name: str, func: OperatorFn) -> OperatorFn:
    return default_context().selection.register(name, func)


def clear_dynamic_selections() -> None:
    default_context().selection.clear_dynamic()


def list_available_selections() -> list[str]:
    return default_context().selection.list_available()


def reload_custom_selections() -> None:
    default_context().selection.reload()


# survival


def apply_custom_survival(
    pop: Population,
    options: SearchOptions,
    exclude_indices: Iterable[int] = (),
) -> int:
    return default_context().survival.dispatch(pop, options, exclude_indices)


def load_survival_from_string(name: str, code: str) -> OperatorFn:
    return default_context().survival.load_from_string(name, code)


def load_survival_from_file(name: str, filepath: str | Path) -> OperatorFn:
    return default_context().survival.load_from_file(name, filepath)


def register_survival(name: str, func: OperatorFn) -> OperatorFn:
    return default_context().survival.register(name, func)


def clear_dynamic_survivals() -> None:
    default_context().survival.clear_dynamic()


def list_available_survivals() -> list[str]:
    return default_context().survival.list_available()


def reload_custom_survivals() -> None:
    default_context().survival.reload()
