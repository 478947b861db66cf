"""Project enabled custom mutations onto the host's fixed weight slots."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from .context import default_context
from .dsl import NO_MUTATION, SLOT_NAMES
from .mutations import MutationRegistry

logger = logging.getLogger(__name__)


def _has_field(record: Any, name: str) -> bool:
    model_fields = getattr(type(record), "model_fields", None)
    if isinstance(model_fields, dict):
        return name in model_fields
    if dataclasses.is_dataclass(record):
        return any(f.name == name for f in dataclasses.fields(record))
    return hasattr(record, name)


def setup_custom_mutations(
    custom_mutation_names: dict[str, str],
    mutation_weights: Any,
    registry: MutationRegistry | None = None,
) -> list[str]:
    """Wire enabled custom mutations into ``custom_mutation_1..5``.

    ``custom_mutation_names`` maps each slot to an operator name (or
    ``"none"``) and is rewritten in full; ``mutation_weights`` receives the
    slot weights and any builtin weight overrides it has a field for.
    Without ``registry`` the process default context's mutations are used.
    Returns every enabled name, including ones that did not fit a slot.
    """
    if registry is None:
        registry = default_context().mutations
    enabled = registry.list_enabled()
    weights = registry.weights()

    for slot in SLOT_NAMES:
        custom_mutation_names[slot] = NO_MUTATION
        if _has_field(mutation_weights, slot):
            setattr(mutation_weights, slot, 0.0)

    if len(enabled) > len(SLOT_NAMES):
        logger.warning(
            "%d custom mutations enabled, only the first %d will be used: %s",
            len(enabled),
            len(SLOT_NAMES),
            ", ".join(enabled[: len(SLOT_NAMES)]),
        )
    for slot, name in zip(SLOT_NAMES, enabled, strict=False):
        custom_mutation_names[slot] = name
        setattr(mutation_weights, slot, weights[name])

    for name, weight in registry.builtin_overrides().items():
        if _has_field(mutation_weights, name):
            setattr(mutation_weights, name, weight)

    return enabled
