"""Survivor replacement: age-regularized default plus a pluggable override."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np

from .dsl import SearchOptions
from .overrides import OverrideRegistry
from .population import PopMember, Population, compute_complexity


class SurvivalIndexError(RuntimeError):
    """A custom survival function returned an unusable population index."""


def default_survival(
    population: Population,
    options: SearchOptions,
    *,
    exclude_indices: Iterable[int] = (),
) -> int:
    """Return the index of the oldest member not in ``exclude_indices``."""
    excluded = set(exclude_indices)
    candidates = [
        (member.birth, i) for i, member in enumerate(population.members) if i not in excluded
    ]
    if not candidates:
        raise ValueError("Every population index is excluded from replacement")
    # ties go to the lowest index
    return min(candidates)[1]


class SurvivalRegistry(OverrideRegistry):
    """Single active custom survival, falling back to age-based replacement."""

    kind = "survival"

    def namespace(self) -> dict[str, Any]:
        return {
            "PopMember": PopMember,
            "Population": Population,
            "compute_complexity": compute_complexity,
            "default_survival": default_survival,
        }

    def dispatch(
        self,
        population: Population,
        options: SearchOptions,
        exclude_indices: Iterable[int] = (),
    ) -> int:
        """Index of the member to replace, always within ``0..population.n - 1``."""
        exclude = list(exclude_indices)
        fn = self._active
        if fn is None:
            return default_survival(population, options, exclude_indices=exclude)
        idx = fn(population, options, exclude_indices=exclude)
        if isinstance(idx, np.integer):
            idx = int(idx)
        if not isinstance(idx, int) or isinstance(idx, bool):
            raise SurvivalIndexError(
                f"Custom survival '{self._active_name}' returned {idx!r}; expected an int index"
            )
        if not 0 <= idx < population.n:
            raise SurvivalIndexError(
                f"Custom survival '{self._active_name}' returned index {idx}, "
                f"must be in 0..{population.n - 1}"
            )
        return idx
