"""Parent selection: tournament default plus a pluggable override."""

from __future__ import annotations

import random
from typing import Any

import numpy as np

from .dsl import SearchOptions
from .overrides import OverrideRegistry
from .population import PopMember, Population, RunningSearchStatistics, compute_complexity


class SelectionResultError(TypeError):
    """A custom selection function returned something other than a population member."""


def _adjusted_costs(
    sample: list[PopMember],
    running_search_statistics: RunningSearchStatistics,
    options: SearchOptions,
) -> np.ndarray:
    costs = np.array([member.cost for member in sample], dtype=float)
    if not options.use_frequency_in_tournament:
        return costs
    frequencies = running_search_statistics.normalized_frequencies
    penalty = np.zeros(len(sample), dtype=float)
    for i, member in enumerate(sample):
        size = compute_complexity(member, options)
        if 0 < size <= options.maxsize:
            penalty[i] = frequencies[size - 1]
    return costs * np.exp(options.adaptive_parsimony_scaling * penalty)


def default_selection(
    population: Population,
    running_search_statistics: RunningSearchStatistics,
    options: SearchOptions,
    rng: random.Random | None = None,
) -> PopMember:
    """Tournament selection with adaptive parsimony.

    Samples ``tournament_selection_n`` distinct members, penalises each
    cost by how common its complexity currently is, then picks rank ``k``
    of the sample with probability proportional to ``p * (1 - p) ** k``.
    Returns a copy of the winner.
    """
    rng = rng or random.Random()  # noqa: S311  # nosec B311 - search randomness
    sample = rng.sample(population.members, options.tournament_selection_n)
    n = len(sample)
    p = options.tournament_selection_p
    adjusted = _adjusted_costs(sample, running_search_statistics, options)

    if p == 1.0:
        chosen = int(np.argmin(adjusted))
    else:
        ranks = np.arange(n)
        prob_each = p * (1.0 - p) ** ranks
        prob_each = prob_each / prob_each.sum()
        winner_rank = rng.choices(range(n), weights=prob_each.tolist(), k=1)[0]
        if winner_rank == 0:
            chosen = int(np.argmin(adjusted))
        else:
            chosen = int(np.argsort(adjusted, kind="stable")[winner_rank])
    return sample[chosen].copy()


class SelectionRegistry(OverrideRegistry):
    """Single active custom selection, falling back to the tournament."""

    kind = "selection"

    def namespace(self) -> dict[str, Any]:
        return {
            "PopMember": PopMember,
            "Population": Population,
            "RunningSearchStatistics": RunningSearchStatistics,
            "compute_complexity": compute_complexity,
            "default_selection": default_selection,
        }

    def dispatch(
        self,
        population: Population,
        running_search_statistics: RunningSearchStatistics,
        options: SearchOptions,
        rng: random.Random | None = None,
    ) -> PopMember:
        """Select a parent; the result is always a copy, never a live member.

        Raises :class:`SelectionResultError` when an override returns anything
        but a :class:`PopMember`.
        """
        fn = self._active
        if fn is None:
            return default_selection(population, running_search_statistics, options, rng)
        chosen = fn(population, running_search_statistics, options)
        if not isinstance(chosen, PopMember):
            raise SelectionResultError(
                f"Custom selection '{self._active_name}' returned {chosen!r}; expected a PopMember"
            )
        return chosen.copy()
