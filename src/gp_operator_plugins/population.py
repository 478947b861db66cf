"""Population bookkeeping consumed by the selection and survival hooks."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

import numpy as np

from .dsl import SearchOptions
from .trees import ExpressionWrapper, Node, count_nodes, unwrap


@dataclass
class PopMember:
    """One evaluated expression in the population."""

    tree: Node | ExpressionWrapper
    cost: float
    loss: float
    birth: int | float
    ref: int
    parent: int = -1

    def copy(self) -> PopMember:
        return PopMember(
            tree=copy.deepcopy(self.tree),
            cost=self.cost,
            loss=self.loss,
            birth=self.birth,
            ref=self.ref,
            parent=self.parent,
        )


@dataclass
class Population:
    members: list[PopMember]

    @property
    def n(self) -> int:
        return len(self.members)


@dataclass
class RunningSearchStatistics:
    """Windowed counts of how often each complexity size appears.

    ``normalized_frequencies[size - 1]`` holds the share for ``size``.
    """

    maxsize: int
    window_size: int = 100_000
    frequencies: np.ndarray = field(init=False)
    normalized_frequencies: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        self.frequencies = np.ones(self.maxsize, dtype=float)
        self.normalized_frequencies = self.frequencies / self.frequencies.sum()

    @classmethod
    def from_options(cls, options: SearchOptions) -> RunningSearchStatistics:
        return cls(maxsize=options.maxsize)

    def record(self, size: int) -> None:
        if 0 < size <= self.maxsize:
            self.frequencies[size - 1] += 1.0

    def move_window(self) -> None:
        """Rescale counts so they sum to at most ``window_size``."""
        total = self.frequencies.sum()
        if total > self.window_size:
            self.frequencies *= self.window_size / total

    def normalize(self) -> None:
        self.normalized_frequencies = self.frequencies / self.frequencies.sum()


def compute_complexity(member: PopMember | Node | ExpressionWrapper, options: SearchOptions) -> int:
    """Complexity is the node count; every operator and leaf costs 1."""
    tree = member.tree if isinstance(member, PopMember) else member
    return count_nodes(unwrap(tree))
