"""Minimal expression-tree primitives shared with operator source code.

The host search owns the real tree type; this module is the surface that
dynamically loaded operators are compiled against. Nodes are mutable and
are edited in place, mirroring how the search rewrites trees.
"""

from __future__ import annotations

import copy
import random
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(eq=True)
class Node:
    """A single expression node.

    Exactly one of ``op`` (with children), ``val`` (constant) or
    ``feature`` (input column) describes the node.
    """

    op: str | None = None
    children: list[Node] = field(default_factory=list)
    val: float | None = None
    feature: int | None = None

    @property
    def degree(self) -> int:
        return len(self.children)

    @property
    def is_constant(self) -> bool:
        return self.op is None and self.val is not None

    def walk(self) -> Iterator[Node]:
        """Yield nodes depth-first, parents before children."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __str__(self) -> str:
        if self.op is None:
            return f"x{self.feature}" if self.feature is not None else repr(self.val)
        if self.degree == 1:
            return f"{self.op}({self.children[0]})"
        left, right = self.children
        return f"({left} {self.op} {right})"


def constant(val: float) -> Node:
    return Node(val=float(val))


def variable(feature: int) -> Node:
    return Node(feature=int(feature))


def unary(op: str, child: Node) -> Node:
    return Node(op=op, children=[child])


def binary(op: str, left: Node, right: Node) -> Node:
    return Node(op=op, children=[left, right])


def copy_node(node: Node) -> Node:
    return copy.deepcopy(node)


def count_nodes(tree: Node) -> int:
    return sum(1 for _ in tree.walk())


def sample_node(tree: Node, rng: random.Random) -> Node:
    """Pick a node uniformly at random from ``tree``."""
    return rng.choice(list(tree.walk()))


def get_child(node: Node, i: int) -> Node:
    """Return child ``i`` (0-based)."""
    return node.children[i]


def set_child(node: Node, i: int, child: Node) -> None:
    node.children[i] = child


def set_node(target: Node, source: Node) -> None:
    """Overwrite ``target`` in place so every reference to it sees ``source``."""
    target.op = source.op
    target.children = source.children
    target.val = source.val
    target.feature = source.feature


@runtime_checkable
class ExpressionWrapper(Protocol):
    """Anything that carries a tree and can be rebuilt around a new one."""

    def get_contents(self) -> Node: ...

    def with_contents(self, tree: Node) -> ExpressionWrapper: ...


@dataclass
class Expression:
    """Tree plus the metadata the host keeps next to it."""

    tree: Node
    metadata: dict[str, object] = field(default_factory=dict)

    def get_contents(self) -> Node:
        return self.tree

    def with_contents(self, tree: Node) -> Expression:
        return Expression(tree=tree, metadata=dict(self.metadata))


def unwrap(tree: Node | ExpressionWrapper) -> Node:
    if isinstance(tree, Node):
        return tree
    return tree.get_contents()
