"""Compile operator source text into live callables.

Operator code is executed with ``exec`` in a fresh namespace that already
holds the tree primitives, so an operator body can call ``sample_node`` or
``set_node`` without importing anything. The code is trusted: nothing here
sandboxes or time-limits it.
"""

from __future__ import annotations

import inspect
import logging
import math
import random
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Literal

import numpy as np

from . import trees

logger = logging.getLogger(__name__)

OperatorKind = Literal["mutation", "selection", "survival"]
OperatorFn = Callable[..., Any]

_PLACEHOLDER = object()

# Arguments each kind is invoked with: (positional count, keyword names).
CALL_CONTRACTS: dict[str, tuple[int, tuple[str, ...]]] = {
    "mutation": (4, ()),  # tree, options, nfeatures, rng
    "selection": (3, ()),  # population, running_search_statistics, options
    "survival": (2, ("exclude_indices",)),  # population, options; exclude_indices=...
}


class OperatorLoadError(ValueError):
    """Operator source failed to compile or did not define a usable callable."""


def base_namespace() -> dict[str, Any]:
    """Names visible to every operator body."""
    return {
        "math": math,
        "random": random,
        "np": np,
        "Node": trees.Node,
        "Expression": trees.Expression,
        "constant": trees.constant,
        "variable": trees.variable,
        "unary": trees.unary,
        "binary": trees.binary,
        "copy_node": trees.copy_node,
        "count_nodes": trees.count_nodes,
        "sample_node": trees.sample_node,
        "get_child": trees.get_child,
        "set_child": trees.set_child,
        "set_node": trees.set_node,
    }


def validate_operator(kind: OperatorKind, name: str, fn: Any) -> OperatorFn:
    """Check that ``fn`` is callable with the argument shape of ``kind``."""
    if not callable(fn):
        raise OperatorLoadError(f"{kind} '{name}' is not callable")
    n_positional, keywords = CALL_CONTRACTS[kind]
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return fn
    try:
        sig.bind(*([_PLACEHOLDER] * n_positional), **dict.fromkeys(keywords, _PLACEHOLDER))
    except TypeError as exc:
        expected = ", ".join(["_"] * n_positional + [f"{k}=_" for k in keywords])
        raise OperatorLoadError(
            f"{kind} '{name}' has signature {sig}; it must accept ({expected})"
        ) from exc
    return fn


def compile_operator(
    kind: OperatorKind,
    name: str,
    source: str,
    namespace: Mapping[str, Any] | None = None,
) -> OperatorFn:
    """Execute ``source`` and return the callable it binds to ``name``.

    Raises :class:`OperatorLoadError` chained to the original fault. The
    caller registers the result only after this returns, so a failure
    leaves every registry untouched.
    """
    if not name.isidentifier():
        raise OperatorLoadError(f"{kind} name '{name}' is not a valid identifier")
    scope = base_namespace()
    if namespace:
        scope.update(namespace)
    try:
        code = compile(source, f"<{kind}:{name}>", "exec")
        exec(code, scope)  # noqa: S102  # nosec B102 - operator authors are trusted
        if name not in scope:
            raise NameError(f"code did not define '{name}'")
        return validate_operator(kind, name, scope[name])
    except Exception as exc:
        logger.error("Failed to load %s '%s' from code: %s", kind, name, exc)
        if isinstance(exc, OperatorLoadError):
            raise
        raise OperatorLoadError(f"Failed to load {kind} '{name}': {exc}") from exc


def read_operator_source(kind: OperatorKind, path: str | Path) -> str:
    path = Path(path)
    if not path.is_file():
        msg = f"{kind.capitalize()} file not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text()
