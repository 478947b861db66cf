"""Custom mutation operators: static built-ins plus runtime-loaded code."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .dsl import DEFAULT_CONFIG_PATH, OperatorConfig, SearchOptions, load_operator_config
from .loader import compile_operator, read_operator_source, validate_operator
from .trees import ExpressionWrapper, Node, binary, constant, copy_node, sample_node, set_node

logger = logging.getLogger(__name__)

MutationFn = Callable[[Node, SearchOptions, int, random.Random], Node]


def add_constant_offset(
    tree: Node, options: SearchOptions, nfeatures: int, rng: random.Random
) -> Node:
    """Wrap a random subtree as ``subtree + c`` with ``c ~ N(0, 1)``.

    Unlike constant perturbation this introduces a new additive term
    anywhere in the tree, not only at existing constants.
    """
    if "+" not in options.binary_operators:
        return tree
    node = sample_node(tree, rng)
    offset = constant(rng.gauss(0.0, 1.0))
    if rng.random() < 0.5:
        wrapped = binary("+", copy_node(node), offset)
    else:
        wrapped = binary("+", offset, copy_node(node))
    set_node(node, wrapped)
    return tree


STATIC_MUTATIONS: dict[str, MutationFn] = {
    "add_constant_offset": add_constant_offset,
}


def _check_weight(name: str, weight: float) -> float:
    weight = float(weight)
    if weight < 0.0:
        raise ValueError(f"Mutation weight for '{name}' must be >= 0, got {weight}")
    return weight


class MutationRegistry:
    """Weighted, name-keyed registry of mutation operators.

    Dynamically loaded operators and the weights given with them outlive
    :meth:`reload`; everything else is re-derived from the static set and
    the config file.
    """

    kind = "mutation"

    def __init__(
        self,
        config_path: str | Path = DEFAULT_CONFIG_PATH,
        lock: threading.RLock | None = None,
    ) -> None:
        self.config_path = Path(config_path)
        self._lock = lock or threading.RLock()
        self._registry: dict[str, MutationFn] = {}
        self._weights: dict[str, float] = {}
        self._builtin_overrides: dict[str, float] = {}
        self._dynamic: dict[str, MutationFn] = {}
        self._dynamic_weights: dict[str, float] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.reload()

    def reload(self, config: OperatorConfig | None = None) -> None:
        """Rebuild registry and weights from static, dynamic and config sources.

        ``config`` replaces reading :attr:`config_path` when the caller has
        already loaded it.
        """
        with self._lock:
            self._registry.clear()
            self._weights.clear()
            self._builtin_overrides.clear()

            self._registry.update(STATIC_MUTATIONS)
            self._registry.update(self._dynamic)

            cfg = config if config is not None else load_operator_config(self.config_path)
            self._builtin_overrides.update(cfg.builtin_weights)
            for name, weight in cfg.custom_mutations.items():
                if weight > 0 and name in self._registry:
                    self._weights[name] = weight
                elif weight > 0:
                    logger.debug("Custom mutation '%s' configured but not yet loaded", name)

            # runtime registrations win over the config file
            for name, weight in self._dynamic_weights.items():
                if name in self._registry:
                    self._apply_weight(name, weight)

            self._initialized = True
            logger.debug(
                "Reloaded mutations: %d registered, %d enabled",
                len(self._registry),
                len(self._weights),
            )

    def _apply_weight(self, name: str, weight: float) -> None:
        if weight > 0:
            self._weights[name] = weight
        else:
            self._weights.pop(name, None)

    def register(self, name: str, fn: MutationFn, weight: float | None = None) -> MutationFn:
        """Register an already-built callable as a dynamic mutation."""
        fn = validate_operator("mutation", name, fn)
        return self._add_dynamic(name, fn, weight)

    def _add_dynamic(self, name: str, fn: MutationFn, weight: float | None) -> MutationFn:
        if weight is not None:
            weight = _check_weight(name, weight)
        with self._lock:
            self._dynamic[name] = fn
            self._registry[name] = fn
            if weight is not None:
                self._dynamic_weights[name] = weight
                self._apply_weight(name, weight)
        logger.info("Loaded mutation '%s'", name)
        return fn

    def load_from_string(self, name: str, source: str, weight: float | None = None) -> MutationFn:
        """Compile ``source`` and register the function it defines as ``name``.

        The code must define ``def name(tree, options, nfeatures, rng)``
        returning the (possibly new) tree.
        """
        if weight is not None:
            _check_weight(name, weight)
        fn = compile_operator("mutation", name, source)
        return self._add_dynamic(name, fn, weight)

    def load_from_file(
        self, name: str, path: str | Path, weight: float | None = None
    ) -> MutationFn:
        return self.load_from_string(name, read_operator_source("mutation", path), weight)

    def setup_dynamic(self, name: str, source: str, weight: float) -> str:
        """Load a mutation and enable it with ``weight`` in one call."""
        self.load_from_string(name, source, weight=weight)
        return name

    def set_weight(self, name: str, weight: float) -> None:
        """Change a registered mutation's weight.

        Weights of dynamic mutations persist across :meth:`reload`; weights
        of static mutations last until the next reload re-reads the config.
        """
        weight = _check_weight(name, weight)
        self._ensure_initialized()
        with self._lock:
            if name not in self._registry:
                raise KeyError(f"Mutation '{name}' is not registered")
            if name in self._dynamic:
                self._dynamic_weights[name] = weight
            self._apply_weight(name, weight)

    def clear_dynamic(self) -> None:
        """Forget every dynamically loaded mutation and its weight."""
        with self._lock:
            for name in self._dynamic:
                self._weights.pop(name, None)
                if name in STATIC_MUTATIONS:
                    self._registry[name] = STATIC_MUTATIONS[name]
                else:
                    self._registry.pop(name, None)
            cleared = len(self._dynamic)
            self._dynamic.clear()
            self._dynamic_weights.clear()
        logger.info("Cleared %d dynamic mutation(s)", cleared)

    def list_available(self) -> list[str]:
        return sorted(set(STATIC_MUTATIONS) | set(self._dynamic))

    def list_enabled(self) -> list[str]:
        """Enabled names, heaviest first; ties keep registration order."""
        self._ensure_initialized()
        return sorted(self._weights, key=lambda name: -self._weights[name])

    def weights(self) -> dict[str, float]:
        self._ensure_initialized()
        return dict(self._weights)

    def builtin_overrides(self) -> dict[str, float]:
        self._ensure_initialized()
        return dict(self._builtin_overrides)

    def get(self, name: str) -> MutationFn | None:
        self._ensure_initialized()
        return self._registry.get(name)

    def dispatch(
        self,
        name: str,
        tree: Node | ExpressionWrapper,
        options: SearchOptions,
        nfeatures: int,
        rng: random.Random | None = None,
    ) -> Any:
        """Apply mutation ``name``; unknown names leave the tree untouched."""
        rng = rng or random.Random()  # noqa: S311  # nosec B311 - search randomness
        if isinstance(tree, ExpressionWrapper):
            new_tree = self.dispatch(name, tree.get_contents(), options, nfeatures, rng)
            return tree.with_contents(new_tree)
        self._ensure_initialized()
        fn = self._registry.get(name)
        if fn is None:
            logger.warning("Custom mutation '%s' not found in registry", name)
            return tree
        return fn(tree, options, nfeatures, rng)
