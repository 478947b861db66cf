"""Owned state for the three operator registries.

Registry-mutating calls (load, register, clear, reload) serialize on one
re-entrant lock shared by all three registries. Dispatch does not take the
lock, so mutation must not overlap with dispatch from other workers.
"""

from __future__ import annotations

import threading
from pathlib import Path

from .dsl import DEFAULT_CONFIG_PATH, OperatorConfig
from .mutations import MutationRegistry
from .selection import SelectionRegistry
from .survival import SurvivalRegistry


class OperatorContext:
    """Mutation, selection and survival registries for one search process."""

    def __init__(self, config_path: str | Path = DEFAULT_CONFIG_PATH) -> None:
        self.lock = threading.RLock()
        self.mutations = MutationRegistry(config_path=config_path, lock=self.lock)
        self.selection = SelectionRegistry(lock=self.lock)
        self.survival = SurvivalRegistry(lock=self.lock)

    @property
    def config_path(self) -> Path:
        return self.mutations.config_path

    def reload(self, config: OperatorConfig | None = None) -> None:
        with self.lock:
            self.mutations.reload(config)
            self.selection.reload()
            self.survival.reload()

    def clear_dynamic(self) -> None:
        with self.lock:
            self.mutations.clear_dynamic()
            self.selection.clear_dynamic()
            self.survival.clear_dynamic()


_DEFAULT: OperatorContext | None = None
_DEFAULT_LOCK = threading.Lock()


def default_context() -> OperatorContext:
    """Return the process-wide context, creating it on first use."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = OperatorContext()
        return _DEFAULT


def reset_default_context(config_path: str | Path = DEFAULT_CONFIG_PATH) -> OperatorContext:
    """Replace the process-wide context with a fresh one."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        _DEFAULT = OperatorContext(config_path=config_path)
        return _DEFAULT
