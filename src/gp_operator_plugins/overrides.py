"""Single-slot override registries for selection and survival hooks."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from .loader import (
    OperatorFn,
    OperatorKind,
    compile_operator,
    read_operator_source,
    validate_operator,
)

logger = logging.getLogger(__name__)


class OverrideRegistry:
    """Holds at most one active custom implementation of an operator kind.

    Loading makes the new function active immediately. ``None`` as the
    active function means the kind's default algorithm is used.
    """

    kind: OperatorKind

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._dynamic: dict[str, OperatorFn] = {}
        self._active: OperatorFn | None = None
        self._active_name: str | None = None

    def namespace(self) -> dict[str, Any]:
        """Extra names visible to loaded source, on top of the tree primitives."""
        return {}

    @property
    def active(self) -> OperatorFn | None:
        return self._active

    @property
    def active_name(self) -> str | None:
        return self._active_name

    def _activate(self, name: str, fn: OperatorFn) -> OperatorFn:
        with self._lock:
            # re-insert so the newest load is last in iteration order
            self._dynamic.pop(name, None)
            self._dynamic[name] = fn
            self._active = fn
            self._active_name = name
        logger.info("Loaded %s '%s' (now active)", self.kind, name)
        return fn

    def register(self, name: str, fn: OperatorFn) -> OperatorFn:
        return self._activate(name, validate_operator(self.kind, name, fn))

    def load_from_string(self, name: str, source: str) -> OperatorFn:
        fn = compile_operator(self.kind, name, source, self.namespace())
        return self._activate(name, fn)

    def load_from_file(self, name: str, path: str | Path) -> OperatorFn:
        return self.load_from_string(name, read_operator_source(self.kind, path))

    def clear_dynamic(self) -> None:
        """Drop every loaded function and fall back to the default."""
        with self._lock:
            self._dynamic.clear()
            self._active = None
            self._active_name = None
        logger.info("Cleared dynamic %s overrides", self.kind)

    def list_available(self) -> list[str]:
        return sorted(self._dynamic)

    def reload(self) -> None:
        """Reactivate the most recently loaded function, if any."""
        with self._lock:
            if self._dynamic:
                self._active_name = next(reversed(self._dynamic))
                self._active = self._dynamic[self._active_name]
            else:
                self._active = None
                self._active_name = None
