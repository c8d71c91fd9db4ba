"""
Reference graph for named schema resolution.

Assigns every named schema a stable identity, memoizes the resolution of
each body and short-circuits cycles: a name that is being resolved on the
current path resolves to a ReferenceType instead of recursing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..errors import DanglingReferenceError
from .ir_nodes import ReferenceType, TypeDescriptor

logger = logging.getLogger(__name__)

BodyResolver = Callable[[str, Any], TypeDescriptor]


class ReferenceGraph:
    """Tracks named schema definitions for one document.

    A graph must not be shared between documents: the in-progress marker is
    what makes cycle detection work.
    """

    def __init__(self) -> None:
        self._declared: dict[str, Any] = {}  # name -> raw node, in declaration order
        self._resolved: dict[str, TypeDescriptor] = {}
        self._in_progress: list[str] = []
        self._body_resolver: BodyResolver | None = None

    def bind(self, body_resolver: BodyResolver) -> None:
        """Set the callable used to resolve a declared body on demand."""
        self._body_resolver = body_resolver

    def declare(self, name: str, node: Any) -> None:
        """Register a name before its body is resolved."""
        if name not in self._declared:
            logger.debug("Declared schema %s", name)
        self._declared[name] = node

    def is_declared(self, name: str) -> bool:
        return name in self._declared

    def is_resolved(self, name: str) -> bool:
        return name in self._resolved

    def is_in_progress(self, name: str) -> bool:
        return name in self._in_progress

    def declared_node(self, name: str) -> Any:
        """Get the raw node a name was declared with."""
        return self._declared[name]

    @property
    def declared_names(self) -> list[str]:
        return list(self._declared)

    def resolve(self, name: str) -> TypeDescriptor:
        """
        Resolve a named schema.

        The body of a declared name is resolved the first time it is asked
        for and memoized; the returned descriptor is always the name
        indirection, never the body itself.

        Args:
            name: Schema name

        Returns:
            ReferenceType pointing at the name

        Raises:
            DanglingReferenceError: If the name was never declared
        """
        if name not in self._declared:
            raise DanglingReferenceError(name)

        if name in self._in_progress:
            logger.debug("Cycle through %s, emitting reference", name)
            return ReferenceType(name)

        if name not in self._resolved:
            self._resolve_body(name)

        return ReferenceType(name)

    def lookup(self, name: str) -> TypeDescriptor | None:
        """Get the resolved body of a name, or None if not (yet) resolved."""
        return self._resolved.get(name)

    def _resolve_body(self, name: str) -> None:
        if self._body_resolver is None:
            raise RuntimeError("ReferenceGraph has no body resolver bound")

        logger.debug("Resolving schema %s (path: %s)", name, " -> ".join([*self._in_progress, name]))
        self._in_progress.append(name)
        try:
            body = self._body_resolver(name, self._declared[name])
        finally:
            self._in_progress.pop()
        self._resolved[name] = body
