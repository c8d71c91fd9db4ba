"""
Schema catalog builder.

Produces one SchemaDefinition per entry of components.schemas. Pass 1
declares every name so forward and cyclic references can be resolved;
pass 2 resolves every body in document order.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from ..errors import SchemaError, UnsupportedSchemaShapeError
from .ir_nodes import ReferenceType, SchemaDefinition, TypeDescriptor
from .reference_graph import ReferenceGraph
from .type_resolver import TypeResolver, escape_pointer

logger = logging.getLogger(__name__)

SCHEMAS_PATH = "#/components/schemas"


class SchemaCatalogBuilder:
    """Builds the SchemaDefinition set of a document."""

    def __init__(self, graph: ReferenceGraph, resolver: TypeResolver):
        self.graph = graph
        self.resolver = resolver
        self.graph.bind(self._resolve_body)

    @property
    def errors(self) -> list[SchemaError]:
        return self.resolver.errors

    def build(self, document: dict[str, Any]) -> dict[str, SchemaDefinition]:
        """
        Build the catalog.

        Args:
            document: OpenAPI document tree

        Returns:
            Definitions keyed by name, in document order. Errors are left in
            the resolver's error list.
        """
        schemas = self._component_schemas(document)

        # Pass 1: declare
        for name, node in schemas.items():
            self.graph.declare(name, node)

        # Pass 2: resolve (bodies already pulled in by an earlier reference are memoized)
        definitions: dict[str, SchemaDefinition] = {}
        for name, node in schemas.items():
            self.graph.resolve(name)
            description = node.get("description") if isinstance(node, dict) else None
            definitions[name] = SchemaDefinition(
                name=name,
                type=self.graph.lookup(name),
                description=description,
                raw=copy.deepcopy(node),
            )

        self._check_alias_cycles(definitions)
        logger.debug("Catalog built with %d definitions", len(definitions))
        return definitions

    def _check_alias_cycles(self, definitions: dict[str, SchemaDefinition]) -> None:
        """Report definitions that are bare references chasing each other in a loop."""
        reported: set[str] = set()
        for name in definitions:
            chain: list[str] = []
            current = name
            while current not in chain:
                definition = definitions.get(current)
                if definition is None or not isinstance(definition.type, ReferenceType):
                    break
                chain.append(current)
                current = definition.type.name
            else:
                cycle = chain[chain.index(current) :]
                if not reported.intersection(cycle):
                    reported.update(cycle)
                    self.errors.append(
                        UnsupportedSchemaShapeError(
                            f"{SCHEMAS_PATH}/{escape_pointer(cycle[0])}",
                            f"Reference cycle through {' -> '.join([*cycle, cycle[0]])}",
                        )
                    )

    def _component_schemas(self, document: dict[str, Any]) -> dict[str, Any]:
        components = document.get("components") or {}
        if not isinstance(components, dict):
            self.errors.append(UnsupportedSchemaShapeError("#/components", "components must be a mapping"))
            return {}

        schemas = components.get("schemas") or {}
        if not isinstance(schemas, dict):
            self.errors.append(UnsupportedSchemaShapeError(SCHEMAS_PATH, "schemas must be a mapping"))
            return {}
        return schemas

    def _resolve_body(self, name: str, node: Any) -> TypeDescriptor:
        return self.resolver.resolve(node, f"{SCHEMAS_PATH}/{escape_pointer(name)}")
