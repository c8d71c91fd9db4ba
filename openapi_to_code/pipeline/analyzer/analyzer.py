"""
Document analyzer that transforms an OpenAPI document tree to IR.

Runs the schema catalog pass and the operation pass over one shared
reference graph, then assembles the immutable SchemaIR. Errors of both
passes are aggregated; an IR is only returned when there are none.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any

from ..errors import IRBuildError, SchemaError, UnsupportedSchemaShapeError
from .catalog import SchemaCatalogBuilder
from .ir_nodes import Metadata, SchemaIR
from .operations import OperationExtractor
from .reference_graph import ReferenceGraph
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

EXTENSION_PREFIX = "x-"


def extract_extensions(node: Any) -> dict[str, Any]:
    """Collect the x-* keys of a mapping, in order."""
    if not isinstance(node, dict):
        return {}
    return {k: v for k, v in node.items() if isinstance(k, str) and k.startswith(EXTENSION_PREFIX)}


class DocumentAnalyzer:
    """Analyzes an OpenAPI document and builds IR."""

    def analyze(self, document: dict[str, Any]) -> SchemaIR:
        """
        Analyze a document tree.

        Args:
            document: Parsed OpenAPI document

        Returns:
            Complete SchemaIR

        Raises:
            IRBuildError: If any error was found; carries all of them in order
        """
        if not isinstance(document, dict):
            raise IRBuildError([UnsupportedSchemaShapeError("#", "document root must be a mapping")])

        # Fresh state per document: the graph's in-progress marker must not leak
        errors: list[SchemaError] = []
        graph = ReferenceGraph()
        resolver = TypeResolver(graph, errors)
        catalog = SchemaCatalogBuilder(graph, resolver)
        extractor = OperationExtractor(resolver)

        source_version = str(document.get("openapi", ""))
        if not source_version.startswith("3."):
            logger.warning("Document declares openapi version %r, expected 3.x", source_version or None)

        definitions = catalog.build(document)
        operations = extractor.extract(document)

        if errors:
            logger.debug("Analysis failed with %d errors", len(errors))
            raise IRBuildError(errors)

        ir = SchemaIR(
            metadata=self._build_metadata(document),
            definitions=MappingProxyType(definitions),
            operations=tuple(operations),
            source_version=source_version,
            extensions=MappingProxyType(extract_extensions(document)),
        )
        logger.info("Built IR: %d definitions, %d operations", len(ir.definitions), len(ir.operations))
        return ir

    def _build_metadata(self, document: dict[str, Any]) -> Metadata:
        info = document.get("info") or {}
        if not isinstance(info, dict):
            info = {}

        base_url = None
        servers = document.get("servers")
        if isinstance(servers, list) and servers and isinstance(servers[0], dict):
            base_url = servers[0].get("url")

        return Metadata(
            title=str(info.get("title", "")),
            version=str(info.get("version", "")),
            description=info.get("description"),
            base_url=base_url,
            extensions=MappingProxyType(extract_extensions(info)),
        )


def build_ir(document: dict[str, Any]) -> SchemaIR:
    """Convenience wrapper around DocumentAnalyzer.analyze."""
    return DocumentAnalyzer().analyze(document)
