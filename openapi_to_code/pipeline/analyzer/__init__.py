"""
Analyzer module.

Contains reference tracking, type resolution, the schema catalog, the
operation extractor and IR building.
"""

from __future__ import annotations

from .analyzer import DocumentAnalyzer, build_ir
from .catalog import SchemaCatalogBuilder
from .ir_nodes import (
    ArrayType,
    EnumType,
    FieldDescriptor,
    HttpMethod,
    Metadata,
    ObjectType,
    OperationDefinition,
    ParameterDescriptor,
    ParameterLocation,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    SchemaDefinition,
    SchemaIR,
    StringFormatKind,
    StringFormatType,
    TypeDescriptor,
)
from .operations import OperationExtractor
from .reference_graph import ReferenceGraph
from .type_resolver import TypeResolver

__all__ = [
    "ArrayType",
    "DocumentAnalyzer",
    "EnumType",
    "FieldDescriptor",
    "HttpMethod",
    "Metadata",
    "ObjectType",
    "OperationDefinition",
    "OperationExtractor",
    "ParameterDescriptor",
    "ParameterLocation",
    "PrimitiveKind",
    "PrimitiveType",
    "ReferenceGraph",
    "ReferenceType",
    "SchemaCatalogBuilder",
    "SchemaDefinition",
    "SchemaIR",
    "StringFormatKind",
    "StringFormatType",
    "TypeDescriptor",
    "TypeResolver",
    "build_ir",
]
