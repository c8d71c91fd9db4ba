"""OpenAPI to Code Generator

A Python package for resolving OpenAPI 3 documents into an intermediate
representation and generating Zod schemas, TypeScript types and Go structs
from it.
"""

__version__ = "1.0.1"
__author__ = "François Lagunas"

from .loader import load_document
from .pipeline import (
    AtomicWriter,
    DocumentAnalyzer,
    GeneratorConfig,
    IRBuildError,
    PipelineGenerator,
    SchemaError,
    SchemaIR,
    TargetFamily,
    build_ir,
    get_mapper,
    load_config,
)

__all__ = [
    "AtomicWriter",
    "DocumentAnalyzer",
    "GeneratorConfig",
    "IRBuildError",
    "PipelineGenerator",
    "SchemaError",
    "SchemaIR",
    "TargetFamily",
    "build_ir",
    "get_mapper",
    "load_config",
    "load_document",
]
