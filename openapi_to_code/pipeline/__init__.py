"""
Pipeline - OpenAPI to Code generator.

This module provides a multi-phase architecture for generating code from
OpenAPI documents:

1. Phase 1 (Analyzer): Resolve schemas and operations into a SchemaIR
2. Phase 2 (Mappers): Map IR types onto a target type-system family
3. Phase 3 (Backends): Render the mapped types with Jinja2 templates
4. Phase 4 (Writer): Atomically replace the output files
"""

from __future__ import annotations

from .analyzer import DocumentAnalyzer, SchemaIR, build_ir
from .atomic_writer import AtomicWriter
from .config import GenerationConfig, GeneratorConfig, HooksConfig, InputConfig, load_config
from .errors import (
    ConfigError,
    DanglingReferenceError,
    DocumentLoadError,
    DuplicateOperationIdError,
    GenerationError,
    IRBuildError,
    SchemaError,
    UnboundPathParameterError,
    UnsupportedSchemaShapeError,
)
from .generator import GENERATORS, PipelineGenerator
from .mappers import TargetFamily, get_mapper

__all__ = [
    "AtomicWriter",
    "ConfigError",
    "DanglingReferenceError",
    "DocumentAnalyzer",
    "DocumentLoadError",
    "DuplicateOperationIdError",
    "GENERATORS",
    "GenerationConfig",
    "GenerationError",
    "GeneratorConfig",
    "HooksConfig",
    "IRBuildError",
    "InputConfig",
    "PipelineGenerator",
    "SchemaError",
    "SchemaIR",
    "TargetFamily",
    "UnboundPathParameterError",
    "UnsupportedSchemaShapeError",
    "build_ir",
    "get_mapper",
    "load_config",
]
