"""
Errors raised while turning an OpenAPI document into IR.

Every error raised by the analyzer derives from SchemaError and carries the
document path it was found at. The analyzer never stops at the first problem:
errors of one pass are collected and surfaced together in an IRBuildError.
"""

from __future__ import annotations


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    def __init__(self, message: str, schema_path: str | None = None) -> None:
        self.message = message
        self.schema_path = schema_path
        full_message = message if not schema_path else f"[{schema_path}] {message}"
        super().__init__(full_message)


class DanglingReferenceError(SchemaError):
    """Raised when a reference points to a schema that was never declared."""

    def __init__(self, name: str, schema_path: str | None = None, kind: str = "schema") -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"Reference to undeclared {kind} '{name}'", schema_path)


class UnboundPathParameterError(SchemaError):
    """Raised when a path placeholder has no matching path parameter."""

    def __init__(self, operation: str, placeholder: str, schema_path: str | None = None) -> None:
        self.operation = operation
        self.placeholder = placeholder
        super().__init__(
            f"Operation '{operation}' has no path parameter for placeholder '{{{placeholder}}}'",
            schema_path,
        )


class UnsupportedSchemaShapeError(SchemaError):
    """Raised for schema shapes that cannot be reduced to any IR type."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(reason, path)


class DuplicateOperationIdError(SchemaError):
    """Raised when two operations declare the same operationId."""

    def __init__(self, operation_id: str, schema_path: str | None = None) -> None:
        self.operation_id = operation_id
        super().__init__(f"Duplicate operationId '{operation_id}'", schema_path)


class IRBuildError(Exception):
    """Raised when a document could not be turned into a complete IR.

    Attributes:
        errors: Every error found, in the order it was found
    """

    def __init__(self, errors: list[SchemaError]) -> None:
        self.errors = list(errors)
        count = len(self.errors)
        lines = [f"IR build failed with {count} error{'s' if count != 1 else ''}:"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))


class DocumentLoadError(Exception):
    """Raised when an input document cannot be read or parsed."""

    pass


class ConfigError(Exception):
    """Raised when the generator configuration is missing or invalid."""

    pass


class GenerationError(Exception):
    """Raised when code cannot be emitted for a generation entry."""

    pass
