"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed OpenAPI document, ready for type mapping
and code generation. Named schemas are referenced by name only: the
definitions mapping of SchemaIR is the single owner of every definition, so
cyclic schema graphs never expand into infinite structures.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class PrimitiveKind(str, Enum):
    """Base kind of a scalar type."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"  # Untyped schema, rendered as a dynamic type


class StringFormatKind(str, Enum):
    """Semantically distinguished string formats."""

    DATE = "date"
    DATE_TIME = "date-time"
    EMAIL = "email"
    UUID = "uuid"
    URI = "uri"
    BINARY = "binary"


class ParameterLocation(str, Enum):
    """Where an operation parameter is carried."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class HttpMethod(str, Enum):
    """HTTP methods an OpenAPI path item can declare."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


@dataclass(frozen=True)
class TypeDescriptor:
    """Base class for all IR types."""

    # oneOf/anyOf branches discarded when the node was reduced to its first branch
    alternatives: tuple[TypeDescriptor, ...] = field(default=(), kw_only=True)


@dataclass(frozen=True)
class PrimitiveType(TypeDescriptor):
    """A scalar type."""

    kind: PrimitiveKind = PrimitiveKind.UNKNOWN
    format: str | None = None  # Non-semantic format marker (int32, int64, float, double, ...)


@dataclass(frozen=True)
class StringFormatType(TypeDescriptor):
    """A string with a semantically distinguished format."""

    kind: StringFormatKind = StringFormatKind.DATE_TIME


@dataclass(frozen=True)
class ArrayType(TypeDescriptor):
    """A homogeneous list."""

    element: TypeDescriptor = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class FieldDescriptor:
    """A property of an object type."""

    name: str = ""
    type: TypeDescriptor = field(default_factory=PrimitiveType)
    required: bool = False
    nullable: bool = False
    description: str | None = None

    # Original property node (bounds, patterns, examples, x-* extensions)
    raw: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ObjectType(TypeDescriptor):
    """An object with ordered fields. No fields means a free-form object."""

    fields: tuple[FieldDescriptor, ...] = ()

    def field_named(self, name: str) -> FieldDescriptor | None:
        for field_desc in self.fields:
            if field_desc.name == name:
                return field_desc
        return None


@dataclass(frozen=True)
class EnumType(TypeDescriptor):
    """A closed set of string literals in declaration order."""

    variants: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReferenceType(TypeDescriptor):
    """A non-owning pointer to a named SchemaDefinition."""

    name: str = ""


@dataclass(frozen=True)
class SchemaDefinition:
    """A named schema from components.schemas."""

    name: str = ""
    type: TypeDescriptor = field(default_factory=PrimitiveType)
    description: str | None = None
    raw: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ParameterDescriptor:
    """A resolved operation parameter."""

    name: str = ""
    location: ParameterLocation = ParameterLocation.QUERY
    type: TypeDescriptor = field(default_factory=PrimitiveType)
    required: bool = False
    nullable: bool = False
    description: str | None = None
    raw: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class OperationDefinition:
    """A single path x method entry."""

    operation_id: str = ""
    method: HttpMethod = HttpMethod.GET
    path: str = ""
    parameters: tuple[ParameterDescriptor, ...] = ()
    request_body: TypeDescriptor | None = None
    response: TypeDescriptor | None = None
    tags: tuple[str, ...] = ()

    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    request_body_required: bool = False
    request_content_type: str | None = None
    response_status: str | None = None
    response_content_type: str | None = None
    raw: Any = field(default=None, compare=False)

    def parameters_in(self, location: ParameterLocation) -> tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if p.location == location)


@dataclass(frozen=True)
class Metadata:
    """Document level information."""

    title: str = ""
    version: str = ""
    description: str | None = None
    base_url: str | None = None
    extensions: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class SchemaIR:
    """The complete Intermediate Representation of one document."""

    metadata: Metadata = field(default_factory=Metadata)

    # All schema definitions keyed by name, in document order
    definitions: Mapping[str, SchemaDefinition] = field(default_factory=lambda: MappingProxyType({}))

    # All operations in document order
    operations: tuple[OperationDefinition, ...] = ()

    # Source dialect
    format: str = "openapi"
    source_version: str = ""

    # Top-level x-* keys of the document
    extensions: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def lookup(self, name: str) -> SchemaDefinition:
        """Resolve a ReferenceType name against the definition set."""
        return self.definitions[name]

    def recursive_names(self) -> frozenset[str]:
        """Names of definitions that take part in a reference cycle."""
        edges = {name: sorted(set(referenced_names(d.type))) for name, d in self.definitions.items()}
        return frozenset(_cyclic_nodes(edges))

    def to_dict(self) -> dict[str, Any]:
        """Deterministic, JSON-serializable view of the IR."""
        return {
            "format": self.format,
            "source_version": self.source_version,
            "metadata": {
                "title": self.metadata.title,
                "version": self.metadata.version,
                "description": self.metadata.description,
                "base_url": self.metadata.base_url,
                "extensions": dict(self.metadata.extensions),
            },
            "definitions": [
                {
                    "name": d.name,
                    "description": d.description,
                    "type": descriptor_to_dict(d.type),
                    "raw": d.raw,
                }
                for d in self.definitions.values()
            ],
            "operations": [_operation_to_dict(op) for op in self.operations],
            "extensions": dict(self.extensions),
        }


def iter_descriptors(descriptor: TypeDescriptor) -> Iterator[TypeDescriptor]:
    """Walk a descriptor tree depth first, alternatives included.

    References are not followed, so the walk always terminates.
    """
    yield descriptor
    for alternative in descriptor.alternatives:
        yield from iter_descriptors(alternative)
    if isinstance(descriptor, ArrayType):
        yield from iter_descriptors(descriptor.element)
    elif isinstance(descriptor, ObjectType):
        for field_desc in descriptor.fields:
            yield from iter_descriptors(field_desc.type)


def referenced_names(descriptor: TypeDescriptor) -> list[str]:
    """Names referenced anywhere inside a descriptor, in walk order."""
    return [d.name for d in iter_descriptors(descriptor) if isinstance(d, ReferenceType)]


def descriptor_to_dict(descriptor: TypeDescriptor) -> dict[str, Any]:
    """Serialize a descriptor to plain data."""
    if isinstance(descriptor, PrimitiveType):
        result: dict[str, Any] = {"kind": "primitive", "type": descriptor.kind.value}
        if descriptor.format:
            result["format"] = descriptor.format
    elif isinstance(descriptor, StringFormatType):
        result = {"kind": "string_format", "format": descriptor.kind.value}
    elif isinstance(descriptor, ArrayType):
        result = {"kind": "array", "element": descriptor_to_dict(descriptor.element)}
    elif isinstance(descriptor, ObjectType):
        result = {
            "kind": "object",
            "fields": [
                {
                    "name": f.name,
                    "type": descriptor_to_dict(f.type),
                    "required": f.required,
                    "nullable": f.nullable,
                    "description": f.description,
                    "raw": f.raw,
                }
                for f in descriptor.fields
            ],
        }
    elif isinstance(descriptor, EnumType):
        result = {"kind": "enum", "variants": list(descriptor.variants)}
    elif isinstance(descriptor, ReferenceType):
        result = {"kind": "reference", "name": descriptor.name}
    else:
        raise TypeError(f"Unknown descriptor: {descriptor!r}")

    if descriptor.alternatives:
        result["alternatives"] = [descriptor_to_dict(a) for a in descriptor.alternatives]
    return result


def _operation_to_dict(op: OperationDefinition) -> dict[str, Any]:
    return {
        "operation_id": op.operation_id,
        "method": op.method.value,
        "path": op.path,
        "parameters": [
            {
                "name": p.name,
                "location": p.location.value,
                "required": p.required,
                "nullable": p.nullable,
                "description": p.description,
                "type": descriptor_to_dict(p.type),
            }
            for p in op.parameters
        ],
        "request_body": descriptor_to_dict(op.request_body) if op.request_body else None,
        "request_body_required": op.request_body_required,
        "request_content_type": op.request_content_type,
        "response": descriptor_to_dict(op.response) if op.response else None,
        "response_status": op.response_status,
        "response_content_type": op.response_content_type,
        "tags": list(op.tags),
        "summary": op.summary,
        "description": op.description,
        "deprecated": op.deprecated,
    }


def _cyclic_nodes(edges: dict[str, list[str]]) -> set[str]:
    """Nodes on a cycle of a directed graph (Tarjan's strongly connected components)."""
    index_of: dict[str, int] = {}
    low: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    cyclic: set[str] = set()
    counter = 0

    def visit(node: str) -> None:
        nonlocal counter
        index_of[node] = low[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

        for target in edges.get(node, []):
            if target not in edges:
                continue
            if target not in index_of:
                visit(target)
                low[node] = min(low[node], low[target])
            elif target in on_stack:
                low[node] = min(low[node], index_of[target])

        if low[node] == index_of[node]:
            component = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == node:
                    break
            if len(component) > 1 or node in edges.get(node, []):
                cyclic.update(component)

    for node in edges:
        if node not in index_of:
            visit(node)

    return cyclic
