"""
Type resolver: converts one raw schema node into one TypeDescriptor.

Case analysis follows a fixed priority: $ref, allOf, oneOf/anyOf, enum,
array, object, primitive. Untyped schemas fall back to the unknown
primitive. Errors are recorded into a shared list and resolution carries
on, so a single pass reports every problem it can find.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import replace
from typing import Any

from ..errors import DanglingReferenceError, SchemaError, UnsupportedSchemaShapeError
from .ir_nodes import (
    ArrayType,
    EnumType,
    FieldDescriptor,
    ObjectType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    StringFormatKind,
    StringFormatType,
    TypeDescriptor,
)
from .reference_graph import ReferenceGraph

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"

PRIMITIVE_TYPES = {kind.value: kind for kind in PrimitiveKind if kind != PrimitiveKind.UNKNOWN}
STRING_FORMATS = {kind.value: kind for kind in StringFormatKind}

# Keywords that give a schema node a shape; a node with none of them only annotates
SHAPE_KEYWORDS = {"$ref", "allOf", "oneOf", "anyOf", "enum", "type", "items", "properties", "additionalProperties"}


def escape_pointer(token: str) -> str:
    """Escape a JSON pointer reference token."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_pointer(token: str) -> str:
    """Unescape a JSON pointer reference token."""
    return token.replace("~1", "/").replace("~0", "~")


def schema_ref_name(ref: str) -> str | None:
    """Get the schema name of a '#/components/schemas/<name>' reference."""
    if not ref.startswith(SCHEMA_REF_PREFIX):
        return None
    token = ref[len(SCHEMA_REF_PREFIX) :]
    if not token or "/" in token:
        return None
    return unescape_pointer(token)


def is_nullable(node: Any) -> bool:
    """Check whether a schema node permits null, independently of presence."""
    if not isinstance(node, dict):
        return False
    if node.get("nullable") is True:
        return True
    type_value = node.get("type")
    if isinstance(type_value, list) and "null" in type_value:
        return True
    for key in ("oneOf", "anyOf"):
        branches = node.get(key)
        if isinstance(branches, list) and any(_is_null_schema(b) for b in branches):
            return True
    return False


def _is_null_schema(node: Any) -> bool:
    return isinstance(node, dict) and node.get("type") == "null" and len(node) == 1


def _is_annotation_only(node: Any) -> bool:
    return isinstance(node, dict) and not SHAPE_KEYWORDS.intersection(node)


def _is_under(schema_path: str | None, root: str) -> bool:
    return schema_path is not None and (schema_path == root or schema_path.startswith(f"{root}/"))


class _AllOfCycle(Exception):
    """Raised while expanding an allOf chain that leads back to itself."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


def _enum_literal(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


class TypeResolver:
    """Resolves schema nodes under a reference graph."""

    def __init__(self, graph: ReferenceGraph, errors: list[SchemaError] | None = None):
        """
        Initialize the resolver.

        Args:
            graph: Reference graph of the document being analyzed
            errors: Shared error sink; a new list is used if omitted
        """
        self.graph = graph
        self.errors: list[SchemaError] = errors if errors is not None else []
        self._expanding: list[str] = []  # in-progress names whose bodies are being expanded for allOf

    def resolve(self, node: Any, path: str) -> TypeDescriptor:
        """
        Resolve a schema node.

        Args:
            node: Raw schema node
            path: Location of the node in the document (for error messages)

        Returns:
            Exactly one TypeDescriptor
        """
        if node is None or node is True:
            return PrimitiveType(PrimitiveKind.UNKNOWN)

        if not isinstance(node, dict):
            return self._fail(UnsupportedSchemaShapeError(path, f"Schema must be a mapping, got {type(node).__name__}"))

        if "$ref" in node:
            return self._resolve_ref(node["$ref"], path)

        if "allOf" in node:
            return self._resolve_all_of(node, path)

        if "oneOf" in node or "anyOf" in node:
            return self._resolve_union(node, path)

        if "enum" in node:
            return self._resolve_enum(node, path)

        type_name = self._schema_type(node)

        if type_name == "array":
            items = node.get("items")
            return ArrayType(self.resolve(items, f"{path}/items"))

        if type_name == "object" or (type_name is None and "properties" in node):
            return self._resolve_object(node, path)

        return self._resolve_primitive(node, type_name)

    def resolve_field(self, name: str, node: Any, required: bool, path: str) -> FieldDescriptor:
        """Resolve a property node into a FieldDescriptor."""
        description = node.get("description") if isinstance(node, dict) else None
        return FieldDescriptor(
            name=name,
            type=self.resolve(node, path),
            required=required,
            nullable=is_nullable(node),
            description=description,
            raw=copy.deepcopy(node),
        )

    def _fail(self, error: SchemaError) -> TypeDescriptor:
        self.errors.append(error)
        return PrimitiveType(PrimitiveKind.UNKNOWN)

    def _schema_type(self, node: dict[str, Any]) -> str | None:
        """Get the declared type, reducing a [T, "null"] list to T."""
        type_value = node.get("type")
        if isinstance(type_value, list):
            non_null = [t for t in type_value if t != "null"]
            if len(non_null) == 1:
                return non_null[0]
            return None
        return type_value

    def _resolve_ref(self, ref: Any, path: str) -> TypeDescriptor:
        if not isinstance(ref, str):
            return self._fail(UnsupportedSchemaShapeError(path, "$ref must be a string"))

        name = schema_ref_name(ref)
        if name is None:
            return self._fail(UnsupportedSchemaShapeError(path, f"Unsupported $ref target '{ref}'"))

        try:
            return self.graph.resolve(name)
        except DanglingReferenceError:
            self.errors.append(DanglingReferenceError(name, path))
            return ReferenceType(name)

    def _resolve_object(self, node: dict[str, Any], path: str) -> ObjectType:
        properties = node.get("properties") or {}
        if not isinstance(properties, dict):
            self.errors.append(UnsupportedSchemaShapeError(f"{path}/properties", "properties must be a mapping"))
            return ObjectType()

        required = set(node.get("required") or [])
        fields = [
            self.resolve_field(
                prop_name,
                prop_node,
                prop_name in required,
                f"{path}/properties/{escape_pointer(prop_name)}",
            )
            for prop_name, prop_node in properties.items()
        ]
        return ObjectType(tuple(fields))

    def _resolve_all_of(self, node: dict[str, Any], path: str) -> TypeDescriptor:
        """Reduce allOf to one object by shallow field-set union."""
        branches = node["allOf"]
        if not isinstance(branches, list):
            return self._fail(UnsupportedSchemaShapeError(f"{path}/allOf", "allOf must be a list"))

        # Sibling properties next to allOf act as one more branch
        if "properties" in node:
            sibling = {k: v for k, v in node.items() if k != "allOf"}
            branches = [*branches, sibling]

        # {nullable: true, allOf: [{$ref: X}]} wraps a reference rather than merging it
        refs = [b for b in branches if isinstance(b, dict) and "$ref" in b]
        if len(refs) == 1 and all(b is refs[0] or _is_annotation_only(b) for b in branches):
            return self._resolve_ref(refs[0]["$ref"], f"{path}/allOf/{branches.index(refs[0])}")

        merged: dict[str, FieldDescriptor] = {}
        required_names: set[str] = set(node.get("required") or [])

        for index, branch in enumerate(branches):
            branch_path = f"{path}/allOf/{index}"
            fields = self._all_of_branch_fields(branch, branch_path)
            if isinstance(branch, dict):
                required_names.update(branch.get("required") or [])
            for field_desc in fields:
                merged[field_desc.name] = field_desc

        return ObjectType(
            tuple(replace(f, required=f.required or f.name in required_names) for f in merged.values())
        )

    def _all_of_branch_fields(self, branch: Any, path: str) -> tuple[FieldDescriptor, ...]:
        if isinstance(branch, dict) and "$ref" in branch:
            resolved = self._resolve_ref(branch["$ref"], path)
            if not isinstance(resolved, ReferenceType) or not self.graph.is_declared(resolved.name):
                return ()

            body = self._named_body(resolved.name, path)
            # Follow definitions that only alias another one
            seen = {resolved.name}
            while isinstance(body, ReferenceType) and body.name not in seen and self.graph.is_declared(body.name):
                seen.add(body.name)
                body = self._named_body(body.name, path)
            if body is None:
                return ()
            if not isinstance(body, ObjectType):
                self.errors.append(
                    UnsupportedSchemaShapeError(path, f"allOf branch '{resolved.name}' does not reduce to an object")
                )
                return ()
            return body.fields

        resolved = self.resolve(branch, path)
        if isinstance(resolved, ObjectType):
            return resolved.fields

        # Annotation-only branches (description, nullable, ...) carry no fields
        if isinstance(resolved, PrimitiveType) and resolved.kind == PrimitiveKind.UNKNOWN:
            return ()

        self.errors.append(UnsupportedSchemaShapeError(path, "allOf branch does not reduce to an object"))
        return ()

    def _named_body(self, name: str, path: str) -> TypeDescriptor | None:
        """Get the body of a declared name for an allOf merge, or None on an allOf cycle."""
        self.graph.resolve(name)
        body = self.graph.lookup(name)
        if body is not None:
            return body
        try:
            return self._expand_in_progress(name)
        except _AllOfCycle as cycle:
            if self._expanding:
                raise
            self.errors.append(UnsupportedSchemaShapeError(path, f"allOf cycle through '{cycle.name}'"))
            return None

    def _expand_in_progress(self, name: str) -> TypeDescriptor:
        """
        Resolve the body of a name that is still being resolved further up.

        References inside the body still short-circuit to the name, so only an
        allOf chain leading back to a name already being expanded loops.
        Errors found inside the body are dropped: the declaration reports them
        itself once its own resolution completes.
        """
        if name in self._expanding:
            raise _AllOfCycle(name)

        root = f"{SCHEMA_REF_PREFIX}{escape_pointer(name)}"
        start = len(self.errors)
        self._expanding.append(name)
        try:
            return self.resolve(self.graph.declared_node(name), root)
        finally:
            self._expanding.pop()
            self.errors[start:] = [e for e in self.errors[start:] if not _is_under(e.schema_path, root)]

    def _resolve_union(self, node: dict[str, Any], path: str) -> TypeDescriptor:
        """Reduce oneOf/anyOf to its first branch, keeping the others as alternatives."""
        key = "oneOf" if "oneOf" in node else "anyOf"
        branches = node[key]
        if not isinstance(branches, list) or not branches:
            return self._fail(UnsupportedSchemaShapeError(f"{path}/{key}", f"{key} must be a non-empty list"))

        resolved = [
            self.resolve(branch, f"{path}/{key}/{index}")
            for index, branch in enumerate(branches)
            if not _is_null_schema(branch)
        ]
        if not resolved:
            return PrimitiveType(PrimitiveKind.UNKNOWN)

        first, *rest = resolved
        if rest:
            logger.debug("Reduced %s at %s to its first branch, %d alternatives kept", key, path, len(rest))
        return replace(first, alternatives=tuple(rest))

    def _resolve_enum(self, node: dict[str, Any], path: str) -> TypeDescriptor:
        values = node["enum"]
        if not isinstance(values, list):
            return self._fail(UnsupportedSchemaShapeError(f"{path}/enum", "enum must be a list"))

        variants: list[str] = []
        for value in values:
            if value is None:
                continue
            literal = _enum_literal(value)
            if literal not in variants:
                variants.append(literal)
        return EnumType(tuple(variants))

    def _resolve_primitive(self, node: dict[str, Any], type_name: Any) -> TypeDescriptor:
        kind = PRIMITIVE_TYPES.get(type_name) if isinstance(type_name, str) else None
        if kind is None:
            if type_name not in (None, "null"):
                logger.debug("Unrecognized schema type %r, falling back to unknown", type_name)
            return PrimitiveType(PrimitiveKind.UNKNOWN)

        format_name = node.get("format")
        if not isinstance(format_name, str):
            format_name = None

        if kind == PrimitiveKind.STRING and format_name in STRING_FORMATS:
            return StringFormatType(STRING_FORMATS[format_name])

        return PrimitiveType(kind, format_name)
