"""
Native-struct target: Go types with explicit optionality.

Optional members are pointers tagged omitempty; members that are both
optional and nullable use nullable.Nullable from
github.com/oapi-codegen/nullable so that absent and null stay distinct.
"""

from __future__ import annotations

from ...utils import go_identifier
from ..analyzer.ir_nodes import (
    ArrayType,
    EnumType,
    FieldDescriptor,
    ObjectType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
)
from .base import Presence, TargetFamily, TypeMapper

NULLABLE_IMPORT = "github.com/oapi-codegen/nullable"
TIME_IMPORT = "time"

INTEGER_FORMATS = {"int32": "int32", "int64": "int64"}
NUMBER_FORMATS = {"float": "float32", "double": "float64"}


def go_type_name(name: str) -> str:
    """Name of the exported Go type of a definition."""
    return go_identifier(name)


def struct_tag(name: str, presence: Presence) -> str:
    """Render the json struct tag of a member."""
    options = ",omitempty" if presence.optional else ""
    return f'`json:"{name}{options}"`'


def required_imports(*expressions: str) -> list[str]:
    """Imports needed by a set of mapped Go expressions, sorted."""
    imports = set()
    for expression in expressions:
        if "time." in expression:
            imports.add(TIME_IMPORT)
        if "nullable." in expression:
            imports.add(NULLABLE_IMPORT)
    return sorted(imports)


class GoMapper(TypeMapper):
    """Maps IR types to Go type expressions."""

    FAMILY = TargetFamily.NATIVE_STRUCT

    PRIMITIVE_MAP = {
        "string": "string",
        "integer": "int",
        "number": "float64",
        "boolean": "bool",
        "unknown": "interface{}",
    }

    FORMAT_MAP = {
        "date": "string",
        "date-time": "time.Time",
        "email": "string",
        "uuid": "string",
        "uri": "string",
        "binary": "[]byte",
    }

    FREE_FORM_OBJECT = "map[string]interface{}"

    def map_primitive(self, descriptor: PrimitiveType) -> str:
        if descriptor.kind == PrimitiveKind.INTEGER and descriptor.format in INTEGER_FORMATS:
            return INTEGER_FORMATS[descriptor.format]
        if descriptor.kind == PrimitiveKind.NUMBER and descriptor.format in NUMBER_FORMATS:
            return NUMBER_FORMATS[descriptor.format]
        return super().map_primitive(descriptor)

    def map_array(self, descriptor: ArrayType) -> str:
        return f"[]{self.map_type(descriptor.element)}"

    def map_object(self, descriptor: ObjectType) -> str:
        if not descriptor.fields:
            return self.FREE_FORM_OBJECT
        members = "; ".join(" ".join(self.struct_member(f)) for f in descriptor.fields)
        return f"struct {{ {members} }}"

    def map_enum(self, descriptor: EnumType) -> str:
        # Inline enums have no type name to hang constants on
        return "string"

    def map_reference(self, descriptor: ReferenceType) -> str:
        return go_type_name(descriptor.name)

    def map_field(self, field_desc: FieldDescriptor) -> Presence:
        presence = super().map_field(field_desc)
        is_recursive = isinstance(field_desc.type, ReferenceType) and field_desc.type.name in self.recursive_names
        if is_recursive and field_desc.required and not field_desc.nullable:
            # A struct cannot contain itself by value
            return Presence(f"*{presence.expression}", optional=False)
        return presence

    def presence(self, expression: str, required: bool, nullable: bool) -> Presence:
        if required and not nullable:
            return Presence(expression)
        if required:
            return Presence(f"*{expression}")
        if not nullable:
            return Presence(f"*{expression}", optional=True)
        return Presence(f"nullable.Nullable[{expression}]", optional=True)

    def struct_member(self, field_desc: FieldDescriptor) -> tuple[str, str, str]:
        """Get the (identifier, type, tag) triple of a struct member."""
        presence = self.map_field(field_desc)
        return go_identifier(field_desc.name), presence.expression, struct_tag(field_desc.name, presence)
