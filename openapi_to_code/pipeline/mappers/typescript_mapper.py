"""
Structural target: TypeScript type annotations.
"""

from __future__ import annotations

from ...utils import is_js_identifier, js_property_key, js_string, snake_to_pascal_case
from ..analyzer.ir_nodes import ArrayType, EnumType, ObjectType, ReferenceType
from .base import Presence, TargetFamily, TypeMapper

_OPENING = "([{<"
_CLOSING = ")]}>"


def ts_type_name(name: str) -> str:
    """Name of the exported TypeScript type of a definition."""
    return name if is_js_identifier(name) else snake_to_pascal_case(name)


def has_top_level_union(expression: str) -> bool:
    """Check whether an expression is a union outside of any brackets or strings."""
    depth = 0
    in_string = False
    previous = ""
    for char in expression:
        if in_string:
            if char == '"' and previous != "\\":
                in_string = False
        elif char == '"':
            in_string = True
        elif char in _OPENING:
            depth += 1
        elif char in _CLOSING:
            depth -= 1
        elif char == "|" and depth == 0:
            return True
        previous = char
    return False


class TypeScriptMapper(TypeMapper):
    """Maps IR types to TypeScript type expressions."""

    FAMILY = TargetFamily.STRUCTURAL

    PRIMITIVE_MAP = {
        "string": "string",
        "integer": "number",
        "number": "number",
        "boolean": "boolean",
        "unknown": "any",
    }

    FORMAT_MAP = {
        "date": "string",
        "date-time": "string",
        "email": "string",
        "uuid": "string",
        "uri": "string",
        "binary": "Blob",
    }

    FREE_FORM_OBJECT = "Record<string, any>"

    def map_array(self, descriptor: ArrayType) -> str:
        element = self.map_type(descriptor.element)
        if has_top_level_union(element):
            element = f"({element})"
        return f"{element}[]"

    def map_object(self, descriptor: ObjectType) -> str:
        if not descriptor.fields:
            return self.FREE_FORM_OBJECT
        return "{ " + " ".join(f"{self.member(f.name, self.map_field(f))};" for f in descriptor.fields) + " }"

    def map_enum(self, descriptor: EnumType) -> str:
        if not descriptor.variants:
            return "never"
        return " | ".join(js_string(v) for v in descriptor.variants)

    def map_reference(self, descriptor: ReferenceType) -> str:
        return ts_type_name(descriptor.name)

    def presence(self, expression: str, required: bool, nullable: bool) -> Presence:
        if nullable:
            expression = f"{expression} | null"
        return Presence(expression, optional=not required)

    def member(self, name: str, presence: Presence) -> str:
        """Render an object member declaration (without terminator)."""
        marker = "?" if presence.optional else ""
        return f"{js_property_key(name)}{marker}: {presence.expression}"
