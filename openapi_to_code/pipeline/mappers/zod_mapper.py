"""
Nominally-validated target: Zod schemas for TypeScript.
"""

from __future__ import annotations

from ...utils import is_js_identifier, js_property_key, js_string, snake_to_pascal_case
from ..analyzer.ir_nodes import ArrayType, EnumType, ObjectType, ReferenceType
from .base import Presence, TargetFamily, TypeMapper


def zod_schema_name(name: str) -> str:
    """Name of the exported Zod schema constant of a definition."""
    type_name = name if is_js_identifier(name) else snake_to_pascal_case(name)
    return f"{type_name}Schema"


class ZodMapper(TypeMapper):
    """Maps IR types to Zod schema expressions."""

    FAMILY = TargetFamily.NOMINALLY_VALIDATED

    PRIMITIVE_MAP = {
        "string": "z.string()",
        "integer": "z.number().int()",
        "number": "z.number()",
        "boolean": "z.boolean()",
        "unknown": "z.any()",
    }

    FORMAT_MAP = {
        "date": "z.string().date()",
        "date-time": "z.string().datetime()",
        "email": "z.string().email()",
        "uuid": "z.string().uuid()",
        "uri": "z.string().url()",
        "binary": "z.instanceof(Blob)",
    }

    FREE_FORM_OBJECT = "z.record(z.string(), z.any())"

    def map_array(self, descriptor: ArrayType) -> str:
        return f"z.array({self.map_type(descriptor.element)})"

    def map_object(self, descriptor: ObjectType) -> str:
        if not descriptor.fields:
            return self.FREE_FORM_OBJECT
        members = ", ".join(
            f"{js_property_key(f.name)}: {self.map_field(f).expression}" for f in descriptor.fields
        )
        return f"z.object({{ {members} }})"

    def map_enum(self, descriptor: EnumType) -> str:
        if not descriptor.variants:
            return "z.never()"
        variants = ", ".join(js_string(v) for v in descriptor.variants)
        return f"z.enum([{variants}])"

    def map_reference(self, descriptor: ReferenceType) -> str:
        schema_name = zod_schema_name(descriptor.name)
        if descriptor.name in self.recursive_names:
            return f"z.lazy(() => {schema_name})"
        return schema_name

    def presence(self, expression: str, required: bool, nullable: bool) -> Presence:
        if nullable:
            expression = f"{expression}.nullable()"
        if not required:
            expression = f"{expression}.optional()"
        return Presence(expression, optional=not required)
