"""
Zod emission backend.

Generates TypeScript modules exporting one Zod schema and one inferred type
per definition.
"""

from __future__ import annotations

from typing import Any

from ...utils import js_property_key
from ..analyzer.ir_nodes import (
    ObjectType,
    OperationDefinition,
    ParameterDescriptor,
    SchemaDefinition,
    SchemaIR,
)
from ..mappers import TargetFamily
from ..mappers.typescript_mapper import TypeScriptMapper, ts_type_name
from ..mappers.zod_mapper import zod_schema_name
from .base import CodeBackend, comment_lines, dependency_order


class ZodBackend(CodeBackend):
    """Zod schema emission backend."""

    FAMILY = TargetFamily.NOMINALLY_VALIDATED
    TEMPLATE_LANG = "zod"
    FILE_EXTENSION = "ts"

    def generate(self, ir: SchemaIR) -> str:
        """Generate Zod schemas from IR."""
        self.recursive_names = ir.recursive_names()
        # Recursive schemas need an explicit static type annotation
        self.annotation_mapper = TypeScriptMapper(recursive_names=self.recursive_names)
        return super().generate(ir)

    def _ordered_definitions(self, ir: SchemaIR) -> list[SchemaDefinition]:
        # A const must be declared before a non-lazy reference to it
        return dependency_order(ir)

    def _prepare_definition_context(self, definition: SchemaDefinition) -> dict[str, Any]:
        is_recursive = definition.name in self.recursive_names
        context: dict[str, Any] = {
            "schema_name": zod_schema_name(definition.name),
            "type_name": ts_type_name(definition.name),
            "description": comment_lines(definition.description),
            "recursive": is_recursive,
            "annotation": self.annotation_mapper.map_type(definition.type) if is_recursive else None,
            "fields": None,
            "expression": None,
        }

        if isinstance(definition.type, ObjectType) and definition.type.fields:
            context["fields"] = [
                {
                    "key": js_property_key(f.name),
                    "expression": self.mapper.map_field(f).expression,
                    "description": comment_lines(f.description),
                }
                for f in definition.type.fields
            ]
        else:
            context["expression"] = self.mapper.map_type(definition.type)
        return context

    def _prepare_operation_context(self, operation: OperationDefinition) -> dict[str, Any]:
        context = self._operation_base_context(operation)
        context["parameters"] = [self._parameter_context(p) for p in operation.parameters]
        context["request_body"] = (
            self.mapper.map_type(operation.request_body) if operation.request_body is not None else None
        )
        context["response"] = self.mapper.map_type(operation.response) if operation.response is not None else None
        return context

    def _parameter_context(self, parameter: ParameterDescriptor) -> dict[str, Any]:
        presence = self.mapper.presence(self.mapper.map_type(parameter.type), parameter.required, parameter.nullable)
        return {
            "key": js_property_key(parameter.name),
            "expression": presence.expression,
            "location": parameter.location.value,
        }
