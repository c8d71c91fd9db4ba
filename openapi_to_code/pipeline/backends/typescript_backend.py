"""
TypeScript emission backend.

Generates interfaces for object definitions and type aliases for everything
else.
"""

from __future__ import annotations

from typing import Any

from ..analyzer.ir_nodes import ObjectType, OperationDefinition, ParameterDescriptor, SchemaDefinition
from ..mappers import TargetFamily
from ..mappers.typescript_mapper import ts_type_name
from .base import CodeBackend, comment_lines


class TypeScriptBackend(CodeBackend):
    """TypeScript type emission backend."""

    FAMILY = TargetFamily.STRUCTURAL
    TEMPLATE_LANG = "typescript"
    FILE_EXTENSION = "ts"

    def _prepare_definition_context(self, definition: SchemaDefinition) -> dict[str, Any]:
        context: dict[str, Any] = {
            "type_name": ts_type_name(definition.name),
            "description": comment_lines(definition.description),
            "members": None,
            "expression": None,
        }

        if isinstance(definition.type, ObjectType) and definition.type.fields:
            context["members"] = [
                {
                    "declaration": self.mapper.member(f.name, self.mapper.map_field(f)),
                    "description": comment_lines(f.description),
                }
                for f in definition.type.fields
            ]
        else:
            context["expression"] = self.mapper.map_type(definition.type)
        return context

    def _prepare_operation_context(self, operation: OperationDefinition) -> dict[str, Any]:
        context = self._operation_base_context(operation)
        context["parameters"] = [self._parameter_member(p) for p in operation.parameters]
        context["request_body"] = (
            self.mapper.map_type(operation.request_body) if operation.request_body is not None else None
        )
        context["response"] = self.mapper.map_type(operation.response) if operation.response is not None else None
        return context

    def _parameter_member(self, parameter: ParameterDescriptor) -> str:
        presence = self.mapper.presence(self.mapper.map_type(parameter.type), parameter.required, parameter.nullable)
        return self.mapper.member(parameter.name, presence)
