"""
Go emission backend.

Generates one Go file: structs for object definitions, string-backed
constant sets for enum definitions and defined types for everything else.
"""

from __future__ import annotations

import json
from typing import Any

from ...utils import go_identifier
from ..analyzer.ir_nodes import (
    EnumType,
    ObjectType,
    OperationDefinition,
    ParameterDescriptor,
    SchemaDefinition,
    SchemaIR,
)
from ..mappers import TargetFamily
from ..mappers.go_mapper import go_type_name, required_imports
from .base import CodeBackend, comment_lines

DEFAULT_PACKAGE = "api"


def go_string(value: str) -> str:
    """Render a Go interpreted string literal."""
    return json.dumps(value, ensure_ascii=False)


class GoBackend(CodeBackend):
    """Go struct emission backend."""

    FAMILY = TargetFamily.NATIVE_STRUCT
    TEMPLATE_LANG = "golang"
    FILE_EXTENSION = "go"

    def generate(self, ir: SchemaIR) -> str:
        """Generate Go code from IR."""
        # Reset import tracking
        self.used_expressions: list[str] = []
        return super().generate(ir)

    def _prepare_prefix_context(self, ir: SchemaIR, blocks: list[str]) -> dict[str, Any]:
        context = super()._prepare_prefix_context(ir, blocks)
        context["package"] = self.options.get("package", DEFAULT_PACKAGE)
        context["imports"] = required_imports(*self.used_expressions)
        return context

    def _prepare_definition_context(self, definition: SchemaDefinition) -> dict[str, Any]:
        type_name = go_type_name(definition.name)
        context: dict[str, Any] = {
            "type_name": type_name,
            "description": comment_lines(definition.description),
            "kind": "alias",
        }

        if isinstance(definition.type, ObjectType) and definition.type.fields:
            context["kind"] = "struct"
            context["fields"] = [
                self._struct_field(*self.mapper.struct_member(f), comment_lines(f.description))
                for f in definition.type.fields
            ]
        elif isinstance(definition.type, EnumType):
            context["kind"] = "enum"
            context["constants"] = self._enum_constants(type_name, definition.type)
        else:
            context["expression"] = self._track(self.mapper.map_type(definition.type))
        return context

    def _prepare_operation_context(self, operation: OperationDefinition) -> dict[str, Any]:
        context = self._operation_base_context(operation)
        context["parameters"] = [self._parameter_field(p) for p in operation.parameters]
        context["request_body"] = (
            self._track(self.mapper.map_type(operation.request_body)) if operation.request_body is not None else None
        )
        context["response"] = (
            self._track(self.mapper.map_type(operation.response)) if operation.response is not None else None
        )
        return context

    def _parameter_field(self, parameter: ParameterDescriptor) -> dict[str, Any]:
        presence = self.mapper.presence(self.mapper.map_type(parameter.type), parameter.required, parameter.nullable)
        options = ",omitempty" if presence.optional else ""
        tag = f'`{parameter.location.value}:"{parameter.name}{options}"`'
        return self._struct_field(go_identifier(parameter.name), presence.expression, tag, [])

    def _struct_field(self, name: str, expression: str, tag: str, description: list[str]) -> dict[str, Any]:
        return {"name": name, "type": self._track(expression), "tag": tag, "description": description}

    def _enum_constants(self, type_name: str, descriptor: EnumType) -> list[dict[str, str]]:
        constants = []
        taken: set[str] = set()
        for variant in descriptor.variants:
            suffix = go_identifier(variant) if variant else "Empty"
            name = candidate = f"{type_name}{suffix}"
            counter = 2
            while name in taken:
                name = f"{candidate}{counter}"
                counter += 1
            taken.add(name)
            constants.append({"name": name, "value": go_string(variant)})
        return constants

    def _track(self, expression: str) -> str:
        self.used_expressions.append(expression)
        return expression
