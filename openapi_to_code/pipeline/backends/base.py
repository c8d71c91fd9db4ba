"""
Base class for code emission backends.

Defines the interface that all target backends implement. A backend maps
IR types through the mapper of its target family and renders the result
with Jinja2 templates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ...utils import snake_to_pascal_case
from ..analyzer.ir_nodes import OperationDefinition, SchemaDefinition, SchemaIR, referenced_names
from ..mappers import TargetFamily, TypeMapper, get_mapper

TEMPLATES_ROOT = Path(__file__).parent.parent.parent / "templates"


def comment_lines(text: str | None) -> list[str]:
    """Split a description into lines suitable for a comment block."""
    if not text:
        return []
    return [line.rstrip() for line in text.strip().splitlines()]


def dependency_order(ir: SchemaIR) -> list[SchemaDefinition]:
    """
    Order definitions so that every definition follows the ones it references.

    Document order is kept wherever dependencies allow it. References that
    close a cycle are ignored.
    """
    ordered: list[SchemaDefinition] = []
    visited: set[str] = set()
    in_progress: set[str] = set()

    def visit(name: str) -> None:
        if name in visited or name in in_progress or name not in ir.definitions:
            return
        in_progress.add(name)
        for target in referenced_names(ir.definitions[name].type):
            visit(target)
        in_progress.discard(name)
        visited.add(name)
        ordered.append(ir.definitions[name])

    for name in ir.definitions:
        visit(name)
    return ordered


class CodeBackend(ABC):
    """Abstract base class for code emission backends."""

    # Target family whose mapper is used
    FAMILY: TargetFamily

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    COMMENT_PREFIX: str = "//"

    def __init__(
        self,
        options: dict[str, Any] | None = None,
        type_mapping: dict[str, str] | None = None,
        template_dir: str | Path | None = None,
        generation_comment: str = "",
    ):
        """
        Initialize the backend.

        Args:
            options: Backend options of the generation entry
            type_mapping: Scalar overrides for the mapper
            template_dir: Directory whose templates take precedence over the
                built-in ones
            generation_comment: Text of the header comment (without prefix)
        """
        self.options = dict(options or {})
        self.type_mapping = dict(type_mapping or {})
        self.template_dir = Path(template_dir) if template_dir else None
        self.generation_comment = generation_comment
        self.mapper: TypeMapper = get_mapper(self.FAMILY, self.type_mapping)
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        search_path = [str(TEMPLATES_ROOT / self.TEMPLATE_LANG)]
        if self.template_dir is not None:
            search_path.insert(0, str(self.template_dir))

        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search_path),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        # Add custom filters
        self.jinja_env.filters["snake_to_pascal"] = snake_to_pascal_case
        self.jinja_env.filters["comment_lines"] = comment_lines

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.schema_template = self.jinja_env.get_template(f"schema.{self.FILE_EXTENSION}.jinja2")
        self.operations_template = self.jinja_env.get_template(f"operations.{self.FILE_EXTENSION}.jinja2")

    def generate(self, ir: SchemaIR) -> str:
        """
        Generate code from IR.

        Args:
            ir: The intermediate representation

        Returns:
            Generated code as a string
        """
        self.mapper = get_mapper(self.FAMILY, self.type_mapping, ir.recursive_names())

        blocks = []
        for definition in self._ordered_definitions(ir):
            blocks.append(self.schema_template.render(self._prepare_definition_context(definition)))

        if self.options.get("operations", True) and ir.operations:
            operations = [self._prepare_operation_context(op) for op in ir.operations]
            blocks.append(self.operations_template.render(operations=operations))

        # Prefix last: imports depend on what the blocks used
        prefix = self.prefix_template.render(self._prepare_prefix_context(ir, blocks))

        parts = [prefix.strip("\n")] + [block.strip("\n") for block in blocks if block.strip()]
        return "\n\n".join(part for part in parts if part) + "\n"

    def _ordered_definitions(self, ir: SchemaIR) -> list[SchemaDefinition]:
        return list(ir.definitions.values())

    def _prepare_prefix_context(self, ir: SchemaIR, blocks: list[str]) -> dict[str, Any]:
        """
        Prepare the template context of the file header.

        Args:
            ir: The intermediate representation
            blocks: Already rendered definition and operation blocks

        Returns:
            Dictionary of template variables
        """
        comment = f"{self.COMMENT_PREFIX} {self.generation_comment}" if self.generation_comment else ""
        return {
            "generation_comment": comment,
            "title": ir.metadata.title,
            "version": ir.metadata.version,
            "description": ir.metadata.description,
            "base_url": ir.metadata.base_url,
        }

    @abstractmethod
    def _prepare_definition_context(self, definition: SchemaDefinition) -> dict[str, Any]:
        """
        Prepare the template context for a named definition.

        Args:
            definition: The schema definition

        Returns:
            Dictionary of template variables
        """

    @abstractmethod
    def _prepare_operation_context(self, operation: OperationDefinition) -> dict[str, Any]:
        """
        Prepare the template context for an operation.

        Args:
            operation: The operation definition

        Returns:
            Dictionary of template variables
        """

    def _operation_base_context(self, operation: OperationDefinition) -> dict[str, Any]:
        return {
            "name": snake_to_pascal_case(operation.operation_id),
            "operation_id": operation.operation_id,
            "method": operation.method.value.upper(),
            "path": operation.path,
            "summary": operation.summary,
            "description": comment_lines(operation.description),
            "deprecated": operation.deprecated,
            "response_status": operation.response_status,
        }
