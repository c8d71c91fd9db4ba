"""
Base class for target type mappers.

A mapper turns one IR type into the type expression of one target family.
Mapping is pure and total: every descriptor maps to exactly one expression.
Presence (required) and nullability are applied afterwards, independently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from ..analyzer.ir_nodes import (
    ArrayType,
    EnumType,
    FieldDescriptor,
    ObjectType,
    PrimitiveType,
    ReferenceType,
    StringFormatType,
    TypeDescriptor,
)


class TargetFamily(str, Enum):
    """Closed set of target type-system families."""

    NOMINALLY_VALIDATED = "nominally_validated"  # Runtime-validated schemas (Zod)
    STRUCTURAL = "structural"  # Structural type annotations (TypeScript)
    NATIVE_STRUCT = "native_struct"  # Structs with explicit optionality (Go)


@dataclass(frozen=True)
class Presence:
    """A mapped member type plus its presence marker.

    Attributes:
        expression: Complete type expression, nullability included
        optional: Whether the member may be absent (TypeScript "?" key marker,
            Go omitempty tag). Zod carries absence in the expression itself.
    """

    expression: str
    optional: bool = False


class TypeMapper(ABC):
    """Abstract base class for target type mappers."""

    FAMILY: TargetFamily

    # Scalar mappings keyed by primitive kind / format name
    PRIMITIVE_MAP: dict[str, str] = {}
    FORMAT_MAP: dict[str, str] = {}

    def __init__(
        self,
        type_mapping: Mapping[str, str] | None = None,
        recursive_names: Iterable[str] = (),
    ):
        """
        Initialize the mapper.

        Args:
            type_mapping: Scalar overrides keyed by primitive kind or format
                name (e.g. {"date-time": "Date", "int64": "bigint"})
            recursive_names: Definition names on a reference cycle
        """
        self.type_mapping = dict(type_mapping or {})
        self.recursive_names = frozenset(recursive_names)

    def map_type(self, descriptor: TypeDescriptor) -> str:
        """
        Map an IR type to a target type expression.

        oneOf/anyOf alternatives are not rendered: a reduced union maps as its
        first branch.

        Args:
            descriptor: The IR type

        Returns:
            Target type expression
        """
        if isinstance(descriptor, PrimitiveType):
            override = self._override(descriptor.format, descriptor.kind.value)
            return override if override is not None else self.map_primitive(descriptor)

        if isinstance(descriptor, StringFormatType):
            override = self._override(descriptor.kind.value)
            return override if override is not None else self.map_string_format(descriptor)

        if isinstance(descriptor, ArrayType):
            return self.map_array(descriptor)

        if isinstance(descriptor, ObjectType):
            return self.map_object(descriptor)

        if isinstance(descriptor, EnumType):
            return self.map_enum(descriptor)

        if isinstance(descriptor, ReferenceType):
            return self.map_reference(descriptor)

        raise TypeError(f"Unknown descriptor: {descriptor!r}")

    def map_field(self, field_desc: FieldDescriptor) -> Presence:
        """Map a field, applying its required and nullable flags."""
        return self.presence(self.map_type(field_desc.type), field_desc.required, field_desc.nullable)

    def map_primitive(self, descriptor: PrimitiveType) -> str:
        return self.PRIMITIVE_MAP[descriptor.kind.value]

    def map_string_format(self, descriptor: StringFormatType) -> str:
        return self.FORMAT_MAP[descriptor.kind.value]

    @abstractmethod
    def map_array(self, descriptor: ArrayType) -> str:
        """Map a homogeneous list."""

    @abstractmethod
    def map_object(self, descriptor: ObjectType) -> str:
        """Map an anonymous object (free-form when it has no fields)."""

    @abstractmethod
    def map_enum(self, descriptor: EnumType) -> str:
        """Map an inline enum."""

    @abstractmethod
    def map_reference(self, descriptor: ReferenceType) -> str:
        """Map a reference to a named definition."""

    @abstractmethod
    def presence(self, expression: str, required: bool, nullable: bool) -> Presence:
        """
        Apply presence and nullability to a mapped expression.

        The two flags compose independently: all four combinations yield
        distinct results.
        """

    def _override(self, *keys: str | None) -> str | None:
        for key in keys:
            if key and key in self.type_mapping:
                return self.type_mapping[key]
        return None
