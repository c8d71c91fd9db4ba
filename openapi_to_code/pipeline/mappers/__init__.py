"""
Target type mappers.

One mapper per target family; get_mapper is the only dispatch point.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import assert_never

from .base import Presence, TargetFamily, TypeMapper
from .go_mapper import GoMapper
from .typescript_mapper import TypeScriptMapper
from .zod_mapper import ZodMapper


def get_mapper(
    family: TargetFamily,
    type_mapping: Mapping[str, str] | None = None,
    recursive_names: Iterable[str] = (),
) -> TypeMapper:
    """
    Get the mapper of a target family.

    Args:
        family: Target family
        type_mapping: Scalar overrides for this generation
        recursive_names: Definition names on a reference cycle

    Returns:
        A mapper instance
    """
    if family is TargetFamily.NOMINALLY_VALIDATED:
        return ZodMapper(type_mapping, recursive_names)
    elif family is TargetFamily.STRUCTURAL:
        return TypeScriptMapper(type_mapping, recursive_names)
    elif family is TargetFamily.NATIVE_STRUCT:
        return GoMapper(type_mapping, recursive_names)
    else:
        assert_never(family)


__all__ = [
    "GoMapper",
    "Presence",
    "TargetFamily",
    "TypeMapper",
    "TypeScriptMapper",
    "ZodMapper",
    "get_mapper",
]
