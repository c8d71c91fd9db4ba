"""
Utility functions for the OpenAPI to Code generator.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Go initialisms kept upper-case in exported identifiers
GO_INITIALISMS = frozenset({"Api", "Http", "Id", "Json", "Uri", "Url", "Uuid", "Xml"})


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "pet-store" -> "PetStore"
        "actionTemplate" -> "ActionTemplate"
        "v1" -> "V1"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def go_identifier(text: str) -> str:
    """Convert a property name to an exported Go identifier.

    Examples:
        "id" -> "ID"
        "owner_id" -> "OwnerID"
        "photoUrls" -> "PhotoUrls"
        "2fa" -> "X2Fa"
    """
    words = _split_into_words(_normalize_separators(text))
    parts = []
    for word in words:
        capitalized = word.capitalize()
        parts.append(capitalized.upper() if capitalized in GO_INITIALISMS else capitalized)
    result = "".join(parts) or "Field"
    if result[0].isdigit():
        result = "X" + result
    return result


def is_js_identifier(text: str) -> bool:
    """Check whether text can be used unquoted as a JavaScript property key."""
    return bool(_JS_IDENTIFIER.match(text))


def js_property_key(text: str) -> str:
    """Quote a property key when it is not a valid identifier."""
    if is_js_identifier(text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def js_string(text: str) -> str:
    """Render a double-quoted JavaScript string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'
