"""
OpenAPI document loading.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .pipeline.errors import DocumentLoadError

logger = logging.getLogger(__name__)

# Input formats; "openapi" picks the parser from the file suffix
INPUT_FORMATS = ("openapi", "json", "yaml")


def parse_document(text: str, json_format: bool = False) -> dict[str, Any]:
    """
    Parse document text.

    Args:
        text: YAML or JSON text
        json_format: Parse strictly as JSON

    Returns:
        The document tree

    Raises:
        DocumentLoadError: If the text cannot be parsed or its root is not a mapping
    """
    try:
        document = json.loads(text) if json_format else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Cannot parse document: {e}") from e

    if not isinstance(document, dict):
        raise DocumentLoadError(f"Document root must be a mapping, got {type(document).__name__}")
    return document


def load_document(path: str | Path, format: str = "openapi") -> dict[str, Any]:
    """Load an OpenAPI document from a .json, .yaml or .yml file."""
    if format not in INPUT_FORMATS:
        raise DocumentLoadError(f"Unknown input format '{format}' (known: {', '.join(INPUT_FORMATS)})")

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"Cannot read {path}: {e}") from e

    json_format = format == "json" or (format == "openapi" and path.suffix.lower() == ".json")
    try:
        document = parse_document(text, json_format=json_format)
    except DocumentLoadError as e:
        raise DocumentLoadError(f"{path}: {e}") from e

    logger.debug("Loaded document %s", path)
    return document
