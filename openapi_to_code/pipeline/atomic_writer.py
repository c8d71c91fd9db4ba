"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import logging
import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import GenerationError

logger = logging.getLogger(__name__)


# Comments and string literals of the generated languages; their braces do not count
_CODE_TOKEN = re.compile(
    r"""//[^\n]*|/\*.*?\*/|"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|`[^`]*`|[{}]""",
    re.DOTALL,
)


def check_balanced_braces(content: str) -> None:
    """Reject generated code whose braces do not balance outside comments and strings."""
    open_braces = close_braces = 0
    for match in _CODE_TOKEN.finditer(content):
        token = match.group()
        if token == "{":
            open_braces += 1
        elif token == "}":
            close_braces += 1
    if open_braces != close_braces:
        raise GenerationError(f"Generated code has unbalanced braces: {open_braces} open, {close_braces} close")


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    An interrupted write never leaves the target file incomplete.
    """

    def __init__(self, validate: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate: Content check raising GenerationError; brace balance by default
        """
        self._validate = validate or check_balanced_braces

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            GenerationError: If validation fails
            OSError: If file operations fail
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate(content)

            temp_path.replace(path)
            logger.debug("Wrote %s", path)

        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise
