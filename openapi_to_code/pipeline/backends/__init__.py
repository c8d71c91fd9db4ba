"""
Code emission backends for target languages.
"""

from __future__ import annotations

from .base import CodeBackend
from .go_backend import GoBackend
from .typescript_backend import TypeScriptBackend
from .zod_backend import ZodBackend

__all__ = [
    "CodeBackend",
    "GoBackend",
    "TypeScriptBackend",
    "ZodBackend",
]
