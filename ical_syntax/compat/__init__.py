"""Switches for relaxing how calendar content is parsed and generated."""

from .strictness import enable_lenient_parsing, enable_preserve_case

__all__ = [
    "enable_lenient_parsing",
    "enable_preserve_case",
]
