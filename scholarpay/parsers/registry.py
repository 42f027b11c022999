"""Parser registry for managing provider response parsers.

This module provides a registry of parser classes keyed by record category and response shape, so that a new provider answer format is supported by registering one more parser.
"""

from typing import ClassVar

from scholarpay.parsers.base import BaseParser


class ParserRegistry:
    """Registry for parser classes."""

    _registry: ClassVar[dict[tuple[str, str], type[BaseParser]]] = {}

    @classmethod
    def register(cls, parser_cls: type[BaseParser]) -> type[BaseParser]:
        """Register a parser class under its category and shape; usable as a decorator."""
        cls._registry[(parser_cls.category, parser_cls.shape)] = parser_cls
        return parser_cls

    @classmethod
    def get(cls, category: str, shape: str) -> type[BaseParser]:
        """Retrieve a parser class by category and shape."""
        return cls._registry[(category, shape)]

    @classmethod
    def shapes(cls, category: str) -> list[str]:
        """List the shapes registered for a category, in registration order."""
        return [shape for cat, shape in cls._registry if cat == category]

    @classmethod
    def available(cls) -> list[tuple[str, str]]:
        """List all registered (category, shape) pairs."""
        return list(cls._registry.keys())
