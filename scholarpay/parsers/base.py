"""Base parser abstraction for provider response parsers.

Every known shape of a payment provider answer is handled by one parser class. A parser declares the record category it produces and the response shape it understands, and turns raw content into a list of typed records.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class BaseParser(ABC):
    """Abstract base class for all response parsers."""

    category: ClassVar[str]
    shape: ClassVar[str]

    @abstractmethod
    def parse(self, content: Any) -> list[BaseModel]:
        """Extract typed records from the content; unmatched input yields an empty list."""

    @staticmethod
    def lines(content: str) -> list[str]:
        """Split content into stripped, non-empty lines."""
        return [line.strip() for line in content.splitlines() if line.strip()]
