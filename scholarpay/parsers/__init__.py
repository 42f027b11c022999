"""Parsers package: registry, base class, and the parsers for each known provider answer shape."""

from . import balance, payees, transactions  # noqa: F401
from .base import BaseParser  # noqa: F401
from .normalizer import ResponseNormalizer, extract_content  # noqa: F401
from .registry import ParserRegistry  # noqa: F401
