"""ResponseNormalizer: turns payment provider answers into typed records.

The provider answers commands with prose, numbered lists or markdown tables, and occasionally with JSON. The normalizer reads the text out of the provider envelope, detects which known shape it is, and dispatches to the parser registered for that category and shape. When nothing can be extracted, the category's demo dataset is returned with ``fallback`` set, so callers always have records to show.
"""

import json
import re
from typing import Any

from scholarpay.core.models import NormalizedResult, TransactionHistory, WalletBalance
from scholarpay.core.utils import get_logger, truncate
from scholarpay.parsers.balance import LABELED_BALANCE
from scholarpay.parsers.fallback import DEMO_DATASETS, FALLBACK_NOTICE, demo_history
from scholarpay.parsers.history import TransactionHistoryParser, summarize
from scholarpay.parsers.registry import ParserRegistry
from scholarpay.parsers.transactions import TABLE_MARKER

NARRATIVE_HINT = re.compile(r"payment to|transfer to|deposit|\b(?:DEBIT|CREDIT):", re.IGNORECASE)
NO_SHAPE = "none"

logger = get_logger("scholarpay.normalizer")


def extract_content(response: Any) -> Any:
    """Read the answer out of a provider envelope: ``artifacts[0].content`` or ``artifacts[0].text``.

    Plain strings pass through unchanged. A missing envelope yields an empty string.
    """
    if isinstance(response, str):
        return response
    if not isinstance(response, dict):
        return ""
    artifacts = response.get("artifacts") or []
    if not artifacts or not isinstance(artifacts[0], dict):
        return ""
    artifact = artifacts[0]
    content = artifact.get("content")
    if content in (None, ""):
        content = artifact.get("text")
    return content if content is not None else ""


def _decode_structured(content: Any) -> Any | None:
    """Return the decoded payload when the content is JSON rather than prose."""
    if isinstance(content, (list, dict)):
        return content
    if not isinstance(content, str):
        return None
    stripped = content.strip()
    if not stripped.startswith(("[", "{")):
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        return None


def detect_shape(content: Any, category: str) -> str:
    """Name the response shape present in the content for the given category."""
    if _decode_structured(content) is not None and "structured" in ParserRegistry.shapes(category):
        return "structured"
    if not isinstance(content, str) or not content.strip():
        return NO_SHAPE
    if category == "payees":
        return "numbered"
    if category == "balance":
        return "labeled" if LABELED_BALANCE.search(content) else "loose"
    if category == "transactions":
        if "|" in content and TABLE_MARKER.search(content):
            return "table"
        if NARRATIVE_HINT.search(content):
            return "narrative"
    return NO_SHAPE


class ResponseNormalizer:
    """Dispatch provider answers to the parser registered for their shape."""

    def normalize(self, content: Any, category: str) -> NormalizedResult:
        """Extract records of the category from raw content, or return the demo dataset."""
        shape = detect_shape(content, category)
        records: list = []
        if shape != NO_SHAPE:
            parser = ParserRegistry.get(category, shape)()
            payload = _decode_structured(content) if shape == "structured" else content
            try:
                records = parser.parse(payload)
            except Exception:
                logger.exception(f"Parser {type(parser).__name__} failed on: {truncate(content)}")
                records = []
        if records:
            logger.info(f"Normalized {len(records)} {category} record(s) from {shape} answer")
            return NormalizedResult(category=category, shape=shape, records=records)
        logger.warning(f"No {category} records in {shape} answer, using demo data: {truncate(content)}")
        return self.fallback(category, shape)

    def normalize_response(self, response: Any, category: str) -> NormalizedResult:
        """Normalize a full provider envelope."""
        return self.normalize(extract_content(response), category)

    def normalize_history(self, response: Any) -> TransactionHistory:
        """Parse the combined wallet summary and transaction log answer."""
        content = extract_content(response)
        structured = _decode_structured(content)
        if structured is not None:
            result = self.normalize(structured, "transactions")
            if result.fallback:
                return demo_history()
            return TransactionHistory(
                transactions=result.records,
                balance=WalletBalance(),
                summary=summarize(result.records),
            )
        if not isinstance(content, str):
            return demo_history()
        try:
            history = TransactionHistoryParser().parse(content)
        except Exception:
            logger.exception(f"Transaction history parsing failed on: {truncate(content)}")
            return demo_history()
        if not history.transactions:
            logger.warning(f"No transactions in history answer, using demo data: {truncate(content)}")
            return demo_history()
        logger.info(f"Parsed transaction history with {len(history.transactions)} transaction(s)")
        return history

    @staticmethod
    def fallback(category: str, shape: str = NO_SHAPE, notice: str = FALLBACK_NOTICE) -> NormalizedResult:
        """Return the demo dataset for a category."""
        return NormalizedResult(
            category=category,
            shape=shape,
            records=DEMO_DATASETS[category](),
            fallback=True,
            notice=notice,
        )
