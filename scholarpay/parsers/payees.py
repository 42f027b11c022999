"""Payee list parser for the provider's numbered payee answers.

The provider answers "List all payees" with lines such as::

    1. Ada Lovelace (ada@uni.edu)
    2. grace.hopper@navy.mil (Test Rails)
    3. Kartik Design - US ACH

The primary token may be a display name or an email. Names derived from an email, and emails synthesised from a name, are guesses: the provider does not always return both.
"""

import json
import re
from typing import Any

from pydantic import ValidationError

from scholarpay.core.models import Payee
from scholarpay.core.utils import as_text, get_logger
from scholarpay.parsers.base import BaseParser
from scholarpay.parsers.registry import ParserRegistry

PAYEE_LINE = re.compile(r"^\d+\.\s*(.+?)(?:\s+\((.+?)\))?(?:\s+-\s+(.+?))?$")
PLACEHOLDER_DOMAIN = "example.com"

logger = get_logger("scholarpay.parsers")


def name_from_email(email: str) -> str:
    """Derive a display name from the local part of an email: 'ada.love_lace@x' -> 'Ada Love Lace'."""
    local = email.split("@", 1)[0]
    spaced = re.sub(r"[._]", " ", local)
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)


def placeholder_email(name: str) -> str:
    """Synthesise an email for a payee listed by name only."""
    local = re.sub(r"\s+", ".", name.lower())
    return f"{local}@{PLACEHOLDER_DOMAIN}"


@ParserRegistry.register
class NumberedPayeeParser(BaseParser):
    """Parse `N. name-or-email (detail) - type` lines into payees."""

    category = "payees"
    shape = "numbered"

    def parse(self, content: str) -> list[Payee]:
        """Extract one payee per numbered line, in order; other lines are skipped."""
        payees: list[Payee] = []
        for line in self.lines(content):
            match = PAYEE_LINE.match(line)
            if not match:
                continue
            primary, detail, suffix = match.groups()
            primary = primary.strip().strip("*").strip()
            detail = detail.strip() if detail else None
            suffix = suffix.strip() if suffix else None
            if not primary:
                continue
            payee_type = suffix
            if detail and "@" in detail:
                name, email = primary, detail
            else:
                payee_type = detail or suffix
                if "@" in primary:
                    email = primary
                    name = name_from_email(primary)
                else:
                    name = primary
                    email = placeholder_email(primary)
            payees.append(Payee(name=name, email=email, status="active", type=payee_type))
        return payees


@ParserRegistry.register
class StructuredPayeeParser(BaseParser):
    """Parse payees delivered as a JSON array of objects."""

    category = "payees"
    shape = "structured"

    def parse(self, content: Any) -> list[Payee]:
        """Keep objects that carry a name or an email; fill the missing one the same way the text parser does."""
        if isinstance(content, str):
            try:
                content = json.loads(content)
            except json.JSONDecodeError:
                return []
        if isinstance(content, dict):
            content = content.get("payees", [])
        payees: list[Payee] = []
        for position, item in enumerate(content if isinstance(content, list) else [], start=1):
            if not isinstance(item, dict):
                continue
            try:
                payee = self._item_to_payee(item)
            except (ValidationError, AttributeError, TypeError) as exc:
                logger.warning(f"Skipping structured payee {position}: {exc}")
                continue
            if payee is not None:
                payees.append(payee)
        return payees

    @staticmethod
    def _item_to_payee(item: dict[str, Any]) -> Payee | None:
        name = as_text(item.get("name"))
        email = as_text(item.get("email") or item.get("contactEmail"))
        if not name and not email:
            return None
        status = "inactive" if (as_text(item.get("status")) or "").lower() == "inactive" else "active"
        return Payee(
            name=name or name_from_email(email),
            email=email or placeholder_email(name),
            status=status,
            type=as_text(item.get("type")),
        )
