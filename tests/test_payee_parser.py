"""Tests for the numbered and structured payee parsers."""

import pytest

from scholarpay.parsers.payees import NumberedPayeeParser, StructuredPayeeParser, name_from_email, placeholder_email


@pytest.mark.parametrize(
    ("line", "name", "email"),
    [
        ("1. Ada Lovelace (ada@uni.edu)", "Ada Lovelace", "ada@uni.edu"),
        ("12. Mary-Jane Watson (mj-watson@daily.bugle)", "Mary-Jane Watson", "mj-watson@daily.bugle"),
        ("3. sahaj jain (sahaj_jain@example.org)", "sahaj jain", "sahaj_jain@example.org"),
    ],
)
def test_name_and_email_line(line: str, name: str, email: str) -> None:
    """A `N. name (email)` line yields exactly one payee with both captured values."""
    payees = NumberedPayeeParser().parse(line)
    if len(payees) != 1:
        msg = f"Expected one payee, got {payees}"
        raise AssertionError(msg)
    if (payees[0].name, payees[0].email) != (name, email):
        msg = f"Expected {(name, email)}, got {(payees[0].name, payees[0].email)}"
        raise AssertionError(msg)
    if payees[0].status != "active":
        msg = f"Expected active payee, got {payees[0].status}"
        raise AssertionError(msg)


def test_email_only_line_derives_display_name() -> None:
    """An email as the primary token becomes the email; the name is title-cased from its local part."""
    payees = NumberedPayeeParser().parse("2. grace.hopper@navy.mil (Test Rails)")
    payee = payees[0]
    if payee.email != "grace.hopper@navy.mil" or payee.name != "Grace Hopper":
        msg = f"Unexpected payee: {payee}"
        raise AssertionError(msg)
    if payee.type != "Test Rails":
        msg = f"Expected type 'Test Rails', got {payee.type}"
        raise AssertionError(msg)


def test_name_only_line_gets_placeholder_email() -> None:
    """A bare name gets a synthesised example.com address and the suffix becomes the type."""
    payee = NumberedPayeeParser().parse("3. Kartik Design - US ACH")[0]
    if payee.name != "Kartik Design" or payee.email != "kartik.design@example.com":
        msg = f"Unexpected payee: {payee}"
        raise AssertionError(msg)
    if payee.type != "US ACH":
        msg = f"Expected type 'US ACH', got {payee.type}"
        raise AssertionError(msg)


def test_parse_order_kept_and_other_lines_skipped() -> None:
    """Prose around the list is ignored; duplicates are kept in order."""
    content = "Here are your payees:\n\n1. john\n2. ritik jain (ritik@x.io)\n3. john\nLet me know if you need more."
    names = [payee.name for payee in NumberedPayeeParser().parse(content)]
    if names != ["john", "ritik jain", "john"]:
        msg = f"Unexpected names: {names}"
        raise AssertionError(msg)


def test_structured_payees() -> None:
    """JSON payees keep their fields and fill in whichever of name/email is missing."""
    content = (
        '[{"name": "Ada", "email": "ada@uni.edu"}, '
        '{"email": "alan_turing@bletchley.uk", "status": "INACTIVE"}, {}]'
    )
    payees = StructuredPayeeParser().parse(content)
    if [p.name for p in payees] != ["Ada", "Alan Turing"]:
        msg = f"Unexpected names: {payees}"
        raise AssertionError(msg)
    if payees[1].status != "inactive":
        msg = f"Expected inactive status, got {payees[1].status}"
        raise AssertionError(msg)


def test_structured_payees_coerce_scalars_and_skip_bad_items() -> None:
    """Numeric fields are read as text; an item that cannot become a payee is skipped."""
    payload = [
        {"name": "Ada", "email": "ada@uni.edu", "type": 7},
        {"name": 42, "email": "alan@uni.edu", "status": 0},
        {"name": {"first": "Grace"}},
        "not a payee",
    ]
    payees = StructuredPayeeParser().parse(payload)
    if [(p.name, p.email, p.type) for p in payees] != [("Ada", "ada@uni.edu", "7"), ("42", "alan@uni.edu", None)]:
        msg = f"Unexpected payees: {payees}"
        raise AssertionError(msg)


def test_email_and_name_helpers() -> None:
    """The name/email guesses follow the provider's conventions."""
    if name_from_email("ada.love_lace@uni.edu") != "Ada Love Lace":
        msg = "name_from_email did not title-case the local part"
        raise AssertionError(msg)
    if placeholder_email("Sahaj  Jain") != "sahaj.jain@example.com":
        msg = "placeholder_email did not join words with dots"
        raise AssertionError(msg)
