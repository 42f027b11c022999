"""Shared utility functions for the ScholarPay project."""

import logging
from datetime import UTC, date, datetime

import colorlog

MAX_LOG_PAYLOAD_LEN = 300


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project.

    Handlers live on the top-level project logger ('scholarpay'); 'scholarpay.*' loggers propagate to it.
    """
    logger = logging.getLogger(name.split(".", 1)[0])
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    logger.propagate = False
    return logging.getLogger(name)


def safe_cast(val: object, to_type: type, default: object = None) -> object:
    """Safely cast a value to a type, returning default on failure."""
    try:
        return to_type(val)
    except (ValueError, TypeError):
        return default


def parse_amount(text: str | None) -> float | None:
    """Parse a number that may carry thousands separators, e.g. '1,234.56'."""
    if not text:
        return None
    return safe_cast(text.replace(",", ""), float)


def truncate(text: object, limit: int = MAX_LOG_PAYLOAD_LEN) -> str:
    """Shorten a payload for log output."""
    raw = str(text)
    if len(raw) > limit:
        return raw[: limit - 3] + "..."
    return raw


def utcnow() -> datetime:
    """Get the current UTC time."""
    return datetime.now(UTC)


def utcnow_iso() -> str:
    """Get the current UTC time as an ISO8601 string."""
    return utcnow().isoformat()


def today_iso() -> str:
    """Get today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def as_text(value: object) -> str | None:
    """Render a scalar JSON value as stripped text; None, empty strings, objects and lists give None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value).strip() or None
