"""Timestamp parsing shared by the parser, the git adapter and the CLI."""

from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

from .errors import InputError


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a date string into a timezone-aware datetime.

    Accepts ISO-8601 (``git log --format=%cI``), git's default date format
    (``Mon Jan 2 15:04:05 2023 +0100``) and plain dates such as
    ``2023-01-02``. Naive values are taken as UTC.

    Returns:
        The parsed datetime, or None if the text is empty or unparseable
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def require_timestamp(text: Optional[str], what: str) -> datetime:
    """Parse a required date argument, raising InputError if it is unusable."""
    parsed = parse_timestamp(text)
    if parsed is None:
        raise InputError(f"Couldn't parse {what} argument: {text!r}")
    return parsed
