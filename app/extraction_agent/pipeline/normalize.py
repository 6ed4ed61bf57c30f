from __future__ import annotations

import re
from typing import Optional

from dateutil import parser

RE_YES_NO = re.compile(r"^(yes|no)$", re.IGNORECASE)


def normalize_date_input(value: str) -> str:
    """Return ``YYYY-MM-DD`` for a parseable date, otherwise the original text."""
    raw = value.strip()
    if not raw:
        return value
    try:
        return parser.parse(raw).date().isoformat()
    except (ValueError, OverflowError):
        return value


def normalize_yes_no(value: str) -> str:
    lowered = value.strip().lower()
    if lowered == "yes":
        return "Yes"
    if lowered == "no":
        return "No"
    return value


def is_yes_no(value: Optional[str]) -> bool:
    if not value:
        return False
    return RE_YES_NO.match(value.strip()) is not None


def normalize_upper(value: str) -> str:
    return value.upper()
