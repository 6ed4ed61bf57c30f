from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

from dateutil import parser


RE_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
RE_PASSPORT = re.compile(r"[A-Z0-9]{6,9}")
RE_VISA = re.compile(r"[A-Z0-9-]{8,12}")
RE_NAME = re.compile(r"[A-Za-z\s\-'.]+")
RE_POSTAL_GENERIC = re.compile(r"[A-Z0-9\s-]{3,10}")


@dataclass(frozen=True)
class FieldRule:
    check: Callable[[str], bool]
    issue: str
    suggestion: Optional[str] = None


def is_valid_email(value: str) -> bool:
    return RE_EMAIL.fullmatch(value.strip()) is not None


def is_valid_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return 10 <= len(digits) <= 15


def is_past_date(value: str, now: Optional[datetime] = None) -> bool:
    raw = value.strip()
    if not raw:
        return False
    try:
        parsed = parser.parse(raw)
    except (ValueError, OverflowError):
        return False
    if parsed.tzinfo is not None:
        reference = now or datetime.now(tz=parsed.tzinfo)
    else:
        reference = now or datetime.now()
    return parsed < reference


def is_valid_passport_number(value: str) -> bool:
    return RE_PASSPORT.fullmatch(value) is not None


def is_valid_visa_number(value: str) -> bool:
    return RE_VISA.fullmatch(value) is not None


def is_valid_name(value: str) -> bool:
    return RE_NAME.fullmatch(value) is not None and len(value.strip()) >= 2


def is_valid_postal_code(value: str) -> bool:
    return RE_POSTAL_GENERIC.fullmatch(value) is not None


_NAME_RULE = FieldRule(is_valid_name, "Invalid name format")

FIELD_RULES: Dict[str, FieldRule] = {
    "email": FieldRule(is_valid_email, "Invalid email format", "Check for missing @ symbol or domain"),
    "phone": FieldRule(
        is_valid_phone,
        "Invalid phone number format",
        "Ensure phone number contains 10-15 digits",
    ),
    "date_of_birth": FieldRule(
        is_past_date,
        "Invalid date format or future date",
        "Use standard date formats (MM/DD/YYYY, YYYY-MM-DD)",
    ),
    "passport_number": FieldRule(is_valid_passport_number, "Invalid passport number format"),
    "visa_number": FieldRule(is_valid_visa_number, "Invalid visa number format"),
    "full_name": _NAME_RULE,
    "first_name": _NAME_RULE,
    "last_name": _NAME_RULE,
    "postal_code": FieldRule(is_valid_postal_code, "Invalid postal code format"),
}


def rule_for(field_name: str) -> Optional[FieldRule]:
    return FIELD_RULES.get(field_name)
