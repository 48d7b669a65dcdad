"""
Property value kinds

Structured data literals arrive as whatever the source syntax produced: JSON
numbers and booleans from JSON-LD, plain strings from RDFa and Microdata.
This module names the closed set of kinds a property value can have and
decides whether a value satisfies an expected kind from the schema table.
"""

import math
import re
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional
from urllib.parse import urlsplit

from sdvalidator.models import SemanticItem


class ValueKind(str, Enum):
    """Closed set of property value kinds."""

    TEXT = "Text"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    DATETIME = "DateTime"
    URL = "URL"
    NESTED_ITEM = "NestedItem"
    NESTED_ITEM_ARRAY = "NestedItemArray"
    ARRAY = "Array"


# Expected kinds in the schema table that name literals rather than types
LITERAL_KINDS = frozenset({"Text", "Number", "Boolean", "Date", "DateTime", "URL"})

# Root of the type hierarchy; any nested item satisfies it
THING = "Thing"

_ISO_DATE_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:T(\d{2}):(\d{2})(?::(\d{2}))?(?:\.\d+)?(?:Z|[+-](\d{2}):(\d{2}))?)?$"
)

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# Schemes that are meaningless without a host
_HIERARCHICAL_SCHEMES = frozenset({"http", "https", "ftp", "ftps", "ws", "wss"})

_LEADING_FLOAT_PATTERN = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def is_number(value: Any) -> bool:
    """Native numbers (not booleans) or strings that parse as a number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return False
        return not math.isnan(parsed)
    return False


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool) or value in ("true", "false")


def is_iso_date(value: Any) -> bool:
    """ISO-8601 date or date-time strings that name a real calendar date."""
    if not isinstance(value, str):
        return False
    match = _ISO_DATE_PATTERN.match(value.strip())
    if not match:
        return False

    year, month, day, hour, minute, second, off_hour, off_minute = match.groups()
    try:
        date(int(year), int(month), int(day))
    except ValueError:
        return False

    if hour is not None:
        if int(hour) > 23 or int(minute) > 59:
            return False
        if second is not None and int(second) > 59:
            return False
    if off_hour is not None and (int(off_hour) > 23 or int(off_minute) > 59):
        return False
    return True


def is_datetime(value: Any) -> bool:
    """A date string carrying a time component."""
    return is_iso_date(value) and "T" in value


def is_absolute_url(value: Any) -> bool:
    """Strings with a scheme; web schemes must also carry a host."""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if not value or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_PATTERN.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HIERARCHICAL_SCHEMES:
        return bool(parts.netloc)
    return bool(parts.netloc or parts.path)


def parse_leading_float(value: Any) -> Optional[float]:
    """Parse a number the lenient way price fields are written ("12.50 USD")."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else float(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_FLOAT_PATTERN.match(value)
    return float(match.group(1)) if match else None


def parse_leading_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_INT_PATTERN.match(value)
    return int(match.group(1)) if match else None


def classify(value: Any) -> ValueKind:
    """Assign a value to exactly one kind.

    Strings are classified by their most specific reading: date-time, date,
    absolute URL, then plain text.
    """
    if isinstance(value, SemanticItem):
        return ValueKind.NESTED_ITEM
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(v, SemanticItem) for v in value):
            return ValueKind.NESTED_ITEM_ARRAY
        return ValueKind.ARRAY
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        if is_datetime(value):
            return ValueKind.DATETIME
        if is_iso_date(value):
            return ValueKind.DATE
        if is_absolute_url(value):
            return ValueKind.URL
    return ValueKind.TEXT


def matches_kind(value: Any, expected: str) -> bool:
    """Whether a single (non-array) value satisfies one expected kind.

    Args:
        value: Property value
        expected: Literal kind name or schema type name

    Returns:
        True when the value is acceptable for the expected kind
    """
    kind = classify(value)

    if kind is ValueKind.NESTED_ITEM:
        if expected in LITERAL_KINDS:
            return False
        return expected == THING or not value.has_type or expected in value.types

    if expected == "Text":
        # Dates and URLs are still text
        return isinstance(value, str)
    if expected == "Number":
        return kind in (ValueKind.NUMBER, ValueKind.TEXT) and is_number(value)
    if expected == "Boolean":
        return kind is ValueKind.BOOLEAN or (kind is ValueKind.TEXT and is_boolean(value))
    if expected in ("Date", "DateTime"):
        return kind in (ValueKind.DATE, ValueKind.DATETIME)
    if expected == "URL":
        return kind is ValueKind.URL
    return False


def matches_any(value: Any, expected: Iterable[str]) -> bool:
    return any(matches_kind(value, kind) for kind in expected)
