# lucenequery/query/values.py
"""Cleaning and formatting of raw values before they become query terms.

Reserved characters of the standard query parser are replaced with a space
rather than backslash-escaped. The boolean keywords are the exception: when
`AND`, `OR` or `NOT` stand alone inside a value they get a backslash prefix
so the parser reads them as words instead of operators.
"""

import re
from datetime import UTC, date, datetime
from decimal import Decimal
from functools import lru_cache
from numbers import Real

RESERVED_SYMBOLS = frozenset('-+&|!(){}[]^"~*?:\\/')
REPLACEMENT_CHAR = " "
RESERVED_WORDS = re.compile(r"(?<!\S)(AND|OR|NOT)(?!\S)")

# Characters left untouched for specific kinds of terms
WILDCARD_SYMBOLS = frozenset("*?")
DATE_MATH_SYMBOLS = frozenset("-:./+")
RANGE_SYMBOLS = DATE_MATH_SYMBOLS | {"*"}


@lru_cache(maxsize=8)
def _translation(exempt: frozenset[str]) -> dict[int, str]:
    return str.maketrans({c: REPLACEMENT_CHAR for c in RESERVED_SYMBOLS - exempt})


def stringify(value: object) -> str:
    """Convert a value to its query text; None is empty, bools are lowercase."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def clean(value: object, exempt: frozenset[str] = frozenset()) -> str:
    """Replace reserved characters with spaces and escape standalone keywords.

    Args:
        value: Value to clean; stringified first.
        exempt: Reserved characters to keep as they are.

    Returns:
        The cleaned text. It may contain several whitespace separated tokens.
    """
    text = stringify(value).translate(_translation(exempt))
    return RESERVED_WORDS.sub(r"\\\1", text)


def tokens(value: object, exempt: frozenset[str] = frozenset()) -> list[str]:
    return clean(value, exempt).split()


def quote(text: str) -> str:
    return f'"{text}"'


def is_real_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def format_number(value: int | float) -> str:
    """Positional notation; the query parser rejects exponents such as `1e-05`."""
    if isinstance(value, int):
        return str(value)
    return format(Decimal(repr(float(value))), "f")


def format_datetime(value: date) -> str:
    """Format a date or datetime as an ISO-8601 UTC timestamp.

    Aware datetimes are converted to UTC, naive ones are taken as UTC and plain
    dates start at midnight. Milliseconds are only rendered when non-zero.

    Example: datetime(2000, 4, 5, 6, 7, 8, 256000) -> 2000-04-05T06:07:08.256Z
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        millis = value.microsecond // 1000
    else:
        value = datetime(value.year, value.month, value.day)
        millis = 0

    stamp = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if millis:
        return f"{stamp}.{millis:03d}Z"
    return f"{stamp}Z"
