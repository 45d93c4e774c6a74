# tests/test_values.py
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from fractions import Fraction

import pytest

from lucenequery.query.values import (
    DATE_MATH_SYMBOLS,
    RANGE_SYMBOLS,
    RESERVED_SYMBOLS,
    WILDCARD_SYMBOLS,
    clean,
    format_datetime,
    format_number,
    is_real_number,
    stringify,
    tokens,
)


def test_stringify():
    assert stringify(None) == ""
    assert stringify(True) == "true"
    assert stringify(False) == "false"
    assert stringify(14) == "14"
    assert stringify(7.3) == "7.3"
    assert stringify(1e-05) == "0.00001"
    assert stringify(Decimal("1.50")) == "1.50"
    assert stringify("word") == "word"


@pytest.mark.parametrize("symbol", sorted(RESERVED_SYMBOLS))
def test_clean_replaces_each_reserved_symbol(symbol):
    assert clean(f"a{symbol}b") == "a b"


def test_clean_exemptions():
    assert clean("a*b?c", WILDCARD_SYMBOLS) == "a*b?c"
    assert clean("NOW+9HOURS-7DAYS", DATE_MATH_SYMBOLS) == "NOW+9HOURS-7DAYS"
    assert clean("2000-01-01T00:00:00.5Z", DATE_MATH_SYMBOLS) == "2000-01-01T00:00:00.5Z"
    assert clean("*", RANGE_SYMBOLS) == "*"
    assert clean("a*b", DATE_MATH_SYMBOLS) == "a b"


def test_clean_escapes_standalone_keywords():
    assert clean("AND") == r"\AND"
    assert clean("cats AND dogs") == r"cats \AND dogs"
    assert clean("NOT OR") == r"\NOT \OR"
    assert clean("ANDROID ORACLE NOTE") == "ANDROID ORACLE NOTE"
    assert clean("and or not") == "and or not"


def test_cleaning_twice_yields_same_tokens():
    for value in ["Tiffany&Co.", "cats AND dogs", "a (b) [c]", r"\OR"]:
        assert tokens(clean(value)) == tokens(value)


def test_clean_escapes_keywords_freed_by_reserved_symbols():
    assert clean("x&AND&y") == r"x \AND y"


def test_tokens():
    assert tokens("  quick   brown&fox ") == ["quick", "brown", "fox"]
    assert tokens("&&") == []


def test_is_real_number():
    assert is_real_number(1)
    assert is_real_number(1.5)
    assert is_real_number(Fraction(1, 2))
    assert not is_real_number(True)
    assert not is_real_number("1")
    assert not is_real_number(None)
    assert not is_real_number(Decimal("1"))


def test_format_number():
    assert format_number(2) == "2"
    assert format_number(2.0) == "2.0"
    assert format_number(0.5) == "0.5"
    assert format_number(1e-05) == "0.00001"
    assert format_number(-2.5e-07) == "-0.00000025"
    assert format_number(1e16) == "10000000000000000"


def test_format_datetime():
    assert format_datetime(date(7000, 7, 1)) == "7000-07-01T00:00:00Z"
    assert format_datetime(datetime(6000, 5, 31, 6, 31, 43)) == "6000-05-31T06:31:43Z"
    assert format_datetime(datetime(2000, 4, 5, 6, 7, 8, 256000)) == "2000-04-05T06:07:08.256Z"
    assert format_datetime(datetime(2000, 4, 5, 6, 7, 8, 1000)) == "2000-04-05T06:07:08.001Z"
    assert format_datetime(date(999, 1, 2)) == "0999-01-02T00:00:00Z"


def test_format_datetime_ignores_sub_millisecond_precision():
    assert format_datetime(datetime(2000, 1, 1, 0, 0, 0, 999)) == "2000-01-01T00:00:00Z"


def test_format_datetime_converts_aware_values_to_utc():
    minus_five = timezone(timedelta(hours=-5))
    value = datetime(2000, 12, 31, 20, 30, 0, tzinfo=minus_five)
    assert format_datetime(value) == "2001-01-01T01:30:00Z"
