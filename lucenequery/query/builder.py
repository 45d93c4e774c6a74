# lucenequery/query/builder.py
"""Build composite expressions from plain Python values."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import reduce

from lucenequery.errors import QueryArgumentError, UnsupportedValueError
from lucenequery.query.combinators import Expression, raw

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Between:
    """Range value for `build`: lower and upper bound, both inclusive by default."""

    lower: object
    upper: object
    exclusive: bool = False


def build(params: Mapping[str, object] | str) -> Expression:
    """
    Build an expression from a mapping of field -> value, or a raw query string.

    Entries are combined with AND in the mapping's order. How each value
    becomes a term depends on its type:

        str, int, float, bool, Decimal  -> match
        date, datetime                  -> date_time_match
        Expression                      -> used as-is
        list, tuple, set, frozenset     -> match_in (empty: blank term)
        range                           -> [start TO stop} (stepped: [first TO last])
        Between                         -> [lower TO upper] or [lower TO upper}

    Examples:
        >>> str(build({"title": "solr", "year": Between(2000, 2010)}))
        'title:solr AND year:[2000 TO 2010]'
        >>> str(build("title:solr"))
        'title:solr'
    """
    match params:
        case str():
            return raw(params)
        case Mapping():
            logger.debug("Building query from %s fields", len(params))
            terms = [build_term(f, v) for f, v in params.items()]
            return reduce(lambda acc, t: acc.and_(t), terms, Expression())
        case _:
            raise QueryArgumentError(
                f"Could not build query from {type(params).__name__}: {params!r}"
            )


def build_term(field: str, value: object) -> Expression:
    """Build the expression for a single field/value pair."""
    logger.debug("Building term for field %s from %s", field, type(value).__name__)
    match value:
        case Expression():
            return value
        case str() | bool() | int() | float() | Decimal():
            return Expression(field).match(value)
        case date():
            return Expression(field).date_time_match(value)
        case Between(lower=lower, upper=upper, exclusive=exclusive):
            expr = Expression(field).greater_than_or_equal_to(lower)
            if exclusive:
                return expr.less_than(upper)
            return expr.less_than_or_equal_to(upper)
        case range():
            return _build_range(field, value)
        case list() | tuple() | set() | frozenset():
            if not value:
                return Expression(field)
            return Expression(field).match_in(value)
        case _:
            raise UnsupportedValueError(
                f"Could not build query. field: {field}, value: {value!r}"
            )


def _build_range(field: str, values: range) -> Expression:
    if not values:
        return Expression(field)
    expr = Expression(field).greater_than_or_equal_to(values[0])
    if values.step == 1:
        return expr.less_than(values.stop)
    return expr.less_than_or_equal_to(values[-1])
