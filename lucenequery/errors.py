# lucenequery/errors.py
"""Exceptions raised while building or rendering queries."""


class QueryError(Exception):
    """Base class for all lucenequery errors."""


class QueryArgumentError(QueryError, ValueError):
    """A builder call received an invalid argument."""


class QueryRangeError(QueryArgumentError):
    """A numeric argument is outside the accepted interval."""


class UnsupportedValueError(QueryError, TypeError):
    """A value has a shape that cannot be turned into a query term."""


class IncompleteQueryError(QueryError):
    """The expression has no term that can be rendered."""
