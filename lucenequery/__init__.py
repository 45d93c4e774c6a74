# lucenequery/__init__.py
"""lucenequery - A query string builder for the Lucene/Solr standard query parser."""

from lucenequery.errors import (
    IncompleteQueryError,
    QueryArgumentError,
    QueryError,
    QueryRangeError,
    UnsupportedValueError,
)
from lucenequery.query import (
    Between,
    Expression,
    build,
    raw,
    term,
)

__all__ = [
    # Query builder
    "Expression",
    "term",
    "raw",
    "build",
    "Between",
    # Errors
    "QueryError",
    "QueryArgumentError",
    "QueryRangeError",
    "UnsupportedValueError",
    "IncompleteQueryError",
]
