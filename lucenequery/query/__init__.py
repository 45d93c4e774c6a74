from .builder import Between, build, build_term
from .combinators import (
    AND,
    NOT,
    OR,
    Bound,
    Expression,
    Range,
    Raw,
    Term,
    Value,
    raw,
    term,
)

__all__ = [
    "Expression",
    "Term",
    "Value",
    "Range",
    "Bound",
    "Raw",
    "AND",
    "OR",
    "NOT",
    "term",
    "raw",
    "build",
    "build_term",
    "Between",
]
