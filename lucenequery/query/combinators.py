# lucenequery/query/combinators.py
import math
from collections.abc import Callable, Collection, Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from itertools import takewhile

from lucenequery.errors import (
    IncompleteQueryError,
    QueryArgumentError,
    QueryRangeError,
    UnsupportedValueError,
)
from lucenequery.query.values import (
    DATE_MATH_SYMBOLS,
    RANGE_SYMBOLS,
    WILDCARD_SYMBOLS,
    format_datetime,
    format_number,
    is_real_number,
    quote,
    stringify,
    tokens,
)

NOT = "NOT"
AND = "AND"
OR = "OR"
TO = "TO"

WILD_CARD = "*"
PROXIMITY = "~"
BOOST = "^"
CONSTANT_SCORE = "^="
PARENTHESIS_LEFT = "("
PARENTHESIS_RIGHT = ")"

FUZZY_DISTANCE_RANGE = (0.0, 2.0)


@dataclass(frozen=True)
class Value:
    """Simple or compound value, rendered as field:text."""

    text: str


@dataclass(frozen=True)
class Bound:
    """One side of a range."""

    text: str
    inclusive: bool


@dataclass(frozen=True)
class Range:
    """Range value: field:{lower TO upper} with per-side brackets."""

    lower: Bound | None = None
    upper: Bound | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.lower and self.lower.text and self.upper and self.upper.text)

    def render(self) -> str:
        match self:
            case Range(lower=Bound() as lower, upper=Bound() as upper):
                left = "[" if lower.inclusive else "{"
                right = "]" if upper.inclusive else "}"
                return f"{left}{lower.text} {TO} {upper.text}{right}"
            case _:
                raise IncompleteQueryError("Please specify both range bounds.")


@dataclass(frozen=True)
class Raw:
    """Verbatim query text."""

    text: str


Term = Value | Range | Raw


def _validate_field(name: object) -> None:
    if not isinstance(name, str) or not name:
        raise QueryArgumentError(f"Please specify a field name. {name!r} given.")


def _require_text(value: object) -> str:
    text = stringify(value)
    if not text:
        raise QueryArgumentError(f"Please specify a search value. {value!r} given.")
    return text


def _phrase(words: list[str], distance: object = 0) -> str:
    text = quote(" ".join(words))
    if is_real_number(distance) and math.isfinite(distance) and int(distance) >= 1:
        return f"{text}{PROXIMITY}{int(distance)}"
    return text


def _bound_text(value: object) -> str:
    if isinstance(value, date):
        return format_datetime(value)
    _require_text(value)
    words = tokens(value, RANGE_SYMBOLS)
    if len(words) > 1:
        return quote(" ".join(words))
    return "".join(words)


def _score(value: object, what: str, *, positive: bool) -> int | float:
    if not is_real_number(value) or not math.isfinite(value) or (positive and value <= 0):
        qualifier = "a positive" if positive else "a finite"
        raise QueryArgumentError(f"The {what} must be {qualifier} number. {value!r} given.")
    return value if isinstance(value, int) else float(value)


@dataclass(frozen=True, repr=False, eq=False)
class Expression:
    """A query term, or the newest link of a chain of terms.

    Every builder call returns a new expression; nothing is modified in place.
    Chains point backwards: the tail holds `prev`, and the head is the node
    reached by following it until it runs out.

    Example:
        >>> soft = term("mohs").greater_than_or_equal_to("*").less_than(5.0)
        >>> str(term("system").match("cubic").and_(soft).wrap())
        '(system:cubic AND mohs:[* TO 5.0})'
    """

    field_name: str | None = None
    term: Term | None = None
    negated: bool = False
    open_groups: int = 0
    close_groups: int = 0
    boost_factor: int | float | None = None
    constant_score_value: int | float | None = None
    prev: "Expression | None" = None
    operator: str | None = None

    def __post_init__(self) -> None:
        if self.field_name is not None:
            _validate_field(self.field_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        left: Expression | None = self
        right: Expression | None = other
        while left is not None and right is not None:
            if left is right:
                return True
            if left._key() != right._key():
                return False
            left, right = left.prev, right.prev
        return left is right

    def __hash__(self) -> int:
        return hash(tuple(node._key() for node in self._nodes()))

    def _key(self) -> tuple:
        return (
            self.field_name,
            self.term,
            self.negated,
            self.open_groups,
            self.close_groups,
            self.boost_factor,
            self.constant_score_value,
            self.operator,
        )

    @property
    def is_blank(self) -> bool:
        """True when this node has nothing to render."""
        match self.term:
            case Raw():
                return False
            case Value(text=text):
                return not (self.field_name and text)
            case Range() as value_range:
                return not (self.field_name and value_range.is_complete)
            case _:
                return True

    @property
    def is_present(self) -> bool:
        return not self.is_blank

    # Construction

    def field(self, name: str) -> "Expression":
        _validate_field(name)
        return replace(self, field_name=name)

    def raw(self, text: str) -> "Expression":
        """Use `text` verbatim instead of field and value."""
        if not isinstance(text, str) or not text:
            raise QueryArgumentError(f"Please specify a raw query string. {text!r} given.")
        return self._with_term(Raw(text))

    # Values

    def match(self, value: object) -> "Expression":
        """Plain term match; several words after cleaning become a phrase."""
        _require_text(value)
        words = tokens(value)
        if len(words) > 1:
            return self._with_term(Value(_phrase(words)))
        return self._with_term(Value("".join(words)))

    def match_in(self, values: Collection[object]) -> "Expression":
        """Match any of `values`: field:(v1 v2 v3)."""
        if (
            isinstance(values, (str, bytes, Mapping))
            or not isinstance(values, Collection)
            or not values
        ):
            raise QueryArgumentError(
                f"Please specify a non-empty collection of values. {values!r} given."
            )

        values = list(values)
        for value in values:
            _require_text(value)
        if len(values) == 1:
            return self.match(values[0])

        parts: list[str] = []
        for value in values:
            words = tokens(value)
            if len(words) > 1:
                parts.append(quote(" ".join(words)))
            elif words:
                parts.append(words[0])

        text = f"{PARENTHESIS_LEFT}{' '.join(parts)}{PARENTHESIS_RIGHT}" if parts else ""
        return self._with_term(Value(text))

    def date_time_match(self, value: date | str) -> "Expression":
        """Quoted timestamp match; strings keep date math such as NOW-1DAY."""
        if isinstance(value, date):
            text = format_datetime(value)
        else:
            _require_text(value)
            text = " ".join(tokens(value, DATE_MATH_SYMBOLS))
        return self._with_term(Value(quote(text) if text else ""))

    def prefix_match(self, value: object) -> "Expression":
        _require_text(value)
        return self._with_term(Value(WILD_CARD.join(tokens(value, WILDCARD_SYMBOLS))))

    def phrase_match(self, values: Iterable[object], distance: object = 0) -> "Expression":
        """Phrase match, with a proximity suffix when `distance` is at least 1.

        Args:
            values: Words or groups of words; a single string is one value.
            distance: Proximity distance. Truncated to an integer; anything below
                one, or not a number, renders no suffix.
        """
        if isinstance(values, str):
            values = [values]
        words = [word for value in values for word in tokens(value)]
        if not words:
            raise QueryArgumentError(f"Please specify phrase words. {values!r} given.")
        return self._with_term(Value(_phrase(words, distance)))

    def fuzzy_match(self, value: object, distance: float = 2.0) -> "Expression":
        """Fuzzy match with an edit distance in [0.0, 2.0]."""
        if not is_real_number(distance):
            raise QueryArgumentError(f"The fuzzy distance must be a number. {distance!r} given.")
        low, high = FUZZY_DISTANCE_RANGE
        if not low <= distance <= high:
            raise QueryRangeError(f"Out of {low}..{high}. {distance!r} given.")

        _require_text(value)
        word = "".join(tokens(value))
        if not word:
            return self._with_term(Value(""))
        return self._with_term(Value(f"{word}{PROXIMITY}{format_number(float(distance))}"))

    def greater_than(self, value: object) -> "Expression":
        return self._with_bound(lower=Bound(_bound_text(value), inclusive=False))

    def greater_than_or_equal_to(self, value: object) -> "Expression":
        return self._with_bound(lower=Bound(_bound_text(value), inclusive=True))

    def less_than(self, value: object) -> "Expression":
        return self._with_bound(upper=Bound(_bound_text(value), inclusive=False))

    def less_than_or_equal_to(self, value: object) -> "Expression":
        return self._with_bound(upper=Bound(_bound_text(value), inclusive=True))

    # Composition

    def and_(self, other: "Expression | Mapping | str | None") -> "Expression":
        return self._link(other, AND)

    def or_(self, other: "Expression | Mapping | str | None") -> "Expression":
        return self._link(other, OR)

    def not_(self) -> "Expression":
        """Negate the head of the chain."""
        return self._map_head(lambda head: replace(head, negated=True))

    def wrap(self) -> "Expression":
        """Group the whole chain in parentheses."""
        wrapped = self._map_head(lambda head: replace(head, open_groups=head.open_groups + 1))
        return replace(wrapped, close_groups=wrapped.close_groups + 1)

    def boost(self, factor: float) -> "Expression":
        return replace(self, boost_factor=_score(factor, "boost factor", positive=True))

    def constant_score(self, score: float) -> "Expression":
        return replace(
            self, constant_score_value=_score(score, "constant score", positive=False)
        )

    def __and__(self, other: "Expression | Mapping | str | None") -> "Expression":
        return self.and_(other)

    def __or__(self, other: "Expression | Mapping | str | None") -> "Expression":
        return self.or_(other)

    def __invert__(self) -> "Expression":
        return self.not_()

    # Rendering

    def render(self) -> str:
        """Render the standard query parser string.

        Raises:
            IncompleteQueryError: No node in the chain has a complete term.
        """
        rendered = self._render()
        if rendered is None:
            raise IncompleteQueryError("Please specify a search condition.")
        return rendered

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({(self._render() or '')!r})"

    def _render(self) -> str | None:
        rendered: str | None = None
        pending_groups = 0  # opened on blank nodes, not yet emitted
        pending_negation = False  # negated blank head

        for node in self._nodes():
            if node.is_blank:
                if rendered is None:
                    pending_negation = pending_negation or node.negated
                pending_groups += node.open_groups
                closed = min(pending_groups, node.close_groups)
                pending_groups -= closed
                if rendered is not None:
                    rendered += PARENTHESIS_RIGHT * (node.close_groups - closed)
                    rendered += node._scoring()
                continue

            expr = (
                f"{NOT + ' ' if node.negated or pending_negation else ''}"
                f"{PARENTHESIS_LEFT * (node.open_groups + pending_groups)}"
                f"{node._render_term()}"
                f"{PARENTHESIS_RIGHT * node.close_groups}"
            )
            pending_groups = 0
            pending_negation = False
            if rendered is not None:
                expr = f"{rendered} {node.operator} {expr}"
            rendered = f"{expr}{node._scoring()}"

        return rendered

    def _render_term(self) -> str:
        match self.term:
            case Raw(text=text):
                return text
            case Range() as value_range:
                return f"{self.field_name}:{value_range.render()}"
            case Value(text=text):
                return f"{self.field_name}:{text}"
            case _:
                raise IncompleteQueryError("Please specify a search condition.")

    def _scoring(self) -> str:
        if self.constant_score_value is not None:
            return f"{CONSTANT_SCORE}{format_number(self.constant_score_value)}"
        if self.boost_factor is not None:
            return f"{BOOST}{format_number(self.boost_factor)}"
        return ""

    # Chain helpers

    def _nodes(self) -> list["Expression"]:
        """All nodes of the chain, head first."""
        nodes: list[Expression] = []
        node: Expression | None = self
        while node is not None:
            nodes.append(node)
            node = node.prev
        nodes.reverse()
        return nodes

    def _map_head(self, fn: Callable[["Expression"], "Expression"]) -> "Expression":
        """Return a copy of the chain with `fn` applied to its head.

        Only the nodes between the tail and the head are copied; the rest of
        the chain is shared.
        """
        path: list[Expression] = []
        node = self
        while node.prev is not None:
            path.append(node)
            node = node.prev

        result = fn(node)
        for node in reversed(path):
            result = replace(node, prev=result)
        return result

    def _link(self, other: object, operator: str) -> "Expression":
        other = _coerce_operand(other)
        if other is None or other._render() is None:
            return self
        return other._drop_blank_head()._map_head(
            lambda head: replace(head, prev=self, operator=operator)
        )

    def _drop_blank_head(self) -> "Expression":
        """Fold the leading blank nodes into the first present one.

        Their pending opening markers and negation move to that node, the same
        way rendering treats them. The chain must have a present node.
        """
        nodes = self._nodes()
        leading = list(takewhile(lambda node: node.is_blank, nodes))
        if not leading:
            return self

        pending_groups = 0
        for node in leading:
            pending_groups += node.open_groups
            pending_groups -= min(pending_groups, node.close_groups)

        first = nodes[len(leading)]
        result = replace(
            first,
            prev=None,
            operator=None,
            negated=first.negated or any(node.negated for node in leading),
            open_groups=first.open_groups + pending_groups,
        )
        for node in nodes[len(leading) + 1 :]:
            result = replace(node, prev=result)
        return result

    def _with_term(self, value: Term) -> "Expression":
        return replace(self, term=value)

    def _with_bound(self, *, lower: Bound | None = None, upper: Bound | None = None) -> "Expression":
        current = self.term if isinstance(self.term, Range) else Range()
        return self._with_term(
            Range(lower=lower or current.lower, upper=upper or current.upper)
        )


def _coerce_operand(other: object) -> Expression | None:
    match other:
        case None:
            return None
        case Expression():
            return other
        case str() | Mapping() if other:
            from lucenequery.query.builder import build

            return build(other)
        case _ if not other:
            return None
        case _:
            raise UnsupportedValueError(
                f"Could not combine with {type(other).__name__}: {other!r}"
            )


# Factory functions (public API)
def term(field: str | None = None) -> Expression:
    return Expression(field)


def raw(text: str) -> Expression:
    return Expression().raw(text)
