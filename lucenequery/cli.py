# lucenequery/cli.py
import logging
import os
import sys
from functools import reduce
from typing import Annotated

import cyclopts

from lucenequery.errors import QueryArgumentError, QueryError
from lucenequery.query import Between, Expression, build_term, raw

logger = logging.getLogger(__name__)

app = cyclopts.App(
    name="lucenequery",
    help="Build Lucene/Solr standard query parser strings.",
)

MODES = ("match", "in", "prefix", "phrase", "fuzzy", "date")


def _parse_value(text: str) -> object:
    """Parse a command line value.

    Examples: a,b,c -> list, 1..10 -> [1 TO 10], 1...10 -> [1 TO 10}, ..10 -> [* TO 10]
    """
    for separator, exclusive in (("...", True), ("..", False)):
        if separator in text:
            lower, _, upper = text.partition(separator)
            return Between(lower or "*", upper or "*", exclusive=exclusive)
    if "," in text:
        return [v for v in text.split(",") if v]
    return text


def _parse_pair(pair: str) -> tuple[str, object]:
    field, sep, value = pair.partition("=")
    if not sep or not field:
        raise QueryArgumentError(f"Expected FIELD=VALUE, got: {pair!r}")
    return field, _parse_value(value)


def _finish(expr: Expression, wrap: bool, negate: bool) -> None:
    if wrap:
        expr = expr.wrap()
    if negate:
        expr = expr.not_()
    query = str(expr)
    logger.debug("Built query: %s", query)
    print(query)


@app.command(name="build")
def build(
    pairs: Annotated[
        list[str] | None,
        cyclopts.Parameter(help="FIELD=VALUE pairs (a,b,c for lists, low..high for ranges)"),
    ] = None,
    raw_query: Annotated[
        str | None,
        cyclopts.Parameter(name="--raw", help="Raw query text placed before the pairs"),
    ] = None,
    any_: Annotated[
        bool,
        cyclopts.Parameter(name="--or", help="Join terms with OR instead of AND"),
    ] = False,
    wrap: Annotated[
        bool,
        cyclopts.Parameter(name="--wrap", help="Group the whole query in parentheses"),
    ] = False,
    negate: Annotated[
        bool,
        cyclopts.Parameter(name="--not", help="Negate the first term (the group with --wrap)"),
    ] = False,
) -> None:
    """Build a composite query from field/value pairs."""
    try:
        terms = [build_term(field, value) for field, value in map(_parse_pair, pairs or [])]
        if raw_query:
            terms.insert(0, raw(raw_query))

        def join(acc: Expression, expr: Expression) -> Expression:
            return acc.or_(expr) if any_ else acc.and_(expr)

        _finish(reduce(join, terms, Expression()), wrap, negate)
    except QueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


@app.command(name="term")
def term(
    field: Annotated[str, cyclopts.Parameter(help="Field name")],
    values: Annotated[list[str], cyclopts.Parameter(help="Value(s) to match")],
    mode: Annotated[
        str,
        cyclopts.Parameter(
            name=["--mode", "-m"], help="Match mode: match, in, prefix, phrase, fuzzy, date"
        ),
    ] = "match",
    distance: Annotated[
        float | None,
        cyclopts.Parameter(name=["--distance", "-d"], help="Phrase proximity or fuzzy distance"),
    ] = None,
    boost: Annotated[
        float | None,
        cyclopts.Parameter(name="--boost", help="Boost factor"),
    ] = None,
    constant_score: Annotated[
        float | None,
        cyclopts.Parameter(name="--constant-score", help="Constant score"),
    ] = None,
    negate: Annotated[
        bool,
        cyclopts.Parameter(name="--not", help="Negate the term"),
    ] = False,
    wrap: Annotated[
        bool,
        cyclopts.Parameter(name="--wrap", help="Group the term in parentheses"),
    ] = False,
) -> None:
    """Build a single term."""
    if mode not in MODES:
        print(f"Error: Unknown mode: {mode}", file=sys.stderr)
        print(f"Available: {list(MODES)}", file=sys.stderr)
        sys.exit(1)

    text = " ".join(values)
    try:
        expr = Expression(field)
        match mode:
            case "in":
                expr = expr.match_in(values)
            case "prefix":
                expr = expr.prefix_match(text)
            case "phrase":
                expr = expr.phrase_match(values, distance=distance or 0)
            case "fuzzy":
                expr = expr.fuzzy_match(text, distance=2.0 if distance is None else distance)
            case "date":
                expr = expr.date_time_match(text)
            case _:
                expr = expr.match(text)

        if boost is not None:
            expr = expr.boost(boost)
        if constant_score is not None:
            expr = expr.constant_score(constant_score)
        _finish(expr, wrap, negate)
    except QueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _configure_logging() -> None:
    level = os.getenv("LUCENEQUERY_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    _configure_logging()
    app()


if __name__ == "__main__":
    main()
