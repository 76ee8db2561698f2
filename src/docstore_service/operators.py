from __future__ import annotations

from enum import Enum


class QueryOperator(str, Enum):
    """Operator keys understood in a query, generic and store-native."""

    # Generic comparison (always allowed)
    IN = "$in"
    NOT_IN = "$nin"
    LT = "$lt"
    LE = "$lte"
    GT = "$gt"
    GE = "$gte"
    NE = "$ne"

    # Logical combinators (always allowed)
    OR = "$or"
    AND = "$and"

    # Store-native comparison (allowed through the whitelist)
    EQ = "$eq"
    NEQ = "$neq"
    NOT = "$not"

    # Pattern match
    LIKE = "$like"
    NOT_LIKE = "$notLike"

    # Range
    BETWEEN = "$btw"
    NOT_BETWEEN = "$notBtw"

    # Null / missing / valued checks
    IS_NULL = "$isNull"
    IS_NOT_NULL = "$isNotNull"
    IS_MISSING = "$isMissing"
    IS_NOT_MISSING = "$isNotMissing"
    IS_VALUED = "$isValued"
    IS_NOT_VALUED = "$isNotValued"

    # Modifier inside an operator object
    IGNORE_CASE = "$ignoreCase"


class Directive(str, Enum):
    """Non-field query keys that shape the result rather than the match."""

    SELECT = "$select"
    SORT = "$sort"
    LIMIT = "$limit"
    SKIP = "$skip"
    IGNORE_CASE = "$ignoreCase"


DEFAULT_OPERATORS: frozenset[str] = frozenset(
    {
        QueryOperator.IN.value,
        QueryOperator.NOT_IN.value,
        QueryOperator.LT.value,
        QueryOperator.LE.value,
        QueryOperator.GT.value,
        QueryOperator.GE.value,
        QueryOperator.NE.value,
        QueryOperator.OR.value,
        QueryOperator.AND.value,
    }
)

DEFAULT_FILTERS: tuple[str, ...] = (
    Directive.SELECT.value,
    Directive.SORT.value,
    Directive.LIMIT.value,
    Directive.SKIP.value,
    Directive.IGNORE_CASE.value,
)

COMBINATORS: frozenset[str] = frozenset(
    {QueryOperator.AND.value, QueryOperator.OR.value}
)

# Structured membership clause keys
SEARCH_EXPR = "search_expr"
TARGET_EXPR = "target_expr"
