"""
Operator mapper — generic query operators to the store's native vocabulary.

Maps (generic : native):
 - ``{"$ne": v}``  : ``{"$neq": v}``
 - ``{"$in": l}``  : ``{"$in": {"search_expr": field, "target_expr": l}}``
 - ``{"$nin": l}`` : ``{"$not": {"$in": {"search_expr": field, "target_expr": l}}}``

Only an operator object holding exactly one of those keys is rewritten;
anything else (literals, whitelisted native operators, multi-key objects)
passes through unchanged.

Membership clauses reference the field by name instead of being keyed by
it, so they are collected into the native ``$and`` list.
"""

from __future__ import annotations

from typing import Any

from .operators import SEARCH_EXPR, TARGET_EXPR, QueryOperator
from .predicate import Comparison, Conjunction, Disjunction, Literal, Predicate


def membership_clause(field: str, candidates: Any) -> dict[str, Any]:
    """Build the structured native ``$in`` clause for *field*."""
    target = list(candidates) if isinstance(candidates, (list, tuple)) else [candidates]
    return {QueryOperator.IN.value: {SEARCH_EXPR: field, TARGET_EXPR: target}}


def map_operators(predicate: Predicate) -> dict[str, Any]:
    """Rewrite *predicate* into a native query document.

    Field clauses are handled at the top level only; ``$and`` / ``$or``
    branches are mapped recursively as predicates of their own.
    """
    native: dict[str, Any] = {}
    membership: list[dict[str, Any]] = []
    for key, node in predicate.clauses:
        if isinstance(node, Literal):
            native[key] = node.value
        elif isinstance(node, Comparison):
            value, clause = _map_comparison(key, node)
            if clause is not None:
                membership.append(clause)
            else:
                native[key] = value
        elif isinstance(node, Conjunction):
            native[QueryOperator.AND.value] = [
                map_operators(child) for child in node.children
            ]
        elif isinstance(node, Disjunction):
            native[QueryOperator.OR.value] = [
                map_operators(child) for child in node.children
            ]
    if membership:
        native[QueryOperator.AND.value] = [
            *native.get(QueryOperator.AND.value, []),
            *membership,
        ]
    return native


def _map_comparison(
    field: str, node: Comparison
) -> tuple[Any, dict[str, Any] | None]:
    """Return ``(field_value, None)`` or ``(None, top_level_clause)``."""
    if len(node.operators) != 1:
        return node.as_dict(), None
    op, value = node.operators[0]
    if op == QueryOperator.NE:
        return {QueryOperator.NEQ.value: value}, None
    if op == QueryOperator.IN:
        return None, membership_clause(field, value)
    if op == QueryOperator.NOT_IN:
        return None, {QueryOperator.NOT.value: membership_clause(field, value)}
    return node.as_dict(), None
