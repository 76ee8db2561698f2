"""Identifier reconciliation — merge an explicit id into a native predicate."""

from __future__ import annotations

from typing import Any

from .operators import QueryOperator


def normalize_id(entity_id: Any) -> str:
    """Identifiers are stored as strings, even when callers send numbers."""
    if isinstance(entity_id, str):
        return entity_id
    return str(entity_id)


def reconcile_identifier(
    entity_id: Any, predicate: dict[str, Any], id_field: str
) -> dict[str, Any]:
    """Return the predicate addressing *entity_id* within *predicate*.

    When *predicate* already constrains ``id_field`` the constraint is kept
    as a second ``$and`` branch next to the equality on *entity_id*, so
    ``id = X AND id != Y`` narrows instead of being overwritten. A
    contradictory pair simply matches nothing.
    """
    doc_id = normalize_id(entity_id)
    if id_field not in predicate:
        return {**predicate, id_field: doc_id}

    rest = {k: v for k, v in predicate.items() if k != id_field}
    and_key = QueryOperator.AND.value
    rest[and_key] = [
        {id_field: doc_id},
        {id_field: predicate[id_field]},
        *rest.get(and_key, []),
    ]
    return rest
