"""Result projection — apply ``$select`` to records leaving the adapter."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel


def to_record(data: Any) -> dict[str, Any]:
    """Return a detached plain-dict copy of a record or model instance."""
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, Mapping):
        return copy.deepcopy(dict(data))
    raise TypeError(f"Cannot convert {type(data).__name__} to a record")


def select_fields(data: Any, select: Iterable[str] | None, id_field: str) -> Any:
    """Keep only *select* fields (plus the identifier) in a record or list.

    No-op when *select* is ``None``. The input is never mutated.
    """
    if select is None:
        return data
    fields = {*select, id_field}
    if isinstance(data, (list, tuple)):
        return [_pick(item, fields) for item in data]
    return _pick(data, fields)


def _pick(item: Any, fields: set[str]) -> dict[str, Any]:
    record = to_record(item)
    return {k: v for k, v in record.items() if k in fields}
