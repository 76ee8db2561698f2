"""Query normalisation — split request params into predicate, directives, pagination."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from .exceptions import BadRequest
from .operators import DEFAULT_FILTERS, DEFAULT_OPERATORS, Directive
from .predicate import Predicate, parse_predicate


class Paginate(NamedTuple):
    """Pagination settings: default page size and the hard maximum."""

    default: int | None = None
    max: int | None = None

    @property
    def active(self) -> bool:
        return bool(self.default or self.max)


@dataclass(frozen=True)
class Directives:
    """Result-shaping keys removed from a query before it reaches the store."""

    select: tuple[str, ...] | None = None
    sort: Mapping[str, Any] | None = None
    limit: int | None = None
    skip: int | None = None
    ignore_case: bool | None = None


class NormalizedQuery(NamedTuple):
    """Parsed predicate, directives and effective pagination."""

    query: Predicate
    filters: Directives
    paginate: Paginate | None

    @property
    def has_predicate(self) -> bool:
        return bool(self.query)

    @property
    def pagination_requested(self) -> bool:
        return self.paginate is not None


def filter_query(
    params: Mapping[str, Any] | None,
    *,
    whitelist: Iterable[str] = (),
    paginate: Paginate | None = None,
) -> NormalizedQuery:
    """Normalise ``params["query"]``.

    ``params["paginate"]`` overrides the adapter-level *paginate*; ``False``
    disables pagination for the call.
    """
    params = params or {}
    query = dict(params.get("query") or {})
    raw: dict[str, Any] = {}
    for key in DEFAULT_FILTERS:
        if key in query:
            raw[key] = query.pop(key)

    effective = _resolve_paginate(params, paginate)
    filters = Directives(
        select=_parse_select(raw.get(Directive.SELECT.value)),
        sort=_parse_sort(raw.get(Directive.SORT.value)),
        limit=_resolve_limit(
            _int_param(Directive.LIMIT.value, raw.get(Directive.LIMIT.value)),
            effective,
        ),
        skip=_int_param(Directive.SKIP.value, raw.get(Directive.SKIP.value)),
        ignore_case=(
            bool(raw[Directive.IGNORE_CASE.value])
            if Directive.IGNORE_CASE.value in raw
            else None
        ),
    )
    predicate = parse_predicate(query, DEFAULT_OPERATORS | frozenset(whitelist))
    return NormalizedQuery(query=predicate, filters=filters, paginate=effective)


def _resolve_paginate(
    params: Mapping[str, Any], paginate: Paginate | None
) -> Paginate | None:
    if "paginate" in params:
        requested = params["paginate"]
        if not requested:
            return None
        if isinstance(requested, Paginate):
            paginate = requested
        elif isinstance(requested, Mapping):
            paginate = Paginate(requested.get("default"), requested.get("max"))
    if paginate is None or not paginate.active:
        return None
    return paginate


def _resolve_limit(limit: int | None, paginate: Paginate | None) -> int | None:
    # 0 is a valid limit: the caller wants the total without rows
    if paginate is None:
        return limit
    if limit is None or limit < 0:
        limit = paginate.default
    if limit is not None and paginate.max is not None:
        limit = min(limit, paginate.max)
    return limit


def _int_param(name: str, v: Any) -> int | None:
    if v is None:
        return None
    if isinstance(v, bool):
        raise BadRequest(f"{name} must be an integer")
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise BadRequest(f"{name} must be an integer") from e


def _parse_select(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, (list, tuple)):
        return tuple(str(f) for f in raw)
    raise BadRequest(f"{Directive.SELECT.value} must be a list of field names")


def _parse_sort(raw: Any) -> dict[str, Any] | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise BadRequest(f"{Directive.SORT.value} must map fields to 1 or -1")
    sort: dict[str, Any] = {}
    for field, direction in raw.items():
        # anything non-numeric is left for the options assembler to reject
        if isinstance(direction, str) and direction.lstrip("-").isdigit():
            direction = int(direction)
        sort[field] = direction
    return sort
