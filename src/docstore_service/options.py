"""
Store call options — static adapter defaults merged with request directives.

``StoreOptions`` is fixed at adapter construction; ``CallOptions`` is built
fresh for every store call by :func:`assemble_options`. Both are frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from .exceptions import ValidationFailure
from .operators import Directive

if TYPE_CHECKING:
    from .filters import Directives

Method = Literal["default", "find"]


class SearchConsistency(str, Enum):
    """How fresh a read must be relative to prior writes."""

    NONE = "none"
    LOCAL = "local"
    GLOBAL = "global"


SORT_ORDER: dict[int, str] = {1: "ASC", -1: "DESC"}


@dataclass(frozen=True)
class StoreOptions:
    """Static per-adapter store options.

    Attributes:
        lean: Return plain records instead of model instances.
        consistency: Read consistency passed through to the store.
    """

    lean: bool = True
    consistency: SearchConsistency = SearchConsistency.NONE


@dataclass(frozen=True)
class CallOptions:
    """Options for a single store call."""

    lean: bool = True
    consistency: SearchConsistency = SearchConsistency.NONE
    select: tuple[str, ...] | None = None
    sort: tuple[tuple[str, str], ...] | None = None
    limit: int | None = None
    skip: int | None = None
    ignore_case: bool | None = None

    def with_limit(self, limit: int | None) -> CallOptions:
        """Return a copy with the limit replaced."""
        return replace(self, limit=limit)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary, omitting unset values."""
        result: dict[str, Any] = {
            "lean": self.lean,
            "consistency": self.consistency.value,
        }
        if self.select is not None:
            result["select"] = list(self.select)
        if self.sort is not None:
            result["sort"] = dict(self.sort)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.skip is not None:
            result["skip"] = self.skip
        if self.ignore_case is not None:
            result["ignore_case"] = self.ignore_case
        return result


def assemble_options(
    filters: Directives,
    defaults: StoreOptions,
    id_field: str,
    method: Method = "default",
) -> CallOptions:
    """Build :class:`CallOptions` from request directives and adapter defaults.

    The ``"default"`` variant carries the projection and case-insensitivity,
    which is all a single-record lookup or a predicate mutation needs;
    ``"find"`` adds sort, limit and skip.
    """
    base = CallOptions(
        lean=defaults.lean,
        consistency=defaults.consistency,
        select=_select(filters, id_field),
        ignore_case=filters.ignore_case or None,
    )
    if method == "default":
        return base
    return replace(
        base, sort=_sort(filters), limit=filters.limit, skip=filters.skip
    )


def _select(filters: Directives, id_field: str) -> tuple[str, ...] | None:
    if filters.select is None:
        return None
    # The identifier must survive projection
    if id_field in filters.select:
        return filters.select
    return (*filters.select, id_field)


def _sort(filters: Directives) -> tuple[tuple[str, str], ...] | None:
    if not filters.sort:
        return None
    sort: list[tuple[str, str]] = []
    errors: dict[str, list[str]] = {}
    for field, direction in filters.sort.items():
        token = (
            SORT_ORDER.get(direction)
            if isinstance(direction, int) and not isinstance(direction, bool)
            else None
        )
        if token is None:
            errors.setdefault(Directive.SORT.value, []).append(
                f"Invalid sort direction {direction!r} for field {field!r}"
            )
            continue
        sort.append((field, token))
    if errors:
        raise ValidationFailure(errors)
    return tuple(sort)
