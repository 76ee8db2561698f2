"""
DocumentService — generic CRUD protocol dispatched to a document store.

Every operation normalises ``params["query"]`` into a predicate and
directives, maps generic operators to the store vocabulary, reconciles an
explicit identifier with the predicate when both are given, and then takes
either the identifier fast path or the predicate-based path:

==========  =================================  ===============================
method      identifier only                    predicate present / ``id=None``
==========  =================================  ===============================
get         ``store.find_by_id``               ``store.find`` (first row)
update      ``store.replace_by_id``            ``store.update_many(replace)``
patch       ``store.update_by_id``             pre-fetch + ``store.update_many``
remove      pre-fetch + ``store.remove_by_id`` pre-fetch + ``store.remove_many``
==========  =================================  ===============================

Public methods enforce the ``multi`` policy; the underscore methods are the
unguarded internal versions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NamedTuple

from .exceptions import (
    BadRequest,
    DocumentNotFoundError,
    MethodNotAllowed,
    NotFound,
)
from .filters import NormalizedQuery, Paginate, filter_query
from .mapper import map_operators
from .options import CallOptions, Method, StoreOptions, assemble_options
from .projection import select_fields, to_record
from .reconcile import normalize_id, reconcile_identifier

if TYPE_CHECKING:
    from .filters import Directives
    from .store.ports import IDocumentStore, ManyResult

logger = logging.getLogger("docstore_service.service")

Params = Mapping[str, Any]

MULTI_METHODS = frozenset({"create", "patch", "remove"})


class Page(NamedTuple):
    """Paginated ``find`` envelope; ``total`` ignores limit and skip."""

    total: int
    limit: int | None
    skip: int
    data: list[Any]


@dataclass(frozen=True)
class ServiceOptions:
    """
    Immutable adapter configuration.

    Attributes:
        id_field: Name of the identifier field.
        store_options: Static options sent with every store call.
        whitelist: Extra operators accepted in queries (e.g. ``"$like"``).
        multi: ``True`` to allow every multi-record method, or the names of
            the allowed ones (``"create"``, ``"patch"``, ``"remove"``).
        paginate: Default pagination; ``None`` returns plain lists.
    """

    id_field: str = "id"
    store_options: StoreOptions = field(default_factory=StoreOptions)
    whitelist: frozenset[str] = frozenset()
    multi: bool | frozenset[str] = False
    paginate: Paginate | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "whitelist", frozenset(self.whitelist))
        if not isinstance(self.multi, bool):
            methods = frozenset(self.multi)
            unknown = methods - MULTI_METHODS
            if unknown:
                raise ValueError(f"Unknown multi methods: {sorted(unknown)}")
            object.__setattr__(self, "multi", methods)

    def allows_multi(self, method: str) -> bool:
        if isinstance(self.multi, bool):
            return self.multi
        return method in self.multi


class DocumentService:
    """CRUD adapter over an :class:`IDocumentStore`."""

    def __init__(
        self, store: IDocumentStore, options: ServiceOptions | None = None
    ) -> None:
        if store is None:
            raise ValueError("store must be provided")
        self._store = store
        self._options = options or ServiceOptions()

    @property
    def store(self) -> IDocumentStore:
        return self._store

    @property
    def options(self) -> ServiceOptions:
        return self._options

    @property
    def id_field(self) -> str:
        return self._options.id_field

    # ── Translation helpers ──────────────────────────────────────

    def filter_query(self, params: Params | None) -> NormalizedQuery:
        return filter_query(
            params,
            whitelist=self._options.whitelist,
            paginate=self._options.paginate,
        )

    def _call_options(
        self, filters: Directives, method: Method = "default"
    ) -> CallOptions:
        return assemble_options(
            filters, self._options.store_options, self.id_field, method
        )

    def _get_query(
        self, entity_id: Any, normalized: NormalizedQuery
    ) -> dict[str, Any]:
        """Native predicate for *normalized*, narrowed to *entity_id* if given."""
        native = map_operators(normalized.query)
        if entity_id is None:
            return native
        return reconcile_identifier(entity_id, native, self.id_field)

    def _select(self, data: Any, filters: Directives) -> Any:
        return select_fields(data, filters.select, self.id_field)

    def _echoed(
        self, result: ManyResult, entity_id: Any, data: Mapping[str, Any]
    ) -> Any:
        if result.data:
            return result.data[0]
        return {**data, self.id_field: normalize_id(entity_id)}

    # ── Internal methods ─────────────────────────────────────────

    async def _find(self, params: Params | None = None) -> list[Any] | Page:
        normalized = self.filter_query(params)
        native = map_operators(normalized.query)
        options = self._call_options(normalized.filters, "find")

        if normalized.pagination_requested:
            logger.debug("find (paginated) %s %s", native, options)
            result, total = await asyncio.gather(
                self._store.find(native, options),
                self._store.count(native, options),
            )
            return Page(
                total=total,
                limit=normalized.filters.limit,
                skip=normalized.filters.skip or 0,
                data=self._select(list(result.rows), normalized.filters),
            )

        logger.debug("find %s %s", native, options)
        result = await self._store.find(native, options)
        return self._select(list(result.rows or []), normalized.filters)

    async def _get(self, entity_id: Any, params: Params | None = None) -> Any:
        normalized = self.filter_query(params)
        options = self._call_options(normalized.filters)

        if normalized.has_predicate:
            native = self._get_query(entity_id, normalized)
            logger.debug("get %r via predicate %s", entity_id, native)
            result = await self._store.find(native, options.with_limit(1))
            if result.rows:
                return self._select(result.rows[0], normalized.filters)
            raise NotFound(f"No record found for id {entity_id}")

        try:
            record = await self._store.find_by_id(normalize_id(entity_id), options)
        except DocumentNotFoundError as e:
            raise NotFound(f"No record found for id {entity_id}") from e
        return self._select(record, normalized.filters)

    async def _create(
        self,
        data: Mapping[str, Any] | list[Mapping[str, Any]],
        params: Params | None = None,
    ) -> Any:
        if isinstance(data, list):
            # Results keep input order; the first failure fails the call
            return list(
                await asyncio.gather(*(self._create(item, params) for item in data))
            )

        normalized = self.filter_query(params)
        record = await self._store.create(dict(data))
        return self._select(record, normalized.filters)

    async def _update(
        self, entity_id: Any, data: Mapping[str, Any], params: Params | None = None
    ) -> Any:
        if entity_id is None:
            raise BadRequest(
                "You can not replace multiple instances. Did you mean 'patch'?"
            )

        normalized = self.filter_query(params)

        if normalized.has_predicate:
            native = self._get_query(entity_id, normalized)
            options = self._call_options(normalized.filters)
            result = await self._store.update_many(
                native, dict(data), options, replace=True
            )
            if result.success > 0:
                return self._select(
                    self._echoed(result, entity_id, data), normalized.filters
                )
            raise NotFound(f"No record found for id {entity_id}")

        try:
            record = await self._store.replace_by_id(
                normalize_id(entity_id), dict(data)
            )
        except DocumentNotFoundError as e:
            raise NotFound(f"No record found for id {entity_id}") from e
        return self._select(record, normalized.filters)

    async def _patch(
        self,
        entity_id: Any,
        data: Mapping[str, Any],
        params: Params | None = None,
    ) -> Any:
        normalized = self.filter_query(params)
        options = self._call_options(normalized.filters)

        if entity_id is None:
            native = self._get_query(None, normalized)
            entries = await self._find({**(params or {}), "paginate": False})
            result = await self._store.update_many(native, dict(data), options)
            if result.success > 0:
                merged = [{**to_record(entry), **data} for entry in entries]
                return self._select(merged, normalized.filters)
            logger.warning("patch matched no records for %s", native)
            raise NotFound(f"No record found for query {native}")

        if normalized.has_predicate:
            native = self._get_query(entity_id, normalized)
            result = await self._store.update_many(native, dict(data), options)
            if result.success > 0:
                return self._select(
                    self._echoed(result, entity_id, data), normalized.filters
                )
            raise NotFound(f"No record found for id {entity_id}")

        try:
            record = await self._store.update_by_id(
                normalize_id(entity_id), dict(data)
            )
        except DocumentNotFoundError as e:
            raise NotFound(f"No record found for id {entity_id}") from e
        return self._select(record, normalized.filters)

    async def _remove(self, entity_id: Any, params: Params | None = None) -> Any:
        normalized = self.filter_query(params)

        if entity_id is None:
            native = self._get_query(None, normalized)
            # The store does not return removed documents
            entries = await self._find({**(params or {}), "paginate": False})
            result = await self._store.remove_many(
                native, self._call_options(normalized.filters)
            )
            logger.debug("removed %d record(s) for %s", result.success, native)
            return entries

        snapshot = await self._get(entity_id, params)

        if normalized.has_predicate:
            native = self._get_query(entity_id, normalized)
            result = await self._store.remove_many(
                native, self._call_options(normalized.filters)
            )
            if result.success > 0:
                return snapshot
            raise NotFound(f"No record found for id {entity_id}")

        try:
            await self._store.remove_by_id(normalize_id(entity_id))
        except DocumentNotFoundError as e:
            raise NotFound(f"No record found for id {entity_id}") from e
        return snapshot

    # ── Public methods ───────────────────────────────────────────

    async def find(self, params: Params | None = None) -> list[Any] | Page:
        return await self._find(params)

    async def get(self, entity_id: Any, params: Params | None = None) -> Any:
        return await self._get(entity_id, params)

    async def create(
        self,
        data: Mapping[str, Any] | list[Mapping[str, Any]],
        params: Params | None = None,
    ) -> Any:
        if isinstance(data, list):
            if not self._options.allows_multi("create"):
                raise MethodNotAllowed("Can not create multiple entries")
            _check_data(*data)
        else:
            _check_data(data)
        return await self._create(data, params)

    async def update(
        self, entity_id: Any, data: Mapping[str, Any], params: Params | None = None
    ) -> Any:
        _check_data(data)
        return await self._update(entity_id, data, params)

    async def patch(
        self, entity_id: Any, data: Mapping[str, Any], params: Params | None = None
    ) -> Any:
        if entity_id is None and not self._options.allows_multi("patch"):
            raise MethodNotAllowed("Can not patch multiple entries")
        _check_data(data)
        return await self._patch(entity_id, data, params)

    async def remove(self, entity_id: Any, params: Params | None = None) -> Any:
        if entity_id is None and not self._options.allows_multi("remove"):
            raise MethodNotAllowed("Can not remove multiple entries")
        return await self._remove(entity_id, params)


def _check_data(*items: Any) -> None:
    for item in items:
        if not isinstance(item, Mapping):
            raise BadRequest("A data object must be provided")
