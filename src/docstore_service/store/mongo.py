"""MongoDocumentStore — IDocumentStore over a Motor collection."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.read_concern import ReadConcern

from ..exceptions import DocumentNotFoundError
from ..options import CallOptions, SearchConsistency
from .ports import FindResult, ManyResult
from .query_compiler import compile_predicate
from .serialization import (
    doc_to_record,
    model_from_record,
    record_to_doc,
    validate_record,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

    from .connection import MongoConnectionManager

logger = logging.getLogger("docstore_service.store.mongo")

_READ_CONCERNS: dict[SearchConsistency, str] = {
    SearchConsistency.LOCAL: "local",
    SearchConsistency.GLOBAL: "majority",
}

_SORT_DIRECTIONS: dict[str, int] = {"ASC": ASCENDING, "DESC": DESCENDING}


def read_concern_for(consistency: SearchConsistency) -> ReadConcern | None:
    """MongoDB read concern for *consistency*; ``None`` keeps the server default."""
    level = _READ_CONCERNS.get(consistency)
    return ReadConcern(level) if level else None


def _default_id() -> str:
    return str(uuid4())


class MongoDocumentStore:
    """Document store over one MongoDB collection.

    Documents are stored with ``_id`` holding the record identifier as a
    string; records returned to callers carry it under ``id_field``. When a
    pydantic *schema* is given, created and replaced records are validated
    against it and non-lean reads return model instances.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str,
        *,
        id_field: str = "id",
        database: str | None = None,
        schema: type[BaseModel] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._id_field = id_field
        self._database = database
        self._schema = schema
        self._id_factory = id_factory or _default_id

    @property
    def id_field(self) -> str:
        return self._id_field

    def _collection(
        self, consistency: SearchConsistency = SearchConsistency.NONE
    ) -> Any:
        return self._connection.collection(
            self._collection_name,
            database=self._database,
            read_concern=read_concern_for(consistency),
        )

    # ── Translation helpers ──────────────────────────────────────

    def _filter(self, predicate: dict[str, Any], ignore_case: bool = False) -> Any:
        return compile_predicate(
            predicate, id_field=self._id_field, ignore_case=ignore_case
        )

    def _projection(self, select: tuple[str, ...] | None) -> dict[str, int] | None:
        if not select:
            return None
        return {("_id" if f == self._id_field else f): 1 for f in select}

    def _sort(self, sort: tuple[tuple[str, str], ...] | None) -> list[tuple[str, int]]:
        if not sort:
            return []
        return [
            ("_id" if f == self._id_field else f, _SORT_DIRECTIONS[token])
            for f, token in sort
        ]

    def _body(self, data: dict[str, Any], *, validate: bool) -> dict[str, Any]:
        body = {k: v for k, v in data.items() if k != self._id_field}
        if validate and self._schema is not None:
            body = validate_record(self._schema, body)
        return body

    def _output(self, doc: dict[str, Any], options: CallOptions | None = None) -> Any:
        record = doc_to_record(doc, id_field=self._id_field)
        if (
            options is not None
            and not options.lean
            and options.select is None
            and self._schema is not None
        ):
            return model_from_record(self._schema, record)
        return record

    # ── Reads ────────────────────────────────────────────────────

    async def find(
        self, predicate: dict[str, Any], options: CallOptions
    ) -> FindResult:
        # MongoDB treats limit(0) as "no limit"
        if options.limit == 0:
            return FindResult(rows=[])
        query = self._filter(predicate, bool(options.ignore_case))
        logger.debug("find %s on %s", query, self._collection_name)
        cursor = self._collection(options.consistency).find(
            query, self._projection(options.select)
        )
        sort = self._sort(options.sort)
        if sort:
            cursor = cursor.sort(sort)
        if options.skip:
            cursor = cursor.skip(options.skip)
        if options.limit is not None:
            cursor = cursor.limit(options.limit)
        rows = [self._output(doc, options) async for doc in cursor]
        return FindResult(rows=rows)

    async def count(self, predicate: dict[str, Any], options: CallOptions) -> int:
        # Same read concern and case handling as the matching find
        query = self._filter(predicate, bool(options.ignore_case))
        coll = self._collection(options.consistency)
        return int(await coll.count_documents(query))

    async def find_by_id(self, entity_id: str, options: CallOptions) -> Any:
        coll = self._collection(options.consistency)
        doc = await coll.find_one({"_id": entity_id}, self._projection(options.select))
        if doc is None:
            raise DocumentNotFoundError(entity_id)
        return self._output(doc, options)

    # ── Writes ───────────────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> Any:
        entity_id = data.get(self._id_field)
        body = self._body(data, validate=True)
        doc = record_to_doc(body, id_field=self._id_field)
        doc["_id"] = str(entity_id) if entity_id is not None else self._id_factory()
        await self._collection().insert_one(doc)
        logger.debug("created %s in %s", doc["_id"], self._collection_name)
        return self._output(doc)

    async def replace_by_id(self, entity_id: str, data: dict[str, Any]) -> Any:
        doc = record_to_doc(self._body(data, validate=True), id_field=self._id_field)
        doc["_id"] = entity_id
        result = await self._collection().replace_one({"_id": entity_id}, doc)
        if result.matched_count == 0:
            raise DocumentNotFoundError(entity_id)
        return self._output(doc)

    async def update_by_id(self, entity_id: str, data: dict[str, Any]) -> Any:
        coll = self._collection()
        changes = record_to_doc(self._body(data, validate=False))
        if changes:
            doc = await coll.find_one_and_update(
                {"_id": entity_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        else:
            doc = await coll.find_one({"_id": entity_id})
        if doc is None:
            raise DocumentNotFoundError(entity_id)
        return self._output(doc)

    async def update_many(
        self,
        predicate: dict[str, Any],
        data: dict[str, Any],
        options: CallOptions,
        *,
        replace: bool = False,
    ) -> ManyResult:
        coll = self._collection()
        query = self._filter(predicate, bool(options.ignore_case))
        # Capture ids first: the update may stop the predicate from matching
        ids = [doc["_id"] async for doc in coll.find(query, {"_id": 1})]
        if not ids:
            return ManyResult(success=0)

        body = self._body(data, validate=replace)
        changes = record_to_doc(body)
        if replace:
            for doc_id in ids:
                await coll.replace_one({"_id": doc_id}, {**changes, "_id": doc_id})
            success = len(ids)
        elif changes:
            result = await coll.update_many(
                {"_id": {"$in": ids}}, {"$set": changes}
            )
            success = result.matched_count
        else:
            success = len(ids)

        logger.debug("updated %d document(s) in %s", success, self._collection_name)
        cursor = coll.find({"_id": {"$in": ids}})
        docs = tuple([self._output(doc, options) async for doc in cursor])
        return ManyResult(success=success, data=docs)

    async def remove_by_id(self, entity_id: str) -> None:
        result = await self._collection().delete_one({"_id": entity_id})
        if result.deleted_count == 0:
            raise DocumentNotFoundError(entity_id)

    async def remove_many(
        self, predicate: dict[str, Any], options: CallOptions
    ) -> ManyResult:
        query = self._filter(predicate, bool(options.ignore_case))
        result = await self._collection().delete_many(query)
        logger.debug(
            "removed %d document(s) from %s",
            result.deleted_count,
            self._collection_name,
        )
        return ManyResult(success=result.deleted_count)
