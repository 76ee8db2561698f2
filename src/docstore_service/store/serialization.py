"""Record <-> BSON document conversion (identifier mapping, Decimal, UUID)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar, cast
from uuid import UUID

from bson import Decimal128
from pydantic import BaseModel, ValidationError

from ..exceptions import BadRequest, StoreFailure

TModel = TypeVar("TModel", bound=BaseModel)


def _serialize_value(value: Any) -> Any:
    """Convert Python types to BSON-safe types."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    return value


def _deserialize_value(value: Any) -> Any:
    """Convert BSON types back to Python types."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: _deserialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_deserialize_value(v) for v in value]
    return value


def record_to_doc(record: dict[str, Any], *, id_field: str = "id") -> dict[str, Any]:
    """Convert a record to a BSON-ready document.

    The identifier field becomes ``_id`` and is always stored as a string.
    """
    doc = cast("dict[str, Any]", _serialize_value(dict(record)))
    if id_field in doc:
        doc["_id"] = str(doc.pop(id_field))
    return doc


def doc_to_record(doc: dict[str, Any], *, id_field: str = "id") -> dict[str, Any]:
    """Convert a BSON document back to a record, ``_id`` -> *id_field*."""
    record = dict(doc)
    if "_id" in record:
        record[id_field] = record.pop("_id")
    return cast("dict[str, Any]", _deserialize_value(record))


def validate_record(schema: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *schema*, keeping only the fields that were set."""
    try:
        model = schema.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise BadRequest(str(e), data=errors) from e
    return model.model_dump(exclude_unset=True)


def model_from_record(cls: type[TModel], record: dict[str, Any]) -> TModel:
    """Build a model instance from a full record (non-lean reads)."""
    try:
        return cls.model_validate(record)
    except ValidationError as e:
        raise StoreFailure(f"Stored document does not match {cls.__name__}: {e}") from e
