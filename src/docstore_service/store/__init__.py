"""Document store contract and the MongoDB implementation."""

from __future__ import annotations

from .connection import MongoConnectionManager
from .mongo import MongoDocumentStore, read_concern_for
from .ports import FindResult, IDocumentStore, ManyResult, Record
from .query_compiler import compile_predicate

__all__ = [
    # Contract
    "IDocumentStore",
    "FindResult",
    "ManyResult",
    "Record",
    # MongoDB
    "MongoConnectionManager",
    "MongoDocumentStore",
    "compile_predicate",
    "read_concern_for",
]
