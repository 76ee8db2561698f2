"""Generic CRUD and query protocol translated to a document store.

``DocumentService`` normalises generic queries (``$select``, ``$sort``,
``$limit``, ``$skip``, comparison operators) into the store's native
vocabulary and dispatches get / find / create / update / patch / remove.
"""

from __future__ import annotations

from .exceptions import (
    BadRequest,
    DocumentNotFoundError,
    MethodNotAllowed,
    NotFound,
    QueryCompilationError,
    ServiceError,
    StoreFailure,
    ValidationFailure,
)
from .filters import Directives, NormalizedQuery, Paginate, filter_query
from .mapper import map_operators
from .operators import DEFAULT_OPERATORS, Directive, QueryOperator
from .options import (
    CallOptions,
    SearchConsistency,
    StoreOptions,
    assemble_options,
)
from .predicate import parse_predicate
from .projection import select_fields
from .reconcile import reconcile_identifier
from .service import DocumentService, Page, ServiceOptions
from .store import IDocumentStore, MongoConnectionManager, MongoDocumentStore

__all__ = [
    # Service
    "DocumentService",
    "ServiceOptions",
    "Page",
    # Store
    "IDocumentStore",
    "MongoConnectionManager",
    "MongoDocumentStore",
    # Translation
    "CallOptions",
    "Directive",
    "Directives",
    "NormalizedQuery",
    "Paginate",
    "QueryOperator",
    "SearchConsistency",
    "StoreOptions",
    "DEFAULT_OPERATORS",
    "assemble_options",
    "filter_query",
    "map_operators",
    "parse_predicate",
    "reconcile_identifier",
    "select_fields",
    # Exceptions
    "ServiceError",
    "BadRequest",
    "NotFound",
    "MethodNotAllowed",
    "ValidationFailure",
    "StoreFailure",
    "DocumentNotFoundError",
    "QueryCompilationError",
]
