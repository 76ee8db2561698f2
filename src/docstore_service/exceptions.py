"""Error taxonomy for the document service adapter."""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Root exception for every error raised by the adapter.

    ``code`` mirrors the HTTP status a transport layer should answer with;
    ``name`` is the class name so callers can switch on it without imports.
    """

    code: int = 500

    def __init__(self, message: str = "", data: Any = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        result: dict[str, Any] = {
            "name": self.name,
            "message": self.message,
            "code": self.code,
        }
        if self.data is not None:
            result["data"] = self.data
        return result


class BadRequest(ServiceError):
    """Raised when the requested operation is structurally invalid.

    Usage: replacing records without an identifier, or sending an operator
    the adapter does not recognise.
    """

    code = 400


class NotFound(ServiceError):
    """Raised when no record matches an identifier or a multi-record mutation."""

    code = 404


class MethodNotAllowed(ServiceError):
    """Raised when a multi-record call is made on a service that disallows it."""

    code = 405


class ValidationFailure(ServiceError):
    """Raised when a directive value is malformed.

    Carries structured errors: ``{directive: [messages]}``.
    """

    code = 400

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors), data=self.errors)


class StoreFailure(ServiceError):
    """Base class for failures raised by a document store implementation."""


class DocumentNotFoundError(StoreFailure):
    """Raised by a store when a by-identifier call targets a missing document."""

    code = 404

    def __init__(self, document_id: object) -> None:
        self.document_id = document_id
        super().__init__(f"Document with id={document_id!r} not found")


class QueryCompilationError(StoreFailure):
    """Raised when a native predicate cannot be translated for the store."""

    code = 400
