"""IDocumentStore — the document store surface the service dispatches to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..options import CallOptions

Record = dict[str, Any]


class FindResult(NamedTuple):
    rows: list[Any]


class ManyResult(NamedTuple):
    """Outcome of a predicate-based mutation.

    ``success`` is the number of affected documents; ``data`` holds the
    mutated documents when the store returns them.
    """

    success: int
    data: tuple[Any, ...] = ()


@runtime_checkable
class IDocumentStore(Protocol):
    """
    Store collaborator operating on a single logical collection.

    Predicates are native query documents as produced by the operator
    mapper. By-identifier methods raise
    :class:`~docstore_service.exceptions.DocumentNotFoundError` when the
    document does not exist; any other failure propagates as raised.
    """

    async def find(self, predicate: Record, options: CallOptions) -> FindResult: ...

    async def count(self, predicate: Record, options: CallOptions) -> int: ...

    async def find_by_id(self, entity_id: str, options: CallOptions) -> Any: ...

    async def create(self, data: Record) -> Any: ...

    async def replace_by_id(self, entity_id: str, data: Record) -> Any: ...

    async def update_by_id(self, entity_id: str, data: Record) -> Any: ...

    async def update_many(
        self,
        predicate: Record,
        data: Record,
        options: CallOptions,
        *,
        replace: bool = False,
    ) -> ManyResult: ...

    async def remove_by_id(self, entity_id: str) -> None: ...

    async def remove_many(
        self, predicate: Record, options: CallOptions
    ) -> ManyResult: ...
