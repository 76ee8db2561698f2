"""MongoConnectionManager — Motor client lifecycle and collection lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..exceptions import StoreFailure

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient
    from pymongo.read_concern import ReadConcern


class MongoConnectionManager:
    """Own a Motor client and hand out collections to document stores.

    ``database`` is used by every store that does not name its own.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._client_options = {
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "connectTimeoutMS": connect_timeout_ms,
            **kwargs,
        }
        self._client: AsyncIOMotorClient[Any] | None = None

    @property
    def database(self) -> str | None:
        return self._database

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create the Motor client on first use; later calls reuse it."""
        if self._client is None:
            from motor.motor_asyncio import AsyncIOMotorClient

            try:
                self._client = AsyncIOMotorClient(self._url, **self._client_options)
            except Exception as e:
                raise StoreFailure(f"Could not create Mongo client: {e}") from e
        return self._client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        if self._client is None:
            raise StoreFailure("Not connected; call connect() first")
        return self._client

    def collection(
        self,
        name: str,
        *,
        database: str | None = None,
        read_concern: ReadConcern | None = None,
    ) -> Any:
        """Return collection *name* from *database* (or the default database).

        A *read_concern* yields a copy of the collection reading at that
        level; ``None`` keeps the server default.
        """
        database_name = database or self._database
        if not database_name:
            raise StoreFailure("Database name must be set on store or connection")
        coll = self.client.get_database(database_name).get_collection(name)
        if read_concern is not None:
            coll = coll.with_options(read_concern=read_concern)
        return coll

    def close(self) -> None:
        """Drop the client; safe to call when not connected."""
        if self._client is not None:
            self._client.close()
            self._client = None
