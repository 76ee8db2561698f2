"""Test configuration for the document service."""

import pytest
from mongomock_motor import AsyncMongoMockClient

from docstore_service import (
    DocumentService,
    MongoConnectionManager,
    MongoDocumentStore,
    ServiceOptions,
)


@pytest.fixture
def mock_client():
    """Create a mock MongoDB client."""
    return AsyncMongoMockClient(default_database_name="test_db")


@pytest.fixture
def mock_connection(mock_client):
    """Create a connection manager backed by mongomock."""
    connection = MongoConnectionManager.__new__(MongoConnectionManager)
    connection._client = mock_client
    connection._database = "test_db"
    connection._url = "mongodb://mock:27017"

    async def _mock_connect():
        return connection._client

    connection.connect = _mock_connect
    return connection


@pytest.fixture
def store(mock_connection):
    """Create a MongoDocumentStore over the ``posts`` collection."""
    return MongoDocumentStore(mock_connection, "posts")


@pytest.fixture
def make_service(mock_connection):
    """Build a DocumentService over a fresh store; kwargs go to ServiceOptions."""

    def _make(collection: str = "posts", **kwargs):
        id_field = kwargs.get("id_field", "id")
        store = MongoDocumentStore(mock_connection, collection, id_field=id_field)
        return DocumentService(store, ServiceOptions(**kwargs))

    return _make


@pytest.fixture
def service(make_service):
    """A service allowing every multi-record method."""
    return make_service(multi=True)
