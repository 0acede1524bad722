"""
Tests for the MongoDB connector's command dispatch
"""
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure

from apiforge.connections.connectors.mongodb_connector import MongoDBConnector, to_bson
from apiforge.core.errors import RemoteExecutionError, ValidationError
from apiforge.query.document_commands import DeleteOne, Find, FindOne, InsertOne, ObjectIdRef, UpdateOne
from apiforge.schemas.connection import DocumentCredentials

OID = "65a1b2c3d4e5f6a7b8c9d0e1"


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def connector(collection):
    """Connector with a mocked client and database."""
    connector = MongoDBConnector(DocumentCredentials(uri="mongodb://localhost:27017/shop"))
    connector.client = MagicMock()
    connector.db = MagicMock()
    connector.db.__getitem__.return_value = collection
    return connector


class TestToBson:
    """ObjectId references become driver ObjectIds"""

    def test_nested_reference(self):
        assert to_bson({"_id": ObjectIdRef(OID), "tags": [ObjectIdRef(OID)]}) == {
            "_id": ObjectId(OID), "tags": [ObjectId(OID)]
        }

    def test_invalid_reference(self):
        with pytest.raises(ValidationError):
            to_bson({"_id": ObjectIdRef("abc-123")})


class TestDispatch:
    """Each command maps onto one collection method"""

    def test_find(self, connector, collection):
        collection.find.return_value = iter([{"_id": ObjectId(OID), "title": "a"}])

        raw = connector.execute_raw(Find("todo", {}))

        collection.find.assert_called_once_with({})
        assert raw.rows == [{"_id": ObjectId(OID), "title": "a"}]
        assert raw.returns_rows

    def test_find_one_missing(self, connector, collection):
        collection.find_one.return_value = None

        raw = connector.execute_raw(FindOne("todo", {"_id": ObjectIdRef(OID)}))

        collection.find_one.assert_called_once_with({"_id": ObjectId(OID)})
        assert raw.rows == []

    def test_insert(self, connector, collection):
        collection.insert_one.return_value = MagicMock(inserted_id=ObjectId(OID), acknowledged=True)

        raw = connector.execute_raw(InsertOne("todo", {"title": "buy milk"}))

        assert raw.inserted_id == ObjectId(OID)
        assert raw.rows == [{"title": "buy milk"}]

    def test_update(self, connector, collection):
        collection.update_one.return_value = MagicMock(matched_count=1, modified_count=0, acknowledged=True)

        raw = connector.execute_raw(UpdateOne("todo", {"_id": 3}, {"$set": {"title": "x"}}))

        collection.update_one.assert_called_once_with({"_id": 3}, {"$set": {"title": "x"}})
        assert (raw.matched_count, raw.modified_count) == (1, 0)

    def test_delete(self, connector, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=1, acknowledged=True)

        raw = connector.execute_raw(DeleteOne("todo", {"_id": ObjectIdRef(OID)}))

        assert raw.rowcount == 1

    def test_driver_error_keeps_original_message(self, connector, collection):
        collection.find.side_effect = OperationFailure("ns does not exist")

        with pytest.raises(RemoteExecutionError) as exc_info:
            connector.execute_raw(Find("missing", {}))

        assert "ns does not exist" in exc_info.value.original_message

    def test_disconnect_closes_client(self, connector):
        client = connector.client
        connector.disconnect()

        client.close.assert_called_once()
        assert not connector.is_connected()
