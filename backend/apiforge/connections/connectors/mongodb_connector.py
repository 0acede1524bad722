"""
MongoDB Connector
Runs structured document commands against a MongoDB database
"""
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError
from bson import ObjectId
from bson.errors import InvalidId
from typing import Any, Optional
import logging
import time
from datetime import datetime

from apiforge.core import errors
from apiforge.query.document_commands import (
    DocumentCommand, ObjectIdRef,
    CreateCollection, Drop, Find, FindOne, InsertOne, UpdateOne, DeleteOne
)
from apiforge.connections.connectors.base_connector import (
    BaseConnector,
    RawResult,
    HealthCheckResult
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "test"


def to_bson(value: Any) -> Any:
    """Replace ObjectId references with real ObjectIds."""
    if isinstance(value, ObjectIdRef):
        try:
            return ObjectId(value.value)
        except (InvalidId, TypeError):
            raise errors.ValidationError(f"Invalid ObjectId: {value.value}")
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_bson(v) for v in value]
    return value


class MongoDBConnector(BaseConnector):
    """MongoDB connector implementation"""

    label = "MongoDB"

    def __init__(self, credentials, timeout: int = 10):
        super().__init__(credentials, timeout)
        self.client: Optional[MongoClient] = None
        self.db = None

    def connect(self):
        """Create the client; the URI's database is used, else ``test``."""
        try:
            self.client = MongoClient(
                self.credentials.uri,
                serverSelectionTimeoutMS=self.timeout * 1000,
                connectTimeoutMS=self.timeout * 1000,
                retryWrites=False,
                retryReads=False
            )
            self.db = self.client.get_default_database(default=DEFAULT_DATABASE)
            self._connection = self.client
        except PyMongoError as e:
            self.disconnect()
            raise errors.ConnectionError(f"Failed to connect to MongoDB: {str(e)}")

    def disconnect(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
        self.client = None
        self.db = None
        self._connection = None

    def test_connection(self) -> HealthCheckResult:
        """Ping the server"""
        start_time = time.time()
        try:
            if not self.client:
                self.connect()

            self.client.admin.command('ping')

            response_time_ms = int((time.time() - start_time) * 1000)
            return HealthCheckResult(
                is_healthy=True,
                response_time_ms=response_time_ms,
                timestamp=datetime.utcnow()
            )
        except (errors.ConnectionError, PyMongoError) as e:
            response_time_ms = int((time.time() - start_time) * 1000)
            message = e.message if isinstance(e, errors.ForgeError) else str(e)
            return HealthCheckResult(
                is_healthy=False,
                response_time_ms=response_time_ms,
                error_message=message,
                timestamp=datetime.utcnow()
            )

    def execute_raw(self, command: DocumentCommand) -> RawResult:
        if not self.client:
            self.connect()

        try:
            return self._dispatch(command)
        except ConnectionFailure as e:
            raise errors.ConnectionError(f"Failed to connect to MongoDB: {str(e)}")
        except PyMongoError as e:
            logger.warning(f"MongoDB rejected {command.operation}: {str(e)}")
            raise errors.RemoteExecutionError(f"Query execution failed: {str(e)}", original_message=str(e))

    def _dispatch(self, command: DocumentCommand) -> RawResult:
        if isinstance(command, CreateCollection):
            self.db.create_collection(command.collection)
            return RawResult()

        collection = self.db[command.collection]

        if isinstance(command, Drop):
            collection.drop()
            return RawResult()

        if isinstance(command, Find):
            rows = list(collection.find(to_bson(command.filter)))
            return RawResult(rows=rows, returns_rows=True, rowcount=len(rows))

        if isinstance(command, FindOne):
            document = collection.find_one(to_bson(command.filter))
            rows = [document] if document is not None else []
            return RawResult(rows=rows, returns_rows=True, rowcount=len(rows))

        if isinstance(command, InsertOne):
            document = to_bson(dict(command.document))
            result = collection.insert_one(document)
            return RawResult(
                rows=[dict(command.document)],
                inserted_id=result.inserted_id,
                acknowledged=result.acknowledged,
                rowcount=1
            )

        if isinstance(command, UpdateOne):
            result = collection.update_one(to_bson(command.filter), to_bson(command.update))
            return RawResult(
                matched_count=result.matched_count,
                modified_count=result.modified_count,
                rowcount=result.modified_count,
                acknowledged=result.acknowledged
            )

        if isinstance(command, DeleteOne):
            result = collection.delete_one(to_bson(command.filter))
            return RawResult(rowcount=result.deleted_count, acknowledged=result.acknowledged)

        raise errors.QuerySyntaxError(f"Unsupported document operation: {command.operation}")
