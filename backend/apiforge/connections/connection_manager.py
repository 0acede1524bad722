"""
Connection Manager - builds connectors per dialect and scopes their lifetime
"""
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Type, Union
import logging

from apiforge.core.errors import ConfigurationError
from apiforge.models.connection import Dialect
from apiforge.connections.connectors.base_connector import BaseConnector
from apiforge.connections.connectors.mysql_connector import MySQLConnector
from apiforge.connections.connectors.postgres_connector import PostgreSQLConnector
from apiforge.connections.connectors.mongodb_connector import MongoDBConnector

logger = logging.getLogger(__name__)

DEFAULT_CONNECTORS: Dict[Dialect, Type[BaseConnector]] = {
    Dialect.MYSQL: MySQLConnector,
    Dialect.POSTGRESQL: PostgreSQLConnector,
    Dialect.MONGODB: MongoDBConnector,
}


class ConnectionManager:
    """
    Creates connectors for remote databases.

    Nothing is cached between calls: every ``open`` yields a fresh
    connector and closes it when the block exits. Tests pass their own
    ``connectors`` map to substitute fakes.
    """

    def __init__(self, timeout: int = 10, connectors: Optional[Dict[Dialect, Type[BaseConnector]]] = None):
        self.timeout = timeout
        self._connectors = dict(connectors or DEFAULT_CONNECTORS)

    def get_connector_class(self, dialect: Union[Dialect, str]) -> Type[BaseConnector]:
        """Get connector class for database type."""
        try:
            dialect = Dialect(dialect)
        except ValueError:
            raise ConfigurationError(f"Unsupported database type: {dialect}")

        connector_class = self._connectors.get(dialect)
        if not connector_class:
            raise ConfigurationError(f"Unsupported database type: {dialect.value}")

        return connector_class

    def create_connector(self, dialect: Union[Dialect, str], credentials) -> BaseConnector:
        """Build an unconnected connector."""
        connector_class = self.get_connector_class(dialect)
        return connector_class(credentials, timeout=self.timeout)

    @contextmanager
    def open(self, dialect: Union[Dialect, str], credentials) -> Iterator[BaseConnector]:
        """Connected connector, released on every exit path."""
        connector = self.create_connector(dialect, credentials)
        try:
            connector.connect()
            yield connector
        finally:
            connector.disconnect()
            logger.debug(f"Released {connector.label} connection")
