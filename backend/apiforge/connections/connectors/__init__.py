"""
Connectors Package - Database connector implementations
"""
from apiforge.connections.connectors.base_connector import (
    BaseConnector,
    RawResult,
    HealthCheckResult
)
from apiforge.connections.connectors.mysql_connector import MySQLConnector
from apiforge.connections.connectors.postgres_connector import PostgreSQLConnector
from apiforge.connections.connectors.mongodb_connector import MongoDBConnector

__all__ = [
    "BaseConnector",
    "RawResult",
    "HealthCheckResult",
    "MySQLConnector",
    "PostgreSQLConnector",
    "MongoDBConnector",
]
