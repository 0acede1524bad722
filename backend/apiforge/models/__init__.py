"""
Models Package - Export all SQLAlchemy models
"""
from apiforge.models.connection import ConnectionProfile, Dialect
from apiforge.models.table import (
    TableDefinition,
    ColumnDefinition,
    IdType,
    LogicalType,
    IDENTIFIER_COLUMN
)
from apiforge.models.api_endpoint import ApiEndpoint, HttpMethod, ID_PLACEHOLDER

__all__ = [
    # Connections
    "ConnectionProfile",
    "Dialect",

    # Tables
    "TableDefinition",
    "ColumnDefinition",
    "IdType",
    "LogicalType",
    "IDENTIFIER_COLUMN",

    # Endpoints
    "ApiEndpoint",
    "HttpMethod",
    "ID_PLACEHOLDER",
]
