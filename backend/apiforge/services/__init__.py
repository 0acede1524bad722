"""
Services Package
"""
from apiforge.services.query_executor import QueryExecutor
from apiforge.services.database_service import DatabaseService
from apiforge.services.api_service import ApiService
from apiforge.services.table_service import TableService

__all__ = [
    "QueryExecutor",
    "DatabaseService",
    "ApiService",
    "TableService",
]
