"""
Query package - plans, document commands and dialects
"""
from apiforge.query.document_commands import (
    ObjectIdRef, DocumentCommand,
    CreateCollection, Drop, Find, FindOne, InsertOne, UpdateOne, DeleteOne,
    parse_command
)
from apiforge.query.plan import Operation, SqlStatement, QueryPlan, sql_literal
from apiforge.query.dialects import (
    SqlDialect, MySQLDialect, PostgresDialect, MongoDialect,
    get_dialect, format_default
)

__all__ = [
    "ObjectIdRef", "DocumentCommand",
    "CreateCollection", "Drop", "Find", "FindOne", "InsertOne", "UpdateOne", "DeleteOne",
    "parse_command",
    "Operation", "SqlStatement", "QueryPlan", "sql_literal",
    "SqlDialect", "MySQLDialect", "PostgresDialect", "MongoDialect",
    "get_dialect", "format_default",
]
