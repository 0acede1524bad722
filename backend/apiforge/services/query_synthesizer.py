"""
Query Synthesizer

Pure translation of (dialect, table, operation, input) into a QueryPlan.
Identifiers are validated against a conservative pattern and emitted
unquoted; every caller-supplied value travels as a bound parameter.
"""
from typing import Any, Dict, Iterable, List, Optional, Union
import re

from apiforge.core.errors import ValidationError
from apiforge.models.connection import Dialect
from apiforge.models.table import IdType, IDENTIFIER_COLUMN
from apiforge.query.dialects import get_dialect
from apiforge.query.document_commands import (
    CreateCollection, Drop, Find, FindOne, InsertOne, UpdateOne, DeleteOne
)
from apiforge.query.plan import Operation, SqlStatement, QueryPlan, Statement
from apiforge.services import identifier_strategy

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")
DOCUMENT_ID_FIELD = "_id"

_SCALARS = (str, int, float, bool, type(None))


def check_identifier(name: str, kind: str = "table") -> str:
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise ValidationError(f"Invalid {kind} name: {name!r}")
    return name


def _is_identifier(column) -> bool:
    return bool(getattr(column, "is_identifier", False)) or column.name.lower() == IDENTIFIER_COLUMN


def writable_columns(columns: Iterable) -> List:
    """Columns a payload may set; the identifier column is never writable."""
    return [col for col in columns if not _is_identifier(col)]


def _pick_values(columns: Iterable, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Payload values for known, writable columns that are present in the payload."""
    payload = payload or {}
    values = {}
    for column in writable_columns(columns):
        if column.name not in payload:
            continue
        value = payload[column.name]
        if not isinstance(value, _SCALARS):
            raise ValidationError(f"Unsupported value for column {column.name}")
        values[check_identifier(column.name, "column")] = value
    return values


def synthesize(
    dialect: Union[Dialect, str],
    table_name: str,
    columns: Iterable,
    id_type: Union[IdType, str],
    operation: Union[Operation, str],
    record_id: Any = None,
    payload: Optional[Dict[str, Any]] = None
) -> QueryPlan:
    """
    Build the plan for one CRUD operation.

    Raises:
        ConfigurationError: unsupported dialect or id type
        ValidationError: empty create/update payload, bad id or name
    """
    strategy = get_dialect(dialect)
    id_type = strategy.check_id_type(id_type)
    operation = Operation(operation)
    table_name = check_identifier(table_name)
    columns = list(columns)

    if strategy.is_relational:
        return _synthesize_sql(strategy, table_name, columns, id_type, operation, record_id, payload)
    return _synthesize_document(strategy, table_name, columns, id_type, operation, record_id, payload)


def _synthesize_sql(strategy, table, columns, id_type, operation, record_id, payload) -> QueryPlan:
    if operation is Operation.LIST:
        return QueryPlan(operation, SqlStatement(f"SELECT * FROM {table}"))

    if operation is Operation.CREATE:
        return _sql_create(strategy, table, columns, id_type, payload)

    id_value = strategy.build_id_literal(id_type, record_id)
    where = f"WHERE {IDENTIFIER_COLUMN} = :{IDENTIFIER_COLUMN}"

    if operation is Operation.GET:
        statement = SqlStatement(f"SELECT * FROM {table} {where}", {IDENTIFIER_COLUMN: id_value})
        return QueryPlan(operation, statement)

    if operation is Operation.UPDATE:
        values = _pick_values(columns, payload)
        if not values:
            raise ValidationError("No valid columns to update")
        assignments = ", ".join(f"{name} = :{name}" for name in values)
        params = dict(values)
        params[IDENTIFIER_COLUMN] = id_value
        return QueryPlan(operation, SqlStatement(f"UPDATE {table} SET {assignments} {where}", params))

    return QueryPlan(operation, SqlStatement(f"DELETE FROM {table} {where}", {IDENTIFIER_COLUMN: id_value}))


def _sql_create(strategy, table, columns, id_type, payload) -> QueryPlan:
    values = _pick_values(columns, payload)
    if not values:
        raise ValidationError("No valid columns to insert")

    generated = identifier_strategy.generate_id(id_type)
    params = {}
    if generated is not None:
        params[IDENTIFIER_COLUMN] = generated
    params.update(values)

    names = ", ".join(params)
    placeholders = ", ".join(f":{name}" for name in params)
    insert = f"INSERT INTO {table} ({names}) VALUES ({placeholders})"

    if not identifier_strategy.requires_follow_up(strategy, id_type):
        return QueryPlan(Operation.CREATE, SqlStatement(f"{insert} RETURNING *", params))

    if generated is None:
        follow_up = SqlStatement(f"SELECT * FROM {table} WHERE {IDENTIFIER_COLUMN} = LAST_INSERT_ID()")
    else:
        follow_up = SqlStatement(
            f"SELECT * FROM {table} WHERE {IDENTIFIER_COLUMN} = :{IDENTIFIER_COLUMN}",
            {IDENTIFIER_COLUMN: generated}
        )
    return QueryPlan(Operation.CREATE, SqlStatement(insert, params), follow_up)


def _synthesize_document(strategy, collection, columns, id_type, operation, record_id, payload) -> QueryPlan:
    if operation is Operation.LIST:
        return QueryPlan(operation, Find(collection, {}))

    if operation is Operation.CREATE:
        values = _pick_values(columns, payload)
        if not values:
            raise ValidationError("No valid columns to insert")
        return QueryPlan(operation, InsertOne(collection, values))

    id_filter = {DOCUMENT_ID_FIELD: strategy.build_id_literal(id_type, record_id)}

    if operation is Operation.GET:
        return QueryPlan(operation, FindOne(collection, id_filter))

    if operation is Operation.UPDATE:
        values = _pick_values(columns, payload)
        if not values:
            raise ValidationError("No valid columns to update")
        return QueryPlan(operation, UpdateOne(collection, id_filter, {"$set": values}))

    return QueryPlan(operation, DeleteOne(collection, id_filter))


# Schema statements

def create_table(
    dialect: Union[Dialect, str],
    table_name: str,
    columns: Iterable,
    id_type: Union[IdType, str]
) -> Statement:
    """CREATE TABLE with the identifier column first, or createCollection."""
    strategy = get_dialect(dialect)
    table_name = check_identifier(table_name)

    if not strategy.is_relational:
        strategy.check_id_type(id_type)
        return CreateCollection(table_name)

    definitions = [identifier_strategy.column_definition_for(strategy, id_type)]
    for column in writable_columns(columns):
        check_identifier(column.name, "column")
        definitions.append(strategy.column_definition(column))

    return SqlStatement(f"CREATE TABLE {table_name} ({', '.join(definitions)})")


def drop_table(dialect: Union[Dialect, str], table_name: str) -> Statement:
    strategy = get_dialect(dialect)
    table_name = check_identifier(table_name)
    if not strategy.is_relational:
        return Drop(table_name)
    return SqlStatement(f"DROP TABLE {table_name}")


def alter_table(
    dialect: Union[Dialect, str],
    current_name: str,
    current_columns: Iterable,
    new_name: str,
    new_columns: Iterable
) -> List[Statement]:
    """
    Statements that move a live table from its current shape to a new one:
    rename, then add, drop and modify columns. Document collections carry
    no schema, so nothing is emitted for them.
    """
    strategy = get_dialect(dialect)
    current_name = check_identifier(current_name)
    new_name = check_identifier(new_name)
    if not strategy.is_relational:
        return []

    statements = []
    if new_name != current_name:
        statements.append(f"ALTER TABLE {current_name} RENAME TO {new_name}")

    existing = {col.name.lower(): col for col in writable_columns(current_columns)}
    wanted = {col.name.lower(): col for col in writable_columns(new_columns)}

    for key, column in wanted.items():
        if key not in existing:
            check_identifier(column.name, "column")
            statements.append(f"ALTER TABLE {new_name} ADD COLUMN {strategy.column_definition(column)}")

    for key, column in existing.items():
        if key not in wanted:
            statements.append(f"ALTER TABLE {new_name} DROP COLUMN {column.name}")

    for key, column in wanted.items():
        before = existing.get(key)
        if before is not None and _column_changed(before, column):
            statements.extend(strategy.modify_column(new_name, before, column))

    return [SqlStatement(text) for text in statements]


def _column_changed(before, after) -> bool:
    def value(data_type):
        return getattr(data_type, "value", data_type)

    return (
        value(before.data_type) != value(after.data_type)
        or bool(before.is_nullable) != bool(after.is_nullable)
        or (before.default_value or None) != (after.default_value or None)
    )
