"""
Dialects - per-store type mapping, identifier literals and DDL fragments.

One instance per supported store; ``get_dialect`` resolves a tag.
"""
from typing import Any, Dict, List, Optional, Union
import enum
import uuid

from apiforge.core.errors import ConfigurationError, ValidationError
from apiforge.models.connection import Dialect
from apiforge.models.table import IdType, LogicalType
from apiforge.query.document_commands import ObjectIdRef

_TRUE_WORDS = {"true", "1", "yes"}
_FALSE_WORDS = {"false", "0", "no"}


def _type_value(data_type: Any) -> str:
    return data_type.value if isinstance(data_type, enum.Enum) else str(data_type)


def _parse_id_type(id_type: Union[IdType, str]) -> IdType:
    try:
        return IdType(id_type)
    except ValueError:
        raise ConfigurationError(f"Unsupported id type: {id_type}")


def _sequence_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid id: {raw}")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {raw}")


def format_default(data_type: str, raw: Optional[str]) -> Optional[str]:
    """
    DDL literal for a column default.

    Numbers and booleans are validated and embedded bare; everything else
    is single-quoted with quotes doubled.
    """
    if raw is None or str(raw).strip() == "":
        return None
    raw = str(raw).strip()

    if data_type == LogicalType.NUMBER.value:
        try:
            float(raw)
        except ValueError:
            raise ValidationError(f"Invalid numeric default: {raw}")
        return raw

    if data_type == LogicalType.BOOLEAN.value:
        lowered = raw.lower()
        if lowered in _TRUE_WORDS:
            return "TRUE"
        if lowered in _FALSE_WORDS:
            return "FALSE"
        raise ValidationError(f"Invalid boolean default: {raw}")

    return "'" + raw.replace("'", "''") + "'"


class SqlDialect:
    """Shared behaviour of the relational stores."""
    tag: Dialect
    supports_returning: bool = False
    type_map: Dict[str, str] = {}

    is_relational = True

    @property
    def name(self) -> str:
        return self.tag.value

    def map_logical_type(self, data_type: str) -> str:
        """Native column type; unknown types fall back to the string type."""
        return self.type_map.get(_type_value(data_type), self.type_map[LogicalType.STRING.value])

    def check_id_type(self, id_type: Union[IdType, str]) -> IdType:
        id_type = _parse_id_type(id_type)
        if id_type is IdType.MONGODB_ID:
            raise ConfigurationError(f"Unsupported id type for {self.name}: {id_type.value}")
        return id_type

    def build_id_literal(self, id_type: Union[IdType, str], raw: Any) -> Any:
        """Bound value for the identifier column: int for sequences, text otherwise."""
        id_type = self.check_id_type(id_type)
        if id_type is IdType.AUTO_INCREMENT:
            return _sequence_id(raw)
        if raw is None or str(raw) == "":
            raise ValidationError("Missing id")
        return str(raw)

    def column_definition(self, column) -> str:
        parts = [column.name, self.map_logical_type(column.data_type)]
        if not column.is_nullable:
            parts.append("NOT NULL")
        default = format_default(_type_value(column.data_type), column.default_value)
        if default is not None:
            parts.append(f"DEFAULT {default}")
        return " ".join(parts)

    def modify_column(self, table: str, before, after) -> List[str]:
        raise NotImplementedError


class MySQLDialect(SqlDialect):
    tag = Dialect.MYSQL
    supports_returning = False
    type_map = {
        LogicalType.STRING.value: "VARCHAR(255)",
        LogicalType.NUMBER.value: "INT",
        LogicalType.BOOLEAN.value: "BOOLEAN",
        LogicalType.DATE.value: "DATETIME",
    }

    def modify_column(self, table: str, before, after) -> List[str]:
        return [f"ALTER TABLE {table} MODIFY COLUMN {self.column_definition(after)}"]


class PostgresDialect(SqlDialect):
    tag = Dialect.POSTGRESQL
    supports_returning = True
    type_map = {
        LogicalType.STRING.value: "TEXT",
        LogicalType.NUMBER.value: "INTEGER",
        LogicalType.BOOLEAN.value: "BOOLEAN",
        LogicalType.DATE.value: "TIMESTAMP",
    }

    def build_id_literal(self, id_type: Union[IdType, str], raw: Any) -> Any:
        """UUID columns are typed; malformed ids are rejected before reaching the server."""
        value = super().build_id_literal(id_type, raw)
        if self.check_id_type(id_type) is IdType.UUID:
            try:
                uuid.UUID(value)
            except ValueError:
                raise ValidationError(f"Invalid id: {value}")
        return value

    def modify_column(self, table: str, before, after) -> List[str]:
        prefix = f"ALTER TABLE {table} ALTER COLUMN {after.name}"
        statements = []

        if self.map_logical_type(before.data_type) != self.map_logical_type(after.data_type):
            statements.append(f"{prefix} TYPE {self.map_logical_type(after.data_type)}")

        if bool(before.is_nullable) != bool(after.is_nullable):
            statements.append(f"{prefix} DROP NOT NULL" if after.is_nullable else f"{prefix} SET NOT NULL")

        old_default = format_default(_type_value(before.data_type), before.default_value)
        new_default = format_default(_type_value(after.data_type), after.default_value)
        if old_default != new_default:
            if new_default is None:
                statements.append(f"{prefix} DROP DEFAULT")
            else:
                statements.append(f"{prefix} SET DEFAULT {new_default}")

        return statements


class MongoDialect:
    """Document store. Only descriptive types; no DDL beyond collections."""
    tag = Dialect.MONGODB
    supports_returning = True
    is_relational = False
    type_map = {
        LogicalType.STRING.value: "String",
        LogicalType.NUMBER.value: "Number",
        LogicalType.BOOLEAN.value: "Boolean",
        LogicalType.DATE.value: "Date",
    }

    @property
    def name(self) -> str:
        return self.tag.value

    def map_logical_type(self, data_type: str) -> str:
        return self.type_map.get(_type_value(data_type), self.type_map[LogicalType.STRING.value])

    def check_id_type(self, id_type: Union[IdType, str]) -> IdType:
        return _parse_id_type(id_type)

    def build_id_literal(self, id_type: Union[IdType, str], raw: Any) -> Any:
        """Sequence ids compare as bare values; all others as ObjectId references."""
        id_type = self.check_id_type(id_type)
        if id_type is IdType.AUTO_INCREMENT:
            return _sequence_id(raw)
        if raw is None or str(raw) == "":
            raise ValidationError("Missing id")
        return ObjectIdRef(str(raw))


_DIALECTS = {
    Dialect.MYSQL: MySQLDialect(),
    Dialect.POSTGRESQL: PostgresDialect(),
    Dialect.MONGODB: MongoDialect(),
}


def get_dialect(dialect: Union[Dialect, str, SqlDialect, MongoDialect]):
    """
    Resolve a dialect tag.

    Raises:
        ConfigurationError: If the tag is not a supported store
    """
    if isinstance(dialect, (SqlDialect, MongoDialect)):
        return dialect
    try:
        return _DIALECTS[Dialect(dialect)]
    except ValueError:
        raise ConfigurationError(f"Unsupported database type: {dialect}")
