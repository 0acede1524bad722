"""
Table Service - live schema changes plus table/column/endpoint metadata
"""
from typing import List
from sqlalchemy.orm import Session
import structlog

from apiforge.core.errors import NotFoundError, ValidationError
from apiforge.models import (
    ColumnDefinition, ConnectionProfile, Dialect, IdType, LogicalType, TableDefinition, IDENTIFIER_COLUMN
)
from apiforge.query.dialects import get_dialect
from apiforge.schemas.table import (
    ApiEndpointResponse, ColumnCreate, ColumnResponse, TableCreate, TableResponse, TableUpdate
)
from apiforge.services import identifier_strategy, query_synthesizer
from apiforge.services.api_service import derive_endpoints, endpoint_path, handler_name, ENDPOINT_TEMPLATES
from apiforge.services.database_service import DatabaseService
from apiforge.services.query_executor import QueryExecutor

logger = structlog.get_logger()


def _identifier_column(id_type: IdType) -> ColumnDefinition:
    data_type = LogicalType.NUMBER if id_type is IdType.AUTO_INCREMENT else LogicalType.STRING
    return ColumnDefinition(
        name=IDENTIFIER_COLUMN,
        data_type=data_type.value,
        is_nullable=False,
        is_identifier=True,
        position=0
    )


def _data_column(column: ColumnCreate, position: int) -> ColumnDefinition:
    return ColumnDefinition(
        name=column.name,
        data_type=column.data_type.value,
        is_nullable=column.is_nullable,
        default_value=column.default_value,
        is_identifier=False,
        position=position
    )


class TableService:
    """Tables are changed on the remote database first, then in metadata."""

    def __init__(self, db: Session, databases: DatabaseService, executor: QueryExecutor):
        self.db = db
        self.databases = databases
        self.executor = executor

    def _resolve_id_type(self, profile: ConnectionProfile, requested) -> IdType:
        if not Dialect(profile.dialect).is_relational:
            return IdType.MONGODB_ID
        if requested is None:
            return identifier_strategy.default_id_type(profile.dialect)
        if requested is IdType.MONGODB_ID:
            raise ValidationError(f"Id type {requested.value} is not available for {profile.dialect}")
        return requested

    def _check_name_free(self, profile: ConnectionProfile, name: str, exclude_id: str = None) -> None:
        for table in profile.tables:
            if table.id != exclude_id and table.name.lower() == name.lower():
                raise ValidationError(f"Table {name} already exists")

    def create(self, owner_id: str, connection_id: str, data: TableCreate) -> TableDefinition:
        profile = self.databases.get(owner_id, connection_id)
        id_type = self._resolve_id_type(profile, data.id_type)
        self._check_name_free(profile, data.name)

        statement = query_synthesizer.create_table(profile.dialect, data.name, data.columns, id_type)
        self.executor.apply_schema(profile, [statement])

        table = TableDefinition(connection_id=profile.id, name=data.name, id_type=id_type.value)
        table.columns = [_identifier_column(id_type)] + [
            _data_column(column, position) for position, column in enumerate(data.columns, start=1)
        ]
        table.endpoints = derive_endpoints(data.name)

        self.db.add(table)
        self.db.commit()
        self.db.refresh(table)

        logger.info("table_created", connection_id=profile.id, table=table.name, id_type=table.id_type)
        return table

    def list(self, owner_id: str, connection_id: str) -> List[TableDefinition]:
        profile = self.databases.get(owner_id, connection_id)
        return sorted(profile.tables, key=lambda table: table.name.lower())

    def get(self, owner_id: str, connection_id: str, table_id: str) -> TableDefinition:
        profile = self.databases.get(owner_id, connection_id)
        table = next((t for t in profile.tables if t.id == table_id), None)
        if not table:
            raise NotFoundError("Table not found")
        return table

    def update(self, owner_id: str, connection_id: str, table_id: str, data: TableUpdate) -> TableDefinition:
        """Rename and reshape a table. Document collections only change in metadata."""
        table = self.get(owner_id, connection_id, table_id)
        profile = table.connection
        self._check_name_free(profile, data.name, exclude_id=table.id)

        statements = query_synthesizer.alter_table(
            profile.dialect, table.name, table.data_columns, data.name, data.columns
        )
        self.executor.apply_schema(profile, statements)

        renamed = data.name != table.name
        identifier = table.identifier_column
        table.name = data.name
        table.columns = ([identifier] if identifier is not None else []) + [
            _data_column(column, position) for position, column in enumerate(data.columns, start=1)
        ]

        if renamed:
            templates = {(method.value, addresses_id): name for name, method, addresses_id in ENDPOINT_TEMPLATES}
            for endpoint in table.endpoints:
                endpoint.path = endpoint_path(data.name, endpoint.addresses_id)
                endpoint.name = templates[(endpoint.method, endpoint.addresses_id)].format(name=data.name)

        self.db.commit()
        self.db.refresh(table)

        logger.info("table_updated", table_id=table.id, statements=len(statements), renamed=renamed)
        return table

    def delete(self, owner_id: str, connection_id: str, table_id: str) -> None:
        table = self.get(owner_id, connection_id, table_id)
        profile = table.connection

        statement = query_synthesizer.drop_table(profile.dialect, table.name)
        self.executor.apply_schema(profile, [statement])

        self.db.delete(table)
        self.db.commit()

        logger.info("table_deleted", connection_id=profile.id, table=table.name)

    def to_response(self, table: TableDefinition) -> TableResponse:
        dialect = get_dialect(table.connection.dialect)
        columns = []
        for column in table.columns:
            response = ColumnResponse.model_validate(column)
            if not column.is_identifier:
                response.native_type = dialect.map_logical_type(column.data_type)
            columns.append(response)

        endpoints = []
        for endpoint in table.endpoints:
            response = ApiEndpointResponse.model_validate(endpoint)
            response.handler_name = handler_name(endpoint.method, endpoint.path)
            endpoints.append(response)

        return TableResponse(
            id=table.id,
            connection_id=table.connection_id,
            name=table.name,
            id_type=table.id_type,
            columns=columns,
            endpoints=endpoints,
            created_at=table.created_at
        )
