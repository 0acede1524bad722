"""
API Service - derived CRUD endpoints and proxied calls
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
import structlog

from apiforge.core.errors import ConfigurationError, NotFoundError, ValidationError
from apiforge.models import ApiEndpoint, ConnectionProfile, HttpMethod, TableDefinition, ID_PLACEHOLDER
from apiforge.query.plan import Operation, QueryPlan
from apiforge.services.query_executor import QueryExecutor
from apiforge.services.query_synthesizer import synthesize

logger = structlog.get_logger()

# (display name, method, addresses id)
ENDPOINT_TEMPLATES = [
    ("Create {name}", HttpMethod.POST, False),
    ("Get All {name}", HttpMethod.GET, False),
    ("Get {name} by ID", HttpMethod.GET, True),
    ("Update {name}", HttpMethod.PUT, True),
    ("Delete {name}", HttpMethod.DELETE, True),
]


def endpoint_path(table_name: str, addresses_id: bool) -> str:
    path = f"/{table_name.lower()}"
    return f"{path}/{ID_PLACEHOLDER}" if addresses_id else path


def derive_endpoints(table_name: str) -> List[ApiEndpoint]:
    """The fixed five endpoints of a table, unsaved."""
    return [
        ApiEndpoint(
            name=name.format(name=table_name),
            method=method.value,
            path=endpoint_path(table_name, addresses_id)
        )
        for name, method, addresses_id in ENDPOINT_TEMPLATES
    ]


def handler_name(method: str, path: str) -> str:
    """Controller handler name for a (verb, path) pair."""
    method = method.upper()
    if method == HttpMethod.POST.value:
        return "create"
    if ID_PLACEHOLDER not in path:
        return "findAll"
    if method == HttpMethod.GET.value:
        return "findByID"
    if method == HttpMethod.PUT.value:
        return "updateByID"
    if method == HttpMethod.DELETE.value:
        return "deleteByID"
    raise ConfigurationError(f"Unsupported method: {method}")


def operation_for(method: str, path: str) -> Operation:
    """CRUD operation an endpoint performs."""
    return {
        "findAll": Operation.LIST,
        "findByID": Operation.GET,
        "create": Operation.CREATE,
        "updateByID": Operation.UPDATE,
        "deleteByID": Operation.DELETE,
    }[handler_name(method, path)]


class ApiService:
    """Looks up an owner's endpoints and proxies calls through them."""

    def __init__(self, db: Session, executor: QueryExecutor):
        self.db = db
        self.executor = executor

    def _owned(self, owner_id: str):
        return self.db.query(ApiEndpoint).join(
            TableDefinition, ApiEndpoint.table_id == TableDefinition.id
        ).join(
            ConnectionProfile, TableDefinition.connection_id == ConnectionProfile.id
        ).filter(ConnectionProfile.owner_id == owner_id)

    def list_endpoints(self, owner_id: str, table_id: Optional[str] = None) -> List[ApiEndpoint]:
        query = self._owned(owner_id)
        if table_id:
            query = query.filter(ApiEndpoint.table_id == table_id)
        return query.order_by(TableDefinition.name, ApiEndpoint.created_at).all()

    def get_endpoint(self, owner_id: str, api_id: str) -> ApiEndpoint:
        endpoint = self._owned(owner_id).filter(ApiEndpoint.id == api_id).first()
        if not endpoint:
            raise NotFoundError("API not found")
        return endpoint

    def plan_for(self, endpoint: ApiEndpoint, record_id: Any = None,
                 body: Optional[Dict[str, Any]] = None) -> QueryPlan:
        table = endpoint.table
        operation = operation_for(endpoint.method, endpoint.path)

        if endpoint.addresses_id and (record_id is None or record_id == ""):
            raise ValidationError("Missing id")

        return synthesize(
            table.connection.dialect,
            table.name,
            table.columns,
            table.id_type,
            operation,
            record_id=record_id,
            payload=body
        )

    def preview(self, owner_id: str, api_id: str, record_id: Any = None,
                body: Optional[Dict[str, Any]] = None) -> QueryPlan:
        return self.plan_for(self.get_endpoint(owner_id, api_id), record_id, body)

    def execute(self, owner_id: str, api_id: str, record_id: Any = None,
                body: Optional[Dict[str, Any]] = None) -> Any:
        endpoint = self.get_endpoint(owner_id, api_id)
        plan = self.plan_for(endpoint, record_id, body)

        logger.info("api_request", api_id=endpoint.id, method=endpoint.method, path=endpoint.path)
        return self.executor.execute(endpoint.table.connection, plan)
