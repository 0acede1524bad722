"""
Query Executor - runs a QueryPlan against a connection profile's database
and normalizes the driver result.
"""
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime
import time

from bson import ObjectId
import structlog

from apiforge.core.crypto import CredentialVault
from apiforge.core.errors import CredentialsError
from apiforge.connections.connection_manager import ConnectionManager
from apiforge.connections.connectors.base_connector import RawResult
from apiforge.models.connection import ConnectionProfile
from apiforge.query.document_commands import ObjectIdRef
from apiforge.query.plan import Operation, QueryPlan, Statement
from apiforge.schemas.connection import Credentials, parse_credentials

logger = structlog.get_logger()

DOCUMENT_ID_FIELD = "_id"


def serialize_value(value: Any) -> Any:
    """Convert MongoDB values to JSON-serializable form."""
    if isinstance(value, ObjectId):
        return str(value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(item) for item in value]
    return value


def normalize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Expose ``_id`` as a string ``id``; ``_id`` itself is dropped."""
    normalized = {}
    if DOCUMENT_ID_FIELD in document:
        normalized["id"] = str(document[DOCUMENT_ID_FIELD])
    for key, value in document.items():
        if key != DOCUMENT_ID_FIELD:
            normalized[key] = serialize_value(value)
    return normalized


def _target_id(plan: QueryPlan) -> Optional[str]:
    target = getattr(plan.primary, "filter", {}).get(DOCUMENT_ID_FIELD)
    if isinstance(target, ObjectIdRef):
        return target.value
    return None if target is None else str(target)


def normalize_result(plan: QueryPlan, raw: RawResult) -> Any:
    """
    Uniform result shape for a plan:

    - list: array of rows / documents
    - get and create: one row / document, or None
    - update and delete: ``{"affectedRows": n}`` for relational stores,
      the driver acknowledgment plus the targeted ``id`` for documents
    """
    operation = plan.operation

    if plan.is_document:
        if operation is Operation.LIST:
            return [normalize_document(doc) for doc in raw.rows]
        if operation is Operation.GET:
            return normalize_document(raw.rows[0]) if raw.rows else None
        if operation is Operation.CREATE:
            document = normalize_document(raw.rows[0] if raw.rows else {})
            document["id"] = str(raw.inserted_id)
            return document
        if operation is Operation.UPDATE:
            return {
                "acknowledged": raw.acknowledged,
                "matchedCount": raw.matched_count or 0,
                "modifiedCount": raw.modified_count or 0,
                "id": _target_id(plan),
            }
        return {
            "acknowledged": raw.acknowledged,
            "deletedCount": max(raw.rowcount, 0),
            "id": _target_id(plan),
        }

    if operation is Operation.LIST:
        return raw.rows
    if raw.returns_rows:
        return raw.rows[0] if raw.rows else None
    return {"affectedRows": max(raw.rowcount, 0)}


class QueryExecutor:
    """
    Dispatches plans through scoped connectors.

    Credentials are decrypted per call and dropped when the call returns.
    """

    def __init__(self, vault: CredentialVault, manager: ConnectionManager):
        self.vault = vault
        self.manager = manager

    def credentials_for(self, profile: ConnectionProfile) -> Credentials:
        """
        Decrypt and validate a profile's credentials.

        Raises:
            CredentialsError: envelope unreadable with the current key
        """
        try:
            plaintext = self.vault.decrypt(profile.encrypted_credentials)
        except CredentialsError:
            logger.error("credentials_decrypt_failed", connection_id=profile.id)
            raise
        return parse_credentials(profile.dialect, plaintext)

    def execute(self, profile: ConnectionProfile, plan: QueryPlan) -> Any:
        """Run the primary statement and, when present, the follow-up read."""
        credentials = self.credentials_for(profile)
        start_time = time.time()

        with self.manager.open(profile.dialect, credentials) as connector:
            raw = connector.execute_raw(plan.primary)
            if plan.follow_up is not None:
                raw = connector.execute_raw(plan.follow_up)

        logger.info(
            "query_executed",
            connection_id=profile.id,
            dialect=profile.dialect,
            operation=plan.operation.value,
            follow_up=plan.follow_up is not None,
            execution_time_ms=int((time.time() - start_time) * 1000)
        )
        return normalize_result(plan, raw)

    def apply_schema(self, profile: ConnectionProfile, statements: Iterable[Statement]) -> int:
        """Run schema statements in order on one connection; returns how many ran."""
        statements: List[Statement] = list(statements)
        if not statements:
            return 0

        credentials = self.credentials_for(profile)
        with self.manager.open(profile.dialect, credentials) as connector:
            for statement in statements:
                connector.execute_raw(statement)

        logger.info("schema_applied", connection_id=profile.id, dialect=profile.dialect,
                    statements=len(statements))
        return len(statements)
