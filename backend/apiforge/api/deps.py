"""
Request-scoped dependencies

Long-lived collaborators (vault, connection manager, metadata store) live
on ``app.state`` and are wired into per-request services here.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from apiforge.connections.connection_manager import ConnectionManager
from apiforge.core.crypto import CredentialVault
from apiforge.database import get_app_db
from apiforge.services import ApiService, DatabaseService, QueryExecutor, TableService


def get_vault(request: Request) -> CredentialVault:
    return request.app.state.vault


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connection_manager


def get_executor(
    vault: CredentialVault = Depends(get_vault),
    manager: ConnectionManager = Depends(get_connection_manager)
) -> QueryExecutor:
    return QueryExecutor(vault, manager)


def get_database_service(
    db: Session = Depends(get_app_db),
    vault: CredentialVault = Depends(get_vault),
    executor: QueryExecutor = Depends(get_executor)
) -> DatabaseService:
    return DatabaseService(db, vault, executor)


def get_table_service(
    db: Session = Depends(get_app_db),
    databases: DatabaseService = Depends(get_database_service),
    executor: QueryExecutor = Depends(get_executor)
) -> TableService:
    return TableService(db, databases, executor)


def get_api_service(
    db: Session = Depends(get_app_db),
    executor: QueryExecutor = Depends(get_executor)
) -> ApiService:
    return ApiService(db, executor)
