"""
Database API Routes - connection profiles, probing and project export
"""
from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import StreamingResponse
from typing import List
import io

from apiforge.api.deps import get_connection_manager, get_database_service, get_table_service
from apiforge.connections.connection_manager import ConnectionManager
from apiforge.connections import probe
from apiforge.core.auth import get_current_owner
from apiforge.generator import build_archive, content_disposition, generate_project, ZIP_MEDIA_TYPE
from apiforge.schemas.connection import (
    ConnectionProfileCreate,
    ConnectionProfileUpdate,
    ConnectionProfileResponse,
    ConnectionTestRequest,
    ConnectionTestResult
)
from apiforge.services import DatabaseService, TableService

router = APIRouter()


@router.post("/", response_model=ConnectionProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_database(
    data: ConnectionProfileCreate = Body(...),
    owner_id: str = Depends(get_current_owner),
    service: DatabaseService = Depends(get_database_service)
):
    """Register a database; credentials are encrypted before storage."""
    profile = service.create(owner_id, data)
    return service.to_response(profile)


@router.post("/test", response_model=ConnectionTestResult)
def test_database_connection(
    data: ConnectionTestRequest = Body(...),
    owner_id: str = Depends(get_current_owner),
    manager: ConnectionManager = Depends(get_connection_manager)
):
    """Probe plaintext credentials without saving them."""
    result = probe.test_connection(data.dialect, data.credentials, manager)
    return ConnectionTestResult(reachable=result.reachable, message=result.message)


@router.get("/", response_model=List[ConnectionProfileResponse])
async def list_databases(
    owner_id: str = Depends(get_current_owner),
    service: DatabaseService = Depends(get_database_service)
):
    return [service.to_response(profile) for profile in service.list(owner_id)]


@router.get("/{connection_id}", response_model=ConnectionProfileResponse)
async def get_database(
    connection_id: str,
    owner_id: str = Depends(get_current_owner),
    service: DatabaseService = Depends(get_database_service)
):
    return service.to_response(service.get(owner_id, connection_id))


@router.put("/{connection_id}", response_model=ConnectionProfileResponse)
async def update_database(
    connection_id: str,
    data: ConnectionProfileUpdate = Body(...),
    owner_id: str = Depends(get_current_owner),
    service: DatabaseService = Depends(get_database_service)
):
    profile = service.update(owner_id, connection_id, data)
    return service.to_response(profile)


@router.delete("/{connection_id}")
def delete_database(
    connection_id: str,
    owner_id: str = Depends(get_current_owner),
    service: DatabaseService = Depends(get_database_service)
):
    """Delete a database and its tables, dropping live tables where possible."""
    warnings = service.delete(owner_id, connection_id)
    return {"message": "Database deleted successfully", "warnings": warnings}


@router.get("/{connection_id}/export")
async def export_project(
    connection_id: str,
    format: str = Query("javascript", pattern="^(javascript|typescript)$"),
    owner_id: str = Depends(get_current_owner),
    databases: DatabaseService = Depends(get_database_service),
    tables: TableService = Depends(get_table_service)
):
    """Download the generated Express + Prisma backend as a zip."""
    profile = databases.get(owner_id, connection_id)
    credentials = databases.credentials_for(profile)

    files = generate_project(
        profile.name,
        profile.dialect,
        tables.list(owner_id, connection_id),
        language=format,
        credentials=credentials
    )
    output = io.BytesIO(build_archive(files))

    return StreamingResponse(
        output,
        media_type=ZIP_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(profile.name)}
    )
