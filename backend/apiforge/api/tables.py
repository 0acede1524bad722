"""
Table API Routes - tables and collections of a registered database
"""
from fastapi import APIRouter, Body, Depends, status
from typing import List

from apiforge.api.deps import get_table_service
from apiforge.core.auth import get_current_owner
from apiforge.schemas.table import TableCreate, TableResponse, TableUpdate
from apiforge.services import TableService

router = APIRouter()


@router.post("/{connection_id}/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(
    connection_id: str,
    data: TableCreate = Body(...),
    owner_id: str = Depends(get_current_owner),
    service: TableService = Depends(get_table_service)
):
    """Create the table on the live database, then record it with its endpoints."""
    table = service.create(owner_id, connection_id, data)
    return service.to_response(table)


@router.get("/{connection_id}/tables", response_model=List[TableResponse])
async def list_tables(
    connection_id: str,
    owner_id: str = Depends(get_current_owner),
    service: TableService = Depends(get_table_service)
):
    return [service.to_response(table) for table in service.list(owner_id, connection_id)]


@router.get("/{connection_id}/tables/{table_id}", response_model=TableResponse)
async def get_table(
    connection_id: str,
    table_id: str,
    owner_id: str = Depends(get_current_owner),
    service: TableService = Depends(get_table_service)
):
    return service.to_response(service.get(owner_id, connection_id, table_id))


@router.put("/{connection_id}/tables/{table_id}", response_model=TableResponse)
def update_table(
    connection_id: str,
    table_id: str,
    data: TableUpdate = Body(...),
    owner_id: str = Depends(get_current_owner),
    service: TableService = Depends(get_table_service)
):
    table = service.update(owner_id, connection_id, table_id, data)
    return service.to_response(table)


@router.delete("/{connection_id}/tables/{table_id}")
def delete_table(
    connection_id: str,
    table_id: str,
    owner_id: str = Depends(get_current_owner),
    service: TableService = Depends(get_table_service)
):
    service.delete(owner_id, connection_id, table_id)
    return {"message": "Table deleted successfully"}
