"""
Endpoint API Routes - derived CRUD endpoints and proxied calls
"""
from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import List, Optional

from apiforge.api.deps import get_api_service
from apiforge.core.auth import get_current_owner
from apiforge.schemas.api import ApiExecuteRequest, PlanPreview
from apiforge.schemas.table import ApiEndpointResponse
from apiforge.services import ApiService
from apiforge.services.api_service import handler_name

router = APIRouter()


def _endpoint_response(endpoint) -> ApiEndpointResponse:
    response = ApiEndpointResponse.model_validate(endpoint)
    response.handler_name = handler_name(endpoint.method, endpoint.path)
    return response


@router.get("/", response_model=List[ApiEndpointResponse])
async def list_endpoints(
    table_id: Optional[str] = None,
    owner_id: str = Depends(get_current_owner),
    service: ApiService = Depends(get_api_service)
):
    return [_endpoint_response(endpoint) for endpoint in service.list_endpoints(owner_id, table_id)]


@router.post("/{api_id}/preview", response_model=PlanPreview)
async def preview_endpoint(
    api_id: str,
    request: Optional[ApiExecuteRequest] = Body(None),
    owner_id: str = Depends(get_current_owner),
    service: ApiService = Depends(get_api_service)
):
    """Show the query an endpoint would run, with bound values inlined."""
    request = request or ApiExecuteRequest()
    plan = service.preview(owner_id, api_id, request.id, request.body)
    primary, follow_up = plan.render()
    return PlanPreview(primary=primary, follow_up=follow_up)


@router.post("/{api_id}/execute")
def execute_endpoint(
    api_id: str,
    request: Optional[ApiExecuteRequest] = Body(None),
    owner_id: str = Depends(get_current_owner),
    service: ApiService = Depends(get_api_service)
):
    """Run an endpoint against its live database."""
    request = request or ApiExecuteRequest()
    result = service.execute(owner_id, api_id, request.id, request.body)
    return JSONResponse(content=jsonable_encoder(result))
