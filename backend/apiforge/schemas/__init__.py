"""
Schemas Package
"""
from apiforge.schemas.connection import (
    RelationalCredentials, DocumentCredentials, Credentials,
    parse_credentials, mask_credentials,
    ConnectionProfileCreate, ConnectionProfileUpdate, ConnectionProfileResponse,
    ConnectionTestRequest, ConnectionTestResult
)
from apiforge.schemas.table import (
    ColumnCreate, TableCreate, TableUpdate,
    ColumnResponse, TableResponse, ApiEndpointResponse
)
from apiforge.schemas.api import ApiExecuteRequest, PlanPreview

__all__ = [
    # Connections
    "RelationalCredentials", "DocumentCredentials", "Credentials",
    "parse_credentials", "mask_credentials",
    "ConnectionProfileCreate", "ConnectionProfileUpdate", "ConnectionProfileResponse",
    "ConnectionTestRequest", "ConnectionTestResult",
    # Tables
    "ColumnCreate", "TableCreate", "TableUpdate",
    "ColumnResponse", "TableResponse", "ApiEndpointResponse",
    # API calls
    "ApiExecuteRequest", "PlanPreview",
]
