"""
Proxied API call schemas
"""
from pydantic import BaseModel
from typing import Any, Dict, Optional, Union


class ApiExecuteRequest(BaseModel):
    """Path id (for id-addressed routes) and JSON body (for POST/PUT)."""
    id: Optional[Union[str, int]] = None
    body: Optional[Dict[str, Any]] = None


class PlanPreview(BaseModel):
    """Human-readable rendering of a synthesized plan."""
    primary: str
    follow_up: Optional[str] = None
