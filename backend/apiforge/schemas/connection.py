"""
Connection Profile Schemas
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, Optional, Type, Union
from datetime import datetime

from apiforge.core import errors
from apiforge.models.connection import Dialect

MASK = "********"


class RelationalCredentials(BaseModel):
    """Credentials for MySQL-like and Postgres-like dialects."""
    model_config = ConfigDict(extra="forbid")

    host: str = Field(..., min_length=1)
    port: int = Field(..., gt=0, lt=65536)
    database: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class DocumentCredentials(BaseModel):
    """Credentials for the document-store dialect."""
    model_config = ConfigDict(extra="forbid")

    uri: str = Field(..., min_length=1)

    @field_validator("uri")
    @classmethod
    def check_scheme(cls, value: str) -> str:
        if not value.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("Invalid MongoDB URI")
        return value


Credentials = Union[RelationalCredentials, DocumentCredentials]


def credentials_model_for(dialect: Dialect) -> Type[BaseModel]:
    return RelationalCredentials if Dialect(dialect).is_relational else DocumentCredentials


def parse_credentials(dialect: Union[Dialect, str], data: Any) -> Credentials:
    """
    Validate plaintext credentials against the shape the dialect requires.

    Raises:
        ConfigurationError: unknown dialect tag
        ValidationError: missing fields, or fields of the other shape
    """
    try:
        dialect = Dialect(dialect)
    except ValueError:
        raise errors.ConfigurationError(f"Unsupported database type: {dialect}")

    if isinstance(data, (RelationalCredentials, DocumentCredentials)):
        data = data.model_dump()

    model = credentials_model_for(dialect)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "credentials" for err in e.errors()
        )
        raise errors.ValidationError(f"Invalid credentials for {dialect.value}: {fields}")


def mask_credentials(credentials: Credentials) -> Dict[str, Any]:
    """Credentials safe to return to a client."""
    if isinstance(credentials, RelationalCredentials):
        masked = credentials.model_dump()
        masked["password"] = MASK
        return masked

    uri = credentials.uri
    scheme, _, rest = uri.partition("://")
    userinfo, at, hostpart = rest.rpartition("@")
    if at and ":" in userinfo:
        user = userinfo.split(":", 1)[0]
        uri = f"{scheme}://{user}:{MASK}@{hostpart}"
    return {"uri": uri}


class ConnectionProfileCreate(BaseModel):
    """Schema for registering a database."""
    name: str = Field(..., min_length=1, max_length=255)
    dialect: Dialect
    credentials: Dict[str, Any]


class ConnectionProfileUpdate(BaseModel):
    """Schema for updating a database. Dialect is fixed once tables exist."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    credentials: Optional[Dict[str, Any]] = None


class ConnectionTestRequest(BaseModel):
    """Plaintext credentials to probe; nothing is persisted."""
    dialect: str
    credentials: Dict[str, Any]


class ConnectionTestResult(BaseModel):
    """Outcome of a connection probe."""
    reachable: bool
    message: str


class ConnectionProfileResponse(BaseModel):
    """Connection profile with credentials masked."""
    id: str
    name: str
    dialect: Dialect
    credentials: Optional[Dict[str, Any]] = None
    table_count: int = 0
    endpoint_count: int = 0
    created_at: Optional[datetime] = None
