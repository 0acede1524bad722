"""
Table, Column and Endpoint Schemas
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from apiforge.models.table import IdType, LogicalType, IDENTIFIER_COLUMN

NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]{0,62}$"


class ColumnCreate(BaseModel):
    """A user-editable column. The identifier column is implicit."""
    name: str = Field(..., pattern=NAME_PATTERN)
    data_type: LogicalType
    is_nullable: bool = True
    default_value: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_identifier(cls, value: str) -> str:
        if value.lower() == IDENTIFIER_COLUMN:
            raise ValueError(f"'{IDENTIFIER_COLUMN}' is reserved for the identifier column")
        return value

    @field_validator("default_value")
    @classmethod
    def blank_default_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.strip() == "":
            return None
        return value


def _check_unique_columns(columns: List[ColumnCreate]) -> None:
    seen = set()
    for column in columns:
        key = column.name.lower()
        if key in seen:
            raise ValueError(f"Duplicate column name: {column.name}")
        seen.add(key)


class TableCreate(BaseModel):
    """Schema for creating a table or collection."""
    name: str = Field(..., pattern=NAME_PATTERN)
    id_type: Optional[IdType] = None
    columns: List[ColumnCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def unique_columns(self):
        _check_unique_columns(self.columns)
        return self


class TableUpdate(BaseModel):
    """Schema for renaming a table and replacing its column set."""
    name: str = Field(..., pattern=NAME_PATTERN)
    columns: List[ColumnCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def unique_columns(self):
        _check_unique_columns(self.columns)
        return self


class ColumnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    data_type: str
    is_nullable: bool
    default_value: Optional[str] = None
    is_identifier: bool = False
    native_type: Optional[str] = None


class ApiEndpointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    table_id: str
    name: str
    method: str
    path: str
    handler_name: Optional[str] = None


class TableResponse(BaseModel):
    id: str
    connection_id: str
    name: str
    id_type: str
    columns: List[ColumnResponse] = []
    endpoints: List[ApiEndpointResponse] = []
    created_at: Optional[datetime] = None
