"""
API Endpoint Model - derived CRUD routes for a table
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from apiforge.database import Base
from apiforge.models.connection import new_id

ID_PLACEHOLDER = "{id}"


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ApiEndpoint(Base):
    """One (table, verb) route with its path template."""
    __tablename__ = "api_endpoints"

    id = Column(String(36), primary_key=True, default=new_id)
    table_id = Column(
        String(36),
        ForeignKey("table_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False)
    method = Column(String(10), nullable=False)
    path = Column(String(500), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    table = relationship("TableDefinition", back_populates="endpoints")

    @property
    def addresses_id(self) -> bool:
        return ID_PLACEHOLDER in self.path
