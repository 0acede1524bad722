"""
Table and Column Definition Models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from apiforge.database import Base
from apiforge.models.connection import new_id


class IdType(str, enum.Enum):
    """Identifier generation strategies."""
    AUTO_INCREMENT = "auto_increment"  # sequence, server assigned
    UUID = "uuid"
    CUID = "cuid"
    MONGODB_ID = "mongodb_id"  # native document-store ObjectId


class LogicalType(str, enum.Enum):
    """Database-agnostic column types."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


IDENTIFIER_COLUMN = "id"


class TableDefinition(Base):
    """Logical table or collection owned by a connection profile."""
    __tablename__ = "table_definitions"
    __table_args__ = (
        UniqueConstraint("connection_id", "name", name="uq_table_definitions_connection_name"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    connection_id = Column(
        String(36),
        ForeignKey("connection_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False)
    id_type = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    connection = relationship("ConnectionProfile", back_populates="tables")
    columns = relationship(
        "ColumnDefinition",
        back_populates="table",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ColumnDefinition.position"
    )
    endpoints = relationship(
        "ApiEndpoint",
        back_populates="table",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    @property
    def identifier_column(self):
        return next((col for col in self.columns if col.is_identifier), None)

    @property
    def data_columns(self):
        """Columns a caller may write to."""
        return [col for col in self.columns if not col.is_identifier]


class ColumnDefinition(Base):
    """Column of a table definition."""
    __tablename__ = "column_definitions"

    id = Column(String(36), primary_key=True, default=new_id)
    table_id = Column(
        String(36),
        ForeignKey("table_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(255), nullable=False)
    data_type = Column(String(20), nullable=False, default=LogicalType.STRING.value)
    is_nullable = Column(Boolean, nullable=False, default=True)
    default_value = Column(String(500), nullable=True)
    is_identifier = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    table = relationship("TableDefinition", back_populates="columns")
