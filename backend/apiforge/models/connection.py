"""
Connection Profile Model - Stores encrypted references to external databases
"""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid

from apiforge.database import Base


class Dialect(str, enum.Enum):
    """Supported backing-store kinds."""
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    MONGODB = "mongodb"

    @property
    def is_relational(self) -> bool:
        return self is not Dialect.MONGODB


def new_id() -> str:
    return str(uuid.uuid4())


class ConnectionProfile(Base):
    """External database registered by an owner."""
    __tablename__ = "connection_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    dialect = Column(String(50), nullable=False)
    owner_id = Column(String(255), nullable=False, index=True)

    # JSON text of the vault envelope {iv, encryptedData}; never plaintext
    encrypted_credentials = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tables = relationship(
        "TableDefinition",
        back_populates="connection",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<ConnectionProfile {self.name} ({self.dialect})>"
