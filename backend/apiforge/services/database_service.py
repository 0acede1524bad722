"""
Database Service - registered connection profiles for an owner
"""
from typing import List
from sqlalchemy.orm import Session
import structlog

from apiforge.core.crypto import CredentialVault
from apiforge.core.errors import CredentialsError, ForgeError, NotFoundError, ValidationError
from apiforge.models import ConnectionProfile, Dialect
from apiforge.schemas.connection import (
    ConnectionProfileCreate,
    ConnectionProfileUpdate,
    ConnectionProfileResponse,
    parse_credentials,
    mask_credentials
)
from apiforge.services import query_synthesizer
from apiforge.services.query_executor import QueryExecutor

logger = structlog.get_logger()


class DatabaseService:
    """CRUD over connection profiles; credentials are stored encrypted only."""

    def __init__(self, db: Session, vault: CredentialVault, executor: QueryExecutor):
        self.db = db
        self.vault = vault
        self.executor = executor

    def create(self, owner_id: str, data: ConnectionProfileCreate) -> ConnectionProfile:
        credentials = parse_credentials(data.dialect, data.credentials)

        profile = ConnectionProfile(
            name=data.name,
            dialect=data.dialect.value,
            owner_id=owner_id,
            encrypted_credentials=self.vault.encrypt_to_text(credentials.model_dump())
        )
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)

        logger.info("database_registered", connection_id=profile.id, dialect=profile.dialect)
        return profile

    def list(self, owner_id: str) -> List[ConnectionProfile]:
        return self.db.query(ConnectionProfile).filter(
            ConnectionProfile.owner_id == owner_id
        ).order_by(ConnectionProfile.created_at).all()

    def get(self, owner_id: str, connection_id: str) -> ConnectionProfile:
        profile = self.db.query(ConnectionProfile).filter(
            ConnectionProfile.id == connection_id,
            ConnectionProfile.owner_id == owner_id
        ).first()
        if not profile:
            raise NotFoundError("Database not found")
        return profile

    def update(self, owner_id: str, connection_id: str, data: ConnectionProfileUpdate) -> ConnectionProfile:
        profile = self.get(owner_id, connection_id)

        if data.name is not None:
            profile.name = data.name

        if data.credentials is not None:
            credentials = parse_credentials(profile.dialect, data.credentials)
            profile.encrypted_credentials = self.vault.encrypt_to_text(credentials.model_dump())

        self.db.commit()
        self.db.refresh(profile)

        logger.info("database_updated", connection_id=profile.id,
                    credentials_changed=data.credentials is not None)
        return profile

    def delete(self, owner_id: str, connection_id: str) -> List[str]:
        """
        Remove a profile with its tables, columns and endpoints.

        Each live table is dropped first on a best-effort basis; failures
        are collected and returned rather than blocking the delete.
        """
        profile = self.get(owner_id, connection_id)

        warnings = []
        for table in list(profile.tables):
            try:
                statement = query_synthesizer.drop_table(profile.dialect, table.name)
                self.executor.apply_schema(profile, [statement])
            except ForgeError as e:
                warnings.append(f"{table.name}: {e.message}")
                logger.warning("remote_drop_failed", connection_id=profile.id, table=table.name, error=e.message)

        self.db.delete(profile)
        self.db.commit()

        logger.info("database_deleted", connection_id=connection_id, failed_drops=len(warnings))
        return warnings

    def credentials_for(self, profile: ConnectionProfile):
        """Plaintext credentials, held only by the caller."""
        return self.executor.credentials_for(profile)

    def to_response(self, profile: ConnectionProfile) -> ConnectionProfileResponse:
        """Response with masked credentials, or none when they cannot be read."""
        try:
            plaintext = self.vault.decrypt(profile.encrypted_credentials)
            masked = mask_credentials(parse_credentials(profile.dialect, plaintext))
        except (CredentialsError, ValidationError):
            masked = None

        return ConnectionProfileResponse(
            id=profile.id,
            name=profile.name,
            dialect=Dialect(profile.dialect),
            credentials=masked,
            table_count=len(profile.tables),
            endpoint_count=sum(len(table.endpoints) for table in profile.tables),
            created_at=profile.created_at
        )
