"""
SQLAlchemy-backed connector shared by the relational stores
"""
import logging
import time
from datetime import datetime
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.pool import NullPool
from sqlalchemy.exc import SQLAlchemyError

from apiforge.core import errors
from apiforge.query.plan import SqlStatement
from apiforge.connections.connectors.base_connector import (
    BaseConnector,
    RawResult,
    HealthCheckResult
)

logger = logging.getLogger(__name__)


def _driver_message(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


def _clause(statement: SqlStatement):
    # Statements without parameters may carry literals containing ':'
    if statement.params:
        return text(statement.text)
    return text(statement.text.replace(":", "\\:"))


class SQLAlchemyConnector(BaseConnector):
    """One unpooled connection per connector; every statement is committed."""

    drivername = ""

    def __init__(self, credentials, timeout: int = 10):
        super().__init__(credentials, timeout)
        self._engine = None

    def build_url(self) -> URL:
        c = self.credentials
        return URL.create(
            self.drivername,
            username=c.user,
            password=c.password,
            host=c.host,
            port=c.port,
            database=c.database
        )

    def connect(self) -> None:
        """Open a single connection; no pool, no retry."""
        try:
            self._engine = create_engine(
                self.build_url(),
                poolclass=NullPool,
                connect_args={'connect_timeout': self.timeout}
            )
            self._connection = self._engine.connect()
        except SQLAlchemyError as e:
            self.disconnect()
            raise errors.ConnectionError(f"Failed to connect to {self.label}: {_driver_message(e)}")

    def disconnect(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def test_connection(self) -> HealthCheckResult:
        start_time = time.time()
        try:
            if not self._connection:
                self.connect()

            result = self._connection.execute(text("SELECT 1"))
            result.close()

            response_time_ms = int((time.time() - start_time) * 1000)
            return HealthCheckResult(
                is_healthy=True,
                response_time_ms=response_time_ms,
                timestamp=datetime.utcnow()
            )
        except (errors.ConnectionError, SQLAlchemyError) as e:
            response_time_ms = int((time.time() - start_time) * 1000)
            message = e.message if isinstance(e, errors.ForgeError) else _driver_message(e)
            return HealthCheckResult(
                is_healthy=False,
                response_time_ms=response_time_ms,
                error_message=message,
                timestamp=datetime.utcnow()
            )

    def execute_raw(self, statement: SqlStatement) -> RawResult:
        if not self._connection:
            self.connect()

        try:
            result = self._connection.execute(_clause(statement), statement.params)
            rows = [dict(row._mapping) for row in result] if result.returns_rows else []
            raw = RawResult(rows=rows, returns_rows=result.returns_rows, rowcount=result.rowcount)
            self._connection.commit()
            return raw
        except SQLAlchemyError as e:
            try:
                self._connection.rollback()
            except SQLAlchemyError as rollback_error:
                logger.warning(f"{self.label} rollback failed: {_driver_message(rollback_error)}")
            message = _driver_message(e)
            logger.warning(f"{self.label} rejected statement: {message}")
            raise errors.RemoteExecutionError(f"Query execution failed: {message}", original_message=message)
