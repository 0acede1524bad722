"""
Connector interface shared by the MySQL, PostgreSQL and MongoDB drivers
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from apiforge.query.plan import Statement


@dataclass
class RawResult:
    """Driver result before normalization."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    returns_rows: bool = False
    rowcount: int = -1
    inserted_id: Any = None
    matched_count: Optional[int] = None
    modified_count: Optional[int] = None
    acknowledged: bool = True


@dataclass
class HealthCheckResult:
    """Outcome of a single reachability check."""
    is_healthy: bool
    response_time_ms: int
    error_message: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.utcnow()


class BaseConnector(ABC):
    """
    One remote database, reached with plaintext credentials held in memory.

    A connector owns at most one live connection: ``connect`` opens it and
    ``disconnect`` releases it. Entering the connector as a context manager
    ties the release to the end of the block.
    """

    label = "database"

    def __init__(self, credentials, timeout: int = 10):
        """
        Args:
            credentials: Validated credentials for this dialect
            timeout: Seconds allowed for the single connection attempt
        """
        self.credentials = credentials
        self.timeout = timeout
        self._connection = None

    @abstractmethod
    def connect(self) -> None:
        """
        Open the connection. No pooling and no retry.

        Raises:
            apiforge.core.errors.ConnectionError: store unreachable or login rejected
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection; safe to call more than once."""

    @abstractmethod
    def test_connection(self) -> HealthCheckResult:
        """Connect if needed and run a trivial round trip; never raises for an unreachable store."""

    @abstractmethod
    def execute_raw(self, statement: Statement) -> RawResult:
        """
        Run one SQL statement or document command.

        Raises:
            apiforge.core.errors.RemoteExecutionError: store rejected the operation
        """

    def is_connected(self) -> bool:
        return self._connection is not None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
