"""
Connection Probe - validates reachability of plaintext credentials
"""
from dataclasses import dataclass
from typing import Any, Dict, Union

import structlog

from apiforge.models.connection import Dialect
from apiforge.connections.connection_manager import ConnectionManager
from apiforge.schemas.connection import parse_credentials

logger = structlog.get_logger()


@dataclass
class ProbeResult:
    reachable: bool
    message: str


def test_connection(
    dialect: Union[Dialect, str],
    credentials: Union[Dict[str, Any], Any],
    manager: ConnectionManager
) -> ProbeResult:
    """
    Open one connection, check it, close it. Nothing is persisted.

    Unreachable hosts and rejected logins come back as
    ``reachable=False``; an unsupported dialect raises ConfigurationError
    and a credential shape mismatch raises ValidationError.
    """
    parsed = parse_credentials(dialect, credentials)
    tag = Dialect(dialect).value
    connector = manager.create_connector(dialect, parsed)

    try:
        health = connector.test_connection()
    finally:
        connector.disconnect()

    if health.is_healthy:
        logger.info("connection_probe_succeeded", dialect=tag, response_time_ms=health.response_time_ms)
        return ProbeResult(reachable=True, message="Connection successful")

    logger.info("connection_probe_failed", dialect=tag, response_time_ms=health.response_time_ms)
    return ProbeResult(reachable=False, message=health.error_message or "Connection failed")

