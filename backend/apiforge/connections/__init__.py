"""
Connections Package - connectors, connection scoping and probing
"""
from apiforge.connections.connection_manager import ConnectionManager, DEFAULT_CONNECTORS
from apiforge.connections.probe import ProbeResult, test_connection

__all__ = [
    "ConnectionManager",
    "DEFAULT_CONNECTORS",
    "ProbeResult",
    "test_connection",
]
