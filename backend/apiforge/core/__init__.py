"""
Core Package - errors, credential vault and identity
"""
from apiforge.core.errors import (
    ForgeError, ConfigurationError, ValidationError, CredentialsError,
    ConnectionError, QuerySyntaxError, RemoteExecutionError,
    NotFoundError, UnauthorizedError
)

__all__ = [
    "ForgeError", "ConfigurationError", "ValidationError", "CredentialsError",
    "ConnectionError", "QuerySyntaxError", "RemoteExecutionError",
    "NotFoundError", "UnauthorizedError",
]
