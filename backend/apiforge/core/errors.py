"""
Error taxonomy

Every failure raised by the core derives from ForgeError. The HTTP layer
turns each one into a uniform ``{"error": message}`` body using the
status code carried by the class.
"""
from typing import Optional


class ForgeError(Exception):
    """Base class for all handled application errors."""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ForgeError):
    """Unsupported dialect or id type, bad vault key. Never retried."""
    status_code = 500


class ValidationError(ForgeError):
    """Empty insert/update payload, malformed input."""
    status_code = 400


class CredentialsError(ForgeError):
    """Stored credentials could not be decrypted."""
    status_code = 500

    def __init__(self, message: str = "Failed to decrypt database credentials"):
        super().__init__(message)


class ConnectionError(ForgeError):
    """The remote store could not be reached."""
    status_code = 502


class QuerySyntaxError(ForgeError):
    """A document-store command does not match any known operation shape."""
    status_code = 400


class RemoteExecutionError(ForgeError):
    """The remote store accepted the connection but rejected the operation."""
    status_code = 502

    def __init__(self, message: str, original_message: Optional[str] = None):
        super().__init__(message)
        self.original_message = original_message or message


class NotFoundError(ForgeError):
    """Requested metadata record does not exist for this owner."""
    status_code = 404


class UnauthorizedError(ForgeError):
    """No authenticated owner."""
    status_code = 401
