"""
Structured logging setup
"""
from typing import Any
import logging

import structlog

SENSITIVE_KEYS = ("password", "secret", "token", "key", "uri", "credentials")


def configure_logging(debug: bool = False, json_logs: bool = True) -> None:
    """Configure structlog and the stdlib root logger once per process."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            redact_event,
            renderer
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def redact(data: Any) -> Any:
    """Mask sensitive values before they reach a log line."""
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            if any(sensitive in str(key).lower() for sensitive in SENSITIVE_KEYS):
                sanitized[key] = "***REDACTED***"
            else:
                sanitized[key] = redact(value)
        return sanitized
    elif isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


def redact_event(logger, method_name, event_dict):
    """structlog processor applying ``redact`` to every event."""
    return redact(event_dict)
