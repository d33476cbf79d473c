"""Core module exports."""

from jvmtest.core.errors import (
    ConfigError,
    ErrorCode,
    JvmTestError,
    ProcessSpawnError,
    ServiceError,
    SessionFinalizedError,
    UnknownNodeError,
    WorkspaceNotFoundError,
)
from jvmtest.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from jvmtest.core.progress import spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "JvmTestError",
    "ProcessSpawnError",
    "ServiceError",
    "SessionFinalizedError",
    "UnknownNodeError",
    "WorkspaceNotFoundError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    # Progress
    "spinner",
    "status",
]
