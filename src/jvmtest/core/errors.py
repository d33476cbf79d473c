"""jvmtest error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 7xxx: Test execution
- 8xxx: Code-intelligence service
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Test execution (7xxx)
    WORKSPACE_NOT_FOUND = 7001
    PROCESS_SPAWN_FAILED = 7002
    SESSION_FINALIZED = 7003
    UNKNOWN_TEST_NODE = 7004

    # Service (8xxx)
    SERVICE_UNAVAILABLE = 8001
    SERVICE_PROTOCOL_ERROR = 8002
    SERVICE_REQUEST_FAILED = 8003


@dataclass(frozen=True, slots=True)
class JvmTestError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(JvmTestError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class WorkspaceNotFoundError(JvmTestError):
    """Workspace missing or not a known project. Raised before any node runs."""

    @classmethod
    def missing(cls, workspace_uri: str) -> "WorkspaceNotFoundError":
        return cls(
            code=ErrorCode.WORKSPACE_NOT_FOUND,
            message=f"Workspace not found: {workspace_uri or '<empty>'}",
            details={"workspace_uri": workspace_uri},
        )


class ProcessSpawnError(JvmTestError):
    """The build-tool process could not be started."""

    @classmethod
    def from_os_error(cls, executable: str, error: OSError) -> "ProcessSpawnError":
        return cls(
            code=ErrorCode.PROCESS_SPAWN_FAILED,
            message=f"Could not start {executable}: {error}",
            details={"executable": executable, "errno": error.errno},
        )

    @classmethod
    def not_found(cls, executable: str) -> "ProcessSpawnError":
        return cls(
            code=ErrorCode.PROCESS_SPAWN_FAILED,
            message=f"Executable not found: {executable}",
            details={"executable": executable},
        )

    @classmethod
    def without_pipes(cls, executable: str) -> "ProcessSpawnError":
        return cls(
            code=ErrorCode.PROCESS_SPAWN_FAILED,
            message=f"Started {executable} without output pipes",
            details={"executable": executable},
        )


class SessionFinalizedError(JvmTestError):
    """A finalized run session was mutated."""

    @classmethod
    def for_session(cls, run_id: str, operation: str) -> "SessionFinalizedError":
        return cls(
            code=ErrorCode.SESSION_FINALIZED,
            message=f"Run session {run_id} is finalized; cannot {operation}",
            details={"run_id": run_id, "operation": operation},
        )


class UnknownNodeError(JvmTestError):
    """A state transition referenced a node id the session does not know."""

    @classmethod
    def for_id(cls, node_id: str) -> "UnknownNodeError":
        return cls(
            code=ErrorCode.UNKNOWN_TEST_NODE,
            message=f"Unknown test node: {node_id}",
            details={"node_id": node_id},
        )


class ServiceError(JvmTestError):
    """Code-intelligence service failures."""

    @classmethod
    def unavailable(cls, url: str, reason: str) -> "ServiceError":
        return cls(
            code=ErrorCode.SERVICE_UNAVAILABLE,
            message=f"Service at {url} unavailable: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )

    @classmethod
    def protocol_error(cls, method: str, reason: str) -> "ServiceError":
        return cls(
            code=ErrorCode.SERVICE_PROTOCOL_ERROR,
            message=f"Invalid response to {method}: {reason}",
            details={"method": method, "reason": reason},
        )

    @classmethod
    def request_failed(cls, method: str, code: int, reason: str) -> "ServiceError":
        return cls(
            code=ErrorCode.SERVICE_REQUEST_FAILED,
            message=f"{method} failed ({code}): {reason}",
            details={"method": method, "rpc_code": code, "reason": reason},
        )
