"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (JVMTEST__SECTION__KEY)
3. Workspace YAML (.jvmtest/config.yaml)
4. Global YAML (~/.config/jvmtest/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    JVMTEST__<SECTION>__<KEY>=<VALUE>

Examples:
    JVMTEST__LOGGING__LEVEL=DEBUG
    JVMTEST__EXECUTION__JAVA_HOME=/opt/jdk-21
    JVMTEST__SERVICE__URL=http://127.0.0.1:5007/rpc
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        JVMTEST__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG echoes every build output line.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ExecutionConfig(BaseModel):
    """Build-tool process configuration.

    Env vars:
        JVMTEST__EXECUTION__JAVA_HOME: JDK used by the build tool (validated before use)
        JVMTEST__EXECUTION__INIT_SCRIPT: Gradle init script emitting test events
        JVMTEST__EXECUTION__QUEUE_SIZE: Bounded output line queue size
    """

    java_home: str | None = Field(
        default=None,
        description="Project JDK home. Must be absolute and contain bin/java; "
        "an invalid value is logged and ignored.",
    )
    init_script: str | None = Field(
        default=None,
        description="Gradle init script path. Default: the bundled test-events.init.gradle.",
    )
    queue_size: int = Field(
        default=1024,
        description="Max buffered output lines between process pipes and the event parser.",
    )
    kill_grace_sec: float = Field(
        default=5.0,
        description="Wait after terminate() before kill() on cancellation.",
    )

    @field_validator("queue_size")
    @classmethod
    def validate_queue_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"queue_size must be >= 1, got {v}")
        return v


class ServiceConfig(BaseModel):
    """Code-intelligence service configuration.

    Env vars:
        JVMTEST__SERVICE__MODE: "local" (in-process) or "rpc" (JSON-RPC over HTTP)
        JVMTEST__SERVICE__URL: JSON-RPC endpoint for rpc mode
        JVMTEST__SERVICE__TIMEOUT_SEC: Per-request timeout
    """

    mode: Literal["local", "rpc"] = Field(
        default="local",
        description="local resolves commands and reads reports from disk; "
        "rpc delegates to a running language server.",
    )
    url: str = Field(
        default="http://127.0.0.1:5007/rpc",
        description="JSON-RPC endpoint used when mode=rpc.",
    )
    timeout_sec: float = Field(
        default=30.0,
        description="Per-request timeout for service calls.",
    )


class JvmTestConfig(BaseModel):
    """Root configuration for jvmtest."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
