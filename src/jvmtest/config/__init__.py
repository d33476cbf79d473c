"""Config module exports."""

from jvmtest.config.loader import load_config
from jvmtest.config.models import (
    ExecutionConfig,
    JvmTestConfig,
    LoggingConfig,
    LogOutputConfig,
    ServiceConfig,
)

__all__ = [
    "load_config",
    "ExecutionConfig",
    "JvmTestConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ServiceConfig",
]
