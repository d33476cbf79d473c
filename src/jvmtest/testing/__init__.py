"""Test execution pipeline - resolve, execute, parse, reconcile, cover."""

from jvmtest.testing.models import (
    BuildToolInfo,
    NodeState,
    TestCommand,
    TestEvent,
    TestNode,
    TestResultItem,
    TestResultsReport,
    TestSuiteInfo,
)
from jvmtest.testing.ops import RunOutcome, RunRequest, TestOrchestrator
from jvmtest.testing.service import CodeIntelligenceService, JsonRpcServiceClient
from jvmtest.testing.session import RunSession

__all__ = [
    "BuildToolInfo",
    "CodeIntelligenceService",
    "JsonRpcServiceClient",
    "NodeState",
    "RunOutcome",
    "RunRequest",
    "RunSession",
    "TestCommand",
    "TestEvent",
    "TestNode",
    "TestOrchestrator",
    "TestResultItem",
    "TestResultsReport",
    "TestSuiteInfo",
]
