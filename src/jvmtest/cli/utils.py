"""CLI utilities."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import click

from jvmtest.config.models import JvmTestConfig
from jvmtest.testing.local import LocalWorkspaceService, detect_build_tool
from jvmtest.testing.models import TestNode
from jvmtest.testing.service import CodeIntelligenceService, JsonRpcServiceClient

SOURCE_EXTENSIONS = (".groovy", ".java", ".kt")
TEST_SOURCE_ROOTS = ("src/test/groovy", "src/test/java", "src/test/kotlin")


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the nearest directory holding Gradle or Maven build files.

    Walks up the directory tree from start_path (default: cwd). The topmost
    match wins, so a multi-module build resolves to its root project.

    Raises:
        click.ClickException: If no build files are found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    found: Path | None = None
    for directory in (current, *current.parents):
        if detect_build_tool(directory) != "unknown":
            found = directory
    if found is None:
        raise click.ClickException(
            f"No Gradle or Maven project found at or above: {start_path}\n"
            "Run jvmtest from a project directory, or pass a path."
        )
    return found


def locate_suite_source(root: Path, suite: str) -> Path | None:
    """Source file of a fully-qualified suite class, searched under test source roots."""
    relative = suite.replace(".", "/")
    for source_root in TEST_SOURCE_ROOTS:
        for ext in SOURCE_EXTENSIONS:
            for candidate in root.glob(f"**/{source_root}/{relative}{ext}"):
                if candidate.is_file():
                    return candidate
    return None


def build_request_nodes(root: Path, test_ids: tuple[str, ...]) -> list[TestNode]:
    """Turn ``pkg.Spec`` / ``pkg.Spec#method`` ids into request nodes.

    Methods of the same suite share one suite node so dynamic iterations can
    attach to it.
    """
    suites: dict[str, TestNode] = {}
    requested: list[TestNode] = []
    for raw in test_ids:
        suite_id, _, method = raw.partition("#")
        suite_id = suite_id.strip()
        if not suite_id:
            raise click.BadParameter(f"empty suite in test id: {raw!r}", param_hint="--test")

        suite = suites.get(suite_id)
        if suite is None:
            source = locate_suite_source(root, suite_id)
            suite = TestNode(
                id=suite_id,
                display_name=suite_id.rsplit(".", 1)[-1],
                source_uri=(source or root).as_uri(),
            )
            suites[suite_id] = suite

        if method:
            requested.append(
                suite.add_child(
                    TestNode(
                        id=f"{suite_id}.{method}",
                        display_name=method,
                        source_uri=suite.source_uri,
                    )
                )
            )
        elif suite not in requested:
            requested.append(suite)
    return requested


@asynccontextmanager
async def open_service(config: JvmTestConfig, root: Path) -> AsyncIterator[CodeIntelligenceService]:
    """Service selected by ``service.mode``; RPC clients are closed on exit."""
    if config.service.mode == "rpc":
        async with JsonRpcServiceClient(
            config.service.url, timeout=config.service.timeout_sec
        ) as client:
            yield client
    else:
        yield LocalWorkspaceService(root)
