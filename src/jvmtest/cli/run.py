"""jvmtest run command - execute tests through the build tool."""

from __future__ import annotations

import asyncio
import contextlib
import json
import signal
from dataclasses import asdict
from pathlib import Path
from typing import Any, NoReturn

import click

from jvmtest.cli.utils import build_request_nodes, find_project_root, open_service
from jvmtest.config.loader import load_config
from jvmtest.config.models import JvmTestConfig
from jvmtest.core.errors import JvmTestError
from jvmtest.core.logging import configure_logging, get_log_file_path
from jvmtest.core.progress import (
    pluralize,
    render_coverage,
    render_session,
    spinner,
    status,
)
from jvmtest.testing.models import TestNode
from jvmtest.testing.ops import RunOutcome, RunRequest, TestOrchestrator


def outcome_to_dict(outcome: RunOutcome) -> dict[str, Any]:
    """JSON-ready view of a finished run."""
    session = outcome.session
    nodes = [
        {
            "id": node_id,
            "state": record.state.value,
            "message": record.message,
            "duration_ms": record.duration_ms,
            "output": record.output,
        }
        for node_id, record in session.records()
    ]
    coverage: dict[str, Any] | None = None
    if outcome.coverage is not None:
        coverage = {
            "summary": outcome.coverage.summary.model_dump(by_alias=True),
            "files": {
                path: {
                    "lines_found": fc.lines_found,
                    "lines_hit": fc.lines_hit,
                    "branches_found": fc.branches_found,
                    "branches_hit": fc.branches_hit,
                    "uncovered_lines": fc.uncovered_lines,
                }
                for path, fc in sorted(outcome.coverage.files.files.items())
            },
            "skipped": outcome.coverage.skipped,
            "error": outcome.coverage.error,
        }
    return {
        "run_id": outcome.run_id,
        "state": outcome.state.value,
        "cancelled": outcome.cancelled,
        "success": outcome.success,
        "summary": asdict(outcome.summary),
        "nodes": nodes,
        "errors": [asdict(e) for e in session.errors],
        "coverage": coverage,
        "coverage_unsupported": outcome.coverage_unsupported,
    }


def _abort(ctx: click.Context, error: JvmTestError, as_json: bool) -> NoReturn:
    if as_json:
        click.echo(json.dumps({"success": False, "error": error.to_dict()}, indent=2))
        ctx.exit(1)
    raise click.ClickException(str(error)) from error


async def _run(
    config: JvmTestConfig, root: Path, nodes: list[TestNode], coverage: bool
) -> RunOutcome:
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    # Ctrl-C stops the build process and skips remaining suites
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    try:
        async with open_service(config, root) as service:
            orchestrator = TestOrchestrator(service, config)
            request = RunRequest(workspace_uri=root.as_uri(), nodes=nodes, coverage=coverage)
            return await orchestrator.run(request, cancel_event)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-t",
    "--test",
    "test_ids",
    multiple=True,
    required=True,
    help="Suite (pkg.MySpec) or method (pkg.MySpec#feature). Repeatable.",
)
@click.option("--coverage", is_flag=True, help="Generate and report JaCoCo coverage")
@click.option(
    "--java-home",
    type=click.Path(path_type=Path),
    help="JDK used by the build tool (overrides execution.java_home)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def run_command(
    ctx: click.Context,
    path: Path,
    test_ids: tuple[str, ...],
    coverage: bool,
    java_home: Path | None,
    as_json: bool,
) -> None:
    """Run test suites or methods and report per-test results.

    PATH is the project root (default: current directory).
    """
    root = find_project_root(path)
    try:
        overrides: dict[str, Any] = {}
        if java_home is not None:
            overrides["execution"] = {"java_home": str(java_home)}
        config = load_config(root, **overrides)
    except JvmTestError as e:
        _abort(ctx, e, as_json)

    if not (ctx.obj or {}).get("verbose"):
        configure_logging(config=config.logging)

    nodes = build_request_nodes(root, test_ids)

    try:
        with spinner(f"Running {pluralize(len(nodes), 'selection')}"):
            outcome = asyncio.run(_run(config, root, nodes, coverage))
    except JvmTestError as e:
        _abort(ctx, e, as_json)

    if as_json:
        click.echo(json.dumps(outcome_to_dict(outcome), indent=2))
    else:
        render_session(outcome.session)
        if outcome.coverage is not None and not outcome.coverage.empty:
            render_coverage(outcome.coverage.files)
        if outcome.coverage_unsupported:
            status("Coverage is not supported by this build tool", style="warning")
        for error in outcome.session.errors:
            status(f"{error.node_id}: {error.message}", style="error")

        summary = outcome.summary
        line = (
            f"{summary.passed} passed, {summary.failed} failed, "
            f"{summary.skipped} skipped, {summary.errored} errored"
        )
        if outcome.cancelled:
            status(f"Cancelled: {line}", style="warning")
        else:
            status(line, style="success" if outcome.success else "error")

    if not outcome.success:
        if not as_json and (log_path := get_log_file_path()) is not None:
            status(f"Run log: {log_path}", style="info")
        ctx.exit(1)
