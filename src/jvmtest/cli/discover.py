"""jvmtest discover command - list test suites."""

import asyncio
import json
from pathlib import Path

import click

from jvmtest.cli.utils import find_project_root, open_service
from jvmtest.config.loader import load_config
from jvmtest.core.errors import JvmTestError
from jvmtest.core.progress import get_console, pluralize
from jvmtest.testing.models import TestSuiteInfo


async def _discover(root: Path) -> list[TestSuiteInfo]:
    config = load_config(root)
    async with open_service(config, root) as service:
        return await service.discover_tests(root.as_uri())


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def discover_command(path: Path, as_json: bool) -> None:
    """List test suites known to the code-intelligence service.

    PATH is the project root (default: current directory).
    """
    root = find_project_root(path)
    try:
        suites = asyncio.run(_discover(root))
    except JvmTestError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps([s.model_dump() for s in suites], indent=2))
        return

    console = get_console()
    if not suites:
        console.print("No test suites found.")
        return

    for suite in suites:
        console.print(f"[bold]{suite.suite}[/bold] ({pluralize(len(suite.tests), 'test')})")
        for t in suite.tests:
            console.print(f"  {t.test}  [dim]line {t.line}[/dim]")
