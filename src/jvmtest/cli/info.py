"""jvmtest info command - show build tool detection."""

import asyncio
import json
from pathlib import Path

import click

from jvmtest.cli.utils import find_project_root, open_service
from jvmtest.config.loader import load_config
from jvmtest.core.errors import JvmTestError
from jvmtest.core.progress import get_console
from jvmtest.testing.models import BuildToolInfo
from jvmtest.testing.safe_execution import validate_java_home


async def _fetch_info(root: Path) -> tuple[BuildToolInfo, str]:
    config = load_config(root)
    async with open_service(config, root) as service:
        return await service.get_build_tool_info(root.as_uri()), config.service.mode


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info_command(path: Path, as_json: bool) -> None:
    """Show the detected build tool and its capabilities.

    PATH is the project root (default: current directory).
    """
    root = find_project_root(path)
    try:
        info, mode = asyncio.run(_fetch_info(root))
    except JvmTestError as e:
        raise click.ClickException(str(e)) from e

    java_home = load_config(root).execution.java_home
    java_check = validate_java_home(java_home) if java_home else None

    if as_json:
        payload = {
            "project": str(root),
            "service": mode,
            "build_tool": info.model_dump(by_alias=True),
            "java_home": java_home,
            "java_home_valid": java_check.valid if java_check else None,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console = get_console()
    console.print(f"Project:    {root}", highlight=False)
    console.print(f"Service:    {mode}", highlight=False)
    detected = info.name if info.detected else "not detected"
    console.print(f"Build tool: [bold]{detected}[/bold]")
    for label, flag in (
        ("test execution", info.supports_test_execution),
        ("debug", info.supports_debug),
        ("coverage", info.supports_coverage),
    ):
        mark = "[green]yes[/green]" if flag else "[dim]no[/dim]"
        console.print(f"  {label:<15} {mark}")
    if java_check is not None:
        if java_check.valid:
            console.print(f"Java home:  {java_check.path}", highlight=False)
        else:
            console.print(
                f"Java home:  [yellow]{java_home} ignored ({java_check.reason})[/yellow]",
                highlight=False,
            )
