"""jvmtest CLI - jvmtest command."""

import click

from jvmtest.cli.discover import discover_command
from jvmtest.cli.info import info_command
from jvmtest.cli.run import run_command
from jvmtest.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="jvmtest")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """jvmtest - run Gradle and Maven tests with live per-test results."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(info_command, name="info")
cli.add_command(discover_command, name="discover")
cli.add_command(run_command, name="run")


if __name__ == "__main__":
    cli()
