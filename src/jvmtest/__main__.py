"""Allow ``python -m jvmtest``."""

from jvmtest.cli.main import cli

if __name__ == "__main__":
    cli()
