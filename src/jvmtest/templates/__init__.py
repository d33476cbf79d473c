"""Files shipped with jvmtest and handed to build tools."""

from pathlib import Path

INIT_SCRIPT_NAME = "test-events.init.gradle"


def get_init_script_path() -> Path:
    """Path of the bundled Gradle init script that emits test events."""
    return Path(__file__).parent / INIT_SCRIPT_NAME


__all__ = ["INIT_SCRIPT_NAME", "get_init_script_path"]
