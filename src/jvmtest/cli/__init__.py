"""jvmtest command-line interface."""
