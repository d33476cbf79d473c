"""jvmtest - test execution orchestration for Gradle and Maven projects."""

__version__ = "0.1.0"
