"""Layered configuration loading.

Lowest to highest precedence:

- built-in defaults
- ``~/.config/jvmtest/config.yaml``
- ``<project>/.jvmtest/config.yaml``
- ``JVMTEST__SECTION__KEY`` environment variables
- keyword overrides (the CLI's flags)

A relative ``execution.init_script`` in the project file is resolved against
the project root, so a checked-in init script keeps working from any cwd.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from jvmtest.config.models import (
    ExecutionConfig,
    JvmTestConfig,
    LoggingConfig,
    ServiceConfig,
)
from jvmtest.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/jvmtest/config.yaml").expanduser()
WORKSPACE_CONFIG = Path(".jvmtest") / "config.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _anchor_init_script(data: dict[str, Any], root: Path) -> dict[str, Any]:
    execution = data.get("execution")
    if not isinstance(execution, dict):
        return data
    script = execution.get("init_script")
    if not isinstance(script, str) or not script or Path(script).expanduser().is_absolute():
        return data
    return _deep_merge(data, {"execution": {"init_script": str(root / script)}})


class _YamlSource(PydanticBaseSettingsSource):
    """Merged YAML layers as one settings source, below env vars."""

    def __init__(self, settings_cls: type[BaseSettings], layers: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._layers = layers

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        value = self._layers.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return {k: v for k, v in self._layers.items() if v is not None}


def _settings_for(layers: dict[str, Any]) -> type[BaseSettings]:
    # A fresh class per load keeps the YAML layers out of class state

    class JvmTestSettings(BaseSettings):
        model_config = SettingsConfigDict(
            env_prefix="JVMTEST__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        execution: ExecutionConfig = ExecutionConfig()
        service: ServiceConfig = ServiceConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (init_settings, env_settings, _YamlSource(settings_cls, layers))

    return JvmTestSettings


def load_config(workspace_root: Path | None = None, **kwargs: Any) -> JvmTestConfig:
    """Resolve the configuration for one project.

    Args:
        workspace_root: Project root holding ``.jvmtest/config.yaml``.
            Defaults to the current directory.
        **kwargs: Section overrides, e.g. ``execution={"java_home": ...}``.

    Raises:
        ConfigError: Unreadable YAML or a value that fails validation.
    """
    root = workspace_root or Path.cwd()
    project = _anchor_init_script(_load_yaml(root / WORKSPACE_CONFIG), root)
    layers = _deep_merge(_load_yaml(GLOBAL_CONFIG_PATH), project)

    try:
        settings = _settings_for(layers)(**kwargs)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigError.invalid_value(field, first.get("input"), first["msg"]) from e

    return JvmTestConfig.model_validate(settings.model_dump())
