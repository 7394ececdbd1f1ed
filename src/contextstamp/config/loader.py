"""Layered configuration loading.

Layers, lowest first; each later layer is deep-merged over the previous:

    built-in defaults
    ~/.config/contextstamp/config.yaml
    <project>/.contextstamp/config.yaml
    CONTEXTSTAMP__SECTION__KEY environment variables
    keyword arguments to load_config()
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

from contextstamp.config.models import (
    ContextStampConfig,
    DefaultsConfig,
    LoggingConfig,
    ServerConfig,
    SnapshotsConfig,
    TokensConfig,
)
from contextstamp.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/contextstamp/config.yaml").expanduser()
REPO_CONFIG_PATH = Path(".contextstamp") / "config.yaml"


class ContextStampSettings(BaseSettings):
    """Environment-facing mirror of ContextStampConfig.

    Only used to read ``CONTEXTSTAMP__`` variables; the merged result is
    validated as a plain ContextStampConfig.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTEXTSTAMP__",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    snapshots: SnapshotsConfig = Field(default_factory=SnapshotsConfig)
    tokens: TokensConfig = Field(default_factory=TokensConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML layer. A missing or empty file is an empty layer."""
    if not path.is_file():
        return {}
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return parsed


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested mappings merge per key."""
    merged = dict(base)
    for key, incoming in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = _deep_merge(current, incoming)
        else:
            merged[key] = incoming
    return merged


def _env_layer() -> dict[str, Any]:
    return EnvSettingsSource(ContextStampSettings)()


def load_config(project_root: Path | None = None, **kwargs: Any) -> ContextStampConfig:
    """Resolve the effective configuration for a project.

    Args:
        project_root: Directory that may hold .contextstamp/config.yaml.
            Defaults to the current working directory.
        **kwargs: Section overrides, applied last.

    Raises:
        ConfigError: A YAML layer does not parse, or the merged values
            fail validation.
    """
    root = project_root or Path.cwd()

    layers = (
        _load_yaml(GLOBAL_CONFIG_PATH),
        _load_yaml(root / REPO_CONFIG_PATH),
        _env_layer(),
        kwargs,
    )
    merged: dict[str, Any] = {}
    for layer in layers:
        merged = _deep_merge(merged, layer)

    try:
        return ContextStampConfig.model_validate(merged)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigError.invalid_value(field, first.get("input"), first["msg"]) from e
