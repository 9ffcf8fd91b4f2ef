"""Configuration management for vmgateway.

Loads settings from a JSON configuration file (or YAML, for
``.yaml``/``.yml`` paths) and resolves them against environment
variables. Priority: env vars > config file > defaults.

The govc connection settings are never written back into ``os.environ``;
they are resolved once into an immutable model and handed to the
subprocess runner explicitly via :meth:`GovcSettings.to_environment`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from vmgateway.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")

# Flat keys recognized in the config file and copied into the govc scope.
GOVC_KEYS = (
    "GOVC_URL",
    "GOVC_USERNAME",
    "GOVC_PASSWORD",
    "GOVC_CERTIFICATE",
    "GOVC_PRIVATE_KEY",
    "GOVC_INSECURE",
    "GOVC_PERSIST_SESSION",
    "GOVC_MIN_API_VERSION",
)

VM_PATH_KEY = "vm-path"


class CommandConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    binary: str = Field(default="govc", description="govc executable name or path")
    timeout: float | None = Field(default=60.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class GovcSettings(BaseSettings):
    """Connection settings for the govc tool.

    Each field maps to a ``GOVC_*`` environment variable. Values found in
    the environment win over values passed in from the config file.
    Empty environment variables count as unset.
    """

    model_config = {
        "env_prefix": "GOVC_",
        "env_ignore_empty": True,
        "extra": "ignore",
        "frozen": True,
    }

    url: str | None = None
    username: str | None = None
    password: SecretStr | None = None
    certificate: str | None = None
    private_key: str | None = None
    insecure: bool | None = None
    persist_session: bool | None = None
    min_api_version: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, file_secret_settings

    def to_environment(self) -> dict[str, str]:
        """Return the resolved settings as ``GOVC_*`` environment variables."""
        env: dict[str, str] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            elif isinstance(value, bool):
                value = "true" if value else "false"
            env[f"GOVC_{name.upper()}"] = str(value)
        return env


class Settings(BaseSettings):
    """Root configuration for vmgateway.

    Immutable once loaded. Environment variables use the ``VMGATEWAY_``
    prefix with ``__`` as the nested delimiter, e.g.
    ``VMGATEWAY_COMMAND__BINARY=/usr/local/bin/govc``.
    """

    model_config = {
        "env_prefix": "VMGATEWAY_",
        "env_nested_delimiter": "__",
        "env_ignore_empty": True,
        "extra": "ignore",
        "frozen": True,
    }

    vm_path: str = Field(default="", description="Inventory root listed by GET /vms")
    govc: GovcSettings = Field(default_factory=GovcSettings)
    command: CommandConfig = Field(default_factory=CommandConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, file_secret_settings


YAML_SUFFIXES = (".yaml", ".yml")


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from the config file + environment variables.

    Priority: env vars > config file > defaults

    ``.yaml``/``.yml`` files are parsed as YAML, anything else as JSON.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a
            mapping, or holds values that fail validation.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in YAML_SUFFIXES:
                file_data = yaml.safe_load(f) or {}
            else:
                file_data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(file_data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    logger.info("Loaded configuration from %s", path)

    data: dict[str, Any] = {}
    if VM_PATH_KEY in file_data:
        data["vm_path"] = _as_string(file_data[VM_PATH_KEY])
    for section in ("command", "logging"):
        if isinstance(file_data.get(section), dict):
            data[section] = file_data[section]

    try:
        data["govc"] = GovcSettings(**_extract_govc(file_data))
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e

    if not settings.vm_path:
        logger.warning(
            "No %r key in %s; GET /vms will list the inventory root", VM_PATH_KEY, path,
        )
    return settings


def _extract_govc(file_data: dict[str, Any]) -> dict[str, Any]:
    """Map flat ``GOVC_*`` keys (or a ``govc`` section) to GovcSettings fields.

    Scalar values are read as strings, so ``"GOVC_MIN_API_VERSION": 6.7``
    means ``"6.7"``.
    """
    govc_data: dict[str, Any] = {}
    section = file_data.get("govc")
    if isinstance(section, dict):
        govc_data.update(section)
    for key in GOVC_KEYS:
        if key in file_data:
            govc_data[key[len("GOVC_"):].lower()] = file_data[key]
    return {name: _as_string(value) for name, value in govc_data.items()}


def _as_string(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value
