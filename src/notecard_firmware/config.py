"""Resolver configuration.

Settings are read from a YAML file and then overridden by environment
variables:

    NOTECARD_FIRMWARE_LISTING_URL
    NOTECARD_FIRMWARE_ARTIFACT_HOST
    NOTECARD_FIRMWARE_TIMEOUT
    NOTECARD_FIRMWARE_CHANNEL
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from notecard_firmware.client import DEFAULT_LISTING_URL
from notecard_firmware.errors import ConfigError
from notecard_firmware.hardware import HardwareTypeEntry, default_hardware_type_entries
from notecard_firmware.models import UpdateChannel
from notecard_firmware.resolver import DEFAULT_ARTIFACT_HOST

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    "/etc/notecard-firmware/config.yaml",
    "./config/notecard-firmware.yaml",
    "~/.config/notecard-firmware/config.yaml"
]

ENV_OVERRIDES = {
    "NOTECARD_FIRMWARE_LISTING_URL": "listing_url",
    "NOTECARD_FIRMWARE_ARTIFACT_HOST": "artifact_host",
    "NOTECARD_FIRMWARE_TIMEOUT": "request_timeout_sec",
    "NOTECARD_FIRMWARE_CHANNEL": "default_channel",
}


class ResolverConfig(BaseModel):
    """Configuration for firmware resolution."""

    listing_url: str = Field(
        default=DEFAULT_LISTING_URL,
        description="Bucket listing endpoint, queried with ?prefix=<channel>"
    )

    artifact_host: str = Field(
        default=DEFAULT_ARTIFACT_HOST,
        description="Public host that artifact keys are appended to"
    )

    request_timeout_sec: float = Field(
        default=30.0,
        description="Listing fetch timeout in seconds",
        ge=1.0,
        le=300.0
    )

    default_channel: UpdateChannel = Field(
        default=UpdateChannel.LTS,
        description="Channel used when the caller does not name one"
    )

    # Order matters: the first matching entry wins
    hardware_types: List[HardwareTypeEntry] = Field(
        default_factory=default_hardware_type_entries,
        description="Ordered model-substring table for hardware type classification"
    )


def _find_config_file(path: Optional[str]) -> Optional[Path]:
    if path:
        expanded = Path(path).expanduser()
        if not expanded.exists():
            raise ConfigError(f"Config file not found: {expanded}")
        return expanded

    for candidate in DEFAULT_CONFIG_PATHS:
        expanded = Path(candidate).expanduser()
        if expanded.exists():
            return expanded
    return None


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> ResolverConfig:
    """Load configuration.

    Args:
        path: Explicit config file; must exist if given
        environ: Environment to read overrides from (defaults to os.environ)

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be read or the values are invalid
    """
    environ = os.environ if environ is None else environ

    config_file = _find_config_file(path)
    if config_file:
        data = _read_yaml(config_file)
        logger.info(f"Loaded configuration from {config_file}")
    else:
        data = {}
        logger.warning("No configuration file found, using defaults")

    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data[field_name] = value

    try:
        return ResolverConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
