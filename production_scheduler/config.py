# Load engine configuration from a YAML file.
# Version: 1.0.0
# Provides run budgets, service address and logging setup.

import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path

import yaml

from .constants import (
    SCHEMA_VERSION,
    DEFAULT_TIME_LIMIT_SECONDS,
    DEFAULT_ITERATION_FACTOR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    LOG_FORMAT,
)
from .errors import ConfigurationError, FileLoadError

# Environment variable pointing at an alternative config file
CONFIG_ENV_VAR = "SCHEDULER_CONFIG"


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by every scheduling run.

    Attributes:
        schema_version: Version tag written into every response.
        default_time_limit_seconds: Wall-clock budget when a request omits one.
        iteration_factor: Iteration cap is operation count times this factor.
        log_level: Root logging level name.
        host: Address the HTTP service binds to.
        port: Port the HTTP service listens on.
    """
    schema_version: str = SCHEMA_VERSION
    default_time_limit_seconds: float = DEFAULT_TIME_LIMIT_SECONDS
    iteration_factor: int = DEFAULT_ITERATION_FACTOR
    log_level: str = DEFAULT_LOG_LEVEL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def to_dict(self) -> dict:
        return asdict(self)


def load_config_from_yaml(yaml_path: str | Path) -> EngineConfig:
    """Load engine configuration from YAML file.

    Missing keys keep their defaults.

    Args:
        yaml_path: Path to the YAML config file.

    Returns:
        EngineConfig with the loaded values.

    Raises:
        FileLoadError: If file cannot be read or parsed.
        ConfigurationError: If a value is invalid.
    """
    yaml_path = Path(yaml_path)

    try:
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise FileLoadError(str(yaml_path), e)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(yaml_path), "top level must be a mapping")

    defaults = EngineConfig()
    try:
        config = EngineConfig(
            schema_version=str(data.get('schema_version', defaults.schema_version)),
            default_time_limit_seconds=float(
                data.get('default_time_limit_seconds', defaults.default_time_limit_seconds)
            ),
            iteration_factor=int(data.get('iteration_factor', defaults.iteration_factor)),
            log_level=str(data.get('log_level', defaults.log_level)).upper(),
            host=str(data.get('host', defaults.host)),
            port=int(data.get('port', defaults.port)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(str(yaml_path), str(e))

    if config.default_time_limit_seconds <= 0:
        raise ConfigurationError(str(yaml_path), "default_time_limit_seconds must be positive")
    if config.iteration_factor < 1:
        raise ConfigurationError(str(yaml_path), "iteration_factor must be at least 1")
    if not isinstance(logging.getLevelName(config.log_level), int):
        raise ConfigurationError(str(yaml_path), f"unknown log_level {config.log_level!r}")

    return config


def save_config_to_yaml(config: EngineConfig, yaml_path: str | Path) -> None:
    """Save engine configuration to YAML file."""
    yaml_path = Path(yaml_path)
    with open(yaml_path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from ``path``, ``$SCHEDULER_CONFIG`` or defaults.

    Args:
        path: Explicit config file; takes precedence over the environment.

    Returns:
        EngineConfig (defaults when no file is configured).
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return EngineConfig()
    return load_config_from_yaml(path)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging once for CLI and service entry points."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
