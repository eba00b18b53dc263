"""
Configuration loading for the DDNS updater.

Settings come from a YAML file layered over built-in defaults, then from
``DDNS_*`` environment variables, which win over both.
"""

import copy
import logging
import os
import sys
from typing import Dict, Mapping, Optional

import yaml

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# (section, key, converter) per environment variable
ENV_OVERRIDES = {
    "DDNS_SERVER": ("server", "host", str),
    "DDNS_PORT": ("server", "port", int),
    "DDNS_TIMEOUT": ("server", "timeout", float),
    "DDNS_PROTOCOL": ("server", "protocol", str),
    "DDNS_ZONE": (None, "zone", str),
    "DDNS_DEFAULT_TTL": (None, "default_ttl", int),
    "DDNS_KEY_FILE": ("signing_key", "file", str),
    "DDNS_KEY_NAME": ("signing_key", "name", str),
    "DDNS_KEY_ALGORITHM": ("signing_key", "algorithm", str),
    "DDNS_LOG_LEVEL": ("logging", "level", str),
}


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "server": {
            "host": "dns-server",
            "port": 53,
            "timeout": 5.0,
            "protocol": "tcp",
        },
        "zone": "example.test",
        "default_ttl": 60,
        "signing_key": {
            "file": "/app/bind/keys/update-key.key",
            "name": None,
            "algorithm": None,
        },
        "logging": {"level": "INFO", "file": None},
    }


def load_config(config_path: Optional[str] = None, environ: Optional[Mapping] = None) -> Dict:
    """
    Load configuration from YAML file and environment.

    Args:
        config_path: YAML file; defaults are used when None or missing
        environ: Environment mapping, ``os.environ`` by default

    Returns:
        The merged configuration dictionary

    Raises:
        ConfigurationError: if the file or an override cannot be parsed
    """
    config = get_default_config()

    if config_path:
        try:
            with open(config_path, "r") as f:
                file_config = yaml.safe_load(f) or {}
            logger.info(f"Configuration loaded from {config_path}")
        except FileNotFoundError:
            logger.warning(f"Config file {config_path} not found, using defaults")
            file_config = {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            raise ConfigurationError(f"Error parsing config file {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        config = merge_config(config, file_config)

    return apply_env_overrides(config, os.environ if environ is None else environ)


def merge_config(base: Dict, override: Dict) -> Dict:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(config: Dict, environ: Mapping) -> Dict:
    """Apply ``DDNS_*`` environment variables on top of ``config``."""
    config = copy.deepcopy(config)
    for variable, (section, key, convert) in ENV_OVERRIDES.items():
        raw = environ.get(variable)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {variable}: {raw!r}") from e

        target = config.setdefault(section, {}) if section else config
        target[key] = value
        logger.debug(f"{variable} overrides {section + '.' if section else ''}{key}")
    return config


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging") or {}
    log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")
    log_file = logging_config.get("file")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers)
