"""Provides functions for loading and accessing configuration settings.

Supports loading from a YAML configuration file (~/.pagedrain/config.yaml),
a .env file and environment variables. Keys are dotted (e.g. 'batch.size');
the matching environment variable is PAGEDRAIN_BATCH_SIZE.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".pagedrain"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "PAGEDRAIN_"

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def load_configuration(
    config_file: Path = DEFAULT_CONFIG_FILE,
    env_file: Optional[Path] = None,
    force: bool = False,
) -> None:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest) when reading values:
    1. Test overrides (set_config_for_testing)
    2. Environment variables (including those loaded from .env)
    3. YAML configuration file
    4. Default passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; real environment variables take precedence
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("No .env file found at or above current directory.")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _flatten(mapping: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ({'batch': {'size': 1}} -> 'batch.size')."""
    flat: Dict[str, Any] = {}
    for key, value in mapping.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def _coerce(value: str) -> Any:
    """Converts environment strings to bool/int/float where they look like one."""
    lowered = value.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def env_var_name(key: str) -> str:
    """Environment variable consulted for a dotted config key."""
    return f"{ENV_PREFIX}{key.upper().replace('.', '_')}"


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Args:
        key: The configuration key (e.g. 'batch.size')
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    for env_key in (env_var_name(key), key.upper()):
        if env_key in os.environ:
            return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found. Returning default: {default}")
    return default


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the rest of the process.

    Args:
        key: Configuration key (e.g., 'logging.level')
        value: Value to set
    """
    _config[key] = value
    os.environ[env_var_name(key)] = str(value)
    logger.debug(f"Config set: {key}={value}")


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def _get_int(key: str, default: int) -> int:
    value = get_config(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer for '{key}': {value!r}. Using {default}.")
        return default


def _get_float(key: str, default: float) -> float:
    value = get_config(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid number for '{key}': {value!r}. Using {default}.")
        return default


def get_batch_size(default: int = 1000) -> int:
    """Page size used by the drain command."""
    return _get_int('batch.size', default)


def get_max_concurrent_batches(default: int = 3) -> int:
    """Handler tasks allowed in flight at once."""
    return _get_int('batch.max_concurrent', default)


def get_retry_max_retries(default: int = 5) -> int:
    return _get_int('retry.max_retries', default)


def get_retry_base_delay(default: float = 0.5) -> float:
    """Seconds before the first retry."""
    return _get_float('retry.base_delay', default)


def get_redis_url() -> str:
    return str(get_config('redis.url', DEFAULT_REDIS_URL))


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")

# Load configuration when the module is imported
load_configuration()
