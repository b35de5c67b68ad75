"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.localhub_cache/config.yaml).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".localhub_cache"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "LOCALHUB_"

# --- Cache Defaults (seconds / bytes) ---
DEFAULT_TTL = 5 * 60
BUSINESS_SEARCH_TTL = 10 * 60
USER_DATA_TTL = 30 * 60
STATIC_DATA_TTL = 60 * 60
MAX_CACHE_SIZE = 100
MAX_MEMORY_USAGE = 50 * 1024 * 1024  # Advisory only, MAX_CACHE_SIZE is the enforced bound
CLEANUP_INTERVAL = 5 * 60
SESSION_PREFIX = "cache_"
PERSISTENT_PREFIX = "cache_persistent_"
DEFAULT_PERSISTENT_DIR = DEFAULT_CONFIG_DIR / "persistent"
DEFAULT_STORAGE_BACKEND = "disk"
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False

def _flatten(data: Dict[str, Any], parent: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('cache.max_size')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

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

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no .env found).")

    # 3. Environment Variables (Highest priority) are handled by get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")

def env_var_name(key: str) -> str:
    """Maps a dotted config key to its environment variable name."""
    return ENV_PREFIX + key.upper().replace('.', '_')

def _coerce(value: str) -> Any:
    """Converts common string forms from the environment to Python values."""
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

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (LOCALHUB_ + upper-cased key, dots as underscores)
    3. YAML config
    4. Default value

    Args:
        key: The dotted configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    try:
        cwd = Path.cwd()
    except OSError as e:
        logger.warning(f"Error searching for .env file: {e}")
        return None
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Typed Cache Settings ---

@dataclass
class CacheSettings:
    """Resolved settings for building the cache registry."""
    default_ttl: float = DEFAULT_TTL
    business_search_ttl: float = BUSINESS_SEARCH_TTL
    user_data_ttl: float = USER_DATA_TTL
    static_data_ttl: float = STATIC_DATA_TTL
    max_cache_size: int = MAX_CACHE_SIZE
    max_memory_usage: int = MAX_MEMORY_USAGE
    cleanup_interval: float = CLEANUP_INTERVAL
    session_prefix: str = SESSION_PREFIX
    persistent_prefix: str = PERSISTENT_PREFIX
    storage_backend: str = DEFAULT_STORAGE_BACKEND
    persistent_dir: Path = DEFAULT_PERSISTENT_DIR
    storage_quota_bytes: int = DEFAULT_STORAGE_QUOTA_BYTES
    auto_cleanup: bool = True

def get_cache_settings() -> CacheSettings:
    """Builds CacheSettings from the loaded configuration layers."""
    load_configuration()
    return CacheSettings(
        default_ttl=float(get_config('cache.default_ttl', DEFAULT_TTL)),
        business_search_ttl=float(get_config('cache.business_search_ttl', BUSINESS_SEARCH_TTL)),
        user_data_ttl=float(get_config('cache.user_data_ttl', USER_DATA_TTL)),
        static_data_ttl=float(get_config('cache.static_data_ttl', STATIC_DATA_TTL)),
        max_cache_size=int(get_config('cache.max_size', MAX_CACHE_SIZE)),
        max_memory_usage=int(get_config('cache.max_memory_usage', MAX_MEMORY_USAGE)),
        cleanup_interval=float(get_config('cache.cleanup_interval', CLEANUP_INTERVAL)),
        session_prefix=str(get_config('cache.session_prefix', SESSION_PREFIX)),
        persistent_prefix=str(get_config('cache.persistent_prefix', PERSISTENT_PREFIX)),
        storage_backend=str(get_config('cache.storage_backend', DEFAULT_STORAGE_BACKEND)).lower(),
        persistent_dir=Path(str(get_config('cache.persistent_dir', DEFAULT_PERSISTENT_DIR))).expanduser(),
        storage_quota_bytes=int(get_config('cache.storage_quota_bytes', DEFAULT_STORAGE_QUOTA_BYTES)),
        auto_cleanup=bool(get_config('cache.auto_cleanup', True)),
    )

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
