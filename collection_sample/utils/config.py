"""Configuration management module."""

import copy
import os
from functools import lru_cache
from typing import Dict, Any, List, Optional
import yaml
from dotenv import find_dotenv, load_dotenv


CONFIG_ENV_VAR = "COLLECTION_SAMPLE_CONFIG"

# Tunings for MongoDB's $sample performance cliffs (SERVER-22815).
DEFAULT_CONFIG: Dict[str, Any] = {
    "sampling": {
        "min_native_version": "3.1.6",
        "native_ratio_cutoff": 20,
        "scan_limit": 10000,
        "chunk_size": 1000,
        "size": 5,
    },
    "logging": {
        "level": "INFO",
        "log_dir": "./logs",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}


class Config:
    """Configuration class for accessing YAML config values."""

    def __init__(self, config_dict: Dict[str, Any]):
        self._config = config_dict

    def __getattr__(self, name: str) -> Any:
        """Allow attribute-style access to config values."""
        if name.startswith("_"):
            raise AttributeError(name)
        value = self._config.get(name)
        if isinstance(value, dict):
            return Config(value)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value with optional default."""
        return self._config.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config back to dictionary."""
        return self._config


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Values missing from the file fall back to ``DEFAULT_CONFIG``. Without a
    path the defaults are returned as-is.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Config object with loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
        ValueError: If required sections or keys are missing
    """
    if config_path is None:
        return Config(copy.deepcopy(DEFAULT_CONFIG))

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f) or {}

    # Validate required sections
    required_sections = ['sampling', 'logging']
    missing_sections = [s for s in required_sections if s not in config_dict]
    if missing_sections:
        raise ValueError(f"Missing required config sections: {missing_sections}")

    for key in ('min_native_version', 'native_ratio_cutoff', 'scan_limit'):
        if key not in config_dict['sampling']:
            raise ValueError(f"Sampling config missing '{key}'")

    return Config(_merge(DEFAULT_CONFIG, config_dict))


def validate_config(config: Config) -> List[str]:
    """
    Validate configuration values.

    Args:
        config: Config object to validate

    Returns:
        List of warning messages (empty if all valid)
    """
    warnings = []

    sampling = config.sampling
    if sampling.native_ratio_cutoff < 1:
        warnings.append("native_ratio_cutoff < 1 disables the reservoir fallback")
    if sampling.scan_limit < sampling.size:
        warnings.append(
            f"scan_limit ({sampling.scan_limit}) is smaller than the default "
            f"sample size ({sampling.size})"
        )
    if sampling.chunk_size < 1:
        warnings.append("chunk_size should be at least 1")
    if sampling.chunk_size > 100000:
        warnings.append("chunk_size > 100000 may exceed the 16MB command size limit")

    log_dir = config.logging.log_dir
    if log_dir and not os.path.exists(log_dir):
        warnings.append(f"Log directory will be created: {log_dir}")

    return warnings


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get the process-wide config, honouring ``COLLECTION_SAMPLE_CONFIG``.

    On first use this loads the nearest ``.env`` file, searching from the
    current working directory upwards, into ``os.environ`` (variables
    already set are kept), then
    reads the config path from ``COLLECTION_SAMPLE_CONFIG``. Without that
    variable the built-in defaults are used. The result is cached; pass an
    explicit ``Config`` to the samplers to bypass it.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return load_config(os.getenv(CONFIG_ENV_VAR))
