"""Utility modules for collection_sample.

Configuration loading and logging setup shared across the package.
"""

from collection_sample.utils.config import Config, get_config, load_config, validate_config
from collection_sample.utils.logger import get_logger, setup_logging

__all__ = [
    "Config",
    "get_config",
    "load_config",
    "validate_config",
    "get_logger",
    "setup_logging",
]
