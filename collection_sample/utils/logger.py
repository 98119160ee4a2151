"""Logging system setup."""

import os
import logging
from datetime import datetime
from typing import Optional
import colorlog

from collection_sample.utils.config import DEFAULT_CONFIG, Config, get_config, validate_config


CONSOLE_FORMAT = (
    "%(log_color)s%(levelname)-8s%(reset)s "
    "%(blue)s%(name)s%(reset)s - %(message)s"
)

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def setup_logging(
    config: Optional[Config] = None,
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    log_format: Optional[str] = None
) -> Optional[str]:
    """
    Configure the root logger from the ``logging`` config section.

    The console gets a colored handler at the configured level; when a log
    directory is set, every record down to DEBUG also goes to a timestamped
    ``sample_*.log`` file there. Existing root handlers are replaced. Once
    the handlers are in place, ``validate_config`` warnings are logged.

    Args:
        config: Config to read ``logging.level``, ``logging.log_dir`` and
            ``logging.format`` from, defaults to ``get_config()``
        log_level: Overrides ``logging.level``
        log_dir: Overrides ``logging.log_dir``; an empty string disables the
            log file
        log_format: Overrides ``logging.format`` (file handler)

    Returns:
        Path of the log file, or None when file logging is disabled

    Raises:
        ValueError: If the level name is unknown
    """
    config = config or get_config()
    defaults = DEFAULT_CONFIG["logging"]
    settings = config.logging or Config({})

    level = _resolve_level(log_level or settings.level or defaults["level"])
    if log_dir is None:
        log_dir = settings.log_dir
    log_format = log_format or settings.format or defaults["format"]

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = colorlog.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS))
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"sample_{timestamp}.log")

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)

    # The file handler wants DEBUG even when the console does not.
    root_logger.setLevel(logging.DEBUG if log_file else level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {logging.getLevelName(level)}. Log file: {log_file}")
    for warning in validate_config(config):
        logger.warning(f"Config: {warning}")

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
