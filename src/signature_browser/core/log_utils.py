"""
Core Log Utilities for signature-browser.

Logging setup for the demo entry point and embedding applications, plus
lookup of the active log file.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from signature_browser.protocols.browser_config import get_browser_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER_NAME = "signature_browser"


def _get_log_dir() -> Optional[Path]:
    """Return configured log directory, or None when file logging is off."""
    config = get_browser_config()
    if config.log_dir:
        return Path(config.log_dir)
    return None


def configure_logging(level: Union[int, str] = logging.INFO,
                      log_dir: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Attach console and (optionally) file handlers to the package logger.

    Args:
        level: Logging level for the package logger
        log_dir: Directory for a timestamped log file (defaults to configured log_dir)

    Returns:
        Path of the log file, or None if only console logging was set up
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    package_logger.addHandler(console)

    directory = Path(log_dir) if log_dir else _get_log_dir()
    if directory is None:
        return None

    directory.mkdir(parents=True, exist_ok=True)
    prefix = get_browser_config().log_prefix
    log_file = directory / f"{prefix}{int(time.time())}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    package_logger.addHandler(file_handler)

    logger.info("Logging to %s", log_file)
    return log_file


def get_current_log_file_path() -> Optional[str]:
    """Return the file the package logger writes to, if any."""
    for name in (ROOT_LOGGER_NAME, None):
        for handler in logging.getLogger(name).handlers:
            if isinstance(handler, logging.FileHandler):
                return handler.baseFilename
    return None
