# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - LOGGING CONFIGURATION
# =============================================================================
#
# The process log is the only failure channel of the watcher: every fetch,
# store and notify error ends up here. Logs go to the console and to a
# timestamped file under logs/.
#
# =============================================================================

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .config import resolve_project_path


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_log_dir(log_dir: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the log directory (relative paths are taken from the project root)."""
    return resolve_project_path("logs" if log_dir is None else log_dir)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    console_output: bool = True,
    file_output: bool = True,
    log_dir: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """
    Configure the root logger for the watcher.

    Args:
        level: Logging level (int or name such as "DEBUG")
        console_output: Whether to log to console
        file_output: Whether to log to file
        log_dir: Directory for log files (default: <project>/logs)

    Returns:
        Path of the log file, or None if file output is disabled
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file = None
    if file_output:
        directory = _get_log_dir(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = directory / f"watcher_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Reduce noise from urllib3
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger.info("Logging initialized")
    if log_file is not None:
        logger.info(f"Log file: {log_file}")

    return log_file
