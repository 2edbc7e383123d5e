"""
logging_setup.py
================
Report-wide logging: one log file per scenario plus console output

Data-preparation modules log through logging.getLogger(__name__); everything
under the package logger ends up in both handlers.
"""

import logging
from pathlib import Path
from typing import Union

PACKAGE_LOGGER = 'precip_collisions'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_dir: Union[str, Path], scenario_name: str,
                  level: int = logging.INFO) -> logging.Logger:
    """
    Configure the package logger

    Args:
        log_dir: Directory for the log file (created if missing)
        scenario_name: Used in the log file name
        level: Logging level for both handlers

    Returns:
        The package logger
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    safe_name = ''.join(c if c.isalnum() or c in '-_' else '_' for c in scenario_name)
    log_filename = log_dir / f"report_log_{safe_name}.txt"

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    # Prevent duplicate output through the root logger
    logger.propagate = False

    fh = logging.FileHandler(log_filename, mode='w', encoding='utf-8')
    fh.setLevel(level)

    ch = logging.StreamHandler()
    ch.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    fh.setFormatter(formatter)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)
    logger.info(f"Log file: {log_filename}")
    return logger


def close_logging() -> None:
    """Detach and close the package handlers (releases the log file)"""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def log_section(logger: logging.Logger, title: str, char: str = "-", width: int = 60) -> None:
    """Log section header"""
    logger.info("")
    logger.info(char * width)
    logger.info(title.upper())
    logger.info(char * width)
