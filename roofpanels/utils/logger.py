"""
Logging configuration for roofpanels.

Library modules only ask for a logger; the demo command line (or a host
application) decides where messages go.

Functions:
    setup_logging: Install console (and optional file) handlers
    get_logger: Get a logger instance for a specific module

Example:
    >>> from roofpanels.utils.logger import setup_logging, get_logger
    >>> setup_logging()
    >>> logger = get_logger(__name__)
    >>> logger.info("Fitting panels")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'roofpanels'


def setup_logging(log_dir: Optional[Path] = None, verbose: bool = False) -> Optional[Path]:
    """
    Setup logging to console and, optionally, to a file.

    Creates up to two handlers:
    - Console: INFO level (DEBUG when verbose) with clean formatting
    - File: DEBUG level with timestamps and module names, only when log_dir is given

    Parameters:
    -----------
    log_dir : Optional[Path]
        Directory for log files. No file is written when omitted.
    verbose : bool
        Show DEBUG messages on the console.

    Returns:
    --------
    Optional[Path]
        Path to the created log file, or None when logging to console only
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console)

    log_file = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f'roofpanels_{timestamp}.log'

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)
        logger.debug(f"Logging initialized: {log_file}")

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Parameters:
    -----------
    name : str
        Module name (typically __name__)

    Returns:
    --------
    logging.Logger
        Logger under the roofpanels hierarchy
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
