"""
gcloud-context - Logging Setup

Library modules only emit records on the 'gcloud_context' logger.
Applications (such as the bootstrap CLI) call setup_logging() to decide
where those records go.

Logging Strategy:
- INFO (default): High-level progress for end users
- DEBUG (--verbosity=debug): API calls and responses
- WARNING: Recoverable issues (e.g. a service handle failed to build)
- ERROR: Problems that stop operations
"""

import logging
import sys
from pathlib import Path
from typing import Any

LOGGER_NAME = 'gcloud_context'


class CleanFormatter(logging.Formatter):
    """
    Custom formatter for clean user-facing logs.

    - INFO: Just the message (clean)
    - WARNING/ERROR/CRITICAL: Show level prefix
    """

    def format(self, record):
        """Format log record based on level."""

        if record.levelno == logging.INFO:
            return record.getMessage()

        elif record.levelno == logging.WARNING:
            return f"[!]  WARNING: {record.getMessage()}"

        elif record.levelno == logging.ERROR:
            return f"[X] ERROR: {record.getMessage()}"

        elif record.levelno == logging.CRITICAL:
            return f"[X] CRITICAL: {record.getMessage()}"

        else:
            return f"[DEBUG] {record.getMessage()}"


def setup_logging(level='INFO', log_file=None, debug=False):
    """
    Setup logging for gcloud-context.

    Configures logging to:
    1. Output to console (stderr, so stdout stays free for console output)
    2. Optionally write to log file
    3. Use a detailed format in debug mode

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only logs to console.
        debug: If True, use DEBUG level and detailed format

    Returns:
        logging.Logger: Configured logger instance

    Example:
        logger = setup_logging('INFO')
        logger.info("Looking up instance...")
    """

    if debug:
        level = 'DEBUG'

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Remove existing handlers (in case setup_logging called multiple times)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)

    if debug:
        # [2025-11-02 10:30:45] DEBUG [get_instance:45]: API call: instances.get(...)
        console_format = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(funcName)s:%(lineno)d]: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        console_format = CleanFormatter(
            '%(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        logger.debug(f"Logging to file: {log_file}")

    return logger


def get_logger():
    """
    Get the gcloud-context logger instance.

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(LOGGER_NAME)


def log_api_call(logger, method_name: str, **params):
    """
    Log an API call (DEBUG level).

    Example:
        log_api_call(logger, 'instances.get', project='p', zone='z', instance='vm')
        # Output: API call: instances.get(project=p, zone=z, instance=vm)
    """
    param_str = ', '.join(f'{k}={v}' for k, v in params.items())
    logger.debug(f"API call: {method_name}({param_str})")


def log_api_response(logger, response: Any, truncate: int = 200):
    """
    Log an API response (DEBUG level), truncated to `truncate` characters.
    """
    response_str = str(response)
    if len(response_str) > truncate:
        response_str = response_str[:truncate] + '...'
    logger.debug(f"API response: {response_str}")
