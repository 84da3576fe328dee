# utils.py
"""
Utility functions shared by the Schotter components.

Logging set-up, configuration loading and the configuration error type live
here; none of them belong to the grid, the animator or the renderer.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any
from constants import (
    DEFAULT_LOG_FILE, DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, LOG_BACKUP_COUNT,
    LOG_MAX_BYTES
)

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" section holding
#       "level", "format" and "log_file".
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and a rotating file handler. Creates the log directory.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON document.
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged, re-raised).
#
# fail_config(message: str) -> NoReturn:
#   - Side Effects: Logs the message at CRITICAL.
#   - Raises: ConfigurationError(message).


class ConfigurationError(ValueError):
    """Raised when a configuration value would produce degenerate output."""


def fail_config(message: str):
    """Logs a configuration problem and raises it."""
    logging.critical(message)
    raise ConfigurationError(message)


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', DEFAULT_LOG_LEVEL).upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.info(f"Logging to console and {log_file_path} at level {log_level}.")
    logging.debug(f"Log rotation: {LOG_MAX_BYTES} bytes per file, {LOG_BACKUP_COUNT} backups.")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise
    if not isinstance(config, dict):
        fail_config(f"Configuration error: {path} must contain a JSON object, got {type(config).__name__}.")
    logging.info("Configuration loaded successfully.")
    return config
