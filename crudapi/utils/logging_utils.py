"""
Logging utilities for crudapi.

This module provides consistent logging configuration and utility functions
for the crudapi package.
"""

import logging
import os
import re
import sys
from pathlib import Path


def sanitize_name_for_path(name: str) -> str:
    """
    Sanitize a service or component name for use as a directory name.

    Args:
        name: Raw name (e.g. "database_app" or "Users API")

    Returns:
        Sanitized name safe for use as directory name
    """
    # Replace invalid characters with underscores
    sanitized = re.sub(r'[<>:"/\\|?*@.\s]', "_", name.lower())
    # Remove any consecutive underscores
    sanitized = re.sub(r"_+", "_", sanitized)
    # Remove leading/trailing underscores
    sanitized = sanitized.strip("_")
    return sanitized or "general"


def get_service_log_dir(service: str) -> Path:
    """
    Get the log directory for a specific service.

    The root is taken from CRUDAPI_LOG_DIR when set, otherwise ``logs/`` in the
    project root.

    Args:
        service: Service name

    Returns:
        Path to the service's log directory
    """
    log_root = os.environ.get("CRUDAPI_LOG_DIR")
    if log_root:
        logs_root = Path(log_root)
    else:
        # Project root is 3 levels up from this file
        logs_root = Path(__file__).parent.parent.parent / "logs"

    service_log_dir = logs_root / sanitize_name_for_path(service)
    service_log_dir.mkdir(parents=True, exist_ok=True)

    return service_log_dir


def _level_from_env(level=None):
    if level is None:
        level_name = os.environ.get("CRUDAPI_LOG_LEVEL", "INFO")
        level = getattr(logging, level_name.upper(), logging.INFO)
    return level


def setup_service_logger(service: str, component=None, level=None):
    """
    Configure and return a service-specific logger with consistent formatting.

    Records go to stdout and to ``<log dir>/<service>/<component>.log``.

    Args:
        service: Service name (one per demo app)
        component: Component name inside the service (defaults to "general")
        level: Logging level (defaults to INFO if None or if env var not set)

    Returns:
        Configured logger instance
    """
    level = _level_from_env(level)

    sanitized_service = sanitize_name_for_path(service)
    logger_name = (
        f"crudapi.{sanitized_service}.{component}"
        if component
        else f"crudapi.{sanitized_service}"
    )

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Prevent inheritance from parent loggers to avoid duplicate messages
    logger.propagate = False

    # Already configured: reuse handlers instead of opening the file again
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = get_service_log_dir(service) / f"{component or 'general'}.log"
    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.debug(
        f"Service logger setup for {service} - Component: {component} - Log file: {log_file}"
    )

    return logger


def get_service_logger(service: str, component=None):
    """
    Get a service-specific logger, creating it on first use.

    Args:
        service: Service name
        component: Component name (optional)

    Returns:
        Service-specific logger instance
    """
    return setup_service_logger(service, component)


def setup_logger(name=None, level=None, log_file=None):
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (defaults to root logger if None)
        level: Logging level (defaults to INFO if None or if env var not set)
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance
    """
    level = _level_from_env(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates when called multiple times
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name=None):
    """
    Get an existing logger or create a new one with default settings.

    Args:
        name: Logger name (optional)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    # If logger doesn't have handlers, set it up
    if not logger.hasHandlers():
        log_dir = os.environ.get("CRUDAPI_LOG_DIR")
        log_file = None

        if log_dir:
            log_filename = f"{name or 'crudapi'}.log"
            log_file = Path(log_dir) / log_filename

        logger = setup_logger(name, log_file=log_file)

    return logger
