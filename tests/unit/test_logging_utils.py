"""
Tests for the logging helpers.
"""

import logging

from crudapi.utils.logging_utils import (
    get_service_logger,
    sanitize_name_for_path,
    setup_logger,
)


def test_sanitize_name_for_path():
    assert sanitize_name_for_path("Users API/v1") == "users_api_v1"
    assert sanitize_name_for_path("...") == "general"


def test_service_logger_writes_file(tmp_path, env_vars):
    env_vars(CRUDAPI_LOG_DIR=str(tmp_path))

    logger = get_service_logger("Logging Test", "requests")
    logger.info("GET /health -> 200")
    for handler in logger.handlers:
        handler.flush()

    log_file = tmp_path / "logging_test" / "requests.log"
    assert "GET /health -> 200" in log_file.read_text()
    assert logger.propagate is False


def test_service_logger_is_reused(tmp_path, env_vars):
    env_vars(CRUDAPI_LOG_DIR=str(tmp_path))

    first = get_service_logger("reuse_test", "server")
    second = get_service_logger("reuse_test", "server")

    assert first is second
    assert len(second.handlers) == 2


def test_setup_logger_replaces_handlers():
    logger = setup_logger("crudapi.test_setup", level=logging.DEBUG)
    logger = setup_logger("crudapi.test_setup", level=logging.DEBUG)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
