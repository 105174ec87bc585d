"""
Utility functions for the crudapi package.

This module provides logging helpers shared by every demo app.
"""

from crudapi.utils.logging_utils import get_logger, get_service_logger, setup_logger

__all__ = [
    "get_logger",
    "get_service_logger",
    "setup_logger",
]
