"""Core SchemaCanvas utilities.

This module exports core utilities for use throughout the application.
"""

from schemacanvas.core.config import Settings, get_settings
from schemacanvas.core.logging import configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
