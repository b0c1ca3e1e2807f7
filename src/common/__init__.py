# Common utilities and shared modules
"""
Shared components used by the catalog package:
- Project configuration
- Logging configuration
"""

from .config import (
    CONFIG_DIR,
    DATA_DIR,
    PROJECT_ROOT,
    DatabaseSettings,
    LoggingSettings,
    Settings,
)
from .logging import setup_logging

__all__ = [
    "CONFIG_DIR",
    "DATA_DIR",
    "PROJECT_ROOT",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "setup_logging",
]
