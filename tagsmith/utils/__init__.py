"""
Tagsmith Utils Package
======================

Logging utilities.
"""

from __future__ import annotations

from tagsmith.utils.logger import Logger, LogLevel, get_logger, configure_logging

__all__ = [
    "Logger",
    "LogLevel",
    "get_logger",
    "configure_logging",
]
