"""
Tagsmith Core Module
====================

Configuration shared by the compiler and the command line.
"""

from tagsmith.core.config import Config, ConfigError, ConfigSource, load_config

__all__ = [
    "Config",
    "ConfigError",
    "ConfigSource",
    "load_config",
]
