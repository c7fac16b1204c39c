"""Configuration management for Marten."""

from .parser import (
    CONFIG_FILE_NAME,
    DEFAULT_SERVER_VERSION,
    MartenConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_SERVER_VERSION",
    "MartenConfig",
    "load_config",
    "find_config_file",
]
