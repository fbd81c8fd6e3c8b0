"""
Configuration management for the enumeration tool.
"""

from writable_wmi.config.loader import (
    ConfigLoader,
    ToolConfig,
    ConnectionConfig,
    ScanConfig,
    LoggingConfig,
)

__all__ = [
    "ConfigLoader",
    "ToolConfig",
    "ConnectionConfig",
    "ScanConfig",
    "LoggingConfig",
]
