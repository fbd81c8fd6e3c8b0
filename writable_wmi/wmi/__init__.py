"""
WMI provider binding.
"""

from writable_wmi.wmi.errors import WmiError, WmiConnectionError, WmiProviderError
from writable_wmi.wmi.client import WmiClient, WmiClass

__all__ = [
    "WmiClient",
    "WmiClass",
    "WmiError",
    "WmiConnectionError",
    "WmiProviderError",
]
