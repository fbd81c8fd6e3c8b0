"""
WMI provider exceptions.
"""


class WmiError(Exception):
    """Base class for failures surfaced by the WMI provider."""
    pass


class WmiConnectionError(WmiError):
    """Raised when the locator cannot reach the provider."""
    pass


class WmiProviderError(WmiError):
    """Raised when the provider rejects a lookup, listing or inspection."""

    def __init__(self, message: str, hresult: int | None = None):
        super().__init__(message)
        self.hresult = hresult
