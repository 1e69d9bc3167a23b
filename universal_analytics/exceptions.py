"""Exception types raised by the tracking client."""

from typing import Optional


class UniversalAnalyticsError(Exception):
    """Base error for the tracking client."""

    pass


class ConfigurationError(UniversalAnalyticsError):
    """Invalid tracker configuration or hit type."""

    pass


class DispatchError(UniversalAnalyticsError):
    """A single dispatch unit could not be delivered to the collector."""

    def __init__(self, message: str, unit_index: int, status_code: Optional[int] = None):
        super().__init__(message)
        self.unit_index = unit_index
        self.status_code = status_code
