"""Measurement Protocol tracking client with client-side batching."""

from universal_analytics.config import TrackerConfig
from universal_analytics.exceptions import ConfigurationError, DispatchError, UniversalAnalyticsError
from universal_analytics.sync.dispatcher import SendResult
from universal_analytics.sync.queue import BatchingPolicy
from universal_analytics.visitor import HIT_TYPES, Visitor, init

__version__ = "0.1.0"

__all__ = [
    "BatchingPolicy",
    "ConfigurationError",
    "DispatchError",
    "HIT_TYPES",
    "SendResult",
    "TrackerConfig",
    "UniversalAnalyticsError",
    "Visitor",
    "init",
]
