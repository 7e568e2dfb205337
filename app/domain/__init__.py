"""
Domain Package
==============
Record shape rules, change detection, chronology and tracked trend metrics
for the greenhouse daily log. Everything here is pure and synchronous.
"""

from .diff import RecordDiff, diff_records
from .exceptions import (
    ConfigurationError,
    GreenhouseLogError,
    MalformedDraftError,
    StorageError,
    StorageInitError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from .trend_metrics import TRACKED_METRICS, TrendMetric

__all__ = [
    # Change detection
    "RecordDiff",
    "diff_records",
    # Trends
    "TRACKED_METRICS",
    "TrendMetric",
    # Errors
    "ConfigurationError",
    "GreenhouseLogError",
    "MalformedDraftError",
    "StorageError",
    "StorageInitError",
    "StorageReadError",
    "StorageWriteError",
    "ValidationError",
]
