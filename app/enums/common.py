"""
Common Enumerations
====================

Enums shared by the entry store, the analytics services and the
application call boundary.
"""

from enum import Enum


class TrendDirection(str, Enum):
    """
    Direction of a tracked metric between its first and last sample.
    Used by: trend_analytics_service, log_book_service
    """
    UP = "up"
    DOWN = "down"
    STEADY = "steady"

    def __str__(self) -> str:
        return self.value


class FieldKind(str, Enum):
    """
    Shape of a single value in an entry's ``data`` record.
    Used by: diff engine, payload normalization
    """
    SCALAR = "scalar"
    ROW_LIST = "row_list"
    RECORD = "record"

    def __str__(self) -> str:
        return self.value


class StoreBackend(str, Enum):
    """
    Entry store implementations selectable at startup.
    Used by: config, store_factory
    """
    AUTO = "auto"
    SQLITE = "sqlite"
    JSON = "json"

    def __str__(self) -> str:
        return self.value


class NotificationLevel(str, Enum):
    """
    Severity of a user-visible notification.
    Used by: log_book_service
    """
    INFO = "info"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value
