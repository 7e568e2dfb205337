"""
Enums Module
============

This module provides enumeration types for the greenhouse log.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.common import FieldKind, NotificationLevel, StoreBackend, TrendDirection

__all__ = [
    "FieldKind",
    "NotificationLevel",
    "StoreBackend",
    "TrendDirection",
]
