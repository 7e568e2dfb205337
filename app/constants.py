"""
Application Constants
=====================

Centralized constants for storage keys, schema versions and trend tolerances.
Organized by concern for easy discovery and maintenance.

Usage:
    from app.constants import StorageKeys, TrendTolerances
"""

# =============================================================================
# Storage
# =============================================================================

class StorageKeys:
    """Well-known keys in the local key-value store."""
    DRAFT = "greenhouse-log"
    ENTRIES = "greenhouse-log-entries"


class EntrySchema:
    """Indexed entry store layout."""
    TABLE = "entries"
    VERSION = 1  # bump to trigger table / index creation on next open


# =============================================================================
# Entries & Export
# =============================================================================

BUSINESS_DATE_FIELD = "meta_date"
ENTRY_ID_FALLBACK_BASE = "eintrag"
EXPORT_FILE_PREFIX = "tagesprotokoll"
EXPORT_INDENT = 2

# Payload keys copied into an entry's meta block
META_FIELDS: dict[str, str] = {
    "date": "meta_date",
    "zone": "meta_zone",
    "responsible": "meta_responsible",
    "shift": "meta_shift",
}


# =============================================================================
# Analytics
# =============================================================================

class TrendTolerances:
    """Default minimum change before a trend counts as rising or falling."""
    COUNT_OR_MINUTES = 0.75  # units "#" and "min"
    HOURS = 0.1              # unit "h"
    RELATIVE = 0.03          # share of the first sample's magnitude
    FLOOR = 0.2              # lower bound for the relative tolerance


MIN_ENTRIES_FOR_STATISTICS = 2
MIN_TREND_SAMPLES = 2
RECENT_SUMMARY_LIMIT = 5
