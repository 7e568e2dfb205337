"""
Change Statistics Service
=========================

Aggregates how entries change from one day to the next.

Consecutive entries (in chronological order) are diffed field by field; the
service reports how often each field changed, the average number of changed
fields per compared pair and a per-entry summary of what changed.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.constants import MIN_ENTRIES_FOR_STATISTICS, RECENT_SUMMARY_LIMIT
from app.domain.diff import diff_records
from app.domain.log_record import humanize_field_name
from app.models.log_entry import LogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldChangeCount:
    field: str
    label: str
    count: int


@dataclass(frozen=True)
class EntrySummary:
    """What changed in one entry compared with its predecessor."""

    id: str
    date: str
    created_at: str
    count: int
    fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChangeStatistics:
    total_entries: int
    compared_pairs: int
    avg_changes: float
    top_fields: list[FieldChangeCount]
    per_entry: list[EntrySummary]


class ChangeStatisticsService:
    """Change frequency analytics over a chronological entry sequence."""

    def __init__(self, min_entries: int = MIN_ENTRIES_FOR_STATISTICS):
        self.min_entries = max(2, min_entries)

    def aggregate(self, entries: Sequence[LogEntry]) -> ChangeStatistics | None:
        """
        Diff each consecutive pair of entries and aggregate the results.

        Args:
            entries: Entries sorted oldest first

        Returns:
            ChangeStatistics, or None when there are too few entries to compare
        """
        if len(entries) < self.min_entries:
            return None

        change_counter: Counter[str] = Counter()
        per_entry: list[EntrySummary] = []
        total_changed = 0

        for previous, current in zip(entries, entries[1:]):
            diff = diff_records(previous.data, current.data)
            total_changed += diff.count
            change_counter.update(diff.changed_fields)
            per_entry.append(
                EntrySummary(
                    id=current.id,
                    date=current.business_date,
                    created_at=current.created_at,
                    count=diff.count,
                    fields=list(diff.changed_fields),
                )
            )

        # Counter.most_common keeps first-seen order for equal counts
        top_fields = [
            FieldChangeCount(field=name, label=humanize_field_name(name), count=count)
            for name, count in change_counter.most_common()
        ]
        compared_pairs = len(entries) - 1
        stats = ChangeStatistics(
            total_entries=len(entries),
            compared_pairs=compared_pairs,
            avg_changes=total_changed / compared_pairs,
            top_fields=top_fields,
            per_entry=per_entry,
        )
        logger.debug(
            "Aggregated %s entries: %.2f changed fields per pair", stats.total_entries, stats.avg_changes
        )
        return stats

    @staticmethod
    def recent_summaries(stats: ChangeStatistics | None, limit: int = RECENT_SUMMARY_LIMIT) -> list[EntrySummary]:
        """Newest-first slice of the per-entry summaries."""
        if stats is None or limit <= 0:
            return []
        return list(reversed(stats.per_entry[-limit:]))
