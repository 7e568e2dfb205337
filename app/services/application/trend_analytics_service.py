"""
Trend Analytics Service
=======================

Classifies each tracked numeric metric as rising, falling or steady across
the stored history.

For every metric the service collects one sample per entry that carries a
usable number, compares the last sample against the first (overall delta)
and against the one before it (step delta), and applies the metric's
tolerance to decide the direction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from app.constants import MIN_TREND_SAMPLES
from app.domain.chronology import entry_date, sort_chronologically
from app.domain.trend_metrics import TRACKED_METRICS, TrendMetric
from app.enums.common import TrendDirection
from app.models.log_entry import LogEntry
from app.utils.normalization import numeric_of
from app.utils.time import normalize_date_for_sort

logger = logging.getLogger(__name__)

_DIRECTION_RANK = {TrendDirection.UP: 0, TrendDirection.DOWN: 1, TrendDirection.STEADY: 2}


@dataclass(frozen=True, slots=True)
class TrendSample:
    value: float
    date: str
    sort_key: str


@dataclass(frozen=True)
class TrendResult:
    key: str
    label: str
    unit: str
    direction: TrendDirection
    delta: float
    step_delta: float
    first_value: float
    last_value: float
    samples: int
    latest_date: str


class TrendAnalyticsService:
    """Per-metric trend classification over the entry history."""

    def __init__(self, metrics: Sequence[TrendMetric] = TRACKED_METRICS):
        self.metrics = tuple(metrics)

    @staticmethod
    def collect_samples(metric: TrendMetric, entries: Iterable[LogEntry]) -> list[TrendSample]:
        """Samples sorted by date; entries without a usable number are skipped."""
        samples = []
        for entry in entries:
            value = numeric_of(entry.data.get(metric.key))
            if value is None:
                continue
            date = entry_date(entry)
            samples.append(TrendSample(value=value, date=date, sort_key=normalize_date_for_sort(date)))
        samples.sort(key=lambda sample: sample.sort_key)
        return samples

    def analyze_metric(self, metric: TrendMetric, entries: Iterable[LogEntry]) -> TrendResult | None:
        """
        Classify one metric.

        Returns:
            TrendResult, or None when fewer than two samples exist
        """
        samples = self.collect_samples(metric, entries)
        if len(samples) < MIN_TREND_SAMPLES:
            return None

        first, previous, last = samples[0], samples[-2], samples[-1]
        delta = last.value - first.value
        step_delta = last.value - previous.value
        tolerance = metric.tolerance_for(first.value)

        if abs(delta) <= tolerance:
            direction = TrendDirection.STEADY
        else:
            direction = TrendDirection.UP if delta > 0 else TrendDirection.DOWN

        return TrendResult(
            key=metric.key,
            label=metric.label,
            unit=metric.unit or "",
            direction=direction,
            delta=delta,
            step_delta=step_delta,
            first_value=first.value,
            last_value=last.value,
            samples=len(samples),
            latest_date=last.date,
        )

    def analyze(self, entries: Iterable[LogEntry]) -> list[TrendResult]:
        """Analyze every tracked metric and return results in display order."""
        chronological = sort_chronologically(entries)
        results = [result for metric in self.metrics if (result := self.analyze_metric(metric, chronological))]
        logger.debug("Trend analysis produced %s of %s metrics", len(results), len(self.metrics))
        return self.order_results(results)

    @staticmethod
    def order_results(results: Iterable[TrendResult]) -> list[TrendResult]:
        """Rising first, then falling, then steady; larger changes first within a group."""
        return sorted(results, key=lambda result: (_DIRECTION_RANK[result.direction], -abs(result.delta)))

    @staticmethod
    def summarize_directions(results: Iterable[TrendResult]) -> dict[TrendDirection, int]:
        counts = {direction: 0 for direction in TrendDirection}
        for result in results:
            counts[result.direction] += 1
        return counts
