"""
Trend Metrics
=============
Numeric log fields tracked for trend analysis, with their display unit and
the tolerance rule deciding when a change counts as rising or falling.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.constants import TrendTolerances
from app.domain.log_record import humanize_field_name


@dataclass(frozen=True, slots=True)
class TrendMetric:
    """A tracked numeric field."""

    key: str
    unit: str = ""
    tolerance: float | None = None

    @property
    def label(self) -> str:
        return humanize_field_name(self.key)

    def tolerance_for(self, first_value: float) -> float:
        """
        Minimum absolute change for a non-steady trend.

        An explicit non-negative tolerance wins. Otherwise counts and minutes
        use 0.75, hours 0.1, and everything else 3% of the first sample's
        magnitude, floored at 0.2 so near-zero baselines do not read as steady.
        """
        if self.tolerance is not None and self.tolerance >= 0:
            return self.tolerance
        unit = (self.unit or "").lower()
        if unit in ("#", "min"):
            return TrendTolerances.COUNT_OR_MINUTES
        if unit == "h":
            return TrendTolerances.HOURS
        return max(TrendTolerances.FLOOR, abs(first_value or 0) * TrendTolerances.RELATIVE)


TRACKED_METRICS: tuple[TrendMetric, ...] = (
    TrendMetric("climate_inside_temp_min", "C"),
    TrendMetric("climate_inside_temp_max", "C"),
    TrendMetric("climate_inside_temp_avg", "C"),
    TrendMetric("climate_outside_temp_min", "C"),
    TrendMetric("climate_outside_temp_max", "C"),
    TrendMetric("climate_outside_temp_avg", "C"),
    TrendMetric("climate_rh_min", "%"),
    TrendMetric("climate_rh_max", "%"),
    TrendMetric("climate_rh_avg", "%"),
    TrendMetric("climate_dewpoint_min", "C"),
    TrendMetric("climate_dewpoint_max", "C"),
    TrendMetric("climate_dewpoint_avg", "C"),
    TrendMetric("climate_vpd_min", "kPa"),
    TrendMetric("climate_vpd_max", "kPa"),
    TrendMetric("climate_vpd_avg", "kPa"),
    TrendMetric("climate_co2_min", "ppm"),
    TrendMetric("climate_co2_max", "ppm"),
    TrendMetric("climate_co2_avg", "ppm"),
    TrendMetric("climate_co21000_duration", "min"),
    TrendMetric("light_dli_value", "mol m-2 d-1"),
    TrendMetric("light_ppfd_value", "umol m-2 s-1"),
    TrendMetric("light_hours_value", "h"),
    TrendMetric("light_outage_count", "#"),
    TrendMetric("pest_traps_count", "#"),
)
