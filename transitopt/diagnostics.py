# -*- coding: utf-8 -*-
"""Critical-line detection and peak-hour rankings."""
from typing import List

from transitopt.aggregation import records_to_frame
from transitopt.errors import InsufficientDataError, ValidationError
from transitopt.models import CriticalLine, HourTotal, PeakHours

DEFAULT_CRITICAL_THRESHOLD = 0.75
DEFAULT_PEAK_TOP_N = 3


def identify_critical_lines(aggregates, lines, threshold=DEFAULT_CRITICAL_THRESHOLD) -> List[CriticalLine]:
    """Lines whose mean occupancy ratio is at or above ``threshold``.

    Sorted by ratio, highest first; ties keep the order of ``aggregates``.
    Aggregates without a ratio are never critical.
    """
    aggregates = list(aggregates)
    if any(agg.hour is not None or agg.bucket is not None for agg in aggregates):
        raise ValidationError("identify_critical_lines needs per-line aggregates")
    names = {line.id: line.name for line in lines}
    critical = [
        CriticalLine(
            line_id=agg.line_id,
            line_name=names.get(agg.line_id),
            mean_occupancy_ratio=agg.mean_occupancy_ratio,
        )
        for agg in aggregates
        if agg.has_ratio and agg.mean_occupancy_ratio >= threshold
    ]
    # sorted() is stable
    return sorted(critical, key=lambda c: c.mean_occupancy_ratio, reverse=True)


def hourly_totals(records) -> List[HourTotal]:
    """Boardings and alightings per hour of day across all lines, by hour."""
    records = list(records)
    if not records:
        return []
    df = records_to_frame(records)
    per_hour = df.groupby("hour", sort=True)[["boardings", "alightings"]].sum().reset_index()
    return [
        HourTotal(
            hour=int(row.hour),
            total_boardings=int(row.boardings),
            total_alightings=int(row.alightings),
        )
        for row in per_hour.itertuples(index=False)
    ]


def top_hours(totals, key, top_n=DEFAULT_PEAK_TOP_N) -> List[HourTotal]:
    """Up to ``top_n`` hours by ``key`` descending, earlier hour first on ties."""
    if top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")
    ranked = sorted(totals, key=lambda t: (-getattr(t, key), t.hour))
    return ranked[:top_n]


def analyze_peak_hours(records, top_n=DEFAULT_PEAK_TOP_N, strict=False) -> PeakHours:
    """Busiest hours by boardings and, separately, by alightings.

    Returns as many hours as the batch has, up to ``top_n``. With
    ``strict=True`` a batch covering fewer than ``top_n`` distinct hours
    raises InsufficientDataError instead.
    """
    totals = hourly_totals(records)
    if strict and len(totals) < top_n:
        raise InsufficientDataError(top_n, len(totals), what="hours")
    return PeakHours(
        by_boardings=top_hours(totals, "total_boardings", top_n),
        by_alightings=top_hours(totals, "total_alightings", top_n),
    )
