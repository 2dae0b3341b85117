# -*- coding: utf-8 -*-
"""
Occupancy Aggregator
====================
Reduces a batch of RidershipRecord into OccupancyAggregate entries keyed by
line, (line, hour) or (line, time-of-day bucket).

    mean_occupancy_ratio(key) = Σ (occupancy / capacity) / n_rated

Only records with capacity > 0 enter the ratio. Each key keeps the
(sum, count) pair and converts to a mean once at the end, so partial
reductions can be merged without weighting bias. Boarding and alighting
totals are plain sums over every record of the key.
"""
from enum import Enum
from typing import List

import numpy as np
import pandas as pd

from transitopt.models import (
    BucketTotal,
    OccupancyAggregate,
    RidershipRecord,
    RidershipSummary,
    TimeOfDayBucket,
    bucket_for_hour,
)

RECORD_COLUMNS = [
    "line_id", "stop_id", "hour", "boardings", "alightings", "occupancy", "capacity",
]
BUCKET_ORDER = list(TimeOfDayBucket)


class GroupBy(str, Enum):
    LINE = "line"
    LINE_HOUR = "line_hour"
    LINE_BUCKET = "line_bucket"


_GROUP_KEYS = {
    GroupBy.LINE: ["line_id"],
    GroupBy.LINE_HOUR: ["line_id", "hour"],
    GroupBy.LINE_BUCKET: ["line_id", "bucket_rank"],
}


def records_to_frame(records: List[RidershipRecord]) -> pd.DataFrame:
    """Tabulate records, with per-record ratio columns, in a canonical order.

    Rows are sorted on every column so downstream float sums do not depend
    on the order the loader produced.
    """
    df = pd.DataFrame(
        [[getattr(r, c) for c in RECORD_COLUMNS] for r in records],
        columns=RECORD_COLUMNS,
        dtype="int64",
    )
    df = df.sort_values(RECORD_COLUMNS, kind="mergesort").reset_index(drop=True)

    rated = df["capacity"] > 0
    df["rated"] = rated.astype("int64")
    df["ratio"] = np.where(rated, df["occupancy"] / df["capacity"].clip(lower=1), 0.0)
    df["bucket_rank"] = df["hour"].map(
        lambda h: BUCKET_ORDER.index(bucket_for_hour(int(h)))
    ).astype("int64")
    return df


def _mean_or_none(ratio_sum, rated_count):
    if rated_count == 0:
        return None
    return float(ratio_sum) / int(rated_count)


def aggregate_occupancy(records, by=GroupBy.LINE) -> List[OccupancyAggregate]:
    """One OccupancyAggregate per distinct key present in ``records``.

    Keys whose records all have capacity 0 get ``mean_occupancy_ratio=None``.
    Output is sorted by key.
    """
    by = GroupBy(by)
    records = list(records)
    if not records:
        return []

    df = records_to_frame(records)
    keys = _GROUP_KEYS[by]
    grouped = (
        df.groupby(keys, sort=True)
        .agg(
            total_boardings=("boardings", "sum"),
            total_alightings=("alightings", "sum"),
            record_count=("boardings", "size"),
            rated_count=("rated", "sum"),
            ratio_sum=("ratio", "sum"),
        )
        .reset_index()
    )

    aggregates = []
    for row in grouped.itertuples(index=False):
        aggregates.append(OccupancyAggregate(
            line_id=int(row.line_id),
            mean_occupancy_ratio=_mean_or_none(row.ratio_sum, row.rated_count),
            total_boardings=int(row.total_boardings),
            total_alightings=int(row.total_alightings),
            record_count=int(row.record_count),
            rated_count=int(row.rated_count),
            hour=int(row.hour) if by is GroupBy.LINE_HOUR else None,
            bucket=BUCKET_ORDER[int(row.bucket_rank)] if by is GroupBy.LINE_BUCKET else None,
        ))
    return aggregates


def summarize_ridership(records) -> RidershipSummary:
    """Network-wide totals over the whole batch."""
    records = list(records)
    if not records:
        return RidershipSummary(
            total_passengers=0,
            mean_boardings_per_stop=0.0,
            mean_alightings_per_stop=0.0,
            mean_occupancy_ratio=None,
        )

    df = records_to_frame(records)
    by_bucket = (
        df.groupby("bucket_rank", sort=True)[["boardings", "alightings"]]
        .sum()
        .reset_index()
    )
    bucket_totals = [
        BucketTotal(
            bucket=BUCKET_ORDER[int(row.bucket_rank)],
            total_boardings=int(row.boardings),
            total_alightings=int(row.alightings),
        )
        for row in by_bucket.itertuples(index=False)
    ]
    return RidershipSummary(
        total_passengers=int(df["boardings"].sum()),
        mean_boardings_per_stop=float(df["boardings"].mean()),
        mean_alightings_per_stop=float(df["alightings"].mean()),
        mean_occupancy_ratio=_mean_or_none(df["ratio"].sum(), df["rated"].sum()),
        bucket_totals=bucket_totals,
    )
