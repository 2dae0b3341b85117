# -*- coding: utf-8 -*-
"""
Intake validation for loader output.

The loader hands over line catalogs and ridership batches as dataclass
instances, plain mappings, or pandas DataFrames. Everything is rebuilt into
validated value objects here. A malformed record is rejected and counted;
it never aborts the run. Only an empty catalog or an empty batch does.
"""
import datetime as dt
import logging
import numbers
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

import pandas as pd

from transitopt.errors import EmptyInputError, ValidationError
from transitopt.models import Line, RidershipRecord
from transitopt.utils import normalize_hour

logger = logging.getLogger(__name__)

LINE_FIELDS = (
    "origin", "destination", "distance_km", "trip_duration_min", "fare", "status",
)
RECORD_COUNT_FIELDS = ("boardings", "alightings", "occupancy", "capacity")


@dataclass(frozen=True)
class Rejection:
    kind: str  # "line" or "record"
    index: int
    reason: str


@dataclass(frozen=True)
class IntakeReport:
    lines_accepted: int
    records_accepted: int
    rejections: List[Rejection] = field(default_factory=list)

    @property
    def lines_rejected(self) -> int:
        return sum(1 for r in self.rejections if r.kind == "line")

    @property
    def records_rejected(self) -> int:
        return sum(1 for r in self.rejections if r.kind == "record")

    def reason_counts(self) -> Dict[str, int]:
        """Rejection tally per reason, most frequent first."""
        return dict(Counter(r.reason for r in self.rejections).most_common())


@dataclass(frozen=True)
class ValidatedBatch:
    lines: List[Line]
    records: List[RidershipRecord]
    report: IntakeReport


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _rows(items):
    if isinstance(items, pd.DataFrame):
        return items.to_dict("records")
    return list(items)


def _require_mapping(row):
    if not isinstance(row, Mapping):
        raise ValidationError(f"expected a mapping, got {type(row).__name__}")


def _field(row: Mapping, name: str):
    if name not in row:
        raise ValidationError(f"missing field '{name}'")
    return row[name]


def _coerce_int(name, value):
    if value is None or (isinstance(value, float) and pd.isna(value)):
        raise ValidationError(f"{name} is missing")
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{name} must be an integer, got {value!r}")


def _coerce_date(value):
    if value is None:
        return None
    if not isinstance(value, str):
        if not pd.api.types.is_scalar(value):
            raise ValidationError(f"unrecognized date: {value!r}")
        if pd.isna(value):
            return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"unrecognized date: {value!r}")


def line_from_mapping(row: Mapping) -> Line:
    _require_mapping(row)
    kwargs = {k: row[k] for k in LINE_FIELDS if k in row and not _is_blank(row[k])}
    for name in ("trip_duration_min", "fare"):
        if name in kwargs:
            kwargs[name] = _coerce_int(name, kwargs[name])
    if "distance_km" in kwargs:
        try:
            kwargs["distance_km"] = float(kwargs["distance_km"])
        except (TypeError, ValueError):
            raise ValidationError(f"distance_km must be a number, got {kwargs['distance_km']!r}")
    return Line(
        id=_coerce_int("id", _field(row, "id")),
        name=_field(row, "name"),
        current_frequency_min=_coerce_int(
            "current_frequency_min", _field(row, "current_frequency_min")
        ),
        **kwargs,
    )


def record_from_mapping(row: Mapping) -> RidershipRecord:
    _require_mapping(row)
    counts = {name: _coerce_int(name, _field(row, name)) for name in RECORD_COUNT_FIELDS}
    record_id = row.get("record_id", row.get("id"))
    return RidershipRecord(
        line_id=_coerce_int("line_id", _field(row, "line_id")),
        stop_id=_coerce_int("stop_id", _field(row, "stop_id")),
        hour=normalize_hour(_field(row, "hour")),
        date=_coerce_date(row.get("date")),
        record_id=None if _is_blank(record_id) else _coerce_int("record_id", record_id),
        **counts,
    )


def _is_blank(value):
    return value is None or (isinstance(value, float) and pd.isna(value))


# ---------------------------------------------------------------------------
# Batch validation
# ---------------------------------------------------------------------------

def validate_lines(items):
    """Build the line catalog, returning (lines, rejections)."""
    lines, rejections = [], []
    seen = set()
    for index, item in enumerate(_rows(items)):
        try:
            line = item if isinstance(item, Line) else line_from_mapping(item)
        except ValidationError as e:
            rejections.append(Rejection("line", index, str(e)))
            continue
        if line.id in seen:
            rejections.append(Rejection("line", index, f"duplicate line id {line.id}"))
            continue
        seen.add(line.id)
        lines.append(line)
    return lines, rejections


def validate_records(items, known_line_ids=None):
    """Build the ridership batch, returning (records, rejections).

    When ``known_line_ids`` is given, records pointing at other lines are
    rejected.
    """
    records, rejections = [], []
    for index, item in enumerate(_rows(items)):
        try:
            record = item if isinstance(item, RidershipRecord) else record_from_mapping(item)
        except ValidationError as e:
            rejections.append(Rejection("record", index, str(e)))
            continue
        if known_line_ids is not None and record.line_id not in known_line_ids:
            rejections.append(Rejection("record", index, "unknown line_id"))
            continue
        records.append(record)
    return records, rejections


def validate_batch(lines, records) -> ValidatedBatch:
    """Validate a line catalog and ridership batch together.

    Raises:
        EmptyInputError: the catalog or the batch is empty, as given or once
            malformed entries are dropped.
    """
    line_rows = _rows(lines)
    record_rows = _rows(records)
    if not line_rows:
        raise EmptyInputError("line catalog is empty")
    if not record_rows:
        raise EmptyInputError("ridership batch is empty")

    valid_lines, line_rejections = validate_lines(line_rows)
    if not valid_lines:
        raise EmptyInputError(
            f"no valid line in catalog ({len(line_rejections)} rejected)"
        )
    valid_records, record_rejections = validate_records(
        record_rows, known_line_ids={line.id for line in valid_lines}
    )
    if not valid_records:
        raise EmptyInputError(
            f"no valid ridership record ({len(record_rejections)} rejected)"
        )

    report = IntakeReport(
        lines_accepted=len(valid_lines),
        records_accepted=len(valid_records),
        rejections=line_rejections + record_rejections,
    )
    if report.rejections:
        logger.warning(
            "Intake rejected %d line(s) and %d record(s): %s",
            report.lines_rejected, report.records_rejected, report.reason_counts(),
        )
    return ValidatedBatch(lines=valid_lines, records=valid_records, report=report)
