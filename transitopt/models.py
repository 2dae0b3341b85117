# -*- coding: utf-8 -*-
"""
Value objects for the ridership analysis engine.

Entities (Line, RidershipRecord) validate their invariants at construction
time and raise ValidationError, so nothing malformed ever reaches an
aggregate. Result types are plain frozen dataclasses, one field per named
statistic; they are produced fresh on every analysis run and never mutated.
"""
import datetime as dt
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from transitopt.errors import ValidationError

# Counts and ids are tabulated as int64.
INT64_MAX = 2 ** 63 - 1


def _require_int(name, value, minimum=0):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}")
    if value > INT64_MAX:
        raise ValidationError(f"{name} is out of range: {value}")


def _require_number(name, value, minimum=0.0):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value != value or value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}")


# ---------------------------------------------------------------------------
# Time of day
# ---------------------------------------------------------------------------

class TimeOfDayBucket(str, Enum):
    MORNING = "morning"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


# (first hour, last hour inclusive) -> bucket; hours not listed are NIGHT
_BUCKET_RANGES: Tuple[Tuple[int, int, TimeOfDayBucket], ...] = (
    (6, 8, TimeOfDayBucket.MORNING),
    (9, 11, TimeOfDayBucket.MIDDAY),
    (12, 15, TimeOfDayBucket.AFTERNOON),
    (16, 18, TimeOfDayBucket.EVENING),
)


def bucket_for_hour(hour: int) -> TimeOfDayBucket:
    """Map an hour of day (0-23) to its service bucket."""
    _require_int("hour", hour)
    if hour > 23:
        raise ValidationError(f"hour out of range 0-23: {hour}")
    for first, last, bucket in _BUCKET_RANGES:
        if first <= hour <= last:
            return bucket
    return TimeOfDayBucket.NIGHT


# ---------------------------------------------------------------------------
# Input entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Line:
    id: int
    name: str
    current_frequency_min: int
    origin: str = ""
    destination: str = ""
    distance_km: float = 0.0
    trip_duration_min: int = 0
    fare: int = 0
    status: str = "active"

    def __post_init__(self):
        _require_int("id", self.id)
        # headway is a divisor for efficiency_gain
        _require_int("current_frequency_min", self.current_frequency_min, minimum=1)
        _require_number("distance_km", self.distance_km)
        _require_int("trip_duration_min", self.trip_duration_min)
        _require_int("fare", self.fare)
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError(f"line {self.id}: name must be a non-empty string")


@dataclass(frozen=True)
class RidershipRecord:
    line_id: int
    stop_id: int
    hour: int
    boardings: int
    alightings: int
    occupancy: int
    capacity: int
    date: Optional[dt.date] = None
    record_id: Optional[int] = None

    def __post_init__(self):
        _require_int("line_id", self.line_id)
        _require_int("stop_id", self.stop_id)
        _require_int("hour", self.hour)
        if self.hour > 23:
            raise ValidationError(f"hour out of range 0-23: {self.hour}")
        for name in ("boardings", "alightings", "occupancy", "capacity"):
            _require_int(name, getattr(self, name))

    @property
    def occupancy_ratio(self) -> Optional[float]:
        """occupancy / capacity, or None when capacity is zero."""
        if self.capacity == 0:
            return None
        return self.occupancy / self.capacity

    @property
    def bucket(self) -> TimeOfDayBucket:
        return bucket_for_hour(self.hour)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OccupancyAggregate:
    line_id: int
    mean_occupancy_ratio: Optional[float]  # None: no record with capacity > 0
    total_boardings: int
    total_alightings: int
    record_count: int
    rated_count: int
    hour: Optional[int] = None
    bucket: Optional[TimeOfDayBucket] = None

    @property
    def has_ratio(self) -> bool:
        return self.mean_occupancy_ratio is not None


class Rationale(str, Enum):
    OVERLOADED = "Surcharge"
    UNDERUSED = "Sous-utilisation"
    OPTIMAL = "Optimal"


@dataclass(frozen=True)
class Recommendation:
    line_id: int
    line_name: str
    current_frequency_min: int
    recommended_frequency_min: int
    mean_occupancy_ratio: float
    efficiency_gain: float
    rationale: Rationale

    @property
    def changed(self) -> bool:
        return self.recommended_frequency_min != self.current_frequency_min


@dataclass(frozen=True)
class ExcludedLine:
    line_id: int
    line_name: str
    reason: str


@dataclass(frozen=True)
class OptimizationResult:
    recommendations: List[Recommendation]
    excluded: List[ExcludedLine]


@dataclass(frozen=True)
class ImpactSummary:
    impact_total: float
    lines_changed: int
    mean_impact_per_line: Optional[float]  # None when no line changed


@dataclass(frozen=True)
class CriticalLine:
    line_id: int
    line_name: Optional[str]
    mean_occupancy_ratio: float


@dataclass(frozen=True)
class HourTotal:
    hour: int
    total_boardings: int
    total_alightings: int


@dataclass(frozen=True)
class PeakHours:
    by_boardings: List[HourTotal]
    by_alightings: List[HourTotal]


@dataclass(frozen=True)
class BucketTotal:
    bucket: TimeOfDayBucket
    total_boardings: int
    total_alightings: int


@dataclass(frozen=True)
class RidershipSummary:
    total_passengers: int
    mean_boardings_per_stop: float
    mean_alightings_per_stop: float
    mean_occupancy_ratio: Optional[float]
    bucket_totals: List[BucketTotal] = field(default_factory=list)


@dataclass(frozen=True)
class SensitivityPoint:
    overload_threshold: float
    lines_changed: int
    impact_total: float
    overloaded_lines: int
