import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union

from transitopt.models import Rationale, TimeOfDayBucket


# --- Request Schemas ---
# Shape only. Value invariants (positive headway, non-negative counts, hour
# range) are checked by the engine so one bad record does not fail the batch.

class LineIn(BaseModel):
    id: int
    name: str = Field(max_length=100)
    current_frequency_min: int
    origin: str = ""
    destination: str = ""
    distance_km: float = 0.0
    trip_duration_min: int = 0
    fare: int = 0
    status: str = "active"


class RecordIn(BaseModel):
    line_id: int
    stop_id: int
    hour: Union[int, str]  # 8, "08:15"
    boardings: int
    alightings: int
    occupancy: int
    capacity: int
    date: Optional[dt.date] = None
    record_id: Optional[int] = None


class BatchRequest(BaseModel):
    lines: List[LineIn]
    records: List[RecordIn]


class SensitivityRequest(BatchRequest):
    thresholds: Optional[List[float]] = Field(None, max_length=50)


class RecommendationIn(BaseModel):
    line_id: int
    current_frequency_min: int = Field(gt=0)
    recommended_frequency_min: int = Field(gt=0)
    line_name: str = ""
    mean_occupancy_ratio: float = 0.0
    efficiency_gain: float = 0.0
    rationale: Rationale = Rationale.OPTIMAL


class ImpactRequest(BaseModel):
    recommendations: List[RecommendationIn]


class CalibrationRequest(BaseModel):
    critical_threshold: Optional[float] = Field(None, ge=0.0, le=2.0)
    overload_threshold: Optional[float] = Field(None, ge=0.0, le=2.0)
    underuse_threshold: Optional[float] = Field(None, ge=0.0, le=2.0)
    frequency_step_min: Optional[int] = Field(None, ge=0, le=60)
    min_frequency_min: Optional[int] = Field(None, ge=1, le=240)
    max_frequency_min: Optional[int] = Field(None, ge=1, le=240)
    peak_top_n: Optional[int] = Field(None, ge=0, le=24)


# --- Response Schemas ---
# Built straight from the engine's result dataclasses (from_attributes).

class _FromEngine(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class RejectionOut(_FromEngine):
    kind: str
    index: int
    reason: str


class IntakeOut(_FromEngine):
    lines_accepted: int
    records_accepted: int
    lines_rejected: int
    records_rejected: int
    rejections: List[RejectionOut]


class AggregateOut(_FromEngine):
    line_id: int
    mean_occupancy_ratio: Optional[float] = None  # None: no usable capacity
    total_boardings: int
    total_alightings: int
    record_count: int
    rated_count: int
    hour: Optional[int] = None
    bucket: Optional[TimeOfDayBucket] = None


class BucketTotalOut(_FromEngine):
    bucket: TimeOfDayBucket
    total_boardings: int
    total_alightings: int


class SummaryOut(_FromEngine):
    total_passengers: int
    mean_boardings_per_stop: float
    mean_alightings_per_stop: float
    mean_occupancy_ratio: Optional[float] = None
    bucket_totals: List[BucketTotalOut]


class CriticalLineOut(_FromEngine):
    line_id: int
    line_name: Optional[str] = None
    mean_occupancy_ratio: float


class HourTotalOut(_FromEngine):
    hour: int
    total_boardings: int
    total_alightings: int


class PeakHoursOut(_FromEngine):
    by_boardings: List[HourTotalOut]
    by_alightings: List[HourTotalOut]


class RecommendationOut(_FromEngine):
    line_id: int
    line_name: str
    current_frequency_min: int
    recommended_frequency_min: int
    mean_occupancy_ratio: float
    efficiency_gain: float
    rationale: Rationale


class ExcludedLineOut(_FromEngine):
    line_id: int
    line_name: str
    reason: str


class OptimizationOut(_FromEngine):
    recommendations: List[RecommendationOut]
    excluded: List[ExcludedLineOut]


class ImpactOut(_FromEngine):
    impact_total: float
    lines_changed: int
    mean_impact_per_line: Optional[float] = None  # None when nothing changed


class AnalyzeResponse(_FromEngine):
    intake: IntakeOut
    summary: SummaryOut
    line_aggregates: List[AggregateOut]
    bucket_aggregates: List[AggregateOut]
    critical_lines: List[CriticalLineOut]
    peak_hours: PeakHoursOut
    optimization: OptimizationOut
    impact: ImpactOut


class RecommendResponse(_FromEngine):
    intake: IntakeOut
    optimization: OptimizationOut
    impact: ImpactOut


class CalibrationResponse(_FromEngine):
    critical_threshold: float
    overload_threshold: float
    underuse_threshold: float
    frequency_step_min: int
    min_frequency_min: int
    max_frequency_min: int
    peak_top_n: int


class SensitivityPointOut(_FromEngine):
    overload_threshold: float
    lines_changed: int
    impact_total: float
    overloaded_lines: int
