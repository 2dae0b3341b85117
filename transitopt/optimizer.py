# -*- coding: utf-8 -*-
"""
Frequency Optimizer & Impact Evaluator
======================================
Per-line headway recommendation from mean occupancy ratio r and current
headway f (minutes):

    r > overload_threshold   ->  Surcharge         f' = max(f_min, f - step)
    r < underuse_threshold   ->  Sous-utilisation  f' = min(f_max, f + step)
    otherwise                ->  Optimal           f' = f

f' is finally clamped into [f_min, f_max]. Both thresholds are inclusive on
the Optimal side.

    efficiency_gain = |f - f'| / f

Impact uses the uniform-arrival wait model: wait(f) = f / 2, so a change
saves wait(f) - wait(f') minutes per passenger.
"""
import logging
import os
from dataclasses import dataclass, fields
from typing import Iterable, List

from transitopt.errors import NoDataError, ValidationError
from transitopt.models import (
    ExcludedLine,
    ImpactSummary,
    Line,
    OccupancyAggregate,
    OptimizationResult,
    Rationale,
    Recommendation,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "TRANSITOPT_"


@dataclass(frozen=True)
class OptimizerParams:
    critical_threshold: float = 0.75
    overload_threshold: float = 0.80
    underuse_threshold: float = 0.40
    frequency_step_min: int = 5
    min_frequency_min: int = 5
    max_frequency_min: int = 30
    peak_top_n: int = 3

    def __post_init__(self):
        if not 0.0 <= self.underuse_threshold <= self.overload_threshold:
            raise ValidationError(
                "underuse_threshold must be between 0 and overload_threshold "
                f"({self.underuse_threshold} / {self.overload_threshold})"
            )
        if self.critical_threshold < 0.0:
            raise ValidationError(f"critical_threshold must be >= 0, got {self.critical_threshold}")
        if self.frequency_step_min < 0:
            raise ValidationError(f"frequency_step_min must be >= 0, got {self.frequency_step_min}")
        if not 0 < self.min_frequency_min <= self.max_frequency_min:
            raise ValidationError(
                "frequency clamps must satisfy 0 < min <= max "
                f"({self.min_frequency_min} / {self.max_frequency_min})"
            )
        if self.peak_top_n < 0:
            raise ValidationError(f"peak_top_n must be >= 0, got {self.peak_top_n}")

    @classmethod
    def from_env(cls, environ=None):
        """Build params from TRANSITOPT_<FIELD> variables, defaults elsewhere."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[f.name] = int(raw) if f.type in (int, "int") else float(raw)
            except ValueError:
                raise ValidationError(f"{ENV_PREFIX}{f.name.upper()}: not a number: {raw!r}")
        return cls(**overrides)


# ---------------------------------------------------------------------------
# Decision policy
# ---------------------------------------------------------------------------

def classify(ratio: float, current_frequency_min: int, params: OptimizerParams):
    """Return (rationale, recommended headway) for one line."""
    if ratio > params.overload_threshold:
        rationale = Rationale.OVERLOADED
        proposed = max(params.min_frequency_min, current_frequency_min - params.frequency_step_min)
    elif ratio < params.underuse_threshold:
        rationale = Rationale.UNDERUSED
        proposed = min(params.max_frequency_min, current_frequency_min + params.frequency_step_min)
    else:
        rationale = Rationale.OPTIMAL
        proposed = current_frequency_min
    recommended = min(params.max_frequency_min, max(params.min_frequency_min, proposed))
    return rationale, recommended


def _ratio_for(line: Line, by_line) -> float:
    agg = by_line.get(line.id)
    if agg is None:
        raise NoDataError(line.id)
    if not agg.has_ratio:
        raise NoDataError(line.id, "no record with capacity > 0")
    return agg.mean_occupancy_ratio


def optimize_frequencies(
    aggregates: Iterable[OccupancyAggregate],
    lines: Iterable[Line],
    params: OptimizerParams = OptimizerParams(),
) -> OptimizationResult:
    """Recommend a headway for every catalog line with occupancy data.

    ``aggregates`` must be keyed by line only. Lines without data are listed
    in ``excluded`` rather than given a zero-filled recommendation.
    """
    by_line = {}
    for agg in aggregates:
        if agg.hour is not None or agg.bucket is not None:
            raise ValidationError("optimize_frequencies needs per-line aggregates")
        by_line[agg.line_id] = agg

    recommendations: List[Recommendation] = []
    excluded: List[ExcludedLine] = []
    for line in lines:
        try:
            ratio = _ratio_for(line, by_line)
        except NoDataError as e:
            excluded.append(ExcludedLine(line_id=line.id, line_name=line.name, reason=e.reason))
            continue

        current = line.current_frequency_min
        rationale, recommended = classify(ratio, current, params)
        recommendations.append(Recommendation(
            line_id=line.id,
            line_name=line.name,
            current_frequency_min=current,
            recommended_frequency_min=recommended,
            mean_occupancy_ratio=ratio,
            efficiency_gain=abs(current - recommended) / current,
            rationale=rationale,
        ))

    if excluded:
        logger.info("No recommendation for %d line(s): %s",
                    len(excluded), [e.line_id for e in excluded])
    return OptimizationResult(recommendations=recommendations, excluded=excluded)


# ---------------------------------------------------------------------------
# Impact
# ---------------------------------------------------------------------------

def wait_time(frequency_min) -> float:
    """Average passenger wait (minutes) for a headway, uniform arrivals."""
    return frequency_min / 2.0


def evaluate_impact(recommendations: Iterable[Recommendation]) -> ImpactSummary:
    """Total wait-time reduction over the lines whose headway changes."""
    impact_total = 0.0
    lines_changed = 0
    for rec in recommendations:
        if rec.recommended_frequency_min != rec.current_frequency_min:
            impact_total += wait_time(rec.current_frequency_min) - wait_time(rec.recommended_frequency_min)
            lines_changed += 1

    return ImpactSummary(
        impact_total=impact_total,
        lines_changed=lines_changed,
        mean_impact_per_line=impact_total / lines_changed if lines_changed else None,
    )
