# -*- coding: utf-8 -*-
"""
Transit Analysis Engine
=======================
Runs the whole pipeline on one batch:

    intake -> occupancy aggregates -> { ridership summary,
                                        critical lines,
                                        peak hours }
                                   -> frequency optimizer -> impact evaluator

Every call validates its own input and recomputes everything from scratch;
the only state the engine carries is its OptimizerParams.
"""
import logging
from dataclasses import dataclass, replace
from typing import List

from transitopt.aggregation import GroupBy, aggregate_occupancy, summarize_ridership
from transitopt.diagnostics import analyze_peak_hours, identify_critical_lines
from transitopt.intake import IntakeReport, validate_batch
from transitopt.models import (
    CriticalLine,
    ImpactSummary,
    OccupancyAggregate,
    OptimizationResult,
    PeakHours,
    Rationale,
    RidershipSummary,
    SensitivityPoint,
)
from transitopt.optimizer import OptimizerParams, evaluate_impact, optimize_frequencies

logger = logging.getLogger(__name__)

DEFAULT_SWEEP = tuple(round(0.60 + 0.05 * i, 2) for i in range(8))  # 0.60 .. 0.95


@dataclass(frozen=True)
class AnalysisReport:
    intake: IntakeReport
    summary: RidershipSummary
    line_aggregates: List[OccupancyAggregate]
    bucket_aggregates: List[OccupancyAggregate]
    critical_lines: List[CriticalLine]
    peak_hours: PeakHours
    optimization: OptimizationResult
    impact: ImpactSummary


@dataclass(frozen=True)
class RecommendationReport:
    intake: IntakeReport
    optimization: OptimizationResult
    impact: ImpactSummary


class TransitAnalysisEngine:
    """
    Ridership analysis and headway recommendation for a line catalog.

    Inputs may be value objects, mappings or DataFrames (see
    transitopt.intake). Malformed entries are dropped and reported in
    ``intake``; an empty catalog or batch raises EmptyInputError.
    Each call takes an optional ``params`` that overrides ``self.params``
    for that run only.
    """

    def __init__(self, params: OptimizerParams = None):
        self.params = params or OptimizerParams()

    def analyze(self, lines, records, params: OptimizerParams = None) -> AnalysisReport:
        params = params or self.params
        batch = validate_batch(lines, records)

        line_aggregates = aggregate_occupancy(batch.records, by=GroupBy.LINE)
        optimization = optimize_frequencies(line_aggregates, batch.lines, params)
        report = AnalysisReport(
            intake=batch.report,
            summary=summarize_ridership(batch.records),
            line_aggregates=line_aggregates,
            bucket_aggregates=aggregate_occupancy(batch.records, by=GroupBy.LINE_BUCKET),
            critical_lines=identify_critical_lines(
                line_aggregates, batch.lines, params.critical_threshold
            ),
            peak_hours=analyze_peak_hours(batch.records, top_n=params.peak_top_n),
            optimization=optimization,
            impact=evaluate_impact(optimization.recommendations),
        )
        logger.info(
            "Analyzed %d line(s), %d record(s): %d recommendation(s), %d excluded, %d critical",
            len(batch.lines), len(batch.records), len(optimization.recommendations),
            len(optimization.excluded), len(report.critical_lines),
        )
        return report

    def recommend(self, lines, records, params: OptimizerParams = None) -> RecommendationReport:
        """Optimization and impact only, skipping the diagnostics."""
        params = params or self.params
        batch = validate_batch(lines, records)
        optimization = optimize_frequencies(
            aggregate_occupancy(batch.records, by=GroupBy.LINE), batch.lines, params
        )
        return RecommendationReport(
            intake=batch.report,
            optimization=optimization,
            impact=evaluate_impact(optimization.recommendations),
        )

    def sensitivity(self, lines, records, thresholds=DEFAULT_SWEEP, params: OptimizerParams = None) -> List[SensitivityPoint]:
        """Re-run the optimizer for each overload cutoff in ``thresholds``.

        Cutoffs below the current underuse threshold are skipped.
        """
        base = params or self.params
        batch = validate_batch(lines, records)
        aggregates = aggregate_occupancy(batch.records, by=GroupBy.LINE)

        points = []
        for threshold in sorted(set(thresholds)):
            if threshold < base.underuse_threshold:
                continue
            params = replace(base, overload_threshold=threshold)
            result = optimize_frequencies(aggregates, batch.lines, params)
            impact = evaluate_impact(result.recommendations)
            points.append(SensitivityPoint(
                overload_threshold=threshold,
                lines_changed=impact.lines_changed,
                impact_total=impact.impact_total,
                overloaded_lines=sum(
                    1 for r in result.recommendations if r.rationale is Rationale.OVERLOADED
                ),
            ))
        return points
