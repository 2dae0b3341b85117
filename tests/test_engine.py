# -*- coding: utf-8 -*-
"""TransitAnalysisEngine 통합 테스트"""
import pandas as pd
import pytest

from transitopt.engine import TransitAnalysisEngine
from transitopt.errors import EmptyInputError
from transitopt.models import Rationale
from transitopt.optimizer import OptimizerParams


@pytest.fixture
def engine():
    return TransitAnalysisEngine()


class TestAnalyze:
    """전체 분석 파이프라인 테스트 클래스"""

    def test_recommendations_per_line(self, engine, line_rows, record_rows):
        report = engine.analyze(line_rows, record_rows)
        recs = {r.line_id: r for r in report.optimization.recommendations}

        assert sorted(recs) == [1, 2, 3]
        assert recs[1].rationale is Rationale.OVERLOADED
        assert recs[1].recommended_frequency_min == 5
        assert recs[2].rationale is Rationale.UNDERUSED
        assert recs[2].recommended_frequency_min == 15
        assert recs[3].rationale is Rationale.OPTIMAL
        assert recs[3].recommended_frequency_min == 20

    def test_line_without_records_is_excluded(self, engine, line_rows, record_rows):
        report = engine.analyze(line_rows, record_rows)

        [excluded] = report.optimization.excluded
        assert excluded.line_id == 4
        assert excluded.line_name == "Line 4"
        assert excluded.reason == "no ridership records"

    def test_diagnostics(self, engine, line_rows, record_rows):
        report = engine.analyze(line_rows, record_rows)

        assert [c.line_id for c in report.critical_lines] == [1]
        assert [h.hour for h in report.peak_hours.by_boardings] == [7, 8, 18]
        assert [h.hour for h in report.peak_hours.by_alightings] == [18, 17, 8]
        assert report.summary.total_passengers == 100
        assert len(report.line_aggregates) == 3

    def test_impact_cancels_out(self, engine, line_rows, record_rows):
        """Line 1은 2.5분 단축, Line 2는 2.5분 증가 → 합계 0"""
        impact = engine.analyze(line_rows, record_rows).impact

        assert impact.lines_changed == 2
        assert impact.impact_total == pytest.approx(0.0)
        assert impact.mean_impact_per_line == pytest.approx(0.0)

    def test_bad_rows_are_reported_not_fatal(self, engine, line_rows, record_rows):
        record_rows[0]["capacity"] = -1
        record_rows.append(dict(record_rows[1], line_id=99))

        report = engine.analyze(line_rows, record_rows)

        assert report.intake.records_accepted == 5
        assert report.intake.records_rejected == 2
        assert "unknown line_id" in [r.reason for r in report.intake.rejections]

    @pytest.mark.parametrize("field, value", [
        ("hour", float("inf")), ("hour", [7, 8]), ("boardings", 2 ** 70),
    ])
    def test_unusable_value_does_not_abort_run(self, engine, line_rows, record_rows, field, value):
        record_rows[0][field] = value

        report = engine.analyze(line_rows, record_rows)

        assert report.intake.records_rejected == 1
        assert report.summary.total_passengers == 100 - 30

    def test_accepts_dataframes(self, engine, line_rows, record_rows):
        from_frames = engine.analyze(pd.DataFrame(line_rows), pd.DataFrame(record_rows))
        from_dicts = engine.analyze(line_rows, record_rows)
        assert from_frames.optimization == from_dicts.optimization

    def test_record_order_does_not_matter(self, engine, line_rows, record_rows):
        forward = engine.analyze(line_rows, record_rows)
        backward = engine.analyze(line_rows, list(reversed(record_rows)))
        assert forward.line_aggregates == backward.line_aggregates
        assert forward.optimization == backward.optimization

    @pytest.mark.parametrize("lines_empty", [True, False])
    def test_empty_input_raises(self, engine, line_rows, record_rows, lines_empty):
        with pytest.raises(EmptyInputError):
            if lines_empty:
                engine.analyze([], record_rows)
            else:
                engine.analyze(line_rows, [])


class TestRecommendAndSensitivity:

    def test_recommend_matches_analyze(self, engine, line_rows, record_rows):
        full = engine.analyze(line_rows, record_rows)
        short = engine.recommend(line_rows, record_rows)
        assert short.optimization == full.optimization
        assert short.impact == full.impact

    def test_params_change_outcome(self, line_rows, record_rows):
        engine = TransitAnalysisEngine(OptimizerParams(overload_threshold=0.9))
        recs = {r.line_id: r for r in engine.recommend(line_rows, record_rows).optimization.recommendations}
        assert recs[1].rationale is Rationale.OPTIMAL

    def test_params_argument_overrides_for_one_call(self, engine, line_rows, record_rows):
        strict = OptimizerParams(overload_threshold=0.9)

        overridden = engine.recommend(line_rows, record_rows, params=strict)
        default = engine.recommend(line_rows, record_rows)

        assert overridden.impact.lines_changed == 1
        assert default.impact.lines_changed == 2
        assert engine.params == OptimizerParams()

    def test_sensitivity_sweep(self, engine, line_rows, record_rows):
        points = engine.sensitivity(line_rows, record_rows, thresholds=[0.9, 0.3, 0.5, 0.9])

        # 0.3은 저이용 기준(0.40)보다 낮아 제외, 중복 제거 후 오름차순
        assert [p.overload_threshold for p in points] == [0.5, 0.9]

        low, high = points
        assert (low.overloaded_lines, low.lines_changed) == (2, 3)
        assert low.impact_total == pytest.approx(2.5)
        assert (high.overloaded_lines, high.lines_changed) == (0, 1)
        assert high.impact_total == pytest.approx(-2.5)

    def test_sensitivity_leaves_params_alone(self, engine, line_rows, record_rows):
        before = engine.params
        engine.sensitivity(line_rows, record_rows)
        assert engine.params is before

    def test_default_sweep(self, engine, line_rows, record_rows):
        points = engine.sensitivity(line_rows, record_rows)
        assert len(points) == 8
        counts = [p.overloaded_lines for p in points]
        assert all(a >= b for a, b in zip(counts, counts[1:]))
