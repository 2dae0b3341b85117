"""
Example usage of the transitopt analysis engine
"""
import pandas as pd

from transitopt.engine import TransitAnalysisEngine
from transitopt.optimizer import OptimizerParams

lines = pd.DataFrame({
    "id": [1, 2, 3],
    "name": ["Line 1", "Line 2", "Line 3"],
    "origin": ["Centre", "Centre", "Gare"],
    "destination": ["Nord", "Sud", "Zone B"],
    "distance_km": [12.5, 8.0, 15.2],
    "trip_duration_min": [40, 30, 50],
    "current_frequency_min": [10, 10, 20],
})

records = pd.DataFrame({
    "line_id": [1, 1, 2, 2, 3, 3],
    "stop_id": [10, 11, 20, 21, 30, 31],
    "date": ["2024-01-15"] * 6,
    "hour": ["07:30", "08:10", "12:00", "13:45", "17:15", "18:00"],
    "boardings": [42, 38, 8, 5, 20, 22],
    "alightings": [10, 15, 6, 4, 18, 19],
    "occupancy": [48, 50, 15, 12, 30, 31],
    "capacity": [55, 55, 50, 50, 50, 50],
})

# Example 1: Full analysis with default params
print("Example 1: Full analysis")
print("=" * 60)
engine = TransitAnalysisEngine()
report = engine.analyze(lines, records)
print(f"Total passengers: {report.summary.total_passengers}")
for critical in report.critical_lines:
    print(f"  critical: {critical.line_name} ({critical.mean_occupancy_ratio:.1%})")
for rec in report.optimization.recommendations:
    print(f"  {rec.line_name}: {rec.current_frequency_min} -> "
          f"{rec.recommended_frequency_min} min ({rec.rationale.value})")
print(f"Wait-time reduction: {report.impact.impact_total:.1f} min "
      f"over {report.impact.lines_changed} line(s)")

# Example 2: Custom thresholds
print("\n\nExample 2: Stricter overload threshold")
print("=" * 60)
strict_engine = TransitAnalysisEngine(OptimizerParams(overload_threshold=0.70))
result = strict_engine.recommend(lines, records)
print(f"Lines changed: {result.impact.lines_changed}")

# Example 3: Threshold sensitivity
print("\n\nExample 3: Overload threshold sweep")
print("=" * 60)
for point in engine.sensitivity(lines, records):
    print(f"  {point.overload_threshold:.2f}: {point.lines_changed} changed, "
          f"{point.impact_total:+.1f} min")
