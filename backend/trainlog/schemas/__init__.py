"""Pydantic schemas package for records, analytics and report artifacts."""

from trainlog.schemas.records import (
    BodyMeasurementRecord,
    CircumferenceUnit,
    GoalRecord,
    StrengthTestRecord,
    TrainingCycleRecord,
    WeightUnit,
    WorkoutRecord,
    normalize_test_type,
)
from trainlog.schemas.report import (
    ActiveCycle,
    ChartSeries,
    CycleLog,
    DistributionSlice,
    ExportArtifact,
    GoalSummary,
    LatestPR,
    MeasurementField,
    MeasurementTrend,
    PerformanceRating,
    PerformanceScore,
    PRHighlight,
    ReportSnapshot,
    ReportState,
    SeriesPoint,
    TrendClass,
    TrendSummary,
    VisualCard,
    WorkoutSummary,
)

__all__ = [
    # Record schemas
    "BodyMeasurementRecord",
    "CircumferenceUnit",
    "GoalRecord",
    "StrengthTestRecord",
    "TrainingCycleRecord",
    "WeightUnit",
    "WorkoutRecord",
    "normalize_test_type",
    # Report schemas
    "ActiveCycle",
    "ChartSeries",
    "CycleLog",
    "DistributionSlice",
    "ExportArtifact",
    "GoalSummary",
    "LatestPR",
    "MeasurementField",
    "MeasurementTrend",
    "PerformanceRating",
    "PerformanceScore",
    "PRHighlight",
    "ReportSnapshot",
    "ReportState",
    "SeriesPoint",
    "TrendClass",
    "TrendSummary",
    "VisualCard",
    "WorkoutSummary",
]
