"""Pydantic schemas for derived progress statistics and report artifacts."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from trainlog.schemas.records import CircumferenceUnit, StrengthTestRecord, WeightUnit


class TrendClass(str, Enum):
    """Direction of a percent change."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    INSUFFICIENT = "insufficient"


class PerformanceRating(str, Enum):
    """Overall performance tiers."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class MeasurementField(str, Enum):
    """Body measurement fields that can be charted and trended."""
    WEIGHT = "weight"
    ARM = "arm"
    FOREARM = "forearm"
    WRIST = "wrist"


class ReportState(str, Enum):
    """Report generation lifecycle."""
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class FrozenSchema(BaseModel):
    """Base for immutable derived values."""

    class Config:
        frozen = True


# ============== Analytics Schemas ==============

class LatestPR(FrozenSchema):
    """The latest result of one test type plus the size of its history."""

    record: StrengthTestRecord = Field(..., description="Most recent record of the type")
    history_count: int = Field(..., ge=1, description="Number of results recorded for the type")

    @property
    def test_type(self) -> str:
        return self.record.test_type

    @property
    def history_label(self) -> str:
        """Display label such as "3 entries"."""
        noun = "entry" if self.history_count == 1 else "entries"
        return f"{self.history_count} {noun}"


class PerformanceScore(FrozenSchema):
    """Overall performance score built from four 25-point buckets."""

    consistency_points: int = Field(..., ge=0, le=25)
    goal_points: int = Field(..., ge=0, le=25)
    trend_points: int = Field(..., ge=0, le=25)
    volume_points: int = Field(..., ge=0, le=25)
    total: int = Field(..., ge=0, le=100, description="Sum of the four buckets")
    rating: PerformanceRating = Field(..., description="Rating tier for the total")


class TrendSummary(FrozenSchema):
    """Percent change between the oldest and latest sample of a series."""

    percent_change: Optional[float] = Field(None, description="None when no trend can be computed")
    trend: TrendClass = Field(TrendClass.INSUFFICIENT, description="Classified direction")
    sample_count: int = Field(0, ge=0, description="Samples the trend was computed from")


class PRHighlight(FrozenSchema):
    """Latest personal record of a test type, converted for display."""

    test_type: str = Field(..., description="Normalized test type key")
    label: str = Field(..., description="Human readable test name")
    value: float = Field(..., description="Latest result in the display unit")
    unit: WeightUnit = Field(..., description="Display unit")
    display_value: str = Field(..., description="Formatted value, e.g. '120 lbs'")
    history_count: int = Field(..., ge=1, description="Results recorded for the type")
    recorded_at: datetime = Field(..., description="When the latest result was recorded")
    trend: TrendSummary = Field(default_factory=TrendSummary, description="Change across the window")


class MeasurementTrend(FrozenSchema):
    """Oldest vs latest sample of a body measurement inside the window."""

    measurement: MeasurementField
    unit: str = Field(..., description="Display unit (lbs, kg, in or cm)")
    oldest_value: float = Field(..., description="Oldest sample in the display unit")
    latest_value: float = Field(..., description="Latest sample in the display unit")
    oldest_display: str = Field(..., description="Formatted oldest sample, e.g. '15 in'")
    latest_display: str = Field(..., description="Formatted latest sample")
    oldest_at: datetime
    latest_at: datetime
    trend: TrendSummary


class GoalSummary(FrozenSchema):
    """Goal completion totals."""

    completed: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    success_rate: float = Field(0.0, ge=0, description="Completed goals as a percentage")


class ActiveCycle(FrozenSchema):
    """A currently running training cycle."""

    name: str
    cycle_type: str
    start_date: datetime
    end_date: datetime


class WorkoutSummary(FrozenSchema):
    """Workout volume inside the report window."""

    total_workouts: int = Field(0, ge=0)
    total_minutes: int = Field(0, ge=0)
    total_hours: float = Field(0.0, ge=0, description="Total minutes / 60, one decimal")
    average_duration: float = Field(0.0, ge=0, description="Minutes per session")
    average_intensity: float = Field(0.0, ge=0, le=10, description="One decimal")
    recent_workouts: int = Field(0, ge=0, description="Sessions in the consistency window")
    consistency: float = Field(0.0, ge=0, description="Recent sessions per day as a percentage")


class ReportSnapshot(FrozenSchema):
    """Immutable aggregate of a user's progress over the report window."""

    user_name: Optional[str] = Field(None, description="Name shown on exports")
    generated_at: datetime = Field(..., description="Reference time of the aggregation")
    window_start: datetime = Field(..., description="Exclusive start of the report window")
    weight_unit: WeightUnit = Field(WeightUnit.LBS, description="Display weight unit")
    circumference_unit: CircumferenceUnit = Field(CircumferenceUnit.INCHES)

    workouts: WorkoutSummary = Field(default_factory=WorkoutSummary)
    latest_prs: tuple[PRHighlight, ...] = Field(default=())
    strength_trend: TrendSummary = Field(default_factory=TrendSummary)
    measurement_trends: tuple[MeasurementTrend, ...] = Field(default=())
    goals: GoalSummary = Field(default_factory=GoalSummary)
    active_cycles: tuple[ActiveCycle, ...] = Field(default=())
    performance: PerformanceScore
    recommendations: tuple[str, ...] = Field(default=())

    @property
    def total_workouts(self) -> int:
        return self.workouts.total_workouts

    @property
    def total_hours(self) -> float:
        return self.workouts.total_hours

    @property
    def avg_intensity(self) -> float:
        return self.workouts.average_intensity

    @property
    def is_empty(self) -> bool:
        """True when the window holds no records of any kind."""
        return (
            self.workouts.total_workouts == 0
            and not self.latest_prs
            and not self.measurement_trends
            and self.goals.total == 0
            and not self.active_cycles
        )


# ============== Chart Schemas ==============

class SeriesPoint(FrozenSchema):
    """One labelled chart value."""

    label: str
    value: float
    timestamp: Optional[datetime] = None


class ChartSeries(FrozenSchema):
    """Ordered label/value series, oldest first."""

    name: str = Field(..., description="Series identifier")
    unit: Optional[str] = Field(None, description="Unit of the values")
    points: tuple[SeriesPoint, ...] = Field(default=())

    @property
    def labels(self) -> list[str]:
        return [point.label for point in self.points]

    @property
    def values(self) -> list[float]:
        return [point.value for point in self.points]


class DistributionSlice(FrozenSchema):
    """Share of workouts of one type."""

    workout_type: str
    count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)


class CycleLog(FrozenSchema):
    """Workout totals for one training cycle."""

    cycle_id: int
    name: str = Field(..., description="Name truncated for chart labels")
    full_name: str
    workout_count: int = Field(0, ge=0)
    average_intensity: float = Field(0.0, ge=0)
    total_duration: int = Field(0, ge=0, description="Minutes")
    is_active: bool = False
    is_completed: bool = False
    start_date: datetime
    end_date: datetime


# ============== Export Schemas ==============

class StatTile(FrozenSchema):
    """One tile of the visual card stats grid."""

    value: str
    label: str


class CardPR(FrozenSchema):
    """PR line on the visual card."""

    label: str
    value: str


class VisualCard(FrozenSchema):
    """Fixed-size layout for an exported progress image."""

    width: int = Field(1080, description="Pixels")
    height: int = Field(1920, description="Pixels")
    title: str
    user_name: Optional[str] = None
    tiles: tuple[StatTile, ...] = Field(default=())
    pr_title: str = "Latest PRs"
    prs: tuple[CardPR, ...] = Field(default=())
    tagline: str
    app_name: str


class ExportArtifact(FrozenSchema):
    """Rendered artifact handed to a share or file-conversion collaborator."""

    filename: str = Field(..., description="Suggested filename")
    mime_type: str = Field(..., description="MIME content type")
    content: str = Field(..., description="Serialized artifact")

    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))
