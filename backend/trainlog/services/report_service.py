"""Progress report aggregation.

Combines workouts, strength tests, body measurements, training cycles and
goals into one immutable ReportSnapshot covering the report window (the last
3 calendar months by default).
"""

import asyncio
import logging
from datetime import datetime
from functools import lru_cache
from typing import Iterable, Optional, Sequence

from trainlog.config import get_settings
from trainlog.schemas.records import (
    BodyMeasurementRecord,
    GoalRecord,
    StrengthTestRecord,
    TrainingCycleRecord,
    WeightUnit,
    WorkoutRecord,
    to_naive_utc,
)
from trainlog.schemas.report import (
    ActiveCycle,
    GoalSummary,
    MeasurementField,
    MeasurementTrend,
    PRHighlight,
    ReportSnapshot,
    TrendSummary,
    WorkoutSummary,
)
from trainlog.services.chart_service import ChartSeriesBuilder
from trainlog.services.pr_service import PRDeduplicator
from trainlog.services.repository import RecordFetchError, RecordRepository
from trainlog.services.trend_service import TrendCalculator
from trainlog.services.unit_service import UnitConverter
from trainlog.services.window_service import TimeWindowFilter

logger = logging.getLogger(__name__)

settings = get_settings()


def pr_label(test_type: str) -> str:
    """Display name of a normalized test type, e.g. "MAX WRIST CURL"."""
    return test_type.replace("_", " ").upper()


class ReportAggregator:
    """Build progress report snapshots from training records."""

    CACHE_SIZE = 32

    def __init__(
        self,
        repository: Optional[RecordRepository] = None,
        converter: Optional[UnitConverter] = None,
        window_filter: Optional[TimeWindowFilter] = None,
        deduplicator: Optional[PRDeduplicator] = None,
        trends: Optional[TrendCalculator] = None,
        charts: Optional[ChartSeriesBuilder] = None,
    ) -> None:
        self.repository = repository
        self.units = converter or UnitConverter()
        self.windows = window_filter or TimeWindowFilter()
        self.prs = deduplicator or PRDeduplicator()
        self.trends = trends or TrendCalculator()
        self.charts = charts or ChartSeriesBuilder(self.units)
        # Snapshots are pure functions of their (hashable, frozen) inputs
        self._cached_snapshot = lru_cache(maxsize=self.CACHE_SIZE)(self._build_snapshot)

    async def generate(
        self,
        user_id: int,
        weight_unit: WeightUnit = WeightUnit.LBS,
        user_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReportSnapshot:
        """
        Fetch a user's records and aggregate them into a snapshot.

        The five collections are fetched concurrently. A failed fetch is
        reported, never treated as an empty collection.

        Raises:
            RecordFetchError: If any of the collections could not be fetched
        """
        if self.repository is None:
            raise RuntimeError("ReportAggregator.generate requires a repository")

        now = to_naive_utc(now) or datetime.utcnow()
        collections = ("workouts", "strength_tests", "measurements", "cycles", "goals")
        results = await asyncio.gather(
            self.repository.fetch_workouts(user_id),
            self.repository.fetch_strength_tests(user_id),
            self.repository.fetch_measurements(user_id),
            self.repository.fetch_cycles(user_id),
            self.repository.fetch_goals(user_id),
            return_exceptions=True,
        )

        for collection, result in zip(collections, results):
            if isinstance(result, BaseException):
                logger.error(f"Fetching {collection} for user {user_id} failed: {result}")
                raise RecordFetchError(collection, str(result)) from result

        workouts, strength_tests, measurements, cycles, goals = results
        window_start = self.windows.report_window_start(now, settings.REPORT_WINDOW_MONTHS)

        return self.aggregate_snapshot(
            workouts,
            strength_tests,
            measurements,
            cycles,
            goals,
            window_start,
            weight_unit=weight_unit,
            now=now,
            user_name=user_name,
        )

    def aggregate_snapshot(
        self,
        workouts: Iterable[WorkoutRecord],
        strength_tests: Iterable[StrengthTestRecord],
        measurements: Iterable[BodyMeasurementRecord],
        cycles: Iterable[TrainingCycleRecord],
        goals: Iterable[GoalRecord],
        window_start: datetime,
        weight_unit: WeightUnit = WeightUnit.LBS,
        now: Optional[datetime] = None,
        user_name: Optional[str] = None,
    ) -> ReportSnapshot:
        """
        Aggregate record collections into a ReportSnapshot.

        Empty collections yield zero counts and empty lists; aggregation
        never raises on missing data.

        Args:
            workouts: Workout history, most recent first
            strength_tests: Complete strength-test history
            measurements: Body measurement history
            cycles: Training cycles
            goals: Goals
            window_start: Exclusive start of the report window
            weight_unit: The user's display weight unit
            now: Reference time (defaults to utcnow)
            user_name: Name shown on exported artifacts

        Returns:
            Immutable ReportSnapshot
        """
        return self._cached_snapshot(
            tuple(workouts),
            tuple(strength_tests),
            tuple(measurements),
            tuple(cycles),
            tuple(goals),
            to_naive_utc(window_start),
            self.units.normalize_weight_unit(weight_unit),
            to_naive_utc(now) or datetime.utcnow(),
            user_name,
        )

    def _build_snapshot(
        self,
        workouts: tuple[WorkoutRecord, ...],
        strength_tests: tuple[StrengthTestRecord, ...],
        measurements: tuple[BodyMeasurementRecord, ...],
        cycles: tuple[TrainingCycleRecord, ...],
        goals: tuple[GoalRecord, ...],
        window_start: datetime,
        weight_unit: WeightUnit,
        now: datetime,
        user_name: Optional[str],
    ) -> ReportSnapshot:
        logger.debug(
            f"Aggregating snapshot since {window_start:%Y-%m-%d}: {len(workouts)} workouts, "
            f"{len(strength_tests)} strength tests, {len(measurements)} measurements, "
            f"{len(cycles)} cycles, {len(goals)} goals"
        )

        workout_summary = self._summarize_workouts(workouts, window_start, now)
        latest_prs = self._latest_prs(strength_tests, window_start, weight_unit)
        strength_trend = self.trends.combine(pr.trend for pr in latest_prs)
        measurement_trends = self._measurement_trends(measurements, window_start, weight_unit)
        goal_summary = self._summarize_goals(goals)
        active_cycles = tuple(
            ActiveCycle(
                name=cycle.name,
                cycle_type=cycle.cycle_type,
                start_date=cycle.start_date,
                end_date=cycle.end_date,
            )
            for cycle in cycles
            if cycle.is_active
        )

        performance = self.trends.overall_performance_score(
            workout_summary.consistency,
            goal_summary.success_rate,
            strength_trend.trend,
            workout_summary.total_workouts,
        )
        recommendations = self.trends.recommendations(
            workout_summary.consistency,
            goal_summary.success_rate,
            strength_trend.trend,
        )

        return ReportSnapshot(
            user_name=user_name,
            generated_at=now,
            window_start=window_start,
            weight_unit=weight_unit,
            circumference_unit=self.units.get_circumference_unit(weight_unit),
            workouts=workout_summary,
            latest_prs=latest_prs,
            strength_trend=strength_trend,
            measurement_trends=measurement_trends,
            goals=goal_summary,
            active_cycles=active_cycles,
            performance=performance,
            recommendations=recommendations,
        )

    def _summarize_workouts(
        self,
        workouts: Sequence[WorkoutRecord],
        window_start: datetime,
        now: datetime,
    ) -> WorkoutSummary:
        in_window = self.windows.filter_by_absolute_window(workouts, window_start)
        recent, consistency = self.trends.workout_consistency(
            workouts, now, settings.CONSISTENCY_WINDOW_DAYS
        )

        count = len(in_window)
        if count == 0:
            return WorkoutSummary(recent_workouts=recent, consistency=consistency)

        total_minutes = sum(w.duration_minutes for w in in_window)
        total_intensity = sum(w.intensity for w in in_window)
        return WorkoutSummary(
            total_workouts=count,
            total_minutes=total_minutes,
            total_hours=round(total_minutes / 60, 1),
            average_duration=round(total_minutes / count, 1),
            average_intensity=round(total_intensity / count, 1),
            recent_workouts=recent,
            consistency=consistency,
        )

    def _latest_prs(
        self,
        strength_tests: Sequence[StrengthTestRecord],
        window_start: datetime,
        weight_unit: WeightUnit,
    ) -> tuple[PRHighlight, ...]:
        # Deduplicate over the full history, then keep what falls in the window
        highlights = []
        for latest in self.prs.latest_per_type(strength_tests):
            record = latest.record
            if record.created_at <= window_start:
                continue

            history = self.prs.history_for_type(strength_tests, record.test_type)
            window_values = [
                self.units.convert_weight(t.result_value, t.result_unit, weight_unit, rounded=False)
                for t in history
                if t.created_at > window_start
            ]
            value = self.units.convert_weight(record.result_value, record.result_unit, weight_unit)
            highlights.append(
                PRHighlight(
                    test_type=record.test_type,
                    label=pr_label(record.test_type),
                    value=value,
                    unit=weight_unit,
                    display_value=self.units.format_weight(value, weight_unit),
                    history_count=latest.history_count,
                    recorded_at=record.created_at,
                    trend=self.trends.summarize(window_values),
                )
            )
        return tuple(highlights)

    def _measurement_trends(
        self,
        measurements: Sequence[BodyMeasurementRecord],
        window_start: datetime,
        weight_unit: WeightUnit,
    ) -> tuple[MeasurementTrend, ...]:
        in_window = self.windows.filter_by_absolute_window(measurements, window_start)

        trends = []
        for field in MeasurementField:
            samples = []
            for measurement in in_window:
                value = self.charts.measurement_value(
                    measurement, field, weight_unit, rounded=False
                )
                if value is not None:
                    display = self.charts.measurement_display(measurement, field, weight_unit)
                    samples.append((measurement.timestamp, value, display))
            if not samples:
                continue

            samples.sort(key=lambda sample: sample[0])
            oldest_at, oldest, oldest_display = samples[0]
            latest_at, latest, latest_display = samples[-1]
            pct = self.trends.percent_change(latest, oldest) if len(samples) > 1 else None
            trends.append(
                MeasurementTrend(
                    measurement=field,
                    unit=self.charts.measurement_unit(field, weight_unit),
                    oldest_value=round(oldest, 1),
                    latest_value=round(latest, 1),
                    oldest_display=oldest_display,
                    latest_display=latest_display,
                    oldest_at=oldest_at,
                    latest_at=latest_at,
                    trend=TrendSummary(
                        percent_change=pct,
                        trend=self.trends.classify_trend(pct),
                        sample_count=len(samples),
                    ),
                )
            )
        return tuple(trends)

    def _summarize_goals(self, goals: Sequence[GoalRecord]) -> GoalSummary:
        total = len(goals)
        if total == 0:
            return GoalSummary()
        completed = sum(1 for goal in goals if goal.reached)
        return GoalSummary(
            completed=completed,
            total=total,
            success_rate=round(completed / total * 100, 1),
        )
