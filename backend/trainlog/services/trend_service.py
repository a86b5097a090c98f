"""Trend and overall performance calculations.

Implements the figures shown on the progress report:
- Percent change between the oldest and latest sample of a series
- Trend classification (up / down / stable)
- Workout consistency over the last 30 days
- Overall performance score and rating
- Canned training recommendations
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from trainlog.schemas.records import WorkoutRecord, to_naive_utc
from trainlog.schemas.report import (
    PerformanceRating,
    PerformanceScore,
    TrendClass,
    TrendSummary,
)
from trainlog.services.unit_service import round_half_up


class TrendCalculator:
    """Compute percent changes, trend classes and performance scores."""

    # Percent change beyond which a series counts as moving
    TREND_THRESHOLD = 5.0

    # (minimum, points) buckets, checked in order
    CONSISTENCY_BUCKETS = ((70, 25), (50, 15))
    GOAL_BUCKETS = ((70, 25), (50, 15))
    VOLUME_BUCKETS = ((20, 25), (10, 15))
    TREND_POINTS = {TrendClass.UP: 25, TrendClass.STABLE: 15}
    FLOOR_POINTS = 5

    RATING_TIERS = (
        (80, PerformanceRating.EXCELLENT),
        (60, PerformanceRating.GOOD),
        (40, PerformanceRating.FAIR),
    )

    RECOMMEND_CONSISTENCY = (
        "Try to train more consistently. Aim for at least 3-4 sessions per week."
    )
    RECOMMEND_DECLINE = (
        "Your strength appears to be declining. Consider reviewing your training intensity."
    )
    RECOMMEND_GOALS = "Set more achievable short-term goals to build momentum."
    RECOMMEND_KEEP_GOING = (
        "Excellent work! Keep up the consistency and progressive overload."
    )

    def percent_change(self, latest: Optional[float], oldest: Optional[float]) -> Optional[float]:
        """
        Percent change from oldest to latest.

        Returns None instead of NaN or infinity when there is no usable
        baseline, i.e. oldest is zero or either sample is missing.

        Args:
            latest: Most recent sample
            oldest: Baseline sample

        Returns:
            (latest - oldest) / oldest * 100, or None
        """
        if latest is None or oldest is None or oldest == 0:
            return None
        return (latest - oldest) / oldest * 100

    def percent_change_of_series(self, values: Sequence[float]) -> Optional[float]:
        """Percent change between the first and last value of an ascending series."""
        if len(values) < 2:
            return None
        return self.percent_change(values[-1], values[0])

    def classify_trend(self, pct: Optional[float]) -> TrendClass:
        """Classify a percent change; None means not enough data."""
        if pct is None:
            return TrendClass.INSUFFICIENT
        if pct > self.TREND_THRESHOLD:
            return TrendClass.UP
        if pct < -self.TREND_THRESHOLD:
            return TrendClass.DOWN
        return TrendClass.STABLE

    def summarize(self, values: Sequence[float]) -> TrendSummary:
        """Percent change and trend class of an ascending series."""
        pct = self.percent_change_of_series(values)
        return TrendSummary(
            percent_change=pct,
            trend=self.classify_trend(pct),
            sample_count=len(values),
        )

    def combine(self, summaries: Iterable[TrendSummary]) -> TrendSummary:
        """
        Average several series trends into one.

        Series without a computable change are ignored. The result is
        insufficient when none of them has one.
        """
        changes = []
        samples = 0
        for summary in summaries:
            samples += summary.sample_count
            if summary.percent_change is not None:
                changes.append(summary.percent_change)

        if not changes:
            return TrendSummary(sample_count=samples)

        pct = sum(changes) / len(changes)
        return TrendSummary(
            percent_change=pct,
            trend=self.classify_trend(pct),
            sample_count=samples,
        )

    def workout_consistency(
        self,
        workouts: Iterable[WorkoutRecord],
        now: Optional[datetime] = None,
        days: int = 30,
    ) -> tuple[int, int]:
        """
        Share of the last days that had a workout logged.

        Args:
            workouts: Workout history
            now: Reference time (defaults to utcnow)
            days: Length of the consistency window

        Returns:
            (workouts in the window, consistency percentage rounded to a
            whole number)
        """
        now = to_naive_utc(now) or datetime.utcnow()
        cutoff = now - timedelta(days=days)
        recent = sum(1 for workout in workouts if workout.created_at >= cutoff)
        if days <= 0:
            return recent, 0
        return recent, round_half_up(recent / days * 100)

    def _bucket(self, value: float, buckets: tuple[tuple[int, int], ...]) -> int:
        for minimum, points in buckets:
            if value >= minimum:
                return points
        return self.FLOOR_POINTS

    def overall_performance_score(
        self,
        consistency_pct: float,
        goal_completion_pct: float,
        trend_class: TrendClass,
        total_workout_count: int,
    ) -> PerformanceScore:
        """
        Score overall performance out of 100.

        Four buckets are worth up to 25 points each: consistency, goal
        completion, strength trend and workout volume. The sum maps to a
        rating tier (80 Excellent, 60 Good, 40 Fair).
        """
        consistency_points = self._bucket(consistency_pct, self.CONSISTENCY_BUCKETS)
        goal_points = self._bucket(goal_completion_pct, self.GOAL_BUCKETS)
        trend_points = self.TREND_POINTS.get(TrendClass(trend_class), self.FLOOR_POINTS)
        volume_points = self._bucket(total_workout_count, self.VOLUME_BUCKETS)

        total = consistency_points + goal_points + trend_points + volume_points

        rating = PerformanceRating.NEEDS_IMPROVEMENT
        for minimum, tier in self.RATING_TIERS:
            if total >= minimum:
                rating = tier
                break

        return PerformanceScore(
            consistency_points=consistency_points,
            goal_points=goal_points,
            trend_points=trend_points,
            volume_points=volume_points,
            total=total,
            rating=rating,
        )

    def recommendations(
        self,
        consistency_pct: float,
        goal_completion_pct: float,
        trend_class: TrendClass,
    ) -> tuple[str, ...]:
        """Training advice matching the report figures."""
        advice = []
        if consistency_pct < 50:
            advice.append(self.RECOMMEND_CONSISTENCY)
        if trend_class == TrendClass.DOWN:
            advice.append(self.RECOMMEND_DECLINE)
        if goal_completion_pct < 50:
            advice.append(self.RECOMMEND_GOALS)
        if consistency_pct >= 70 and trend_class == TrendClass.UP:
            advice.append(self.RECOMMEND_KEEP_GOING)
        return tuple(advice)


# Singleton instance
trend_calculator = TrendCalculator()
