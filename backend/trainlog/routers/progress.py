"""Progress charts API router."""

import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, List, Optional, Sequence, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from trainlog.routers.reports import resolve_preferences
from trainlog.schemas.records import WeightUnit
from trainlog.schemas.report import (
    ChartSeries,
    CycleLog,
    DistributionSlice,
    LatestPR,
    MeasurementField,
)
from trainlog.services.chart_service import chart_builder
from trainlog.services.pr_service import pr_deduplicator
from trainlog.services.repository import (
    RecordFetchError,
    SqlAlchemyRecordRepository,
    get_repository,
)
from trainlog.services.window_service import TimeWindow, current_time, window_filter

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


class ChartKind(str, Enum):
    """Charts available on the progress screens."""
    FREQUENCY = "frequency"
    WEEKLY_FREQUENCY = "weekly_frequency"
    DURATION = "duration"
    INTENSITY = "intensity"
    PR_TIMELINE = "pr_timeline"
    MEASUREMENT = "measurement"


async def fetch_or_503(fetch: Awaitable[Sequence[T]], collection: str) -> Sequence[T]:
    """Await a repository fetch, mapping storage failures to 503."""
    try:
        return await fetch
    except (RecordFetchError, SQLAlchemyError) as e:
        logger.error(f"Fetching {collection} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not load {collection}",
        )


def apply_window(
    records: Sequence[T], window: Optional[TimeWindow], now: datetime
) -> Sequence[T]:
    if window is None:
        return records
    return window_filter.filter_by_relative_window(records, window, now)


@router.get("/{user_id}/charts/{chart}", response_model=ChartSeries)
async def get_chart(
    user_id: int,
    chart: ChartKind,
    window: Optional[TimeWindow] = Query(None, description="Restrict to the last week, month or year"),
    test_type: Optional[str] = Query(None, description="Test type for the PR timeline"),
    field: MeasurementField = Query(MeasurementField.WEIGHT, description="Measurement to chart"),
    unit: Optional[WeightUnit] = Query(None, description="Override the user's weight unit"),
    repository: SqlAlchemyRecordRepository = Depends(get_repository),
    now: datetime = Depends(current_time),
) -> ChartSeries:
    """
    Get one chart series, ordered oldest first.

    Args:
        user_id: User whose records are charted
        chart: Which chart to build
        window: Optional relative time window
        test_type: Required for the PR timeline
        field: Measurement field for the measurement chart
        unit: Optional display unit override
        repository: Record repository
        now: Reference time

    Returns:
        Chart series

    Raises:
        HTTPException: 400 if the PR timeline is requested without a test
            type, 404 if the user does not exist, 503 if records could not
            be loaded
    """
    weight_unit, _ = await resolve_preferences(repository, user_id, unit)

    if chart == ChartKind.PR_TIMELINE:
        if not test_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="test_type is required for the PR timeline",
            )
        tests = await fetch_or_503(repository.fetch_strength_tests(user_id), "strength tests")
        return chart_builder.build_pr_timeline(
            apply_window(tests, window, now), test_type, weight_unit
        )

    if chart == ChartKind.MEASUREMENT:
        measurements = await fetch_or_503(repository.fetch_measurements(user_id), "measurements")
        return chart_builder.build_measurement_series(
            apply_window(measurements, window, now), field, weight_unit
        )

    workouts = await fetch_or_503(repository.fetch_workouts(user_id), "workouts")

    if chart == ChartKind.WEEKLY_FREQUENCY:
        tests = await fetch_or_503(repository.fetch_strength_tests(user_id), "strength tests")
        return chart_builder.build_weekly_frequency(workouts, tests, now)

    workouts = apply_window(workouts, window, now)
    if chart == ChartKind.FREQUENCY:
        return chart_builder.build_frequency_series(workouts, name="workout_frequency")
    if chart == ChartKind.DURATION:
        return chart_builder.build_duration_series(workouts)
    return chart_builder.build_intensity_series(workouts)


@router.get("/{user_id}/distribution", response_model=List[DistributionSlice])
async def get_workout_distribution(
    user_id: int,
    window: Optional[TimeWindow] = Query(None, description="Restrict to the last week, month or year"),
    repository: SqlAlchemyRecordRepository = Depends(get_repository),
    now: datetime = Depends(current_time),
) -> Sequence[DistributionSlice]:
    """Get the share of workouts per workout type."""
    await resolve_preferences(repository, user_id)
    workouts = await fetch_or_503(repository.fetch_workouts(user_id), "workouts")
    return chart_builder.build_workout_type_distribution(apply_window(workouts, window, now))


@router.get("/{user_id}/cycles", response_model=List[CycleLog])
async def get_cycle_logs(
    user_id: int,
    repository: SqlAlchemyRecordRepository = Depends(get_repository),
    now: datetime = Depends(current_time),
) -> Sequence[CycleLog]:
    """Get workout totals for the most recent training cycles."""
    await resolve_preferences(repository, user_id)
    cycles = await fetch_or_503(repository.fetch_cycles(user_id), "cycles")
    workouts = await fetch_or_503(repository.fetch_workouts(user_id), "workouts")
    # Charted oldest first
    return chart_builder.build_cycle_logs(tuple(reversed(cycles)), workouts, now)


@router.get("/{user_id}/prs", response_model=List[LatestPR])
async def get_latest_prs(
    user_id: int,
    repository: SqlAlchemyRecordRepository = Depends(get_repository),
) -> Sequence[LatestPR]:
    """Get the latest result of every test type with its history size."""
    await resolve_preferences(repository, user_id)
    tests = await fetch_or_503(repository.fetch_strength_tests(user_id), "strength tests")
    return pr_deduplicator.latest_per_type(tests)
