from datetime import datetime, timezone

import pytest

from trainlog.schemas.records import CircumferenceUnit, WeightUnit
from trainlog.schemas.report import MeasurementField, PerformanceRating, TrendClass
from trainlog.services import report_service
from trainlog.services.report_service import ReportAggregator, pr_label
from trainlog.services.repository import RecordFetchError
from trainlog.services.trend_service import TrendCalculator

WINDOW_START = datetime(2024, 3, 15, 12, 0)


@pytest.fixture
def aggregator():
    return ReportAggregator()


def aggregate(aggregator, now, workouts=(), tests=(), measurements=(), cycles=(), goals=(), **kwargs):
    return aggregator.aggregate_snapshot(
        workouts, tests, measurements, cycles, goals, WINDOW_START, now=now, **kwargs
    )


def test_empty_collections_aggregate_to_zeros(aggregator, now):
    snapshot = aggregate(aggregator, now)

    assert snapshot.is_empty
    assert snapshot.total_workouts == 0
    assert snapshot.total_hours == 0
    assert snapshot.avg_intensity == 0
    assert snapshot.workouts.consistency == 0
    assert snapshot.latest_prs == ()
    assert snapshot.measurement_trends == ()
    assert snapshot.goals.total == 0
    assert snapshot.goals.success_rate == 0
    assert snapshot.strength_trend.trend == TrendClass.INSUFFICIENT
    assert snapshot.performance.total == 20
    assert snapshot.performance.rating == PerformanceRating.NEEDS_IMPROVEMENT
    assert TrendCalculator.RECOMMEND_CONSISTENCY in snapshot.recommendations


def test_workout_totals_inside_window(aggregator, make_workout, now):
    workouts = [
        make_workout(days=10, duration=90, intensity=8),
        make_workout(days=91, duration=60, intensity=6),
        make_workout(days=92, duration=120, intensity=10),
    ]

    summary = aggregate(aggregator, now, workouts=workouts).workouts

    assert summary.total_workouts == 2
    assert summary.total_minutes == 150
    assert summary.total_hours == 2.5
    assert summary.average_duration == 75.0
    assert summary.average_intensity == 7.0
    assert summary.recent_workouts == 1
    assert summary.consistency == 3


def test_latest_pr_with_history(aggregator, make_test, now):
    tests = [
        make_test("grip_strength", 120, days=1),
        make_test("grip_strength", 110, days=30),
        make_test("grip_strength", 100, days=60),
    ]

    snapshot = aggregate(aggregator, now, tests=tests)
    (pr,) = snapshot.latest_prs

    assert pr.label == "GRIP STRENGTH"
    assert pr.value == 120
    assert pr.display_value == "120 lbs"
    assert pr.history_count == 3
    assert pr.trend.percent_change == pytest.approx(20.0)
    assert pr.trend.trend == TrendClass.UP
    assert snapshot.strength_trend.trend == TrendClass.UP


def test_prs_outside_window_are_left_out(aggregator, make_test, now):
    tests = [
        make_test("pronation", 40, days=100),
        make_test("grip_strength", 100, days=10),
        make_test("grip_strength", 90, days=200),
    ]

    (pr,) = aggregate(aggregator, now, tests=tests).latest_prs

    assert pr.test_type == "grip_strength"
    # History counts every entry, the trend only the window's
    assert pr.history_count == 2
    assert pr.trend.trend == TrendClass.INSUFFICIENT


def test_prs_are_shown_in_the_users_unit(aggregator, make_test, now):
    tests = [make_test("grip_strength", 100, unit="lbs", days=3)]

    snapshot = aggregate(aggregator, now, tests=tests, weight_unit=WeightUnit.KG)

    assert snapshot.latest_prs[0].display_value == "45 kg"
    assert snapshot.weight_unit == WeightUnit.KG
    assert snapshot.circumference_unit == CircumferenceUnit.CM


def test_goal_summary(aggregator, make_goal, now):
    goals = [make_goal(target=5, current=5), make_goal(target=10, current=2)]

    summary = aggregate(aggregator, now, goals=goals).goals

    assert (summary.completed, summary.total, summary.success_rate) == (1, 2, 50.0)


def test_goals_marked_complete_count_as_reached(aggregator, make_goal, now):
    goals = [make_goal(target=10, current=3, is_completed=True), make_goal(target=10, current=0),
             make_goal(target=10, current=1)]

    summary = aggregate(aggregator, now, goals=goals).goals

    assert summary.completed == 1
    assert summary.success_rate == 33.3


def test_measurement_trends(aggregator, make_measurement, now):
    measurements = [
        make_measurement(days=5, weight=190, arm=40.64),
        make_measurement(days=80, weight=200, arm=38.1),
        make_measurement(days=100, weight=250),
    ]

    weight, arm = aggregate(aggregator, now, measurements=measurements).measurement_trends

    assert weight.measurement == MeasurementField.WEIGHT
    assert (weight.oldest_value, weight.latest_value, weight.unit) == (200, 190, "lbs")
    assert weight.trend.percent_change == pytest.approx(-5.0)
    assert weight.trend.trend == TrendClass.STABLE

    assert arm.measurement == MeasurementField.ARM
    assert (arm.oldest_value, arm.latest_value, arm.unit) == (15.0, 16.0, "in")
    assert arm.trend.trend == TrendClass.UP
    assert (weight.oldest_display, weight.latest_display) == ("200 lbs", "190 lbs")
    assert (arm.oldest_display, arm.latest_display) == ("15 in", "16 in")


def test_single_measurement_has_no_trend(aggregator, make_measurement, now):
    (wrist,) = aggregate(
        aggregator, now, measurements=[make_measurement(days=3, wrist=17.0)], weight_unit="kg"
    ).measurement_trends

    assert wrist.latest_value == 17.0
    assert wrist.unit == "cm"
    assert wrist.latest_display == "17.0 cm"
    assert wrist.trend.trend == TrendClass.INSUFFICIENT


def test_only_active_cycles_are_listed(aggregator, make_cycle, now):
    cycles = [make_cycle(name="Peaking"), make_cycle(name="Off Season", is_active=False)]

    snapshot = aggregate(aggregator, now, cycles=cycles)

    assert [cycle.name for cycle in snapshot.active_cycles] == ["Peaking"]


def test_strong_training_block_rates_excellent(aggregator, make_workout, make_test, make_goal, now):
    workouts = [make_workout(days=d) for d in range(0, 60)]
    tests = [make_test("grip_strength", 100, days=50), make_test("grip_strength", 120, days=2)]
    goals = [make_goal(target=5, current=5)]

    snapshot = aggregate(aggregator, now, workouts=workouts, tests=tests, goals=goals)

    assert snapshot.performance.total == 100
    assert snapshot.performance.rating == PerformanceRating.EXCELLENT
    assert snapshot.recommendations == (TrendCalculator.RECOMMEND_KEEP_GOING,)


def test_snapshots_are_memoized(aggregator, make_workout, now):
    workouts = (make_workout(days=3), make_workout(days=4))

    first = aggregate(aggregator, now, workouts=workouts)
    second = aggregate(aggregator, now, workouts=list(workouts))

    assert first is second


def test_pr_label():
    assert pr_label("max_wrist_curl") == "MAX WRIST CURL"


@pytest.mark.asyncio
async def test_generate_fetches_all_collections(fake_repository_factory, make_workout, make_test, now):
    repository = fake_repository_factory(
        workouts=[make_workout(days=1), make_workout(days=200)],
        strength_tests=[make_test(days=2)],
    )

    snapshot = await ReportAggregator(repository).generate(1, user_name="Jane Doe", now=now)

    assert sorted(repository.calls) == ["cycles", "goals", "measurements", "strength_tests", "workouts"]
    assert snapshot.window_start == WINDOW_START
    assert snapshot.generated_at == now
    assert snapshot.user_name == "Jane Doe"
    assert snapshot.total_workouts == 1
    assert len(snapshot.latest_prs) == 1


@pytest.mark.asyncio
async def test_failed_fetch_is_reported(fake_repository_factory, now):
    repository = fake_repository_factory(failing="measurements")

    with pytest.raises(RecordFetchError) as excinfo:
        await ReportAggregator(repository).generate(1, now=now)

    assert excinfo.value.collection == "measurements"


def test_timezone_aware_boundaries_are_accepted(aggregator, make_workout, now):
    snapshot = aggregator.aggregate_snapshot(
        [make_workout(days=1), make_workout(days=100)],
        (),
        (),
        (),
        (),
        WINDOW_START.replace(tzinfo=timezone.utc),
        now=now.replace(tzinfo=timezone.utc),
    )

    assert snapshot.total_workouts == 1
    assert snapshot.workouts.recent_workouts == 1
    assert snapshot.window_start == WINDOW_START
    assert snapshot.generated_at == now


@pytest.mark.asyncio
async def test_generate_window_follows_settings(fake_repository_factory, make_workout, now, monkeypatch):
    monkeypatch.setattr(report_service.settings, "REPORT_WINDOW_MONTHS", 1)
    repository = fake_repository_factory(workouts=[make_workout(days=10), make_workout(days=40)])

    snapshot = await ReportAggregator(repository).generate(
        1, now=now.replace(tzinfo=timezone.utc)
    )

    assert snapshot.window_start == datetime(2024, 5, 15, 12, 0)
    assert snapshot.total_workouts == 1
