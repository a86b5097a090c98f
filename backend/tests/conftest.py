import itertools
from datetime import datetime, timedelta
from typing import Optional

import pytest

from trainlog.models.user import User
from trainlog.schemas.records import (
    BodyMeasurementRecord,
    GoalRecord,
    StrengthTestRecord,
    TrainingCycleRecord,
    WorkoutRecord,
)
from trainlog.services.repository import RecordFetchError
from trainlog.services.window_service import record_timestamp

NOW = datetime(2024, 6, 15, 12, 0)

_ids = itertools.count(1)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


class FakeRepository:
    """In-memory record repository. Collections are served most recent first."""

    def __init__(
        self,
        workouts=(),
        strength_tests=(),
        measurements=(),
        cycles=(),
        goals=(),
        users=None,
        failing: Optional[str] = None,
    ):
        self.collections = {
            "workouts": tuple(workouts),
            "strength_tests": tuple(strength_tests),
            "measurements": tuple(measurements),
            "cycles": tuple(cycles),
            "goals": tuple(goals),
        }
        self.users = users if users is not None else {
            1: User(id=1, full_name="Jane Doe", weight_unit="lbs"),
        }
        self.failing = failing
        self.calls: list[str] = []

    def _serve(self, collection: str):
        self.calls.append(collection)
        if collection == self.failing:
            raise RecordFetchError(collection, "connection reset")
        records = self.collections[collection]
        return tuple(
            sorted(records, key=lambda r: record_timestamp(r) or datetime.min, reverse=True)
        )

    async def fetch_user(self, user_id: int):
        return self.users.get(user_id)

    async def fetch_workouts(self, user_id: int):
        return self._serve("workouts")

    async def fetch_strength_tests(self, user_id: int):
        return self._serve("strength_tests")

    async def fetch_measurements(self, user_id: int):
        return self._serve("measurements")

    async def fetch_cycles(self, user_id: int):
        return self._serve("cycles")

    async def fetch_goals(self, user_id: int):
        return self._serve("goals")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_workout():
    def factory(days: float = 0, duration: int = 60, intensity: int = 7,
                workout_type: str = "table_practice", cycle_id: Optional[int] = None):
        return WorkoutRecord(
            id=next(_ids),
            user_id=1,
            workout_type=workout_type,
            duration_minutes=duration,
            intensity=intensity,
            cycle_id=cycle_id,
            created_at=days_ago(days),
        )
    return factory


@pytest.fixture
def make_test():
    def factory(test_type: str = "grip_strength", value: float = 100,
                unit: Optional[str] = "lbs", days: float = 0):
        return StrengthTestRecord(
            id=next(_ids),
            user_id=1,
            test_type=test_type,
            result_value=value,
            result_unit=unit,
            created_at=days_ago(days),
        )
    return factory


@pytest.fixture
def make_measurement():
    def factory(days: float = 0, weight: Optional[float] = None, weight_unit: Optional[str] = "lbs",
                arm: Optional[float] = None, forearm: Optional[float] = None,
                wrist: Optional[float] = None, measured: bool = True):
        timestamp = days_ago(days)
        return BodyMeasurementRecord(
            id=next(_ids),
            user_id=1,
            weight=weight,
            weight_unit=weight_unit,
            arm_circumference=arm,
            forearm_circumference=forearm,
            wrist_circumference=wrist,
            measured_at=timestamp if measured else None,
            created_at=timestamp,
        )
    return factory


@pytest.fixture
def make_cycle():
    def factory(name: str = "Strength Block", start_days: float = 30, end_days: float = -30,
                is_active: bool = True, cycle_type: str = "strength", cycle_id: Optional[int] = None):
        return TrainingCycleRecord(
            id=cycle_id if cycle_id is not None else next(_ids),
            user_id=1,
            name=name,
            cycle_type=cycle_type,
            start_date=days_ago(start_days),
            end_date=days_ago(end_days),
            is_active=is_active,
        )
    return factory


@pytest.fixture
def make_goal():
    def factory(target: float = 10, current: float = 0, is_completed: bool = False,
                goal_type: str = "table_sessions"):
        return GoalRecord(
            id=next(_ids),
            user_id=1,
            goal_type=goal_type,
            target_value=target,
            current_value=current,
            is_completed=is_completed,
            created_at=days_ago(10),
        )
    return factory


@pytest.fixture
def fake_repository_factory():
    return FakeRepository
