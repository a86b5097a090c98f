"""Read-only record repository feeding the progress analytics.

The analytics services never reach for a database themselves: a repository
is injected, which lets tests substitute an in-memory fake.
"""

import logging
from typing import Optional, Protocol, Sequence

from fastapi import Depends
from sqlalchemy.orm import Session

from trainlog.database import get_db
from trainlog.models.body_measurement import BodyMeasurement
from trainlog.models.goal import Goal
from trainlog.models.strength_test import StrengthTest
from trainlog.models.training_cycle import TrainingCycle
from trainlog.models.user import User
from trainlog.models.workout import Workout
from trainlog.schemas.records import (
    BodyMeasurementRecord,
    GoalRecord,
    StrengthTestRecord,
    TrainingCycleRecord,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)


class RecordFetchError(Exception):
    """Raised when one of the record collections could not be fetched."""

    def __init__(self, collection: str, message: str) -> None:
        self.collection = collection
        super().__init__(f"Failed to fetch {collection}: {message}")


class RecordRepository(Protocol):
    """
    Source of a user's training records.

    Every fetch returns an immutable collection ordered most recent first.
    """

    async def fetch_workouts(self, user_id: int) -> Sequence[WorkoutRecord]:
        ...

    async def fetch_strength_tests(self, user_id: int) -> Sequence[StrengthTestRecord]:
        ...

    async def fetch_measurements(self, user_id: int) -> Sequence[BodyMeasurementRecord]:
        ...

    async def fetch_cycles(self, user_id: int) -> Sequence[TrainingCycleRecord]:
        ...

    async def fetch_goals(self, user_id: int) -> Sequence[GoalRecord]:
        ...


class SqlAlchemyRecordRepository:
    """RecordRepository backed by a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    async def fetch_user(self, user_id: int) -> Optional[User]:
        """Load the user whose preferences shape the report."""
        return self.db.query(User).filter(User.id == user_id).first()

    async def fetch_workouts(self, user_id: int) -> Sequence[WorkoutRecord]:
        rows = self.db.query(Workout).filter(
            Workout.user_id == user_id
        ).order_by(Workout.created_at.desc()).all()
        logger.debug(f"Fetched {len(rows)} workouts for user {user_id}")
        return tuple(WorkoutRecord.model_validate(row) for row in rows)

    async def fetch_strength_tests(self, user_id: int) -> Sequence[StrengthTestRecord]:
        rows = self.db.query(StrengthTest).filter(
            StrengthTest.user_id == user_id
        ).order_by(StrengthTest.created_at.desc()).all()
        logger.debug(f"Fetched {len(rows)} strength tests for user {user_id}")
        return tuple(StrengthTestRecord.model_validate(row) for row in rows)

    async def fetch_measurements(self, user_id: int) -> Sequence[BodyMeasurementRecord]:
        rows = self.db.query(BodyMeasurement).filter(
            BodyMeasurement.user_id == user_id
        ).order_by(
            BodyMeasurement.measured_at.desc(),
            BodyMeasurement.created_at.desc(),
        ).all()
        logger.debug(f"Fetched {len(rows)} measurements for user {user_id}")
        return tuple(BodyMeasurementRecord.model_validate(row) for row in rows)

    async def fetch_cycles(self, user_id: int) -> Sequence[TrainingCycleRecord]:
        rows = self.db.query(TrainingCycle).filter(
            TrainingCycle.user_id == user_id
        ).order_by(TrainingCycle.start_date.desc()).all()
        logger.debug(f"Fetched {len(rows)} cycles for user {user_id}")
        return tuple(TrainingCycleRecord.model_validate(row) for row in rows)

    async def fetch_goals(self, user_id: int) -> Sequence[GoalRecord]:
        rows = self.db.query(Goal).filter(
            Goal.user_id == user_id
        ).order_by(Goal.created_at.desc()).all()
        logger.debug(f"Fetched {len(rows)} goals for user {user_id}")
        return tuple(GoalRecord.model_validate(row) for row in rows)


def get_repository(db: Session = Depends(get_db)) -> SqlAlchemyRecordRepository:
    """Dependency providing the record repository for a request."""
    return SqlAlchemyRecordRepository(db)
