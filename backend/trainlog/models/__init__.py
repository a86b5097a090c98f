"""Database models for the training log."""

from trainlog.models.base import Base
from trainlog.models.user import User
from trainlog.models.workout import Workout
from trainlog.models.strength_test import StrengthTest
from trainlog.models.body_measurement import BodyMeasurement
from trainlog.models.training_cycle import TrainingCycle
from trainlog.models.goal import Goal

__all__ = [
    "Base",
    "User",
    "Workout",
    "StrengthTest",
    "BodyMeasurement",
    "TrainingCycle",
    "Goal",
]
