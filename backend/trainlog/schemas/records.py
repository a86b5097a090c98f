"""Immutable record schemas consumed by the progress analytics services.

Records are fetched from the record store most-recent-first and are frozen
once built, so every derived statistic is a pure function of them.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class WeightUnit(str, Enum):
    """Supported weight units."""
    LBS = "lbs"
    KG = "kg"


class CircumferenceUnit(str, Enum):
    """Units circumferences are displayed in."""
    INCHES = "in"
    CM = "cm"


def normalize_test_type(value: str) -> str:
    """
    Normalize a strength test key to its lowercase/underscore form.

    "Max Wrist Curl" and "max-wrist-curl" both become "max_wrist_curl".
    """
    key = re.sub(r"[\s\-]+", "_", value.strip().lower())
    return key.strip("_")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Drop timezone info after converting to UTC so timestamps compare."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _default_weight_unit(value: object) -> object:
    # Records captured before units were tracked carry no unit: they are lbs
    if value is None or value == "":
        return WeightUnit.LBS
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RecordBase(BaseModel):
    """Shared configuration for frozen record schemas."""

    id: int = Field(..., description="Record ID")
    user_id: int = Field(..., description="Owning user ID")

    class Config:
        from_attributes = True
        frozen = True


class WorkoutRecord(RecordBase):
    """A logged training session."""

    workout_type: str = Field(..., description="Workout type key")
    duration_minutes: int = Field(0, ge=0, description="Session length in minutes")
    intensity: int = Field(0, ge=0, le=10, description="Perceived intensity 1-10")
    notes: Optional[str] = Field(None, description="Free-text notes")
    cycle_id: Optional[int] = Field(None, description="Training cycle the session belongs to")
    created_at: datetime = Field(..., description="When the session was logged")

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class StrengthTestRecord(RecordBase):
    """A personal-record attempt. History is append-only."""

    test_type: str = Field(..., min_length=1, description="Normalized test type key")
    result_value: float = Field(..., description="Result in result_unit")
    result_unit: WeightUnit = Field(WeightUnit.LBS, description="Unit the result was entered in")
    notes: Optional[str] = Field(None, description="Free-text notes")
    created_at: datetime = Field(..., description="When the result was recorded")

    @field_validator("test_type")
    @classmethod
    def _normalize_test_type(cls, value: str) -> str:
        return normalize_test_type(value)

    @field_validator("result_unit", mode="before")
    @classmethod
    def _default_unit(cls, value: object) -> object:
        return _default_weight_unit(value)

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class BodyMeasurementRecord(RecordBase):
    """Body weight and circumferences. Circumferences are canonical cm."""

    weight: Optional[float] = Field(None, description="Body weight in weight_unit")
    weight_unit: WeightUnit = Field(WeightUnit.LBS, description="Unit the weight was entered in")
    arm_circumference: Optional[float] = Field(None, description="Upper arm, cm")
    forearm_circumference: Optional[float] = Field(None, description="Forearm, cm")
    wrist_circumference: Optional[float] = Field(None, description="Wrist, cm")
    notes: Optional[str] = Field(None, description="Free-text notes")
    measured_at: Optional[datetime] = Field(None, description="When the measurement was taken")
    created_at: Optional[datetime] = Field(None, description="When the row was created")

    @field_validator("weight_unit", mode="before")
    @classmethod
    def _default_unit(cls, value: object) -> object:
        return _default_weight_unit(value)

    @field_validator("measured_at", "created_at")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @property
    def timestamp(self) -> Optional[datetime]:
        """Measurement time, falling back to the creation time."""
        return self.measured_at or self.created_at


class TrainingCycleRecord(RecordBase):
    """A time-boxed training phase."""

    name: str = Field(..., description="Cycle name")
    cycle_type: str = Field(..., description="Category label")
    start_date: datetime = Field(..., description="Cycle start")
    end_date: datetime = Field(..., description="Cycle end")
    is_active: bool = Field(False, description="Whether the cycle is running")
    description: Optional[str] = Field(None, description="Cycle description")

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_dates(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class GoalRecord(RecordBase):
    """A countable training goal."""

    goal_type: str = Field(..., description="Goal category or title")
    target_value: float = Field(..., description="Value that completes the goal")
    current_value: float = Field(0.0, ge=0, description="Progress so far")
    deadline: Optional[datetime] = Field(None, description="Optional deadline")
    is_completed: bool = Field(False, description="Whether the goal is reached")
    notes: Optional[str] = Field(None, description="Free-text notes")
    created_at: Optional[datetime] = Field(None, description="When the goal was set")

    @field_validator("deadline", "created_at")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @property
    def reached(self) -> bool:
        """Completed either explicitly or by progress meeting the target."""
        return self.is_completed or self.current_value >= self.target_value
