"""User model holding the display preferences used by progress reports."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Integer, String, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainlog.models.base import Base

if TYPE_CHECKING:
    from trainlog.models.workout import Workout
    from trainlog.models.strength_test import StrengthTest
    from trainlog.models.body_measurement import BodyMeasurement
    from trainlog.models.training_cycle import TrainingCycle
    from trainlog.models.goal import Goal


class User(Base):
    """Training-log user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, index=True, nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    preferred_hand: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # left/right
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False)

    # Display preference; circumference units are derived from it
    weight_unit: Mapped[str] = mapped_column(String(3), default="lbs")  # lbs/kg

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    workouts: Mapped[List["Workout"]] = relationship(
        "Workout", back_populates="user", cascade="all, delete-orphan"
    )
    strength_tests: Mapped[List["StrengthTest"]] = relationship(
        "StrengthTest", back_populates="user", cascade="all, delete-orphan"
    )
    measurements: Mapped[List["BodyMeasurement"]] = relationship(
        "BodyMeasurement", back_populates="user", cascade="all, delete-orphan"
    )
    cycles: Mapped[List["TrainingCycle"]] = relationship(
        "TrainingCycle", back_populates="user", cascade="all, delete-orphan"
    )
    goals: Mapped[List["Goal"]] = relationship(
        "Goal", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.full_name}', weight_unit={self.weight_unit})>"
