"""Workout model for logged training sessions."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainlog.models.base import Base

if TYPE_CHECKING:
    from trainlog.models.user import User
    from trainlog.models.training_cycle import TrainingCycle


class Workout(Base):
    """A logged training session."""

    __tablename__ = "workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    cycle_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("training_cycles.id"), nullable=True, index=True
    )

    # Session details
    workout_type: Mapped[str] = mapped_column(String(50))  # e.g. "table_practice", "strength"
    duration_minutes: Mapped[int] = mapped_column(Integer)
    intensity: Mapped[int] = mapped_column(Integer)  # 1-10
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="workouts")
    cycle: Mapped[Optional["TrainingCycle"]] = relationship("TrainingCycle", back_populates="workouts")

    def __repr__(self) -> str:
        return f"<Workout(id={self.id}, type='{self.workout_type}', created_at={self.created_at})>"
