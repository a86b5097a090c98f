"""Training cycle model for time-boxed training phases."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Integer, String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainlog.models.base import Base

if TYPE_CHECKING:
    from trainlog.models.user import User
    from trainlog.models.workout import Workout


class TrainingCycle(Base):
    """A named training phase such as a strength or peaking block."""

    __tablename__ = "training_cycles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(255))
    cycle_type: Mapped[str] = mapped_column(String(50))  # e.g. "strength", "technique"
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    start_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="cycles")
    workouts: Mapped[List["Workout"]] = relationship("Workout", back_populates="cycle")

    def __repr__(self) -> str:
        return f"<TrainingCycle(id={self.id}, name='{self.name}', active={self.is_active})>"
