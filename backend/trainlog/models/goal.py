"""Goal model with clamped progress tracking."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String, DateTime, Float, Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainlog.models.base import Base

if TYPE_CHECKING:
    from trainlog.models.user import User


class Goal(Base):
    """A countable training goal, e.g. "20 table sessions"."""

    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    goal_type: Mapped[str] = mapped_column(String(100))
    target_value: Mapped[float] = mapped_column(Float)
    current_value: Mapped[float] = mapped_column(Float, default=0.0)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="goals")

    def adjust_progress(self, delta: float) -> float:
        """
        Increment or decrement goal progress.

        Progress never drops below zero. The goal is marked completed as soon
        as the current value reaches the target.

        Args:
            delta: Amount to add (negative to decrement)

        Returns:
            The new current value
        """
        self.current_value = max(0.0, (self.current_value or 0.0) + delta)
        if self.current_value >= self.target_value:
            self.is_completed = True
        return self.current_value

    def __repr__(self) -> str:
        return f"<Goal(id={self.id}, type='{self.goal_type}', {self.current_value}/{self.target_value})>"
