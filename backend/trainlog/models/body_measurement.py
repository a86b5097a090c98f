"""Body measurement model.

Circumferences are always stored in centimetres. Weight keeps the unit it
was entered in.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Integer, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainlog.models.base import Base

if TYPE_CHECKING:
    from trainlog.models.user import User


class BodyMeasurement(Base):
    """Body weight and limb circumference measurement."""

    __tablename__ = "body_measurements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    weight_unit: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)  # lbs/kg

    # Canonical centimetres
    arm_circumference: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    forearm_circumference: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wrist_circumference: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    measured_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="measurements")

    def __repr__(self) -> str:
        return f"<BodyMeasurement(id={self.id}, weight={self.weight}, measured_at={self.measured_at})>"
