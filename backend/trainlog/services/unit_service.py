"""Weight and circumference unit conversion.

Weights are stored in whatever unit they were entered in, so every display
conversion has to start from the record's own unit. Circumferences are stored
in centimetres and shown in inches to users who weigh themselves in pounds.
"""

import logging
import math
from typing import Optional, Union

from trainlog.schemas.records import CircumferenceUnit, WeightUnit

logger = logging.getLogger(__name__)

UnitLike = Union[WeightUnit, str, None]


def round_half_up(value: float) -> int:
    """Round to the nearest whole number, halves rounding up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


class UnitConverter:
    """Convert weights and circumferences between storage and display units."""

    LBS_TO_KG = 0.453592
    KG_TO_LBS = 2.20462
    CM_PER_INCH = 2.54

    # Product convention: the circumference unit follows the weight unit
    CIRCUMFERENCE_UNITS = {
        WeightUnit.LBS: CircumferenceUnit.INCHES,
        WeightUnit.KG: CircumferenceUnit.CM,
    }

    def normalize_weight_unit(self, unit: UnitLike) -> WeightUnit:
        """
        Resolve a possibly missing unit tag to a WeightUnit.

        Missing or unrecognised tags fall back to pounds, the unit records
        were captured in before units were tracked.
        """
        if isinstance(unit, WeightUnit):
            return unit
        if unit:
            try:
                return WeightUnit(str(unit).strip().lower())
            except ValueError:
                pass
        logger.warning(f"Unknown weight unit {unit!r}, assuming lbs")
        return WeightUnit.LBS

    def convert_weight(
        self,
        value: float,
        from_unit: UnitLike,
        to_unit: UnitLike,
        rounded: bool = True,
    ) -> float:
        """
        Convert a weight between pounds and kilograms.

        Args:
            value: Weight in from_unit
            from_unit: Unit the value is stored in
            to_unit: Unit to display
            rounded: Round to the nearest whole unit (display values). Pass
                False for values that feed further arithmetic.

        Returns:
            Converted weight

        Example:
            >>> UnitConverter().convert_weight(80, "kg", "lbs")
            176
        """
        source = self.normalize_weight_unit(from_unit)
        target = self.normalize_weight_unit(to_unit)

        if source == target:
            converted = float(value)
        elif source == WeightUnit.LBS:
            converted = value * self.LBS_TO_KG
        else:
            converted = value * self.KG_TO_LBS

        if rounded:
            return round_half_up(converted)
        return converted

    def get_circumference_unit(self, weight_unit: UnitLike) -> CircumferenceUnit:
        """Circumference display unit for a weight-unit preference."""
        return self.CIRCUMFERENCE_UNITS[self.normalize_weight_unit(weight_unit)]

    def convert_circumference(self, value_cm: float, weight_unit: UnitLike) -> float:
        """Convert a canonical-cm circumference to the user's display unit."""
        if self.get_circumference_unit(weight_unit) == CircumferenceUnit.INCHES:
            return value_cm / self.CM_PER_INCH
        return value_cm

    def format_weight(self, value: float, unit: UnitLike) -> str:
        """Format a weight as e.g. "100 lbs"."""
        return f"{round_half_up(value)} {self.normalize_weight_unit(unit).value}"

    def format_circumference(self, value_cm: Optional[float], weight_unit: UnitLike) -> str:
        """
        Format a canonical-cm circumference for display.

        Inches are shown as whole numbers, centimetres with one decimal.
        """
        if value_cm is None:
            return "N/A"
        unit = self.get_circumference_unit(weight_unit)
        converted = self.convert_circumference(value_cm, weight_unit)
        if unit == CircumferenceUnit.INCHES:
            return f"{round_half_up(converted)} {unit.value}"
        return f"{converted:.1f} {unit.value}"


# Singleton instance
unit_converter = UnitConverter()
