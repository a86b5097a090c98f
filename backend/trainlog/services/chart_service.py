"""Chart series construction for the progress screens.

Record collections arrive from the record store most-recent-first. Every
series produced here is ordered oldest-first, which is what the charts plot.
All builders are pure functions of their inputs.
"""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Iterable, Optional, Sequence

from trainlog.schemas.records import (
    BodyMeasurementRecord,
    CircumferenceUnit,
    StrengthTestRecord,
    TrainingCycleRecord,
    WeightUnit,
    WorkoutRecord,
    normalize_test_type,
    to_naive_utc,
)
from trainlog.schemas.report import (
    ChartSeries,
    CycleLog,
    DistributionSlice,
    MeasurementField,
    SeriesPoint,
)
from trainlog.services.unit_service import UnitConverter, round_half_up, unit_converter
from trainlog.services.window_service import record_timestamp

logger = logging.getLogger(__name__)

ValueSelector = Callable[[Any], Optional[float]]
LabelFormatter = Callable[[Any, int], str]

CIRCUMFERENCE_FIELDS = {
    MeasurementField.ARM: "arm_circumference",
    MeasurementField.FOREARM: "forearm_circumference",
    MeasurementField.WRIST: "wrist_circumference",
}


def short_date_label(moment: datetime) -> str:
    """Label such as "Mar 1"."""
    return f"{moment:%b} {moment.day}"


def index_label(prefix: str) -> LabelFormatter:
    """Label formatter producing W1, W2, ... style labels."""
    def formatter(_record: Any, index: int) -> str:
        return f"{prefix}{index + 1}"
    return formatter


class ChartSeriesBuilder:
    """Turn record collections into ordered label/value series."""

    WEEKLY_BUCKETS = 12
    RECENT_LIMIT = 15
    CYCLE_LIMIT = 10
    CYCLE_NAME_LENGTH = 10

    def __init__(self, converter: Optional[UnitConverter] = None) -> None:
        self.units = converter or unit_converter

    def build_time_series(
        self,
        records: Sequence[Any],
        value_selector: ValueSelector,
        label_formatter: LabelFormatter,
        name: str = "series",
        unit: Optional[str] = None,
    ) -> ChartSeries:
        """
        Build an oldest-first series from most-recent-first records.

        Args:
            records: Records ordered most recent first
            value_selector: Extracts the plotted value from a record
            label_formatter: Called with (record, position) where position is
                the zero-based index in the emitted, oldest-first order
            name: Series identifier
            unit: Unit of the values

        Returns:
            ChartSeries ordered ascending by time
        """
        ascending = list(reversed(records))
        points = []
        for record in ascending:
            value = value_selector(record)
            if value is None:
                continue
            points.append(
                SeriesPoint(
                    label=label_formatter(record, len(points)),
                    value=value,
                    timestamp=record_timestamp(record),
                )
            )
        return ChartSeries(name=name, unit=unit, points=tuple(points))

    def build_frequency_series(self, records: Iterable[Any], name: str = "frequency") -> ChartSeries:
        """Count records per calendar day, oldest day first."""
        per_day: Counter[date] = Counter()
        for record in records:
            timestamp = record_timestamp(record)
            if timestamp is not None:
                per_day[timestamp.date()] += 1

        points = tuple(
            SeriesPoint(
                label=day.isoformat(),
                value=per_day[day],
                timestamp=datetime.combine(day, time.min),
            )
            for day in sorted(per_day)
        )
        return ChartSeries(name=name, unit="sessions", points=points)

    def build_weekly_frequency(
        self,
        workouts: Iterable[WorkoutRecord],
        strength_tests: Iterable[StrengthTestRecord],
        now: Optional[datetime] = None,
        weeks: int = WEEKLY_BUCKETS,
    ) -> ChartSeries:
        """
        Workouts plus strength tests per rolling week.

        Buckets are whole days: bucket W{n} covers the 7 days ending
        (weeks - n) * 7 days before today.
        """
        now = to_naive_utc(now) or datetime.utcnow()
        timestamps = [w.created_at for w in workouts] + [t.created_at for t in strength_tests]

        points = []
        for offset in range(weeks - 1, -1, -1):
            week_start = datetime.combine(
                (now - timedelta(days=offset * 7 + 6)).date(), time.min
            )
            week_end = datetime.combine((now - timedelta(days=offset * 7)).date(), time.max)
            count = sum(1 for ts in timestamps if week_start <= ts <= week_end)
            points.append(
                SeriesPoint(label=f"W{weeks - offset}", value=count, timestamp=week_start)
            )
        return ChartSeries(name="weekly_frequency", unit="sessions", points=tuple(points))

    def build_duration_series(self, workouts: Sequence[WorkoutRecord]) -> ChartSeries:
        """Durations of the most recent workouts, oldest first."""
        recent = [w for w in workouts if w.duration_minutes > 0][: self.RECENT_LIMIT]
        return self.build_time_series(
            recent,
            lambda w: w.duration_minutes,
            index_label("W"),
            name="duration",
            unit="min",
        )

    def build_intensity_series(self, workouts: Sequence[WorkoutRecord]) -> ChartSeries:
        """Intensities of the most recent workouts, oldest first."""
        recent = [w for w in workouts if w.intensity > 0][: self.RECENT_LIMIT]
        return self.build_time_series(
            recent,
            lambda w: w.intensity,
            index_label("W"),
            name="intensity",
            unit="/10",
        )

    def build_pr_timeline(
        self,
        strength_tests: Iterable[StrengthTestRecord],
        test_type: str,
        weight_unit: WeightUnit = WeightUnit.LBS,
    ) -> ChartSeries:
        """
        Full history of one test type in the user's display unit.

        Each result is converted from the unit it was recorded in and rounded
        to a whole number.
        """
        key = normalize_test_type(test_type)
        history = sorted(
            (t for t in strength_tests if t.test_type == key),
            key=lambda t: t.created_at,
        )
        points = tuple(
            SeriesPoint(
                label=short_date_label(t.created_at),
                value=self.units.convert_weight(t.result_value, t.result_unit, weight_unit),
                timestamp=t.created_at,
            )
            for t in history
        )
        unit = self.units.normalize_weight_unit(weight_unit).value
        return ChartSeries(name=f"pr_timeline:{key}", unit=unit, points=points)

    def measurement_value(
        self,
        measurement: BodyMeasurementRecord,
        field: MeasurementField,
        weight_unit: WeightUnit,
        rounded: bool = True,
    ) -> Optional[float]:
        """
        Display value of one measurement field, or None when not recorded.

        Weights are converted from the record's own unit. Circumferences are
        converted from canonical cm; inches are rounded, centimetres are not.
        """
        field = MeasurementField(field)
        if field == MeasurementField.WEIGHT:
            if measurement.weight is None or measurement.weight <= 0:
                return None
            return self.units.convert_weight(
                measurement.weight, measurement.weight_unit, weight_unit, rounded=rounded
            )

        value_cm = getattr(measurement, CIRCUMFERENCE_FIELDS[field])
        if value_cm is None or value_cm <= 0:
            return None
        converted = self.units.convert_circumference(value_cm, weight_unit)
        if rounded and self.units.get_circumference_unit(weight_unit) == CircumferenceUnit.INCHES:
            return round_half_up(converted)
        return converted

    def measurement_display(
        self,
        measurement: BodyMeasurementRecord,
        field: MeasurementField,
        weight_unit: WeightUnit,
    ) -> str:
        """Formatted measurement such as "182 lbs", "15 in" or "38.1 cm"."""
        field = MeasurementField(field)
        if field == MeasurementField.WEIGHT:
            value = self.measurement_value(measurement, field, weight_unit, rounded=False)
            if value is None:
                return "N/A"
            return self.units.format_weight(value, weight_unit)
        return self.units.format_circumference(
            getattr(measurement, CIRCUMFERENCE_FIELDS[field]), weight_unit
        )

    def measurement_unit(self, field: MeasurementField, weight_unit: WeightUnit) -> str:
        """Display unit of a measurement field."""
        if MeasurementField(field) == MeasurementField.WEIGHT:
            return self.units.normalize_weight_unit(weight_unit).value
        return self.units.get_circumference_unit(weight_unit).value

    def build_measurement_series(
        self,
        measurements: Iterable[BodyMeasurementRecord],
        field: MeasurementField,
        weight_unit: WeightUnit = WeightUnit.LBS,
    ) -> ChartSeries:
        """The most recent samples of one measurement field, oldest first."""
        field = MeasurementField(field)
        samples = []
        for m in measurements:
            value = self.measurement_value(m, field, weight_unit)
            if m.timestamp is not None and value is not None:
                samples.append((m.timestamp, value))
        samples.sort(key=lambda sample: sample[0])
        samples = samples[-self.RECENT_LIMIT:]

        points = tuple(
            SeriesPoint(label=f"M{index + 1}", value=value, timestamp=timestamp)
            for index, (timestamp, value) in enumerate(samples)
        )
        return ChartSeries(
            name=f"measurement:{field.value}",
            unit=self.measurement_unit(field, weight_unit),
            points=points,
        )

    def build_workout_type_distribution(
        self, workouts: Sequence[WorkoutRecord]
    ) -> tuple[DistributionSlice, ...]:
        """Workout count and whole-number share per workout type."""
        counts = Counter(w.workout_type for w in workouts)
        total = len(workouts)
        return tuple(
            DistributionSlice(
                workout_type=workout_type,
                count=count,
                percentage=round_half_up(count / total * 100),
            )
            for workout_type, count in counts.items()
        )

    def build_cycle_logs(
        self,
        cycles: Sequence[TrainingCycleRecord],
        workouts: Sequence[WorkoutRecord],
        now: Optional[datetime] = None,
    ) -> tuple[CycleLog, ...]:
        """Workout totals for the last ten cycles."""
        now = to_naive_utc(now) or datetime.utcnow()
        logs = []
        for cycle in list(cycles)[-self.CYCLE_LIMIT:]:
            cycle_workouts = [w for w in workouts if w.cycle_id == cycle.id]
            count = len(cycle_workouts)
            name = cycle.name
            if len(name) > self.CYCLE_NAME_LENGTH:
                name = name[: self.CYCLE_NAME_LENGTH] + "..."
            logs.append(
                CycleLog(
                    cycle_id=cycle.id,
                    name=name,
                    full_name=cycle.name,
                    workout_count=count,
                    average_intensity=(
                        sum(w.intensity for w in cycle_workouts) / count if count else 0.0
                    ),
                    total_duration=sum(w.duration_minutes for w in cycle_workouts),
                    is_active=cycle.is_active,
                    is_completed=cycle.end_date < now,
                    start_date=cycle.start_date,
                    end_date=cycle.end_date,
                )
            )
        logger.debug(f"Built {len(logs)} cycle logs from {len(cycles)} cycles")
        return tuple(logs)


# Singleton instance
chart_builder = ChartSeriesBuilder()
