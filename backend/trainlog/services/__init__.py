"""Services package for progress analytics and report rendering."""

from trainlog.services.unit_service import UnitConverter, unit_converter
from trainlog.services.window_service import TimeWindow, TimeWindowFilter, window_filter
from trainlog.services.pr_service import PRDeduplicator, pr_deduplicator
from trainlog.services.trend_service import TrendCalculator, trend_calculator
from trainlog.services.chart_service import ChartSeriesBuilder, chart_builder
from trainlog.services.repository import (
    RecordFetchError,
    RecordRepository,
    SqlAlchemyRecordRepository,
)
from trainlog.services.report_service import ReportAggregator
from trainlog.services.render_service import ReportRenderer, report_renderer
from trainlog.services.generation_service import (
    ExportFailedError,
    ExportSink,
    InvalidTransitionError,
    ReportGenerationFlow,
)

__all__ = [
    "UnitConverter",
    "unit_converter",
    "TimeWindow",
    "TimeWindowFilter",
    "window_filter",
    "PRDeduplicator",
    "pr_deduplicator",
    "TrendCalculator",
    "trend_calculator",
    "ChartSeriesBuilder",
    "chart_builder",
    "RecordFetchError",
    "RecordRepository",
    "SqlAlchemyRecordRepository",
    "ReportAggregator",
    "ReportRenderer",
    "report_renderer",
    "ExportFailedError",
    "ExportSink",
    "InvalidTransitionError",
    "ReportGenerationFlow",
]
