"""Report generation lifecycle.

A report moves Idle -> Generating -> Ready or Failed. From Ready the snapshot
can be shared as an image or exported as a document, after which the flow
returns to Idle. A failure is held until it is acknowledged.
"""

import logging
from datetime import datetime
from typing import Optional, Protocol

from trainlog.schemas.records import WeightUnit
from trainlog.schemas.report import ExportArtifact, ReportSnapshot, ReportState
from trainlog.services.render_service import ReportRenderer, report_renderer
from trainlog.services.report_service import ReportAggregator
from trainlog.services.repository import RecordFetchError

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed in the current state."""

    def __init__(self, action: str, state: ReportState):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while report is {state.value}")


class ExportFailedError(Exception):
    """Raised when an export sink could not deliver an artifact."""

    def __init__(self, message: str, mime_type: str = None):
        self.message = message
        self.mime_type = mime_type
        super().__init__(self.message)


class ExportSink(Protocol):
    """Platform collaborator receiving rendered artifacts (share sheet, file store)."""

    async def deliver(self, artifact: ExportArtifact) -> None:
        ...


class ReportGenerationFlow:
    """Drive one user's report through generation and export."""

    GENERATION_FAILED_MESSAGE = "Failed to load your progress data. Please try again."
    SHARE_FAILED_MESSAGE = "Failed to share progress image."
    EXPORT_FAILED_MESSAGE = "Failed to export report document."

    def __init__(
        self,
        aggregator: ReportAggregator,
        sink: ExportSink,
        renderer: Optional[ReportRenderer] = None,
    ) -> None:
        self.aggregator = aggregator
        self.sink = sink
        self.renderer = renderer or report_renderer
        self._state = ReportState.IDLE
        self._snapshot: Optional[ReportSnapshot] = None
        self._error: Optional[str] = None

    @property
    def state(self) -> ReportState:
        return self._state

    @property
    def snapshot(self) -> Optional[ReportSnapshot]:
        """The generated snapshot while Ready."""
        return self._snapshot

    @property
    def error_message(self) -> Optional[str]:
        """User-facing failure message while Failed."""
        return self._error

    def _require(self, action: str, *allowed: ReportState) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(action, self._state)

    def _transition(self, state: ReportState) -> None:
        logger.info(f"Report state {self._state.value} -> {state.value}")
        self._state = state

    def _reset(self) -> None:
        self._snapshot = None
        self._error = None
        self._transition(ReportState.IDLE)

    async def generate(
        self,
        user_id: int,
        weight_unit: WeightUnit = WeightUnit.LBS,
        user_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[ReportSnapshot]:
        """
        Aggregate a fresh snapshot for the user.

        A failed record fetch moves the flow to Failed instead of raising;
        the message is available from error_message until acknowledged.

        Returns:
            The snapshot when Ready, None when Failed

        Raises:
            InvalidTransitionError: If the flow is not Idle
        """
        self._require("generate", ReportState.IDLE)
        self._transition(ReportState.GENERATING)

        try:
            snapshot = await self.aggregator.generate(
                user_id, weight_unit=weight_unit, user_name=user_name, now=now
            )
        except RecordFetchError as e:
            logger.error(f"Report generation failed for user {user_id}: {e}")
            self._error = self.GENERATION_FAILED_MESSAGE
            self._transition(ReportState.FAILED)
            return None
        except Exception:
            self._error = self.GENERATION_FAILED_MESSAGE
            self._transition(ReportState.FAILED)
            raise

        self._snapshot = snapshot
        self._transition(ReportState.READY)
        return snapshot

    async def share_as_image(self) -> ExportArtifact:
        """
        Render the visual card and hand it to the sink as image/svg+xml.

        Raises:
            InvalidTransitionError: If no report is ready
            ExportFailedError: If the sink could not deliver the image
        """
        self._require("share image", ReportState.READY)
        artifact = self.renderer.export_card(self._snapshot)
        await self._deliver(artifact, self.SHARE_FAILED_MESSAGE)
        return artifact

    async def export_as_document(self) -> ExportArtifact:
        """
        Render the report document and hand it to the sink as text/html.

        Raises:
            InvalidTransitionError: If no report is ready
            ExportFailedError: If the sink could not convert the document
        """
        self._require("export document", ReportState.READY)
        artifact = self.renderer.export_document(self._snapshot)
        await self._deliver(artifact, self.EXPORT_FAILED_MESSAGE)
        return artifact

    async def _deliver(self, artifact: ExportArtifact, failure_message: str) -> None:
        try:
            await self.sink.deliver(artifact)
        except Exception as e:
            logger.error(f"Delivering {artifact.filename} ({artifact.mime_type}) failed: {e}")
            self._reset()
            raise ExportFailedError(failure_message, mime_type=artifact.mime_type) from e

        logger.info(f"Delivered {artifact.filename} ({artifact.size_bytes} bytes)")
        self._reset()

    def dismiss(self) -> None:
        """Close a ready report without exporting it."""
        self._require("dismiss", ReportState.READY)
        self._reset()

    def acknowledge(self) -> None:
        """Clear a failure and return to Idle."""
        self._require("acknowledge", ReportState.FAILED)
        self._reset()
