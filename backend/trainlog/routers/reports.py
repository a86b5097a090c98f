"""Progress report API router: snapshot, printable document and share card."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from trainlog.config import get_settings
from trainlog.schemas.records import WeightUnit
from trainlog.schemas.report import ExportArtifact, ReportSnapshot
from trainlog.services.render_service import report_renderer
from trainlog.services.report_service import ReportAggregator
from trainlog.services.repository import (
    RecordFetchError,
    SqlAlchemyRecordRepository,
    get_repository,
)
from trainlog.services.unit_service import unit_converter
from trainlog.services.window_service import current_time

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()


async def resolve_preferences(
    repository: SqlAlchemyRecordRepository,
    user_id: int,
    unit: Optional[WeightUnit] = None,
) -> tuple[WeightUnit, Optional[str]]:
    """
    Look up the user's display unit and name.

    Raises:
        HTTPException: 404 if the user does not exist
    """
    user = await repository.fetch_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found",
        )
    weight_unit = unit_converter.normalize_weight_unit(
        unit or user.weight_unit or settings.DEFAULT_WEIGHT_UNIT
    )
    return weight_unit, user.full_name


async def build_snapshot(
    user_id: int,
    unit: Optional[WeightUnit] = Query(None, description="Override the user's weight unit"),
    repository: SqlAlchemyRecordRepository = Depends(get_repository),
    now: datetime = Depends(current_time),
) -> ReportSnapshot:
    """
    Aggregate the report snapshot for a user.

    Raises:
        HTTPException: 404 if the user does not exist, 503 if records could
            not be loaded
    """
    weight_unit, user_name = await resolve_preferences(repository, user_id, unit)
    aggregator = ReportAggregator(repository)
    try:
        return await aggregator.generate(
            user_id, weight_unit=weight_unit, user_name=user_name, now=now
        )
    except RecordFetchError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not load progress data: {e}",
        )


def artifact_response(artifact: ExportArtifact, attachment: bool = True) -> Response:
    """Wrap an exported artifact in a download response."""
    disposition = "attachment" if attachment else "inline"
    return Response(
        content=artifact.content,
        media_type=artifact.mime_type,
        headers={
            "Content-Disposition": f'{disposition}; filename="{artifact.filename}"',
            "Content-Length": str(artifact.size_bytes),
        },
    )


@router.get("/{user_id}/snapshot", response_model=ReportSnapshot)
async def get_snapshot(
    snapshot: ReportSnapshot = Depends(build_snapshot),
) -> ReportSnapshot:
    """
    Get the aggregated progress report for the last three months.

    Returns:
        Report snapshot with workout totals, PRs, measurement trends, goals,
        active cycles, performance score and recommendations
    """
    return snapshot


@router.get("/{user_id}/document")
async def get_document(
    snapshot: ReportSnapshot = Depends(build_snapshot),
) -> Response:
    """
    Download the printable report document (XHTML).

    The document is self-contained so it can be converted to PDF as is.
    """
    artifact = report_renderer.export_document(snapshot)
    logger.info(f"Rendered report document {artifact.filename} ({artifact.size_bytes} bytes)")
    return artifact_response(artifact)


@router.get("/{user_id}/card")
async def get_card(
    download: bool = Query(False, description="Send as attachment instead of inline"),
    snapshot: ReportSnapshot = Depends(build_snapshot),
) -> Response:
    """Get the 1080x1920 shareable progress card (SVG)."""
    artifact = report_renderer.export_card(snapshot)
    logger.info(f"Rendered progress card {artifact.filename} ({artifact.size_bytes} bytes)")
    return artifact_response(artifact, attachment=download)
