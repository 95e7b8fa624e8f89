"""Report generation and retrieval endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from .analytics import resolve_building
from ..dependencies import get_report_builder, get_repository
from ..models import GenerateReportRequest, GenerateReportResponse, ReportMetadataResponse
from ...database.repository import EnergyRepository
from ...report_builder import ReportBuilder
from ...schema import ReportFormat

router = APIRouter(tags=["reports"])

VALID_FORMATS = {f.value for f in ReportFormat}
_MEDIA_TYPES = {"csv": "text/csv", "pdf": "application/pdf"}


def _check_format(fmt: str) -> str:
    if fmt.lower() not in VALID_FORMATS:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid format '{fmt}'. Valid: {sorted(VALID_FORMATS)}",
        )
    return fmt.lower()


@router.post(
    "/generate",
    response_model=GenerateReportResponse,
    summary="Generate an energy report",
    status_code=200,
)
def generate_report(
    request: GenerateReportRequest,
    builder: ReportBuilder = Depends(get_report_builder),
    repo: EnergyRepository = Depends(get_repository),
) -> GenerateReportResponse:
    """Build the report for the period and save it in every requested format."""
    formats = [_check_format(f) for f in request.formats]
    if request.end < request.start:
        raise HTTPException(status_code=400, detail="end must not precede start")
    building = resolve_building(repo, request.building_id)

    report = builder.build_report(request.start, request.end, building)
    files: Dict[str, str] = {}
    for fmt in formats:
        files[fmt] = builder.save(report, fmt=fmt)

    return GenerateReportResponse(
        report_id=report.metadata.report_id,
        period_start=request.start,
        period_end=request.end,
        formats=formats,
        files=files,
        report=report.model_dump(mode="json", exclude={"visualizations"}),
    )


@router.get(
    "/{report_id}",
    response_model=ReportMetadataResponse,
    summary="Get report metadata",
)
def get_report(
    report_id: str,
    builder: ReportBuilder = Depends(get_report_builder),
) -> ReportMetadataResponse:
    meta = builder.get_report_metadata(report_id)
    if meta is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return ReportMetadataResponse(**meta)


@router.get(
    "/{report_id}/download/{fmt}",
    summary="Download report file",
)
def download_report(
    report_id: str,
    fmt: str,
    builder: ReportBuilder = Depends(get_report_builder),
) -> FileResponse:
    fmt = _check_format(fmt)
    file_path = builder.get_report_file(report_id, fmt)
    if file_path is None or not Path(file_path).is_file():
        raise HTTPException(status_code=404, detail="Report file not found")
    return FileResponse(
        file_path,
        media_type=_MEDIA_TYPES[fmt],
        filename=Path(file_path).name,
    )
