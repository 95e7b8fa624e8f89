"""Energy reading endpoints — list, bulk create, delete, CSV upload."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from ..dependencies import get_config, get_repository
from ..models import (
    DeleteResponse,
    EnergyDataCreateRequest,
    EnergyDataCreateResponse,
    EnergyDataResponse,
    UploadResponse,
)
from ...database.repository import EnergyRepository
from ...ingest.csv_parser import parse_energy_csv, template_csv
from ...schema import EnergyReadingIn, EnergyReadingOut, ReadingsSummary
from ...telemetry import get_logger

router = APIRouter(tags=["energy-data"])

_logger = get_logger(__name__)


def _check_building(repo: EnergyRepository, building_id: Optional[int]) -> None:
    if building_id is not None and repo.get_building(building_id) is None:
        raise HTTPException(status_code=404, detail="Building not found")


@router.get(
    "",
    response_model=EnergyDataResponse,
    summary="List energy readings with summary statistics",
)
def list_energy_data(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    source: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=100_000),
    building_id: Optional[int] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
) -> EnergyDataResponse:
    """Readings newest-first, optionally filtered by date range and source."""
    rows = repo.list_readings(
        start=start_date, end=end_date, source=source, limit=limit, building_id=building_id,
    )
    return EnergyDataResponse(
        data=[EnergyReadingOut(**r) for r in rows],
        summary=ReadingsSummary(**repo.summarize(rows)),
    )


@router.post(
    "",
    response_model=EnergyDataCreateResponse,
    summary="Bulk-create energy readings",
)
def create_energy_data(
    request: EnergyDataCreateRequest,
    repo: EnergyRepository = Depends(get_repository),
) -> EnergyDataCreateResponse:
    """Store every record in one transaction; duplicates are skipped."""
    if not request.data:
        raise HTTPException(
            status_code=400,
            detail="Invalid data format. Expected array of energy readings.",
        )
    _check_building(repo, request.building_id)

    readings: List[EnergyReadingIn] = []
    for index, record in enumerate(request.data):
        try:
            readings.append(EnergyReadingIn.model_validate(record))
        except ValidationError as exc:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid record at index {index}: missing or invalid required fields",
            ) from exc

    created = repo.insert_readings(readings, building_id=request.building_id)
    return EnergyDataCreateResponse(records_created=created, total_submitted=len(readings))


@router.delete(
    "",
    response_model=DeleteResponse,
    summary="Delete one reading or every reading in a date range",
)
def delete_energy_data(
    id: Optional[int] = Query(None),  # noqa: A002
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    repo: EnergyRepository = Depends(get_repository),
) -> DeleteResponse:
    if id is not None:
        if not repo.delete_reading(id):
            raise HTTPException(status_code=404, detail="Reading not found")
        return DeleteResponse(message="Record deleted successfully", deleted_count=1)
    if start_date is not None and end_date is not None:
        count = repo.delete_readings_between(start_date, end_date)
        return DeleteResponse(message="Records deleted successfully", deleted_count=count)
    raise HTTPException(
        status_code=400,
        detail="Must provide either id or date range for deletion",
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a CSV file of readings",
)
async def upload_energy_csv(
    file: UploadFile = File(...),
    building_id: Optional[int] = Query(None),
    repo: EnergyRepository = Depends(get_repository),
) -> UploadResponse:
    """Parse the CSV, store the valid rows and report the rejected ones."""
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded CSV") from exc

    _check_building(repo, building_id)
    result = parse_energy_csv(text, preview_rows=get_config().upload_preview_rows)
    created = repo.insert_readings(result.data, building_id=building_id) if result.data else 0
    _logger.info(
        "CSV upload %s: %d created, %d rejected", file.filename, created, len(result.errors),
    )
    return UploadResponse(
        records_created=created,
        total_valid=len(result.data),
        errors=result.errors,
        preview=[r.model_dump(mode="json", by_alias=True) for r in result.preview],
    )


@router.get(
    "/template",
    response_class=PlainTextResponse,
    summary="Download the CSV upload template",
)
def download_template() -> PlainTextResponse:
    return PlainTextResponse(
        template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="energy-data-template.csv"'},
    )
