"""Building settings endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..dependencies import get_repository
from ..models import BuildingResponse
from ...database.repository import EnergyRepository
from ...schema import BuildingSettings

router = APIRouter(tags=["buildings"])


@router.get("", response_model=List[BuildingResponse], summary="List buildings")
def list_buildings(
    repo: EnergyRepository = Depends(get_repository),
) -> List[BuildingResponse]:
    return [BuildingResponse(**b) for b in repo.list_buildings()]


@router.post(
    "",
    response_model=BuildingResponse,
    status_code=201,
    summary="Create a building",
)
def create_building(
    settings: BuildingSettings,
    repo: EnergyRepository = Depends(get_repository),
) -> BuildingResponse:
    """Validated settings (coordinates, floor area, tariff...) are stored as-is."""
    return BuildingResponse(**repo.create_building(settings))


@router.get("/{building_id}", response_model=BuildingResponse, summary="Get a building")
def get_building(
    building_id: int,
    repo: EnergyRepository = Depends(get_repository),
) -> BuildingResponse:
    building = repo.get_building(building_id)
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    return BuildingResponse(**building)


@router.put("/{building_id}", response_model=BuildingResponse, summary="Update a building")
def update_building(
    building_id: int,
    settings: BuildingSettings,
    repo: EnergyRepository = Depends(get_repository),
) -> BuildingResponse:
    building = repo.update_building(building_id, settings)
    if building is None:
        raise HTTPException(status_code=404, detail="Building not found")
    return BuildingResponse(**building)


@router.delete("/{building_id}", status_code=204, summary="Delete a building")
def delete_building(
    building_id: int,
    repo: EnergyRepository = Depends(get_repository),
) -> Response:
    """Removes the building together with its readings and alerts."""
    if not repo.delete_building(building_id):
        raise HTTPException(status_code=404, detail="Building not found")
    return Response(status_code=204)
