"""Alert endpoints — evaluate thresholds, list and acknowledge alerts."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from .analytics import load_analytics, resolve_building
from ..dependencies import get_config, get_repository
from ..models import AlertResponse, EvaluateAlertsRequest, EvaluateAlertsResponse
from ...analysis.alert_evaluator import AlertEvaluator
from ...database.repository import EnergyRepository

router = APIRouter(tags=["alerts"])


@router.post(
    "/evaluate",
    response_model=EvaluateAlertsResponse,
    summary="Evaluate alert rules over a date range",
)
def evaluate_alerts(
    request: EvaluateAlertsRequest,
    repo: EnergyRepository = Depends(get_repository),
) -> EvaluateAlertsResponse:
    """Run the rules against the building's thresholds (defaults otherwise)."""
    if request.end < request.start:
        raise HTTPException(status_code=400, detail="end must not precede start")
    cfg = get_config()
    building = resolve_building(repo, request.building_id)
    result = load_analytics(repo, cfg, request.start, request.end, building)

    evaluator = AlertEvaluator()
    if building is not None:
        alerts = evaluator.evaluate_for_building(result.rows, building)
    else:
        alerts = evaluator.evaluate(result.rows)

    ids: List[int] = repo.insert_alerts(alerts) if request.persist and alerts else []
    return EvaluateAlertsResponse(
        alerts_raised=len(alerts),
        alert_ids=ids,
        alerts=[a.model_dump(mode="json") for a in alerts],
    )


@router.get(
    "",
    response_model=List[AlertResponse],
    summary="List alerts",
)
def list_alerts(
    acknowledged: Optional[bool] = Query(None),
    building_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    repo: EnergyRepository = Depends(get_repository),
) -> List[AlertResponse]:
    rows = repo.list_alerts(acknowledged=acknowledged, building_id=building_id, limit=limit)
    return [AlertResponse(**r) for r in rows]


@router.post(
    "/{alert_id}/acknowledge",
    response_model=AlertResponse,
    summary="Acknowledge an alert",
)
def acknowledge_alert(
    alert_id: int,
    repo: EnergyRepository = Depends(get_repository),
) -> AlertResponse:
    if not repo.acknowledge_alert(alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return AlertResponse(**repo.get_alert(alert_id))  # type: ignore[arg-type]
