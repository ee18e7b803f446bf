from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import uuid

from app.core.deps import get_current_active_user, get_alert_service
from app.models.user import User
from app.schemas.alert import AlertCount, AlertTier, BudgetAlert
from app.services.alert_service import AlertService

router = APIRouter()

@router.get("/", response_model=List[BudgetAlert])
async def list_alerts(
    current_user: User = Depends(get_current_active_user),
    alerts: AlertService = Depends(get_alert_service)
):
    """Pending budget alerts of the current user"""
    return alerts.get_pending_alerts(current_user.id)

@router.get("/count", response_model=AlertCount)
async def count_alerts(
    current_user: User = Depends(get_current_active_user),
    alerts: AlertService = Depends(get_alert_service)
):
    return AlertCount(count=alerts.get_alert_count(current_user.id))

@router.delete("/")
async def clear_alerts(
    current_user: User = Depends(get_current_active_user),
    alerts: AlertService = Depends(get_alert_service)
):
    """Clear every pending alert, e.g. once the user has seen them"""
    alerts.clear_alerts(current_user.id)
    return {"message": "Alerts cleared"}

@router.delete("/{budget_id}/{tier}")
async def dismiss_alert(
    budget_id: uuid.UUID,
    tier: str,
    current_user: User = Depends(get_current_active_user),
    alerts: AlertService = Depends(get_alert_service)
):
    """Dismiss one alert; tier is 90 or 100"""
    try:
        alert_tier = AlertTier.from_path(tier)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tier must be 90 or 100")

    if not alerts.dismiss_alert(current_user.id, budget_id, alert_tier):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alert not found")
    return {"message": "Alert dismissed"}
