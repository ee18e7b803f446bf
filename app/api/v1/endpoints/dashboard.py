from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from datetime import date

from app.core.deps import get_current_active_user, get_dashboard_service
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.dashboard import ChartData, ChartType, DashboardSummary
from app.services.dashboard_service import DashboardService

router = APIRouter()

@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    start_date: Optional[date] = Query(None, description="First day, defaults to the start of the current month"),
    end_date: Optional[date] = Query(None, description="Last day (inclusive), defaults to the end of start_date's month"),
    current_user: User = Depends(get_current_active_user),
    dashboard: DashboardService = Depends(get_dashboard_service)
):
    """Income and expense totals, net balance and top spending categories"""
    try:
        return dashboard.get_summary(current_user.id, start_date, end_date)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/chart-data", response_model=ChartData, response_model_exclude_none=True)
async def get_chart_data(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[ChartType] = Query(None, description="pie, bar or line; all three when omitted"),
    current_user: User = Depends(get_current_active_user),
    dashboard: DashboardService = Depends(get_dashboard_service)
):
    try:
        return dashboard.get_chart_data(current_user.id, start_date, end_date, type)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
