"""Dashboard router - owner analytics and recent activity"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_owner
from ...database import get_db
from .service import DashboardService

router = APIRouter(prefix="/owner", tags=["Owner"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/dashboard-data")
async def dashboard_data(
    period: Literal["daily", "weekly", "monthly", "yearly"] = Query("weekly"),
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Sales chart, customer growth, method split and totals for the period"""
    return service.get_dashboard(owner, period, branch_id)


@router.get("/activity-logs")
async def activity_logs(
    limit: int = Query(10, ge=1, le=100),
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_activity_logs(owner, limit, branch_id)
