from fastapi import APIRouter, Depends

from signdesk.api.deps import get_dashboard_service
from signdesk.schemas.dashboard import DashboardStats
from signdesk.services.dashboard import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(dashboard: DashboardService = Depends(get_dashboard_service)):
    return await dashboard.get_stats()
