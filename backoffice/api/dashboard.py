from fastapi import APIRouter, Depends

from backoffice.auth.auth import get_current_hotel
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel
from backoffice.schemas.schemas import DashboardStats
from backoffice.services.summary_service import SummaryService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Revenue, active staff, today's bill count and the latest bills"""
    return await SummaryService(gateway, hotel.id).get_dashboard_stats()
