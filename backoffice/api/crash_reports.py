from typing import List, Optional
from fastapi import APIRouter, Depends, Header, status

from backoffice.auth.auth import get_current_user
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import User
from backoffice.schemas.schemas import CrashReportCreate, CrashReportRead
from backoffice.services.crash_report_service import CrashReportService
from backoffice.services.hotel_service import HotelService

router = APIRouter(prefix="/crash-reports", tags=["crash-reports"])

@router.post("", response_model=CrashReportRead, status_code=status.HTTP_201_CREATED)
async def create_crash_report(
    report: CrashReportCreate,
    user_agent: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Submit a crash report; works before hotel setup too"""
    hotel = await HotelService(gateway).get_hotel_for_owner(current_user)
    return await CrashReportService(gateway).create_report(current_user, hotel, report, user_agent)

@router.get("", response_model=List[CrashReportRead])
async def get_crash_reports(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Crash reports for the user's hotel, newest first"""
    hotel = await HotelService(gateway).get_hotel_for_owner(current_user)
    return await CrashReportService(gateway).get_reports(current_user, hotel)
