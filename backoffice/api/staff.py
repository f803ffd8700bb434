from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from backoffice.auth.auth import get_current_hotel
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel
from backoffice.schemas.schemas import (
    AttendanceEntry, AttendanceMark, AttendanceStats, AttendanceTrendDay, BulkAttendanceMark,
    MemberAttendanceSummary, MonthlyAttendance, StaffCreate, StaffList, StaffRead,
    StaffStatus, StaffStatusUpdate, StatsPeriod, TopPerformer
)
from backoffice.services.attendance_service import AttendanceService
from backoffice.services.staff_service import StaffService

router = APIRouter(prefix="/staff", tags=["staff"])

# Attendance reports across the roster

@router.post("/attendance/bulk", response_model=List[AttendanceEntry])
async def mark_bulk_attendance(
    request: BulkAttendanceMark,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Mark the same status for several staff members today"""
    records = await AttendanceService(gateway, hotel.id).mark_bulk(request.staff_ids, request.status)
    return [AttendanceEntry(date=record.date, status=record.status) for record in records]

@router.get("/attendance/stats", response_model=AttendanceStats)
async def get_attendance_stats(
    period: StatsPeriod = StatsPeriod.TODAY,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Attendance counts for today, the last week or the current month"""
    return await AttendanceService(gateway, hotel.id).get_stats(period)

@router.get("/attendance/top", response_model=List[TopPerformer])
async def get_top_performers(
    limit: Optional[int] = Query(None, ge=1),
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await AttendanceService(gateway, hotel.id).get_top_performers(limit)

@router.get("/attendance/trend", response_model=List[AttendanceTrendDay])
async def get_attendance_trend(
    days: int = Query(7, ge=1, le=31),
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Daily counts for the last few days, oldest first"""
    return await AttendanceService(gateway, hotel.id).get_trend(days)

# Staff members

@router.get("", response_model=StaffList)
async def get_staff(
    skip: int = 0,
    limit: int = 100,
    staff_status: Optional[StaffStatus] = Query(None, alias="status"),
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Staff members with their attendance history"""
    staff = await StaffService(gateway, hotel.id).get_staff(skip, limit, staff_status)
    return {"staff": staff, "total": len(staff)}

@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED)
async def create_staff(
    member: StaffCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await StaffService(gateway, hotel.id).create_staff(member)

@router.get("/{staff_id}", response_model=StaffRead)
async def get_staff_member(
    staff_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await StaffService(gateway, hotel.id).get_staff_member(staff_id)

@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_staff_member(
    staff_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Delete a staff member and their attendance records"""
    await StaffService(gateway, hotel.id).delete_staff(staff_id)

@router.post("/{staff_id}/status", response_model=StaffRead)
async def set_staff_status(
    staff_id: int,
    update: StaffStatusUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await StaffService(gateway, hotel.id).set_status(staff_id, update.status)

# Attendance of one member

@router.post("/{staff_id}/attendance", response_model=AttendanceEntry)
async def mark_attendance(
    staff_id: int,
    request: AttendanceMark,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Mark a day's status; marking the same day again replaces it"""
    record = await AttendanceService(gateway, hotel.id).mark_attendance(staff_id, request.status, request.date)
    return AttendanceEntry(date=record.date, status=record.status)

@router.get("/{staff_id}/attendance/summary", response_model=MemberAttendanceSummary)
async def get_member_summary(
    staff_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await AttendanceService(gateway, hotel.id).get_member_summary(staff_id)

@router.get("/{staff_id}/attendance/calendar", response_model=MonthlyAttendance)
async def get_monthly_attendance(
    staff_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """One member's attendance for a calendar month, the current one by default"""
    return await AttendanceService(gateway, hotel.id).get_monthly_breakdown(staff_id, year, month)
