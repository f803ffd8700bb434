from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from backoffice.config.config import settings
from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import AttendanceRecord, Staff
from backoffice.schemas.schemas import (
    AttendanceEntry, AttendanceStats, AttendanceStatus, AttendanceTrendDay,
    MemberAttendanceSummary, MonthlyAttendance, StaffAttendance, StatsPeriod, TopPerformer
)
from backoffice.utils.errors import NotFoundError, ValidationError
from backoffice.utils.helpers import get_date_range, get_today, percentage, start_of_month
from loguru import logger

STATUSES = [status.value for status in AttendanceStatus]


# Pure aggregation over roster snapshots. Nothing here touches the database.

def count_statuses(records: Iterable[AttendanceEntry]) -> Dict[str, int]:
    counts = {status: 0 for status in STATUSES}
    for record in records:
        status = AttendanceStatus(record.status).value
        counts[status] += 1
    return counts


def _in_window(records: Iterable[AttendanceEntry], start: date, end: date) -> List[AttendanceEntry]:
    return [record for record in records if start <= record.date <= end]


def _record_on(records: Iterable[AttendanceEntry], day: date) -> Optional[AttendanceEntry]:
    for record in records:
        if record.date == day:
            return record
    return None


def compute_stats(staff: Sequence[StaffAttendance], period: StatsPeriod = StatsPeriod.TODAY,
                  today: Optional[date] = None) -> AttendanceStats:
    """Attendance counts for today, the last 7 days or the current month.

    ``today`` classifies each member by their record for the day, so the
    counts plus ``not_marked`` always add up to the roster size. ``week`` and
    ``month`` sum every record in the window across all members.
    """
    today = today or get_today()
    period = StatsPeriod(period)

    if period == StatsPeriod.TODAY:
        todays = [_record_on(member.attendance, today) for member in staff]
        counts = count_statuses(record for record in todays if record is not None)
        return AttendanceStats(
            period=period,
            total=len(staff),
            not_marked=len(staff) - sum(counts.values()),
            **counts
        )

    if period == StatsPeriod.WEEK:
        start = today - timedelta(days=7)
    else:
        start = start_of_month(today)

    records = [record for member in staff for record in _in_window(member.attendance, start, today)]
    counts = count_statuses(records)
    return AttendanceStats(
        period=period,
        total=len(records),
        average_attendance=percentage(counts["present"], len(records)),
        **counts
    )


def attendance_rate(records: Sequence[AttendanceEntry]) -> int:
    """Share of recorded days marked present, 0-100"""
    return percentage(count_statuses(records)["present"], len(records))


def weighted_attendance_rate(records: Sequence[AttendanceEntry],
                             late_weight: Optional[float] = None,
                             half_day_weight: Optional[float] = None) -> int:
    """Punctuality: present counts fully, late and half days partially"""
    if not records:
        return 0
    late_weight = settings.ATTENDANCE_LATE_WEIGHT if late_weight is None else late_weight
    half_day_weight = settings.ATTENDANCE_HALF_DAY_WEIGHT if half_day_weight is None else half_day_weight

    counts = count_statuses(records)
    effective_days = (counts["present"]
                      + counts["late"] * Decimal(str(late_weight))
                      + counts["half_day"] * Decimal(str(half_day_weight)))
    return percentage(effective_days, len(records))


def top_performers(staff: Sequence[StaffAttendance], limit: Optional[int] = None) -> List[TopPerformer]:
    """Members ranked by attendance rate over their whole history; ties keep roster order"""
    limit = settings.TOP_PERFORMERS_LIMIT if limit is None else limit
    ranked = sorted(
        (
            TopPerformer(
                staff_id=member.id,
                name=member.name,
                role=member.role,
                attendance_rate=attendance_rate(member.attendance),
                punctuality_rate=weighted_attendance_rate(member.attendance)
            )
            for member in staff
        ),
        key=lambda performer: performer.attendance_rate,
        reverse=True
    )
    return ranked[:limit]


def attendance_trend(staff: Sequence[StaffAttendance], days: int = 7,
                     today: Optional[date] = None) -> List[AttendanceTrendDay]:
    """Per-day counts for the last ``days`` days, oldest first"""
    today = today or get_today()
    trend = []
    for day in get_date_range(today - timedelta(days=days - 1), today):
        marked = [_record_on(member.attendance, day) for member in staff]
        counts = count_statuses(record for record in marked if record is not None)
        trend.append(AttendanceTrendDay(date=day, total=len(staff), **counts))
    return trend


def member_summary(records: Sequence[AttendanceEntry], recent: int = 7) -> MemberAttendanceSummary:
    counts = count_statuses(records)
    latest = sorted(records, key=lambda record: record.date, reverse=True)[:recent]
    return MemberAttendanceSummary(
        total=len(records),
        present_rate=attendance_rate(records),
        punctuality_rate=weighted_attendance_rate(records),
        recent=latest,
        **counts
    )


def monthly_breakdown(records: Sequence[AttendanceEntry], year: int, month: int) -> MonthlyAttendance:
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    days = sorted(
        (record for record in records if record.date.year == year and record.date.month == month),
        key=lambda record: record.date
    )
    return MonthlyAttendance(year=year, month=month, days=days, **count_statuses(days))


def to_roster_entry(member: Staff, records: Iterable[AttendanceRecord]) -> StaffAttendance:
    return StaffAttendance(
        id=member.id,
        name=member.name,
        role=member.role,
        status=member.status,
        attendance=[AttendanceEntry(date=record.date, status=record.status) for record in records]
    )


class AttendanceService:
    """Marks attendance and feeds roster snapshots to the aggregation functions"""

    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id

    async def get_records_by_staff(self, staff_ids: Optional[List[int]] = None) -> Dict[int, List[AttendanceRecord]]:
        filters = {"hotel_id": self.hotel_id}
        if staff_ids is not None:
            filters["staff_id"] = staff_ids
        records = self.gateway.select(AttendanceRecord, filters, order=["date"], error="Failed to load attendance")

        grouped = defaultdict(list)
        for record in records:
            grouped[record.staff_id].append(record)
        return grouped

    async def get_roster(self) -> List[StaffAttendance]:
        staff = self.gateway.select(Staff, {"hotel_id": self.hotel_id}, order=["-created_at", "-id"],
                                    error="Failed to load staff")
        grouped = await self.get_records_by_staff()
        return [to_roster_entry(member, grouped.get(member.id, [])) for member in staff]

    async def get_member(self, staff_id: int) -> StaffAttendance:
        member = self._get_staff(staff_id)
        grouped = await self.get_records_by_staff([staff_id])
        return to_roster_entry(member, grouped.get(staff_id, []))

    async def mark_attendance(self, staff_id: int, status: AttendanceStatus,
                              on: Optional[date] = None) -> AttendanceRecord:
        """Record the status for one day; marking the same day again overwrites it"""
        self._get_staff(staff_id)
        on = on or get_today()
        record = self.gateway.upsert(
            AttendanceRecord,
            {
                "staff_id": staff_id,
                "hotel_id": self.hotel_id,
                "date": on,
                "status": AttendanceStatus(status).value,
            },
            conflict_keys=["staff_id", "date"],
            error="Failed to mark attendance"
        )
        logger.info(f"Marked staff {staff_id} {record.status} on {on}")
        return record

    async def mark_bulk(self, staff_ids: List[int], status: AttendanceStatus,
                        on: Optional[date] = None) -> List[AttendanceRecord]:
        """Mark every listed member; an unknown id fails the whole batch before anything is written"""
        if not staff_ids:
            raise ValidationError("No staff selected")
        for staff_id in staff_ids:
            self._get_staff(staff_id)
        return [await self.mark_attendance(staff_id, status, on) for staff_id in staff_ids]

    async def get_stats(self, period: StatsPeriod) -> AttendanceStats:
        return compute_stats(await self.get_roster(), period)

    async def get_top_performers(self, limit: Optional[int] = None) -> List[TopPerformer]:
        return top_performers(await self.get_roster(), limit)

    async def get_trend(self, days: int = 7) -> List[AttendanceTrendDay]:
        return attendance_trend(await self.get_roster(), days)

    async def get_member_summary(self, staff_id: int) -> MemberAttendanceSummary:
        member = await self.get_member(staff_id)
        return member_summary(member.attendance)

    async def get_monthly_breakdown(self, staff_id: int, year: Optional[int] = None,
                                    month: Optional[int] = None) -> MonthlyAttendance:
        today = get_today()
        member = await self.get_member(staff_id)
        return monthly_breakdown(member.attendance, year or today.year, month or today.month)

    def _get_staff(self, staff_id: int) -> Staff:
        member = self.gateway.first(Staff, {"id": staff_id, "hotel_id": self.hotel_id}, error="Failed to load staff")
        if not member:
            logger.warning(f"Staff member not found: {staff_id}")
            raise NotFoundError(f"Staff member with ID {staff_id} not found")
        return member
