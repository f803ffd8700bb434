from typing import Dict, List, Optional

from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import AttendanceRecord, Staff
from backoffice.schemas.schemas import AttendanceEntry, StaffCreate, StaffRead, StaffStatus
from backoffice.services.attendance_service import AttendanceService
from backoffice.utils.errors import NotFoundError, ValidationError
from backoffice.utils.helpers import get_current_time, validate_email, validate_phone_number
from loguru import logger

MIN_STAFF_AGE = 18
MAX_STAFF_AGE = 70


def validate_staff(data: StaffCreate) -> Dict[str, str]:
    """Field errors for a new staff member, empty when the form is valid"""
    errors = {}
    if not data.name.strip():
        errors["name"] = "Name is required"
    if not data.role.strip():
        errors["role"] = "Role is required"
    if data.age is not None and not MIN_STAFF_AGE <= data.age <= MAX_STAFF_AGE:
        errors["age"] = f"Age must be between {MIN_STAFF_AGE} and {MAX_STAFF_AGE}"
    if data.contact and not validate_phone_number(data.contact):
        errors["contact"] = "Contact number must be at least 10 digits"
    if data.email and not validate_email(data.email):
        errors["email"] = "Invalid email format"
    if not (data.id_type or "").strip():
        errors["id_type"] = "ID type is required"
    if not (data.id_number or "").strip():
        errors["id_number"] = "ID number is required"
    return errors


class StaffService:
    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id
        self.attendance = AttendanceService(gateway, hotel_id)

    async def create_staff(self, data: StaffCreate) -> StaffRead:
        errors = validate_staff(data)
        if errors:
            logger.warning(f"Rejected staff form: {', '.join(errors)}")
            raise ValidationError("; ".join(errors.values()))

        values = data.dict()
        for key in ("name", "role", "id_type", "id_number"):
            values[key] = values[key].strip()
        # Legacy free-form block kept alongside the typed columns
        additional_info = {key: values[key] for key in ("age", "place") if values.get(key) is not None}
        if values.get("id_type"):
            additional_info["identification"] = f"{values['id_type']}: {values['id_number']}"

        member = self.gateway.insert(Staff, {
            **values,
            "hotel_id": self.hotel_id,
            "status": StaffStatus.ACTIVE.value,
            "additional_info": additional_info,
            "created_at": get_current_time()
        }, error="Failed to add staff member")

        logger.info(f"Added staff member: {member.name} ({member.role})")
        return self._to_read(member, [])

    async def get_staff(self, skip: int = 0, limit: int = 100,
                        status: Optional[StaffStatus] = None) -> List[StaffRead]:
        """Staff of the hotel, newest first, each with their attendance history"""
        filters = {"hotel_id": self.hotel_id}
        if status:
            filters["status"] = status.value
        members = self.gateway.select(Staff, filters, order=["-created_at", "-id"], error="Failed to load staff")
        members = members[skip:skip + limit]

        grouped = await self.attendance.get_records_by_staff([member.id for member in members])
        return [self._to_read(member, grouped.get(member.id, [])) for member in members]

    async def get_staff_member(self, staff_id: int) -> StaffRead:
        member = self._get(staff_id)
        grouped = await self.attendance.get_records_by_staff([staff_id])
        return self._to_read(member, grouped.get(staff_id, []))

    async def set_status(self, staff_id: int, status: StaffStatus) -> StaffRead:
        self._get(staff_id)
        member = self.gateway.update(Staff, {"status": StaffStatus(status).value}, {"id": staff_id},
                                     error="Failed to update staff status")[0]
        logger.info(f"Staff member {staff_id} is now {member.status}")
        return await self.get_staff_member(staff_id)

    async def delete_staff(self, staff_id: int) -> None:
        self._get(staff_id)
        self.gateway.delete(AttendanceRecord, {"staff_id": staff_id}, error="Failed to delete staff member")
        self.gateway.delete(Staff, {"id": staff_id}, error="Failed to delete staff member")
        logger.info(f"Deleted staff member: {staff_id}")

    def _get(self, staff_id: int) -> Staff:
        member = self.gateway.first(Staff, {"id": staff_id, "hotel_id": self.hotel_id}, error="Failed to load staff")
        if not member:
            logger.warning(f"Staff member not found: {staff_id}")
            raise NotFoundError(f"Staff member with ID {staff_id} not found")
        return member

    def _to_read(self, member: Staff, records: List[AttendanceRecord]) -> StaffRead:
        return StaffRead(
            **member.dict(exclude={"additional_info"}),
            additional_info=member.additional_info or {},
            attendance=[AttendanceEntry(date=record.date, status=record.status) for record in records]
        )
