from typing import List, Optional

from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import CrashReport, Hotel, User
from backoffice.schemas.schemas import CrashReportCreate
from backoffice.utils.helpers import get_current_time
from loguru import logger


class CrashReportService:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def create_report(self, user: User, hotel: Optional[Hotel], data: CrashReportCreate,
                            user_agent: Optional[str] = None) -> CrashReport:
        report = self.gateway.insert(CrashReport, {
            "user_id": user.id,
            "hotel_id": hotel.id if hotel else None,
            "title": data.title.strip(),
            "description": data.description.strip(),
            "severity": data.severity.value,
            "user_agent": user_agent,
            "created_at": get_current_time()
        }, error="Failed to submit crash report")

        log = logger.error if data.severity.value in ("high", "critical") else logger.warning
        log(f"Crash report {report.id} ({report.severity}) from user {user.id}: {report.title}")
        return report

    async def get_reports(self, user: User, hotel: Optional[Hotel] = None) -> List[CrashReport]:
        filters = {"hotel_id": hotel.id} if hotel else {"user_id": user.id}
        return self.gateway.select(CrashReport, filters, order=["-created_at", "-id"],
                                   error="Failed to load crash reports")
