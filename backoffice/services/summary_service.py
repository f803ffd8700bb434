from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from backoffice.config.config import settings
from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import Bill, Staff
from backoffice.schemas.schemas import BillingSummary, CategoryBreakdown, DashboardStats, RecentBill, StaffStatus
from backoffice.utils.helpers import as_utc, get_current_time, start_of_day, to_money

GROWTH_WINDOW_DAYS = 30


def revenue_of(bills: Sequence[Bill]) -> Decimal:
    return sum((to_money(bill.total or 0) for bill in bills), Decimal("0.00"))


def growth(current: float, previous: float) -> float:
    """Percentage change from the previous window, 0 when it was empty"""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def category_breakdown(bills: Sequence[Bill]) -> CategoryBreakdown:
    """Revenue per line category, read from the bills' embedded items"""
    totals: Dict[str, Decimal] = {"room": Decimal("0.00"), "food": Decimal("0.00"), "service": Decimal("0.00")}
    for bill in bills:
        for item in bill.items or []:
            category = item.get("category")
            if category not in totals:
                continue
            # Rows written before line totals were stored only carry price
            price = item.get("original_price", item.get("price", 0)) or 0
            totals[category] += to_money(price) * (item.get("quantity") or 1)
    return CategoryBreakdown(**{key: float(value) for key, value in totals.items()})


def to_recent(bill: Bill) -> RecentBill:
    return RecentBill(
        id=bill.id,
        bill_number=bill.bill_number,
        customer_name=bill.customer_name or settings.DEFAULT_CUSTOMER_NAME,
        total=bill.total,
        created_at=bill.created_at,
        payment_status=bill.payment_status
    )


def summarize_bills(bills: Sequence[Bill], now: Optional[datetime] = None,
                    recent_limit: Optional[int] = None) -> BillingSummary:
    """Billing figures for bills ordered newest first"""
    now = as_utc(now or get_current_time())
    recent_limit = settings.RECENT_BILLS_LIMIT if recent_limit is None else recent_limit
    today_start = start_of_day(now.date())
    window_start = now - timedelta(days=GROWTH_WINDOW_DAYS)
    previous_start = window_start - timedelta(days=GROWTH_WINDOW_DAYS)

    today_bills = [bill for bill in bills if as_utc(bill.created_at) >= today_start]
    window_bills = [bill for bill in bills if as_utc(bill.created_at) >= window_start]
    previous_bills = [bill for bill in bills if previous_start <= as_utc(bill.created_at) < window_start]

    total_revenue = revenue_of(bills)
    average = to_money(total_revenue / len(bills)) if bills else Decimal("0.00")

    return BillingSummary(
        total_revenue=float(total_revenue),
        total_bills=len(bills),
        average_bill_amount=float(average),
        today_revenue=float(revenue_of(today_bills)),
        today_bills=len(today_bills),
        revenue_growth=growth(float(revenue_of(window_bills)), float(revenue_of(previous_bills))),
        bills_growth=growth(len(window_bills), len(previous_bills)),
        category_breakdown=category_breakdown(bills),
        recent_bills=[to_recent(bill) for bill in bills[:recent_limit]]
    )


class SummaryService:
    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id

    def _bills(self) -> List[Bill]:
        return self.gateway.select(Bill, {"hotel_id": self.hotel_id}, order=["-created_at", "-id"],
                                   error="Failed to load billing summary")

    async def get_billing_summary(self) -> BillingSummary:
        return summarize_bills(self._bills())

    async def get_dashboard_stats(self) -> DashboardStats:
        bills = self._bills()
        today_start = start_of_day(get_current_time().date())
        active_staff = self.gateway.select(
            Staff, {"hotel_id": self.hotel_id, "status": StaffStatus.ACTIVE.value},
            error="Failed to load dashboard"
        )

        return DashboardStats(
            total_revenue=float(revenue_of(bills)),
            active_staff=len(active_staff),
            bills_today=len([bill for bill in bills if as_utc(bill.created_at) >= today_start]),
            recent_bills=[to_recent(bill) for bill in bills[:settings.RECENT_BILLS_LIMIT]]
        )
