import itertools
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from backoffice.config.config import settings
from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import Bill, BillItem, RoomType, FoodItem, ServiceItem
from backoffice.schemas.schemas import (
    BillLineItem, CartRead, CartItemAdd, RoomSelection, FoodSelection, ServiceSelection
)
from backoffice.services.catalog_service import CatalogService
from backoffice.utils.errors import NotFoundError, PartialWriteError, PersistenceError, ValidationError
from backoffice.utils.helpers import epoch_millis, get_current_time, random_suffix, to_money
from loguru import logger


# Catalog charges: what gets added to a cart, one class per line category

class RoomCharge:
    """A room type booked for a number of nights, priced as one line"""
    category = "room"

    def __init__(self, room_type: RoomType, nights: int = 1):
        if nights < 1:
            raise ValidationError("Nights must be at least 1")
        self.room_type = room_type
        self.nights = nights

    @property
    def catalog_id(self) -> Optional[int]:
        return self.room_type.id

    def unit_price(self) -> Decimal:
        return to_money(self.room_type.base_price) * self.nights

    def line_name(self) -> str:
        suffix = "night" if self.nights == 1 else "nights"
        return f"{self.room_type.name} ({self.nights} {suffix})"


class FoodCharge:
    category = "food"

    def __init__(self, food_item: FoodItem):
        self.food_item = food_item

    @property
    def catalog_id(self) -> Optional[int]:
        return self.food_item.id

    def unit_price(self) -> Decimal:
        return to_money(self.food_item.price)

    def line_name(self) -> str:
        return self.food_item.name


class ServiceCharge:
    category = "service"

    def __init__(self, service: ServiceItem):
        self.service = service

    @property
    def catalog_id(self) -> Optional[int]:
        return self.service.id

    def unit_price(self) -> Decimal:
        return to_money(self.service.price)

    def line_name(self) -> str:
        return self.service.name


Charge = Union[RoomCharge, FoodCharge, ServiceCharge]


class CartLine:
    """One line of a cart. The total is always original_price * quantity."""

    def __init__(self, line_id: str, name: str, category: str, original_price: Decimal,
                 quantity: int = 1, catalog_id: Optional[int] = None):
        self.id = line_id
        self.name = name
        self.category = category
        self.original_price = original_price
        self.quantity = quantity
        self.catalog_id = catalog_id

    @property
    def line_total(self) -> Decimal:
        return self.original_price * self.quantity

    def to_schema(self) -> BillLineItem:
        return BillLineItem(
            id=self.id,
            name=self.name,
            category=self.category,
            catalog_id=self.catalog_id,
            original_price=float(self.original_price),
            quantity=self.quantity,
            line_total=float(self.line_total)
        )

    def to_legacy_dict(self) -> Dict:
        """Shape stored in the bill's embedded items column"""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "catalog_id": self.catalog_id,
            "original_price": float(self.original_price),
            "quantity": self.quantity,
            "line_total": float(self.line_total),
        }


def compute_totals(lines: Sequence[CartLine], tax_rate: Optional[Decimal] = None) -> Tuple[Decimal, Decimal, Decimal]:
    """Return (subtotal, tax, total); tax is rounded half-up to cents"""
    rate = tax_rate if tax_rate is not None else Decimal(str(settings.TAX_RATE))
    subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
    tax = to_money(subtotal * rate)
    return subtotal, tax, subtotal + tax


class BillComposer:
    """In-memory cart for one user. Totals are derived on every read."""

    def __init__(self, tax_rate: Optional[Decimal] = None):
        self.tax_rate = tax_rate if tax_rate is not None else Decimal(str(settings.TAX_RATE))
        self._lines: List[CartLine] = []
        self._counter = itertools.count(1)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def add_item(self, charge: Charge, quantity: int = 1) -> CartLine:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        line = CartLine(
            line_id=f"{charge.category}-{charge.catalog_id}-{next(self._counter)}",
            name=charge.line_name(),
            category=charge.category,
            original_price=charge.unit_price(),
            quantity=quantity,
            catalog_id=charge.catalog_id
        )
        self._lines.append(line)
        logger.debug(f"{line.name} added to bill")
        return line

    def remove_item(self, line_id: str) -> Optional[CartLine]:
        """Remove a line; returns it, or None when no line has that id"""
        for index, line in enumerate(self._lines):
            if line.id == line_id:
                del self._lines[index]
                return line
        return None

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity. Quantities below 1 and unknown ids are ignored."""
        if quantity < 1:
            return None
        for line in self._lines:
            if line.id == line_id:
                line.quantity = quantity
                return line
        return None

    def clear(self) -> None:
        self._lines = []

    def subtotal(self) -> Decimal:
        return compute_totals(self._lines, self.tax_rate)[0]

    def tax(self) -> Decimal:
        return compute_totals(self._lines, self.tax_rate)[1]

    def total(self) -> Decimal:
        return compute_totals(self._lines, self.tax_rate)[2]

    def to_schema(self) -> CartRead:
        subtotal, tax, total = compute_totals(self._lines, self.tax_rate)
        return CartRead(
            items=[line.to_schema() for line in self._lines],
            subtotal=float(subtotal),
            tax_amount=float(tax),
            total=float(total)
        )


class CartRegistry:
    """Per-user carts held in process memory for the lifetime of the app"""

    def __init__(self, tax_rate: Optional[Decimal] = None):
        self.tax_rate = tax_rate
        self._carts: Dict[int, BillComposer] = {}

    def get(self, user_id: int) -> BillComposer:
        if user_id not in self._carts:
            self._carts[user_id] = BillComposer(self.tax_rate)
        return self._carts[user_id]

    def discard(self, user_id: int) -> None:
        self._carts.pop(user_id, None)


def generate_bill_number(prefix: Optional[str] = None) -> str:
    """BILL-<epoch ms>-<4 random chars>; unique in practice, not guaranteed"""
    prefix = prefix or settings.BILL_NUMBER_PREFIX
    return f"{prefix}-{epoch_millis()}-{random_suffix(4)}"


class BillSubmission(NamedTuple):
    bill: Bill
    items_recorded: bool


class BillPersister:
    """Writes a bill and its line-item rows.

    The bill row, with the embedded items array, is the authoritative record.
    The bill_items rows that follow are best effort: if that batch fails the
    bill stands and the failure is only logged. With ``atomic`` set both
    writes share one transaction instead.
    """

    def __init__(self, gateway: PersistenceGateway, hotel_id: int,
                 tax_rate: Optional[Decimal] = None, atomic: Optional[bool] = None):
        self.gateway = gateway
        self.hotel_id = hotel_id
        self.tax_rate = tax_rate if tax_rate is not None else Decimal(str(settings.TAX_RATE))
        self.atomic = settings.BILL_ITEMS_ATOMIC if atomic is None else atomic

    async def submit(self, customer_name: Optional[str], customer_phone: Optional[str],
                     lines: Sequence[CartLine]) -> BillSubmission:
        if not lines:
            raise ValidationError("empty cart")
        if not customer_name or not customer_name.strip():
            raise ValidationError("missing customer name")

        subtotal, tax, total = compute_totals(lines, self.tax_rate)
        bill_row = {
            "hotel_id": self.hotel_id,
            "bill_number": generate_bill_number(),
            "customer_name": customer_name.strip(),
            "customer_phone": (customer_phone or "").strip() or None,
            "subtotal": float(subtotal),
            "tax_amount": float(tax),
            "total": float(total),
            "items": [line.to_legacy_dict() for line in lines],
            "payment_method": settings.DEFAULT_PAYMENT_METHOD,
            "payment_status": settings.DEFAULT_PAYMENT_STATUS,
            "created_at": get_current_time(),
        }

        if self.atomic:
            with self.gateway.transaction(error="Failed to create bill"):
                bill = self.gateway.insert(Bill, bill_row, error="Failed to create bill")
                self.gateway.insert(BillItem, self._item_rows(bill.id, lines), error="Failed to create bill")
            logger.info(f"Created bill {bill.bill_number} with {len(lines)} items (atomic)")
            return BillSubmission(bill, True)

        bill = self.gateway.insert(Bill, bill_row, error="Failed to create bill")
        logger.info(f"Created bill {bill.bill_number} for {bill.customer_name}: total {bill.total}")

        try:
            self._write_line_items(bill, lines)
        except PartialWriteError as e:
            logger.error(f"{e} (bill {e.primary_id} kept, embedded items remain authoritative)")
            return BillSubmission(bill, False)

        return BillSubmission(bill, True)

    def _write_line_items(self, bill: Bill, lines: Sequence[CartLine]) -> None:
        try:
            self.gateway.insert(BillItem, self._item_rows(bill.id, lines))
        except PersistenceError as e:
            raise PartialWriteError(f"Failed to save bill items: {e.detail}", primary_id=bill.id) from e

    def _item_rows(self, bill_id: int, lines: Sequence[CartLine]) -> List[Dict]:
        return [
            {
                "bill_id": bill_id,
                "hotel_id": self.hotel_id,
                "name": line.name,
                "category": line.category,
                "price": float(line.original_price),
                "quantity": line.quantity,
                "subtotal": float(line.line_total),
            }
            for line in lines
        ]


class BillingService:
    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id
        self.catalog = CatalogService(gateway, hotel_id)

    async def resolve_charge(self, selection: Union[RoomSelection, FoodSelection, ServiceSelection]) -> Charge:
        """Look up the catalog row behind a selection; it must exist and be available"""
        if isinstance(selection, RoomSelection):
            room_type = await self.catalog.get_room_type(selection.room_type_id)
            self._require_available(room_type, "Room type")
            return RoomCharge(room_type, selection.nights)
        if isinstance(selection, FoodSelection):
            food_item = await self.catalog.get_food_item(selection.food_item_id)
            self._require_available(food_item, "Food item")
            return FoodCharge(food_item)
        service = await self.catalog.get_service(selection.service_id)
        self._require_available(service, "Service")
        return ServiceCharge(service)

    def _require_available(self, row, label: str) -> None:
        if not row.available:
            logger.warning(f"{label} {row.id} is not available for billing")
            raise ValidationError(f"{label} '{row.name}' is not available")

    async def add_to_cart(self, cart: BillComposer, request: CartItemAdd) -> CartLine:
        charge = await self.resolve_charge(request.selection)
        return cart.add_item(charge, request.quantity)

    async def submit(self, customer_name: Optional[str], customer_phone: Optional[str],
                     lines: Sequence[CartLine]) -> BillSubmission:
        return await BillPersister(self.gateway, self.hotel_id).submit(customer_name, customer_phone, lines)

    async def compose_and_submit(self, customer_name: Optional[str], customer_phone: Optional[str],
                                 requests: Sequence[CartItemAdd]) -> BillSubmission:
        """Submit a bill from explicit selections without touching any stored cart"""
        if not requests:
            raise ValidationError("empty cart")
        composer = BillComposer()
        for request in requests:
            await self.add_to_cart(composer, request)
        return await self.submit(customer_name, customer_phone, composer.lines)

    # History

    async def get_bills(self, search: Optional[str] = None,
                        payment_status: Optional[str] = None,
                        limit: Optional[int] = None) -> List[Bill]:
        """Bills for the hotel, newest first, with optional client-style filtering"""
        filters = {"hotel_id": self.hotel_id}
        if payment_status:
            filters["payment_status"] = payment_status
        bills = self.gateway.select(Bill, filters, order=["-created_at", "-id"], limit=limit,
                                    error="Failed to load bills")

        if search:
            needle = search.strip().lower()
            bills = [
                bill for bill in bills
                if needle in (bill.customer_name or "").lower()
                or needle in (bill.bill_number or "").lower()
                or needle in (bill.customer_phone or "")
            ]
        return bills

    async def get_bill(self, bill_id: int) -> Bill:
        bill = self.gateway.first(Bill, {"id": bill_id, "hotel_id": self.hotel_id}, error="Failed to load bill")
        if not bill:
            logger.warning(f"Bill not found: {bill_id}")
            raise NotFoundError(f"Bill with ID {bill_id} not found")
        return bill

    async def get_bill_items(self, bill_id: int) -> List[BillItem]:
        return self.gateway.select(BillItem, {"bill_id": bill_id, "hotel_id": self.hotel_id},
                                   order=["id"], error="Failed to load bill items")

    async def delete_bill(self, bill_id: int) -> None:
        bill = await self.get_bill(bill_id)
        self.gateway.delete(BillItem, {"bill_id": bill.id}, error="Failed to delete bill")
        self.gateway.delete(Bill, {"id": bill.id}, error="Failed to delete bill")
        logger.info(f"Deleted bill: {bill_id}")
