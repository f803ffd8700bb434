import asyncio
import re
from contextlib import contextmanager
from decimal import Decimal

import pytest

from backoffice.models.models import Bill, BillItem, FoodItem, RoomType
from backoffice.services.billing_service import BillComposer, BillPersister, FoodCharge, RoomCharge
from backoffice.utils.errors import PersistenceError, ValidationError


class RecordingGateway:
    """Stands in for PersistenceGateway and fails inserts into the given tables"""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = fail_on
        self._next_id = 1

    def insert(self, model, rows, error=None):
        self.calls.append(("insert", model))
        if model in self.fail_on:
            raise PersistenceError(error or f"Failed to save {model.__tablename__}")
        if isinstance(rows, dict):
            return self._stored(model, rows)
        return [self._stored(model, row) for row in rows]

    @contextmanager
    def transaction(self, error=None):
        self.calls.append(("transaction", None))
        yield self

    def _stored(self, model, row):
        obj = model(id=self._next_id, **row)
        self._next_id += 1
        return obj


@pytest.fixture
def lines():
    composer = BillComposer(Decimal("0.18"))
    composer.add_item(RoomCharge(RoomType(id=1, hotel_id=1, name="Deluxe", base_price=2000)))
    composer.add_item(FoodCharge(FoodItem(id=2, hotel_id=1, name="Tea", price=20, category="beverages")), 3)
    return composer.lines


def submit(gateway, *args, atomic=False):
    persister = BillPersister(gateway, hotel_id=1, tax_rate=Decimal("0.18"), atomic=atomic)
    return asyncio.run(persister.submit(*args))


def test_empty_cart_is_rejected_before_any_write():
    gateway = RecordingGateway()

    with pytest.raises(ValidationError) as exc:
        submit(gateway, "Asha", None, [])

    assert exc.value.detail == "empty cart"
    assert gateway.calls == []


@pytest.mark.parametrize("name", ["", "   ", None])
def test_missing_customer_name_is_rejected_before_any_write(lines, name):
    gateway = RecordingGateway()

    with pytest.raises(ValidationError) as exc:
        submit(gateway, name, "9876543210", lines)

    assert exc.value.detail == "missing customer name"
    assert gateway.calls == []


def test_successful_submission(lines):
    gateway = RecordingGateway()

    bill, items_recorded = submit(gateway, "  Asha  ", "  ", lines)

    assert items_recorded is True
    assert [model for _, model in gateway.calls] == [Bill, BillItem]
    assert bill.customer_name == "Asha"
    assert bill.customer_phone is None
    assert bill.subtotal == 2060.0
    assert bill.tax_amount == 370.8
    assert bill.total == 2430.8
    assert bill.payment_method == "cash"
    assert bill.payment_status == "paid"
    assert re.fullmatch(r"BILL-\d+-[A-Z0-9]{4}", bill.bill_number)
    assert [item["name"] for item in bill.items] == ["Deluxe (1 night)", "Tea"]
    assert bill.items[1]["line_total"] == 60.0


def test_bill_stands_when_line_items_fail(lines):
    gateway = RecordingGateway(fail_on=(BillItem,))

    bill, items_recorded = submit(gateway, "Asha", None, lines)

    assert items_recorded is False
    assert bill.id == 1
    assert bill.total == 2430.8


def test_bill_failure_writes_nothing_else(lines):
    gateway = RecordingGateway(fail_on=(Bill,))

    with pytest.raises(PersistenceError) as exc:
        submit(gateway, "Asha", None, lines)

    assert exc.value.detail == "Failed to create bill"
    assert gateway.calls == [("insert", Bill)]


def test_atomic_mode_writes_in_one_transaction(lines):
    gateway = RecordingGateway()

    bill, items_recorded = submit(gateway, "Asha", None, lines, atomic=True)

    assert items_recorded is True
    assert gateway.calls[0] == ("transaction", None)
    assert [model for _, model in gateway.calls[1:]] == [Bill, BillItem]


def test_atomic_mode_surfaces_line_item_failure(lines):
    gateway = RecordingGateway(fail_on=(BillItem,))

    with pytest.raises(PersistenceError):
        submit(gateway, "Asha", None, lines, atomic=True)
