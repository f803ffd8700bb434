import random
from decimal import Decimal, ROUND_HALF_UP

import pytest

from backoffice.models.models import FoodItem, RoomType, ServiceItem
from backoffice.services.billing_service import (
    BillComposer, FoodCharge, RoomCharge, ServiceCharge, compute_totals
)
from backoffice.utils.errors import ValidationError


@pytest.fixture
def deluxe():
    return RoomType(id=1, hotel_id=1, name="Deluxe", base_price=2000, amenities=["WiFi"])


@pytest.fixture
def tea():
    return FoodItem(id=7, hotel_id=1, name="Tea", price=20, category="beverages")


def test_room_and_food_totals(deluxe, tea):
    composer = BillComposer(Decimal("0.18"))
    composer.add_item(RoomCharge(deluxe, 1))
    composer.add_item(FoodCharge(tea), quantity=3)

    assert composer.subtotal() == Decimal("2060.00")
    assert composer.tax() == Decimal("370.80")
    assert composer.total() == Decimal("2430.80")


def test_room_line_priced_per_stay(deluxe):
    composer = BillComposer()
    line = composer.add_item(RoomCharge(deluxe, 2))

    assert line.name == "Deluxe (2 nights)"
    assert line.original_price == Decimal("4000.00")
    assert line.quantity == 1
    assert line.category == "room"
    assert line.catalog_id == 1


def test_room_charge_rejects_zero_nights(deluxe):
    with pytest.raises(ValidationError):
        RoomCharge(deluxe, 0)


def test_line_ids_are_unique_for_repeated_items(tea):
    composer = BillComposer()
    first = composer.add_item(FoodCharge(tea))
    second = composer.add_item(FoodCharge(tea))

    assert first.id != second.id
    assert first.id.startswith("food-7-")
    assert len(composer) == 2


@pytest.mark.parametrize("quantity", [0, -1])
def test_update_quantity_ignores_values_below_one(tea, quantity):
    composer = BillComposer()
    line = composer.add_item(FoodCharge(tea), quantity=2)

    assert composer.update_quantity(line.id, quantity) is None
    assert composer.lines[0].quantity == 2
    assert composer.subtotal() == Decimal("40.00")


def test_update_quantity_recomputes_from_original_price(tea):
    composer = BillComposer()
    line = composer.add_item(FoodCharge(tea))

    composer.update_quantity(line.id, 5)
    composer.update_quantity(line.id, 2)

    assert composer.lines[0].line_total == Decimal("40.00")


def test_room_lines_can_be_edited(deluxe):
    composer = BillComposer()
    line = composer.add_item(RoomCharge(deluxe, 1))

    composer.update_quantity(line.id, 2)

    assert composer.subtotal() == Decimal("4000.00")


def test_unknown_ids_are_ignored(tea):
    composer = BillComposer()
    composer.add_item(FoodCharge(tea))

    assert composer.update_quantity("food-99-1", 4) is None
    assert composer.remove_item("food-99-1") is None
    assert len(composer) == 1


def test_remove_and_clear(deluxe, tea):
    composer = BillComposer()
    room = composer.add_item(RoomCharge(deluxe))
    composer.add_item(FoodCharge(tea))

    assert composer.remove_item(room.id) is room
    assert [line.name for line in composer.lines] == ["Tea"]

    composer.clear()
    assert composer.lines == []
    assert composer.total() == Decimal("0.00")


def test_tax_rounds_half_up():
    laundry = ServiceItem(id=3, hotel_id=1, name="Ironing", price=0.25)
    composer = BillComposer(Decimal("0.18"))
    composer.add_item(ServiceCharge(laundry))

    # 0.25 * 0.18 = 0.045
    assert composer.tax() == Decimal("0.05")


def test_compute_totals_matches_composer(deluxe, tea):
    composer = BillComposer(Decimal("0.18"))
    composer.add_item(RoomCharge(deluxe, 3))
    composer.add_item(FoodCharge(tea), quantity=4)

    assert compute_totals(composer.lines, Decimal("0.18")) == (
        composer.subtotal(), composer.tax(), composer.total()
    )


def test_cart_schema_serializes_money_as_numbers(tea):
    composer = BillComposer(Decimal("0.18"))
    composer.add_item(FoodCharge(tea), quantity=3)

    cart = composer.to_schema()

    assert cart.subtotal == 60.0
    assert cart.tax_amount == 10.8
    assert cart.items[0].line_total == 60.0


def expected_totals(lines):
    """Recompute (subtotal, tax, total) from (unit price, quantity) pairs"""
    subtotal = sum((price * quantity for price, quantity in lines), Decimal("0.00"))
    tax = (subtotal * Decimal("0.18")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return subtotal, tax, subtotal + tax


def random_charge(rng, catalog_id):
    price_cents = rng.randint(1, 500000)
    price = Decimal(price_cents) / 100
    kind = rng.choice(["room", "food", "service"])
    if kind == "room":
        nights = rng.randint(1, 14)
        room = RoomType(id=catalog_id, hotel_id=1, name="Suite", base_price=float(price))
        return RoomCharge(room, nights), price * nights
    if kind == "food":
        return FoodCharge(FoodItem(id=catalog_id, hotel_id=1, name="Dish", price=float(price),
                                   category="lunch")), price
    return ServiceCharge(ServiceItem(id=catalog_id, hotel_id=1, name="Spa", price=float(price))), price


@pytest.mark.parametrize("seed", range(25))
def test_totals_hold_for_random_carts(seed):
    rng = random.Random(seed)
    composer = BillComposer(Decimal("0.18"))
    expected = []
    for catalog_id in range(1, rng.randint(1, 12) + 1):
        charge, unit_price = random_charge(rng, catalog_id)
        quantity = rng.randint(1, 20)
        composer.add_item(charge, quantity=quantity)
        expected.append((unit_price, quantity))

    assert (composer.subtotal(), composer.tax(), composer.total()) == expected_totals(expected)

    index = rng.randrange(len(expected))
    line = composer.lines[index]
    assert composer.update_quantity(line.id, rng.randint(-5, 0)) is None
    assert line.quantity == expected[index][1]
    assert (composer.subtotal(), composer.tax(), composer.total()) == expected_totals(expected)

    new_quantity = rng.randint(1, 20)
    composer.update_quantity(line.id, new_quantity)
    expected[index] = (expected[index][0], new_quantity)
    assert (composer.subtotal(), composer.tax(), composer.total()) == expected_totals(expected)
