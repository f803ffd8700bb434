from datetime import timedelta

import pytest
from sqlmodel import select

from backoffice.models.models import AttendanceRecord
from backoffice.utils.helpers import get_today
from conftest import API


def staff_form(**overrides):
    form = {
        "name": "Meera Nair",
        "role": "Receptionist",
        "age": 29,
        "contact": "9876543210",
        "email": "meera@example.com",
        "id_type": "Aadhaar Card",
        "id_number": "1234-5678-9012",
    }
    form.update(overrides)
    return form


@pytest.fixture
def staff_member(client, hotel_headers):
    response = client.post(f"{API}/staff", json=staff_form(), headers=hotel_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.parametrize("overrides", [
    {"name": "  "},
    {"role": ""},
    {"age": 17},
    {"age": 71},
    {"contact": "12345"},
    {"email": "meera.example.com"},
    {"id_type": None},
    {"id_number": ""},
])
def test_staff_form_validation(client, hotel_headers, overrides):
    response = client.post(f"{API}/staff", json=staff_form(**overrides), headers=hotel_headers)

    assert response.status_code == 400


def test_create_staff_member(staff_member):
    assert staff_member["status"] == "active"
    assert staff_member["attendance"] == []
    assert staff_member["additional_info"]["identification"] == "Aadhaar Card: 1234-5678-9012"


def test_marking_twice_keeps_one_record(client, hotel_headers, staff_member, session):
    url = f"{API}/staff/{staff_member['id']}/attendance"
    client.post(url, json={"status": "present"}, headers=hotel_headers)
    response = client.post(url, json={"status": "late"}, headers=hotel_headers)

    assert response.json() == {"date": get_today().isoformat(), "status": "late"}
    records = session.exec(select(AttendanceRecord).where(AttendanceRecord.staff_id == staff_member["id"])).all()
    assert len(records) == 1
    assert records[0].status == "late"


def test_staff_list_embeds_attendance(client, hotel_headers, staff_member):
    yesterday = (get_today() - timedelta(days=1)).isoformat()
    client.post(f"{API}/staff/{staff_member['id']}/attendance", json={"status": "absent", "date": yesterday},
                headers=hotel_headers)

    listing = client.get(f"{API}/staff", headers=hotel_headers).json()

    assert listing["total"] == 1
    assert listing["staff"][0]["attendance"] == [{"date": yesterday, "status": "absent"}]


def test_today_stats_and_bulk_marking(client, hotel_headers, staff_member):
    second = client.post(f"{API}/staff", json=staff_form(name="Ravi Kumar"), headers=hotel_headers).json()
    client.post(f"{API}/staff", json=staff_form(name="Kiran Das"), headers=hotel_headers)

    marked = client.post(f"{API}/staff/attendance/bulk",
                         json={"staff_ids": [staff_member["id"], second["id"]], "status": "present"},
                         headers=hotel_headers)
    assert marked.status_code == 200
    assert len(marked.json()) == 2

    stats = client.get(f"{API}/staff/attendance/stats?period=today", headers=hotel_headers).json()
    assert stats["present"] == 2
    assert stats["not_marked"] == 1
    assert stats["total"] == 3


def test_bulk_marking_requires_staff(client, hotel_headers):
    response = client.post(f"{API}/staff/attendance/bulk", json={"staff_ids": [], "status": "present"},
                           headers=hotel_headers)

    assert response.status_code == 422


def test_bulk_marking_with_unknown_member_writes_nothing(client, hotel_headers, staff_member, session):
    response = client.post(f"{API}/staff/attendance/bulk",
                           json={"staff_ids": [staff_member["id"], 999], "status": "present"},
                           headers=hotel_headers)

    assert response.status_code == 404
    assert session.exec(select(AttendanceRecord)).all() == []


def test_marking_unknown_staff_is_not_found(client, hotel_headers):
    response = client.post(f"{API}/staff/999/attendance", json={"status": "present"}, headers=hotel_headers)

    assert response.status_code == 404


def test_member_reports(client, hotel_headers, staff_member):
    today = get_today()
    url = f"{API}/staff/{staff_member['id']}"
    client.post(f"{url}/attendance", json={"status": "present", "date": today.isoformat()}, headers=hotel_headers)
    client.post(f"{url}/attendance", json={"status": "late", "date": (today - timedelta(days=1)).isoformat()},
                headers=hotel_headers)

    summary = client.get(f"{url}/attendance/summary", headers=hotel_headers).json()
    assert (summary["total"], summary["present_rate"], summary["punctuality_rate"]) == (2, 50, 90)

    calendar = client.get(f"{url}/attendance/calendar?year={today.year}&month={today.month}",
                          headers=hotel_headers).json()
    assert calendar["present"] == 1

    top = client.get(f"{API}/staff/attendance/top", headers=hotel_headers).json()
    assert top[0]["staff_id"] == staff_member["id"]

    trend = client.get(f"{API}/staff/attendance/trend", headers=hotel_headers).json()
    assert len(trend) == 7
    assert trend[-1] == {"date": today.isoformat(), "present": 1, "absent": 0, "late": 0,
                         "half_day": 0, "total": 1}


def test_status_toggle_and_delete(client, hotel_headers, staff_member, session):
    url = f"{API}/staff/{staff_member['id']}"
    client.post(f"{url}/attendance", json={"status": "present"}, headers=hotel_headers)

    inactive = client.post(f"{url}/status", json={"status": "inactive"}, headers=hotel_headers).json()
    assert inactive["status"] == "inactive"
    assert client.get(f"{API}/dashboard/stats", headers=hotel_headers).json()["active_staff"] == 0

    assert client.delete(url, headers=hotel_headers).status_code == 204
    assert client.get(url, headers=hotel_headers).status_code == 404
    assert session.exec(select(AttendanceRecord)).all() == []


def test_inventory_filters_and_summary(client, hotel_headers):
    items = [
        {"name": "Towels", "category": "linen", "quantity": 40, "unit": "pcs", "minimum_stock": 20,
         "price_per_unit": 150},
        {"name": "Soap", "category": "toiletries", "quantity": 5, "unit": "pcs", "minimum_stock": 10,
         "price_per_unit": 12.5},
        {"name": "Bedsheets", "category": "linen", "quantity": 8, "unit": "pcs", "minimum_stock": 8,
         "price_per_unit": 400},
    ]
    for item in items:
        assert client.post(f"{API}/inventory", json=item, headers=hotel_headers).status_code == 201

    listing = client.get(f"{API}/inventory", headers=hotel_headers).json()
    assert [item["name"] for item in listing["items"]] == ["Bedsheets", "Soap", "Towels"]
    assert [item["low_stock"] for item in listing["items"]] == [True, True, False]

    linen = client.get(f"{API}/inventory?category=linen&low_stock_only=true", headers=hotel_headers).json()
    assert [item["name"] for item in linen["items"]] == ["Bedsheets"]

    search = client.get(f"{API}/inventory?search=tow", headers=hotel_headers).json()
    assert search["total"] == 1

    summary = client.get(f"{API}/inventory/summary", headers=hotel_headers).json()
    assert summary == {"total_items": 3, "low_stock_items": 2, "total_value": 9262.5}


def test_inventory_update_and_delete(client, hotel_headers):
    item = client.post(f"{API}/inventory", json={"name": "Soap", "category": "toiletries", "quantity": 5,
                                                 "unit": "pcs", "minimum_stock": 10}, headers=hotel_headers).json()

    updated = client.put(f"{API}/inventory/{item['id']}", json={"quantity": 50}, headers=hotel_headers).json()
    assert updated["low_stock"] is False

    assert client.delete(f"{API}/inventory/{item['id']}", headers=hotel_headers).status_code == 204
    assert client.put(f"{API}/inventory/{item['id']}", json={"quantity": 1},
                      headers=hotel_headers).status_code == 404


def test_crash_reports(client, auth_headers):
    response = client.post(f"{API}/crash-reports",
                           json={"title": "Receipt blank", "description": "Print preview is empty",
                                 "severity": "high"},
                           headers={**auth_headers, "User-Agent": "backoffice-tests"})

    assert response.status_code == 201
    assert response.json()["user_agent"] == "backoffice-tests"
    assert response.json()["hotel_id"] is None

    reports = client.get(f"{API}/crash-reports", headers=auth_headers).json()
    assert [report["title"] for report in reports] == ["Receipt blank"]
