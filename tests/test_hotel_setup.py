import asyncio
import io

import pytest
from PIL import Image

from backoffice.models.models import Hotel, User
from backoffice.services.hotel_service import HotelService
from backoffice.services.storage_service import LocalBlobStore
from backoffice.utils.errors import PersistenceError


def png():
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buffer, format="PNG")
    return buffer.getvalue()


class HotelGateway:
    """Holds one hotel row in memory; upserts fail when ``fail_save`` is set"""

    def __init__(self, hotel=None, fail_save=False):
        self.hotel = hotel
        self.fail_save = fail_save

    def first(self, model, filters, error=None):
        return self.hotel

    def upsert(self, model, row, conflict_keys, error=None):
        if self.fail_save:
            raise PersistenceError(error)
        values = self.hotel.dict() if self.hotel else {"id": 1}
        self.hotel = Hotel(**{**values, **row})
        return self.hotel


@pytest.fixture
def owner():
    return User(id=1, email="owner@example.com", hashed_password="x")


@pytest.fixture
def store(tmp_path):
    blob_store = LocalBlobStore(str(tmp_path), "http://testserver")
    blob_store.upload("1/old.png", png())
    return blob_store


def existing_hotel():
    return Hotel(id=1, owner_id=1, name="Seaside Inn", logo_path="1/old.png",
                 logo_url="http://testserver/uploads/1/old.png")


def test_failed_save_keeps_previous_logo(owner, store):
    service = HotelService(HotelGateway(existing_hotel(), fail_save=True), store)

    with pytest.raises(PersistenceError):
        asyncio.run(service.setup_hotel(owner, "Seaside Inn", logo_filename="new.png", logo_content=png()))

    assert store.exists("1/old.png")


def test_saved_logo_replaces_previous_one(owner, store):
    service = HotelService(HotelGateway(existing_hotel()), store)

    hotel = asyncio.run(service.setup_hotel(owner, "Seaside Inn", logo_filename="new.png", logo_content=png()))

    assert not store.exists("1/old.png")
    assert store.exists(hotel.logo_path)
    assert hotel.logo_path.endswith("-new.png")
