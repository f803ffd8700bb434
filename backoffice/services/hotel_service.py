from typing import List, Optional

from backoffice.config.config import settings
from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import Hotel, User
from backoffice.schemas.schemas import HotelProfileUpdate
from backoffice.services.storage_service import LocalBlobStore
from backoffice.utils.errors import NotFoundError, ValidationError
from backoffice.utils.helpers import detect_image_format, epoch_millis, get_current_time, safe_filename
from loguru import logger


def logo_path_for(user_id: int, filename: str) -> str:
    return f"{user_id}/{epoch_millis()}-{safe_filename(filename)}"


class HotelService:
    def __init__(self, gateway: PersistenceGateway, blob_store: Optional[LocalBlobStore] = None):
        self.gateway = gateway
        self.blob_store = blob_store

    async def get_hotel_for_owner(self, owner: User) -> Optional[Hotel]:
        return self.gateway.first(Hotel, {"owner_id": owner.id}, error="Failed to load hotel")

    async def get_hotel(self, owner: User) -> Hotel:
        hotel = await self.get_hotel_for_owner(owner)
        if not hotel:
            logger.warning(f"No hotel set up for user: {owner.id}")
            raise NotFoundError("Hotel not found")
        return hotel

    async def setup_hotel(self,
                          owner: User,
                          name: str,
                          address: Optional[str] = None,
                          services: Optional[List[str]] = None,
                          logo_filename: Optional[str] = None,
                          logo_content: Optional[bytes] = None) -> Hotel:
        """Create or update the owner's hotel, uploading a new logo first when given.

        The logo is stored before the hotel row is written; if that write fails
        the uploaded file stays behind. A replaced logo is removed only after
        the row is saved.
        """
        if not name or not name.strip():
            raise ValidationError("Hotel name is required")

        row = {
            "owner_id": owner.id,
            "name": name.strip(),
            "address": (address or "").strip() or None,
            "services": [service.strip() for service in (services or []) if service.strip()],
            "created_at": get_current_time(),
        }

        existing = await self.get_hotel_for_owner(owner)
        replaced_path = None
        if logo_content:
            row.update(self._store_logo(owner, logo_filename, logo_content))
            if existing and existing.logo_path and existing.logo_path != row["logo_path"]:
                replaced_path = existing.logo_path

        if existing:
            row.pop("created_at")
        hotel = self.gateway.upsert(Hotel, row, conflict_keys=["owner_id"], error="Failed to save hotel")
        # the old logo goes only once the row points at the new one
        if replaced_path:
            self.blob_store.remove(replaced_path)
        logger.info(f"Hotel {'updated' if existing else 'created'}: {hotel.name} (owner {owner.id})")
        return hotel

    async def update_profile(self, owner: User, data: HotelProfileUpdate) -> Hotel:
        hotel = await self.get_hotel(owner)
        patch = data.dict(exclude_unset=True)
        if not patch:
            return hotel

        hotel = self.gateway.update(Hotel, patch, {"id": hotel.id}, error="Failed to save hotel profile")[0]
        logger.info(f"Updated hotel profile: {hotel.id}")
        return hotel

    async def remove_logo(self, owner: User) -> Hotel:
        hotel = await self.get_hotel(owner)
        if hotel.logo_path:
            self.blob_store.remove(hotel.logo_path)
        return self.gateway.update(Hotel, {"logo_url": None, "logo_path": None}, {"id": hotel.id},
                                   error="Failed to save hotel")[0]

    def _store_logo(self, owner: User, filename: Optional[str], content: bytes) -> dict:
        if len(content) > settings.MAX_LOGO_BYTES:
            raise ValidationError(f"Logo must be at most {settings.MAX_LOGO_BYTES // 1024} KB")
        image_format = detect_image_format(content)
        if image_format is None:
            raise ValidationError("Logo must be a PNG, JPEG, GIF or WEBP image")

        logger.debug(f"Storing {image_format} logo for user {owner.id}")
        path = self.blob_store.upload(logo_path_for(owner.id, filename or "logo"), content)
        return {"logo_path": path, "logo_url": self.blob_store.get_public_url(path)}
