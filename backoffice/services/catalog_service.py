from typing import List, Optional, Type

from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import RoomType, FoodItem, ServiceItem
from backoffice.schemas.schemas import (
    RoomTypeCreate, RoomTypeUpdate, FoodItemCreate, FoodItemUpdate,
    ServiceItemCreate, ServiceItemUpdate, FoodCategory
)
from backoffice.utils.errors import NotFoundError
from backoffice.utils.helpers import get_current_time
from loguru import logger

ROOM_TYPE_ORDER = ["sort_order", "name"]
FOOD_ITEM_ORDER = ["sort_order", "category", "name"]
SERVICE_ORDER = ["sort_order", "name"]


class CatalogService:
    """Room types, food items and services of one hotel"""

    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id

    # Readers used by the billing screen

    async def list_available_room_types(self) -> List[RoomType]:
        return self.gateway.select(
            RoomType, {"hotel_id": self.hotel_id, "available": True},
            order=ROOM_TYPE_ORDER, error="Failed to load room types"
        )

    async def list_available_food_items(self, category: Optional[FoodCategory] = None) -> List[FoodItem]:
        filters = {"hotel_id": self.hotel_id, "available": True}
        if category:
            filters["category"] = category.value
        return self.gateway.select(FoodItem, filters, order=FOOD_ITEM_ORDER, error="Failed to load food items")

    async def list_available_services(self) -> List[ServiceItem]:
        return self.gateway.select(
            ServiceItem, {"hotel_id": self.hotel_id, "available": True},
            order=SERVICE_ORDER, error="Failed to load services"
        )

    # Room types

    async def list_room_types(self, include_unavailable: bool = False) -> List[RoomType]:
        if not include_unavailable:
            return await self.list_available_room_types()
        return self.gateway.select(RoomType, {"hotel_id": self.hotel_id},
                                   order=ROOM_TYPE_ORDER, error="Failed to load room types")

    async def get_room_type(self, room_type_id: int) -> RoomType:
        return self._get(RoomType, room_type_id, "Room type")

    async def create_room_type(self, data: RoomTypeCreate) -> RoomType:
        room_type = self._create(RoomType, data.dict(), "room type")
        logger.info(f"Created room type: {room_type.name} at {room_type.base_price}")
        return room_type

    async def update_room_type(self, room_type_id: int, data: RoomTypeUpdate) -> RoomType:
        return self._update(RoomType, room_type_id, data.dict(exclude_unset=True), "Room type")

    async def delete_room_type(self, room_type_id: int) -> None:
        self._delete(RoomType, room_type_id, "Room type")

    async def toggle_room_type(self, room_type_id: int) -> RoomType:
        return self._toggle(RoomType, room_type_id, "Room type")

    # Food items

    async def list_food_items(self, include_unavailable: bool = False,
                              category: Optional[FoodCategory] = None) -> List[FoodItem]:
        if not include_unavailable:
            return await self.list_available_food_items(category)
        filters = {"hotel_id": self.hotel_id}
        if category:
            filters["category"] = category.value
        return self.gateway.select(FoodItem, filters, order=FOOD_ITEM_ORDER, error="Failed to load food items")

    async def get_food_item(self, food_item_id: int) -> FoodItem:
        return self._get(FoodItem, food_item_id, "Food item")

    async def create_food_item(self, data: FoodItemCreate) -> FoodItem:
        food_item = self._create(FoodItem, data.dict(), "food item")
        logger.info(f"Created food item: {food_item.name} ({food_item.category})")
        return food_item

    async def update_food_item(self, food_item_id: int, data: FoodItemUpdate) -> FoodItem:
        return self._update(FoodItem, food_item_id, data.dict(exclude_unset=True), "Food item")

    async def delete_food_item(self, food_item_id: int) -> None:
        self._delete(FoodItem, food_item_id, "Food item")

    async def toggle_food_item(self, food_item_id: int) -> FoodItem:
        return self._toggle(FoodItem, food_item_id, "Food item")

    # Services

    async def list_services(self, include_unavailable: bool = False) -> List[ServiceItem]:
        if not include_unavailable:
            return await self.list_available_services()
        return self.gateway.select(ServiceItem, {"hotel_id": self.hotel_id},
                                   order=SERVICE_ORDER, error="Failed to load services")

    async def get_service(self, service_id: int) -> ServiceItem:
        return self._get(ServiceItem, service_id, "Service")

    async def create_service(self, data: ServiceItemCreate) -> ServiceItem:
        service = self._create(ServiceItem, data.dict(), "service")
        logger.info(f"Created service: {service.name}")
        return service

    async def update_service(self, service_id: int, data: ServiceItemUpdate) -> ServiceItem:
        return self._update(ServiceItem, service_id, data.dict(exclude_unset=True), "Service")

    async def delete_service(self, service_id: int) -> None:
        self._delete(ServiceItem, service_id, "Service")

    async def toggle_service(self, service_id: int) -> ServiceItem:
        return self._toggle(ServiceItem, service_id, "Service")

    # Shared row handling

    def _get(self, model: Type, row_id: int, label: str):
        row = self.gateway.first(model, {"id": row_id, "hotel_id": self.hotel_id},
                                 error=f"Failed to load {label.lower()}")
        if not row:
            logger.warning(f"{label} not found: {row_id}")
            raise NotFoundError(f"{label} with ID {row_id} not found")
        return row

    def _create(self, model: Type, values: dict, label: str):
        values = {key: (value.value if hasattr(value, "value") else value) for key, value in values.items()}
        values.update({"hotel_id": self.hotel_id, "created_at": get_current_time()})
        return self.gateway.insert(model, values, error=f"Failed to save {label}")

    def _update(self, model: Type, row_id: int, patch: dict, label: str):
        self._get(model, row_id, label)
        patch = {key: (value.value if hasattr(value, "value") else value) for key, value in patch.items()}
        row = self.gateway.update(model, patch, {"id": row_id}, error=f"Failed to save {label.lower()}")[0]
        logger.info(f"Updated {label.lower()}: {row_id}")
        return row

    def _delete(self, model: Type, row_id: int, label: str) -> None:
        self._get(model, row_id, label)
        self.gateway.delete(model, {"id": row_id}, error=f"Failed to delete {label.lower()}")
        logger.info(f"Deleted {label.lower()}: {row_id}")

    def _toggle(self, model: Type, row_id: int, label: str):
        row = self._get(model, row_id, label)
        updated = self.gateway.update(model, {"available": not row.available}, {"id": row_id},
                                      error=f"Failed to save {label.lower()}")[0]
        logger.info(f"{label} {row_id} availability set to {updated.available}")
        return updated
