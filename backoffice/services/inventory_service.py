from typing import List, Optional

from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import InventoryItem
from backoffice.schemas.schemas import InventoryItemCreate, InventoryItemUpdate, InventoryItemRead, InventorySummary
from backoffice.utils.errors import NotFoundError
from backoffice.utils.helpers import get_current_time, to_money
from loguru import logger


def is_low_stock(item: InventoryItem) -> bool:
    return item.quantity <= item.minimum_stock


def to_read(item: InventoryItem) -> InventoryItemRead:
    return InventoryItemRead(**item.dict(), low_stock=is_low_stock(item))


class InventoryService:
    def __init__(self, gateway: PersistenceGateway, hotel_id: int):
        self.gateway = gateway
        self.hotel_id = hotel_id

    async def create_item(self, data: InventoryItemCreate) -> InventoryItem:
        item = self.gateway.insert(InventoryItem, {
            **data.dict(),
            "hotel_id": self.hotel_id,
            "created_at": get_current_time()
        }, error="Failed to save inventory item")

        logger.info(f"Created inventory item: {item.name} ({item.quantity} {item.unit})")
        return item

    async def get_item(self, item_id: int) -> InventoryItem:
        item = self.gateway.first(InventoryItem, {"id": item_id, "hotel_id": self.hotel_id},
                                  error="Failed to load inventory item")
        if not item:
            logger.warning(f"Inventory item not found: {item_id}")
            raise NotFoundError(f"Inventory item with ID {item_id} not found")
        return item

    async def get_items(self,
                        category: Optional[str] = None,
                        search: Optional[str] = None,
                        low_stock_only: bool = False) -> List[InventoryItem]:
        """Get inventory items ordered by name with optional filters"""
        filters = {"hotel_id": self.hotel_id}
        if category:
            filters["category"] = category
        items = self.gateway.select(InventoryItem, filters, order=["name"], error="Failed to load inventory")

        if search:
            needle = search.strip().lower()
            items = [item for item in items if needle in item.name.lower()]
        if low_stock_only:
            items = [item for item in items if is_low_stock(item)]
        return items

    async def update_item(self, item_id: int, data: InventoryItemUpdate) -> InventoryItem:
        await self.get_item(item_id)
        item = self.gateway.update(InventoryItem, data.dict(exclude_unset=True), {"id": item_id},
                                   error="Failed to save inventory item")[0]
        logger.info(f"Updated inventory item: {item.name}")
        return item

    async def delete_item(self, item_id: int) -> None:
        await self.get_item(item_id)
        self.gateway.delete(InventoryItem, {"id": item_id}, error="Failed to delete inventory item")
        logger.info(f"Deleted inventory item: {item_id}")

    async def get_summary(self) -> InventorySummary:
        items = await self.get_items()
        total_value = sum((to_money(item.quantity * item.price_per_unit) for item in items), to_money(0))
        return InventorySummary(
            total_items=len(items),
            low_stock_items=len([item for item in items if is_low_stock(item)]),
            total_value=float(total_value)
        )
