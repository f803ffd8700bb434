from typing import Optional
from fastapi import APIRouter, Depends, status

from backoffice.auth.auth import get_current_hotel
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel
from backoffice.schemas.schemas import (
    InventoryItemCreate, InventoryItemRead, InventoryItemUpdate, InventoryList, InventorySummary
)
from backoffice.services.inventory_service import InventoryService, to_read

router = APIRouter(prefix="/inventory", tags=["inventory"])

@router.get("", response_model=InventoryList)
async def get_inventory(
    category: Optional[str] = None,
    search: Optional[str] = None,
    low_stock_only: bool = False,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Inventory items ordered by name"""
    items = await InventoryService(gateway, hotel.id).get_items(category, search, low_stock_only)
    return {"items": [to_read(item) for item in items], "total": len(items)}

@router.post("", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    item: InventoryItemCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return to_read(await InventoryService(gateway, hotel.id).create_item(item))

@router.get("/summary", response_model=InventorySummary)
async def get_inventory_summary(
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Item count, low stock count and total stock value"""
    return await InventoryService(gateway, hotel.id).get_summary()

@router.put("/{item_id}", response_model=InventoryItemRead)
async def update_inventory_item(
    item_id: int,
    item: InventoryItemUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return to_read(await InventoryService(gateway, hotel.id).update_item(item_id, item))

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(
    item_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    await InventoryService(gateway, hotel.id).delete_item(item_id)
