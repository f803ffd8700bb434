from typing import List, Optional
from fastapi import APIRouter, Depends, status

from backoffice.auth.auth import get_current_hotel
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel
from backoffice.schemas.schemas import (
    FoodCategory, FoodItemCreate, FoodItemRead, FoodItemUpdate,
    RoomTypeCreate, RoomTypeRead, RoomTypeUpdate,
    ServiceItemCreate, ServiceItemRead, ServiceItemUpdate
)
from backoffice.services.catalog_service import CatalogService

router = APIRouter(prefix="/catalog", tags=["catalog"])

# Room types

@router.get("/room-types", response_model=List[RoomTypeRead])
async def get_room_types(
    include_unavailable: bool = False,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Room types ordered for display; available ones only unless asked otherwise"""
    return await CatalogService(gateway, hotel.id).list_room_types(include_unavailable)

@router.post("/room-types", response_model=RoomTypeRead, status_code=status.HTTP_201_CREATED)
async def create_room_type(
    room_type: RoomTypeCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).create_room_type(room_type)

@router.get("/room-types/{room_type_id}", response_model=RoomTypeRead)
async def get_room_type(
    room_type_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).get_room_type(room_type_id)

@router.put("/room-types/{room_type_id}", response_model=RoomTypeRead)
async def update_room_type(
    room_type_id: int,
    room_type: RoomTypeUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).update_room_type(room_type_id, room_type)

@router.delete("/room-types/{room_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room_type(
    room_type_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    await CatalogService(gateway, hotel.id).delete_room_type(room_type_id)

@router.post("/room-types/{room_type_id}/toggle", response_model=RoomTypeRead)
async def toggle_room_type(
    room_type_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Flip a room type's availability"""
    return await CatalogService(gateway, hotel.id).toggle_room_type(room_type_id)

# Food items

@router.get("/food-items", response_model=List[FoodItemRead])
async def get_food_items(
    category: Optional[FoodCategory] = None,
    include_unavailable: bool = False,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Food menu ordered by sort order, category and name"""
    return await CatalogService(gateway, hotel.id).list_food_items(include_unavailable, category)

@router.post("/food-items", response_model=FoodItemRead, status_code=status.HTTP_201_CREATED)
async def create_food_item(
    food_item: FoodItemCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).create_food_item(food_item)

@router.get("/food-items/{food_item_id}", response_model=FoodItemRead)
async def get_food_item(
    food_item_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).get_food_item(food_item_id)

@router.put("/food-items/{food_item_id}", response_model=FoodItemRead)
async def update_food_item(
    food_item_id: int,
    food_item: FoodItemUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).update_food_item(food_item_id, food_item)

@router.delete("/food-items/{food_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food_item(
    food_item_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    await CatalogService(gateway, hotel.id).delete_food_item(food_item_id)

@router.post("/food-items/{food_item_id}/toggle", response_model=FoodItemRead)
async def toggle_food_item(
    food_item_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).toggle_food_item(food_item_id)

# Services

@router.get("/services", response_model=List[ServiceItemRead])
async def get_services(
    include_unavailable: bool = False,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).list_services(include_unavailable)

@router.post("/services", response_model=ServiceItemRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    service: ServiceItemCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).create_service(service)

@router.get("/services/{service_id}", response_model=ServiceItemRead)
async def get_service(
    service_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).get_service(service_id)

@router.put("/services/{service_id}", response_model=ServiceItemRead)
async def update_service(
    service_id: int,
    service: ServiceItemUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).update_service(service_id, service)

@router.delete("/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    await CatalogService(gateway, hotel.id).delete_service(service_id)

@router.post("/services/{service_id}/toggle", response_model=ServiceItemRead)
async def toggle_service(
    service_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    return await CatalogService(gateway, hotel.id).toggle_service(service_id)
