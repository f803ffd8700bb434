from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile

from backoffice.auth.auth import get_current_hotel, get_current_user
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel, User
from backoffice.schemas.schemas import HotelProfileUpdate, HotelRead
from backoffice.services.hotel_service import HotelService
from backoffice.services.storage_service import LocalBlobStore, get_blob_store

router = APIRouter(prefix="/hotels", tags=["hotels"])

@router.get("/setup", response_model=Optional[HotelRead])
async def get_setup(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Current hotel of the signed-in owner, null before setup"""
    return await HotelService(gateway).get_hotel_for_owner(current_user)

@router.put("/setup", response_model=HotelRead)
async def save_setup(
    name: str = Form(...),
    address: Optional[str] = Form(None),
    services: List[str] = Form([]),
    logo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway),
    blob_store: LocalBlobStore = Depends(get_blob_store)
):
    """Create or update the owner's hotel, with an optional logo upload"""
    hotel_service = HotelService(gateway, blob_store)
    logo_content = await logo.read() if logo else None
    return await hotel_service.setup_hotel(
        current_user,
        name=name,
        address=address,
        services=services,
        logo_filename=logo.filename if logo else None,
        logo_content=logo_content
    )

@router.get("/profile", response_model=HotelRead)
async def get_profile(hotel: Hotel = Depends(get_current_hotel)):
    """Get the hotel profile"""
    return hotel

@router.put("/profile", response_model=HotelRead)
async def update_profile(
    profile: HotelProfileUpdate,
    current_user: User = Depends(get_current_user),
    hotel: Hotel = Depends(get_current_hotel),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Update name, address and contact details"""
    return await HotelService(gateway).update_profile(current_user, profile)

@router.delete("/logo", response_model=HotelRead)
async def delete_logo(
    current_user: User = Depends(get_current_user),
    hotel: Hotel = Depends(get_current_hotel),
    gateway: PersistenceGateway = Depends(get_gateway),
    blob_store: LocalBlobStore = Depends(get_blob_store)
):
    """Remove the hotel logo"""
    return await HotelService(gateway, blob_store).remove_logo(current_user)
