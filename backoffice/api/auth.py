from typing import Optional
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from backoffice.auth.auth import (
    IdentityProvider,
    get_current_user,
    get_identity_provider,
    get_optional_user,
    oauth2_scheme
)
from backoffice.api.billing import get_cart_registry
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import User
from backoffice.schemas.schemas import BaseResponse, SessionStatus, SignUpRequest, Token, UserRead
from backoffice.services.billing_service import CartRegistry
from backoffice.services.user_service import UserService
from backoffice.utils.errors import SessionExpiredError

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider)
):
    """Create an owner account"""
    user_service = UserService(gateway, identity)
    return await user_service.sign_up(request.email, request.password)

@router.post("/token", response_model=Token)
async def sign_in(
    form_data: OAuth2PasswordRequestForm = Depends(),
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider)
):
    """Authenticate with email (as username) and password, return a bearer token"""
    user_service = UserService(gateway, identity)
    token, expires_at, user = await user_service.sign_in(form_data.username, form_data.password)
    return {"access_token": token, "token_type": "bearer", "expires_at": expires_at, "user": user}

@router.post("/signout", response_model=BaseResponse)
async def sign_out(
    token: Optional[str] = Depends(oauth2_scheme),
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider),
    carts: CartRegistry = Depends(get_cart_registry)
):
    """Revoke the current token and drop the open cart"""
    if not token:
        raise SessionExpiredError("Not authenticated")
    user_id = await UserService(gateway, identity).sign_out(token)
    carts.discard(user_id)
    return {"message": "Signed out"}

@router.get("/me", response_model=UserRead)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the signed-in user"""
    return current_user

@router.get("/session", response_model=SessionStatus)
async def get_session_status(
    current_user: Optional[User] = Depends(get_optional_user),
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider)
):
    """Where the client should go next: sign in, hotel setup or the dashboard"""
    if current_user is None:
        return SessionStatus(authenticated=False, next="/hotel/auth")

    hotel = await UserService(gateway, identity).get_hotel_for(current_user)
    return SessionStatus(
        authenticated=True,
        user=UserRead(**current_user.dict()),
        hotel_id=hotel.id if hotel else None,
        next="/dashboard" if hotel else "/hotel/setup"
    )
