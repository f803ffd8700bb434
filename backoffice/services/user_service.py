from typing import Optional, Tuple
from datetime import datetime

from backoffice.auth.auth import IdentityProvider
from backoffice.db.gateway import PersistenceGateway
from backoffice.models.models import User, Hotel
from backoffice.utils.errors import ConflictError, UnauthorizedError
from backoffice.utils.helpers import get_current_time
from loguru import logger

class UserService:
    def __init__(self, gateway: PersistenceGateway, identity: IdentityProvider):
        self.gateway = gateway
        self.identity = identity

    async def sign_up(self, email: str, password: str) -> User:
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            raise ConflictError(f"User with email {email} already exists")

        user = self.gateway.insert(User, {
            "email": email,
            "hashed_password": self.identity.hash_password(password),
            "created_at": get_current_time()
        }, error="Failed to create account")

        logger.info(f"Created new user: {user.email}")
        return user

    async def sign_in(self, email: str, password: str) -> Tuple[str, datetime, User]:
        user = await self.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed sign-in attempt for: {email}")
            raise UnauthorizedError("Incorrect email or password")

        token, expires_at = self.identity.issue_token(user)
        logger.info(f"User signed in: {user.email}")
        return token, expires_at, user

    async def sign_out(self, token: str) -> int:
        """Revoke the token and return the id of the user it belonged to"""
        return self.identity.revoke(token).user_id

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        user = await self.get_user_by_email(email)
        if not user or not user.is_active:
            return None
        if not self.identity.verify_password(password, user.hashed_password):
            return None
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self.gateway.first(User, {"email": email.strip().lower()})

    async def get_hotel_for(self, user: User) -> Optional[Hotel]:
        return self.gateway.first(Hotel, {"owner_id": user.id}, error="Failed to load hotel")
