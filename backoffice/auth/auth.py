import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Tuple

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from backoffice.config.config import settings
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import User, Hotel
from backoffice.schemas.schemas import TokenData
from backoffice.utils.errors import SessionExpiredError, SetupRequiredError
from backoffice.utils.helpers import get_current_time
from loguru import logger

# OAuth2 scheme for token authentication; missing tokens are handled below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/token", auto_error=False)


class IdentityProvider:
    """Issues, validates and revokes bearer tokens and hashes passwords.

    Revoked token ids are kept in process memory until the token would have
    expired anyway; a restart forgets them.
    """

    def __init__(self,
                 secret_key: str,
                 algorithm: str = "HS256",
                 expire_minutes: int = 30):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
        self._revoked: Dict[str, datetime] = {}

    # Passwords
    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    # Tokens
    def issue_token(self, user: User, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
        expire = get_current_time() + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {"sub": str(user.id), "jti": uuid.uuid4().hex, "exp": expire}
        encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return encoded_jwt, expire

    def decode_token(self, token: str) -> TokenData:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise SessionExpiredError("Could not validate credentials")

        subject = payload.get("sub")
        jti = payload.get("jti")
        if subject is None or jti is None:
            raise SessionExpiredError("Could not validate credentials")
        if jti in self._revoked:
            raise SessionExpiredError("Session has been signed out")
        return TokenData(user_id=int(subject), jti=jti)

    def revoke(self, token: str) -> TokenData:
        token_data = self.decode_token(token)
        payload = jwt.get_unverified_claims(token)
        self._revoked[token_data.jti] = datetime.fromtimestamp(payload["exp"], timezone.utc)
        self._forget_expired()
        logger.info(f"Revoked session for user: {token_data.user_id}")
        return token_data

    def _forget_expired(self) -> None:
        now = get_current_time()
        for jti, expires in list(self._revoked.items()):
            if expires < now:
                del self._revoked[jti]


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity


# Get current user
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider)
) -> User:
    if not token:
        raise SessionExpiredError("Not authenticated")

    token_data = identity.decode_token(token)
    user = gateway.first(User, {"id": token_data.user_id})
    if user is None or not user.is_active:
        raise SessionExpiredError("Could not validate credentials")
    return user


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    gateway: PersistenceGateway = Depends(get_gateway),
    identity: IdentityProvider = Depends(get_identity_provider)
) -> Optional[User]:
    """Like get_current_user, but an absent or stale session yields None"""
    if not token:
        return None
    try:
        return await get_current_user(token, gateway, identity)
    except SessionExpiredError:
        return None


# Get the hotel owned by the current user
async def get_current_hotel(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
) -> Hotel:
    hotel = gateway.first(Hotel, {"owner_id": current_user.id}, error="Failed to load hotel")
    if hotel is None:
        raise SetupRequiredError()
    return hotel
