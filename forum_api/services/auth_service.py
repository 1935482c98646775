from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from forum_api.config import settings
from forum_api.db.session import get_db
from forum_api.exceptions import AuthError, ForbiddenError
from forum_api.models.user import User
from forum_api.schemas.user_schema import Identity

logger = logging.getLogger(__name__)

# Tokens are issued by the marketplace login flow; the forum only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def verify_token(self, token: str) -> Optional[int]:
        """Return the user id carried by a valid access token"""
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.ALGORITHM])
        except JWTError as e:
            logger.debug(f"Rejected token: {e}")
            return None

        if payload.get("type", "access") != "access":
            return None

        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError):
            return None

    async def get_identity(self, user_id: int) -> Optional[Identity]:
        """Load the verification flags for a user"""
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if user is None:
            return None

        return Identity(
            user_id=user.id,
            is_email_verified=bool(user.email_verified),
            is_mobile_verified=bool(user.mobile_verified),
        )

    async def identify(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        user_id = self.verify_token(token)
        if user_id is None:
            return None
        return await self.get_identity(user_id)

def require_verified(identity: Identity, action: str = "post") -> Identity:
    """Posting and replying need a verified email or mobile number"""
    if not identity.is_verified:
        raise ForbiddenError(f"Email or mobile verification required to {action}")
    return identity

async def get_optional_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[Identity]:
    """Dependency for endpoints that personalise output when a caller is known"""
    return await AuthService(db).identify(token)

async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Identity:
    """Dependency to get the current authenticated caller"""
    identity = await AuthService(db).identify(token)
    if identity is None:
        raise AuthError()
    return identity
