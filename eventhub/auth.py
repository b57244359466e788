from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from eventhub.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.db.models.user import User
from eventhub.db.repositories import get_user
from eventhub.core.security import decode_token
from eventhub.core.exceptions import AuthenticationError

# auto_error=False: a missing header must produce our 401 body, not FastAPI's default
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the caller from the bearer token.

    Raises:
        AuthenticationError: If the token is missing, invalid, expired or
            names a user that no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise AuthenticationError("Invalid token")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token")

    user = await get_user(session, str(payload["sub"]))
    if not user:
        raise AuthenticationError("User not found")
    return user
