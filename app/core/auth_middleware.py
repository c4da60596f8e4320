"""Authentication middleware for FastAPI."""

import asyncio
import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.db.supabase_client import get_supabase

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(
        self,
        user_id: UUID,
        token: str,
        email: Optional[str] = None,
        user_metadata: Optional[dict[str, Any]] = None,
    ):
        self.user_id = user_id
        self.token = token
        self.email = email
        self.user_metadata = user_metadata or {}

    @property
    def name(self) -> str:
        return self.user_metadata.get("full_name") or ""

    @property
    def avatar_url(self) -> Optional[str]:
        return self.user_metadata.get("avatar_url")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthContext]:
    """
    Validate the Supabase JWT from the Authorization header.

    Supabase verifies signature and expiry; we only read the user back.
    Returns None if no valid auth is present (for optional auth endpoints).
    """
    if not credentials:
        return None

    token = credentials.credentials

    try:
        auth_response = await asyncio.to_thread(get_supabase().auth.get_user, token)

        if not auth_response or not auth_response.user:
            return None

        user = auth_response.user
        return AuthContext(
            user_id=UUID(str(user.id)),
            token=token,
            email=user.email,
            user_metadata=user.user_metadata or {},
        )

    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth
