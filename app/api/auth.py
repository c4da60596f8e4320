"""Authentication API endpoints.

Thin pass-throughs to Supabase Auth; token issuing and verification are
entirely Supabase's.
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth_middleware import AuthContext, require_auth
from app.core.schemas_auth import (
    LoginRequest,
    SessionResponse,
    SignUpRequest,
    SignUpResponse,
    UserProfile,
)
from app.db.supabase_client import create_auth_client, get_supabase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignUpResponse)
async def sign_up(request: SignUpRequest):
    """Register with email and password; the name is kept in user metadata."""
    try:
        response = await asyncio.to_thread(create_auth_client().auth.sign_up, {
            "email": request.email,
            "password": request.password,
            "options": {"data": {"full_name": request.name}},
        })
    except Exception as e:
        logger.warning(f"Sign-up failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    user_id = UUID(str(response.user.id)) if response and response.user else None
    return SignUpResponse(user_id=user_id)


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest):
    """Sign in with email and password and return the Supabase session."""
    try:
        response = await asyncio.to_thread(create_auth_client().auth.sign_in_with_password, {
            "email": request.email,
            "password": request.password,
        })
    except Exception as e:
        logger.info(f"Login failed for {request.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not response or not response.session or not response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    session = response.session
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=UUID(str(response.user.id)),
    )


@router.post("/logout")
async def logout(auth: AuthContext = Depends(require_auth)):
    """Revoke the current session."""
    try:
        await asyncio.to_thread(get_supabase().auth.admin.sign_out, auth.token)
        return {"message": "Logged out successfully"}
    except Exception as e:
        logger.error(f"Logout error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to log out",
        )


@router.get("/me", response_model=UserProfile)
async def get_profile(auth: AuthContext = Depends(require_auth)):
    """The authenticated user's profile."""
    return UserProfile(
        id=auth.user_id,
        email=auth.email,
        name=auth.name,
        avatar_url=auth.avatar_url,
    )
