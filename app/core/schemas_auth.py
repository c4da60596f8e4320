"""Pydantic schemas for authentication pass-through endpoints."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    """Email/password sign-up."""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=2)


class LoginRequest(BaseModel):
    """Email/password sign-in."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class SessionResponse(BaseModel):
    """Session tokens issued by Supabase Auth."""
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    user_id: UUID


class SignUpResponse(BaseModel):
    success: bool = True
    user_id: Optional[UUID] = None


class UserProfile(BaseModel):
    """The authenticated user as shown by the client."""
    id: UUID
    email: Optional[str] = None
    name: str = ""
    avatar_url: Optional[str] = None
