"""User schemas for API validation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import UserRole


class UserCreate(BaseModel):
    """Schema for signup."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class UserLogin(BaseModel):
    """Schema for login."""
    email: EmailStr
    password: str


class UserIdentity(BaseModel):
    """Authenticated identity. Never carries the password hash."""
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Signup / login response body."""
    user: UserIdentity
    message: str


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str
